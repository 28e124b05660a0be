"""
Pytest configuration and fixtures for request-publisher tests.
"""

from concurrent.futures import Future
from typing import List, Optional

import pytest
import responses as responses_lib

from request_publisher.core.config import RequestConfig, TimeoutConfig, TransportConfig
from request_publisher.core.subscriber import Completion, Subscriber, Subscription
from request_publisher.core.transport import Transport, TransportCall, TransportResponse, RequestsTransport


class FakeTransport(Transport):
    """
    Transport double: records every send() and lets the test complete calls.

    Each call is backed by a plain Future, so tests drive completion with
    transport.complete(...) or simulate an in-flight request with start().
    """

    def __init__(self):
        self.sent: List[tuple] = []
        self.futures: List[Future] = []
        self.closed = False

    @property
    def call_count(self) -> int:
        return len(self.sent)

    def send(self, config: RequestConfig, url: str) -> TransportCall:
        self.sent.append((config, url))
        future = Future()
        self.futures.append(future)
        return TransportCall(future)

    def start(self, index: int = -1) -> None:
        """Mark the call as running (it can no longer be removed from a queue)."""
        self.futures[index].set_running_or_notify_cancel()

    def complete(self, status_code: Optional[int] = 200, body: bytes = b"", error=None, index: int = -1) -> None:
        future = self.futures[index]
        if future.cancelled():
            return
        future.set_result(TransportResponse(status_code=status_code, body=body, error=error))

    def close(self) -> None:
        self.closed = True


class RecordingSubscriber(Subscriber):
    """Subscriber double that records everything it receives."""

    def __init__(self, demand: Optional[int] = None):
        self.demand = demand
        self.subscription: Optional[Subscription] = None
        self.values: List[bytes] = []
        self.completions: List[Completion] = []
        self.subscribe_count = 0

    def on_subscribe(self, subscription: Subscription) -> None:
        self.subscribe_count += 1
        self.subscription = subscription
        if self.demand is not None:
            subscription.request(self.demand)

    def on_next(self, value: bytes) -> int:
        self.values.append(value)
        return 0

    def on_complete(self, completion: Completion) -> None:
        self.completions.append(completion)

    @property
    def events(self) -> int:
        return len(self.values) + len(self.completions)


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://api.example.com"


@pytest.fixture
def fake_transport():
    """Transport double with call counting."""
    return FakeTransport()


@pytest.fixture
def recorder():
    """Subscriber that requests one value on subscribe."""
    return RecordingSubscriber(demand=1)


@pytest.fixture
def lazy_recorder():
    """Subscriber that doesn't request anything on subscribe."""
    return RecordingSubscriber()


@pytest.fixture
def subscriber_factory():
    """Build RecordingSubscriber instances with a chosen demand."""
    return RecordingSubscriber


@pytest.fixture
def mock_responses():
    """Mock HTTP responses using responses library."""
    with responses_lib.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def transport():
    """Real requests transport with a short timeout."""
    transport = RequestsTransport(TransportConfig(timeout=TimeoutConfig(request=5), max_workers=2))
    yield transport
    transport.close()
