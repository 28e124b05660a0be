"""
Consumer side of a publisher: subscribers, subscriptions and completions.

A subscriber receives exactly one on_subscribe call, then (after it requests
demand) at most one value and exactly one completion.
"""

import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future, InvalidStateError
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# Demand values
UNLIMITED = float("inf")
NONE = 0


def validate_demand(demand) -> None:
    """
    Reject zero or negative demand.

    Raises:
        ValueError: demand is not positive
    """
    if not demand > 0:
        raise ValueError(f"Demand must be positive, got {demand!r}")


class Completion:
    """
    Terminal signal: finished or failed with an exception.

    Examples:
        >>> Completion.finished().is_finished
        True
        >>> Completion.failure(exc).error is exc
        True
    """

    __slots__ = ("error",)

    def __init__(self, error: Optional[BaseException] = None):
        self.error = error

    @classmethod
    def finished(cls) -> "Completion":
        return cls()

    @classmethod
    def failure(cls, error: BaseException) -> "Completion":
        return cls(error)

    @property
    def is_finished(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    def __eq__(self, other):
        if not isinstance(other, Completion):
            return NotImplemented
        return self.error is other.error

    def __hash__(self):
        return hash(id(self.error))

    def __repr__(self):
        if self.error is None:
            return "Completion.finished()"
        return f"Completion.failure({self.error!r})"


class Subscription(ABC):
    """Handle a subscriber uses to request values or cancel."""

    @abstractmethod
    def request(self, demand) -> None:
        """Authorize up to `demand` values. Demand must be positive."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the stream. Idempotent."""


class Subscriber(ABC):
    """Receives the output of a publisher."""

    @abstractmethod
    def on_subscribe(self, subscription: Subscription) -> None:
        """Called once, before any value or completion."""

    @abstractmethod
    def on_next(self, value: bytes) -> int:
        """
        Receive a value.

        Returns:
            Additional demand (ignored by single-value publishers)
        """

    @abstractmethod
    def on_complete(self, completion: Completion) -> None:
        """Receive the terminal signal."""


class InertSubscription(Subscription):
    """Subscription that never produces anything (already terminated)."""

    def request(self, demand) -> None:
        validate_demand(demand)

    def cancel(self) -> None:
        pass


class Sink(Subscriber):
    """
    Subscriber built from callables; requests unlimited demand on subscribe.

    Example:
        >>> sink = Sink(
        ...     receive_value=lambda data: print(data),
        ...     receive_completion=lambda completion: print(completion),
        ... )
        >>> publisher.subscribe(sink)
        >>> sink.cancel()
    """

    def __init__(
        self,
        receive_value: Optional[Callable[[bytes], None]] = None,
        receive_completion: Optional[Callable[[Completion], None]] = None,
    ):
        self._receive_value = receive_value
        self._receive_completion = receive_completion
        self._subscription: Optional[Subscription] = None
        self._lock = threading.Lock()

    @property
    def subscription(self) -> Optional[Subscription]:
        return self._subscription

    def on_subscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if self._subscription is not None:
                subscription.cancel()
                return
            self._subscription = subscription
        subscription.request(UNLIMITED)

    def on_next(self, value: bytes) -> int:
        if self._receive_value is not None:
            self._receive_value(value)
        return NONE

    def on_complete(self, completion: Completion) -> None:
        with self._lock:
            self._subscription = None
        if self._receive_completion is not None:
            self._receive_completion(completion)

    def cancel(self) -> None:
        with self._lock:
            subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.cancel()


class FutureSink(Subscriber):
    """
    Subscriber that resolves a concurrent.futures.Future.

    The future gets the emitted bytes on finish, or the failure exception.
    Cancelling the future cancels the subscription.

    Example:
        >>> sink = FutureSink()
        >>> publisher.subscribe(sink)
        >>> data = sink.future.result(timeout=30)
    """

    def __init__(self):
        self.future: "Future[bytes]" = Future()
        self._value: Optional[bytes] = None
        self._subscription: Optional[Subscription] = None
        self.future.add_done_callback(self._on_future_done)

    def on_subscribe(self, subscription: Subscription) -> None:
        self._subscription = subscription
        if self.future.cancelled():
            subscription.cancel()
            return
        subscription.request(1)

    def on_next(self, value: bytes) -> int:
        self._value = value
        return NONE

    def on_complete(self, completion: Completion) -> None:
        self._subscription = None
        if self.future.done():
            return
        try:
            if completion.is_failure:
                self.future.set_exception(completion.error)
            else:
                self.future.set_result(self._value if self._value is not None else b"")
        except InvalidStateError:
            # Cancelled by the caller while completing
            logger.debug("Future already cancelled, dropping completion")

    def _on_future_done(self, future: Future) -> None:
        if future.cancelled() and self._subscription is not None:
            logger.debug("Future cancelled, cancelling subscription")
            self._subscription.cancel()
