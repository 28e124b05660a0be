"""Tests for the RequestSubscription state machine."""

import logging
import threading
from concurrent.futures import Future

import pytest

from request_publisher.core.config import ErrorDelivery, RequestConfig
from request_publisher.core.error_model import ErrorModel
from request_publisher.core.exceptions import NotFoundError, TimeoutError, TransportErrorCode, TransportFailure
from request_publisher.core.subscription import RequestSubscription, SubscriptionState
from request_publisher.core.transport import TransportCall, TransportResponse

URL = "https://api.example.com/users"


def make_subscription(subscriber, error_delivery=ErrorDelivery.FAILURE):
    future = Future()
    config = RequestConfig(url=URL, error_delivery=error_delivery)
    subscription = RequestSubscription(TransportCall(future), subscriber, config, URL)
    return subscription, future


def respond(future, status_code=200, body=b"", error=None):
    future.set_result(TransportResponse(status_code=status_code, body=body, error=error))


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Demand
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TestDemand:
    """request() arms the subscription once."""

    def test_starts_pending(self, lazy_recorder):
        subscription, _ = make_subscription(lazy_recorder)
        assert subscription.state is SubscriptionState.PENDING
        assert subscription.subscriber is lazy_recorder

    @pytest.mark.parametrize("demand", [0, -1, -100])
    def test_non_positive_demand_is_rejected(self, lazy_recorder, demand):
        subscription, _ = make_subscription(lazy_recorder)

        with pytest.raises(ValueError):
            subscription.request(demand)

        assert subscription.state is SubscriptionState.PENDING

    def test_non_positive_demand_rejected_after_termination(self, lazy_recorder):
        subscription, _ = make_subscription(lazy_recorder)
        subscription.cancel()

        with pytest.raises(ValueError):
            subscription.request(0)

    def test_arming_clears_subscriber(self, lazy_recorder):
        subscription, _ = make_subscription(lazy_recorder)

        subscription.request(1)

        assert subscription.state is SubscriptionState.ARMED
        assert subscription.subscriber is None

    def test_second_request_is_noop(self, lazy_recorder):
        subscription, future = make_subscription(lazy_recorder)

        subscription.request(1)
        subscription.request(5)
        respond(future, body=b"data")

        assert lazy_recorder.values == [b"data"]
        assert len(lazy_recorder.completions) == 1

    def test_unlimited_demand(self, lazy_recorder):
        subscription, future = make_subscription(lazy_recorder)

        subscription.request(float("inf"))
        respond(future, body=b"data")

        assert lazy_recorder.values == [b"data"]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Delivery
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TestDelivery:
    """Exactly one value and one completion per subscription."""

    def test_success_emits_value_then_finished(self, lazy_recorder):
        subscription, future = make_subscription(lazy_recorder)
        subscription.request(1)

        respond(future, 200, b'{"id": 1}')

        assert lazy_recorder.values == [b'{"id": 1}']
        assert len(lazy_recorder.completions) == 1
        assert lazy_recorder.completions[0].is_finished
        assert subscription.state is SubscriptionState.TERMINATED

    def test_completion_before_demand_is_held(self, lazy_recorder):
        subscription, future = make_subscription(lazy_recorder)

        respond(future, 200, b"early")
        assert lazy_recorder.events == 0

        subscription.request(1)

        assert lazy_recorder.values == [b"early"]
        assert lazy_recorder.completions[0].is_finished

    def test_no_demand_means_no_delivery(self, lazy_recorder):
        _, future = make_subscription(lazy_recorder)

        respond(future, 200, b"ignored")

        assert lazy_recorder.events == 0

    def test_failure_completes_with_exception(self, lazy_recorder):
        subscription, future = make_subscription(lazy_recorder)
        subscription.request(1)

        respond(future, 404, b'{"status": "404", "message": "missing"}')

        assert lazy_recorder.values == []
        error = lazy_recorder.completions[0].error
        assert isinstance(error, NotFoundError)
        assert error.error_model == ErrorModel(status_code=404, message="missing")
        assert error.url == URL

    def test_transport_failure_completes_with_transport_error(self, lazy_recorder):
        subscription, future = make_subscription(lazy_recorder)
        subscription.request(1)

        respond(future, None, error=TransportFailure(TransportErrorCode.TIMED_OUT, "The request timed out."))

        error = lazy_recorder.completions[0].error
        assert isinstance(error, TimeoutError)
        assert error.status_code == -1001

    def test_value_mode_emits_error_model(self, lazy_recorder):
        subscription, future = make_subscription(lazy_recorder, ErrorDelivery.VALUE)
        subscription.request(1)

        respond(future, 500, b"not json")

        assert len(lazy_recorder.values) == 1
        model = ErrorModel.from_bytes(lazy_recorder.values[0])
        assert model.status_code == 500
        assert model.message == "Response status code was unacceptable: 500."
        assert lazy_recorder.completions[0].is_finished

    def test_value_mode_success_is_unchanged(self, lazy_recorder):
        subscription, future = make_subscription(lazy_recorder, ErrorDelivery.VALUE)
        subscription.request(1)

        respond(future, 200, b"ok")

        assert lazy_recorder.values == [b"ok"]

    def test_subscriber_exception_is_logged_not_raised(self, caplog):
        class ExplodingSubscriber:
            def __init__(self):
                self.completions = []

            def on_subscribe(self, subscription):
                pass

            def on_next(self, value):
                raise RuntimeError("boom")

            def on_complete(self, completion):
                self.completions.append(completion)

        subscriber = ExplodingSubscriber()
        subscription, future = make_subscription(subscriber)
        subscription.request(1)

        with caplog.at_level(logging.ERROR, logger="request_publisher"):
            respond(future, 200, b"data")

        assert "raised in on_next" in caplog.text
        assert len(subscriber.completions) == 1


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Cancellation
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TestCancel:
    """Cancellation suppresses every emission."""

    def test_cancel_before_demand(self, lazy_recorder):
        subscription, future = make_subscription(lazy_recorder)

        subscription.cancel()

        assert subscription.state is SubscriptionState.TERMINATED
        assert subscription.subscriber is None
        assert future.cancelled()

    def test_cancel_in_flight_suppresses_emission(self, lazy_recorder):
        subscription, future = make_subscription(lazy_recorder)
        future.set_running_or_notify_cancel()
        subscription.request(1)

        subscription.cancel()
        respond(future, 200, b"late")

        assert lazy_recorder.events == 0

    def test_cancel_is_idempotent(self, lazy_recorder):
        subscription, _ = make_subscription(lazy_recorder)

        subscription.cancel()
        subscription.cancel()

        assert subscription.state is SubscriptionState.TERMINATED

    def test_cancel_after_delivery_is_noop(self, lazy_recorder):
        subscription, future = make_subscription(lazy_recorder)
        subscription.request(1)
        respond(future, 200, b"data")

        subscription.cancel()

        assert lazy_recorder.values == [b"data"]
        assert len(lazy_recorder.completions) == 1

    def test_request_after_cancel_is_noop(self, lazy_recorder):
        subscription, _ = make_subscription(lazy_recorder)
        subscription.cancel()

        subscription.request(1)

        assert subscription.state is SubscriptionState.TERMINATED
        assert lazy_recorder.events == 0

    def test_cancel_races_completion(self, subscriber_factory):
        """Either the full emission or nothing, never a partial one."""
        for _ in range(200):
            subscriber = subscriber_factory()
            subscription, future = make_subscription(subscriber)
            future.set_running_or_notify_cancel()
            subscription.request(1)

            barrier = threading.Barrier(2)

            def complete():
                barrier.wait()
                respond(future, 200, b"data")

            def cancel():
                barrier.wait()
                subscription.cancel()

            threads = [threading.Thread(target=complete), threading.Thread(target=cancel)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

            assert subscriber.events in (0, 2)
            if subscriber.events == 2:
                assert subscriber.values == [b"data"]
                assert subscriber.completions[0].is_finished
