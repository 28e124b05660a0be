# src/request_publisher/core/subscription.py
"""
RequestSubscription: binds one in-flight transport call to one subscriber.

States:
    PENDING     subscriber attached, no demand yet
    ARMED       positive demand received, one emission authorized
    TERMINATED  emission delivered, or cancelled (absorbing)

Transitions happen under a lock. Whichever of {completion, cancel} moves the
state out of ARMED first wins; the loser does nothing. The subscriber
reference is cleared when arming so a late cancel can't reach it twice.
"""

import logging
import threading
from enum import Enum
from functools import partial
from typing import Optional

from .classifier import Failure, Outcome, classify_response
from .config import ErrorDelivery, RequestConfig
from .exceptions import error_from_model
from .subscriber import Completion, Subscriber, Subscription, validate_demand
from .transport import TransportCall, TransportResponse
from ..utils.sanitizer import mask_url

logger = logging.getLogger(__name__)


class SubscriptionState(Enum):
    """Lifecycle states of a RequestSubscription."""
    PENDING = "pending"
    ARMED = "armed"
    TERMINATED = "terminated"


class RequestSubscription(Subscription):
    """
    Single-emission subscription over one transport call.

    Example:
        >>> subscription = RequestSubscription(call, subscriber, config, url)
        >>> subscription.request(1)   # arm; the result is delivered once
        >>> subscription.cancel()     # no-op once terminated
    """

    def __init__(
        self,
        call: TransportCall,
        subscriber: Subscriber,
        config: RequestConfig,
        url: Optional[str] = None,
    ):
        self._call = call
        self._subscriber: Optional[Subscriber] = subscriber
        self._config = config
        self._url = url or config.url
        self._state = SubscriptionState.PENDING
        self._lock = threading.Lock()

    @property
    def state(self) -> SubscriptionState:
        return self._state

    @property
    def subscriber(self) -> Optional[Subscriber]:
        return self._subscriber

    def request(self, demand) -> None:
        """
        Arm the subscription.

        Only the first positive demand matters; later calls are no-ops.

        Raises:
            ValueError: demand is zero or negative
        """
        validate_demand(demand)

        with self._lock:
            if self._state is not SubscriptionState.PENDING or self._subscriber is None:
                return
            target = self._subscriber
            self._subscriber = None
            self._state = SubscriptionState.ARMED

        logger.debug("Subscription armed for %s %s", self._config.method.value, mask_url(self._url))
        self._call.add_done_callback(partial(self._on_response, target))

    def cancel(self) -> None:
        """Abort the transport call. Idempotent; no emission follows."""
        with self._lock:
            if self._state is SubscriptionState.TERMINATED:
                return
            previous = self._state
            self._state = SubscriptionState.TERMINATED
            self._subscriber = None

        self._call.cancel()
        logger.debug(
            "Subscription cancelled (%s) for %s %s",
            previous.value, self._config.method.value, mask_url(self._url),
        )

    # ==================== Completion ====================

    def _on_response(self, target: Subscriber, response: TransportResponse) -> None:
        """Transport completion callback. Runs on the transport thread."""
        with self._lock:
            if self._state is not SubscriptionState.ARMED:
                return
            self._state = SubscriptionState.TERMINATED

        outcome = classify_response(response.status_code, response.body, response.error)
        self._deliver(target, outcome)

    def _deliver(self, target: Subscriber, outcome: Outcome) -> None:
        if isinstance(outcome, Failure):
            error_model = outcome.error
            logger.info(
                "Request failed: %s %s -> %s %s",
                self._config.method.value, mask_url(self._url),
                error_model.status_code, error_model.message,
            )
            if self._config.error_delivery is ErrorDelivery.VALUE:
                self._emit_value(target, error_model.to_bytes())
                self._emit_completion(target, Completion.finished())
            else:
                error = error_from_model(error_model, url=mask_url(self._url))
                self._emit_completion(target, Completion.failure(error))
            return

        logger.debug(
            "Request succeeded: %s %s (%d bytes)",
            self._config.method.value, mask_url(self._url), len(outcome.payload),
        )
        self._emit_value(target, outcome.payload)
        self._emit_completion(target, Completion.finished())

    @staticmethod
    def _emit_value(target: Subscriber, value: bytes) -> None:
        try:
            target.on_next(value)
        except Exception:
            logger.exception("Subscriber %s raised in on_next", target.__class__.__name__)

    @staticmethod
    def _emit_completion(target: Subscriber, completion: Completion) -> None:
        try:
            target.on_complete(completion)
        except Exception:
            logger.exception("Subscriber %s raised in on_complete", target.__class__.__name__)
