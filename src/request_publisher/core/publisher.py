# src/request_publisher/core/publisher.py
"""
RequestPublisher: cold, single-value publisher for one HTTP request.

Nothing is sent until a subscriber attaches; every subscription sends its
own request through the transport.
"""

import asyncio
import logging
from concurrent.futures import Future
from typing import Callable, Optional

from .config import RequestConfig
from .error_model import ErrorModel
from .exceptions import InvalidURLError, RequestPublisherException, TransportErrorCode, error_from_model
from .subscriber import Completion, FutureSink, InertSubscription, Sink, Subscriber, Subscription
from .subscription import RequestSubscription
from .transport import Transport, TransportClosedError
from ..utils.sanitizer import mask_url

logger = logging.getLogger(__name__)


class RequestPublisher:
    """
    Publisher of the response body of one request.

    Emits exactly one value (the body) and finishes, or completes with a
    RequestPublisherException. Failures never raise out of subscribe().

    Example:
        >>> publisher = RequestBuilder().set_url("https://api.example.com/users").build()
        >>> publisher.sink(
        ...     receive_value=lambda body: print(json.loads(body)),
        ...     receive_completion=lambda completion: print(completion),
        ... )

        >>> # Blocking
        >>> body = publisher.result(timeout=30)

        >>> # asyncio
        >>> body = await publisher.aresult()
    """

    def __init__(self, config: RequestConfig, transport: Transport):
        self._config = config
        self._transport = transport

    @property
    def config(self) -> RequestConfig:
        return self._config

    @property
    def transport(self) -> Transport:
        return self._transport

    def subscribe(self, subscriber: Subscriber) -> Subscription:
        """
        Attach a subscriber and send the request.

        If the URL can't be percent encoded the subscriber gets an inert
        subscription followed by a failure completion with InvalidURLError,
        and the transport is not called. A transport that refuses the call
        (closed, shut down) ends the same way with a TransportError.

        Args:
            subscriber: Receiver of the value and completion

        Returns:
            The subscription handed to the subscriber
        """
        try:
            url = self._config.encoded_url()
        except InvalidURLError as e:
            logger.warning("Invalid URL, request not sent: %s", e.error_model.message)
            return self._fail(subscriber, e)

        logger.debug("Subscribing %s to %s %s", subscriber.__class__.__name__,
                     self._config.method.value, mask_url(url))

        try:
            call = self._transport.send(self._config, url)
        except Exception as e:
            code = TransportErrorCode.CANCELLED if isinstance(e, TransportClosedError) else TransportErrorCode.UNKNOWN
            logger.warning("Transport refused %s %s: %s", self._config.method.value, mask_url(url), e)
            error_model = ErrorModel(status_code=int(code), message=str(e) or e.__class__.__name__)
            return self._fail(subscriber, error_from_model(error_model, url=mask_url(url)))

        subscription = RequestSubscription(call, subscriber, self._config, url)
        subscriber.on_subscribe(subscription)
        return subscription

    @staticmethod
    def _fail(subscriber: Subscriber, error: RequestPublisherException) -> Subscription:
        """Terminate a subscriber that never got a transport call."""
        subscription = InertSubscription()
        subscriber.on_subscribe(subscription)
        subscriber.on_complete(Completion.failure(error))
        return subscription

    # ==================== Convenience subscribers ====================

    def sink(
        self,
        receive_value: Optional[Callable[[bytes], None]] = None,
        receive_completion: Optional[Callable[[Completion], None]] = None,
    ) -> Sink:
        """
        Subscribe with callables.

        Returns:
            The Sink; call sink.cancel() to cancel
        """
        sink = Sink(receive_value=receive_value, receive_completion=receive_completion)
        self.subscribe(sink)
        return sink

    def future(self) -> "Future[bytes]":
        """
        Subscribe and return a future for the body.

        The future raises the failure exception. Cancelling it cancels the
        request.
        """
        sink = FutureSink()
        self.subscribe(sink)
        return sink.future

    def result(self, timeout: Optional[float] = None) -> bytes:
        """
        Send the request and wait for the body.

        Raises:
            RequestPublisherException: the request failed
            concurrent.futures.TimeoutError: no result within timeout
        """
        future = self.future()
        try:
            return future.result(timeout=timeout)
        except BaseException:
            future.cancel()
            raise

    async def aresult(self) -> bytes:
        """
        Await the body from asyncio code.

        Cancelling the awaiting task cancels the request.

        Raises:
            RequestPublisherException: the request failed
        """
        return await asyncio.wrap_future(self.future())

    def __repr__(self):
        return f"RequestPublisher({self._config.method.value} {mask_url(self._config.url)!r})"
