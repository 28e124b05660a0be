# src/request_publisher/core/transport.py
"""
Transport collaborator: performs the network call for a subscription.

A transport returns a cancellable TransportCall immediately and completes
it later on its own thread. The completion callback receives a
TransportResponse and fires at most once, never after cancel(). A call the
transport drops on close() completes with a CANCELLED failure.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import requests
from requests.adapters import HTTPAdapter

from .config import RequestConfig, TransportConfig
from .exceptions import TransportErrorCode, TransportFailure, classify_requests_exception
from .session_manager import WorkerSessions
from ..utils.sanitizer import mask_headers, mask_url

logger = logging.getLogger(__name__)


class TransportClosedError(RuntimeError):
    """send() was called after close()."""


@dataclass(frozen=True)
class TransportResponse:
    """
    Outcome of one transport call.

    Args:
        status_code: HTTP status (None when no response was received)
        body: Raw response body
        error: Transport-level failure, if any
        headers: Response headers
    """
    status_code: Optional[int] = None
    body: bytes = b""
    error: Optional[TransportFailure] = None
    headers: Dict[str, str] = field(default_factory=dict)


class TransportCall:
    """
    Handle to one in-flight request.

    Wraps a concurrent.futures.Future whose result is a TransportResponse.

    Example:
        >>> call = transport.send(config, url)
        >>> call.add_done_callback(lambda response: print(response.status_code))
        >>> call.cancel()  # callback will not fire
    """

    def __init__(self, future: "Future[TransportResponse]"):
        self._future = future
        self._lock = threading.Lock()
        self._cancelled = False
        self._delivered = False

    def add_done_callback(self, fn: Callable[[TransportResponse], None]) -> None:
        """
        Register the completion callback.

        Runs on the transport thread, or right away on the calling thread if
        the call already finished.
        """
        def _on_done(future: Future) -> None:
            with self._lock:
                if self._cancelled or self._delivered:
                    return
                self._delivered = True
            fn(self._response_from(future))

        self._future.add_done_callback(_on_done)

    def cancel(self) -> None:
        """Abort the call. Queued requests never start; running ones are not reported."""
        with self._lock:
            self._cancelled = True
        self._future.cancel()

    def cancelled(self) -> bool:
        return self._cancelled

    def done(self) -> bool:
        return self._future.done()

    @staticmethod
    def _response_from(future: Future) -> TransportResponse:
        if future.cancelled():
            # Dropped from the queue by the transport, not by cancel()
            return TransportResponse(
                error=TransportFailure(TransportErrorCode.CANCELLED, "Transport closed before the request started")
            )
        exc = future.exception()
        if exc is not None:
            logger.error("Transport call raised unexpectedly: %r", exc)
            return TransportResponse(
                error=TransportFailure(TransportErrorCode.UNKNOWN, str(exc) or exc.__class__.__name__)
            )
        return future.result()


class Transport(ABC):
    """Performs HTTP calls on behalf of publishers."""

    @abstractmethod
    def send(self, config: RequestConfig, url: str) -> TransportCall:
        """
        Start the request described by config.

        Args:
            config: Request description
            url: Percent encoded URL

        Returns:
            Handle to the in-flight call

        Raises:
            TransportClosedError: the transport no longer accepts requests
        """

    def close(self) -> None:
        """Release resources held by the transport."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class RequestsTransport(Transport):
    """
    Transport built on requests and a worker thread pool.

    Each worker thread uses its own pooled requests.Session. One instance can
    serve any number of publishers.

    Example:
        >>> with RequestsTransport(TransportConfig(max_workers=4)) as transport:
        ...     call = transport.send(config, config.encoded_url())
    """

    def __init__(
        self,
        config: Optional[TransportConfig] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self._config = config or TransportConfig()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self._config.max_workers,
            thread_name_prefix="request-publisher",
        )
        self._sessions = WorkerSessions(self._create_session)
        self._closed = False

    @property
    def config(self) -> TransportConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    def _create_session(self) -> requests.Session:
        """Create configured session."""
        session = requests.Session()

        adapter = HTTPAdapter(
            pool_connections=self._config.pool_connections,
            pool_maxsize=self._config.pool_maxsize,
            max_retries=0,  # No socket-level retries
        )
        session.mount('http://', adapter)
        session.mount('https://', adapter)

        return session

    def send(self, config: RequestConfig, url: str) -> TransportCall:
        if self._closed:
            raise TransportClosedError("Transport is closed")

        logger.debug(
            "Sending %s %s headers=%s encoding=%s",
            config.method.value,
            mask_url(url),
            mask_headers(dict(config.headers)),
            config.encoding.value,
        )
        try:
            future = self._executor.submit(self._perform, config, url)
        except RuntimeError as e:
            # Closed between the check and submit
            raise TransportClosedError("Transport is closed") from e
        return TransportCall(future)

    def _perform(self, config: RequestConfig, url: str) -> TransportResponse:
        """Run the request on a worker thread. Never raises for network errors."""
        session = self._sessions.current()
        timeout = (config.timeout or self._config.timeout).as_tuple()
        start_time = time.time()

        try:
            response = session.request(
                method=config.method.value,
                url=url,
                timeout=timeout,
                verify=self._config.verify_ssl,
                allow_redirects=self._config.allow_redirects,
                **config.request_kwargs()
            )
            body = response.content
        except requests.exceptions.RequestException as e:
            failure = classify_requests_exception(e)
            logger.warning(
                "Transport failure for %s %s: code=%s %s",
                config.method.value, mask_url(url), int(failure.code), failure.message,
            )
            return TransportResponse(error=failure)

        duration_ms = round((time.time() - start_time) * 1000, 2)
        logger.debug(
            "Received %s for %s %s in %sms (%d bytes)",
            response.status_code, config.method.value, mask_url(url), duration_ms, len(body),
        )
        return TransportResponse(
            status_code=response.status_code,
            body=body or b"",
            headers=dict(response.headers),
        )

    def close(self) -> None:
        """
        Stop accepting requests, drop queued ones and close all sessions.

        Idempotent.
        """
        if self._closed:
            return
        self._closed = True

        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
        self._sessions.close()
