# src/request_publisher/core/builder.py
"""
Fluent construction of request publishers.

RequestBuilder collects settings and produces an immutable RequestConfig
snapshot, so changing the builder after build() never affects a publisher
that already exists. PublisherFactory hands out builders that share one
transport (and its connection pools). Builders without a transport use the
process-wide default_transport().
"""

import atexit
import logging
import threading
from typing import Any, Dict, Mapping, Optional, Union

from .config import (
    DEFAULT_HEADERS,
    ErrorDelivery,
    HTTPMethod,
    RequestConfig,
    TimeoutConfig,
    TransportConfig,
)
from .publisher import RequestPublisher
from .transport import RequestsTransport, Transport

logger = logging.getLogger(__name__)

_default_transport: Optional[RequestsTransport] = None
_default_transport_lock = threading.Lock()


def default_transport() -> RequestsTransport:
    """
    Shared transport for builders that weren't given one.

    Created on first use and again after it has been closed.
    """
    global _default_transport
    with _default_transport_lock:
        if _default_transport is None or _default_transport.closed:
            logger.debug("Creating default RequestsTransport")
            _default_transport = RequestsTransport()
        return _default_transport


def close_default_transport() -> None:
    """Close the shared default transport. Registered with atexit."""
    global _default_transport
    with _default_transport_lock:
        transport, _default_transport = _default_transport, None
    if transport is not None:
        transport.close()


atexit.register(close_default_transport)


class RequestBuilder:
    """
    Fluent builder for RequestPublisher.

    Defaults: GET, ``Content-Type: application/json``, no parameters and the
    shared default_transport() (1200 second request timeout).

    Example:
        >>> publisher = (
        ...     RequestBuilder()
        ...     .set_url("https://api.example.com/users")
        ...     .set_method("POST")
        ...     .set_parameters({"name": "alice"})
        ...     .build()
        ... )
    """

    def __init__(self, transport: Optional[Transport] = None):
        self._transport = transport
        self._url = ""
        self._method = HTTPMethod.GET
        self._headers: Dict[str, str] = dict(DEFAULT_HEADERS)
        self._parameters: Optional[Dict[str, Any]] = None
        self._timeout: Optional[TimeoutConfig] = None
        self._error_delivery = ErrorDelivery.FAILURE

    def set_transport(self, transport: Transport) -> "RequestBuilder":
        self._transport = transport
        return self

    def set_headers(self, headers: Mapping[str, str]) -> "RequestBuilder":
        """Replace all headers, including the default Content-Type."""
        self._headers = {str(key): str(value) for key, value in headers.items()}
        return self

    def set_url(self, url: str) -> "RequestBuilder":
        self._url = url
        return self

    def set_method(self, method: Union[HTTPMethod, str]) -> "RequestBuilder":
        self._method = method if isinstance(method, HTTPMethod) else HTTPMethod(method.upper())
        return self

    def set_parameters(self, parameters: Optional[Mapping[str, Any]]) -> "RequestBuilder":
        self._parameters = dict(parameters) if parameters is not None else None
        return self

    def set_timeout(self, timeout: Union[TimeoutConfig, float]) -> "RequestBuilder":
        """Per-request timeout in seconds, or a TimeoutConfig."""
        if not isinstance(timeout, TimeoutConfig):
            timeout = TimeoutConfig(request=float(timeout))
        self._timeout = timeout
        return self

    def set_error_delivery(self, mode: Union[ErrorDelivery, str]) -> "RequestBuilder":
        """
        Choose how failures are delivered.

        ErrorDelivery.VALUE emits the serialized ErrorModel as the value and
        then finishes instead of completing with an exception.
        """
        self._error_delivery = ErrorDelivery(mode)
        return self

    def build_config(self) -> RequestConfig:
        """Immutable snapshot of the current settings."""
        return RequestConfig(
            url=self._url,
            method=self._method,
            headers=self._headers,
            parameters=self._parameters,
            timeout=self._timeout,
            error_delivery=self._error_delivery,
        )

    def build(self) -> RequestPublisher:
        """Create a publisher from the current settings."""
        transport = self._transport if self._transport is not None else default_transport()
        return RequestPublisher(self.build_config(), transport)


class PublisherFactory:
    """
    Creates builders and publishers sharing one transport.

    Example:
        >>> with PublisherFactory(TransportConfig(max_workers=4)) as factory:
        ...     users = factory.request("https://api.example.com/users").result()
        ...     created = (
        ...         factory.builder()
        ...         .set_url("https://api.example.com/users")
        ...         .set_method(HTTPMethod.POST)
        ...         .set_parameters({"name": "alice"})
        ...         .build()
        ...         .result()
        ...     )
    """

    def __init__(
        self,
        config: Optional[TransportConfig] = None,
        transport: Optional[Transport] = None,
        headers: Optional[Mapping[str, str]] = None,
    ):
        """
        Args:
            config: Config for the default transport (ignored when transport is given)
            transport: Transport to share; the factory doesn't close it
            headers: Headers for every builder (default ``Content-Type: application/json``)
        """
        self._config = config or TransportConfig()
        self._transport = transport
        self._owns_transport = transport is None
        self._headers = dict(headers) if headers is not None else dict(DEFAULT_HEADERS)
        self._lock = threading.Lock()

    @property
    def transport(self) -> Transport:
        """Shared transport, created on first use."""
        with self._lock:
            if self._transport is None:
                logger.debug("Creating shared RequestsTransport")
                self._transport = RequestsTransport(self._config)
            return self._transport

    def builder(self) -> RequestBuilder:
        """New builder bound to the shared transport."""
        return RequestBuilder(self.transport).set_headers(self._headers)

    def request(
        self,
        url: str,
        method: Union[HTTPMethod, str] = HTTPMethod.GET,
        parameters: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> RequestPublisher:
        """Shortcut for builder().set_url(...)...build()."""
        builder = self.builder().set_url(url).set_method(method).set_parameters(parameters)
        if headers is not None:
            builder.set_headers({**self._headers, **headers})
        return builder.build()

    def close(self) -> None:
        """Close the shared transport if the factory created it."""
        if not self._owns_transport:
            return
        with self._lock:
            transport, self._transport = self._transport, None
        if transport is not None:
            transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
