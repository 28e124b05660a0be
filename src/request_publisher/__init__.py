"""Request Publisher - a single HTTP request as a cold, single-value publisher."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .core.builder import RequestBuilder, PublisherFactory, default_transport, close_default_transport
from .core.publisher import RequestPublisher
from .core.config import (
    HTTPMethod,
    ParameterEncoding,
    ErrorDelivery,
    RequestConfig,
    TimeoutConfig,
    TransportConfig,
)
from .core.error_model import ErrorModel
from .core.classifier import Success, Failure, classify_response
from .core.subscriber import Completion, Subscriber, Subscription, Sink, FutureSink, UNLIMITED
from .core.subscription import RequestSubscription, SubscriptionState
from .core.transport import Transport, TransportCall, TransportResponse, RequestsTransport, TransportClosedError
from .core.exceptions import (
    RequestPublisherException,
    TransportError,
    TimeoutError,
    ConnectionLostError,
    NotConnectedError,
    BadServerResponseError,
    HTTPError,
    BadRequestError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ServerError,
    InvalidURLError,
    TransportErrorCode,
)
from .core.logging import LoggingConfig, configure_logging

# Users can configure logging themselves using logging.getLogger('request_publisher')
logging.getLogger('request_publisher').addHandler(logging.NullHandler())

try:
    __version__ = version("request-publisher")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__all__ = [
    # Core
    "RequestBuilder",
    "PublisherFactory",
    "default_transport",
    "close_default_transport",
    "RequestPublisher",
    "RequestSubscription",
    "SubscriptionState",

    # Config
    "HTTPMethod",
    "ParameterEncoding",
    "ErrorDelivery",
    "RequestConfig",
    "TimeoutConfig",
    "TransportConfig",

    # Classification
    "ErrorModel",
    "Success",
    "Failure",
    "classify_response",

    # Subscribers
    "Completion",
    "Subscriber",
    "Subscription",
    "Sink",
    "FutureSink",
    "UNLIMITED",

    # Transport
    "Transport",
    "TransportCall",
    "TransportResponse",
    "RequestsTransport",
    "TransportClosedError",

    # Exceptions
    "RequestPublisherException",
    "TransportError",
    "TimeoutError",
    "ConnectionLostError",
    "NotConnectedError",
    "BadServerResponseError",
    "HTTPError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ServerError",
    "InvalidURLError",
    "TransportErrorCode",

    # Logging
    "LoggingConfig",
    "configure_logging",

    # Version
    "__version__",
]
