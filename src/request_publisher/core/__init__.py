"""Core request publisher modules."""

from .config import (
    DEFAULT_HEADERS,
    ErrorDelivery,
    HTTPMethod,
    ParameterEncoding,
    RequestConfig,
    TimeoutConfig,
    TransportConfig,
    percent_encode_url,
)
from .error_model import ErrorModel, ResponseModel
from .exceptions import (
    RequestPublisherException,
    TemporaryError,
    FatalError,
    TransportError,
    TimeoutError,
    ConnectionLostError,
    NotConnectedError,
    BadServerResponseError,
    ServerError,
    HTTPError,
    BadRequestError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    InvalidURLError,
    TransportErrorCode,
    TransportFailure,
    classify_requests_exception,
    error_from_model,
)
from .classifier import Success, Failure, classify_response, HARD_FAILURE_STATUS_CODES
from .transport import Transport, TransportCall, TransportResponse, RequestsTransport, TransportClosedError
from .subscriber import (
    Completion,
    Subscriber,
    Subscription,
    Sink,
    FutureSink,
    InertSubscription,
    UNLIMITED,
)
from .subscription import RequestSubscription, SubscriptionState
from .publisher import RequestPublisher
from .builder import RequestBuilder, PublisherFactory, default_transport, close_default_transport

__all__ = [
    # Config
    "DEFAULT_HEADERS",
    "ErrorDelivery",
    "HTTPMethod",
    "ParameterEncoding",
    "RequestConfig",
    "TimeoutConfig",
    "TransportConfig",
    "percent_encode_url",
    # Error model
    "ErrorModel",
    "ResponseModel",
    # Exceptions
    "RequestPublisherException",
    "TemporaryError",
    "FatalError",
    "TransportError",
    "TimeoutError",
    "ConnectionLostError",
    "NotConnectedError",
    "BadServerResponseError",
    "ServerError",
    "HTTPError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "InvalidURLError",
    "TransportErrorCode",
    "TransportFailure",
    "classify_requests_exception",
    "error_from_model",
    # Classification
    "Success",
    "Failure",
    "classify_response",
    "HARD_FAILURE_STATUS_CODES",
    # Transport
    "Transport",
    "TransportCall",
    "TransportResponse",
    "RequestsTransport",
    "TransportClosedError",
    # Subscribers
    "Completion",
    "Subscriber",
    "Subscription",
    "Sink",
    "FutureSink",
    "InertSubscription",
    "UNLIMITED",
    "RequestSubscription",
    "SubscriptionState",
    # Publisher
    "RequestPublisher",
    "RequestBuilder",
    "PublisherFactory",
    "default_transport",
    "close_default_transport",
]
