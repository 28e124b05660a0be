"""
Exception hierarchy for request publishers.

Classification:
- TemporaryError (retryable=True) - the caller may subscribe again
- FatalError (fatal=True) - do not retry

Exceptions never propagate out of a subscription; they are delivered to the
subscriber inside a failure completion. Every exception carries the
normalized ErrorModel it was built from.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

import requests
from urllib3.exceptions import MaxRetryError, ProtocolError

from .error_model import ErrorModel


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TRANSPORT CODES
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TransportErrorCode(IntEnum):
    """
    Status codes for failures that happen before an HTTP status exists.

    Values follow the URL loading system error codes so that clients which
    already switch on them keep working.
    """
    UNKNOWN = -1
    CANCELLED = -999
    BAD_URL = -1000
    TIMED_OUT = -1001
    NETWORK_CONNECTION_LOST = -1005
    NOT_CONNECTED_TO_INTERNET = -1009
    BAD_SERVER_RESPONSE = -1011


# Soft failures short-circuit status code inspection
SOFT_TRANSPORT_CODES = frozenset({
    TransportErrorCode.NETWORK_CONNECTION_LOST,
    TransportErrorCode.NOT_CONNECTED_TO_INTERNET,
    TransportErrorCode.TIMED_OUT,
    TransportErrorCode.BAD_SERVER_RESPONSE,
})


@dataclass(frozen=True)
class TransportFailure:
    """
    Transport-level failure reported with a completed call.

    Args:
        code: TransportErrorCode value
        message: Human readable description from the transport
    """
    code: int
    message: str

    @property
    def is_soft(self) -> bool:
        return self.code in SOFT_TRANSPORT_CODES


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class RequestPublisherException(Exception):
    """Base exception for request publishers."""

    retryable: bool = False
    fatal: bool = False

    def __init__(self, error_model: ErrorModel, url: Optional[str] = None):
        self.error_model = error_model
        self.url = url

        msg = f"[{error_model.status_code}] {error_model.message}"
        if url:
            msg += f" (url: {url})"
        self.message = msg
        super().__init__(msg)

    @property
    def status_code(self) -> int:
        return self.error_model.status_code

    def to_bytes(self) -> bytes:
        """Serialized ErrorModel payload."""
        return self.error_model.to_bytes()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TEMPORARY ERRORS (retryable=True)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TemporaryError(RequestPublisherException):
    """
    Temporary failure - a new subscription may succeed.

    Examples: timeouts, lost connections, 5xx responses.
    """
    retryable = True


class TransportError(TemporaryError):
    """Failure reported by the transport before a usable response existed."""
    pass


class TimeoutError(TransportError):
    """Request timed out."""
    pass


class ConnectionLostError(TransportError):
    """Connection dropped while the request was in flight."""
    pass


class NotConnectedError(TransportError):
    """No route to the host (DNS failure, connection refused, offline)."""
    pass


class BadServerResponseError(TransportError):
    """Server sent a response the transport could not read."""
    pass


class ServerError(TemporaryError):
    """5xx response."""
    pass


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# FATAL ERRORS (fatal=True)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class FatalError(RequestPublisherException):
    """
    Fatal failure - do not retry.

    Examples: 4xx responses, malformed URL.
    """
    fatal = True


class HTTPError(FatalError):
    """Base class for 4xx responses and unclassified status codes."""
    pass


class BadRequestError(HTTPError):
    """400 Bad Request."""
    pass


class UnauthorizedError(HTTPError):
    """401 Unauthorized."""
    pass


class ForbiddenError(HTTPError):
    """403 Forbidden."""
    pass


class NotFoundError(HTTPError):
    """404 Not Found."""
    pass


class InvalidURLError(FatalError):
    """URL cannot be percent encoded; no request was sent."""

    def __init__(self, url: Optional[str] = None, message: str = "Invalid URL or unable to percent encode"):
        super().__init__(
            ErrorModel(status_code=int(TransportErrorCode.BAD_URL), message=message),
            url=None,
        )
        # Don't echo the raw URL into the message, it is the broken part
        self.url = url


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# UTILITIES
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

_STATUS_ERRORS = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
}

_TRANSPORT_ERRORS = {
    TransportErrorCode.TIMED_OUT: TimeoutError,
    TransportErrorCode.NETWORK_CONNECTION_LOST: ConnectionLostError,
    TransportErrorCode.NOT_CONNECTED_TO_INTERNET: NotConnectedError,
    TransportErrorCode.BAD_SERVER_RESPONSE: BadServerResponseError,
    TransportErrorCode.BAD_URL: InvalidURLError,
}


def error_from_model(error_model: ErrorModel, url: Optional[str] = None) -> RequestPublisherException:
    """
    Build the exception matching an ErrorModel's status code.

    Examples:
        >>> exc = error_from_model(ErrorModel(status_code=404, message="missing"))
        >>> assert isinstance(exc, NotFoundError)
        >>> assert exc.error_model.message == "missing"
    """
    code = error_model.status_code

    if code in _STATUS_ERRORS:
        return _STATUS_ERRORS[code](error_model, url)

    if 500 <= code < 600:
        return ServerError(error_model, url)

    if code < 0:
        exc_class = _TRANSPORT_ERRORS.get(code)
        if exc_class is InvalidURLError:
            return InvalidURLError(url, error_model.message)
        if exc_class is not None:
            return exc_class(error_model, url)
        return TransportError(error_model, url)

    return HTTPError(error_model, url)


def classify_requests_exception(exc: Exception) -> TransportFailure:
    """
    Convert a requests exception into a TransportFailure.

    Examples:
        >>> failure = classify_requests_exception(requests.exceptions.ReadTimeout("slow"))
        >>> assert failure.code == TransportErrorCode.TIMED_OUT
        >>> assert failure.is_soft
    """
    message = str(exc) or exc.__class__.__name__

    if isinstance(exc, requests.exceptions.Timeout):
        return TransportFailure(TransportErrorCode.TIMED_OUT, message)

    elif isinstance(exc, (requests.exceptions.InvalidURL,
                          requests.exceptions.MissingSchema,
                          requests.exceptions.InvalidSchema)):
        return TransportFailure(TransportErrorCode.BAD_URL, message)

    elif isinstance(exc, requests.exceptions.ConnectionError):
        if _connection_dropped(exc):
            return TransportFailure(TransportErrorCode.NETWORK_CONNECTION_LOST, message)
        return TransportFailure(TransportErrorCode.NOT_CONNECTED_TO_INTERNET, message)

    elif isinstance(exc, (requests.exceptions.ChunkedEncodingError,
                          requests.exceptions.ContentDecodingError)):
        return TransportFailure(TransportErrorCode.BAD_SERVER_RESPONSE, message)

    else:
        return TransportFailure(TransportErrorCode.UNKNOWN, message)


def _connection_dropped(exc: requests.exceptions.ConnectionError) -> bool:
    """
    True if the connection broke after it was established.

    requests wraps the urllib3 error as the first argument: a ProtocolError
    (or a raw OSError) when the peer went away mid-request, a MaxRetryError
    whose reason is a NewConnectionError when no connection was made.
    """
    cause = exc.args[0] if exc.args else None
    if isinstance(cause, MaxRetryError):
        cause = cause.reason
    return isinstance(cause, (ProtocolError, ConnectionResetError, ConnectionAbortedError, BrokenPipeError))
