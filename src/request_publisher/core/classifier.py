"""
Response classification: success payload or normalized failure.

Pure functions, no I/O. Classification never raises, a malformed error body
degrades to a generic message.
"""

from dataclasses import dataclass
from typing import Optional, Union

from .error_model import ErrorModel, decode_response_model
from .exceptions import TransportErrorCode, TransportFailure

# Status codes treated as failures; anything else is a success
HARD_FAILURE_STATUS_CODES = frozenset({400, 401, 403, 404, 500, 502, 503, 504})


@dataclass(frozen=True)
class Success:
    """Successful response; payload is the raw body."""
    payload: bytes


@dataclass(frozen=True)
class Failure:
    """Failed response."""
    error: ErrorModel


Outcome = Union[Success, Failure]


def generic_error_description(status_code: int) -> str:
    """Message used when an error body can't be decoded."""
    return f"Response status code was unacceptable: {status_code}."


def classify_response(
    status_code: Optional[int],
    body: bytes,
    transport_error: Optional[TransportFailure] = None,
) -> Outcome:
    """
    Classify a completed call.

    Order of checks:
        1. soft transport failure (lost connection, offline, timeout, bad
           server response) wins over any status code
        2. any other transport failure
        3. hard failure status: message from the {status, message} body,
           or a generic description if the body doesn't decode
        4. everything else is a success with the raw body

    Args:
        status_code: HTTP status, None if no response was received
        body: Raw response body
        transport_error: Failure reported by the transport

    Returns:
        Success or Failure

    Examples:
        >>> classify_response(200, b'{"id": 1}')
        Success(payload=b'{"id": 1}')
        >>> classify_response(404, b'{"status": "404", "message": "missing"}').error.message
        'missing'
    """
    if transport_error is not None:
        return Failure(ErrorModel(status_code=int(transport_error.code), message=transport_error.message))

    if status_code is None:
        return Failure(ErrorModel(status_code=int(TransportErrorCode.UNKNOWN), message="No response received"))

    if status_code in HARD_FAILURE_STATUS_CODES:
        decoded = decode_response_model(body)
        if decoded is not None:
            return Failure(ErrorModel(status_code=status_code, message=decoded.message))
        return Failure(ErrorModel(status_code=status_code, message=generic_error_description(status_code)))

    return Success(body or b"")
