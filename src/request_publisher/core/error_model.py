"""
Error payload models.

ErrorModel is the normalized failure record delivered to subscribers.
ResponseModel is the error body shape returned by the API servers.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ResponseModel(BaseModel):
    """
    Error body sent by the server on 4xx/5xx responses.

    Example body:
        {"status": "404", "message": "missing"}
    """

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    status: str
    message: str


class ErrorModel(BaseModel):
    """
    Normalized failure: status code + message.

    Serialized as ``{"status": <int>, "message": <str>}`` so it can travel
    through the same bytes channel as a successful payload.

    Examples:
        >>> model = ErrorModel(status_code=404, message="missing")
        >>> model.to_bytes()
        b'{"status":404,"message":"missing"}'
        >>> ErrorModel.from_bytes(model.to_bytes()) == model
        True
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status_code: int = Field(alias="status")
    message: str

    def to_bytes(self) -> bytes:
        """Serialize to JSON bytes."""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def from_bytes(cls, payload: Union[bytes, str]) -> "ErrorModel":
        """
        Parse JSON bytes produced by to_bytes().

        Raises:
            pydantic.ValidationError: payload is not an error record
        """
        return cls.model_validate_json(payload)


def decode_response_model(body: bytes) -> Optional[ResponseModel]:
    """Decode an error body, returning None if it has another shape."""
    if not body:
        return None
    try:
        return ResponseModel.model_validate_json(body)
    except ValidationError:
        return None
