"""Tests for ErrorModel and ResponseModel."""

import pytest
from pydantic import ValidationError

from request_publisher.core.error_model import ErrorModel, ResponseModel, decode_response_model


class TestErrorModel:
    """ErrorModel serialization."""

    def test_to_bytes_uses_status_key(self):
        model = ErrorModel(status_code=404, message="missing")
        assert model.to_bytes() == b'{"status":404,"message":"missing"}'

    def test_from_bytes(self):
        model = ErrorModel.from_bytes(b'{"status": 500, "message": "boom"}')
        assert model.status_code == 500
        assert model.message == "boom"

    def test_roundtrip(self):
        model = ErrorModel(status_code=-1001, message="The request timed out.")
        assert ErrorModel.from_bytes(model.to_bytes()) == model

    def test_accepts_alias_on_construction(self):
        model = ErrorModel(status=401, message="nope")
        assert model.status_code == 401

    def test_from_bytes_rejects_other_shapes(self):
        with pytest.raises(ValidationError):
            ErrorModel.from_bytes(b'{"id": 1}')

    def test_immutable(self):
        model = ErrorModel(status_code=400, message="bad")
        with pytest.raises(ValidationError):
            model.message = "changed"


class TestResponseModel:
    """Decoding of server error bodies."""

    def test_decode_valid_body(self):
        decoded = decode_response_model(b'{"status": "404", "message": "missing"}')
        assert decoded == ResponseModel(status="404", message="missing")

    def test_numeric_status_is_coerced(self):
        decoded = decode_response_model(b'{"status": 404, "message": "missing"}')
        assert decoded is not None
        assert decoded.status == "404"

    def test_extra_fields_ignored(self):
        decoded = decode_response_model(b'{"status": "400", "message": "bad", "trace": "x"}')
        assert decoded.message == "bad"

    @pytest.mark.parametrize("body", [
        b"",
        b"not json",
        b"<html>Not Found</html>",
        b'{"message": "no status"}',
        b'{"status": "404"}',
        b"[1, 2, 3]",
        b"\xff\xfe\x00",
    ])
    def test_malformed_bodies_return_none(self, body):
        assert decode_response_model(body) is None
