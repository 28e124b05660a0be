"""
Tests for log formatters.
"""

import json
import logging
import sys

import pytest

from request_publisher.core.logging.formatters import JSONFormatter, TextFormatter, get_formatter


def make_record(msg="Request failed", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="request_publisher.core.subscription",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self):
        """Output is one JSON object with the standard fields."""
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "request_publisher.core.subscription"
        assert data["message"] == "Request failed"
        assert data["timestamp"].endswith("+00:00")

    def test_extra_fields_included(self):
        """Fields passed through extra= end up in the JSON."""
        data = json.loads(JSONFormatter().format(make_record(status_code=404, method="GET")))

        assert data["status_code"] == 404
        assert data["method"] == "GET"

    def test_non_serializable_extra(self):
        """Values json can't handle are converted with str()."""
        data = json.loads(JSONFormatter().format(make_record(payload=b"raw")))

        assert data["payload"] == "b'raw'"

    def test_exception_info(self):
        """Exceptions are formatted into the 'exception' key."""
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = make_record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))

        assert "RuntimeError: boom" in data["exception"]


class TestTextFormatter:
    """Tests for TextFormatter."""

    def test_format(self):
        output = TextFormatter().format(make_record())

        assert "[INFO]" in output
        assert "[request_publisher.core.subscription]" in output
        assert output.endswith("Request failed")

    def test_extra_fields_appended(self):
        output = TextFormatter().format(make_record(status_code=500))

        assert output.endswith("Request failed status_code=500")


class TestGetFormatter:

    @pytest.mark.parametrize("name, formatter_class", [
        ("json", JSONFormatter),
        ("JSON", JSONFormatter),
        ("text", TextFormatter),
    ])
    def test_known_formats(self, name, formatter_class):
        assert isinstance(get_formatter(name), formatter_class)

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unknown format type"):
            get_formatter("xml")
