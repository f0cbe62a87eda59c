"""
Tests for response classification
"""

import httpx
import pytest

from creatordb_proxy.classifier import (
    NormalizedResult,
    classify,
    classify_transport_error,
    extract_error_message,
    transport_error_from,
)
from creatordb_proxy.errors import MissingParameterError


class TestClassify:
    """Tests for classify"""

    def test_success_passes_body_through(self):
        body = {"success": True, "data": {"followers": 12}, "traceId": "t1", "timestamp": 1}
        result = classify(200, body)
        assert result.success is True
        assert result.payload is body
        assert result.to_dict() == body

    def test_success_flag_false_with_error_description(self):
        result = classify(429, {"success": False, "errorDescription": "quota exceeded"})
        assert result.success is False
        assert result.error == "quota exceeded"
        assert result.status == 429
        assert result.error_kind == "UpstreamApplicationError"

    def test_success_false_on_200_is_failure(self):
        result = classify(200, {"success": False, "message": "creator not found"})
        assert result.success is False
        assert result.error == "creator not found"
        assert result.status == 200

    def test_falls_back_to_message(self):
        result = classify(404, {"message": "Not Found"})
        assert result.error == "Not Found"

    def test_generic_message_when_nothing_useful(self):
        result = classify(400, {"success": False})
        assert result.error == "API Error: 400"
        assert result.status == 400

    def test_empty_description_falls_through(self):
        result = classify(500, {"errorDescription": "", "message": "boom"})
        assert result.error == "boom"

    def test_non_2xx_without_success_field(self):
        result = classify(503, {"data": None})
        assert result.success is False
        assert result.error == "API Error: 503"

    def test_non_object_body(self):
        assert classify(200, [1, 2, 3]).payload == [1, 2, 3]
        assert classify(500, "oops").error == "API Error: 500"

    def test_failure_wire_form(self):
        result = classify(429, {"success": False, "errorDescription": "quota exceeded"})
        assert result.to_dict() == {"success": False, "error": "quota exceeded", "status": 429}


class TestErrorMessage:
    """Tests for the three-level error message fallback"""

    @pytest.mark.parametrize(
        "body,expected",
        [
            ({"errorDescription": "a", "message": "b"}, "a"),
            ({"message": "b"}, "b"),
            ({}, "API Error: 418"),
            (None, "API Error: 418"),
        ],
    )
    def test_fallback_order(self, body, expected):
        assert extract_error_message(418, body) == expected


class TestTransportErrors:
    """Tests for transport failure classification"""

    def test_connect_error_is_502(self):
        error = transport_error_from(httpx.ConnectError("connection refused"))
        result = classify_transport_error(error)
        assert result.success is False
        assert result.status == 502
        assert result.error == "connection refused"
        assert result.error_kind == "UpstreamTransportError"

    def test_timeout_is_504(self):
        error = transport_error_from(httpx.ReadTimeout("timed out"))
        assert classify_transport_error(error).status == 504

    def test_decode_error_is_502(self):
        error = transport_error_from(ValueError("Expecting value: line 1 column 1 (char 0)"))
        assert error.status == 502
        assert "Expecting value" in error.message


class TestNormalizedResult:
    """Tests for NormalizedResult helpers"""

    def test_from_caller_error(self):
        result = NormalizedResult.from_error(MissingParameterError("uniqueId"))
        assert result.success is False
        assert result.status == 400
        assert result.error == "uniqueId is required"
        assert result.error_kind == "MissingParameter"
