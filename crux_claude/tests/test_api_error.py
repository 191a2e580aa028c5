from __future__ import annotations

import types

import httpx
import pytest

from crux_claude.base.errors import (
    KNOWN_ERROR_TYPES,
    APIError,
    ErrorCode,
    ProviderError,
    classify_exception,
    code_for_status,
    parse_retry_after,
)


@pytest.mark.parametrize(
    "error_type,code",
    [
        ("invalid_request_error", ErrorCode.VALIDATION),
        ("authentication_error", ErrorCode.AUTH),
        ("permission_error", ErrorCode.AUTH),
        ("not_found_error", ErrorCode.NOT_FOUND),
        ("rate_limit_error", ErrorCode.RATE_LIMIT),
        ("api_error", ErrorCode.SERVER_ERROR),
        ("overloaded_error", ErrorCode.OVERLOADED),
    ],
)
def test_known_error_types_map_to_codes(error_type, code):
    assert error_type in KNOWN_ERROR_TYPES  # nosec B101 - assert is appropriate in unit tests
    err = APIError.from_response(400, {"type": "error", "error": {"type": error_type, "message": "m"}})
    assert err.type == error_type  # nosec B101 - assert is appropriate in unit tests
    assert err.code is code  # nosec B101 - assert is appropriate in unit tests


def test_unknown_error_type_is_kept_as_string():
    err = APIError.from_response(418, {"error": {"type": "teapot_error", "message": "short and stout"}})
    assert err.type == "teapot_error"  # nosec B101 - assert is appropriate in unit tests
    assert err.code is ErrorCode.UNKNOWN  # nosec B101 - assert is appropriate in unit tests
    assert str(err) == "[418] teapot_error: short and stout"  # nosec B101 - assert is appropriate in unit tests


def test_missing_error_details_use_defaults():
    err = APIError.from_response(503, "<html>gateway</html>")
    assert err.type == "api_error"  # nosec B101 - assert is appropriate in unit tests
    assert err.message == "Unknown error"  # nosec B101 - assert is appropriate in unit tests
    assert err.code is ErrorCode.UNAVAILABLE  # nosec B101 - assert is appropriate in unit tests
    assert err.raw_body is None  # nosec B101 - assert is appropriate in unit tests
    assert err.retryable  # nosec B101 - assert is appropriate in unit tests


def test_rate_limit_errors_are_retryable_and_keep_body():
    body = {"type": "error", "error": {"type": "rate_limit_error", "message": "slow down"}}
    err = APIError.from_response(429, body)
    assert err.retryable  # nosec B101 - assert is appropriate in unit tests
    assert err.raw_body == body  # nosec B101 - assert is appropriate in unit tests
    assert isinstance(err, ProviderError)  # nosec B101 - assert is appropriate in unit tests


def test_status_mapping():
    assert code_for_status(529) is ErrorCode.OVERLOADED  # nosec B101 - assert is appropriate in unit tests
    assert code_for_status(599) is ErrorCode.SERVER_ERROR  # nosec B101 - assert is appropriate in unit tests
    assert code_for_status(302) is ErrorCode.UNKNOWN  # nosec B101 - assert is appropriate in unit tests


def test_classify_provider_error_passthrough():
    e = ProviderError(code=ErrorCode.AUTH, message="nope")
    assert classify_exception(e) is ErrorCode.AUTH  # nosec B101 - assert is appropriate in unit tests


def test_classify_http_status_and_transport_errors():
    e1 = types.SimpleNamespace(status_code=404)
    assert classify_exception(e1) is ErrorCode.NOT_FOUND  # nosec B101 - assert is appropriate in unit tests
    e2 = types.SimpleNamespace(response=types.SimpleNamespace(status_code=529))
    assert classify_exception(e2) is ErrorCode.OVERLOADED  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(httpx.ConnectTimeout("t")) is ErrorCode.TIMEOUT  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(httpx.RemoteProtocolError("eof")) is ErrorCode.TRANSIENT  # nosec B101 - assert is appropriate in unit tests


def test_classify_heuristics():
    assert classify_exception(Exception("rate limit exceeded")) is ErrorCode.RATE_LIMIT  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(Exception("timed out waiting")) is ErrorCode.TIMEOUT  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(Exception("server overloaded")) is ErrorCode.OVERLOADED  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(Exception("random")) is ErrorCode.UNKNOWN  # nosec B101 - assert is appropriate in unit tests


def test_headers_supply_request_id_and_retry_after():
    err = APIError.from_response(
        529,
        {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}},
        {"request-id": "req_9", "retry-after": "7"},
    )
    assert err.request_id == "req_9"  # nosec B101 - assert is appropriate in unit tests
    assert err.retry_after == 7.0  # nosec B101 - assert is appropriate in unit tests


@pytest.mark.parametrize("value", ["soon", "-3", ""])
def test_unusable_retry_after_is_ignored(value):
    assert parse_retry_after({"retry-after": value}) is None  # nosec B101 - assert is appropriate in unit tests


def test_validation_errors_are_not_retryable():
    err = APIError.from_response(400, {"error": {"type": "invalid_request_error", "message": "bad"}})
    assert not err.retryable  # nosec B101 - assert is appropriate in unit tests
    assert not ErrorCode.VALIDATION.is_retryable  # nosec B101 - assert is appropriate in unit tests
