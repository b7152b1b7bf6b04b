"""
Tests for error classification.
"""

import httpx
import pytest

from idea_analysis.errors import (
    AllProvidersFailedError,
    AuthenticationError,
    ErrorType,
    InvalidResponseError,
    NetworkError,
    ProviderError,
    ProviderTimeoutError,
    RateLimitError,
    classify_error,
)


@pytest.mark.parametrize(
    "error,expected",
    [
        (ProviderTimeoutError("slow"), ErrorType.TIMEOUT),
        (RateLimitError("slow down"), ErrorType.RATE_LIMIT),
        (AuthenticationError("bad key"), ErrorType.AUTH_ERROR),
        (NetworkError("unreachable"), ErrorType.NETWORK_ERROR),
        (InvalidResponseError("garbage"), ErrorType.INVALID_RESPONSE),
        (ProviderError("server side"), ErrorType.PROVIDER_ERROR),
        (httpx.ReadTimeout("slow"), ErrorType.TIMEOUT),
        (httpx.ConnectError("refused"), ErrorType.NETWORK_ERROR),
        (TimeoutError(), ErrorType.TIMEOUT),
    ],
)
def test_sentinel_types(error, expected):
    assert classify_error(error) is expected


def test_sentinel_wins_over_message():
    """Test a typed error is not reclassified by its text."""
    assert classify_error(RateLimitError("timeout while waiting")) is ErrorType.RATE_LIMIT


def test_cause_chain_is_followed():
    """Test a wrapped error keeps the category of its cause."""
    inner = ProviderTimeoutError("slow")
    try:
        try:
            raise inner
        except ProviderTimeoutError as e:
            raise AllProvidersFailedError(e) from e
    except AllProvidersFailedError as outer:
        assert classify_error(outer) is ErrorType.TIMEOUT
        assert outer.last_error is inner


@pytest.mark.parametrize(
    "message,expected",
    [
        ("context deadline exceeded", ErrorType.TIMEOUT),
        ("HTTP 429 Too Many Requests", ErrorType.RATE_LIMIT),
        ("status 401", ErrorType.AUTH_ERROR),
        ("invalid api key provided", ErrorType.AUTH_ERROR),
        ("connection refused", ErrorType.NETWORK_ERROR),
        ("malformed payload", ErrorType.INVALID_RESPONSE),
        ("upstream returned 503", ErrorType.PROVIDER_ERROR),
        ("something odd", ErrorType.UNKNOWN),
    ],
)
def test_message_fallback(message, expected):
    assert classify_error(RuntimeError(message)) is expected


def test_none_is_unknown():
    assert classify_error(None) is ErrorType.UNKNOWN


def test_error_type_values_are_telemetry_tags():
    assert ErrorType.RATE_LIMIT.value == "rate_limit"
    assert ErrorType.NETWORK_ERROR == "network_error"
