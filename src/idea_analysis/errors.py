"""Error taxonomy for analysis backends.

Every failure raised by a backend, the cache wrapper or the fallback chain
derives from ``AnalysisError``. The sentinel subclasses map one-to-one onto
the telemetry error types returned by ``classify_error``.

``classify_error`` is used for tagging metrics only. Control flow never
branches on its result.
"""

from enum import Enum

import httpx


class ErrorType(str, Enum):
    """Telemetry tag for a failed backend call."""

    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    AUTH_ERROR = "auth_error"
    NETWORK_ERROR = "network_error"
    INVALID_RESPONSE = "invalid_response"
    PROVIDER_ERROR = "provider_error"
    UNKNOWN = "unknown"


class AnalysisError(Exception):
    """Base class for all analysis failures."""


class ProviderTimeoutError(AnalysisError):
    """The backend did not answer within its timeout."""


class RateLimitError(AnalysisError):
    """The backend rejected the call because of rate limiting."""


class AuthenticationError(AnalysisError):
    """Credentials are missing or were rejected."""


class NetworkError(AnalysisError):
    """The backend could not be reached."""


class InvalidResponseError(AnalysisError):
    """The backend answered with something that could not be used."""


class ProviderError(AnalysisError):
    """The backend reported a server-side failure."""


class InvalidRequestError(AnalysisError):
    """The request itself is unusable (for example, no goal context)."""


class NoProvidersAvailableError(AnalysisError):
    """No member of a fallback chain was available to try."""


class AllProvidersFailedError(AnalysisError):
    """Every attempted member of a fallback chain failed.

    The last underlying failure is available as ``last_error`` and as
    ``__cause__``.
    """

    def __init__(self, last_error: BaseException) -> None:
        super().__init__(f"all providers failed, last error: {last_error}")
        self.last_error = last_error


_SENTINELS: tuple[tuple[type[BaseException], ErrorType], ...] = (
    (ProviderTimeoutError, ErrorType.TIMEOUT),
    (httpx.TimeoutException, ErrorType.TIMEOUT),
    (TimeoutError, ErrorType.TIMEOUT),
    (RateLimitError, ErrorType.RATE_LIMIT),
    (AuthenticationError, ErrorType.AUTH_ERROR),
    (NetworkError, ErrorType.NETWORK_ERROR),
    (httpx.TransportError, ErrorType.NETWORK_ERROR),
    (InvalidResponseError, ErrorType.INVALID_RESPONSE),
    (ProviderError, ErrorType.PROVIDER_ERROR),
)

# Ordered: the first group with a matching fragment wins.
_MESSAGE_PATTERNS: tuple[tuple[ErrorType, tuple[str, ...]], ...] = (
    (ErrorType.TIMEOUT, ("timeout", "timed out", "deadline exceeded")),
    (ErrorType.RATE_LIMIT, ("rate limit", "too many requests", "429")),
    (ErrorType.AUTH_ERROR, ("unauthorized", "api key", "authentication", "401")),
    (ErrorType.NETWORK_ERROR, ("connection", "network", "dial")),
    (ErrorType.INVALID_RESPONSE, ("invalid", "malformed", "parse")),
    (ErrorType.PROVIDER_ERROR, ("500", "502", "503", "504")),
)


def classify_error(error: BaseException | None) -> ErrorType:
    """Categorize an error for metrics tracking.

    Sentinel exception types are checked first, including the ``__cause__``
    chain so wrapped errors keep their category. Only when no sentinel
    matches does the message get scanned for well-known fragments.

    Args:
        error: The exception to classify

    Returns:
        The telemetry error type
    """
    if error is None:
        return ErrorType.UNKNOWN

    current: BaseException | None = error
    seen: set[int] = set()
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        for error_class, error_type in _SENTINELS:
            if isinstance(current, error_class):
                return error_type
        current = current.__cause__

    message = str(error).lower()
    for error_type, fragments in _MESSAGE_PATTERNS:
        if any(fragment in message for fragment in fragments):
            return error_type
    return ErrorType.UNKNOWN
