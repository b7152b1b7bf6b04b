"""Shared plumbing for model-backed providers.

Subclasses only describe their wire format (``name``, ``_send`` and
``_extract``). This base class owns the rest of the call:
    - prompt construction
    - rate limiting and retries with exponential backoff
    - mapping httpx failures and HTTP status codes onto typed errors
    - response processing with the rule-based fallback
    - telemetry and quality recording
"""

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import ValidationError

from idea_analysis.config import ProviderConfig
from idea_analysis.entities import AnalysisRequest, AnalysisResult
from idea_analysis.errors import (
    AnalysisError,
    AuthenticationError,
    ErrorType,
    InvalidRequestError,
    InvalidResponseError,
    NetworkError,
    ProviderError,
    ProviderTimeoutError,
    RateLimitError,
    classify_error,
)
from idea_analysis.models import TokenUsage
from idea_analysis.prompts import build_analysis_prompt
from idea_analysis.repositories.rule_based_provider import RuleBasedProvider
from idea_analysis.services.quality_tracker import QualityTracker
from idea_analysis.services.response_processor import ResponseProcessor
from idea_analysis.services.telemetry import LLMTelemetry
from idea_analysis.utils.rate_limiter import TokenBucket

logger = logging.getLogger(__name__)


class BaseHTTPProvider:
    """Base class for providers that call a model over HTTP.

    Not a protocol implementation on its own: subclasses supply ``name``,
    ``is_available``, ``_send`` and ``_extract``.
    """

    def __init__(
        self,
        config: ProviderConfig,
        client: httpx.Client | None = None,
        processor: ResponseProcessor | None = None,
        telemetry: LLMTelemetry | None = None,
        quality_tracker: QualityTracker | None = None,
        rate_limiter: TokenBucket | None = None,
        max_attempts: int = 1,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the provider.

        Args:
            config: Connection parameters.
            client: HTTP client. Created lazily from ``config`` if omitted.
            processor: Response processor. Defaults to one that falls back to
                a ``RuleBasedProvider`` sharing this provider's telemetry.
            telemetry: Telemetry bridge. Defaults to the process-wide collector.
            quality_tracker: Records quality of every successful result, if given.
            rate_limiter: Token bucket acquired before each attempt, if given.
            max_attempts: Total attempts per analysis (1 disables retries).
            sleep: Sleep function used between attempts, injectable for tests.
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        self._config = config
        self._client = client
        self._telemetry = telemetry or LLMTelemetry()
        self._processor = processor or ResponseProcessor(
            fallback=RuleBasedProvider(telemetry=self._telemetry).as_fallback()
        )
        self._quality_tracker = quality_tracker
        self._rate_limiter = rate_limiter
        self._max_attempts = max_attempts
        self._sleep = sleep

    @property
    def name(self) -> str:
        raise NotImplementedError

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def client(self) -> httpx.Client:
        """Lazy-load the HTTP client.

        Returns:
            The httpx.Client instance
        """
        if self._client is None:
            self._client = httpx.Client(
                timeout=self._config.timeout_seconds,
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=10),
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def is_available(self) -> bool:
        raise NotImplementedError

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Analyze an idea with the model.

        Args:
            request: The idea and goal context.

        Returns:
            The analysis result, attributed to this provider even when the
            response processor had to fall back.

        Raises:
            InvalidRequestError: If the prompt cannot be built.
            AnalysisError: If every attempt fails or the response is unusable.
        """
        start = time.perf_counter()

        try:
            prompt = build_analysis_prompt(request.idea_text, request.context)
        except InvalidRequestError:
            self._record_failure(start, "invalid_request")
            raise

        try:
            data = self._send_with_retries(prompt)
            raw_text, usage = self._extract(data)
        except AnalysisError as e:
            self._record_failure(start, classify_error(e))
            raise

        try:
            processed = self._processor.process(raw_text, request.idea_text, request.context)
        except AnalysisError as e:
            self._record_failure(start, classify_error(e))
            raise

        duration_ms = _elapsed_ms(start)
        self._telemetry.record_request(self.name, True, duration_ms)
        if usage is not None:
            self._telemetry.record_tokens(self.name, usage.input_tokens, usage.output_tokens)

        result = AnalysisResult(
            scores=processed.scores,
            final_score=processed.final_score,
            recommendation=processed.recommendation,
            explanations=dict(processed.explanations),
            provider=self.name,
            duration_ms=duration_ms,
        )
        if self._quality_tracker is not None:
            self._quality_tracker.record(result)
        return result

    def _send_with_retries(self, prompt: str) -> Any:
        for attempt in range(self._max_attempts):
            if self._rate_limiter is not None:
                self._rate_limiter.acquire()
            try:
                return self._send(prompt)
            except AnalysisError as e:
                if attempt == self._max_attempts - 1:
                    if self._max_attempts > 1:
                        logger.warning("%s failed after %d attempts: %s", self.name, self._max_attempts, e)
                    raise
                backoff = float(2**attempt)
                logger.warning(
                    "%s attempt %d/%d failed (%s); retrying in %.0fs",
                    self.name,
                    attempt + 1,
                    self._max_attempts,
                    e,
                    backoff,
                )
                self._sleep(backoff)
        raise AssertionError("unreachable")

    def _send(self, prompt: str) -> Any:
        """Issue one request and return the decoded JSON body."""
        raise NotImplementedError

    def _extract(self, data: Any) -> tuple[str, TokenUsage | None]:
        """Pull the answer text (and token usage, if reported) out of a body."""
        raise NotImplementedError

    def _post_json(self, url: str, payload: dict[str, Any], headers: dict[str, str] | None = None) -> Any:
        """
        POST a JSON payload and decode the JSON answer.

        Raises:
            ProviderTimeoutError: On any httpx timeout.
            NetworkError: On connection, decoding, redirect and other httpx failures.
            RateLimitError: On HTTP 429.
            AuthenticationError: On HTTP 401 or 403.
            ProviderError: On any other non-200 status, or an ``error`` object in the body.
            InvalidResponseError: If the body is not JSON.
        """
        try:
            response = self.client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(f"{self.name} request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"{self.name} request failed: {e}") from e

        _raise_for_status(self.name, response)

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidResponseError(f"{self.name} returned a body that is not JSON") from e

        if isinstance(data, dict) and data.get("error"):
            error = data["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise ProviderError(f"{self.name} API error: {message}")
        return data

    def _record_failure(self, start: float, error_type: ErrorType | str) -> None:
        self._telemetry.record_request(self.name, False, _elapsed_ms(start))
        self._telemetry.record_error(self.name, error_type)


def _raise_for_status(name: str, response: httpx.Response) -> None:
    status = response.status_code
    if status == 200:
        return

    body = response.text[:200]
    if status == 429:
        raise RateLimitError(f"{name} rate limited (status 429): {body}")
    if status in (401, 403):
        raise AuthenticationError(f"{name} rejected credentials (status {status})")
    raise ProviderError(f"{name} API error (status {status}): {body}")


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def read_token_usage(usage: Any, input_key: str, output_key: str) -> TokenUsage | None:
    """
    Read token counts from a ``usage`` object without failing the analysis.

    Missing or null counts read as zero. Anything unusable (not an object,
    negative or non-numeric counts) reports no usage at all.

    Args:
        usage: The ``usage`` value from a response body.
        input_key: Key of the prompt token count.
        output_key: Key of the completion token count.

    Returns:
        The token usage, or None if the body does not report a usable one
    """
    if not isinstance(usage, dict):
        return None
    try:
        return TokenUsage(
            input_tokens=usage.get(input_key) or 0,
            output_tokens=usage.get(output_key) or 0,
        )
    except ValidationError:
        logger.debug("Ignoring malformed token usage: %r", usage)
        return None
