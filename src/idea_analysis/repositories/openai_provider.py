"""OpenAI-style chat completions provider."""

import time
from collections.abc import Callable
from typing import Any

import httpx

from idea_analysis.config import ProviderConfig, get_settings
from idea_analysis.errors import InvalidResponseError
from idea_analysis.models import TokenUsage
from idea_analysis.prompts import SYSTEM_PROMPT
from idea_analysis.repositories.base_http_provider import BaseHTTPProvider, read_token_usage
from idea_analysis.services.quality_tracker import QualityTracker
from idea_analysis.services.response_processor import ResponseProcessor
from idea_analysis.services.telemetry import LLMTelemetry
from idea_analysis.utils.rate_limiter import TokenBucket

MAX_ATTEMPTS = 3
MAX_TOKENS = 1000
TEMPERATURE = 0.7


class OpenAIProvider(BaseHTTPProvider):
    """Chat completions backend with bearer authentication.

    Up to three attempts per analysis, 1s then 2s apart, each gated by a
    token bucket (3 requests/second, burst 5).

    Example:
        ```python
        provider = OpenAIProvider.create(api_key="sk-...", model="gpt-4o-mini")
        result = provider.analyze(request)
        ```
    """

    def __init__(
        self,
        config: ProviderConfig,
        client: httpx.Client | None = None,
        processor: ResponseProcessor | None = None,
        telemetry: LLMTelemetry | None = None,
        quality_tracker: QualityTracker | None = None,
        rate_limiter: TokenBucket | None = None,
        max_attempts: int = MAX_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(
            config,
            client=client,
            processor=processor,
            telemetry=telemetry,
            quality_tracker=quality_tracker,
            rate_limiter=rate_limiter or TokenBucket(sleep=sleep),
            max_attempts=max_attempts,
            sleep=sleep,
        )

    @classmethod
    def create(cls, api_key: str | None = None, model: str | None = None, **kwargs: Any) -> "OpenAIProvider":
        """Factory method to create OpenAIProvider from settings.

        Args:
            api_key: API key. If None, uses ``OPENAI_API_KEY``.
            model: Model name. If None, uses ``OPENAI_MODEL``.
            **kwargs: Passed through to the constructor.

        Returns:
            Configured OpenAIProvider
        """
        defaults = get_settings().openai_config
        config = ProviderConfig(
            base_url=defaults.base_url,
            model=model or defaults.model,
            timeout_seconds=defaults.timeout_seconds,
            api_key=api_key or defaults.api_key,
        )
        return cls(config, **kwargs)

    @property
    def name(self) -> str:
        return f"openai_{self._config.model}"

    def is_available(self) -> bool:
        return self._config.has_credentials

    def _send(self, prompt: str) -> Any:
        payload = {
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }
        headers = {"Authorization": f"Bearer {self._config.api_key}"}
        return self._post_json(self._config.base_url, payload, headers=headers)

    def _extract(self, data: Any) -> tuple[str, TokenUsage | None]:
        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            raise InvalidResponseError("no choices in OpenAI response")

        try:
            content = choices[0]["message"]["content"]
        except (KeyError, TypeError, IndexError) as e:
            raise InvalidResponseError("malformed choice in OpenAI response") from e
        if not isinstance(content, str) or not content:
            raise InvalidResponseError("empty content in OpenAI response")

        return content, read_token_usage(data.get("usage"), "prompt_tokens", "completion_tokens")
