"""Claude-style messages API provider."""

import time
from collections.abc import Callable
from typing import Any

import httpx

from idea_analysis.config import ProviderConfig, get_settings
from idea_analysis.errors import InvalidResponseError
from idea_analysis.models import TokenUsage
from idea_analysis.prompts import split_system_prompt
from idea_analysis.repositories.base_http_provider import BaseHTTPProvider, read_token_usage
from idea_analysis.services.quality_tracker import QualityTracker
from idea_analysis.services.response_processor import ResponseProcessor
from idea_analysis.services.telemetry import LLMTelemetry
from idea_analysis.utils.rate_limiter import TokenBucket

ANTHROPIC_VERSION = "2023-06-01"
MAX_ATTEMPTS = 3
MAX_TOKENS = 2000
TEMPERATURE = 0.7


class ClaudeProvider(BaseHTTPProvider):
    """Messages API backend.

    The messages API takes the system prompt separately, so the analysis
    prompt is split at its ``TASK:`` marker: the background goes to
    ``system``, the task and response format to the user message.
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
    def create(cls, api_key: str | None = None, model: str | None = None, **kwargs: Any) -> "ClaudeProvider":
        """Factory method to create ClaudeProvider from settings.

        Args:
            api_key: API key. If None, uses ``ANTHROPIC_API_KEY``.
            model: Model name. If None, uses ``CLAUDE_MODEL``.
            **kwargs: Passed through to the constructor.

        Returns:
            Configured ClaudeProvider
        """
        defaults = get_settings().claude_config
        config = ProviderConfig(
            base_url=defaults.base_url,
            model=model or defaults.model,
            timeout_seconds=defaults.timeout_seconds,
            api_key=api_key or defaults.api_key,
        )
        return cls(config, **kwargs)

    @property
    def name(self) -> str:
        return "claude"

    def is_available(self) -> bool:
        return self._config.has_credentials

    def _send(self, prompt: str) -> Any:
        system, user = split_system_prompt(prompt)
        payload: dict[str, Any] = {
            "model": self._config.model,
            "messages": [{"role": "user", "content": user}],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }
        if system:
            payload["system"] = system

        headers = {
            "x-api-key": self._config.api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
        }
        return self._post_json(self._config.base_url, payload, headers=headers)

    def _extract(self, data: Any) -> tuple[str, TokenUsage | None]:
        content = data.get("content") if isinstance(data, dict) else None
        if not isinstance(content, list) or not content:
            raise InvalidResponseError("no response content from Claude")

        text = content[0].get("text") if isinstance(content[0], dict) else None
        if not isinstance(text, str) or not text:
            raise InvalidResponseError("empty text block in Claude response")

        return text, read_token_usage(data.get("usage"), "input_tokens", "output_tokens")
