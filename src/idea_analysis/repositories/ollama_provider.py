"""Ollama-based analysis provider.

Uses Ollama's local API to run a chat model. Ollama serves models locally,
so there is no API key, no rate limit and no retry: a local failure is
reported immediately and the fallback chain moves on.

Requirements:
    - Ollama installed: https://ollama.com
    - Model pulled: `ollama pull llama2`
    - Ollama running: `ollama serve` (usually runs automatically)
"""

from typing import Any

import httpx

from idea_analysis.config import ProviderConfig, get_settings
from idea_analysis.errors import InvalidResponseError
from idea_analysis.models import TokenUsage
from idea_analysis.repositories.base_http_provider import BaseHTTPProvider

HEALTH_CHECK_TIMEOUT = 2.0


class OllamaProvider(BaseHTTPProvider):
    """Ollama-based implementation of the AnalysisProvider protocol.

    The generate endpoint is ``{base_url}/api/generate``; availability is
    checked with ``{base_url}/api/tags``.

    Example:
        ```python
        provider = OllamaProvider.create(model="llama2", base_url="http://localhost:11434")
        if provider.is_available():
            result = provider.analyze(request)
        ```
    """

    @classmethod
    def create(
        cls,
        model: str | None = None,
        base_url: str | None = None,
        **kwargs: Any,
    ) -> "OllamaProvider":
        """Factory method to create OllamaProvider with defaults.

        Args:
            model: Model name. If None, uses settings.
            base_url: Ollama API URL. If None, uses settings.
            **kwargs: Passed through to the constructor (telemetry, client, ...).

        Returns:
            Configured OllamaProvider
        """
        defaults = get_settings().ollama_config
        config = ProviderConfig(
            base_url=base_url or defaults.base_url,
            model=model or defaults.model,
            timeout_seconds=defaults.timeout_seconds,
        )
        return cls(config, **kwargs)

    @property
    def name(self) -> str:
        return "ollama"

    @property
    def base_url(self) -> str:
        return self._config.base_url.rstrip("/")

    def is_available(self) -> bool:
        """Check if Ollama is running.

        Returns:
            True if ``/api/tags`` answers 200 within two seconds, False otherwise
        """
        try:
            response = self.client.get(f"{self.base_url}/api/tags", timeout=HEALTH_CHECK_TIMEOUT)
        except httpx.HTTPError:
            return False
        return response.status_code == 200

    def _send(self, prompt: str) -> Any:
        payload = {
            "model": self._config.model,
            "prompt": prompt,
            "stream": False,
        }
        return self._post_json(f"{self.base_url}/api/generate", payload)

    def _extract(self, data: Any) -> tuple[str, TokenUsage | None]:
        # Ollama does not report token counts.
        if not isinstance(data, dict) or not isinstance(data.get("response"), str):
            raise InvalidResponseError(f"unexpected Ollama response format: {str(data)[:200]}")
        return data["response"], None
