"""Ordered fallback across analysis providers."""

import logging
from collections.abc import Sequence

from idea_analysis.cache import SimilarityCache
from idea_analysis.config import Settings, get_settings
from idea_analysis.entities import AnalysisRequest, AnalysisResult
from idea_analysis.errors import AllProvidersFailedError, AnalysisError, NoProvidersAvailableError
from idea_analysis.protocols import AnalysisProvider
from idea_analysis.services.cached_provider import CachedProvider
from idea_analysis.services.quality_tracker import QualityTracker
from idea_analysis.services.telemetry import LLMTelemetry

logger = logging.getLogger(__name__)


class FallbackChain:
    """Tries providers in order until one succeeds.

    Satisfies the ``AnalysisProvider`` protocol, so chains can be cached or
    nested like any other provider. Members are called sequentially; there
    is no aggregate deadline.

    Example:
        ```python
        chain = FallbackChain([OllamaProvider.create(), RuleBasedProvider()])
        result = chain.analyze(request)
        print(result.provider)  # "ollama" or "rule_based"
        ```
    """

    def __init__(self, providers: Sequence[AnalysisProvider], telemetry: LLMTelemetry | None = None) -> None:
        """Initialize the chain.

        Args:
            providers: Members in priority order. The chain holds references
                only; it does not own or close them.
            telemetry: Telemetry bridge for fallback transitions.
        """
        self._providers = list(providers)
        self._telemetry = telemetry or LLMTelemetry()

    @classmethod
    def create_default(
        cls,
        settings: Settings | None = None,
        telemetry: LLMTelemetry | None = None,
        quality_tracker: QualityTracker | None = None,
    ) -> "FallbackChain":
        """Factory method for the standard chain: Ollama, Claude, OpenAI, rule-based.

        Networked members are wrapped in ``CachedProvider`` (one cache each)
        when caching is enabled. The rule-based member is never cached.

        Args:
            settings: Application settings. If None, uses ``get_settings()``.
            telemetry: Shared telemetry bridge for every member.
            quality_tracker: Shared quality tracker for the networked members.

        Returns:
            Configured FallbackChain
        """
        from idea_analysis.repositories import ClaudeProvider, OllamaProvider, OpenAIProvider, RuleBasedProvider

        settings = settings or get_settings()
        telemetry = telemetry or LLMTelemetry()

        networked: list[AnalysisProvider] = [
            OllamaProvider(settings.ollama_config, telemetry=telemetry, quality_tracker=quality_tracker),
            ClaudeProvider(settings.claude_config, telemetry=telemetry, quality_tracker=quality_tracker),
            OpenAIProvider(settings.openai_config, telemetry=telemetry, quality_tracker=quality_tracker),
        ]
        if settings.cache_enabled:
            networked = [
                CachedProvider(provider, cache=SimilarityCache.from_settings(settings), telemetry=telemetry)
                for provider in networked
            ]

        return cls([*networked, RuleBasedProvider(telemetry=telemetry)], telemetry=telemetry)

    @property
    def name(self) -> str:
        return "fallback"

    @property
    def providers(self) -> list[AnalysisProvider]:
        """Members in priority order (a copy)."""
        return list(self._providers)

    def is_available(self) -> bool:
        return any(provider.is_available() for provider in self._providers)

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Return the first successful member result.

        Unavailable members are skipped without being called.

        Raises:
            AllProvidersFailedError: If every attempted member failed. The last
                failure is its ``__cause__``.
            NoProvidersAvailableError: If no member was available to try.
        """
        last_error: AnalysisError | None = None
        last_failed: str | None = None

        for provider in self._providers:
            if not provider.is_available():
                logger.debug("Skipping unavailable provider %s", provider.name)
                continue

            if last_failed is not None:
                logger.info("Falling back from %s to %s", last_failed, provider.name)
                self._telemetry.record_fallback(last_failed, provider.name)

            try:
                return provider.analyze(request)
            except AnalysisError as e:
                logger.warning("Provider %s failed: %s", provider.name, e)
                last_error = e
                last_failed = provider.name

        if last_error is not None:
            raise AllProvidersFailedError(last_error) from last_error
        raise NoProvidersAvailableError("no providers available")
