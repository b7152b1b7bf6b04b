"""Caching decorator for analysis providers."""

import logging

from idea_analysis.cache import SimilarityCache
from idea_analysis.entities import AnalysisRequest, AnalysisResult
from idea_analysis.models import CacheStats
from idea_analysis.protocols import AnalysisProvider, ResultCache
from idea_analysis.services.telemetry import LLMTelemetry

logger = logging.getLogger(__name__)


class CachedProvider:
    """Wraps a provider with a similarity cache.

    Satisfies the ``AnalysisProvider`` protocol itself, so it can sit
    anywhere a plain provider can (including inside a ``FallbackChain``).

    A hit returns a clone flagged ``from_cache=True``; the stored result is
    never mutated. Only successful results are stored.

    Example:
        ```python
        provider = CachedProvider(OllamaProvider.create())
        first = provider.analyze(request)    # calls Ollama
        second = provider.analyze(request)   # served from cache
        assert second.from_cache
        ```
    """

    def __init__(
        self,
        provider: AnalysisProvider,
        cache: ResultCache[AnalysisResult] | None = None,
        telemetry: LLMTelemetry | None = None,
    ) -> None:
        """Initialize the wrapper.

        Args:
            provider: The provider to wrap (required).
            cache: Any ``ResultCache``. Defaults to a fresh ``SimilarityCache``.
            telemetry: Telemetry bridge. Defaults to the process-wide collector.
        """
        self._provider = provider
        self._cache: ResultCache[AnalysisResult] = cache if cache is not None else SimilarityCache()
        self._telemetry = telemetry or LLMTelemetry()

    @property
    def name(self) -> str:
        return f"{self._provider.name}_cached"

    @property
    def provider(self) -> AnalysisProvider:
        """Get the wrapped provider (for testing)."""
        return self._provider

    def is_available(self) -> bool:
        return self._provider.is_available()

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Serve from cache when possible, otherwise delegate and store."""
        cached, found = self._cache.get(request.idea_text)
        if found and cached is not None:
            self._telemetry.record_cache_hit(True)
            logger.debug("Cache hit for %s", self.name)
            return cached.with_cache_flag()

        self._telemetry.record_cache_hit(False)
        result = self._provider.analyze(request)
        self._cache.store(request.idea_text, result)
        return result

    def cache_stats(self) -> CacheStats:
        """Get statistics of the underlying cache."""
        return self._cache.stats()

    def clear_cache(self) -> None:
        """Remove every cached result."""
        self._cache.clear()
