"""Provider registry with primary selection, statistics and health checks."""

import logging
import threading
import time
from collections.abc import Iterable
from dataclasses import dataclass

from idea_analysis.entities import AnalysisRequest, AnalysisResult
from idea_analysis.errors import AllProvidersFailedError, AnalysisError, NoProvidersAvailableError
from idea_analysis.models import ProviderStats
from idea_analysis.protocols import AnalysisProvider
from idea_analysis.services.fallback_chain import FallbackChain
from idea_analysis.services.telemetry import LLMTelemetry

logger = logging.getLogger(__name__)

DEFAULT_HEALTH_CHECK_INTERVAL = 30.0


@dataclass(frozen=True)
class HealthStatus:
    """Result of the most recent availability check for a provider."""

    available: bool
    checked_at: float


class ProviderManager:
    """Routes analyses to a primary provider with fallback to the rest.

    Providers are kept in registration order, which is also the fallback
    order. The first available provider becomes primary unless
    ``set_primary`` picks one explicitly.

    Example:
        ```python
        manager = ProviderManager([OllamaProvider.create(), RuleBasedProvider()])
        stop = threading.Event()
        manager.start_health_watch(interval=30.0, stop_event=stop)
        result = manager.analyze(request)
        stop.set()
        ```
    """

    def __init__(
        self,
        providers: Iterable[AnalysisProvider] = (),
        fallback_enabled: bool = True,
        telemetry: LLMTelemetry | None = None,
    ) -> None:
        self._providers: list[AnalysisProvider] = []
        self._stats: dict[str, ProviderStats] = {}
        self._health: dict[str, HealthStatus] = {}
        self._primary: AnalysisProvider | None = None
        self._fallback_enabled = fallback_enabled
        self._telemetry = telemetry or LLMTelemetry()
        self._lock = threading.RLock()

        for provider in providers:
            self.register(provider)
        self.select_primary()

    def register(self, provider: AnalysisProvider) -> None:
        """Append a provider and check it once."""
        available = provider.is_available()
        with self._lock:
            self._providers.append(provider)
            self._stats[provider.name] = ProviderStats(name=provider.name)
            self._health[provider.name] = HealthStatus(available=available, checked_at=time.time())
        logger.debug("Registered provider %s (available=%s)", provider.name, available)

    def select_primary(self) -> AnalysisProvider | None:
        """Make the first available provider primary and return it."""
        with self._lock:
            providers = list(self._providers)

        for provider in providers:
            if provider.is_available():
                with self._lock:
                    self._primary = provider
                logger.info("Selected primary provider: %s", provider.name)
                return provider

        with self._lock:
            self._primary = None
        logger.warning("No available provider to select as primary")
        return None

    @property
    def primary(self) -> AnalysisProvider | None:
        with self._lock:
            return self._primary

    @property
    def providers(self) -> list[AnalysisProvider]:
        with self._lock:
            return list(self._providers)

    def set_primary(self, name: str) -> None:
        """
        Make a registered provider primary.

        Raises:
            KeyError: If no provider with that name is registered.
            NoProvidersAvailableError: If the provider is not available.
        """
        provider = self.get(name)
        if not provider.is_available():
            raise NoProvidersAvailableError(f"provider not available: {name}")
        with self._lock:
            self._primary = provider
        logger.info("Primary provider set to %s", name)

    def get(self, name: str) -> AnalysisProvider:
        """Look up a registered provider by name.

        Raises:
            KeyError: If no provider with that name is registered.
        """
        with self._lock:
            for provider in self._providers:
                if provider.name == name:
                    return provider
        raise KeyError(f"provider not found: {name}")

    @property
    def fallback_enabled(self) -> bool:
        with self._lock:
            return self._fallback_enabled

    def enable_fallback(self, enabled: bool) -> None:
        with self._lock:
            self._fallback_enabled = enabled

    def available_providers(self) -> list[AnalysisProvider]:
        return [provider for provider in self.providers if provider.is_available()]

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Analyze with the primary provider, then fall back to the others.

        Raises:
            AllProvidersFailedError: If the primary and every fallback failed.
            NoProvidersAvailableError: If nothing could be tried at all.
        """
        with self._lock:
            primary = self._primary
            fallback_enabled = self._fallback_enabled
            others = [p for p in self._providers if primary is None or p.name != primary.name]

        if not fallback_enabled:
            if primary is None:
                raise NoProvidersAvailableError("no primary provider and fallback disabled")
            try:
                return self._analyze_with(primary, request)
            except AnalysisError as e:
                raise AllProvidersFailedError(e) from e

        ordered = [primary, *others] if primary is not None else others
        chain = FallbackChain([_TrackedProvider(self, p) for p in ordered], telemetry=self._telemetry)
        return chain.analyze(request)

    def _analyze_with(self, provider: AnalysisProvider, request: AnalysisRequest) -> AnalysisResult:
        start = time.perf_counter()
        try:
            result = provider.analyze(request)
        except AnalysisError as e:
            self._stats_for(provider.name).record_failure((time.perf_counter() - start) * 1000, e)
            raise
        self._stats_for(provider.name).record_success((time.perf_counter() - start) * 1000)
        return result

    def _stats_for(self, name: str) -> ProviderStats:
        with self._lock:
            stats = self._stats.get(name)
            if stats is None:
                stats = self._stats[name] = ProviderStats(name=name)
            return stats

    def health_check(self) -> dict[str, bool]:
        """Check every provider and refresh the health map."""
        status: dict[str, bool] = {}
        for provider in self.providers:
            available = provider.is_available()
            status[provider.name] = available
            with self._lock:
                self._health[provider.name] = HealthStatus(available=available, checked_at=time.time())
        return status

    def health(self, name: str) -> HealthStatus:
        """Most recent health check result for a provider.

        Raises:
            KeyError: If no provider with that name is registered.
        """
        with self._lock:
            return self._health[name]

    def start_health_watch(
        self,
        interval: float = DEFAULT_HEALTH_CHECK_INTERVAL,
        stop_event: threading.Event | None = None,
    ) -> threading.Thread:
        """
        Run ``health_check`` every ``interval`` seconds on a daemon thread.

        Args:
            interval: Seconds between health checks.
            stop_event: Set it to stop the loop. A fresh event is used if omitted.

        Returns:
            The started thread.
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        stop_event = stop_event or threading.Event()

        def watch() -> None:
            while not stop_event.wait(interval):
                try:
                    self.health_check()
                except Exception:
                    logger.exception("Periodic health check failed")

        thread = threading.Thread(target=watch, name="provider-health-watch", daemon=True)
        thread.start()
        return thread

    def stats(self) -> list[dict[str, float | int | str | bool | None]]:
        """Per-provider statistics in registration order, with current health."""
        rows = []
        for provider in self.providers:
            with self._lock:
                row = self._stats_for(provider.name).to_dict()
                health = self._health.get(provider.name)
            row["available"] = health.available if health is not None else False
            rows.append(row)
        return rows


class _TrackedProvider:
    """Adapter that records manager statistics around a member's calls."""

    def __init__(self, manager: ProviderManager, provider: AnalysisProvider) -> None:
        self._manager = manager
        self._provider = provider

    @property
    def name(self) -> str:
        return self._provider.name

    def is_available(self) -> bool:
        return self._provider.is_available()

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        return self._manager._analyze_with(self._provider, request)
