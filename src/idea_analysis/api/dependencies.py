"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services built (or injected) during lifespan and stored in app.state
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
import threading
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from idea_analysis.config import Settings, get_settings
from idea_analysis.handlers import AnalysisHandler
from idea_analysis.services import (
    FallbackChain,
    LLMTelemetry,
    MetricsCollector,
    ProviderManager,
    QualityTracker,
    get_metrics_collector,
)

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the HTTP layer needs, wired together."""

    manager: ProviderManager
    quality_tracker: QualityTracker
    metrics: MetricsCollector

    @classmethod
    def from_settings(cls, settings: Settings) -> "Services":
        """Factory method wiring the default chain from settings.

        Args:
            settings: Application settings.

        Returns:
            Services sharing one telemetry bridge and one quality tracker
        """
        metrics = get_metrics_collector()
        telemetry = LLMTelemetry(metrics)
        quality_tracker = QualityTracker()
        chain = FallbackChain.create_default(settings, telemetry=telemetry, quality_tracker=quality_tracker)
        manager = ProviderManager(chain.providers, telemetry=telemetry)
        return cls(manager=manager, quality_tracker=quality_tracker, metrics=metrics)


def get_services(request: Request) -> Services:
    """Dependency injection for Services from app.state.

    Raises:
        RuntimeError: If services are not initialized
    """
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("Services not initialized. Check lifespan setup.")
    return services


def get_handler(request: Request) -> AnalysisHandler:
    """Dependency injection for AnalysisHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The AnalysisHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "analysis_handler", None)
    if handler is None:
        raise RuntimeError("AnalysisHandler not initialized. Check lifespan setup.")
    return handler


def make_lifespan(
    services: Services | None = None,
    settings: Settings | None = None,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Build a lifespan that installs services into app.state.

    Args:
        services: Pre-built services (tests pass fakes here). Built from
            settings when omitted.
        settings: Settings to use. Defaults to ``get_settings()``.

    Returns:
        A lifespan context manager factory for ``FastAPI(lifespan=...)``
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        resolved_settings = settings or get_settings()
        logging.basicConfig(
            level=resolved_settings.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        resolved = services or Services.from_settings(resolved_settings)
        app.state.services = resolved
        app.state.analysis_handler = AnalysisHandler(
            manager=resolved.manager,
            quality_tracker=resolved.quality_tracker,
            metrics=resolved.metrics,
        )

        stop_health_watch = threading.Event()
        resolved.manager.start_health_watch(stop_event=stop_health_watch)

        primary = resolved.manager.primary
        logger.info("Analysis service initialized (primary provider: %s)", primary.name if primary else "none")
        logger.info("Cache enabled: %s", resolved_settings.cache_enabled)

        yield

        stop_health_watch.set()
        del app.state.analysis_handler
        del app.state.services
        logger.info("Analysis service shut down")

    return lifespan


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[AnalysisHandler, Depends(get_handler)]
ServicesDep = Annotated[Services, Depends(get_services)]
