"""HTTP handlers for analysis operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import logging
from typing import Any

from fastapi import HTTPException, status

from idea_analysis.dto import (
    AnalysisResponse,
    AnalyzeRequest,
    CacheStatsResponse,
    ClearCacheResponse,
    HealthCheckResponse,
    QualityResponse,
    ScoresResponse,
)
from idea_analysis.entities import AnalysisRequest, AnalysisResult
from idea_analysis.errors import (
    AllProvidersFailedError,
    AnalysisError,
    InvalidRequestError,
    NoProvidersAvailableError,
)
from idea_analysis.services import CachedProvider, MetricsCollector, ProviderManager, QualityTracker

logger = logging.getLogger(__name__)


class AnalysisHandler:
    """HTTP handlers for analysis operations.

    This handler delegates business logic to ProviderManager and handles
    HTTP-specific concerns like:
    - Converting entities to DTOs
    - Mapping analysis errors onto status codes
    - Collecting cache, quality and metrics views

    Handlers are synchronous: FastAPI runs them in its threadpool, so the
    blocking provider calls never stall the event loop.

    Example:
        ```python
        handler = AnalysisHandler(manager=manager, quality_tracker=tracker, metrics=collector)

        @app.post("/analyze", response_model=AnalysisResponse)
        def analyze(request: AnalyzeRequest):
            return handler.analyze(request)
        ```
    """

    def __init__(
        self,
        manager: ProviderManager,
        quality_tracker: QualityTracker,
        metrics: MetricsCollector,
    ) -> None:
        self._manager = manager
        self._quality = quality_tracker
        self._metrics = metrics

    def analyze(self, request: AnalyzeRequest) -> AnalysisResponse:
        """Handle POST /analyze requests.

        Raises:
            HTTPException: 400 for unusable requests, 404 for an unknown
                provider, 503 when no provider could answer, 500 otherwise.
        """
        try:
            analysis_request = AnalysisRequest(
                idea_text=request.idea,
                context=request.context.to_entity() if request.context is not None else None,
            )
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

        try:
            if request.provider:
                result = self._manager.get(request.provider).analyze(analysis_request)
            else:
                result = self._manager.analyze(analysis_request)
        except KeyError as e:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown provider: {request.provider}",
            ) from e
        except AnalysisError as e:
            raise _to_http_error(e) from e

        return _to_response(result)

    def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        providers = self._manager.health_check()
        primary = self._manager.primary
        return HealthCheckResponse(
            status="healthy" if any(providers.values()) else "unhealthy",
            primary=primary.name if primary is not None else None,
            providers=providers,
        )

    def get_cache_stats(self) -> CacheStatsResponse:
        """Handle GET /cache/stats requests."""
        return CacheStatsResponse(caches={p.name: p.cache_stats() for p in self._cached_providers()})

    def clear_cache(self) -> ClearCacheResponse:
        """Handle DELETE /cache requests."""
        cleared = []
        for provider in self._cached_providers():
            provider.clear_cache()
            cleared.append(provider.name)
        logger.info("Cleared %d provider cache(s)", len(cleared))
        return ClearCacheResponse(success=True, cleared=cleared, message="Cache cleared successfully")

    def get_quality(self) -> QualityResponse:
        """Handle GET /quality requests."""
        average = self._quality.average()
        return QualityResponse(
            records=len(self._quality),
            completeness=average.completeness,
            consistency=average.consistency,
            confidence=average.confidence,
        )

    def get_metrics(self) -> dict[str, Any]:
        """Handle GET /metrics requests."""
        return {"metrics": self._metrics.to_dict(), "providers": self._manager.stats()}

    def _cached_providers(self) -> list[CachedProvider]:
        return [p for p in self._manager.providers if isinstance(p, CachedProvider)]


def _to_http_error(error: AnalysisError) -> HTTPException:
    if isinstance(error, InvalidRequestError) or (
        isinstance(error, AllProvidersFailedError) and isinstance(error.last_error, InvalidRequestError)
    ):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, (NoProvidersAvailableError, AllProvidersFailedError)):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))

    logger.error("Analysis failed: %s", error)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Analysis failed: {error}",
    )


def _to_response(result: AnalysisResult) -> AnalysisResponse:
    return AnalysisResponse(
        scores=ScoresResponse(
            mission_alignment=result.scores.mission_alignment,
            anti_challenge=result.scores.anti_challenge,
            strategic_fit=result.scores.strategic_fit,
        ),
        final_score=result.final_score,
        recommendation=result.recommendation,
        explanations=result.explanations,
        provider=result.provider,
        duration_ms=result.duration_ms,
        from_cache=result.from_cache,
    )
