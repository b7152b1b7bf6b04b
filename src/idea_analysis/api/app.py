from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from idea_analysis.api.dependencies import HandlerDep, Services, ServicesDep, make_lifespan
from idea_analysis.config import Settings, settings
from idea_analysis.dto import (
    AnalysisResponse,
    AnalyzeRequest,
    CacheStatsResponse,
    ClearCacheResponse,
    HealthCheckResponse,
    QualityResponse,
)

API_TITLE = "Idea Analysis API"
API_VERSION = "0.1.0"
API_DESCRIPTION = "Idea analysis with Ollama, hosted models and a rule-based fallback"


def create_app(services: Services | None = None, app_settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        services: Pre-built services; built from settings at startup when omitted.
        app_settings: Settings override. Defaults to the global settings.

    Returns:
        The configured application.
    """
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=make_lifespan(services=services, settings=app_settings),
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def root(services: ServicesDep) -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": API_TITLE,
            "version": API_VERSION,
            "description": API_DESCRIPTION,
            "providers": [provider.name for provider in services.manager.providers],
            "endpoints": {
                "analyze": "/analyze",
                "cache": "/cache/stats",
                "quality": "/quality",
                "metrics": "/metrics",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    def health(handler: HandlerDep) -> HealthCheckResponse:
        """Provider availability."""
        return handler.health_check()

    @app.post("/analyze", response_model=AnalysisResponse)
    def analyze(request: AnalyzeRequest, handler: HandlerDep) -> AnalysisResponse:
        """
        Analyze an idea against the caller's goals.

        Args:
            request: Idea text, optional goal context and optional provider name.

        Returns:
            Scores, recommendation and explanations.
        """
        return handler.analyze(request)

    @app.get("/cache/stats", response_model=CacheStatsResponse)
    def cache_stats(handler: HandlerDep) -> CacheStatsResponse:
        """Statistics for every cached provider."""
        return handler.get_cache_stats()

    @app.delete("/cache", response_model=ClearCacheResponse)
    def clear_cache(handler: HandlerDep) -> ClearCacheResponse:
        """Clear every provider cache."""
        return handler.clear_cache()

    @app.get("/quality", response_model=QualityResponse)
    def quality(handler: HandlerDep) -> QualityResponse:
        """Average quality of recorded results."""
        return handler.get_quality()

    @app.get("/metrics", response_model=dict[str, Any])
    def metrics(handler: HandlerDep) -> dict[str, Any]:
        """Telemetry counters, latency histograms and per-provider stats."""
        return handler.get_metrics()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "idea_analysis.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
