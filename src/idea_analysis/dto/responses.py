"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field

from idea_analysis.models import CacheStats


class ScoresResponse(BaseModel):
    """Sub-score breakdown."""

    mission_alignment: float = Field(..., description="Mission alignment (0-4.0)")
    anti_challenge: float = Field(..., description="Anti-challenge fit (0-3.5)")
    strategic_fit: float = Field(..., description="Strategic fit (0-2.5)")


class AnalysisResponse(BaseModel):
    """Response DTO for an analysis."""

    scores: ScoresResponse
    final_score: float = Field(..., description="Overall score (0-10)", ge=0.0, le=10.0)
    recommendation: str = Field(..., description="Recommendation label")
    explanations: dict[str, str] = Field(default_factory=dict, description="Explanation per category")
    provider: str = Field(..., description="Provider that produced the result")
    duration_ms: float = Field(..., description="Provider call duration in milliseconds")
    from_cache: bool = Field(False, description="Whether the result was served from a cache")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    primary: str | None = Field(None, description="Current primary provider")
    providers: dict[str, bool] = Field(default_factory=dict, description="Availability per provider")


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics, one entry per cached provider."""

    caches: dict[str, CacheStats] = Field(default_factory=dict)


class ClearCacheResponse(BaseModel):
    """Response DTO for clearing caches."""

    success: bool
    cleared: list[str] = Field(default_factory=list, description="Cached providers that were cleared")
    message: str


class QualityResponse(BaseModel):
    """Response DTO for aggregate quality metrics."""

    records: int = Field(..., description="Number of recorded results", ge=0)
    completeness: float = Field(..., ge=0.0, le=1.0)
    consistency: float = Field(..., ge=0.0, le=1.0)
    confidence: float = Field(..., ge=0.0, le=1.0)
