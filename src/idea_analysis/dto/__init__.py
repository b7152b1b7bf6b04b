"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import AnalyzeRequest, GoalContextPayload
from .responses import (
    AnalysisResponse,
    CacheStatsResponse,
    ClearCacheResponse,
    HealthCheckResponse,
    QualityResponse,
    ScoresResponse,
)

__all__ = [
    "AnalyzeRequest",
    "GoalContextPayload",
    "AnalysisResponse",
    "ScoresResponse",
    "HealthCheckResponse",
    "CacheStatsResponse",
    "ClearCacheResponse",
    "QualityResponse",
]
