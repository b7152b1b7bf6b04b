"""Domain entities for internal representation.

These are plain dataclasses used by services and repositories. They are NOT
used for API contracts - use DTOs from the dto package for that.

Entities should have:
- No JSON serialization logic
- No Pydantic validation
- No external dependencies
"""

from .analysis import (
    AVOID_FOR_NOW,
    CONSIDER_LATER,
    GOOD_ALIGNMENT,
    MAX_ANTI_CHALLENGE,
    MAX_FINAL_SCORE,
    MAX_MISSION_ALIGNMENT,
    MAX_STRATEGIC_FIT,
    PRIORITIZE_NOW,
    RECOMMENDATIONS,
    AnalysisRequest,
    AnalysisResult,
    ScoreBreakdown,
    determine_recommendation,
)
from .cache_entry import CacheEntry
from .goal_context import GoalContext
from .quality import QualityMetrics, QualityRecord

__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "ScoreBreakdown",
    "GoalContext",
    "CacheEntry",
    "QualityMetrics",
    "QualityRecord",
    "RECOMMENDATIONS",
    "PRIORITIZE_NOW",
    "GOOD_ALIGNMENT",
    "CONSIDER_LATER",
    "AVOID_FOR_NOW",
    "MAX_MISSION_ALIGNMENT",
    "MAX_ANTI_CHALLENGE",
    "MAX_STRATEGIC_FIT",
    "MAX_FINAL_SCORE",
    "determine_recommendation",
]
