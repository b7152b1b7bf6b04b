"""Analysis request and result domain entities."""

from dataclasses import dataclass, field, replace

from .goal_context import GoalContext

MAX_MISSION_ALIGNMENT = 4.0
MAX_ANTI_CHALLENGE = 3.5
MAX_STRATEGIC_FIT = 2.5
MAX_FINAL_SCORE = 10.0

PRIORITIZE_NOW = "PRIORITIZE NOW"
GOOD_ALIGNMENT = "GOOD ALIGNMENT"
CONSIDER_LATER = "CONSIDER LATER"
AVOID_FOR_NOW = "AVOID FOR NOW"

RECOMMENDATIONS = frozenset({PRIORITIZE_NOW, GOOD_ALIGNMENT, CONSIDER_LATER, AVOID_FOR_NOW})


def determine_recommendation(final_score: float) -> str:
    """Map a final score onto the recommendation label set."""
    if final_score >= 8.5:
        return PRIORITIZE_NOW
    if final_score >= 7.0:
        return GOOD_ALIGNMENT
    if final_score >= 5.0:
        return CONSIDER_LATER
    return AVOID_FOR_NOW


@dataclass(frozen=True)
class AnalysisRequest:
    """Input for a single analysis call.

    Attributes:
        idea_text: The idea to analyze (must not be empty)
        context: The caller's goal context; required by the rule-based backend
    """

    idea_text: str
    context: GoalContext | None = None

    def __post_init__(self) -> None:
        if not self.idea_text or not self.idea_text.strip():
            raise ValueError("idea_text must not be empty")


@dataclass(frozen=True)
class ScoreBreakdown:
    """The three bounded sub-scores of an analysis.

    Bounds (enforced by ``ScoreValidator``, not by construction):
        mission_alignment: [0, 4.0]
        anti_challenge: [0, 3.5]
        strategic_fit: [0, 2.5]
    """

    mission_alignment: float = 0.0
    anti_challenge: float = 0.0
    strategic_fit: float = 0.0

    @property
    def total(self) -> float:
        """Sum of the three sub-scores."""
        return self.mission_alignment + self.anti_challenge + self.strategic_fit

    @property
    def has_scores(self) -> bool:
        """Whether any sub-score is non-zero."""
        return self.mission_alignment > 0 or self.anti_challenge > 0 or self.strategic_fit > 0


@dataclass(frozen=True)
class AnalysisResult:
    """Domain entity for a completed analysis.

    Created once per successful backend call. Callers that need a variant
    (for example, a cache hit) clone it with ``dataclasses.replace`` or
    ``with_cache_flag``.

    Attributes:
        scores: Sub-score breakdown
        final_score: Overall score in [0, 10]
        recommendation: One of ``RECOMMENDATIONS``
        explanations: Explanation text per category, never None
        provider: Name of the backend that produced the result
        duration_ms: Wall time of the backend call
        from_cache: Whether the result was served from a cache
    """

    scores: ScoreBreakdown
    final_score: float
    recommendation: str
    explanations: dict[str, str] = field(default_factory=dict)
    provider: str = ""
    duration_ms: float = 0.0
    from_cache: bool = False

    def with_cache_flag(self) -> "AnalysisResult":
        """Return a copy marked as served from cache.

        The explanation mapping is copied too, so mutating the clone never
        reaches the original.
        """
        return replace(self, from_cache=True, explanations=dict(self.explanations))
