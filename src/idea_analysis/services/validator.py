"""Bounds and label validation for processed results."""

from dataclasses import dataclass, field

from idea_analysis.entities import (
    MAX_ANTI_CHALLENGE,
    MAX_FINAL_SCORE,
    MAX_MISSION_ALIGNMENT,
    MAX_STRATEGIC_FIT,
    RECOMMENDATIONS,
    ScoreBreakdown,
)
from idea_analysis.errors import InvalidResponseError


class ScoreValidationError(InvalidResponseError):
    """A processed result violates a score bound or uses an unknown label."""


@dataclass(frozen=True)
class ProcessedResult:
    """A model answer turned into scores, before it becomes an AnalysisResult.

    Attributes:
        scores: Sub-score breakdown
        final_score: Overall score
        recommendation: Recommendation label
        explanations: Explanation text per category, never None
        provider: Where the numbers came from ("extracted" for regex extraction)
        used_fallback: True when the processor's fallback produced the result
    """

    scores: ScoreBreakdown
    final_score: float
    recommendation: str
    explanations: dict[str, str] = field(default_factory=dict)
    provider: str = ""
    used_fallback: bool = False


class ScoreValidator:
    """Checks score ranges and the recommendation label."""

    def __init__(
        self,
        max_mission_alignment: float = MAX_MISSION_ALIGNMENT,
        max_anti_challenge: float = MAX_ANTI_CHALLENGE,
        max_strategic_fit: float = MAX_STRATEGIC_FIT,
        max_final_score: float = MAX_FINAL_SCORE,
    ) -> None:
        self._max_mission_alignment = max_mission_alignment
        self._max_anti_challenge = max_anti_challenge
        self._max_strategic_fit = max_strategic_fit
        self._max_final_score = max_final_score

    def validate(self, result: ProcessedResult) -> None:
        """
        Validate a processed result.

        Args:
            result: The result to check.

        Raises:
            ScoreValidationError: On the first violated bound or an unknown label.
        """
        self._check_score(result.scores.mission_alignment, self._max_mission_alignment, "Mission Alignment")
        self._check_score(result.scores.anti_challenge, self._max_anti_challenge, "Anti-Challenge")
        self._check_score(result.scores.strategic_fit, self._max_strategic_fit, "Strategic Fit")
        self._check_score(result.final_score, self._max_final_score, "Final Score")

        if result.recommendation not in RECOMMENDATIONS:
            raise ScoreValidationError(f"invalid recommendation: {result.recommendation!r}")

    def is_valid(self, result: ProcessedResult) -> bool:
        """Check a result without raising."""
        try:
            self.validate(result)
        except ScoreValidationError:
            return False
        return True

    @staticmethod
    def _check_score(score: float, maximum: float, label: str) -> None:
        if not 0.0 <= score <= maximum:
            raise ScoreValidationError(f"{label} score {score} is out of valid range [0, {maximum}]")
