"""Scoring engine protocol.

The rule-based provider delegates the actual heuristics to a scoring
engine so domain-specific rules can live outside this package.
"""

from typing import Protocol, runtime_checkable

from idea_analysis.entities import GoalContext, ScoreBreakdown


@runtime_checkable
class ScoringEngine(Protocol):
    """Protocol for deterministic, offline idea scoring."""

    def score(self, idea_text: str, context: GoalContext) -> tuple[ScoreBreakdown, float]:
        """Score an idea against a goal context.

        Args:
            idea_text: The idea to score
            context: The caller's goal context

        Returns:
            Tuple of (sub-score breakdown, final score)
        """
        ...
