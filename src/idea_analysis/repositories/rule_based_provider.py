"""Rule-based analysis provider.

Never touches the network, so it is always available and is the last
member of every default fallback chain. It also backs the response
processor's fallback when a model's answer cannot be used.

The heuristics themselves are pluggable through the ``ScoringEngine``
protocol; ``KeywordScoringEngine`` is the built-in default.
"""

import logging
import re
import time
from collections.abc import Callable

from idea_analysis.entities import (
    MAX_ANTI_CHALLENGE,
    MAX_FINAL_SCORE,
    MAX_MISSION_ALIGNMENT,
    MAX_STRATEGIC_FIT,
    AnalysisRequest,
    AnalysisResult,
    GoalContext,
    ScoreBreakdown,
    determine_recommendation,
)
from idea_analysis.errors import InvalidRequestError
from idea_analysis.protocols import ScoringEngine
from idea_analysis.services.telemetry import LLMTelemetry
from idea_analysis.services.validator import ProcessedResult

logger = logging.getLogger(__name__)

POSITIVE_KEYWORDS = (
    "innovation", "improve", "solve", "build", "create",
    "impact", "sustainable", "efficient", "scale", "growth",
    "productivity", "automate", "optimize", "enhance", "transform",
)  # fmt: skip

HEDGING_KEYWORDS = ("maybe", "might", "possibly", "unclear", "vague", "eventually", "someday", "unsure")

COMMON_WORDS = frozenset(
    """
    the a an and or but in on at to for of with by from as is was are were be been being
    have has had do does did will would could should may might must can this that these
    those i you he she it we they my your
    """.split()
)

_WORD_SPLIT = re.compile(r"[^\w]+")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def extract_important_words(text: str) -> list[str]:
    """Distinct significant words (longer than four characters, not common), sorted."""
    words = {word for word in _WORD_SPLIT.split(text.lower()) if len(word) > 4 and word not in COMMON_WORDS}
    return sorted(words)


def _match_ratio(content: str, words: list[str]) -> float | None:
    if not words:
        return None
    matches = sum(1 for word in words if word in content)
    return matches / len(words)


class KeywordScoringEngine:
    """Deterministic keyword and shape heuristics.

    Satisfies the ``ScoringEngine`` protocol. Every sub-score is built from
    fixed-weight components that add up to the category maximum:

        mission_alignment (4.0) = goal word overlap 3.0 + positive keywords 1.0
        anti_challenge (3.5)    = stack fit 1.2 + length 1.0 + detail 0.8 + no hedging 0.5
        strategic_fit (2.5)     = strategy word overlap 1.5 + failure-pattern avoidance 1.0

    Word lists are sorted before matching, so the outcome never depends on
    set or dict iteration order.
    """

    NEUTRAL_RATIO = 0.5

    def score(self, idea_text: str, context: GoalContext) -> tuple[ScoreBreakdown, float]:
        content = idea_text.lower()

        mission = self._mission_alignment(content, context)
        anti_challenge = self._anti_challenge(idea_text, content, context)
        strategic = self._strategic_fit(content, context)

        breakdown = ScoreBreakdown(
            mission_alignment=round(min(mission, MAX_MISSION_ALIGNMENT), 2),
            anti_challenge=round(min(anti_challenge, MAX_ANTI_CHALLENGE), 2),
            strategic_fit=round(min(strategic, MAX_STRATEGIC_FIT), 2),
        )
        final_score = round(min(breakdown.total, MAX_FINAL_SCORE), 2)
        return breakdown, final_score

    def _mission_alignment(self, content: str, context: GoalContext) -> float:
        ratio = _match_ratio(content, extract_important_words(" ".join(context.goals)))
        goal_score = 3.0 * (self.NEUTRAL_RATIO if ratio is None else ratio)

        keyword_hits = sum(1 for keyword in POSITIVE_KEYWORDS if keyword in content)
        keyword_score = min(keyword_hits, 3) / 3.0
        return goal_score + keyword_score

    def _anti_challenge(self, idea_text: str, content: str, context: GoalContext) -> float:
        if any(tech.lower() in content for tech in context.primary_stack):
            stack_score = 1.2
        elif any(tech.lower() in content for tech in context.secondary_stack):
            stack_score = 0.6
        else:
            stack_score = 0.3

        hedges = sum(1 for keyword in HEDGING_KEYWORDS if keyword in content)
        hedge_score = max(0.0, 0.5 - 0.25 * hedges)

        return stack_score + self._length_score(idea_text) + self._detail_score(idea_text) + hedge_score

    def _strategic_fit(self, content: str, context: GoalContext) -> float:
        ratio = _match_ratio(content, extract_important_words(" ".join(context.strategies)))
        strategy_score = 1.5 * (self.NEUTRAL_RATIO if ratio is None else ratio)

        if not context.failure_patterns:
            return strategy_score + 1.0

        triggered = 0
        for pattern in context.failure_patterns:
            words = extract_important_words(pattern)
            if words and any(word in content for word in words):
                triggered += 1
        avoidance = 1.0 - triggered / len(context.failure_patterns)
        return strategy_score + avoidance

    @staticmethod
    def _length_score(idea_text: str) -> float:
        length = len(idea_text.strip())
        if length < 10:
            return 0.25
        if length < 20:
            return 0.5
        if length <= 500:
            return 1.0
        if length <= 1000:
            return 0.75
        return 0.5

    @staticmethod
    def _detail_score(idea_text: str) -> float:
        sentences = [s for s in _SENTENCE_SPLIT.split(idea_text) if s.strip()]
        words = idea_text.split()
        if len(sentences) <= 1 or len(words) < 10:
            return 0.2
        if 2 <= len(sentences) <= 5 and 20 <= len(words) <= 100:
            return 0.8
        if len(words) < 200:
            return 0.6
        return 0.4


class RuleBasedProvider:
    """Offline provider scoring ideas with a ``ScoringEngine``.

    Satisfies the ``AnalysisProvider`` protocol.

    Example:
        ```python
        provider = RuleBasedProvider()
        result = provider.analyze(AnalysisRequest(idea_text="...", context=goals))
        ```
    """

    def __init__(self, engine: ScoringEngine | None = None, telemetry: LLMTelemetry | None = None) -> None:
        self._engine = engine or KeywordScoringEngine()
        self._telemetry = telemetry or LLMTelemetry()

    @property
    def name(self) -> str:
        return "rule_based"

    def is_available(self) -> bool:
        return True

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Score an idea without any network call.

        Raises:
            InvalidRequestError: If the request carries no goal context.
        """
        start = time.perf_counter()

        if request.context is None:
            self._telemetry.record_request(self.name, False, _elapsed_ms(start))
            self._telemetry.record_error(self.name, "invalid_request")
            raise InvalidRequestError("goal context is required for rule-based analysis")

        scores, final_score = self._engine.score(request.idea_text, request.context)
        duration_ms = _elapsed_ms(start)
        self._telemetry.record_request(self.name, True, duration_ms)

        return AnalysisResult(
            scores=scores,
            final_score=final_score,
            recommendation=determine_recommendation(final_score),
            explanations=_explain(scores),
            provider=self.name,
            duration_ms=duration_ms,
        )

    def as_fallback(self) -> Callable[[str, GoalContext | None], ProcessedResult]:
        """Adapt this provider to the response processor's fallback signature."""

        def fallback(idea_text: str, context: GoalContext | None) -> ProcessedResult:
            result = self.analyze(AnalysisRequest(idea_text=idea_text, context=context))
            return ProcessedResult(
                scores=result.scores,
                final_score=result.final_score,
                recommendation=result.recommendation,
                explanations=dict(result.explanations),
                provider=result.provider,
                used_fallback=True,
            )

        return fallback


def _explain(scores: ScoreBreakdown) -> dict[str, str]:
    return {
        "mission_alignment": f"Score: {scores.mission_alignment:.2f}/{MAX_MISSION_ALIGNMENT:.1f} (rule-based: goal overlap, keywords)",
        "anti_challenge": f"Score: {scores.anti_challenge:.2f}/{MAX_ANTI_CHALLENGE:.1f} (rule-based: stack fit, scope, hedging)",
        "strategic_fit": f"Score: {scores.strategic_fit:.2f}/{MAX_STRATEGIC_FIT:.1f} (rule-based: strategy overlap, failure patterns)",
    }


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000
