"""
Tests for the offline rule-based provider and its keyword scoring engine.
"""

import pytest

from idea_analysis.entities import (
    AVOID_FOR_NOW,
    GOOD_ALIGNMENT,
    PRIORITIZE_NOW,
    AnalysisRequest,
    GoalContext,
    ScoreBreakdown,
    determine_recommendation,
)
from idea_analysis.errors import InvalidRequestError
from idea_analysis.repositories import KeywordScoringEngine, RuleBasedProvider
from idea_analysis.repositories.rule_based_provider import extract_important_words
from idea_analysis.services import ProcessedResult, ScoreValidator

ALIGNED_IDEA = (
    "Build a Python tool that helps developer teams automate repetitive code review workflows "
    "for paying customers. It ships as a FastAPI service. We validate it publicly with early adopters."
)
UNALIGNED_IDEA = "Maybe someday start a gardening podcast."


@pytest.fixture
def provider(telemetry):
    return RuleBasedProvider(telemetry=telemetry)


def test_always_available(provider):
    assert provider.is_available()
    assert provider.name == "rule_based"


def test_requires_goal_context(provider, collector):
    """Test a missing context is rejected and counted."""
    with pytest.raises(InvalidRequestError):
        provider.analyze(AnalysisRequest(idea_text=ALIGNED_IDEA))
    assert collector.value("llm_errors_rule_based_invalid_request") == 1
    assert collector.value("llm_requests_failure_rule_based") == 1


def test_scores_are_within_bounds(provider, goal_context):
    """Test the result passes the same validation as model answers."""
    result = provider.analyze(AnalysisRequest(idea_text=ALIGNED_IDEA, context=goal_context))
    processed = ProcessedResult(
        scores=result.scores,
        final_score=result.final_score,
        recommendation=result.recommendation,
    )
    assert ScoreValidator().is_valid(processed)
    assert result.recommendation == determine_recommendation(result.final_score)


def test_is_deterministic(provider, goal_context):
    request = AnalysisRequest(idea_text=ALIGNED_IDEA, context=goal_context)
    first = provider.analyze(request)
    second = provider.analyze(request)
    assert first.scores == second.scores
    assert first.final_score == second.final_score


def test_aligned_idea_outscores_unaligned_idea(provider, goal_context):
    """Test goal, stack and strategy overlap raise the score."""
    aligned = provider.analyze(AnalysisRequest(idea_text=ALIGNED_IDEA, context=goal_context))
    unaligned = provider.analyze(AnalysisRequest(idea_text=UNALIGNED_IDEA, context=goal_context))

    assert aligned.final_score > unaligned.final_score
    assert aligned.recommendation in (PRIORITIZE_NOW, GOOD_ALIGNMENT)
    assert unaligned.recommendation == AVOID_FOR_NOW


def test_explanations_describe_each_score(provider, goal_context):
    result = provider.analyze(AnalysisRequest(idea_text=ALIGNED_IDEA, context=goal_context))
    assert set(result.explanations) == {"mission_alignment", "anti_challenge", "strategic_fit"}
    assert result.explanations["mission_alignment"].startswith(f"Score: {result.scores.mission_alignment:.2f}/4.0")


def test_empty_context_scores_neutrally(provider):
    """Test an empty context uses the neutral ratio rather than failing."""
    result = provider.analyze(AnalysisRequest(idea_text="A short idea.", context=GoalContext()))
    # goal ratio 0.5 * 3.0 and strategy ratio 0.5 * 1.5 plus full failure avoidance
    assert result.scores.mission_alignment == pytest.approx(1.5)
    assert result.scores.strategic_fit == pytest.approx(1.75)


def test_custom_engine_is_used(telemetry, goal_context):
    class FixedEngine:
        def score(self, idea_text, context):
            return ScoreBreakdown(4.0, 3.5, 2.5), 10.0

    result = RuleBasedProvider(engine=FixedEngine(), telemetry=telemetry).analyze(
        AnalysisRequest(idea_text="anything", context=goal_context)
    )
    assert result.final_score == 10.0
    assert result.recommendation == PRIORITIZE_NOW


def test_as_fallback_marks_result(provider, goal_context):
    processed = provider.as_fallback()(ALIGNED_IDEA, goal_context)
    assert processed.used_fallback
    assert processed.provider == "rule_based"


def test_extract_important_words_is_sorted_and_distinct():
    assert extract_important_words("Shipping tools, shipping fast and building things") == [
        "building",
        "shipping",
        "things",
        "tools",
    ]


def test_engine_clamps_to_category_maximums(goal_context):
    idea = " ".join(["python developer paying customers automate repetitive workflows validate publicly build"] * 3)
    scores, final_score = KeywordScoringEngine().score(idea + ". Second sentence here.", goal_context)
    assert scores.mission_alignment <= 4.0
    assert scores.anti_challenge <= 3.5
    assert scores.strategic_fit <= 2.5
    assert final_score <= 10.0
