"""
Tests for response parsing, regex extraction, validation and fallback.
"""

import json

import pytest

from idea_analysis.entities import (
    CONSIDER_LATER,
    GOOD_ALIGNMENT,
    PRIORITIZE_NOW,
    ScoreBreakdown,
)
from idea_analysis.errors import InvalidResponseError
from idea_analysis.services import ProcessedResult, ResponseProcessor, ScoreValidator
from idea_analysis.services.response_processor import extract_json

IDEA = "Build a Python CLI that automates code review"


def answer(mission=3.0, anti=2.5, strategic=2.0, final=7.5, recommendation=GOOD_ALIGNMENT, explanations=True):
    """Serialize a model answer in the requested JSON format."""
    payload = {
        "scores": {"mission_alignment": mission, "anti_challenge": anti, "strategic_fit": strategic},
        "final_score": final,
        "recommendation": recommendation,
    }
    if explanations:
        payload["explanations"] = {
            "mission_alignment": "Strong fit with {the} goals",
            "anti_challenge": "Uses the primary stack",
            "strategic_fit": "Reusable tooling",
        }
    return json.dumps(payload)


class RecordingFallback:
    """Fallback that records its arguments and returns a fixed result."""

    def __init__(self):
        self.calls = []

    def __call__(self, idea_text, context):
        self.calls.append((idea_text, context))
        return ProcessedResult(
            scores=ScoreBreakdown(1.0, 1.0, 1.0),
            final_score=3.0,
            recommendation="AVOID FOR NOW",
            explanations={"mission_alignment": "rule-based"},
            provider="rule_based",
        )


@pytest.fixture
def fallback():
    return RecordingFallback()


def test_parses_plain_json():
    """Test a clean JSON answer is parsed as-is."""
    result = ResponseProcessor().process(answer(), IDEA)
    assert result.scores == ScoreBreakdown(3.0, 2.5, 2.0)
    assert result.final_score == 7.5
    assert result.recommendation == GOOD_ALIGNMENT
    assert result.explanations["mission_alignment"] == "Strong fit with {the} goals"
    assert not result.used_fallback


def test_parses_fenced_json_surrounded_by_prose():
    """Test JSON inside a fenced block is found."""
    raw = "Here is my analysis:\n```json\n" + answer() + "\n```\nLet me know if you need more."
    result = ResponseProcessor().process(raw, IDEA)
    assert result.final_score == 7.5
    assert not result.used_fallback


def test_parses_json_embedded_in_prose():
    raw = "Sure! " + answer(final=9.0, mission=4.0, anti=3.0, strategic=2.0, recommendation=PRIORITIZE_NOW) + " Hope it helps."
    result = ResponseProcessor().process(raw, IDEA)
    assert result.recommendation == PRIORITIZE_NOW


def test_missing_explanations_become_empty_mapping():
    result = ResponseProcessor().process(answer(explanations=False), IDEA)
    assert result.explanations == {}


def test_recommendation_is_normalized_to_upper_case():
    result = ResponseProcessor().process(answer(recommendation=" good alignment "), IDEA)
    assert result.recommendation == GOOD_ALIGNMENT


def test_regex_extraction_from_loose_text():
    """Test the four numbers are pulled out of non-JSON text."""
    raw = "mission_alignment: 3.0, anti_challenge: 2.5, strategic_fit: 2.0, final_score: 7.5"
    result = ResponseProcessor().process(raw, IDEA)
    assert result.provider == "extracted"
    assert result.scores == ScoreBreakdown(3.0, 2.5, 2.0)
    assert result.recommendation == GOOD_ALIGNMENT
    assert not result.used_fallback


def test_regex_extraction_from_truncated_json_keeps_label():
    """Test a cut-off JSON answer still yields its numbers and label."""
    raw = (
        '{"scores": {"mission_alignment": 3.0, "anti_challenge": 2.5, "strategic_fit": 2.0}, '
        '"final_score": 7.5, "recommendation": "CONSIDER LATER", "explanations": {"mission_alignment": "Good'
    )
    result = ResponseProcessor().process(raw, IDEA)
    assert result.provider == "extracted"
    assert result.recommendation == CONSIDER_LATER


def test_out_of_bounds_scores_use_fallback(fallback, goal_context):
    """Test validation failures hand over to the fallback."""
    processor = ResponseProcessor(fallback=fallback)
    result = processor.process(answer(mission=5.0, final=9.5), IDEA, goal_context)
    assert result.used_fallback
    assert result.provider == "rule_based"
    assert fallback.calls == [(IDEA, goal_context)]


def test_unknown_recommendation_uses_fallback(fallback):
    result = ResponseProcessor(fallback=fallback).process(answer(recommendation="MAYBE"), IDEA)
    assert result.used_fallback


def test_negative_extracted_score_uses_fallback(fallback):
    raw = "mission_alignment: -1, anti_challenge: 2.5, strategic_fit: 2.0, final_score: 3.5"
    result = ResponseProcessor(fallback=fallback).process(raw, IDEA)
    assert result.used_fallback


def test_unparseable_answer_uses_fallback(fallback):
    result = ResponseProcessor(fallback=fallback).process("I cannot help with that.", IDEA)
    assert result.used_fallback
    assert len(fallback.calls) == 1


def test_unparseable_answer_without_fallback_raises():
    """Test the processor raises when nothing can be salvaged."""
    processor = ResponseProcessor()
    assert not processor.has_fallback
    with pytest.raises(InvalidResponseError):
        processor.process("I cannot help with that.", IDEA)


def test_invalid_scores_without_fallback_raise():
    with pytest.raises(InvalidResponseError):
        ResponseProcessor().process(answer(final=11.0), IDEA)


def test_extract_json_respects_braces_in_strings():
    text = 'prefix {"a": "x } y", "b": {"c": 1}} suffix'
    assert extract_json(text) == '{"a": "x } y", "b": {"c": 1}}'


def test_extract_json_returns_empty_when_missing_or_unbalanced():
    assert extract_json("no json here") == ""
    assert extract_json('{"a": 1') == ""


def test_validator_accepts_inclusive_bounds():
    """Test every maximum is inclusive."""
    result = ProcessedResult(
        scores=ScoreBreakdown(4.0, 3.5, 2.5),
        final_score=10.0,
        recommendation=PRIORITIZE_NOW,
    )
    assert ScoreValidator().is_valid(result)


@pytest.mark.parametrize(
    "scores,final_score",
    [
        (ScoreBreakdown(4.01, 0.0, 0.0), 4.0),
        (ScoreBreakdown(0.0, 3.6, 0.0), 3.0),
        (ScoreBreakdown(0.0, 0.0, 2.6), 2.0),
        (ScoreBreakdown(1.0, 1.0, 1.0), 10.5),
        (ScoreBreakdown(-0.1, 1.0, 1.0), 2.0),
    ],
)
def test_validator_rejects_out_of_range(scores, final_score):
    result = ProcessedResult(scores=scores, final_score=final_score, recommendation=CONSIDER_LATER)
    assert not ScoreValidator().is_valid(result)
