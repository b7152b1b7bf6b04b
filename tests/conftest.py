"""
Shared fixtures and fakes for the idea analysis tests.
"""

import pytest

from idea_analysis.entities import (
    GOOD_ALIGNMENT,
    AnalysisRequest,
    AnalysisResult,
    GoalContext,
    ScoreBreakdown,
)
from idea_analysis.services import LLMTelemetry, MetricsCollector


class FakeClock:
    """Manually advanced clock; ``sleep`` advances it instead of blocking."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeProvider:
    """In-memory AnalysisProvider returning a fixed result or raising a fixed error."""

    def __init__(self, name="fake", available=True, result=None, error=None):
        self._name = name
        self.available = available
        self.result = result
        self.error = error
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return self.available

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result or make_result(provider=self._name)


def make_result(
    final_score=7.5,
    provider="fake",
    mission_alignment=3.0,
    anti_challenge=2.5,
    strategic_fit=2.0,
    recommendation=GOOD_ALIGNMENT,
    explanations=None,
):
    """Build a valid AnalysisResult."""
    return AnalysisResult(
        scores=ScoreBreakdown(
            mission_alignment=mission_alignment,
            anti_challenge=anti_challenge,
            strategic_fit=strategic_fit,
        ),
        final_score=final_score,
        recommendation=recommendation,
        explanations=explanations if explanations is not None else {"mission_alignment": "fits the goals"},
        provider=provider,
        duration_ms=12.0,
    )


@pytest.fixture
def goal_context():
    """A goal context for a solo developer shipping AI tools."""
    return GoalContext(
        goals=("Ship an AI developer tool with paying customers",),
        strategies=("Automate repetitive workflows and validate publicly",),
        primary_stack=("Python", "FastAPI"),
        secondary_stack=("TypeScript",),
        failure_patterns=("Starting new projects before shipping",),
    )


@pytest.fixture
def request_with_context(goal_context):
    """An analysis request carrying the goal context."""
    return AnalysisRequest(
        idea_text="Build a Python CLI that automates code review for FastAPI projects",
        context=goal_context,
    )


@pytest.fixture
def collector():
    """A private metrics collector."""
    return MetricsCollector()


@pytest.fixture
def telemetry(collector):
    """Telemetry bridge writing into the private collector."""
    return LLMTelemetry(collector)


@pytest.fixture
def clock():
    """A manual clock starting at zero."""
    return FakeClock()
