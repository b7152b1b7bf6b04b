"""
Tests for the ordered fallback chain.
"""

import pytest

from conftest import FakeProvider
from idea_analysis.config import Settings
from idea_analysis.entities import AnalysisRequest
from idea_analysis.errors import (
    AllProvidersFailedError,
    InvalidRequestError,
    NetworkError,
    NoProvidersAvailableError,
    ProviderError,
)
from idea_analysis.repositories import RuleBasedProvider
from idea_analysis.services import FallbackChain


def test_first_success_is_returned(request_with_context, telemetry):
    first = FakeProvider(name="a")
    second = FakeProvider(name="b")
    result = FallbackChain([first, second], telemetry=telemetry).analyze(request_with_context)

    assert result.provider == "a"
    assert second.calls == 0


def test_unavailable_members_are_skipped(request_with_context, telemetry):
    """Test unavailable members are never called."""
    first = FakeProvider(name="a", available=False)
    second = FakeProvider(name="b")
    result = FallbackChain([first, second], telemetry=telemetry).analyze(request_with_context)

    assert result.provider == "b"
    assert first.calls == 0


def test_failure_falls_through_and_is_counted(request_with_context, telemetry, collector):
    """Test a failure moves on to the next member and records the transition."""
    first = FakeProvider(name="a", error=NetworkError("connection refused"))
    second = FakeProvider(name="b", available=False)
    third = FakeProvider(name="c")

    result = FallbackChain([first, second, third], telemetry=telemetry).analyze(request_with_context)

    assert result.provider == "c"
    assert collector.value("llm_fallback_a_to_c") == 1
    assert collector.value("llm_fallback_a_to_b") == 0


def test_all_failed_wraps_last_error(request_with_context, telemetry):
    """Test the last failure is carried as the cause."""
    last = ProviderError("upstream returned 503")
    chain = FallbackChain(
        [FakeProvider(name="a", error=NetworkError("down")), FakeProvider(name="b", error=last)],
        telemetry=telemetry,
    )

    with pytest.raises(AllProvidersFailedError) as exc_info:
        chain.analyze(request_with_context)

    assert exc_info.value.last_error is last
    assert exc_info.value.__cause__ is last
    assert "upstream returned 503" in str(exc_info.value)


def test_nothing_available(request_with_context, telemetry):
    chain = FallbackChain([FakeProvider(name="a", available=False)], telemetry=telemetry)
    assert not chain.is_available()
    with pytest.raises(NoProvidersAvailableError):
        chain.analyze(request_with_context)


def test_empty_chain(request_with_context, telemetry):
    with pytest.raises(NoProvidersAvailableError):
        FallbackChain([], telemetry=telemetry).analyze(request_with_context)


def test_rule_based_member_rescues_failed_models(request_with_context, telemetry):
    chain = FallbackChain(
        [FakeProvider(name="ollama", error=NetworkError("down")), RuleBasedProvider(telemetry=telemetry)],
        telemetry=telemetry,
    )
    assert chain.analyze(request_with_context).provider == "rule_based"


def test_missing_context_fails_the_whole_chain(telemetry):
    chain = FallbackChain([RuleBasedProvider(telemetry=telemetry)], telemetry=telemetry)
    with pytest.raises(AllProvidersFailedError) as exc_info:
        chain.analyze(AnalysisRequest(idea_text="Build a tool"))
    assert isinstance(exc_info.value.last_error, InvalidRequestError)


def test_chain_is_a_provider(request_with_context, telemetry):
    inner = FallbackChain([FakeProvider(name="a")], telemetry=telemetry)
    outer = FallbackChain([inner], telemetry=telemetry)
    assert inner.name == "fallback"
    assert outer.analyze(request_with_context).provider == "a"


def test_create_default_order_with_cache(telemetry):
    """Test the default chain order and cache wrapping."""
    chain = FallbackChain.create_default(Settings(cache_enabled=True, openai_model="gpt-4o-mini"), telemetry=telemetry)
    assert [p.name for p in chain.providers] == [
        "ollama_cached",
        "claude_cached",
        "openai_gpt-4o-mini_cached",
        "rule_based",
    ]


def test_create_default_order_without_cache(telemetry):
    chain = FallbackChain.create_default(Settings(cache_enabled=False, openai_model="gpt-4o-mini"), telemetry=telemetry)
    assert [p.name for p in chain.providers] == ["ollama", "claude", "openai_gpt-4o-mini", "rule_based"]
