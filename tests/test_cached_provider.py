"""
Tests for the caching provider decorator.
"""

import pytest

from conftest import FakeProvider
from idea_analysis.cache import SimilarityCache
from idea_analysis.entities import AnalysisRequest
from idea_analysis.errors import ProviderError
from idea_analysis.services import CachedProvider


@pytest.fixture
def inner():
    return FakeProvider(name="ollama")


@pytest.fixture
def cache():
    return SimilarityCache()


@pytest.fixture
def cached(inner, cache, telemetry):
    return CachedProvider(inner, cache=cache, telemetry=telemetry)


def test_name_and_availability_follow_wrapped_provider(cached, inner):
    assert cached.name == "ollama_cached"
    assert cached.provider is inner
    assert cached.is_available()
    inner.available = False
    assert not cached.is_available()


def test_second_call_is_served_from_cache(cached, inner, request_with_context, collector):
    """Test a repeated idea does not reach the wrapped provider."""
    first = cached.analyze(request_with_context)
    second = cached.analyze(request_with_context)

    assert inner.calls == 1
    assert not first.from_cache
    assert second.from_cache
    assert second.final_score == first.final_score
    assert collector.value("llm_cache_misses") == 1
    assert collector.value("llm_cache_hits") == 1


def test_similar_idea_is_served_from_cache(cached, inner, goal_context):
    cached.analyze(AnalysisRequest(idea_text="Build a Python CLI for code review", context=goal_context))
    result = cached.analyze(AnalysisRequest(idea_text="build a python cli for code review!", context=goal_context))
    assert result.from_cache
    assert inner.calls == 1


def test_cache_hit_does_not_mutate_stored_result(cached, cache, request_with_context):
    """Test the clone handed out on a hit is independent of the stored entry."""
    cached.analyze(request_with_context)
    hit = cached.analyze(request_with_context)
    hit.explanations["mission_alignment"] = "changed"

    stored = cache.peek(request_with_context.idea_text).result
    assert not stored.from_cache
    assert stored.explanations["mission_alignment"] == "fits the goals"


def test_failures_are_not_cached(cache, telemetry, request_with_context):
    """Test a failing provider leaves the cache empty."""
    failing = FakeProvider(name="ollama", error=ProviderError("boom"))
    cached = CachedProvider(failing, cache=cache, telemetry=telemetry)

    with pytest.raises(ProviderError):
        cached.analyze(request_with_context)
    with pytest.raises(ProviderError):
        cached.analyze(request_with_context)

    assert failing.calls == 2
    assert cache.size() == 0


def test_cache_stats_and_clear(cached, inner, request_with_context):
    cached.analyze(request_with_context)
    cached.analyze(request_with_context)

    stats = cached.cache_stats()
    assert stats.size == 1
    assert stats.hits == 1
    assert stats.misses == 1

    cached.clear_cache()
    assert cached.cache_stats().size == 0
    cached.analyze(request_with_context)
    assert inner.calls == 2


def test_default_cache_is_created(inner, telemetry):
    assert CachedProvider(inner, telemetry=telemetry).cache_stats().size == 0
