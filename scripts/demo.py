#!/usr/bin/env python3
"""
Demo script for idea analysis.

This script runs a few sample ideas through the default fallback chain and
shows caching, quality tracking and telemetry. Without Ollama or API keys
every analysis lands on the rule-based provider.
"""

import time

from idea_analysis import AnalysisRequest, FallbackChain, GoalContext, get_settings
from idea_analysis.services import LLMTelemetry, MetricsCollector, QualityTracker

GOALS = GoalContext(
    goals=("Ship an AI-powered developer tool with paying customers this year",),
    strategies=("Build small, validate publicly, automate repetitive work",),
    primary_stack=("Python", "FastAPI"),
    secondary_stack=("TypeScript",),
    failure_patterns=("Starting new projects before shipping the current one",),
)


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def demo_analysis(chain: FallbackChain) -> None:
    """Demonstrate analysis with fallback and caching."""
    print_section("Analysis With Fallback")

    ideas = [
        "Build a Python CLI that uses AI to automate code review for FastAPI projects.",
        "Build a Python CLI that uses AI to automate code review for FastAPI projects!",
        "Maybe someday start a podcast about gardening.",
    ]

    for idea in ideas:
        start = time.time()
        result = chain.analyze(AnalysisRequest(idea_text=idea, context=GOALS))
        duration = (time.time() - start) * 1000
        print(f"\n  Idea: {idea[:60]}...")
        print(f"  Provider: {result.provider} (cached: {result.from_cache})")
        print(f"  Score: {result.final_score:.2f}/10 -> {result.recommendation}")
        print(f"  Time: {duration:.2f}ms")


def demo_quality(tracker: QualityTracker) -> None:
    """Show average quality of recorded results."""
    print_section("Quality")

    average = tracker.average()
    print(f"  Records: {len(tracker)}")
    print(f"  Completeness: {average.completeness:.2f}")
    print(f"  Consistency: {average.consistency:.2f}")
    print(f"  Confidence: {average.confidence:.2f}")


def demo_metrics(collector: MetricsCollector) -> None:
    """Dump the collected counters."""
    print_section("Telemetry")

    for name, metric in sorted(collector.to_dict().items()):
        value = metric.get("value", metric.get("mean"))
        print(f"  {name:<48} {metric['type']:<10} {value}")


def main() -> None:
    """Run all demos."""
    print("\nIdea Analysis Demo")
    print("=" * 70)

    collector = MetricsCollector()
    tracker = QualityTracker()
    chain = FallbackChain.create_default(
        get_settings(),
        telemetry=LLMTelemetry(collector),
        quality_tracker=tracker,
    )
    print("Chain: " + " -> ".join(provider.name for provider in chain.providers))

    demo_analysis(chain)
    demo_quality(tracker)
    demo_metrics(collector)

    print("\n" + "=" * 70)
    print("Demo completed successfully!")
    print("=" * 70)


if __name__ == "__main__":
    main()
