"""
Tests for the metrics collector and the LLM telemetry bridge.
"""

import threading

import pytest

from idea_analysis.errors import ErrorType
from idea_analysis.protocols import MetricsSink
from idea_analysis.services import LLMTelemetry, MetricsCollector, get_metrics_collector


def test_collector_satisfies_metrics_sink(collector):
    assert isinstance(collector, MetricsSink)


def test_record_request(telemetry, collector):
    """Test a request records totals, outcome and latency."""
    telemetry.record_request("ollama", True, 120.0)
    telemetry.record_request("ollama", False, 80.0)

    assert collector.value("llm_requests_total_ollama") == 2
    assert collector.value("llm_requests_success_ollama") == 1
    assert collector.value("llm_requests_failure_ollama") == 1

    stats = collector.histogram_stats("llm_request_duration_ms_ollama")
    assert stats.count == 2
    assert stats.min == 80.0
    assert stats.max == 120.0
    assert stats.mean == pytest.approx(100.0)


def test_record_tokens(telemetry, collector):
    telemetry.record_tokens("claude", 10, 5)
    telemetry.record_tokens("claude", 1, 1)
    assert collector.value("llm_input_tokens_claude") == 11
    assert collector.value("llm_output_tokens_claude") == 6
    assert collector.value("llm_total_tokens_claude") == 17


def test_record_error_accepts_enum_and_string(telemetry, collector):
    telemetry.record_error("ollama", ErrorType.TIMEOUT)
    telemetry.record_error("ollama", "invalid_request")
    assert collector.value("llm_errors_ollama_timeout") == 1
    assert collector.value("llm_errors_ollama_invalid_request") == 1


def test_cache_and_fallback_counters(telemetry, collector):
    telemetry.record_cache_hit(True)
    telemetry.record_cache_hit(False)
    telemetry.record_cache_hit(False)
    telemetry.record_fallback("ollama", "rule_based")

    assert collector.value("llm_cache_hits") == 1
    assert collector.value("llm_cache_misses") == 2
    assert collector.value("llm_fallback_ollama_to_rule_based") == 1


def test_histogram_percentiles(collector):
    """Test percentiles use linear interpolation."""
    for value in range(1, 101):
        collector.record_histogram("latency", float(value))

    stats = collector.histogram_stats("latency")
    assert stats.count == 100
    assert stats.min == 1.0
    assert stats.max == 100.0
    assert stats.p50 == pytest.approx(50.5)
    assert stats.p95 == pytest.approx(95.05)
    assert stats.p99 == pytest.approx(99.01)


def test_histogram_stats_of_missing_or_non_histogram(collector):
    collector.record_counter("requests")
    assert collector.histogram_stats("requests") is None
    assert collector.histogram_stats("missing") is None


def test_gauge_is_overwritten(collector):
    collector.record_gauge("queue_depth", 3)
    collector.record_gauge("queue_depth", 1)
    assert collector.value("queue_depth") == 1


def test_snapshot_is_a_copy(collector):
    collector.record_histogram("latency", 1.0)
    snapshot = collector.snapshot()
    snapshot["latency"].values.append(99.0)
    assert collector.histogram_stats("latency").max == 1.0


def test_to_dict_summarizes_histograms(collector):
    collector.record_counter("requests", 2)
    collector.record_histogram("latency", 10.0)

    data = collector.to_dict()
    assert data["requests"] == {"type": "counter", "value": 2.0, "count": 1}
    assert data["latency"]["type"] == "histogram"
    assert data["latency"]["p50"] == 10.0


def test_reset(collector):
    collector.record_counter("requests")
    collector.reset()
    assert collector.to_dict() == {}


def test_process_wide_collector_is_shared():
    assert get_metrics_collector() is get_metrics_collector()
    assert LLMTelemetry().sink is get_metrics_collector()


def test_concurrent_counters():
    collector = MetricsCollector()

    def worker():
        for _ in range(1000):
            collector.record_counter("requests")

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert collector.value("requests") == 10000


def test_histogram_keeps_a_bounded_window():
    """Test statistics cover the most recent observations while count keeps the total."""
    collector = MetricsCollector(histogram_window=3)
    for value in range(1, 6):
        collector.record_histogram("latency", float(value))

    stats = collector.histogram_stats("latency")
    assert stats.count == 5
    assert stats.min == 3.0
    assert stats.max == 5.0
    assert stats.mean == pytest.approx(4.0)
    assert len(collector.snapshot()["latency"].values) == 3


def test_histogram_window_must_be_positive():
    with pytest.raises(ValueError):
        MetricsCollector(histogram_window=0)
