"""Telemetry for analysis backends.

``MetricsCollector`` is a thread-safe in-process store of counters, gauges
and histograms. ``LLMTelemetry`` is the bridge backends, the cached wrapper
and the fallback chain use to push their events into any ``MetricsSink``.
"""

import threading
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache

import numpy as np

from idea_analysis.errors import ErrorType
from idea_analysis.models import HistogramStats
from idea_analysis.protocols import MetricsSink

# Histograms keep only their most recent observations.
DEFAULT_HISTOGRAM_WINDOW = 1000


class MetricType(str, Enum):
    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"


@dataclass
class Metric:
    """A single named metric."""

    name: str
    type: MetricType
    value: float = 0.0
    count: int = 0
    timestamp: float = field(default_factory=time.time)
    values: deque[float] = field(default_factory=deque)


class MetricsCollector:
    """Thread-safe metrics store.

    Satisfies the ``MetricsSink`` protocol.

    Example:
        ```python
        collector = MetricsCollector()
        collector.record_counter("llm_requests_total_ollama")
        collector.record_histogram("llm_request_duration_ms_ollama", 120.0)
        stats = collector.histogram_stats("llm_request_duration_ms_ollama")
        ```
    """

    def __init__(self, histogram_window: int = DEFAULT_HISTOGRAM_WINDOW) -> None:
        """Initialize the collector.

        Args:
            histogram_window: Observations kept per histogram. Older ones are
                dropped from the statistics but still counted.
        """
        if histogram_window < 1:
            raise ValueError(f"histogram_window must be at least 1, got {histogram_window}")
        self._metrics: dict[str, Metric] = {}
        self._histogram_window = histogram_window
        self._lock = threading.Lock()

    def _touch(self, name: str, metric_type: MetricType) -> Metric:
        metric = self._metrics.get(name)
        if metric is None:
            metric = Metric(name=name, type=metric_type, values=deque(maxlen=self._histogram_window))
            self._metrics[name] = metric
        metric.count += 1
        metric.timestamp = time.time()
        return metric

    def record_counter(self, name: str, value: float = 1.0) -> None:
        """Increment a counter metric."""
        with self._lock:
            self._touch(name, MetricType.COUNTER).value += value

    def record_gauge(self, name: str, value: float) -> None:
        """Set a gauge metric to a specific value."""
        with self._lock:
            self._touch(name, MetricType.GAUGE).value = value

    def record_histogram(self, name: str, value: float) -> None:
        """Record a value in a histogram metric."""
        with self._lock:
            self._touch(name, MetricType.HISTOGRAM).values.append(value)

    def value(self, name: str) -> float:
        """Current value of a counter or gauge (0.0 if never recorded)."""
        with self._lock:
            metric = self._metrics.get(name)
            return metric.value if metric is not None else 0.0

    def snapshot(self) -> dict[str, Metric]:
        """Deep copy of all metrics."""
        with self._lock:
            return {
                name: Metric(
                    name=metric.name,
                    type=metric.type,
                    value=metric.value,
                    count=metric.count,
                    timestamp=metric.timestamp,
                    values=deque(metric.values, maxlen=metric.values.maxlen),
                )
                for name, metric in self._metrics.items()
            }

    def histogram_stats(self, name: str) -> HistogramStats | None:
        """
        Summarize a histogram metric.

        Args:
            name: Histogram name.

        Returns:
            Total count, then min, max, mean and p50/p95/p99 over the most
            recent window, or None if the metric is missing, empty or not a
            histogram.
        """
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None or metric.type is not MetricType.HISTOGRAM or not metric.values:
                return None
            values = np.asarray(metric.values, dtype=float)
            count = metric.count

        p50, p95, p99 = np.percentile(values, [50, 95, 99])
        return HistogramStats(
            count=count,
            min=float(values.min()),
            max=float(values.max()),
            mean=float(values.mean()),
            p50=float(p50),
            p95=float(p95),
            p99=float(p99),
        )

    def to_dict(self) -> dict[str, dict]:
        """Serializable view of all metrics, histograms summarized."""
        result: dict[str, dict] = {}
        for name, metric in self.snapshot().items():
            if metric.type is MetricType.HISTOGRAM:
                stats = self.histogram_stats(name)
                result[name] = {"type": metric.type.value, "count": metric.count}
                if stats is not None:
                    result[name].update(
                        {"min": stats.min, "max": stats.max, "mean": stats.mean, "p50": stats.p50, "p95": stats.p95, "p99": stats.p99}
                    )
            else:
                result[name] = {"type": metric.type.value, "value": metric.value, "count": metric.count}
        return result

    def reset(self) -> None:
        """Clear all metrics."""
        with self._lock:
            self._metrics.clear()


@lru_cache
def get_metrics_collector() -> MetricsCollector:
    """Get the process-wide metrics collector."""
    return MetricsCollector()


class LLMTelemetry:
    """Records analysis events into a metrics sink.

    Metric names follow ``llm_<event>_<provider>`` so one collector can
    aggregate every backend in the process.
    """

    def __init__(self, sink: MetricsSink | None = None) -> None:
        """Initialize the bridge.

        Args:
            sink: Destination for metrics. Defaults to the process-wide collector.
        """
        self._sink = sink if sink is not None else get_metrics_collector()

    @property
    def sink(self) -> MetricsSink:
        return self._sink

    def record_request(self, provider: str, success: bool, duration_ms: float) -> None:
        """Track a backend call and its latency."""
        self._sink.record_counter(f"llm_requests_total_{provider}")
        outcome = "success" if success else "failure"
        self._sink.record_counter(f"llm_requests_{outcome}_{provider}")
        self._sink.record_histogram(f"llm_request_duration_ms_{provider}", duration_ms)

    def record_tokens(self, provider: str, input_tokens: int, output_tokens: int) -> None:
        """Track token usage for cost estimation."""
        self._sink.record_counter(f"llm_input_tokens_{provider}", float(input_tokens))
        self._sink.record_counter(f"llm_output_tokens_{provider}", float(output_tokens))
        self._sink.record_counter(f"llm_total_tokens_{provider}", float(input_tokens + output_tokens))

    def record_error(self, provider: str, error_type: ErrorType | str) -> None:
        """Track a failure by error type."""
        tag = error_type.value if isinstance(error_type, ErrorType) else error_type
        self._sink.record_counter(f"llm_errors_{provider}_{tag}")

    def record_cache_hit(self, hit: bool) -> None:
        """Track a cache lookup outcome."""
        self._sink.record_counter("llm_cache_hits" if hit else "llm_cache_misses")

    def record_fallback(self, from_provider: str, to_provider: str) -> None:
        """Track a transition from a failed provider to the next one."""
        self._sink.record_counter(f"llm_fallback_{from_provider}_to_{to_provider}")
