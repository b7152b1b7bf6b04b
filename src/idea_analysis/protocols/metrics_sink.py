"""Metrics sink protocol.

Defines where telemetry is pushed. ``MetricsCollector`` is the in-process
default; an exporter to an external metrics system only has to provide
these three methods.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsSink(Protocol):
    """Protocol for metric destinations."""

    def record_counter(self, name: str, value: float = 1.0) -> None:
        """Increment a counter by ``value``."""
        ...

    def record_gauge(self, name: str, value: float) -> None:
        """Set a gauge to ``value``."""
        ...

    def record_histogram(self, name: str, value: float) -> None:
        """Add an observation to a histogram."""
        ...
