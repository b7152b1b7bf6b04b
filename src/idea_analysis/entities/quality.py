"""Quality metric domain entities."""

from dataclasses import dataclass


@dataclass(frozen=True)
class QualityMetrics:
    """How trustworthy an analysis result looks, independent of its content.

    Attributes:
        completeness: Are all scoring dimensions present? (0.0-1.0)
        consistency: Does the final score agree with its components? (0.0-1.0)
        confidence: Is the explanation long and unhedged? (0.0-1.0)
    """

    completeness: float = 0.0
    consistency: float = 0.0
    confidence: float = 0.0


@dataclass(frozen=True)
class QualityRecord:
    """A time-stamped quality measurement."""

    timestamp: float
    provider: str
    metrics: QualityMetrics
    raw_score: float
