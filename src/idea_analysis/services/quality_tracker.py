"""Quality tracking for analysis results.

Quality says how trustworthy a result *looks*, not whether it is right:
    - completeness: are the scoring dimensions filled in?
    - consistency: does the final score agree with its components?
    - confidence: are the explanations substantial and unhedged?
"""

import time
from collections.abc import Callable

from idea_analysis.entities import AnalysisResult, QualityMetrics, QualityRecord
from idea_analysis.utils.locks import ReadWriteLock

QUALIFIERS = ("maybe", "possibly", "perhaps", "might", "could be")

CONSISTENCY_TOLERANCE = 0.5


def calculate_completeness(has_scores: bool, has_explanations: bool, has_final_score: bool) -> float:
    """Weighted presence check: 0.4 for sub-scores, 0.3 each for explanations and final score."""
    score = 0.0
    if has_scores:
        score += 0.4
    if has_explanations:
        score += 0.3
    if has_final_score:
        score += 0.3
    return score


def calculate_consistency(final_score: float, sum_of_components: float) -> float:
    """
    Compare the final score with the sum of its sub-scores.

    Args:
        final_score: Reported final score.
        sum_of_components: Sum of the three sub-scores.

    Returns:
        1.0 within a half-point tolerance (or when both are zero), then a
        linear decay of 0.1 per point, floored at 0.0.
    """
    if final_score == 0 and sum_of_components == 0:
        return 1.0

    diff = abs(final_score - sum_of_components)
    if diff <= CONSISTENCY_TOLERANCE:
        return 1.0

    return max(0.0, 1.0 - (diff - CONSISTENCY_TOLERANCE) / 10.0)


def calculate_confidence(explanation_length: int, has_qualifiers: bool) -> float:
    """Base 0.5, raised by long explanations and lowered by hedging, clamped to [0, 1]."""
    confidence = 0.5
    if explanation_length > 100:
        confidence += 0.3
    elif explanation_length > 50:
        confidence += 0.2

    if has_qualifiers:
        confidence -= 0.2

    return min(1.0, max(0.0, confidence))


def contains_qualifiers(text: str) -> bool:
    """Check whether text contains uncertainty qualifiers."""
    lowered = text.lower()
    return any(qualifier in lowered for qualifier in QUALIFIERS)


def measure_quality(result: AnalysisResult) -> QualityMetrics:
    """Derive quality metrics from a single result without recording them."""
    explanations = result.explanations or {}

    completeness = calculate_completeness(
        has_scores=result.scores.has_scores,
        has_explanations=len(explanations) > 0,
        has_final_score=result.final_score > 0,
    )
    consistency = calculate_consistency(result.final_score, result.scores.total)

    total_length = sum(len(text) for text in explanations.values())
    hedged = any(contains_qualifiers(text) for text in explanations.values())
    confidence = calculate_confidence(total_length, hedged)

    return QualityMetrics(completeness=completeness, consistency=consistency, confidence=confidence)


class QualityTracker:
    """Append-only log of quality measurements.

    Constructed explicitly and passed to whoever records results; there is
    no process-wide instance.

    Example:
        ```python
        tracker = QualityTracker()
        metrics = tracker.record(result)
        print(tracker.average().confidence)
        ```
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._records: list[QualityRecord] = []
        self._lock = ReadWriteLock()
        self._clock = clock

    def record(self, result: AnalysisResult) -> QualityMetrics:
        """
        Measure a result and append a time-stamped record.

        Args:
            result: The analysis result to measure.

        Returns:
            The computed quality metrics.
        """
        metrics = measure_quality(result)
        record = QualityRecord(
            timestamp=self._clock(),
            provider=result.provider,
            metrics=metrics,
            raw_score=result.final_score,
        )
        with self._lock.write():
            self._records.append(record)
        return metrics

    def average(self) -> QualityMetrics:
        """Mean of every metric across all records (all zeros when empty)."""
        with self._lock.read():
            if not self._records:
                return QualityMetrics()
            count = len(self._records)
            return QualityMetrics(
                completeness=sum(r.metrics.completeness for r in self._records) / count,
                consistency=sum(r.metrics.consistency for r in self._records) / count,
                confidence=sum(r.metrics.confidence for r in self._records) / count,
            )

    def records(self) -> list[QualityRecord]:
        """Copy of all records, oldest first."""
        with self._lock.read():
            return list(self._records)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._records)

    def reset(self) -> None:
        """Drop all records."""
        with self._lock.write():
            self._records.clear()
