from dataclasses import dataclass

from pydantic import BaseModel, Field


class ScoresPayload(BaseModel):
    """The ``scores`` object of a model's JSON answer."""

    mission_alignment: float
    anti_challenge: float
    strategic_fit: float

    model_config = {"extra": "ignore"}


class LLMScorePayload(BaseModel):
    """Schema a model is asked to answer with.

    Only structure is checked here; score bounds and the recommendation
    label are checked separately by ``ScoreValidator``.
    """

    scores: ScoresPayload
    final_score: float
    recommendation: str
    explanations: dict[str, str] | None = None

    model_config = {"extra": "ignore"}


class CacheStats(BaseModel):
    """Similarity cache statistics snapshot."""

    size: int = 0
    hits: int = 0
    misses: int = 0
    hit_rate: float = 0.0
    avg_hit_count: float = 0.0

    model_config = {"extra": "allow"}


class TokenUsage(BaseModel):
    """Token counts reported by a hosted backend."""

    input_tokens: int = Field(0, ge=0)
    output_tokens: int = Field(0, ge=0)


@dataclass(frozen=True)
class HistogramStats:
    """Summary statistics for a histogram metric."""

    count: int
    min: float
    max: float
    mean: float
    p50: float
    p95: float
    p99: float


@dataclass
class ProviderStats:
    """Per-provider call statistics kept by the provider manager."""

    name: str
    requests: int = 0
    successes: int = 0
    failures: int = 0
    total_latency_ms: float = 0.0
    last_error: str | None = None

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        if self.requests == 0:
            return 0.0
        return self.successes / self.requests

    @property
    def avg_latency_ms(self) -> float:
        """Calculate average latency."""
        if self.requests == 0:
            return 0.0
        return self.total_latency_ms / self.requests

    def record_success(self, latency_ms: float) -> None:
        """Record a successful call."""
        self.requests += 1
        self.successes += 1
        self.total_latency_ms += latency_ms

    def record_failure(self, latency_ms: float, error: BaseException) -> None:
        """Record a failed call."""
        self.requests += 1
        self.failures += 1
        self.total_latency_ms += latency_ms
        self.last_error = str(error)

    def to_dict(self) -> dict[str, float | int | str | None]:
        """Convert stats to dictionary."""
        return {
            "name": self.name,
            "requests": self.requests,
            "successes": self.successes,
            "failures": self.failures,
            "success_rate": self.success_rate,
            "avg_latency_ms": self.avg_latency_ms,
            "last_error": self.last_error,
        }
