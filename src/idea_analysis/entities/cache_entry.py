"""Cache entry domain entity."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A cached analysis payload keyed by normalized idea text.

    Unlike the other entities this one is mutable: the cache bumps
    ``hit_count`` and ``last_similarity`` on every hit. Its recency position
    is tracked by the owning cache's ordered map.

    Attributes:
        key: Normalized idea text
        result: The cached payload
        cached_at: Clock reading when the entry was stored
        hit_count: Number of times the entry was served
        last_similarity: Similarity recorded on the most recent hit
    """

    key: str
    result: T
    cached_at: float
    hit_count: int = 0
    last_similarity: float = 0.0
