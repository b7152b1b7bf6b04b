"""In-memory similarity cache for analysis results.

Exact lookups hit the normalized idea text directly; anything else is
matched by Jaccard similarity over the stored keys. Capacity is bounded by
LRU eviction and staleness by a per-entry TTL.
"""

import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Generic, TypeVar

from idea_analysis.entities import CacheEntry
from idea_analysis.models import CacheStats
from idea_analysis.similarity import jaccard_similarity, normalize_text
from idea_analysis.utils.locks import ReadWriteLock

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.85
DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_MAX_SIZE = 1000

T = TypeVar("T")


class SimilarityCache(Generic[T]):
    """In-memory LRU cache with TTL expiry and approximate-match lookup.

    Keys are normalized idea texts. A lookup that misses the exact key falls
    back to a linear scan for the live entry with the highest Jaccard
    similarity at or above the threshold. Entries are kept in an
    ``OrderedDict`` whose order is the recency list (most recently used last).

    Example:
        ```python
        cache: SimilarityCache[AnalysisResult] = SimilarityCache(ttl=3600)
        cache.store("Build an AI tool", result)
        cached, found = cache.get("build an ai tool!")
        ```
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        ttl: float = DEFAULT_TTL_SECONDS,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the cache.

        Args:
            max_size: Maximum number of entries before LRU eviction.
            ttl: Maximum entry age in seconds.
            similarity_threshold: Minimum Jaccard similarity for a fuzzy hit.
            clock: Time source, injectable for tests.
        """
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        if not 0 <= similarity_threshold <= 1:
            raise ValueError(f"similarity_threshold must be between 0 and 1, got {similarity_threshold}")

        self._max_size = max_size
        self._ttl = ttl
        self._threshold = similarity_threshold
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[T]] = OrderedDict()
        self._lock = ReadWriteLock()
        self._hits = 0
        self._misses = 0

    @classmethod
    def from_settings(cls, settings) -> "SimilarityCache[T]":
        """Factory method to build a cache from application settings.

        Args:
            settings: A ``Settings`` instance.

        Returns:
            Configured SimilarityCache
        """
        return cls(
            max_size=settings.cache_max_size,
            ttl=settings.cache_ttl,
            similarity_threshold=settings.cache_similarity_threshold,
        )

    def store(self, idea_text: str, result: T) -> None:
        """
        Store a result under the normalized idea text.

        An existing entry with the same key is replaced and moved to the
        most-recently-used position. When the cache grows past ``max_size``
        the least recently used entry is evicted.

        Args:
            idea_text: Raw idea text.
            result: Payload to cache.
        """
        key = normalize_text(idea_text)
        with self._lock.write():
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(key=key, result=result, cached_at=self._clock())
            if len(self._entries) > self._max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted least recently used cache entry: %r", evicted)

    def get(self, idea_text: str) -> tuple[T | None, bool]:
        """
        Look up a result by exact key, then by similarity.

        Args:
            idea_text: Raw idea text.

        Returns:
            ``(result, True)`` on a hit, ``(None, False)`` on a miss.
        """
        key = normalize_text(idea_text)
        with self._lock.write():
            entry = self._entries.get(key)
            if entry is not None:
                if not self._is_expired(entry):
                    return self._record_hit(entry, 1.0), True
                del self._entries[key]
                logger.debug("Removed expired cache entry: %r", key)

            match, similarity = self._find_similar(key)
            if match is not None:
                logger.debug("Similarity cache hit (%.3f) for %r -> %r", similarity, key, match.key)
                return self._record_hit(match, similarity), True

            self._misses += 1
            return None, False

    def _record_hit(self, entry: CacheEntry[T], similarity: float) -> T:
        entry.hit_count += 1
        entry.last_similarity = similarity
        self._entries.move_to_end(entry.key)
        self._hits += 1
        return entry.result

    def _find_similar(self, key: str) -> tuple[CacheEntry[T] | None, float]:
        # Most recently used first; strict ">" keeps the first entry on ties.
        best: CacheEntry[T] | None = None
        best_similarity = -1.0
        for entry in reversed(self._entries.values()):
            if self._is_expired(entry):
                continue
            similarity = jaccard_similarity(key, entry.key)
            if similarity >= self._threshold and similarity > best_similarity:
                best = entry
                best_similarity = similarity
        return best, best_similarity

    def _is_expired(self, entry: CacheEntry[T]) -> bool:
        return self._clock() - entry.cached_at > self._ttl

    def stats(self) -> CacheStats:
        """
        Get cache statistics.

        Returns:
            Snapshot with size, hit/miss counters, hit rate and mean hits per entry.
        """
        with self._lock.read():
            total = self._hits + self._misses
            size = len(self._entries)
            total_hit_count = sum(entry.hit_count for entry in self._entries.values())
            return CacheStats(
                size=size,
                hits=self._hits,
                misses=self._misses,
                hit_rate=self._hits / total if total else 0.0,
                avg_hit_count=total_hit_count / size if size else 0.0,
            )

    def size(self) -> int:
        """Number of entries currently stored (expired entries included until touched)."""
        with self._lock.read():
            return len(self._entries)

    def clear(self) -> None:
        """Remove all entries and reset the counters."""
        with self._lock.write():
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def peek(self, idea_text: str) -> CacheEntry[T] | None:
        """Return the entry stored under the exact key without touching it."""
        with self._lock.read():
            return self._entries.get(normalize_text(idea_text))

    @property
    def similarity_threshold(self) -> float:
        """Get current similarity threshold."""
        return self._threshold

    @property
    def ttl(self) -> float:
        """Get entry time-to-live in seconds."""
        return self._ttl
