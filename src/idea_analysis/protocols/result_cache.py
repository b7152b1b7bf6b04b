"""Result cache protocol.

Defines the interface the cached provider needs from a cache so the
in-memory ``SimilarityCache`` can be swapped for another implementation.
"""

from typing import Protocol, TypeVar, runtime_checkable

from idea_analysis.models import CacheStats

T = TypeVar("T")


@runtime_checkable
class ResultCache(Protocol[T]):
    """Protocol for idea-keyed result caches."""

    def store(self, idea_text: str, result: T) -> None:
        """Store a result under the idea text.

        Args:
            idea_text: Raw idea text (normalized by the implementation)
            result: Payload to cache
        """
        ...

    def get(self, idea_text: str) -> tuple[T | None, bool]:
        """Find a cached result for the idea text.

        Args:
            idea_text: Raw idea text

        Returns:
            ``(result, True)`` on a hit, ``(None, False)`` on a miss
        """
        ...

    def stats(self) -> CacheStats:
        """Get cache statistics."""
        ...

    def clear(self) -> None:
        """Remove every entry."""
        ...
