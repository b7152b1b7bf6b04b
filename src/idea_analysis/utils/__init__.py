"""Utility modules for idea analysis."""

from .locks import ReadWriteLock
from .rate_limiter import TokenBucket

__all__ = [
    "ReadWriteLock",
    "TokenBucket",
]
