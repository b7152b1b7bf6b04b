"""Blocking token-bucket rate limiter for outbound API calls."""

import threading
import time
from collections.abc import Callable


class TokenBucket:
    """Token bucket that refills continuously at ``rate`` tokens per second.

    ``acquire`` blocks the calling thread until a token is available. The
    bucket starts full, so up to ``burst`` calls go through immediately.

    Example:
        ```python
        limiter = TokenBucket(rate=3.0, burst=5)
        limiter.acquire()  # may sleep
        ```
    """

    def __init__(
        self,
        rate: float = 3.0,
        burst: int = 5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the bucket.

        Args:
            rate: Tokens added per second.
            burst: Bucket capacity.
            clock: Monotonic clock, injectable for tests.
            sleep: Sleep function, injectable for tests.
        """
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        if burst < 1:
            raise ValueError(f"burst must be at least 1, got {burst}")

        self._rate = rate
        self._burst = burst
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(burst)
        self._updated_at = clock()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated_at)
        self._tokens = min(float(self._burst), self._tokens + elapsed * self._rate)
        self._updated_at = now

    def try_acquire(self) -> bool:
        """Take a token if one is available without waiting.

        Returns:
            True if a token was taken, False otherwise
        """
        with self._lock:
            self._refill()
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return True
            return False

    def acquire(self) -> float:
        """Take a token, sleeping until one is available.

        Returns:
            Total seconds spent waiting
        """
        waited = 0.0
        while True:
            with self._lock:
                self._refill()
                if self._tokens >= 1.0:
                    self._tokens -= 1.0
                    return waited
                delay = (1.0 - self._tokens) / self._rate
            self._sleep(delay)
            waited += delay

    @property
    def available_tokens(self) -> float:
        """Tokens currently in the bucket."""
        with self._lock:
            self._refill()
            return self._tokens
