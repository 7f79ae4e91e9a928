"""
Process-wide token bucket shared by every API endpoint.

One instance is created at startup (see ``main.create_app``) and stored on
``app.state``; the ``enforce_rate_limit`` dependency asks it for a token
before any other work happens.
"""

import threading
import time
from collections.abc import Callable

from recipe_service.utils.logger import setup_logger

logger = setup_logger("rate_limit")


class TokenBucketLimiter:
    """
    Token bucket holding at most ``burst`` tokens, refilled continuously at
    ``refill_rate`` tokens per second. The bucket starts full.

    ``try_acquire`` never blocks or queues: it takes a token if one is
    available and returns ``False`` otherwise.
    """

    def __init__(
        self,
        refill_rate: float,
        burst: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        if refill_rate < 0:
            raise ValueError(f"refill_rate must be >= 0, got {refill_rate}")
        if burst < 0:
            raise ValueError(f"burst must be >= 0, got {burst}")

        self.refill_rate = float(refill_rate)
        self.burst = burst
        self._clock = clock
        self._tokens = float(burst)
        self._last_refill = clock()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._last_refill)
        self._last_refill = now
        self._tokens = min(float(self.burst), self._tokens + elapsed * self.refill_rate)

    def try_acquire(self) -> bool:
        with self._lock:
            self._refill()
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return True
            return False

    @property
    def available_tokens(self) -> float:
        with self._lock:
            self._refill()
            return self._tokens

    def __repr__(self):
        return f"<TokenBucketLimiter(refill_rate={self.refill_rate}, burst={self.burst})>"
