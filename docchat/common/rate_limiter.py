"""Token-bucket rate limiter for calls to the completion backend."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable


class RateLimiter:
    """Blocking token bucket refilled once per ``60 / requests_per_minute`` seconds.

    A ``requests_per_minute`` of ``None`` or ``<= 0`` disables limiting.
    The clock and sleep functions are injectable so tests never wait.
    """

    def __init__(
        self,
        requests_per_minute: int | None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.capacity = requests_per_minute if requests_per_minute and requests_per_minute > 0 else None
        self.tokens = float(self.capacity) if self.capacity else 0.0
        self.refill_interval = 60.0 / self.capacity if self.capacity else 0.0
        self._clock = clock
        self._sleep = sleep
        self.last_refill = clock()
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.capacity is not None

    def _refill(self) -> None:
        now = self._clock()
        tokens_to_add = int((now - self.last_refill) // self.refill_interval)
        if tokens_to_add > 0:
            self.tokens = min(float(self.capacity), self.tokens + tokens_to_add)
            self.last_refill += tokens_to_add * self.refill_interval

    def try_acquire(self) -> bool:
        """Take a token without blocking. Returns False when none is left."""
        if not self.enabled:
            return True
        with self._lock:
            self._refill()
            if self.tokens >= 1:
                self.tokens -= 1
                return True
            return False

    def acquire(self) -> None:
        """Block until a token is available or limiting is disabled."""
        if not self.enabled:
            return

        while True:
            with self._lock:
                self._refill()
                if self.tokens >= 1:
                    self.tokens -= 1
                    return
                wait_time = max(self.refill_interval - (self._clock() - self.last_refill), 0.0)

            # Sleep outside the lock so other threads can refill
            self._sleep(wait_time if wait_time > 0 else self.refill_interval)
