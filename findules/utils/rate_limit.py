import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Tuple


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    retry_after: int


class RateLimiter:
    """
    Fixed-window request counter keyed by client identifier.

    Lives in process memory, so limits are per worker.
    """

    def __init__(self, max_requests: int, window_seconds: int, clock: Callable[[], float] = time.monotonic,
                 sweep_threshold: int = 10000):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.sweep_threshold = sweep_threshold
        self._clock = clock
        self._windows: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def check(self, identifier: str) -> RateLimitResult:
        now = self._clock()
        with self._lock:
            count, reset_at = self._windows.get(identifier, (0, now + self.window_seconds))
            if reset_at <= now:
                count, reset_at = 0, now + self.window_seconds

            if identifier not in self._windows and len(self._windows) >= self.sweep_threshold:
                self._sweep(now)

            count += 1
            self._windows[identifier] = (count, reset_at)

            if count > self.max_requests:
                return RateLimitResult(allowed=False, remaining=0, retry_after=max(1, math.ceil(reset_at - now)))
            return RateLimitResult(allowed=True, remaining=self.max_requests - count, retry_after=0)

    def _sweep(self, now: float) -> None:
        # Caller holds the lock
        expired = [key for key, (_, reset_at) in self._windows.items() if reset_at <= now]
        for key in expired:
            del self._windows[key]

    def __len__(self) -> int:
        return len(self._windows)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
