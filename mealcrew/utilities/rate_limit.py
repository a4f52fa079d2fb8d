"""Process-local fixed-window rate limiting.

State lives in a dict guarded by a Lock, so counters are per process: with
several uvicorn workers each one keeps its own window.
"""
from __future__ import annotations
import time
from threading import Lock
from typing import Callable, Dict, Tuple

from mealcrew.utilities.config import (
    FORM_GEN_RATE_LIMIT, FORM_GEN_RATE_WINDOW,
    SUBMISSION_RATE_LIMIT, SUBMISSION_RATE_WINDOW,
)

MAX_KEYS = 10000


class RateLimiter:
    def __init__(self, limit: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window = window_seconds
        self._clock = clock
        self._lock = Lock()
        # key -> (count, reset_at)
        self._records: Dict[str, Tuple[int, float]] = {}

    def check(self, key: str) -> bool:
        """Count one hit for key; False once the window's limit is reached."""
        now = self._clock()
        with self._lock:
            record = self._records.get(key)
            if record is None or now > record[1]:
                self._records[key] = (1, now + self.window)
                if len(self._records) > MAX_KEYS:
                    self._prune(now)
                return True
            count, reset_at = record
            if count >= self.limit:
                return False
            self._records[key] = (count + 1, reset_at)
            return True

    def _prune(self, now: float):
        for k in [k for k, (_, reset_at) in self._records.items() if now > reset_at]:
            del self._records[k]

    def reset(self):
        with self._lock:
            self._records.clear()


form_generation_limiter = RateLimiter(FORM_GEN_RATE_LIMIT, FORM_GEN_RATE_WINDOW)
submission_limiter = RateLimiter(SUBMISSION_RATE_LIMIT, SUBMISSION_RATE_WINDOW)

__all__ = ['RateLimiter', 'form_generation_limiter', 'submission_limiter']
