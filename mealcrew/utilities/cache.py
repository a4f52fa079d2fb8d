"""
In-memory TTL cache.

Used for the public form read model. Entries live in a process-local dict,
so every worker keeps its own copy.
"""
import time
import logging
from threading import Lock
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class TTLCache:
    """Key -> value store where each entry expires ttl seconds after it was set."""

    def __init__(self, ttl_seconds: float, max_entries: int = 1000, evict_count: int = 100,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl_seconds
        self.max_entries = max_entries
        self.evict_count = evict_count
        self._clock = clock
        self._lock = Lock()
        # key -> (value, stored_at)
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, stored_at = entry
            if self._clock() > stored_at + self.ttl:
                del self._entries[key]
                logger.debug("Cache entry expired for key: %s", key)
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock())
            if len(self._entries) > self.max_entries:
                # drop the oldest entries first
                oldest = sorted(self._entries.items(), key=lambda kv: kv[1][1])[: self.evict_count]
                for k, _ in oldest:
                    del self._entries[k]

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def delete_matching(self, predicate: Callable[[str, Any], bool]) -> int:
        with self._lock:
            doomed = [k for k, (v, _) in self._entries.items() if predicate(k, v)]
            for k in doomed:
                del self._entries[k]
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
