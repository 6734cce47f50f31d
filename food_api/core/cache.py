"""
core/cache.py – ResponseCache class.
URL → serialized response bytes, bounded capacity, time-to-live from the write.

Only successful (200) responses are stored, by the cache middleware.
Entries never react to store changes; staleness is bounded by the TTL.
"""
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

DEFAULT_TTL_SECONDS = 10 * 60


@dataclass(frozen=True)
class CachedResponse:
    body: bytes
    media_type: str
    expires_at: float


class ResponseCache:
    """Thread-safe TTL cache with least-recently-written eviction."""

    def __init__(
        self,
        capacity: int = 1000,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, CachedResponse] = OrderedDict()
        self._lock = threading.Lock()

    # ── Public API ─────────────────────────────────────────────────────────────

    def get(self, key: str) -> Optional[CachedResponse]:
        """Cached response for `key`, or None. Reads do not extend the TTL."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                return None
            return entry

    def set(self, key: str, body: bytes, media_type: str) -> None:
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = CachedResponse(body, media_type, self._clock() + self._ttl)
            while len(self._entries) > self._capacity:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
