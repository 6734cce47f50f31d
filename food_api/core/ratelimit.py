"""
core/ratelimit.py – RateLimiter class.
Per-client-IP token bucket: `rate` requests per second, burst of `rate`.

State is capped by an estimated memory budget; when the budget is full the
least recently seen client is evicted.
"""
import threading
import time
from collections import OrderedDict
from typing import Callable

# Rough footprint of one tracked client (key string + bucket + dict slot)
BYTES_PER_CLIENT = 256


class RateLimiter:

    def __init__(
        self,
        rate: int = 5,
        per_seconds: float = 1.0,
        max_memory: int = 64 * 1024 * 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._capacity = float(rate)
        self._refill_per_second = rate / per_seconds
        self._max_clients = max(1, max_memory // BYTES_PER_CLIENT)
        self._clock = clock
        self._buckets: OrderedDict[str, tuple[float, float]] = OrderedDict()  # ip → (tokens, last)
        self._lock = threading.Lock()

    @property
    def max_clients(self) -> int:
        return self._max_clients

    def allow(self, client_ip: str) -> bool:
        """Take one token for `client_ip`; False when its budget is spent."""
        now = self._clock()
        with self._lock:
            tokens, last = self._buckets.pop(client_ip, (self._capacity, now))
            tokens = min(self._capacity, tokens + (now - last) * self._refill_per_second)
            allowed = tokens >= 1.0
            if allowed:
                tokens -= 1.0
            self._buckets[client_ip] = (tokens, now)
            while len(self._buckets) > self._max_clients:
                self._buckets.popitem(last=False)
            return allowed

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)
