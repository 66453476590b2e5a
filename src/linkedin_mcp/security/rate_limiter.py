"""Token-bucket limiter for the OAuth endpoints.

One limiter per application, keyed by client IP. Registration, authorize and
token requests each take a token; LinkedIn's callbacks and discovery do not.
The reaper prunes idle clients alongside the OAuth stores.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from dataclasses import dataclass

__all__ = ["RateLimiter", "RateLimitInfo"]


@dataclass
class _ClientBucket:
    tokens: float
    updated_at: float


@dataclass(frozen=True)
class RateLimitInfo:
    """Result of one ``RateLimiter.check()``."""

    allowed: bool
    limit: int
    remaining: int
    retry_after: float = 0.0

    def headers(self) -> dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
        }
        if not self.allowed:
            headers["Retry-After"] = str(math.ceil(self.retry_after))
        return headers


class RateLimiter:
    """Per-client token bucket.

    Parameters
    ----------
    rate : float
        Tokens regained per second.
    capacity : int
        Burst size; a new client starts with a full bucket.
    clock : callable
        Monotonic time source, replaceable in tests.
    """

    def __init__(
        self,
        rate: float,
        capacity: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.rate = rate
        self.capacity = capacity
        self._clock = clock
        self._clients: dict[str, _ClientBucket] = {}

    def _refill(self, client: str, now: float) -> _ClientBucket:
        bucket = self._clients.get(client)
        if bucket is None:
            bucket = self._clients[client] = _ClientBucket(float(self.capacity), now)
            return bucket
        bucket.tokens = min(float(self.capacity), bucket.tokens + (now - bucket.updated_at) * self.rate)
        bucket.updated_at = now
        return bucket

    def check(self, client: str) -> RateLimitInfo:
        """Take one token for *client* if there is one."""
        bucket = self._refill(client, self._clock())
        if bucket.tokens < 1.0:
            wait = (1.0 - bucket.tokens) / self.rate if self.rate > 0 else 1.0
            return RateLimitInfo(False, self.capacity, 0, wait)
        bucket.tokens -= 1.0
        return RateLimitInfo(True, self.capacity, int(bucket.tokens))

    def allow(self, client: str) -> bool:
        return self.check(client).allowed

    def cleanup(self, max_age: float = 3600.0) -> int:
        """Forget clients idle for more than *max_age* seconds."""
        now = self._clock()
        idle = [c for c, b in self._clients.items() if now - b.updated_at > max_age]
        for client in idle:
            del self._clients[client]
        return len(idle)
