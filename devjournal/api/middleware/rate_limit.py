"""In-process fixed-window rate limiting, applied per router via ``Depends``.

Counters live in memory and are lost on restart; each worker process
limits independently.
"""

from __future__ import annotations

import math
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog
from fastapi import HTTPException, Request

log = structlog.get_logger("devjournal.api")


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """Fixed-window counter keyed by client identifier."""

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}

    def hit(self, key: str) -> bool:
        """Count one request for *key*. Returns False once the window is full."""
        now = self._clock()
        window = self._windows.get(key)
        if window is None or now > window.reset_at:
            self._windows[key] = _Window(count=1, reset_at=now + self.window_seconds)
            return True
        if window.count >= self.limit:
            return False
        window.count += 1
        return True

    def remaining(self, key: str) -> int:
        window = self._windows.get(key)
        if window is None or self._clock() > window.reset_at:
            return self.limit
        return max(0, self.limit - window.count)

    def retry_after(self, key: str) -> int:
        window = self._windows.get(key)
        if window is None:
            return 0
        return max(0, math.ceil(window.reset_at - self._clock()))

    def reset(self) -> None:
        self._windows.clear()


LIMITERS: dict[str, RateLimiter] = {
    "api": RateLimiter(limit=100, window_seconds=15 * 60),
    "auth": RateLimiter(limit=10, window_seconds=15 * 60),
    "webhook": RateLimiter(limit=1000, window_seconds=60),
    "sync": RateLimiter(limit=10, window_seconds=5 * 60),
}


def client_identifier(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",", 1)[0].strip()
    else:
        ip = request.headers.get("x-real-ip") or (
            request.client.host if request.client else "unknown"
        )
    if request.headers.get("authorization"):
        return f"{ip}:authenticated"
    return ip


def rate_limit(kind: str) -> Callable[[Request], Awaitable[None]]:
    """Return a dependency enforcing the *kind* limiter."""
    limiter = LIMITERS[kind]

    async def _dependency(request: Request) -> None:
        key = client_identifier(request)
        if limiter.hit(key):
            return
        retry_after = limiter.retry_after(key)
        log.warning("rate_limit.exceeded", kind=kind, client=key, retry_after=retry_after)
        raise HTTPException(
            status_code=429,
            detail="rate limit exceeded, try again later",
            headers={
                "Retry-After": str(retry_after),
                "X-RateLimit-Limit": str(limiter.limit),
                "X-RateLimit-Remaining": str(limiter.remaining(key)),
                "X-RateLimit-Reset": str(retry_after),
            },
        )

    return _dependency


def reset_rate_limits() -> None:
    for limiter in LIMITERS.values():
        limiter.reset()
