"""
Per-client fixed-window throttling for the auth endpoints.

One limiter instance lives on ``app.state``; counters are in-process only, so
each worker enforces its own budget.
"""
from __future__ import annotations

from dataclasses import dataclass
import math
import threading
import time
from typing import Callable, Dict

from fastapi import HTTPException, Request

TOO_MANY_REQUESTS = "Too many requests. Try again later."


@dataclass
class _Window:
    hits: int
    resets_at: float


class RateLimiter:
    """Counts hits per key and refuses the ones past ``limit`` until the window ends."""

    def __init__(self, clock: Callable[[], float] = time.monotonic, max_keys: int = 10_000) -> None:
        self._clock = clock
        self._max_keys = max_keys
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, limit: int, window_seconds: int) -> float:
        """Record one hit. Returns 0 when allowed, otherwise seconds until the window resets."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now >= window.resets_at:
                if len(self._windows) >= self._max_keys:
                    self._prune(now)
                window = self._windows[key] = _Window(0, now + window_seconds)
            window.hits += 1
            if window.hits > limit:
                return max(window.resets_at - now, 0.0)
            return 0.0

    def check(self, key: str, limit: int, window_seconds: int) -> None:
        retry_after = self.hit(key, limit, window_seconds)
        if retry_after:
            raise HTTPException(
                429,
                TOO_MANY_REQUESTS,
                headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
            )

    def _prune(self, now: float) -> None:
        expired = [key for key, window in self._windows.items() if now >= window.resets_at]
        for key in expired:
            del self._windows[key]


def client_ip(request: Request) -> str:
    # first hop of X-Forwarded-For when running behind the proxy
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit_ip(request: Request, scope: str, *, limit: int, window_seconds: int) -> None:
    state = request.app.state
    if not state.settings.rate_limit_enabled:
        return
    state.rate_limiter.check(f"{scope}:{client_ip(request)}", limit, window_seconds)
