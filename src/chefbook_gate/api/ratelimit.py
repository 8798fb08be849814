"""
chefbook_gate.api.ratelimit

In-process sliding-window rate limiting for credential endpoints.

Responsibilities:
- Count attempts per client key inside a rolling window.
- Reject with 429 (and Retry-After) once the window is full.
"""

from __future__ import annotations

import math
import time
from collections import deque
from collections.abc import Callable

from fastapi import Request
from starlette.status import HTTP_429_TOO_MANY_REQUESTS

from chefbook_gate.gate.errors import GateError


class TooManyRequests(GateError):
    status_code = HTTP_429_TOO_MANY_REQUESTS
    code = "rate_limited"
    public_message = "Too many requests. Please try again later."

    def __init__(self, reason: str, *, retry_after: float) -> None:
        super().__init__(reason)
        self.headers = {"Retry-After": str(max(1, math.ceil(retry_after)))}


class SlidingWindowLimiter:
    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._limit = limit
        self._window = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    def hit(self, key: str) -> float | None:
        """
        Record one attempt for `key`. Returns None when allowed, otherwise the
        number of seconds until the oldest attempt leaves the window.
        """

        now = self._clock()
        if now - self._last_sweep >= self._window:
            self._sweep(now)
        window = self._hits.setdefault(key, deque())
        while window and window[0] <= now - self._window:
            window.popleft()
        if len(window) >= self._limit:
            return window[0] + self._window - now
        window.append(now)
        return None

    def _sweep(self, now: float) -> None:
        # Drop clients whose newest attempt has left the window.
        cutoff = now - self._window
        for key in [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]:
            del self._hits[key]
        self._last_sweep = now

    def tracked_keys(self) -> int:
        return len(self._hits)

    def reset(self) -> None:
        self._hits.clear()


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def login_rate_limit(request: Request) -> None:
    limiter: SlidingWindowLimiter = request.app.state.login_limiter
    key = client_key(request)
    retry_after = limiter.hit(key)
    if retry_after is not None:
        raise TooManyRequests(f"login attempts exhausted for {key}", retry_after=retry_after)


# --- Module Notes -----------------------------------------------------------
# State is per process. Multi-instance deployments need a shared backend (Redis)
# behind the same `hit` contract.
