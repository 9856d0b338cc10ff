"""Fixed-window request limiting keyed by scope and client IP."""
from __future__ import annotations

import math
import threading
import time
from typing import Callable, Dict, Tuple

from fastapi import Request

from .errors import RateLimitedError


class _RateLimiter:
    """Counts hits per key inside a window; keys whose window ended are evicted."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._windows: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._windows)

    def _evict_expired(self, now: float) -> None:
        expired = [key for key, (_, resets_at) in self._windows.items() if resets_at <= now]
        for key in expired:
            del self._windows[key]

    def check(self, key: str, limit: int, window_seconds: int) -> None:
        if limit <= 0:
            return
        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            count, resets_at = self._windows.get(key, (0, now + window_seconds))
            count += 1
            self._windows[key] = (count, resets_at)
        if count > limit:
            raise RateLimitedError(retry_after=max(1, math.ceil(resets_at - now)))

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


_limiter = _RateLimiter()


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit_ip(request: Request, scope: str, *, limit: int, window_seconds: int) -> None:
    _limiter.check(f"{scope}:{_client_ip(request)}", limit, window_seconds)


def reset_limits() -> None:
    _limiter.reset()
