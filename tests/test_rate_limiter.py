from __future__ import annotations

import pytest

from accounts_api.core.errors import RateLimitedError
from accounts_api.core.rate_limiter import _RateLimiter


class _Clock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_blocks_after_limit_within_window():
    clock = _Clock()
    limiter = _RateLimiter(clock=clock)

    limiter.check("auth:login:1.2.3.4", limit=2, window_seconds=60)
    limiter.check("auth:login:1.2.3.4", limit=2, window_seconds=60)
    clock.now += 15
    with pytest.raises(RateLimitedError) as excinfo:
        limiter.check("auth:login:1.2.3.4", limit=2, window_seconds=60)
    assert excinfo.value.retry_after == 45
    assert excinfo.value.as_dict()["error"] == "rate_limited"

    limiter.check("auth:login:5.6.7.8", limit=2, window_seconds=60)


def test_window_end_allows_again():
    clock = _Clock()
    limiter = _RateLimiter(clock=clock)
    limiter.check("k", limit=1, window_seconds=10)
    with pytest.raises(RateLimitedError):
        limiter.check("k", limit=1, window_seconds=10)

    clock.now += 10
    limiter.check("k", limit=1, window_seconds=10)


def test_keys_from_ended_windows_are_evicted():
    clock = _Clock()
    limiter = _RateLimiter(clock=clock)
    for i in range(1000):
        limiter.check(f"auth:login:10.0.{i // 256}.{i % 256}", limit=5, window_seconds=30)
    assert len(limiter) == 1000

    clock.now += 31
    limiter.check("auth:login:192.168.0.1", limit=5, window_seconds=30)
    assert len(limiter) == 1


def test_non_positive_limit_disables_limiting():
    limiter = _RateLimiter(clock=_Clock())
    for _ in range(10):
        limiter.check("k", limit=0, window_seconds=60)
    assert len(limiter) == 0
