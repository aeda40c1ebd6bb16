"""In-memory sliding-window rate limiter.

Notes:
- Per-session: every menu session owns its own instance.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import math
import threading
import time
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


def _now_ms() -> float:
    return time.time() * 1000


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting attempts inside a trailing time window per key.

    Each key keeps the timestamps of its accepted attempts. On every check,
    timestamps at least ``window_ms`` old are dropped; the attempt is accepted
    only while fewer than ``max_requests`` remain. Rejected attempts are not
    recorded, so a caller hammering a blocked key does not extend its wait.

    Keys never share budget: "create" and "delete" are limited independently.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_ms: int = 60000,
        *,
        clock: Callable[[], float] = _now_ms,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            max_requests: Maximum number of accepted attempts per window.
            window_ms: Size of the trailing window in milliseconds.
            clock: Time source function returning epoch milliseconds.

        Raises:
            ValueError: If max_requests or window_ms are invalid.
        """
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")

        self._max_requests = max_requests
        self._window_ms = window_ms
        self._clock = clock
        self._lock = threading.RLock()
        self._requests_by_key: dict[str, list[float]] = {}

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def _build_allowed_result(self, *, remaining: int, reset_at_ms: float) -> RateLimitResult:
        """Build a RateLimitResult for an accepted attempt."""
        return RateLimitResult(
            allowed=True,
            limit=self._max_requests,
            remaining=remaining,
            reset_at_ms=int(reset_at_ms),
            retry_after_ms=None,
        )

    def _build_blocked_result(self, *, now: float, reset_at_ms: float) -> RateLimitResult:
        """Build a RateLimitResult for a rejected attempt."""
        retry_after = max(0, int(math.ceil(reset_at_ms - now)))
        return RateLimitResult(
            allowed=False,
            limit=self._max_requests,
            remaining=0,
            reset_at_ms=int(reset_at_ms),
            retry_after_ms=retry_after,
        )

    def consume(self, key: str) -> RateLimitResult:
        """Check the trailing window for ``key`` and record the attempt if allowed.

        Args:
            key: Operation key (e.g. "create").

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()

        with self._lock:
            recent = [t for t in self._requests_by_key.get(key, []) if now - t < self._window_ms]

            if len(recent) >= self._max_requests:
                self._requests_by_key[key] = recent
                return self._build_blocked_result(now=now, reset_at_ms=recent[0] + self._window_ms)

            recent.append(now)
            self._requests_by_key[key] = recent
            return self._build_allowed_result(
                remaining=self._max_requests - len(recent),
                reset_at_ms=recent[0] + self._window_ms,
            )

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._requests_by_key.clear()
            else:
                self._requests_by_key.pop(key, None)
