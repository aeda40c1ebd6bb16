"""Rate limiter interfaces.

Services depend on this abstraction (not the concrete implementation) so the
storage backend can be swapped without touching the dish store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the operation is allowed to proceed.
        limit: Max operations per window.
        remaining: Remaining operations in the trailing window (0 when blocked).
        reset_at_ms: Epoch milliseconds when the oldest counted operation expires.
        retry_after_ms: Suggested wait time in milliseconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at_ms: int
    retry_after_ms: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters keyed by operation name."""

    @abstractmethod
    def consume(self, key: str) -> RateLimitResult:
        """Record an attempt for ``key`` if budget remains.

        Args:
            key: Operation key (e.g. "create", "update", "delete").

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def reset(self, key: str | None = None) -> None:
        """Forget recorded attempts for one key, or for every key."""
        raise NotImplementedError

    def check_limit(self, key: str) -> bool:
        """Return True and count the attempt when ``key`` is under its limit."""
        return self.consume(key).allowed
