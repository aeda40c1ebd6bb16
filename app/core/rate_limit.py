"""Rate limiting wiring for menu sessions.

This module builds the limiter a session owns and logs each decision.

Design goals:
- Minimal coupling: the dish store depends on the abstract limiter only.
- Session-scoped: every session gets a fresh limiter, discarded with it.
- Configurable: limits and window come from settings; limiting can be
  switched off entirely (e.g. for load tests).
"""

from __future__ import annotations

import logging
import time

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.core.config import AppSettings, settings

logger = logging.getLogger(__name__)


class UnlimitedRateLimiter(AbstractRateLimiter):
    """Limiter used when rate limiting is disabled; allows everything."""

    def consume(self, key: str) -> RateLimitResult:
        if not key:
            raise ValueError("key must be a non-empty string")
        return RateLimitResult(
            allowed=True,
            limit=0,
            remaining=0,
            reset_at_ms=int(time.time() * 1000),
            retry_after_ms=None,
        )

    def reset(self, key: str | None = None) -> None:
        return None


def build_rate_limiter(app_settings: AppSettings | None = None) -> AbstractRateLimiter:
    """Create the limiter owned by a new menu session.

    Args:
        app_settings: Optional settings override; defaults to global settings.

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """

    cfg = app_settings or settings.app
    if not cfg.rate_limit_enabled:
        return UnlimitedRateLimiter()

    return InMemorySlidingWindowRateLimiter(
        cfg.rate_limit_requests,
        cfg.rate_limit_window_ms,
    )


def check_operation_limit(limiter: AbstractRateLimiter, key: str) -> RateLimitResult:
    """Consume one attempt of ``key`` and log the decision.

    Args:
        limiter: The session's limiter.
        key: Operation key ("create", "update" or "delete").

    Returns:
        RateLimitResult from the limiter.
    """

    result = limiter.consume(key)
    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "operation": key,
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return result

    logger.warning(
        "rate_limit.exceeded",
        extra={
            "operation": key,
            "limit": result.limit,
            "retry_after_ms": result.retry_after_ms,
        },
    )
    return result
