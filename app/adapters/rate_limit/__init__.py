"""Rate limiting adapters.

This package provides a small abstraction layer so menu sessions can start
with an in-memory limiter and later move to a shared store without changing
the dish store.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter

__all__ = ["AbstractRateLimiter", "InMemorySlidingWindowRateLimiter", "RateLimitResult"]
