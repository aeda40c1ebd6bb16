"""Pytest configuration and fixtures shared across all test modules.

This file is loaded by pytest before any test module, so the environment
below is in place before app settings are created.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("APP_SIMULATED_LOAD_DELAY_MS", "0")
os.environ.setdefault("APP_SEED_SAMPLE_DISHES", "true")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("APP_RATE_LIMIT_REQUESTS", "5")
os.environ.setdefault("APP_RATE_LIMIT_WINDOW_MS", "60000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timezone  # noqa: E402
from unittest.mock import Mock  # noqa: E402

import pytest  # noqa: E402

from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter  # noqa: E402
from app.core.config import AppSettings  # noqa: E402


@pytest.fixture
def ms_clock() -> Mock:
    """Millisecond clock for rate limiters; set ``return_value`` to move time."""
    return Mock(return_value=1_000_000.0)


@pytest.fixture
def roomy_limiter(ms_clock: Mock) -> InMemorySlidingWindowRateLimiter:
    """Limiter that never gets in the way of a test."""
    return InMemorySlidingWindowRateLimiter(1000, 60000, clock=ms_clock)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def test_settings() -> AppSettings:
    return AppSettings(
        simulated_load_delay_ms=0,
        seed_sample_dishes=True,
        rate_limit_enabled=True,
        rate_limit_requests=5,
        rate_limit_window_ms=60000,
    )
