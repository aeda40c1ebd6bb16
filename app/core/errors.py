"""Application-level exception types.

This module defines domain errors raised by the menu services, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    fields: dict[str, str]
    dish_id: str
    session_id: str
    state: str
    action: str
    retry_after_ms: int
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when form input fails validation."""


class NotFoundAppError(AppError):
    """Raised when a session or dish referenced by id does not exist."""


class InvalidTransitionAppError(AppError):
    """Raised when a session action is not allowed in the current state."""


class RateLimitAppError(AppError):
    """Raised when an operation is rejected by the rate limiter."""


class OperationFailedAppError(AppError):
    """Raised when a store operation failed unexpectedly."""
