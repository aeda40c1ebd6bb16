"""In-memory dish collection with rate-limited mutations.

The store is the only owner of a session's dishes. Each mutation:
- Consumes one attempt from the session limiter under a fixed key
- Sanitizes free-text fields before they are stored
- Applies the change in a single step under the store lock
- Reports the outcome as a StoreResult carrying a user-facing notice

Unexpected exceptions never escape an operation; they are logged with a
traceback and reported as a failed result with no mutation applied.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.core.config import settings
from app.core.rate_limit import check_operation_limit
from app.schemas.dish import CreateDishInput, Dish, DishCategory, UpdateDishInput
from app.schemas.notice import Notice
from app.utils.sanitizer import sanitize_text

logger = logging.getLogger(__name__)

CREATE_KEY = "create"
UPDATE_KEY = "update"
DELETE_KEY = "delete"

ALL_CATEGORIES = "all"

# Shown when a delete targets an id that is no longer in the collection.
MISSING_DISH_NAME = "Dish"

_RATE_LIMIT_MESSAGES = {
    CREATE_KEY: "Please wait before creating another dish.",
    UPDATE_KEY: "Please wait before updating another dish.",
    DELETE_KEY: "Please wait before deleting another dish.",
}

_FAILURE_MESSAGES = {
    CREATE_KEY: "Failed to create dish",
    UPDATE_KEY: "Failed to update dish",
    DELETE_KEY: "Failed to delete dish",
}


@dataclass(frozen=True)
class StoreResult:
    """Outcome of a store operation.

    Attributes:
        success: True when the operation ran (including no-op update/delete).
        notice: Message for the user.
        dish: The created/updated/removed dish, when there was one.
        rate_limited: True when the limiter rejected the attempt.
        retry_after_ms: Suggested wait when rate limited.
    """

    success: bool
    notice: Notice
    dish: Dish | None = None
    rate_limited: bool = False
    retry_after_ms: int | None = None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_dish_id() -> str:
    return str(uuid.uuid4())


def format_timestamp(moment: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with millisecond precision."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value).astimezone(timezone.utc)


def _rate_limited(key: str, limit: RateLimitResult) -> StoreResult:
    return StoreResult(
        success=False,
        rate_limited=True,
        retry_after_ms=limit.retry_after_ms,
        notice=Notice(
            title="Rate limit exceeded",
            description=_RATE_LIMIT_MESSAGES[key],
            variant="destructive",
        ),
    )


def _failed(key: str) -> StoreResult:
    return StoreResult(
        success=False,
        notice=Notice(title="Error", description=_FAILURE_MESSAGES[key], variant="destructive"),
    )


def _succeeded(description: str, dish: Dish | None) -> StoreResult:
    return StoreResult(success=True, notice=Notice(title="Success", description=description), dish=dish)


class DishStore:
    """Thread-safe, in-memory dish collection.

    Attributes:
        rate_limiter: Limiter consulted before every mutation.
    """

    def __init__(
        self,
        rate_limiter: AbstractRateLimiter,
        dishes: Iterable[Dish] | None = None,
        *,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = _new_dish_id,
        max_search_chars: int | None = None,
    ) -> None:
        self.rate_limiter = rate_limiter
        self._dishes: list[Dish] = list(dishes or [])
        self._clock = clock
        self._id_factory = id_factory
        self._max_search_chars = max_search_chars or settings.app.max_search_chars
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._dishes)

    def load(self, dishes: Iterable[Dish]) -> None:
        """Replace the whole collection (used by the simulated fetch)."""
        with self._lock:
            self._dishes = list(dishes)

    def all(self) -> list[Dish]:
        with self._lock:
            return list(self._dishes)

    def get(self, dish_id: str) -> Dish | None:
        with self._lock:
            return next((dish for dish in self._dishes if dish.id == dish_id), None)

    def query(self, search: str | None = None, category: str | None = None) -> list[Dish]:
        """Filter dishes by search term and category.

        The search term is truncated, lower-cased and entity-escaped the same
        way stored names are, then matched as a substring of the lower-cased
        name or description. ``None`` or ``"all"`` selects every category.
        """
        dishes = self.all()

        term = (search or "")[: self._max_search_chars]
        if term:
            needle = sanitize_text(term).lower()
            dishes = [
                dish
                for dish in dishes
                if needle in dish.name.lower() or needle in dish.description.lower()
            ]

        if category and category != ALL_CATEGORIES:
            dishes = [dish for dish in dishes if dish.category.value == category]

        return dishes

    def _timestamp(self) -> str:
        return format_timestamp(self._clock())

    def create(self, data: CreateDishInput) -> StoreResult:
        """Add a dish with a fresh id and identical create/update timestamps."""
        limit = check_operation_limit(self.rate_limiter, CREATE_KEY)
        if not limit.allowed:
            return _rate_limited(CREATE_KEY, limit)

        try:
            now = self._timestamp()
            dish = Dish(
                id=self._id_factory(),
                name=sanitize_text(data.name),
                description=sanitize_text(data.description),
                price=data.price,
                category=data.category,
                image_url=data.image_url,
                created_at=now,
                updated_at=now,
            )
            with self._lock:
                if any(existing.id == dish.id for existing in self._dishes):
                    raise ValueError(f"duplicate dish id {dish.id}")
                self._dishes.append(dish)
        except Exception:
            logger.exception("dish.create_failed")
            return _failed(CREATE_KEY)

        logger.info("dish.created", extra={"dish_id": dish.id, "category": dish.category.value})
        return _succeeded(f"{dish.name} has been added to the menu", dish)

    def update(self, data: UpdateDishInput) -> StoreResult:
        """Replace the fields of the dish with ``data.id``.

        ``created_at`` is kept and ``updated_at`` refreshed (never earlier than
        ``created_at``). An unknown id leaves the collection unchanged.
        """
        limit = check_operation_limit(self.rate_limiter, UPDATE_KEY)
        if not limit.allowed:
            return _rate_limited(UPDATE_KEY, limit)

        try:
            name = sanitize_text(data.name)
            changes = {
                "name": name,
                "description": sanitize_text(data.description),
                "price": data.price,
                "category": DishCategory(data.category),
                "image_url": data.image_url,
            }
            now = self._clock()
            updated: Dish | None = None
            with self._lock:
                for index, dish in enumerate(self._dishes):
                    if dish.id != data.id:
                        continue
                    stamp = max(now, parse_timestamp(dish.created_at))
                    updated = dish.model_copy(update={**changes, "updated_at": format_timestamp(stamp)})
                    self._dishes[index] = updated
                    break
        except Exception:
            logger.exception("dish.update_failed", extra={"dish_id": data.id})
            return _failed(UPDATE_KEY)

        if updated is None:
            logger.info("dish.update_skipped", extra={"dish_id": data.id, "reason": "not_found"})
        else:
            logger.info("dish.updated", extra={"dish_id": updated.id})
        return _succeeded(f"{name} has been updated", updated)

    def delete(self, dish_id: str) -> StoreResult:
        """Remove the dish with ``dish_id``; an unknown id is a no-op."""
        limit = check_operation_limit(self.rate_limiter, DELETE_KEY)
        if not limit.allowed:
            return _rate_limited(DELETE_KEY, limit)

        try:
            with self._lock:
                removed = next((dish for dish in self._dishes if dish.id == dish_id), None)
                if removed is not None:
                    self._dishes = [dish for dish in self._dishes if dish.id != dish_id]
        except Exception:
            logger.exception("dish.delete_failed", extra={"dish_id": dish_id})
            return _failed(DELETE_KEY)

        if removed is None:
            logger.info("dish.delete_skipped", extra={"dish_id": dish_id, "reason": "not_found"})
            name = MISSING_DISH_NAME
        else:
            logger.info("dish.deleted", extra={"dish_id": dish_id})
            name = removed.name
        return _succeeded(f"{name} has been removed from the menu", removed)
