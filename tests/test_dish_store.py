"""Tests for the in-memory dish store."""

import logging
from datetime import datetime, timedelta, timezone
from itertools import count
from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.schemas.dish import CreateDishInput, DishCategory, UpdateDishInput
from app.services.dish_store import DishStore, format_timestamp
from app.services.sample_menu import sample_dishes


def _create_input(**overrides) -> CreateDishInput:
    data = {
        "name": "Tomato Soup",
        "description": "Roasted tomatoes and basil",
        "price": 7.5,
        "category": DishCategory.SOUPS,
        "image_url": "",
    }
    data.update(overrides)
    return CreateDishInput(**data)


def _update_input(dish_id: str, **overrides) -> UpdateDishInput:
    return UpdateDishInput(id=dish_id, **_create_input(**overrides).model_dump())


@pytest.fixture
def store(roomy_limiter, fixed_now) -> DishStore:
    ids = count(1)
    return DishStore(
        roomy_limiter,
        sample_dishes(),
        clock=Mock(return_value=fixed_now),
        id_factory=lambda: f"new-{next(ids)}",
    )


class TestCreate:
    def test_adds_dish_with_equal_timestamps(self, store: DishStore, fixed_now) -> None:
        result = store.create(_create_input())

        assert result.success is True
        assert result.rate_limited is False
        assert result.dish is not None
        assert result.dish.id == "new-1"
        assert result.dish.created_at == result.dish.updated_at == format_timestamp(fixed_now)
        assert len(store) == 7
        assert store.get("new-1") == result.dish

    def test_success_notice(self, store: DishStore) -> None:
        result = store.create(_create_input())

        assert result.notice.title == "Success"
        assert result.notice.description == "Tomato Soup has been added to the menu"
        assert result.notice.variant == "default"

    def test_text_fields_are_sanitized(self, store: DishStore) -> None:
        result = store.create(_create_input(name="<script>", description='Say "hi"'))

        assert result.dish is not None
        assert result.dish.name == "&lt;script&gt;"
        assert result.dish.description == "Say &quot;hi&quot;"
        assert result.notice.description == "&lt;script&gt; has been added to the menu"

    def test_default_ids_are_unique_uuids(self, roomy_limiter) -> None:
        store = DishStore(roomy_limiter)

        first = store.create(_create_input()).dish
        second = store.create(_create_input()).dish

        assert first is not None and second is not None
        assert first.id != second.id
        assert len(first.id) == 36

    def test_duplicate_id_fails_without_mutation(self, roomy_limiter, caplog) -> None:
        store = DishStore(roomy_limiter, sample_dishes(), id_factory=lambda: "1")
        caplog.set_level(logging.ERROR, logger="app.services.dish_store")

        result = store.create(_create_input())

        assert result.success is False
        assert result.notice.description == "Failed to create dish"
        assert result.notice.variant == "destructive"
        assert len(store) == 6
        assert any(r.message == "dish.create_failed" for r in caplog.records)

    def test_id_factory_error_is_reported_as_failure(self, roomy_limiter, caplog) -> None:
        store = DishStore(roomy_limiter, id_factory=Mock(side_effect=RuntimeError("boom")))
        caplog.set_level(logging.ERROR, logger="app.services.dish_store")

        result = store.create(_create_input())

        assert result.success is False
        assert result.dish is None
        assert len(store) == 0
        failed = [r for r in caplog.records if r.message == "dish.create_failed"]
        assert failed and failed[0].exc_info is not None


class TestUpdate:
    def test_replaces_fields_and_keeps_created_at(self, store: DishStore, fixed_now) -> None:
        original = store.get("1")
        assert original is not None

        result = store.update(_update_input("1", name="Mushroom Risotto", price=30))

        assert result.success is True
        assert result.dish is not None
        assert result.dish.name == "Mushroom Risotto"
        assert result.dish.price == 30
        assert result.dish.category is DishCategory.SOUPS
        assert result.dish.created_at == original.created_at
        assert result.dish.updated_at == format_timestamp(fixed_now)
        assert result.notice.description == "Mushroom Risotto has been updated"
        assert store.get("1") == result.dish

    def test_keeps_position_in_collection(self, store: DishStore) -> None:
        store.update(_update_input("3"))

        assert [dish.id for dish in store.all()] == ["1", "2", "3", "4", "5", "6"]

    def test_update_sanitizes_text(self, store: DishStore) -> None:
        result = store.update(_update_input("2", name="<b>Salmon</b>"))

        assert result.dish is not None
        assert result.dish.name == "&lt;b&gt;Salmon&lt;&#x2F;b&gt;"

    def test_updated_at_never_before_created_at(self, roomy_limiter) -> None:
        created = datetime(2024, 5, 1, tzinfo=timezone.utc)
        clock = Mock(return_value=created)
        store = DishStore(roomy_limiter, clock=clock, id_factory=lambda: "d1")
        store.create(_create_input())

        clock.return_value = created - timedelta(hours=1)
        result = store.update(_update_input("d1"))

        assert result.dish is not None
        assert result.dish.updated_at == result.dish.created_at

    def test_unknown_id_is_a_silent_success(self, store: DishStore) -> None:
        before = store.all()

        result = store.update(_update_input("missing", name="Ghost"))

        assert result.success is True
        assert result.dish is None
        assert result.notice.description == "Ghost has been updated"
        assert store.all() == before


    def test_clock_error_is_reported_as_failure(self, roomy_limiter, fixed_now, caplog) -> None:
        clock = Mock(return_value=fixed_now)
        store = DishStore(roomy_limiter, sample_dishes(), clock=clock)
        before = store.all()
        clock.side_effect = RuntimeError("clock broken")
        caplog.set_level(logging.ERROR, logger="app.services.dish_store")

        result = store.update(_update_input("1", name="Changed"))

        assert result.success is False
        assert result.dish is None
        assert result.notice.description == "Failed to update dish"
        assert result.notice.variant == "destructive"
        assert store.all() == before
        assert any(r.message == "dish.update_failed" for r in caplog.records)


class _BrokenLock:
    def __enter__(self):
        raise RuntimeError("lock broken")

    def __exit__(self, *exc_info):
        return False


class TestDelete:
    def test_internal_error_is_reported_as_failure(self, store: DishStore, caplog) -> None:
        caplog.set_level(logging.ERROR, logger="app.services.dish_store")
        lock = store._lock
        store._lock = _BrokenLock()

        result = store.delete("1")

        store._lock = lock
        assert result.success is False
        assert result.dish is None
        assert result.notice.description == "Failed to delete dish"
        assert store.get("1") is not None
        assert len(store) == 6
        assert any(r.message == "dish.delete_failed" for r in caplog.records)

    def test_removes_dish(self, store: DishStore) -> None:
        result = store.delete("4")

        assert result.success is True
        assert result.dish is not None
        assert result.notice.description == "Chocolate Lava Cake has been removed from the menu"
        assert store.get("4") is None
        assert len(store) == 5

    def test_unknown_id_is_a_no_op(self, store: DishStore) -> None:
        result = store.delete("missing")

        assert result.success is True
        assert result.dish is None
        assert result.notice.description == "Dish has been removed from the menu"
        assert len(store) == 6


class TestRateLimiting:
    def test_sixth_create_in_window_is_rejected(self, ms_clock) -> None:
        limiter = InMemorySlidingWindowRateLimiter(5, 60000, clock=ms_clock)
        store = DishStore(limiter)

        results = [store.create(_create_input()) for _ in range(6)]

        assert all(r.success for r in results[:5])
        rejected = results[5]
        assert rejected.success is False
        assert rejected.rate_limited is True
        assert rejected.retry_after_ms == 60000
        assert rejected.notice.title == "Rate limit exceeded"
        assert rejected.notice.description == "Please wait before creating another dish."
        assert rejected.notice.variant == "destructive"
        assert len(store) == 5

    def test_create_allowed_again_after_window(self, ms_clock) -> None:
        limiter = InMemorySlidingWindowRateLimiter(1, 60000, clock=ms_clock)
        store = DishStore(limiter)
        store.create(_create_input())

        ms_clock.return_value += 60000

        assert store.create(_create_input()).success is True

    def test_keys_are_independent(self, ms_clock) -> None:
        limiter = InMemorySlidingWindowRateLimiter(1, 60000, clock=ms_clock)
        store = DishStore(limiter, sample_dishes())

        assert store.create(_create_input()).success is True
        assert store.update(_update_input("1")).success is True
        assert store.delete("2").success is True

        assert store.create(_create_input()).rate_limited is True
        assert store.update(_update_input("1")).rate_limited is True
        assert store.delete("3").rate_limited is True

    def test_rejected_update_and_delete_leave_store_unchanged(self, ms_clock) -> None:
        limiter = InMemorySlidingWindowRateLimiter(1, 60000, clock=ms_clock)
        store = DishStore(limiter, sample_dishes())
        store.update(_update_input("1"))
        store.delete("2")
        before = store.all()

        update = store.update(_update_input("1", name="Changed"))
        delete = store.delete("3")

        assert update.notice.description == "Please wait before updating another dish."
        assert delete.notice.description == "Please wait before deleting another dish."
        assert store.all() == before

    def test_no_op_operations_still_count(self, ms_clock) -> None:
        limiter = InMemorySlidingWindowRateLimiter(1, 60000, clock=ms_clock)
        store = DishStore(limiter)

        assert store.delete("missing").success is True
        assert store.delete("missing").rate_limited is True


class TestQuery:
    def test_no_filters_returns_everything(self, store: DishStore) -> None:
        assert len(store.query()) == 6

    def test_search_matches_name_case_insensitively(self, store: DishStore) -> None:
        assert [d.id for d in store.query(search="RISOTTO")] == ["1"]

    def test_search_matches_description(self, store: DishStore) -> None:
        names = {d.name for d in store.query(search="truffle")}

        assert "Truffle Risotto" in names

    def test_category_filter(self, store: DishStore) -> None:
        assert [d.id for d in store.query(category="mains")] == ["1", "2"]

    def test_all_category_keeps_everything(self, store: DishStore) -> None:
        assert len(store.query(category="all")) == 6

    def test_search_and_category_combine(self, store: DishStore) -> None:
        assert [d.id for d in store.query(search="salmon", category="mains")] == ["2"]
        assert store.query(search="salmon", category="desserts") == []

    def test_search_matches_escaped_stored_text(self, store: DishStore) -> None:
        store.create(_create_input(name="Chef's <Special>"))

        matches = store.query(search="chef's <special>")

        assert [d.name for d in matches] == ["Chef&#x27;s &lt;Special&gt;"]

    def test_search_term_is_truncated(self, roomy_limiter) -> None:
        store = DishStore(roomy_limiter, sample_dishes(), max_search_chars=5)

        assert [d.id for d in store.query(search="grillXXXXXXXX")] == ["2"]

    def test_query_returns_copies_of_the_list(self, store: DishStore) -> None:
        dishes = store.query()
        dishes.clear()

        assert len(store) == 6
