"""Menu session: the dialog state machine in front of a dish store.

A session is what a single user's menu page owns for its lifetime: one dish
store, one rate limiter, and the dialog currently open. Dialog state is an
explicit state machine so the page can never be editing and deleting at the
same time:

    Idle --open_create--> Creating --submit ok--> Idle
    Idle --open_edit(id)--> Editing(id) --submit ok--> Idle
    Idle --open_delete(id)--> ConfirmingDelete(id) --confirm ok--> Idle
    any dialog --close--> Idle

A failed submit (invalid form, rate limit, unexpected error) leaves the
dialog open so the user can retry or cancel.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Union

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.core.config import AppSettings, settings
from app.core.errors import InvalidTransitionAppError, NotFoundAppError
from app.core.rate_limit import build_rate_limiter
from app.schemas.dish import Dish, validate_dish_form
from app.services.dish_store import DishStore, StoreResult
from app.services.sample_menu import sample_dishes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    kind: ClassVar[str] = "idle"


@dataclass(frozen=True)
class Creating:
    kind: ClassVar[str] = "creating"


@dataclass(frozen=True)
class Editing:
    dish_id: str
    kind: ClassVar[str] = "editing"


@dataclass(frozen=True)
class ConfirmingDelete:
    dish_id: str
    kind: ClassVar[str] = "confirming_delete"


DialogState = Union[Idle, Creating, Editing, ConfirmingDelete]


class MenuSession:
    """One user's menu page: dishes, rate limiter and dialog state.

    Attributes:
        session_id: Unique identifier of the session.
        store: The session's dish store.
    """

    def __init__(
        self,
        session_id: str | None = None,
        *,
        store: DishStore | None = None,
        rate_limiter: AbstractRateLimiter | None = None,
        app_settings: AppSettings | None = None,
        menu_loader: Callable[[], list[Dish]] = sample_dishes,
    ) -> None:
        self._settings = app_settings or settings.app
        self.session_id = session_id or str(uuid.uuid4())
        limiter = rate_limiter or build_rate_limiter(self._settings)
        self.store = store or DishStore(limiter, max_search_chars=self._settings.max_search_chars)
        self._menu_loader = menu_loader
        self._state: DialogState = Idle()
        self._loading = False
        self._started = False
        self._ended = False

    @property
    def state(self) -> DialogState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def ended(self) -> bool:
        return self._ended

    async def start(self) -> None:
        """Run the simulated menu fetch.

        Waits ``simulated_load_delay_ms`` and then loads the sample menu when
        ``seed_sample_dishes`` is enabled. Dialogs cannot be opened meanwhile.
        """
        self._ensure_active()
        if self._started:
            return

        self._started = True
        self._loading = True
        try:
            delay_ms = self._settings.simulated_load_delay_ms
            if delay_ms:
                await asyncio.sleep(delay_ms / 1000)
            if self._settings.seed_sample_dishes:
                self.store.load(self._menu_loader())
        finally:
            self._loading = False

        logger.info(
            "session.started",
            extra={"session_id": self.session_id, "dish_count": len(self.store)},
        )

    def end(self) -> None:
        """Discard the session; its store and limiter are released."""
        if self._ended:
            return
        self._ended = True
        self._state = Idle()
        self.store.load([])
        self.store.rate_limiter.reset()
        logger.info("session.ended", extra={"session_id": self.session_id})

    def _ensure_active(self) -> None:
        if self._ended:
            raise InvalidTransitionAppError(
                code="session_ended",
                message="This session has ended",
                details={"session_id": self.session_id},
            )

    def _ensure_ready(self, action: str) -> None:
        self._ensure_active()
        if self._loading:
            raise InvalidTransitionAppError(
                code="session_loading",
                message="The menu is still loading",
                details={"session_id": self.session_id, "action": action},
            )

    def _invalid(self, action: str) -> InvalidTransitionAppError:
        return InvalidTransitionAppError(
            code="invalid_transition",
            message=f"Cannot {action.replace('_', ' ')} while {self._state.kind.replace('_', ' ')}",
            details={"state": self._state.kind, "action": action},
        )

    def _require_dish(self, dish_id: str) -> Dish:
        dish = self.store.get(dish_id)
        if dish is None:
            raise NotFoundAppError(
                code="dish_not_found",
                message="Dish not found",
                details={"dish_id": dish_id},
            )
        return dish

    def _transition(self, new_state: DialogState) -> None:
        logger.debug(
            "session.transition",
            extra={"session_id": self.session_id, "from": self._state.kind, "to": new_state.kind},
        )
        self._state = new_state

    def open_create(self) -> None:
        self._ensure_ready("open_create")
        if not isinstance(self._state, Idle):
            raise self._invalid("open_create")
        self._transition(Creating())

    def open_edit(self, dish_id: str) -> Dish:
        """Open the edit dialog and return the dish that prefills the form."""
        self._ensure_ready("open_edit")
        if not isinstance(self._state, Idle):
            raise self._invalid("open_edit")
        dish = self._require_dish(dish_id)
        self._transition(Editing(dish_id=dish_id))
        return dish

    def open_delete(self, dish_id: str) -> Dish:
        """Open the delete confirmation and return the dish it refers to."""
        self._ensure_ready("open_delete")
        if not isinstance(self._state, Idle):
            raise self._invalid("open_delete")
        dish = self._require_dish(dish_id)
        self._transition(ConfirmingDelete(dish_id=dish_id))
        return dish

    def close(self) -> None:
        self._ensure_active()
        if not isinstance(self._state, Idle):
            self._transition(Idle())

    def submit(self, form_data: Any) -> StoreResult:
        """Submit the open create/edit dialog.

        Raises:
            ValidationAppError: When the form is invalid; the dialog stays open.
            InvalidTransitionAppError: When no create/edit dialog is open.
        """
        self._ensure_ready("submit")
        state = self._state
        if isinstance(state, Creating):
            form = validate_dish_form(form_data)
            result = self.store.create(form.to_create_input())
        elif isinstance(state, Editing):
            form = validate_dish_form(form_data)
            result = self.store.update(form.to_update_input(state.dish_id))
        else:
            raise self._invalid("submit")

        if result.success:
            self._transition(Idle())
        return result

    def confirm_delete(self) -> StoreResult:
        self._ensure_ready("confirm_delete")
        state = self._state
        if not isinstance(state, ConfirmingDelete):
            raise self._invalid("confirm_delete")

        result = self.store.delete(state.dish_id)
        if result.success:
            self._transition(Idle())
        return result
