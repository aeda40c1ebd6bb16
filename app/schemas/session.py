"""Pydantic schemas for the menu session API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from app.schemas.dish import Dish
from app.schemas.notice import Notice


class DialogStateView(BaseModel):
    """Current dialog of a session."""

    kind: Literal["idle", "creating", "editing", "confirming_delete"] = Field(
        ..., description="Dialog state name."
    )
    dish_id: str | None = Field(
        default=None,
        description="Dish the dialog refers to (editing / confirming_delete only).",
    )


class SessionView(BaseModel):
    """Snapshot of a menu session."""

    session_id: str = Field(..., description="Session identifier for subsequent calls.")
    loading: bool = Field(..., description="True while the initial menu fetch runs.")
    state: DialogStateView
    dish_count: int = Field(..., description="Number of dishes in the session's menu.")


class DishListResponse(BaseModel):
    dishes: list[Dish] = Field(default_factory=list)
    total: int = Field(..., description="Number of dishes in the whole menu (unfiltered).")


class OpenDialogRequest(BaseModel):
    """Request to open the create, edit or delete dialog."""

    action: Literal["create", "edit", "delete"]
    dish_id: str | None = Field(
        default=None,
        description="Required for edit and delete.",
    )


class OpenDialogResponse(BaseModel):
    state: DialogStateView
    dish: Dish | None = Field(
        default=None,
        description="Dish that prefills the edit form or awaits delete confirmation.",
    )


class OperationResponse(BaseModel):
    """Outcome of a successful create, update or delete."""

    notice: Notice
    dish: Dish | None = None
    state: DialogStateView
