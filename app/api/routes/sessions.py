from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request, status

from app.core.errors import (
    OperationFailedAppError,
    RateLimitAppError,
    ValidationAppError,
)
from app.schemas.session import (
    DialogStateView,
    DishListResponse,
    OpenDialogRequest,
    OpenDialogResponse,
    OperationResponse,
    SessionView,
)
from app.services.dish_store import StoreResult
from app.services.menu_session import MenuSession
from app.services.session_registry import SessionRegistry

router = APIRouter(tags=["Menu"])


def get_session_registry(request: Request) -> SessionRegistry:
    """Return the registry created by the app factory."""
    return request.app.state.session_registry


def _state_view(session: MenuSession) -> DialogStateView:
    return DialogStateView(
        kind=session.state.kind,  # type: ignore[arg-type]
        dish_id=getattr(session.state, "dish_id", None),
    )


def _session_view(session: MenuSession) -> SessionView:
    return SessionView(
        session_id=session.session_id,
        loading=session.loading,
        state=_state_view(session),
        dish_count=len(session.store),
    )


def _raise_for_result(result: StoreResult, operation: str) -> None:
    """Turn a rejected or failed store result into the matching AppError."""
    if result.rate_limited:
        raise RateLimitAppError(
            code="rate_limit_exceeded",
            message=result.notice.description,
            details={"retry_after_ms": result.retry_after_ms or 0, "action": operation},
        )
    if not result.success:
        raise OperationFailedAppError(
            code=f"{operation}_failed",
            message=result.notice.description,
            details={"action": operation},
        )


def _operation_response(session: MenuSession, result: StoreResult, operation: str) -> OperationResponse:
    _raise_for_result(result, operation)
    return OperationResponse(notice=result.notice, dish=result.dish, state=_state_view(session))


@router.post("/sessions", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def start_session(
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionView:
    """Start a menu session.

    Runs the simulated menu fetch before responding, so the returned session
    is ready for dialogs.

    Returns:
        SessionView: The new session's id, dialog state and dish count.
    """
    session = await registry.start()
    return _session_view(session)


@router.get("/sessions/{session_id}", response_model=SessionView)
async def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionView:
    return _session_view(registry.get(session_id))


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def end_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> None:
    registry.end(session_id)


@router.get("/sessions/{session_id}/dishes", response_model=DishListResponse)
async def list_dishes(
    session_id: str,
    search: str | None = Query(None, description="Case-insensitive name/description filter."),
    category: str | None = Query(None, description="Category value, or 'all'."),
    registry: SessionRegistry = Depends(get_session_registry),
) -> DishListResponse:
    """List the session's dishes, optionally filtered.

    Args:
        session_id: Session identifier.
        search: Search term (truncated to the configured maximum length).
        category: Category value to keep, or "all".

    Returns:
        DishListResponse: Matching dishes and the unfiltered total.
    """
    session = registry.get(session_id)
    dishes = session.store.query(search=search, category=category)
    return DishListResponse(dishes=dishes, total=len(session.store))


@router.post("/sessions/{session_id}/dialog", response_model=OpenDialogResponse)
async def open_dialog(
    session_id: str,
    payload: OpenDialogRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> OpenDialogResponse:
    """Open the create, edit or delete dialog.

    Raises:
        ValidationAppError: If edit/delete is requested without a dish id.
        NotFoundAppError: If the dish does not exist.
        InvalidTransitionAppError: If another dialog is already open.
    """
    session = registry.get(session_id)

    if payload.action == "create":
        session.open_create()
        return OpenDialogResponse(state=_state_view(session))

    if not payload.dish_id:
        raise ValidationAppError(
            code="dish_id_required",
            message="dish_id is required to edit or delete a dish",
            details={"fields": {"dish_id": "Dish is required"}, "action": payload.action},
        )

    if payload.action == "edit":
        dish = session.open_edit(payload.dish_id)
    else:
        dish = session.open_delete(payload.dish_id)
    return OpenDialogResponse(state=_state_view(session), dish=dish)


@router.delete("/sessions/{session_id}/dialog", response_model=SessionView)
async def close_dialog(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionView:
    session = registry.get(session_id)
    session.close()
    return _session_view(session)


@router.post("/sessions/{session_id}/dialog/submit", response_model=OperationResponse)
async def submit_dialog(
    session_id: str,
    form: dict[str, Any] = Body(..., description="Dish form fields."),
    registry: SessionRegistry = Depends(get_session_registry),
) -> OperationResponse:
    """Submit the open create or edit dialog.

    The form is validated by the dish form schema (field errors come back as
    a 400 with ``details.fields``), then passed to the store.

    Returns:
        OperationResponse: Success notice, the stored dish and the new state.

    Raises:
        RateLimitAppError: 429 when the session's limiter rejects the attempt.
        OperationFailedAppError: 500 when the store failed unexpectedly.
    """
    session = registry.get(session_id)
    operation = "update" if session.state.kind == "editing" else "create"
    result = session.submit(form)
    return _operation_response(session, result, operation)


@router.post("/sessions/{session_id}/dialog/confirm", response_model=OperationResponse)
async def confirm_delete(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> OperationResponse:
    session = registry.get(session_id)
    result = session.confirm_delete()
    return _operation_response(session, result, "delete")
