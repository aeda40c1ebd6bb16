from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Liveness check.

    Returns:
        dict: ``status`` set to "ok" and the number of live menu sessions.
    """

    return {"status": "ok", "sessions": len(request.app.state.session_registry)}
