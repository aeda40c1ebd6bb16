from __future__ import annotations

from fastapi import APIRouter

from app.schemas.dish import CategoryOption, category_options

router = APIRouter(tags=["Menu"])


@router.get("/categories", response_model=list[CategoryOption])
def list_categories() -> list[CategoryOption]:
    """Menu categories offered by the dish form, with display labels."""

    return category_options()
