"""Pydantic schemas for user-facing notices."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class Notice(BaseModel):
    """A transient message shown to the user after an operation."""

    title: str = Field(..., description="Short headline, e.g. 'Success'.")
    description: str = Field(..., description="Message body.")
    variant: Literal["default", "destructive"] = Field(
        default="default",
        description="'destructive' for rate-limit and failure notices.",
    )
