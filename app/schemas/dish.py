"""Pydantic schemas for dishes and the dish form."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from app.core.errors import ValidationAppError
from app.utils.price_validator import validate_price
from app.utils.url_validator import validate_image_url

NAME_MAX_CHARS = 100
DESCRIPTION_MAX_CHARS = 500
MIN_PRICE = 0.01
MAX_PRICE = 9999.99


class DishCategory(str, Enum):
    """Menu sections a dish can belong to."""

    APPETIZERS = "appetizers"
    MAINS = "mains"
    DESSERTS = "desserts"
    BEVERAGES = "beverages"
    SALADS = "salads"
    SOUPS = "soups"


CATEGORY_LABELS: dict[DishCategory, str] = {
    DishCategory.APPETIZERS: "Appetizers",
    DishCategory.MAINS: "Main Courses",
    DishCategory.DESSERTS: "Desserts",
    DishCategory.BEVERAGES: "Beverages",
    DishCategory.SALADS: "Salads",
    DishCategory.SOUPS: "Soups",
}


class Dish(BaseModel):
    """A menu item as held by the dish store."""

    id: str = Field(..., description="Opaque unique identifier.")
    name: str = Field(..., description="Display name (entity-escaped).")
    description: str = Field(..., description="Short description (entity-escaped).")
    price: float = Field(..., description="Price in dollars.")
    category: DishCategory = Field(..., description="Menu section.")
    image_url: str = Field("", description="Normalized image URL, empty for no image.")
    created_at: str = Field(..., description="ISO-8601 creation timestamp (UTC).")
    updated_at: str = Field(..., description="ISO-8601 last update timestamp (UTC).")


class CreateDishInput(BaseModel):
    """Fields supplied when creating a dish."""

    name: str
    description: str
    price: float
    category: DishCategory
    image_url: str = ""


class UpdateDishInput(CreateDishInput):
    """Fields supplied when updating a dish; ``id`` selects the record."""

    id: str


class CategoryOption(BaseModel):
    value: DishCategory
    label: str


def category_options() -> list[CategoryOption]:
    """Categories in menu order with their display labels."""
    return [CategoryOption(value=value, label=label) for value, label in CATEGORY_LABELS.items()]


# Error types raised by DishForm validators; their messages are shown as-is.
_FORM_ERROR_TYPES = {
    "name_required",
    "name_too_long",
    "description_required",
    "description_too_long",
    "price_not_number",
    "price_too_low",
    "price_too_high",
    "category_required",
    "category_invalid",
    "image_url_invalid",
}

# Fallback per-field messages for pydantic's own errors (wrong types, NaN...)
_DEFAULT_FIELD_MESSAGES = {
    "name": "Name is required",
    "description": "Description is required",
    "price": "Price must be a positive number",
    "category": "Category is required",
    "image_url": "Please enter a valid image URL",
}


class DishForm(BaseModel):
    """Form-level schema for the create/edit dish dialog.

    Missing fields take the blank defaults of the dialog so they report the
    same "required" messages as an emptied input. ``image_url`` is replaced by
    its normalized form once validated.
    """

    model_config = ConfigDict(validate_default=True)

    name: str = ""
    description: str = ""
    price: float = Field(0, allow_inf_nan=False)
    category: DishCategory = Field(default="")  # type: ignore[assignment]
    image_url: str = ""

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if len(value) < 1:
            raise PydanticCustomError("name_required", "Name is required")
        if len(value) > NAME_MAX_CHARS:
            raise PydanticCustomError("name_too_long", "Name must be less than 100 characters")
        return value

    @field_validator("description")
    @classmethod
    def _check_description(cls, value: str) -> str:
        if len(value) < 1:
            raise PydanticCustomError("description_required", "Description is required")
        if len(value) > DESCRIPTION_MAX_CHARS:
            raise PydanticCustomError(
                "description_too_long", "Description must be less than 500 characters"
            )
        return value

    @field_validator("price", mode="before")
    @classmethod
    def _reject_bool_price(cls, value: Any) -> Any:
        # Lax float parsing would turn true into 1.0
        if isinstance(value, bool):
            raise PydanticCustomError("price_not_number", "Price must be a positive number")
        return value

    @field_validator("price")
    @classmethod
    def _check_price(cls, value: float) -> float:
        if value < MIN_PRICE:
            raise PydanticCustomError("price_too_low", "Price must be greater than 0")
        if value > MAX_PRICE:
            raise PydanticCustomError("price_too_high", "Price must be less than $10000")
        return value

    @field_validator("category", mode="before")
    @classmethod
    def _check_category(cls, value: Any) -> Any:
        if value is None or value == "":
            raise PydanticCustomError("category_required", "Category is required")
        try:
            return DishCategory(value)
        except ValueError:
            raise PydanticCustomError("category_invalid", "Invalid category") from None

    @field_validator("image_url")
    @classmethod
    def _check_image_url(cls, value: str) -> str:
        result = validate_image_url(value)
        if not result.is_valid:
            raise PydanticCustomError("image_url_invalid", "Please enter a valid image URL")
        return result.sanitized

    def to_create_input(self) -> CreateDishInput:
        return CreateDishInput(**self.model_dump())

    def to_update_input(self, dish_id: str) -> UpdateDishInput:
        return UpdateDishInput(id=dish_id, **self.model_dump())


def _field_errors(exc: ValidationError) -> dict[str, str]:
    """Collapse pydantic errors into one message per form field."""
    fields: dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "form"
        if err["type"] in _FORM_ERROR_TYPES:
            message = err["msg"]
        else:
            message = _DEFAULT_FIELD_MESSAGES.get(field, err["msg"])
        fields.setdefault(field, message)
    return fields


def validate_dish_form(data: Any) -> DishForm:
    """Validate raw dialog input.

    Runs the form schema, then the price validator as a second layer, as the
    dialog's submit handler does before calling the store.

    Args:
        data: Mapping of form fields (or a DishForm).

    Returns:
        The validated form with a normalized image URL.

    Raises:
        ValidationAppError: With per-field messages under ``details["fields"]``.
    """
    if isinstance(data, DishForm):
        data = data.model_dump()

    try:
        form = DishForm.model_validate(data)
    except ValidationError as exc:
        raise ValidationAppError(
            code="invalid_dish_form",
            message="Please correct the highlighted fields",
            details={"fields": _field_errors(exc)},
        ) from exc

    price_check = validate_price(form.price)
    if not price_check.is_valid:
        raise ValidationAppError(
            code="invalid_dish_form",
            message="Please correct the highlighted fields",
            details={"fields": {"price": price_check.error or ""}},
        )

    return form
