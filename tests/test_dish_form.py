"""Tests for the dish form schema and its error reporting."""

from typing import Any

import pytest

from app.core.errors import ValidationAppError
from app.schemas.dish import DishCategory, DishForm, category_options, validate_dish_form


def _form(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": "Truffle Risotto",
        "description": "Creamy arborio rice with black truffle",
        "price": 28.99,
        "category": "mains",
        "image_url": "",
    }
    data.update(overrides)
    return data


def _field_errors(data: Any) -> dict[str, str]:
    with pytest.raises(ValidationAppError) as exc_info:
        validate_dish_form(data)
    assert exc_info.value.code == "invalid_dish_form"
    assert exc_info.value.details is not None
    return exc_info.value.details["fields"]


def test_valid_form() -> None:
    form = validate_dish_form(_form())

    assert form.name == "Truffle Risotto"
    assert form.category is DishCategory.MAINS
    assert form.price == 28.99


def test_form_keeps_raw_text_for_the_store_to_sanitize() -> None:
    form = validate_dish_form(_form(name="<script>"))

    assert form.name == "<script>"


def test_image_url_is_replaced_by_normalized_form() -> None:
    form = validate_dish_form(_form(image_url="HTTPS://Images.Unsplash.com/photo"))

    assert form.image_url == "https://images.unsplash.com/photo"


def test_numeric_string_price_is_accepted() -> None:
    assert validate_dish_form(_form(price="12.50")).price == 12.5


def test_missing_fields_report_required_messages() -> None:
    fields = _field_errors({})

    assert fields == {
        "name": "Name is required",
        "description": "Description is required",
        "price": "Price must be greater than 0",
        "category": "Category is required",
    }


@pytest.mark.parametrize(
    ("overrides", "field", "message"),
    [
        ({"name": ""}, "name", "Name is required"),
        ({"name": "x" * 101}, "name", "Name must be less than 100 characters"),
        ({"description": ""}, "description", "Description is required"),
        ({"description": "x" * 501}, "description", "Description must be less than 500 characters"),
        ({"price": 0}, "price", "Price must be greater than 0"),
        ({"price": -5}, "price", "Price must be greater than 0"),
        ({"price": 10000}, "price", "Price must be less than $10000"),
        ({"price": "abc"}, "price", "Price must be a positive number"),
        ({"price": "nan"}, "price", "Price must be a positive number"),
        ({"price": True}, "price", "Price must be a positive number"),
        ({"price": False}, "price", "Price must be a positive number"),
        ({"category": ""}, "category", "Category is required"),
        ({"category": "drinks"}, "category", "Invalid category"),
        ({"image_url": "https://evil.com/file.txt"}, "image_url", "Please enter a valid image URL"),
        ({"image_url": "ftp://images.unsplash.com/x.png"}, "image_url", "Please enter a valid image URL"),
    ],
)
def test_field_errors(overrides: dict, field: str, message: str) -> None:
    fields = _field_errors(_form(**overrides))

    assert fields == {field: message}


def test_boundary_lengths_and_prices_pass() -> None:
    form = validate_dish_form(
        _form(name="x" * 100, description="y" * 500, price=9999.99)
    )

    assert len(form.name) == 100
    assert form.price == 9999.99


def test_smallest_price_passes() -> None:
    assert validate_dish_form(_form(price=0.01)).price == 0.01


def test_non_mapping_input_is_rejected() -> None:
    fields = _field_errors(["not", "a", "form"])

    assert "form" in fields


def test_accepts_existing_form_instance() -> None:
    form = validate_dish_form(_form())

    assert validate_dish_form(form) == form


def test_to_update_input_carries_id() -> None:
    form = DishForm.model_validate(_form())

    update = form.to_update_input("dish-1")

    assert update.id == "dish-1"
    assert update.name == form.name


def test_category_options_in_menu_order() -> None:
    options = category_options()

    assert [o.value.value for o in options] == [
        "appetizers",
        "mains",
        "desserts",
        "beverages",
        "salads",
        "soups",
    ]
    assert options[1].label == "Main Courses"
