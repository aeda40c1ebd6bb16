"""Price bounds checking."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

MAX_PRICE = 9999.99

PRICE_NOT_POSITIVE = "Price must be a positive number"
PRICE_TOO_HIGH = "Price cannot exceed $9999.99"


@dataclass(frozen=True)
class PriceValidation:
    is_valid: bool
    error: str | None = None


def validate_price(price: Any) -> PriceValidation:
    """Bounds-check a price.

    Values that cannot be read as a number, NaN and negatives are rejected.
    Zero passes here; the dish form requires a price above zero.

    Args:
        price: Number (or numeric string) entered for the dish.

    Returns:
        PriceValidation with an error message when invalid.
    """
    if isinstance(price, bool):
        return PriceValidation(is_valid=False, error=PRICE_NOT_POSITIVE)

    try:
        value = float(price)
    except (TypeError, ValueError):
        return PriceValidation(is_valid=False, error=PRICE_NOT_POSITIVE)

    if math.isnan(value) or value < 0:
        return PriceValidation(is_valid=False, error=PRICE_NOT_POSITIVE)

    if value > MAX_PRICE:
        return PriceValidation(is_valid=False, error=PRICE_TOO_HIGH)

    return PriceValidation(is_valid=True)
