"""Bulk discount calculation."""

import math
from typing import Any, Dict, List

from product_catalog.errors import DataError, ValidationError


def _is_finite(value) -> bool:
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large to convert to float
        return False


def parse_discount_percent(body: Any) -> float:
    """Extract ``discountPercent`` from a decoded JSON request body.

    Only finite JSON numbers are accepted; booleans, strings, null, NaN and
    infinities are rejected.
    """
    value = body.get("discountPercent") if isinstance(body, dict) else None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not _is_finite(value):
        raise ValidationError("discountPercent must be a number")
    return value


def apply_discount(products: List[Dict[str, Any]], discount_percent: float) -> List[Dict[str, Any]]:
    """Return copies of ``products`` with every price reduced by ``discount_percent``.

    Prices are rounded to two decimal places. A price that leaves the float
    range raises ``DataError`` rather than being stored as an infinity.
    """
    factor = 1 - discount_percent / 100
    updated = []
    for product in products:
        if not isinstance(product, dict):
            raise DataError("product record is not an object")
        price = product.get("price")
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            raise DataError(f"product {product.get('id', 'Unknown')} has no numeric price")
        try:
            new_price = round(price * factor, 2)
        except OverflowError as e:
            raise DataError(f"product {product.get('id', 'Unknown')} price is out of range") from e
        if not _is_finite(new_price):
            raise DataError(f"product {product.get('id', 'Unknown')} price is out of range")
        updated.append({**product, "price": new_price})
    return updated
