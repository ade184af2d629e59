"""
Shared validators for operator input.
Centralized parsing of prices, quantities and lookup keys.
"""

import math
import re
from decimal import Decimal, InvalidOperation

from shared.config.constants import Limits

_WHITESPACE = re.compile(r"\s+")


def parse_price(value: str | int | float | Decimal | None) -> Decimal | None:
    """
    Parse an operator-entered price.

    Returns None when the value is empty, non-numeric, NaN or infinite.
    Negative prices are returned as-is; callers decide whether to allow them.
    """
    if value is None:
        return None

    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        value = repr(value)

    text = str(value).strip()
    if not text:
        return None

    try:
        price = Decimal(text)
    except InvalidOperation:
        return None

    if not price.is_finite():
        return None
    return price


def parse_guest_count(value: str | int | None) -> int:
    """
    Parse the number of guests for a dine-in order.

    Absent, non-numeric or non-positive input falls back to the default.
    """
    if value is None:
        return Limits.DEFAULT_GUEST_COUNT
    try:
        guests = int(str(value).strip())
    except ValueError:
        return Limits.DEFAULT_GUEST_COUNT
    if guests < 1:
        return Limits.DEFAULT_GUEST_COUNT
    return guests


def normalize_postcode(value: str | None) -> str:
    """
    Normalize an eircode/postcode for comparisons: strip all whitespace, upper-case.

    "d02 x285" -> "D02X285"
    """
    if not value:
        return ""
    return _WHITESPACE.sub("", value).upper()


def normalize_phone(value: str | None) -> str:
    """Trim a phone number for exact CRM matching."""
    return (value or "").strip()


def validate_quantity(quantity: int) -> int:
    """
    Validate a line quantity against the configured limits.

    Raises:
        ValueError: If quantity is outside [MIN_QUANTITY, MAX_QUANTITY]
    """
    if quantity < Limits.MIN_QUANTITY:
        raise ValueError(f"Quantity must be at least {Limits.MIN_QUANTITY}")
    if quantity > Limits.MAX_QUANTITY:
        raise ValueError(f"Quantity cannot exceed {Limits.MAX_QUANTITY}")
    return quantity


def sanitize_search_term(term: str | None) -> str:
    """Trim and cap a free-text search term."""
    if not term:
        return ""
    return term.strip()[: Limits.MAX_SEARCH_TERM_LENGTH]
