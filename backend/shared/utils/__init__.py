"""
Utilities module: Exceptions, validators.
"""

from shared.utils.exceptions import (
    NotFoundError,
    ValidationError,
    ConflictError,
    StockExceededError,
)
from shared.utils.validators import (
    parse_price,
    parse_guest_count,
    normalize_postcode,
    validate_quantity,
)

__all__ = [
    # exceptions
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "StockExceededError",
    # validators
    "parse_price",
    "parse_guest_count",
    "normalize_postcode",
    "validate_quantity",
]
