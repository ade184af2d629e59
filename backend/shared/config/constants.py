"""
Centralized constants for the order engine.
Avoid magic strings and repeated constants.

Usage:
    from shared.config.constants import OrderStatus, TERMINAL_STATUSES

    if order.status in TERMINAL_STATUSES:
        ...
"""

from enum import Enum
from typing import Final


# =============================================================================
# Order Status
# =============================================================================


class OrderStatus(str, Enum):
    """Order lifecycle status."""

    NEW = "NEW"
    PREPARING = "PREPARING"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES: Final[frozenset[OrderStatus]] = frozenset(
    {OrderStatus.COMPLETED, OrderStatus.CANCELLED}
)
ACTIVE_STATUSES: Final[frozenset[OrderStatus]] = frozenset(
    {OrderStatus.NEW, OrderStatus.PREPARING, OrderStatus.READY}
)


class PaymentStatus(str, Enum):
    """Payment classification chosen by the operator (no gateway)."""

    PENDING = "PENDING"
    PAID = "PAID"


class DispatchType(str, Enum):
    """How an order reaches the customer."""

    DINE_IN = "DINE_IN"
    COLLECTION = "COLLECTION"
    TAKE_OUT = "TAKE_OUT"
    DELIVERY = "DELIVERY"
    QR_ORDER = "QR_ORDER"


PICKUP_DISPATCH_TYPES: Final[frozenset[DispatchType]] = frozenset(
    {DispatchType.TAKE_OUT, DispatchType.COLLECTION}
)


class SelectionMode(str, Enum):
    """Modifier group selection mode."""

    SINGLE = "single"
    MULTIPLE = "multiple"


class AuditSeverity(str, Enum):
    """Severity attached to audit events."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# =============================================================================
# Status Transitions
# =============================================================================

# Forward flow: NEW → PREPARING → READY → COMPLETED, CANCELLED from any active state
ORDER_TRANSITIONS: Final[dict[OrderStatus, list[OrderStatus]]] = {
    OrderStatus.NEW: [OrderStatus.PREPARING, OrderStatus.CANCELLED],
    OrderStatus.PREPARING: [OrderStatus.READY, OrderStatus.CANCELLED],
    OrderStatus.READY: [OrderStatus.COMPLETED, OrderStatus.CANCELLED],
    OrderStatus.COMPLETED: [],  # Terminal state
    OrderStatus.CANCELLED: [],  # Terminal state
}


def is_forward_transition(from_status: OrderStatus, to_status: OrderStatus) -> bool:
    """Check whether a transition follows the documented forward flow."""
    return to_status in ORDER_TRANSITIONS.get(from_status, [])


# One-tap advance used by the order list and kitchen display
NEXT_STATUS: Final[dict[OrderStatus, OrderStatus]] = {
    OrderStatus.NEW: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.COMPLETED,
}


# =============================================================================
# Kitchen
# =============================================================================

# Kitchen queue priority by status (lower is served first)
KITCHEN_STATUS_PRIORITY: Final[dict[OrderStatus, int]] = {
    OrderStatus.NEW: 0,
    OrderStatus.PREPARING: 1,
    OrderStatus.READY: 2,
}

# Course order used to group tickets: starters before mains, drinks last
CATEGORY_PRIORITY: Final[dict[str, int]] = {
    "starters": 1,
    "salads": 2,
    "pizza": 3,
    "burgers": 4,
    "pasta": 5,
    "mains": 6,
    "sides": 7,
    "desserts": 8,
    "drinks": 9,
}
UNKNOWN_CATEGORY_PRIORITY: Final[int] = 99


def get_category_priority(category: str) -> int:
    """Return the course priority for a category (case-insensitive)."""
    return CATEGORY_PRIORITY.get(category.strip().lower(), UNKNOWN_CATEGORY_PRIORITY)


class TicketSize:
    """Ticket magnitude bands by number of sent units."""

    SNACK: Final[str] = "SNACK"
    MEAL: Final[str] = "MEAL"
    FEAST: Final[str] = "FEAST"

    SNACK_MAX_UNITS: Final[int] = 2
    MEAL_MAX_UNITS: Final[int] = 5


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    # Quantity limits
    MIN_QUANTITY: Final[int] = 1
    MAX_QUANTITY: Final[int] = 999

    # Seats: 0 is the shared course
    SHARED_SEAT: Final[int] = 0
    DEFAULT_SEAT: Final[int] = 1
    MAX_SEAT: Final[int] = 50

    # Guests default for dine-in orders
    DEFAULT_GUEST_COUNT: Final[int] = 1

    # Eircode lookups need at least this many characters
    MIN_POSTCODE_LOOKUP_LENGTH: Final[int] = 3

    # String lengths
    MAX_NOTE_LENGTH: Final[int] = 500
    MAX_SEARCH_TERM_LENGTH: Final[int] = 100


# =============================================================================
# Audit Actions
# =============================================================================


class AuditAction:
    """Audit action names emitted by the engine."""

    PRICE_OVERRIDE: Final[str] = "Price Override"
    STATUS_CHANGE: Final[str] = "Status Change"
    ORDER_CANCELLED: Final[str] = "Order Cancelled"


# =============================================================================
# Messages
# =============================================================================

ADDRESS_LOOKUP_ADVISORY: Final[str] = (
    "Could not resolve address automatically. Please enter manually."
)
