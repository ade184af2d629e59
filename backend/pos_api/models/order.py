"""
Order Models: OrderItem, PriceOverride, Order, OrderDraft, PriceBreakdown.

OrderItem is shared by the cart and committed orders. Once a line is sent
to the kitchen it is frozen; the cart enforces that rule.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.config.constants import DispatchType, Limits, OrderStatus, PaymentStatus, TERMINAL_STATUSES
from shared.config.settings import settings
from pos_api.models.dispatch import DispatchDetails, customer_name_of, table_number_of
from pos_api.models.menu import MenuItem, Modifier


def new_line_id() -> str:
    return uuid.uuid4().hex


class PriceOverride(BaseModel):
    """A manager price override attached to a single line."""

    model_config = ConfigDict(frozen=True)

    override_price: Decimal
    original_price: Decimal
    reason: str

    @field_validator("override_price")
    @classmethod
    def _finite_price(cls, value: Decimal) -> Decimal:
        if not value.is_finite():
            raise ValueError("Override price must be a finite number")
        return value

    @field_validator("reason")
    @classmethod
    def _reason_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < settings.override_reason_min_length:
            raise ValueError(
                f"Override reason must be at least {settings.override_reason_min_length} characters"
            )
        return value


class OrderItem(BaseModel):
    """One priced, quantified, configured line in a cart or order."""

    line_id: str = Field(default_factory=new_line_id)
    menu_item_id: str
    name: str
    category: str
    allergens: frozenset[str] = frozenset()
    unit_price: Decimal
    quantity: int = Field(default=1, ge=Limits.MIN_QUANTITY)
    modifiers: list[Modifier] = Field(default_factory=list)
    notes: str = ""
    seat: int = Field(default=Limits.DEFAULT_SEAT, ge=Limits.SHARED_SEAT)
    is_sent_to_kitchen: bool = False
    override: PriceOverride | None = None

    @classmethod
    def from_menu_item(cls, item: MenuItem, quantity: int = 1, seat: int = Limits.DEFAULT_SEAT) -> "OrderItem":
        """Snapshot a catalog item into a new unsent line."""
        return cls(
            menu_item_id=item.id,
            name=item.name,
            category=item.category,
            allergens=item.allergens,
            unit_price=item.price,
            quantity=quantity,
            seat=seat,
        )

    @property
    def effective_unit_price(self) -> Decimal:
        if self.override is not None:
            return self.override.override_price
        return self.unit_price

    @property
    def modifiers_total(self) -> Decimal:
        return sum((m.price_delta for m in self.modifiers), Decimal("0"))

    @property
    def line_total(self) -> Decimal:
        return (self.effective_unit_price + self.modifiers_total) * self.quantity

    def is_plain(self) -> bool:
        """True for lines a simple add may merge into."""
        return (
            not self.modifiers
            and not self.notes
            and self.override is None
            and not self.is_sent_to_kitchen
        )


class PriceBreakdown(BaseModel):
    """Result of pricing a set of lines."""

    model_config = ConfigDict(frozen=True)

    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal


class Order(BaseModel):
    """A committed order. Mutated only by the order lifecycle service."""

    id: str
    order_number: int
    items: list[OrderItem]
    dispatch_type: DispatchType
    status: OrderStatus = OrderStatus.NEW
    payment_status: PaymentStatus = PaymentStatus.PENDING
    created_at: datetime
    details: DispatchDetails
    subtotal: Decimal
    tax: Decimal
    discount: Decimal = Decimal("0")
    total: Decimal

    @property
    def sent_items(self) -> list[OrderItem]:
        return [item for item in self.items if item.is_sent_to_kitchen]

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_held(self) -> bool:
        """Held orders can be recalled into the cart."""
        return self.payment_status == PaymentStatus.PENDING and self.status != OrderStatus.CANCELLED

    @property
    def customer_name(self) -> str | None:
        return customer_name_of(self.details)

    @property
    def table_number(self) -> str | None:
        return table_number_of(self.details)


class OrderDraft(BaseModel):
    """Mutable copy of a held order, loaded back into the cart for editing."""

    order_id: str
    items: list[OrderItem]
    dispatch_type: DispatchType
    details: DispatchDetails
    discount: Decimal
