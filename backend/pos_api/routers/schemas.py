"""
Request and response schemas for the POS API.

Domain models (Order, OrderItem, PriceBreakdown, KitchenTicket) are returned
as-is; only request bodies and composite views live here.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from shared.config.constants import DispatchType, Limits, OrderStatus, PaymentStatus
from pos_api.models.dispatch import DispatchDetails
from pos_api.models.menu import MenuItem
from pos_api.models.order import OrderItem, PriceBreakdown


# =============================================================================
# Menu
# =============================================================================


class CategoryOutput(BaseModel):
    name: str
    count: int


# =============================================================================
# Cart
# =============================================================================


class CartOutput(BaseModel):
    """Current cart with derived totals."""

    lines: list[OrderItem]
    totals: PriceBreakdown
    active_seat: int
    active_order_id: str | None = None
    dispatch_type: DispatchType | None = None
    details: DispatchDetails | None = None


class AddItemRequest(BaseModel):
    menu_item_id: str
    seat: int | None = Field(default=None, ge=Limits.SHARED_SEAT, le=Limits.MAX_SEAT)


class AddConfiguredItemRequest(BaseModel):
    """A configured line. Omitted modifier_ids keeps the default selection."""

    menu_item_id: str
    quantity: int = Field(default=1, ge=Limits.MIN_QUANTITY, le=Limits.MAX_QUANTITY)
    seat: int | None = Field(default=None, ge=Limits.SHARED_SEAT, le=Limits.MAX_SEAT)
    modifier_ids: list[str] | None = None
    notes: str = Field(default="", max_length=Limits.MAX_NOTE_LENGTH)
    override_price: str | None = None
    override_reason: str | None = None


class BarcodeRequest(BaseModel):
    barcode: str = Field(min_length=1)


class ConfigurationOutput(BaseModel):
    """Seeded configuration for an item that needs options chosen."""

    menu_item_id: str
    seat: int
    selected_modifier_ids: list[str]
    unit_total: Decimal


class BarcodeOutput(BaseModel):
    menu_item: MenuItem
    added: bool
    configuration: ConfigurationOutput | None = None


class UpdateLineRequest(BaseModel):
    """Partial line edit; only the fields present are applied."""

    quantity: int | None = None
    notes: str | None = None
    modifier_ids: list[str] | None = None


class LineEditOutput(BaseModel):
    applied: bool
    cart: CartOutput


class SeatRequest(BaseModel):
    seat: int


class DiscountRequest(BaseModel):
    amount: Decimal = Field(ge=0)


# =============================================================================
# Dispatch
# =============================================================================


class StartOrderRequest(BaseModel):
    dispatch_type: DispatchType


class DispatchFieldsRequest(BaseModel):
    """Raw dispatch fields as typed by the operator."""

    table_number: str = ""
    guests: str = ""
    customer_name: str = ""
    customer_phone: str = ""
    eircode: str = ""
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    # Fields the operator typed into; auto-fill leaves these alone
    edited: list[str] = Field(default_factory=list)


class DispatchDraftOutput(DispatchFieldsRequest):
    dispatch_type: DispatchType
    advisory: str | None = None
    found_customer_id: str | None = None


# =============================================================================
# Orders
# =============================================================================


class PlaceOrderRequest(BaseModel):
    payment_status: PaymentStatus = PaymentStatus.PENDING
    send_to_kitchen: bool = True


class UpdateStatusRequest(BaseModel):
    status: OrderStatus


class UpdatePaymentRequest(BaseModel):
    payment_status: PaymentStatus


class PaymentSummaryOutput(BaseModel):
    total: int
    pending: int
    paid: int
