"""
Orders router.
Commit, hold, recall and status/payment changes, plus the order list,
held orders and bills queries.
"""

from fastapi import APIRouter, Depends, Query, status

from shared.config.constants import DispatchType, OrderStatus, PaymentStatus
from shared.config.logging import pos_logger as logger
from shared.utils.exceptions import ValidationError
from pos_api.core.dependencies import get_terminal
from pos_api.models.order import Order
from pos_api.routers.schemas import (
    PaymentSummaryOutput,
    PlaceOrderRequest,
    UpdatePaymentRequest,
    UpdateStatusRequest,
)
from pos_api.services.domain.order_query_service import DateRange, StatusFilter
from pos_api.services.terminal import PosTerminal

router = APIRouter(prefix="/api/orders", tags=["orders"])


def parse_status_filter(value: str) -> StatusFilter | OrderStatus:
    """ALL, ACTIVE or a single order status (case-insensitive)."""
    value = value.strip().upper()
    if value in StatusFilter.__members__:
        return StatusFilter(value)
    if value in OrderStatus.__members__:
        return OrderStatus(value)
    raise ValidationError(f"Unknown status filter '{value}'", status_filter=value)


# =============================================================================
# Queries
# =============================================================================


@router.get("", response_model=list[Order])
def list_orders(
    q: str | None = Query(default=None),
    status_filter: str = Query(default="ALL", alias="status"),
    dispatch_type: DispatchType | None = Query(default=None),
    payment_status: PaymentStatus | None = Query(default=None),
    date_range: DateRange = Query(default=DateRange.TODAY),
    terminal: PosTerminal = Depends(get_terminal),
) -> list[Order]:
    """Order list, newest first."""
    return terminal.queries.filter_orders(
        terminal.orders,
        now=terminal.clock(),
        search=q,
        status_filter=parse_status_filter(status_filter),
        dispatch_type=dispatch_type,
        payment_status=payment_status,
        date_range=date_range,
    )


@router.get("/summary", response_model=PaymentSummaryOutput)
def payment_summary(
    date_range: DateRange = Query(default=DateRange.TODAY),
    terminal: PosTerminal = Depends(get_terminal),
) -> PaymentSummaryOutput:
    orders = terminal.queries.filter_orders(terminal.orders, now=terminal.clock(), date_range=date_range)
    summary = terminal.queries.payment_summary(orders)
    return PaymentSummaryOutput(total=summary.total, pending=summary.pending, paid=summary.paid)


@router.get("/held", response_model=list[Order])
def list_held_orders(terminal: PosTerminal = Depends(get_terminal)) -> list[Order]:
    """Orders that can be recalled into the cart."""
    return terminal.queries.held_orders(terminal.orders)


@router.get("/bills", response_model=list[Order])
def search_bills(
    q: str | None = Query(default=None),
    terminal: PosTerminal = Depends(get_terminal),
) -> list[Order]:
    return terminal.queries.search_bills(terminal.orders, q)


@router.get("/{order_id}", response_model=Order)
def get_order(order_id: str, terminal: PosTerminal = Depends(get_terminal)) -> Order:
    return terminal.get_order(order_id)


# =============================================================================
# Lifecycle
# =============================================================================


@router.post("", response_model=Order, status_code=status.HTTP_201_CREATED)
def place_order(body: PlaceOrderRequest, terminal: PosTerminal = Depends(get_terminal)) -> Order:
    """
    Commit the cart. When the cart holds a recalled order, that order is
    updated instead of creating a new one.
    """
    order = terminal.place_order(body.payment_status, send_to_kitchen=body.send_to_kitchen)
    logger.info("Order committed via API", order_id=order.id, order_number=order.order_number)
    return order


@router.post("/hold", response_model=Order, status_code=status.HTTP_201_CREATED)
def hold_order(terminal: PosTerminal = Depends(get_terminal)) -> Order:
    """Park the cart without sending anything to the kitchen."""
    return terminal.hold_order()


@router.post("/{order_id}/recall", response_model=Order)
def recall_order(order_id: str, terminal: PosTerminal = Depends(get_terminal)) -> Order:
    """Load a held order into the cart."""
    return terminal.recall(order_id)


@router.post("/{order_id}/status", response_model=Order)
def update_status(
    order_id: str,
    body: UpdateStatusRequest,
    terminal: PosTerminal = Depends(get_terminal),
) -> Order:
    return terminal.advance(order_id, body.status)


@router.post("/{order_id}/advance", response_model=Order)
def advance_order(order_id: str, terminal: PosTerminal = Depends(get_terminal)) -> Order:
    """One step along NEW, PREPARING, READY, COMPLETED."""
    return terminal.advance_to_next(order_id)


@router.post("/{order_id}/cancel", response_model=Order)
def cancel_order(order_id: str, terminal: PosTerminal = Depends(get_terminal)) -> Order:
    return terminal.cancel(order_id)


@router.post("/{order_id}/payment", response_model=Order)
def update_payment(
    order_id: str,
    body: UpdatePaymentRequest,
    terminal: PosTerminal = Depends(get_terminal),
) -> Order:
    return terminal.set_payment_status(order_id, body.payment_status)
