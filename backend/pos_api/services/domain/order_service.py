"""
Order Lifecycle Domain Service.

Owns the canonical order list and the order-number counter. Handles:
- commit: new order, or merge of a recalled cart into an existing order
- hold: commit without kitchen dispatch, payment pending
- advance / cancel: status changes with audit events
- recall: editable copy of a held order for the cart
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterable

from shared.config.constants import (
    ACTIVE_STATUSES,
    AuditAction,
    AuditSeverity,
    DispatchType,
    OrderStatus,
    PaymentStatus,
    TERMINAL_STATUSES,
    NEXT_STATUS,
    is_forward_transition,
)
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.utils.exceptions import (
    InvalidStateError,
    InvalidTransitionError,
    OrderNotFoundError,
    ValidationError,
)
from pos_api.models.dispatch import DispatchDetails
from pos_api.models.order import Order, OrderDraft, OrderItem
from pos_api.services.audit import AuditSink, LoggingAuditSink
from pos_api.services.domain.dispatch_service import DispatchDetailsResolver, DispatchDraft
from pos_api.services.domain.pricing_service import PricingService

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_order_id() -> str:
    return f"ord_{uuid.uuid4().hex[:12]}"


class OrderService:
    """
    Domain service for the order lifecycle.

    Orders are never deleted. Callers only ever receive copies; the only
    way to change an order is through this service.
    """

    def __init__(
        self,
        resolver: DispatchDetailsResolver,
        pricing: PricingService | None = None,
        audit_sink: AuditSink | None = None,
        clock: Callable[[], datetime] = utc_now,
        order_number_start: int | None = None,
        id_factory: Callable[[], str] = new_order_id,
    ):
        self._resolver = resolver
        self._pricing = pricing or PricingService()
        self._audit = audit_sink or LoggingAuditSink()
        self._clock = clock
        self._id_factory = id_factory
        self._next_number = (
            settings.order_number_start if order_number_start is None else order_number_start
        )
        self._orders: list[Order] = []
        self._by_id: dict[str, Order] = {}

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def orders(self) -> list[Order]:
        """Copies of all orders in creation order."""
        return [order.model_copy(deep=True) for order in self._orders]

    @property
    def next_order_number(self) -> int:
        return self._next_number

    def get(self, order_id: str) -> Order:
        return self._require(order_id).model_copy(deep=True)

    def _require(self, order_id: str) -> Order:
        order = self._by_id.get(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def _store(self, order: Order) -> None:
        if order.id in self._by_id:
            position = next(i for i, stored in enumerate(self._orders) if stored.id == order.id)
            self._orders[position] = order
        else:
            self._orders.append(order)
        self._by_id[order.id] = order

    # -------------------------------------------------------------------------
    # Commit / hold
    # -------------------------------------------------------------------------

    def commit(
        self,
        items: Iterable[OrderItem],
        dispatch_type: DispatchType,
        discount: Decimal | int | str,
        details: DispatchDraft | DispatchDetails,
        payment_status: PaymentStatus,
        existing_order_id: str | None = None,
        send_to_kitchen: bool = True,
    ) -> Order:
        """
        Commit cart lines as a new order, or into an existing one.

        The order is fully built and priced before it is stored.

        Raises:
            ValidationError: If the cart is empty or the details are invalid
            OrderNotFoundError: If existing_order_id is unknown
            InvalidStateError: If the existing order is completed or cancelled
        """
        lines = [item.model_copy(deep=True) for item in items]
        if not lines:
            raise ValidationError("Cart is empty")

        resolved = self._resolver.resolve(dispatch_type, details)
        discount = Decimal(discount)

        if existing_order_id is not None:
            return self._merge(existing_order_id, lines, dispatch_type, discount, resolved, payment_status, send_to_kitchen)

        for line in lines:
            line.is_sent_to_kitchen = send_to_kitchen or line.is_sent_to_kitchen

        totals = self._pricing.price(lines, discount)
        order = Order(
            id=self._id_factory(),
            order_number=self._next_number,
            items=lines,
            dispatch_type=dispatch_type,
            status=OrderStatus.NEW,
            payment_status=payment_status,
            created_at=self._clock(),
            details=resolved,
            subtotal=totals.subtotal,
            tax=totals.tax,
            discount=totals.discount,
            total=totals.total,
        )
        self._store(order)
        self._next_number += 1

        logger.info(
            "Order placed",
            order_id=order.id,
            order_number=order.order_number,
            dispatch_type=dispatch_type.value,
            lines=len(lines),
            total=str(order.total),
            sent_to_kitchen=send_to_kitchen,
        )
        return order.model_copy(deep=True)

    def _merge(
        self,
        order_id: str,
        lines: list[OrderItem],
        dispatch_type: DispatchType,
        discount: Decimal,
        details: DispatchDetails,
        payment_status: PaymentStatus,
        send_to_kitchen: bool,
    ) -> Order:
        existing = self._require(order_id)
        if existing.status in TERMINAL_STATUSES:
            raise InvalidStateError(
                f"Order #{existing.order_number}",
                existing.status.value,
                [status.value for status in sorted(ACTIVE_STATUSES, key=list(OrderStatus).index)],
            )

        # Sent lines are frozen: keep the stored version, whatever the cart says
        sent = {line.line_id: line for line in existing.items if line.is_sent_to_kitchen}
        merged: list[OrderItem] = []
        for line in lines:
            kept = sent.pop(line.line_id, None)
            if kept is not None:
                merged.append(kept.model_copy(deep=True))
            else:
                line.is_sent_to_kitchen = send_to_kitchen or line.is_sent_to_kitchen
                merged.append(line)
        merged.extend(line.model_copy(deep=True) for line in sent.values())

        status = existing.status
        if send_to_kitchen and status == OrderStatus.NEW:
            status = OrderStatus.PREPARING

        totals = self._pricing.price(merged, discount)
        order = Order(
            id=existing.id,
            order_number=existing.order_number,
            items=merged,
            dispatch_type=dispatch_type,
            status=status,
            payment_status=payment_status,
            created_at=existing.created_at,
            details=details,
            subtotal=totals.subtotal,
            tax=totals.tax,
            discount=totals.discount,
            total=totals.total,
        )
        self._store(order)

        logger.info(
            "Order updated",
            order_id=order.id,
            order_number=order.order_number,
            lines=len(merged),
            status=status.value,
            total=str(order.total),
        )
        return order.model_copy(deep=True)

    def hold(
        self,
        items: Iterable[OrderItem],
        dispatch_type: DispatchType,
        discount: Decimal | int | str,
        details: DispatchDraft | DispatchDetails,
        existing_order_id: str | None = None,
    ) -> Order:
        """Park an order: payment pending, nothing sent to the kitchen."""
        return self.commit(
            items,
            dispatch_type,
            discount,
            details,
            PaymentStatus.PENDING,
            existing_order_id=existing_order_id,
            send_to_kitchen=False,
        )

    # -------------------------------------------------------------------------
    # Status and payment
    # -------------------------------------------------------------------------

    def advance(self, order_id: str, new_status: OrderStatus) -> Order:
        """
        Set an order's status.

        Any status may be set, including backward moves; moves outside the
        forward flow are logged.
        """
        order = self._require(order_id)
        previous = order.status
        if previous == new_status:
            return order.model_copy(deep=True)

        if not is_forward_transition(previous, new_status):
            logger.warning(
                "Non-forward status change",
                order_id=order_id,
                from_status=previous.value,
                to_status=new_status.value,
            )

        order.status = new_status
        self._audit.record(
            AuditAction.STATUS_CHANGE,
            {
                "order_number": order.order_number,
                "from_status": previous.value,
                "to_status": new_status.value,
            },
            AuditSeverity.LOW,
        )
        logger.info("Order status changed", order_id=order_id, status=new_status.value)
        return order.model_copy(deep=True)

    def advance_to_next(self, order_id: str) -> Order:
        """
        Move an order one step along NEW, PREPARING, READY, COMPLETED.

        Raises:
            InvalidTransitionError: If the order is already completed or cancelled
        """
        order = self._require(order_id)
        next_status = NEXT_STATUS.get(order.status)
        if next_status is None:
            raise InvalidTransitionError(f"Order #{order.order_number}", order.status.value, "next")
        return self.advance(order_id, next_status)

    def cancel(self, order_id: str) -> Order:
        """
        Cancel an active order.

        Raises:
            InvalidTransitionError: If the order is already completed or cancelled
        """
        order = self._require(order_id)
        if order.status in TERMINAL_STATUSES:
            raise InvalidTransitionError(
                f"Order #{order.order_number}", order.status.value, OrderStatus.CANCELLED.value
            )

        previous = order.status
        order.status = OrderStatus.CANCELLED
        self._audit.record(
            AuditAction.ORDER_CANCELLED,
            {
                "order_number": order.order_number,
                "from_status": previous.value,
                "total": str(order.total),
            },
            AuditSeverity.HIGH,
        )
        logger.info("Order cancelled", order_id=order_id, from_status=previous.value)
        return order.model_copy(deep=True)

    def set_payment_status(self, order_id: str, payment_status: PaymentStatus) -> Order:
        """
        Reclassify an order's payment.

        Raises:
            InvalidStateError: If the order is cancelled
        """
        order = self._require(order_id)
        if order.status == OrderStatus.CANCELLED:
            raise InvalidStateError(f"Order #{order.order_number}", order.status.value)
        order.payment_status = payment_status
        logger.info("Payment status changed", order_id=order_id, payment_status=payment_status.value)
        return order.model_copy(deep=True)

    # -------------------------------------------------------------------------
    # Recall
    # -------------------------------------------------------------------------

    def recall(self, order_id: str) -> OrderDraft:
        """
        Editable copy of a held order.

        Raises:
            OrderNotFoundError: If the order is unknown
            InvalidStateError: If the order is paid or cancelled
        """
        order = self._require(order_id)
        if not order.is_held:
            raise InvalidStateError(
                f"Order #{order.order_number}",
                f"{order.status.value}/{order.payment_status.value}",
                ["payment PENDING and not CANCELLED"],
            )

        return OrderDraft(
            order_id=order.id,
            items=[line.model_copy(deep=True) for line in order.items],
            dispatch_type=order.dispatch_type,
            details=order.details,
            discount=order.discount,
        )
