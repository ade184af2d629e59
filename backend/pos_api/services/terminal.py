"""
Terminal store.

A PosTerminal is the single write entry point for one sales terminal. It
owns the cart, the order lifecycle and the read projections. Writes are
serialized with a re-entrant lock; after each successful write an immutable
snapshot is published to subscribers (kitchen display, order list, bills).
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Iterator

from shared.config.constants import DispatchType, OrderStatus, PaymentStatus
from shared.config.logging import pos_logger as logger
from shared.utils.exceptions import ValidationError
from pos_api.models.dispatch import DispatchDetails
from pos_api.models.kitchen import KitchenTicket
from pos_api.models.order import Order, OrderItem, PriceBreakdown
from pos_api.services.audit import AuditSink, LoggingAuditSink
from pos_api.services.catalog.menu_catalog import MenuCatalog
from pos_api.services.crm.customer_directory import CustomerDirectory, InMemoryCustomerDirectory
from pos_api.services.domain.cart_service import BarcodeScanResult, CartService, ItemConfiguration
from pos_api.services.domain.dispatch_service import (
    AddressResolver,
    DispatchDetailsResolver,
    DispatchDraft,
)
from pos_api.services.domain.kitchen_queue_service import KitchenQueueService
from pos_api.services.domain.order_query_service import OrderQueryService
from pos_api.services.domain.order_service import OrderService, utc_now
from pos_api.services.domain.pricing_service import PricingService


@dataclass(frozen=True, slots=True)
class TerminalSnapshot:
    """Everything a presentation surface needs after a change."""

    version: int
    orders: tuple[Order, ...]
    cart: tuple[OrderItem, ...]
    totals: PriceBreakdown
    kitchen_queue: tuple[KitchenTicket, ...]
    active_order_id: str | None
    dispatch_type: DispatchType | None
    details: DispatchDetails | None


Subscriber = Callable[[TerminalSnapshot], None]


class PosTerminal:
    """
    Serialized store around the cart and the order lifecycle.

    Usage:
        terminal = PosTerminal(catalog)
        terminal.start_order(DispatchType.DINE_IN)
        terminal.confirm_details(DispatchDraft(DispatchType.DINE_IN, table_number="5"))
        terminal.add_item("1")
        order = terminal.place_order(PaymentStatus.PENDING)
    """

    def __init__(
        self,
        catalog: MenuCatalog,
        customers: CustomerDirectory | None = None,
        address_resolver: AddressResolver | None = None,
        audit_sink: AuditSink | None = None,
        clock: Callable[[], datetime] = utc_now,
        tax_rate: Decimal | None = None,
        order_number_start: int | None = None,
    ):
        self.catalog = catalog
        self.customers = customers or InMemoryCustomerDirectory()
        self.clock = clock
        audit_sink = audit_sink or LoggingAuditSink()

        self.pricing = PricingService(tax_rate)
        self.resolver = DispatchDetailsResolver(self.customers, address_resolver)
        self.cart = CartService(catalog, self.pricing, audit_sink)
        self.order_service = OrderService(
            self.resolver,
            self.pricing,
            audit_sink,
            clock=clock,
            order_number_start=order_number_start,
        )
        self.kitchen = KitchenQueueService()
        self.queries = OrderQueryService()

        self.active_order_id: str | None = None
        self.dispatch_type: DispatchType | None = None
        self.details: DispatchDetails | None = None

        self._lock = threading.RLock()
        self._subscribers: list[Subscriber] = []
        self._version = 0

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a snapshot callback. Returns an unsubscribe function."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def snapshot(self) -> TerminalSnapshot:
        with self._lock:
            orders = self.order_service.orders
            return TerminalSnapshot(
                version=self._version,
                orders=tuple(orders),
                cart=tuple(self.cart.lines),
                totals=self.cart.totals(),
                kitchen_queue=tuple(self.kitchen.project(orders)),
                active_order_id=self.active_order_id,
                dispatch_type=self.dispatch_type,
                details=self.details,
            )

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        """Hold the write lock; publish a snapshot if the block succeeds."""
        with self._lock:
            yield
            self._version += 1
            self._publish()

    def _publish(self) -> None:
        if not self._subscribers:
            return
        snapshot = self.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.error("Snapshot subscriber failed", version=snapshot.version, exc_info=True)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def orders(self) -> list[Order]:
        with self._lock:
            return self.order_service.orders

    def get_order(self, order_id: str) -> Order:
        with self._lock:
            return self.order_service.get(order_id)

    def kitchen_queue(self) -> list[KitchenTicket]:
        return self.kitchen.project(self.orders)

    def totals(self) -> PriceBreakdown:
        with self._lock:
            return self.cart.totals()

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def start_order(self, dispatch_type: DispatchType) -> None:
        """Choose the dispatch type for the cart. Confirmed details are reset."""
        with self._mutation():
            self.dispatch_type = dispatch_type
            self.details = None

    def new_draft(self) -> DispatchDraft:
        """Blank draft for the current dispatch type, or pre-filled from confirmed details."""
        with self._lock:
            if self.dispatch_type is None:
                raise ValidationError("Choose a dispatch type first")
            if self.details is not None:
                return DispatchDraft.from_details(self.dispatch_type, self.details)
            return DispatchDraft(dispatch_type=self.dispatch_type)

    def confirm_details(self, details: DispatchDraft | DispatchDetails) -> DispatchDetails:
        """
        Validate and attach dispatch details to the cart.

        Raises:
            ValidationError: If no dispatch type is chosen or details are invalid
        """
        with self._mutation():
            if self.dispatch_type is None:
                raise ValidationError("Choose a dispatch type first")
            self.details = self.resolver.resolve(self.dispatch_type, details)
            return self.details

    async def lookup_address(self, draft: DispatchDraft) -> bool:
        """Async eircode lookup on a caller-owned draft. Never raises."""
        return await self.resolver.lookup_address(draft)

    # -------------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------------

    def begin_configuration(self, menu_item_id: str) -> ItemConfiguration:
        with self._lock:
            return self.cart.begin_configuration(menu_item_id)

    def add_item(self, menu_item_id: str, seat: int | None = None) -> bool:
        with self._mutation():
            return self.cart.add_simple(self.catalog.get(menu_item_id), seat)

    def add_configured(self, item: OrderItem | ItemConfiguration) -> OrderItem:
        with self._mutation():
            if isinstance(item, ItemConfiguration):
                item = item.build()
            return self.cart.add_configured(item)

    def scan_barcode(self, barcode: str) -> BarcodeScanResult:
        with self._mutation():
            return self.cart.add_by_barcode(barcode)

    def update_quantity(self, index: int, quantity: int) -> bool:
        with self._mutation():
            return self.cart.update_quantity(index, quantity)

    def remove_line(self, index: int) -> bool:
        with self._mutation():
            return self.cart.remove_line(index)

    def set_note(self, index: int, note: str) -> bool:
        with self._mutation():
            return self.cart.set_note(index, note)

    def set_modifiers(self, index: int, modifier_ids: Iterable[str]) -> bool:
        with self._mutation():
            return self.cart.set_modifiers(index, modifier_ids)

    def edit_line(
        self,
        index: int,
        quantity: int | None = None,
        modifier_ids: Iterable[str] | None = None,
        notes: str | None = None,
    ) -> bool:
        with self._mutation():
            return self.cart.edit_line(index, quantity=quantity, modifier_ids=modifier_ids, notes=notes)

    def set_active_seat(self, seat: int) -> None:
        with self._mutation():
            self.cart.set_active_seat(seat)

    def set_discount(self, amount: Decimal | int | str) -> None:
        with self._mutation():
            self.cart.set_discount(amount)

    def clear_cart(self) -> None:
        """Abandon the cart, including a recalled order's edits."""
        with self._mutation():
            self._reset_cart()

    def _reset_cart(self) -> None:
        self.cart.clear()
        self.active_order_id = None
        self.dispatch_type = None
        self.details = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def _require_details(self) -> tuple[DispatchType, DispatchDetails]:
        if self.dispatch_type is None:
            raise ValidationError("Choose a dispatch type first")
        if self.details is None:
            raise ValidationError("Dispatch details are required")
        return self.dispatch_type, self.details

    def place_order(self, payment_status: PaymentStatus, send_to_kitchen: bool = True) -> Order:
        """
        Commit the cart. A recalled order is updated in place.

        The cart is cleared only after the commit succeeds.
        """
        with self._mutation():
            dispatch_type, details = self._require_details()
            order = self.order_service.commit(
                self.cart.lines,
                dispatch_type,
                self.cart.discount,
                details,
                payment_status,
                existing_order_id=self.active_order_id,
                send_to_kitchen=send_to_kitchen,
            )
            self._reset_cart()
            return order

    def hold_order(self) -> Order:
        """Park the cart as an unsent, unpaid order."""
        with self._mutation():
            dispatch_type, details = self._require_details()
            order = self.order_service.hold(
                self.cart.lines,
                dispatch_type,
                self.cart.discount,
                details,
                existing_order_id=self.active_order_id,
            )
            self._reset_cart()
            return order

    def recall(self, order_id: str) -> Order:
        """Load a held order into the cart for editing."""
        with self._mutation():
            draft = self.order_service.recall(order_id)
            self.cart.load(draft)
            self.active_order_id = draft.order_id
            self.dispatch_type = draft.dispatch_type
            self.details = draft.details
            return self.order_service.get(order_id)

    def advance(self, order_id: str, status: OrderStatus) -> Order:
        with self._mutation():
            return self.order_service.advance(order_id, status)

    def advance_to_next(self, order_id: str) -> Order:
        with self._mutation():
            return self.order_service.advance_to_next(order_id)

    def cancel(self, order_id: str) -> Order:
        with self._mutation():
            return self.order_service.cancel(order_id)

    def set_payment_status(self, order_id: str, payment_status: PaymentStatus) -> Order:
        with self._mutation():
            return self.order_service.set_payment_status(order_id, payment_status)
