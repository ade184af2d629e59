"""
Kitchen Queue Domain Service.

Stateless projection of the order list into the cook queue. Recomputed
from scratch on every change; nothing here is stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from shared.config.constants import (
    KITCHEN_STATUS_PRIORITY,
    OrderStatus,
    TERMINAL_STATUSES,
    TicketSize,
    get_category_priority,
)
from shared.config.logging import kitchen_logger as logger
from pos_api.models.kitchen import KitchenCategoryGroup, KitchenTicket
from pos_api.models.order import Order, OrderItem

GUEST_LABEL = "Guest"
READY_COLUMN_LIMIT = 4


def ticket_size(units: int) -> str:
    """SNACK up to 2 units, MEAL up to 5, FEAST beyond."""
    if units <= TicketSize.SNACK_MAX_UNITS:
        return TicketSize.SNACK
    if units <= TicketSize.MEAL_MAX_UNITS:
        return TicketSize.MEAL
    return TicketSize.FEAST


def group_by_category(items: Iterable[OrderItem]) -> tuple[KitchenCategoryGroup, ...]:
    """Group lines by category in course order; lines by seat within a group."""
    groups: dict[str, list[OrderItem]] = {}
    for item in items:
        groups.setdefault(item.category, []).append(item)

    ordered = sorted(groups, key=lambda name: (get_category_priority(name), name))
    return tuple(
        KitchenCategoryGroup(
            category=name,
            # Stable sort: lines on the same seat keep their order
            items=tuple(sorted(groups[name], key=lambda line: line.seat or 0)),
        )
        for name in ordered
    )


def ticket_label(order: Order) -> str:
    if order.table_number:
        return f"Table {order.table_number}"
    return order.customer_name or GUEST_LABEL


def build_ticket(order: Order) -> KitchenTicket:
    sent = order.sent_items
    units = sum(item.quantity for item in sent)
    allergens: set[str] = set()
    for item in sent:
        allergens.update(item.allergens)

    return KitchenTicket(
        order_id=order.id,
        order_number=order.order_number,
        status=order.status,
        dispatch_type=order.dispatch_type,
        created_at=order.created_at,
        label=ticket_label(order),
        groups=group_by_category(sent),
        total_units=units,
        size=ticket_size(units),
        allergens=frozenset(allergens),
    )


@dataclass(frozen=True, slots=True)
class KitchenBoard:
    """Kitchen display columns. READY shows only the most recent tickets."""

    new: tuple[KitchenTicket, ...]
    preparing: tuple[KitchenTicket, ...]
    ready: tuple[KitchenTicket, ...]


class KitchenQueueService:
    """Projects orders into prioritised kitchen tickets."""

    def project(self, orders: Iterable[Order]) -> list[KitchenTicket]:
        """
        Tickets for every active order with at least one sent line.

        Ordered by status (NEW, PREPARING, READY), then oldest first.
        """
        queued = [
            order
            for order in orders
            if order.status not in TERMINAL_STATUSES and order.sent_items
        ]
        queued.sort(key=lambda order: (KITCHEN_STATUS_PRIORITY[order.status], order.created_at))

        tickets = [build_ticket(order) for order in queued]
        logger.debug("Kitchen queue projected", tickets=len(tickets))
        return tickets

    def board(self, orders: Iterable[Order], ready_limit: int = READY_COLUMN_LIMIT) -> KitchenBoard:
        """Split the queue into display columns."""
        tickets = self.project(orders)
        ready = [t for t in tickets if t.status == OrderStatus.READY]
        ready.sort(key=lambda t: t.created_at, reverse=True)
        return KitchenBoard(
            new=tuple(t for t in tickets if t.status == OrderStatus.NEW),
            preparing=tuple(t for t in tickets if t.status == OrderStatus.PREPARING),
            ready=tuple(ready[:ready_limit]),
        )
