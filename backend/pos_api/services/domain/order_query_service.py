"""
Order Query Domain Service.

Read-only filters behind the order list, the bills screen and the held
orders picker. All results are newest first.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable

from shared.config.constants import (
    DispatchType,
    OrderStatus,
    PaymentStatus,
    TERMINAL_STATUSES,
)
from shared.utils.validators import sanitize_search_term
from pos_api.models.order import Order


class StatusFilter(str, Enum):
    """Order list status filter. Individual statuses are accepted too."""

    ALL = "ALL"
    ACTIVE = "ACTIVE"


class DateRange(str, Enum):
    ALL = "ALL"
    TODAY = "TODAY"
    YESTERDAY = "YESTERDAY"
    WEEK = "WEEK"


@dataclass(frozen=True, slots=True)
class PaymentSummary:
    """Footer counts for a filtered order list."""

    total: int
    pending: int
    paid: int


def _newest_first(orders: Iterable[Order]) -> list[Order]:
    return sorted(orders, key=lambda order: order.created_at, reverse=True)


def _matches_search(order: Order, term: str) -> bool:
    if not term:
        return True
    lowered = term.lower()
    return (
        term in str(order.order_number)
        or lowered in (order.customer_name or "").lower()
        or term in (order.table_number or "")
    )


def _matches_status(order: Order, status_filter: StatusFilter | OrderStatus) -> bool:
    if status_filter == StatusFilter.ALL:
        return True
    if status_filter == StatusFilter.ACTIVE:
        return order.status not in TERMINAL_STATUSES
    return order.status == status_filter


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _matches_date(order: Order, date_range: DateRange, now: datetime) -> bool:
    if date_range == DateRange.ALL:
        return True

    today = _start_of_day(now)
    created = order.created_at
    if date_range == DateRange.TODAY:
        return created >= today
    if date_range == DateRange.YESTERDAY:
        return today - timedelta(days=1) <= created < today
    # Weeks start on Sunday
    start_of_week = today - timedelta(days=(today.weekday() + 1) % 7)
    return created >= start_of_week


class OrderQueryService:
    """Filters over order snapshots. Never mutates what it is given."""

    def filter_orders(
        self,
        orders: Iterable[Order],
        now: datetime,
        search: str | None = None,
        status_filter: StatusFilter | OrderStatus = StatusFilter.ALL,
        dispatch_type: DispatchType | None = None,
        payment_status: PaymentStatus | None = None,
        date_range: DateRange = DateRange.TODAY,
    ) -> list[Order]:
        """
        Order list filter.

        Search matches the order number, the customer name (case-insensitive)
        or the table number.
        """
        term = sanitize_search_term(search)
        return _newest_first(
            order
            for order in orders
            if _matches_search(order, term)
            and _matches_status(order, status_filter)
            and (dispatch_type is None or order.dispatch_type == dispatch_type)
            and (payment_status is None or order.payment_status == payment_status)
            and _matches_date(order, date_range, now)
        )

    def search_bills(self, orders: Iterable[Order], search: str | None = None) -> list[Order]:
        """Bills search: order number or customer name."""
        term = sanitize_search_term(search)
        lowered = term.lower()
        return _newest_first(
            order
            for order in orders
            if not term
            or term in str(order.order_number)
            or lowered in (order.customer_name or "").lower()
        )

    def held_orders(self, orders: Iterable[Order]) -> list[Order]:
        """Orders that can be recalled: payment pending and not cancelled."""
        return _newest_first(order for order in orders if order.is_held)

    def payment_summary(self, orders: Iterable[Order]) -> PaymentSummary:
        orders = list(orders)
        pending = sum(1 for order in orders if order.payment_status == PaymentStatus.PENDING)
        return PaymentSummary(total=len(orders), pending=pending, paid=len(orders) - pending)
