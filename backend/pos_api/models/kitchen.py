"""
Kitchen Models: read-only projection of orders for the cook queue.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from shared.config.constants import DispatchType, OrderStatus
from pos_api.models.order import OrderItem


class KitchenCategoryGroup(BaseModel):
    """Sent lines of one category, ordered by seat."""

    model_config = ConfigDict(frozen=True)

    category: str
    items: tuple[OrderItem, ...]


class KitchenTicket(BaseModel):
    """One order as the kitchen sees it."""

    model_config = ConfigDict(frozen=True)

    order_id: str
    order_number: int
    status: OrderStatus
    dispatch_type: DispatchType
    created_at: datetime
    # Table number for dine-in, customer name otherwise
    label: str | None = None
    groups: tuple[KitchenCategoryGroup, ...]
    total_units: int
    size: str
    allergens: frozenset[str] = frozenset()
