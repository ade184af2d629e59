"""
Pydantic models for the order engine.

Menu models are immutable reference data. OrderItem is shared by the cart
and committed orders. Kitchen tickets are derived and never stored.
"""

from .menu import Modifier, ModifierGroup, MenuItem
from .dispatch import (
    DeliveryAddress,
    PartialAddress,
    DineInDetails,
    PickupDetails,
    DeliveryDetails,
    QrOrderDetails,
    DispatchDetails,
    details_kind_for,
    details_match,
)
from .order import PriceOverride, OrderItem, PriceBreakdown, Order, OrderDraft
from .customer import Customer
from .kitchen import KitchenCategoryGroup, KitchenTicket

__all__ = [
    # Menu
    "Modifier",
    "ModifierGroup",
    "MenuItem",
    # Dispatch
    "DeliveryAddress",
    "PartialAddress",
    "DineInDetails",
    "PickupDetails",
    "DeliveryDetails",
    "QrOrderDetails",
    "DispatchDetails",
    "details_kind_for",
    "details_match",
    # Orders
    "PriceOverride",
    "OrderItem",
    "PriceBreakdown",
    "Order",
    "OrderDraft",
    # CRM
    "Customer",
    # Kitchen
    "KitchenCategoryGroup",
    "KitchenTicket",
]
