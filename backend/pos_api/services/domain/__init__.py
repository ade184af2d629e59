"""
Domain Services - order engine application layer.

Services hold the business rules; routers stay thin and go through the
terminal store, which owns one instance of each.

Structure:
    Router (thin controller)
        ↓
    PosTerminal (serialized store)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Model (pydantic)

Usage:
    from pos_api.services.domain import PricingService

    pricing = PricingService()
    breakdown = pricing.price(cart.lines, discount=Decimal("2.00"))
"""

from .pricing_service import PricingService
from .cart_service import BarcodeScanResult, CartService, ItemConfiguration
from .dispatch_service import (
    AddressResolver,
    DispatchDetailsResolver,
    DispatchDraft,
    HttpAddressResolver,
)
from .order_service import OrderService
from .kitchen_queue_service import KitchenBoard, KitchenQueueService
from .order_query_service import DateRange, OrderQueryService, StatusFilter

__all__ = [
    # Pricing and cart
    "PricingService",
    "CartService",
    "ItemConfiguration",
    "BarcodeScanResult",
    # Dispatch
    "DispatchDetailsResolver",
    "DispatchDraft",
    "AddressResolver",
    "HttpAddressResolver",
    # Lifecycle
    "OrderService",
    # Projections
    "KitchenQueueService",
    "KitchenBoard",
    "OrderQueryService",
    "StatusFilter",
    "DateRange",
]
