"""
POS API routers.

- health: /api/health
- menu: /api/menu/*
- cart: /api/cart/* (cart lines, dispatch details, lookups)
- orders: /api/orders/* (lifecycle and queries)
- kitchen: /api/kitchen/* (cook queue)
"""

from .health import router as health_router
from .menu import router as menu_router
from .cart import router as cart_router
from .orders import router as orders_router
from .kitchen import router as kitchen_router

__all__ = [
    "health_router",
    "menu_router",
    "cart_router",
    "orders_router",
    "kitchen_router",
]
