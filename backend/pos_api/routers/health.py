"""
Health check router.
"""

from fastapi import APIRouter, Depends

from shared.config.settings import settings
from pos_api.core.dependencies import get_terminal
from pos_api.services.terminal import PosTerminal

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": "pos-api",
        "environment": settings.environment,
    }


@router.get("/health/detailed")
def detailed_health_check(terminal: PosTerminal = Depends(get_terminal)):
    """Health plus terminal state counters."""
    snapshot = terminal.snapshot()
    return {
        "status": "healthy",
        "service": "pos-api",
        "environment": settings.environment,
        "terminal": {
            "version": snapshot.version,
            "menu_items": len(terminal.catalog),
            "orders": len(snapshot.orders),
            "kitchen_queue": len(snapshot.kitchen_queue),
            "next_order_number": terminal.order_service.next_order_number,
        },
    }
