"""
Customer Models: read-only CRM records used for dispatch auto-fill.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from pos_api.models.dispatch import DeliveryAddress


class Customer(BaseModel):
    """Phone-keyed CRM profile. The engine never writes these."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    phone: str
    email: str | None = None
    addresses: tuple[DeliveryAddress, ...] = ()
    total_orders: int = 0
    total_spent: Decimal = Decimal("0")
    last_order_date: datetime | None = None
    notes: str | None = None

    @property
    def primary_address(self) -> DeliveryAddress | None:
        return self.addresses[0] if self.addresses else None
