"""
Dispatch Models: per-dispatch-type detail records.

DispatchDetails is a tagged union selected by ``kind``; each variant only
carries the fields its dispatch type needs.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from shared.config.constants import DispatchType, PICKUP_DISPATCH_TYPES


class DeliveryAddress(BaseModel):
    """A delivery address as stored on orders and CRM records."""

    model_config = ConfigDict(frozen=True)

    eircode: str
    line1: str
    line2: str = ""
    city: str


class PartialAddress(BaseModel):
    """Best-effort result of the address-resolution service."""

    line1: str | None = None
    line2: str | None = None
    city: str | None = None

    def is_empty(self) -> bool:
        return not (self.line1 or self.line2 or self.city)


class DineInDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["DINE_IN"] = "DINE_IN"
    table_number: str
    guests: int = 1


class PickupDetails(BaseModel):
    """Details for TAKE_OUT and COLLECTION orders."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["PICKUP"] = "PICKUP"
    customer_name: str
    customer_phone: str = ""


class DeliveryDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["DELIVERY"] = "DELIVERY"
    customer_name: str
    customer_phone: str = ""
    address: DeliveryAddress


class QrOrderDetails(BaseModel):
    """Self-service QR orders need no operator-entered details."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["QR_ORDER"] = "QR_ORDER"
    table_number: str | None = None


DispatchDetails = Annotated[
    Union[DineInDetails, PickupDetails, DeliveryDetails, QrOrderDetails],
    Field(discriminator="kind"),
]


def details_kind_for(dispatch_type: DispatchType) -> str:
    """Map a dispatch type to the ``kind`` tag of its details variant."""
    if dispatch_type in PICKUP_DISPATCH_TYPES:
        return "PICKUP"
    return dispatch_type.value


def details_match(dispatch_type: DispatchType, details: BaseModel) -> bool:
    return getattr(details, "kind", None) == details_kind_for(dispatch_type)


def customer_name_of(details: BaseModel) -> str | None:
    return getattr(details, "customer_name", None)


def table_number_of(details: BaseModel) -> str | None:
    return getattr(details, "table_number", None)
