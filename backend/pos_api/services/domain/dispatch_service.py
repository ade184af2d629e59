"""
Dispatch Domain Service.

Turns operator-entered dispatch fields into validated DispatchDetails and
drives auto-fill from the CRM and the address-resolution service.

Auto-fill only writes fields the operator has not edited by hand. Address
lookups are asynchronous; each one is tagged with a request id and any
response that is not for the draft's latest request is dropped.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Optional, Protocol

import httpx

from shared.config.constants import (
    ADDRESS_LOOKUP_ADVISORY,
    DispatchType,
    Limits,
    PICKUP_DISPATCH_TYPES,
)
from shared.config.logging import dispatch_logger as logger, mask_phone
from shared.config.settings import settings
from shared.utils.exceptions import ExternalServiceError, ValidationError
from shared.utils.validators import normalize_phone, normalize_postcode, parse_guest_count
from pos_api.models.customer import Customer
from pos_api.models.dispatch import (
    DeliveryAddress,
    DeliveryDetails,
    DineInDetails,
    DispatchDetails,
    PartialAddress,
    PickupDetails,
    QrOrderDetails,
    details_match,
)
from pos_api.services.crm.customer_directory import CustomerDirectory


# =============================================================================
# Draft
# =============================================================================

DRAFT_FIELDS: frozenset[str] = frozenset(
    {
        "table_number",
        "guests",
        "customer_name",
        "customer_phone",
        "eircode",
        "address_line1",
        "address_line2",
        "city",
    }
)


@dataclass
class DispatchDraft:
    """
    Raw dispatch fields as the operator is filling them in.

    ``edited`` holds the fields the operator typed into; auto-fill leaves
    those alone.
    """

    dispatch_type: DispatchType
    table_number: str = ""
    guests: str = ""
    customer_name: str = ""
    customer_phone: str = ""
    eircode: str = ""
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    edited: set[str] = field(default_factory=set)
    advisory: Optional[str] = None
    found_customer: Optional[Customer] = None
    is_searching: bool = False
    latest_lookup_id: int = 0

    @classmethod
    def from_details(cls, dispatch_type: DispatchType, details: DispatchDetails) -> "DispatchDraft":
        """Pre-fill a draft from stored details, e.g. when recalling an order."""
        draft = cls(dispatch_type=dispatch_type)
        if isinstance(details, DineInDetails):
            draft.table_number = details.table_number
            draft.guests = str(details.guests)
        elif isinstance(details, PickupDetails):
            draft.customer_name = details.customer_name
            draft.customer_phone = details.customer_phone
        elif isinstance(details, DeliveryDetails):
            draft.customer_name = details.customer_name
            draft.customer_phone = details.customer_phone
            draft.eircode = details.address.eircode
            draft.address_line1 = details.address.line1
            draft.address_line2 = details.address.line2
            draft.city = details.address.city
        elif isinstance(details, QrOrderDetails):
            draft.table_number = details.table_number or ""
        return draft

    def edit(self, name: str, value: str | int | None) -> None:
        """Record an operator edit. Operator edits always win."""
        if name not in DRAFT_FIELDS:
            raise ValidationError(f"Unknown dispatch field '{name}'", field=name)
        setattr(self, name, "" if value is None else str(value))
        self.edited.add(name)
        self.advisory = None

    def autofill(self, name: str, value: str | None) -> bool:
        """Write a field unless the operator has edited it. Returns True if written."""
        if name in self.edited:
            return False
        setattr(self, name, value or "")
        return True

    def begin_lookup(self) -> int:
        self.latest_lookup_id += 1
        self.is_searching = True
        self.advisory = None
        return self.latest_lookup_id

    def is_latest(self, request_id: int) -> bool:
        return request_id == self.latest_lookup_id


# =============================================================================
# Address resolution service
# =============================================================================


class AddressResolver(Protocol):
    """Free-text address resolution. Returns None when nothing was found."""

    async def resolve(self, text: str) -> PartialAddress | None: ...


class HttpAddressResolver:
    """
    Address resolver backed by an HTTP endpoint.

    GET {base_url}/resolve?q=<text> returning
    ``{"line1": ..., "line2": ..., "city": ...}``; 404 means no match.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.address_lookup_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.address_lookup_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._client_lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        # Fast path: client already initialized
        if self._client is not None and not self._client.is_closed:
            return self._client

        async with self._client_lock:
            if self._client is None or self._client.is_closed:
                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    timeout=self.timeout,
                    transport=self._transport,
                )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def resolve(self, text: str) -> PartialAddress | None:
        """
        Raises:
            ExternalServiceError: If the service is unreachable or errors
        """
        client = await self._get_client()
        try:
            response = await client.get("/resolve", params={"q": text})
        except httpx.TransportError as e:
            raise ExternalServiceError("address-lookup", is_unavailable=True, error=str(e)) from e

        if response.status_code == 404:
            return None
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError("address-lookup", status=response.status_code) from e

        address = PartialAddress.model_validate(response.json())
        return None if address.is_empty() else address


# =============================================================================
# Resolver
# =============================================================================


class DispatchDetailsResolver:
    """
    Domain service for dispatch details.

    Validation is synchronous and raises ValidationError. Lookups never
    raise; failures surface as the draft's advisory message.
    """

    def __init__(
        self,
        customers: CustomerDirectory,
        address_resolver: AddressResolver | None = None,
    ):
        self._customers = customers
        self._address_resolver = address_resolver

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self, draft: DispatchDraft) -> DispatchDetails:
        """
        Validate a draft and build the details for its dispatch type.

        Raises:
            ValidationError: With the message to show the operator
        """
        dispatch_type = draft.dispatch_type

        if dispatch_type == DispatchType.DINE_IN:
            table = draft.table_number.strip()
            if not table:
                raise ValidationError("Table number is required.", field="table_number")
            return DineInDetails(table_number=table, guests=parse_guest_count(draft.guests))

        if dispatch_type in PICKUP_DISPATCH_TYPES:
            name = draft.customer_name.strip()
            if not name:
                raise ValidationError("Customer name is required.", field="customer_name")
            return PickupDetails(customer_name=name, customer_phone=normalize_phone(draft.customer_phone))

        if dispatch_type == DispatchType.DELIVERY:
            required = (draft.eircode, draft.address_line1, draft.city, draft.customer_name)
            if not all(value.strip() for value in required):
                raise ValidationError("Please complete all required delivery fields.", field="delivery")
            return DeliveryDetails(
                customer_name=draft.customer_name.strip(),
                customer_phone=normalize_phone(draft.customer_phone),
                address=DeliveryAddress(
                    eircode=draft.eircode.strip().upper(),
                    line1=draft.address_line1.strip(),
                    line2=draft.address_line2.strip(),
                    city=draft.city.strip(),
                ),
            )

        # QR orders carry no required fields
        return QrOrderDetails(table_number=draft.table_number.strip() or None)

    def resolve(
        self,
        dispatch_type: DispatchType,
        details: DispatchDraft | DispatchDetails,
    ) -> DispatchDetails:
        """
        Validate either a draft or already-built details for a dispatch type.

        Raises:
            ValidationError: If validation fails or the details belong to
                another dispatch type
        """
        if isinstance(details, DispatchDraft):
            if details.dispatch_type != dispatch_type:
                raise ValidationError(
                    "Dispatch details do not match the dispatch type",
                    dispatch_type=dispatch_type.value,
                )
            return self.validate(details)

        if not details_match(dispatch_type, details):
            raise ValidationError(
                "Dispatch details do not match the dispatch type",
                dispatch_type=dispatch_type.value,
                kind=getattr(details, "kind", None),
            )
        return self.validate(DispatchDraft.from_details(dispatch_type, details))

    # -------------------------------------------------------------------------
    # CRM auto-fill
    # -------------------------------------------------------------------------

    def apply_customer(self, draft: DispatchDraft, customer: Customer) -> None:
        """Fill name and phone, plus the first saved address for deliveries."""
        draft.found_customer = customer
        draft.autofill("customer_name", customer.name)
        draft.autofill("customer_phone", customer.phone)

        address = customer.primary_address
        if draft.dispatch_type == DispatchType.DELIVERY and address is not None:
            draft.autofill("eircode", address.eircode)
            draft.autofill("address_line1", address.line1)
            draft.autofill("address_line2", address.line2)
            draft.autofill("city", address.city)

    def on_phone_changed(self, draft: DispatchDraft, phone: str) -> Customer | None:
        """Record the operator's phone entry and auto-fill on an exact CRM match."""
        draft.edit("customer_phone", phone)
        customer = self._customers.lookup_by_phone(phone)
        if customer is None:
            draft.found_customer = None
            return None

        logger.info("Returning customer recognised", customer_id=customer.id, phone=mask_phone(phone))
        self.apply_customer(draft, customer)
        return customer

    # -------------------------------------------------------------------------
    # Address lookup
    # -------------------------------------------------------------------------

    async def lookup_address(self, draft: DispatchDraft) -> bool:
        """
        Resolve the draft's eircode: CRM first, then the address service.

        Returns True when fields were filled from this lookup. Stale
        responses, failures and empty results return False; the last two
        also set the draft's advisory.
        """
        code = normalize_postcode(draft.eircode)
        if len(code) < Limits.MIN_POSTCODE_LOOKUP_LENGTH:
            return False

        request_id = draft.begin_lookup()

        customer = self._customers.lookup_by_postcode(code)
        if customer is not None:
            self.apply_customer(draft, customer)
            draft.is_searching = False
            return True

        if self._address_resolver is None:
            draft.advisory = ADDRESS_LOOKUP_ADVISORY
            draft.is_searching = False
            return False

        try:
            result = await self._address_resolver.resolve(draft.eircode.strip())
        except Exception as e:
            # Lookup failure is non-fatal: the operator types the address in
            logger.warning("Address lookup failed", request_id=request_id, error=str(e))
            result = None
            failed = True
        else:
            failed = False

        if not draft.is_latest(request_id):
            logger.debug("Discarding stale address lookup", request_id=request_id)
            return False

        draft.is_searching = False
        if result is None or result.is_empty():
            if not failed:
                logger.info("Address lookup returned nothing", request_id=request_id)
            draft.advisory = ADDRESS_LOOKUP_ADVISORY
            return False

        filled = False
        for name, value in (
            ("address_line1", result.line1),
            ("address_line2", result.line2),
            ("city", result.city),
        ):
            if value:
                filled = draft.autofill(name, value.strip()) or filled
        return filled
