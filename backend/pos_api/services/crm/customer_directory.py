"""
Customer directory (CRM provider).

The order engine only reads customer records, to auto-fill dispatch
details. The in-memory directory backs the terminal and the tests.
"""

from __future__ import annotations

from typing import Iterable, Protocol

from shared.config.constants import Limits
from shared.config.logging import get_logger, mask_phone
from shared.utils.validators import normalize_phone, normalize_postcode
from pos_api.models.customer import Customer

logger = get_logger(__name__)


class CustomerDirectory(Protocol):
    """Read-only CRM lookups."""

    def lookup_by_phone(self, phone: str) -> Customer | None: ...

    def lookup_by_postcode(self, postcode: str) -> Customer | None: ...


class InMemoryCustomerDirectory:
    """CRM directory over a fixed list of customers."""

    def __init__(self, customers: Iterable[Customer] = ()):
        self._customers: tuple[Customer, ...] = tuple(customers)

    def __len__(self) -> int:
        return len(self._customers)

    def lookup_by_phone(self, phone: str) -> Customer | None:
        """Exact match on the trimmed phone number."""
        key = normalize_phone(phone)
        if not key:
            return None
        for customer in self._customers:
            if normalize_phone(customer.phone) == key:
                logger.debug("CRM phone match", customer_id=customer.id, phone=mask_phone(key))
                return customer
        return None

    def lookup_by_postcode(self, postcode: str) -> Customer | None:
        """
        First customer with a saved address whose eircode matches.

        Both sides are normalized (whitespace removed, upper-cased). Codes
        shorter than the minimum lookup length never match.
        """
        key = normalize_postcode(postcode)
        if len(key) < Limits.MIN_POSTCODE_LOOKUP_LENGTH:
            return None
        for customer in self._customers:
            if any(normalize_postcode(address.eircode) == key for address in customer.addresses):
                logger.debug("CRM eircode match", customer_id=customer.id)
                return customer
        return None
