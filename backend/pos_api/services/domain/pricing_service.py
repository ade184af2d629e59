"""
Pricing Domain Service.

Pure pricing of a set of lines: subtotal, flat tax, discount, total.
All arithmetic is Decimal; tax and total are rounded half-up to cents.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from shared.config.settings import settings
from shared.utils.exceptions import ValidationError
from pos_api.models.order import OrderItem, PriceBreakdown

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_cents(amount: Decimal) -> Decimal:
    """Round a money amount half-up to two decimal places."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def line_total(item: OrderItem) -> Decimal:
    """(effective unit price + modifier deltas) x quantity."""
    return item.line_total


class PricingService:
    """
    Domain service for pricing carts and orders.

    Stateless apart from the default tax rate, so one instance can be
    shared by the cart and the order lifecycle.
    """

    def __init__(self, tax_rate: Decimal | None = None):
        self._tax_rate = settings.tax_rate if tax_rate is None else Decimal(tax_rate)

    @property
    def tax_rate(self) -> Decimal:
        return self._tax_rate

    def subtotal(self, items: Iterable[OrderItem]) -> Decimal:
        """Sum of line totals, sent and unsent."""
        return sum((line_total(item) for item in items), ZERO)

    def price(
        self,
        items: Iterable[OrderItem],
        discount: Decimal | int | str = ZERO,
        tax_rate: Decimal | None = None,
    ) -> PriceBreakdown:
        """
        Price a set of lines.

        total = max(0, subtotal + tax - discount)

        Raises:
            ValidationError: If the discount is negative
        """
        rate = self._tax_rate if tax_rate is None else Decimal(tax_rate)
        discount = Decimal(discount)
        if discount < 0:
            raise ValidationError("Discount cannot be negative", discount=str(discount))

        subtotal = self.subtotal(items)
        tax = to_cents(subtotal * rate)
        total = to_cents(max(ZERO, subtotal + tax - discount))

        return PriceBreakdown(
            subtotal=to_cents(subtotal),
            tax=tax,
            discount=to_cents(discount),
            total=total,
        )


def price(
    items: Iterable[OrderItem],
    discount: Decimal | int | str = ZERO,
    tax_rate: Decimal | None = None,
) -> PriceBreakdown:
    """Module-level shortcut using the configured tax rate."""
    return PricingService().price(items, discount, tax_rate)
