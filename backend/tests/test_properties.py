"""
Property-based Testing with Hypothesis.

Invariants of pricing, the stock ceiling and the kitchen queue order.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from hypothesis import given, settings, strategies as st

from shared.config.constants import (
    KITCHEN_STATUS_PRIORITY,
    DispatchType,
    OrderStatus,
    PaymentStatus,
    TERMINAL_STATUSES,
)
from pos_api.models.dispatch import DineInDetails
from pos_api.models.menu import MenuItem
from pos_api.models.order import Order, OrderItem
from pos_api.services.catalog.menu_catalog import MenuCatalog
from pos_api.services.domain.cart_service import CartService
from pos_api.services.domain.kitchen_queue_service import KitchenQueueService
from pos_api.services.domain.pricing_service import PricingService, to_cents

money = st.decimals(min_value=Decimal("0"), max_value=Decimal("500"), places=2)

T0 = datetime(2026, 10, 19, 18, 0, tzinfo=timezone.utc)


def plain_line(unit_price: Decimal, quantity: int) -> OrderItem:
    return OrderItem(
        menu_item_id="x",
        name="Item",
        category="Mains",
        unit_price=unit_price,
        quantity=quantity,
    )


class TestPricingProperties:
    """Property-based tests for the pricing engine."""

    @given(
        lines=st.lists(st.tuples(money, st.integers(min_value=1, max_value=20)), max_size=8),
        discount=money,
    )
    @settings(max_examples=100)
    def test_total_is_never_negative(self, lines, discount):
        """Property: total >= 0 whatever the discount."""
        result = PricingService(Decimal("0.08")).price([plain_line(p, q) for p, q in lines], discount)

        assert result.total >= 0

    @given(
        lines=st.lists(st.tuples(money, st.integers(min_value=1, max_value=20)), min_size=1, max_size=8),
        discount=money,
    )
    @settings(max_examples=100)
    def test_total_matches_breakdown(self, lines, discount):
        """Property: total = max(0, subtotal + tax - discount), all in cents."""
        result = PricingService(Decimal("0.08")).price([plain_line(p, q) for p, q in lines], discount)

        assert result.subtotal == sum(p * q for p, q in lines)
        assert result.tax == to_cents(result.subtotal * Decimal("0.08"))
        assert result.total == to_cents(max(Decimal("0"), result.subtotal + result.tax - result.discount))
        assert result.total.as_tuple().exponent == -2


class TestStockProperties:
    """Property-based tests for the stock ceiling."""

    @given(
        stock=st.integers(min_value=0, max_value=10),
        operations=st.lists(
            st.tuples(st.sampled_from(["add", "set", "remove"]), st.integers(min_value=0, max_value=12)),
            max_size=30,
        ),
    )
    @settings(max_examples=100)
    def test_cart_never_exceeds_stock(self, stock, operations):
        """Property: cumulative quantity stays within stock after any edit sequence."""
        item = MenuItem(id="s", name="Soup", price=Decimal("4.00"), category="Starters", stock=stock)
        cart = CartService(MenuCatalog([item]), PricingService(Decimal("0.08")))

        for operation, value in operations:
            if operation == "add":
                cart.set_active_seat(value % 3)
                cart.add_simple(item)
            elif len(cart) and operation == "set":
                cart.update_quantity(value % len(cart), value)
            elif len(cart):
                cart.remove_line(value % len(cart))

            assert cart.quantity_in_cart("s") <= stock


class TestKitchenProperties:
    """Property-based tests for the kitchen queue."""

    @given(
        orders=st.lists(
            st.tuples(st.sampled_from(list(OrderStatus)), st.integers(min_value=0, max_value=240), st.booleans()),
            max_size=15,
        )
    )
    @settings(max_examples=100)
    def test_queue_order_and_membership(self, orders):
        """Property: only active orders with sent lines, sorted by status then age."""
        built = [
            Order(
                id=f"ord_{i}",
                order_number=100 + i,
                items=[
                    OrderItem(
                        menu_item_id="x",
                        name="Item",
                        category="Mains",
                        unit_price=Decimal("1.00"),
                        is_sent_to_kitchen=sent,
                    )
                ],
                dispatch_type=DispatchType.DINE_IN,
                status=status,
                payment_status=PaymentStatus.PAID,
                created_at=T0 + timedelta(minutes=minutes),
                details=DineInDetails(table_number=str(i)),
                subtotal=Decimal("1.00"),
                tax=Decimal("0.08"),
                total=Decimal("1.08"),
            )
            for i, (status, minutes, sent) in enumerate(orders)
        ]

        tickets = KitchenQueueService().project(built)

        expected = {o.id for o in built if o.status not in TERMINAL_STATUSES and o.sent_items}
        assert {t.order_id for t in tickets} == expected

        keys = [(KITCHEN_STATUS_PRIORITY[t.status], t.created_at) for t in tickets]
        assert keys == sorted(keys)
