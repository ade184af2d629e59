"""
Tests for OrderService: commit, hold, merge, status changes and recall.
"""

from decimal import Decimal

import pytest

from shared.config.constants import AuditAction, AuditSeverity, DispatchType, OrderStatus, PaymentStatus
from shared.utils.exceptions import (
    InvalidStateError,
    InvalidTransitionError,
    OrderNotFoundError,
    ValidationError,
)
from pos_api.models.dispatch import DineInDetails, PickupDetails
from pos_api.models.order import OrderItem
from pos_api.services.domain.dispatch_service import DispatchDraft


TABLE_4 = DineInDetails(table_number="4", guests=2)


def line_for(catalog, item_id: str, quantity: int = 1, seat: int = 1) -> OrderItem:
    return OrderItem.from_menu_item(catalog.get(item_id), quantity=quantity, seat=seat)


@pytest.fixture
def placed(order_service, catalog):
    """A dine-in order for two pizzas, sent to the kitchen."""
    return order_service.commit(
        [line_for(catalog, "1", 2)],
        DispatchType.DINE_IN,
        Decimal("0"),
        TABLE_4,
        PaymentStatus.PAID,
    )


@pytest.fixture
def held(order_service, catalog):
    """A held take-out order."""
    return order_service.hold(
        [line_for(catalog, "5", 2)],
        DispatchType.TAKE_OUT,
        Decimal("0"),
        PickupDetails(customer_name="Niamh"),
    )


class TestCommit:
    """Tests for placing new orders."""

    def test_new_order_is_priced_and_numbered(self, placed, clock):
        assert placed.order_number == 101
        assert placed.status == OrderStatus.NEW
        assert placed.payment_status == PaymentStatus.PAID
        assert placed.subtotal == Decimal("25.98")
        assert placed.tax == Decimal("2.08")
        assert placed.total == Decimal("28.06")
        assert placed.created_at == clock()
        assert placed.id.startswith("ord_")

    def test_lines_are_sent_to_kitchen(self, placed):
        assert all(line.is_sent_to_kitchen for line in placed.items)

    def test_order_numbers_increase(self, order_service, placed, catalog):
        second = order_service.commit(
            [line_for(catalog, "5")],
            DispatchType.COLLECTION,
            0,
            PickupDetails(customer_name="Niamh"),
            PaymentStatus.PENDING,
        )

        assert second.order_number == 102
        assert order_service.next_order_number == 103

    def test_empty_cart_is_rejected(self, order_service):
        with pytest.raises(ValidationError):
            order_service.commit([], DispatchType.DINE_IN, 0, TABLE_4, PaymentStatus.PAID)

        assert order_service.orders == []
        assert order_service.next_order_number == 101

    def test_invalid_details_leave_no_partial_order(self, order_service, catalog):
        draft = DispatchDraft(dispatch_type=DispatchType.DINE_IN)

        with pytest.raises(ValidationError):
            order_service.commit([line_for(catalog, "1")], DispatchType.DINE_IN, 0, draft, PaymentStatus.PAID)

        assert order_service.orders == []
        assert order_service.next_order_number == 101

    def test_draft_details_are_validated(self, order_service, catalog):
        draft = DispatchDraft(dispatch_type=DispatchType.DINE_IN, table_number="9")

        order = order_service.commit(
            [line_for(catalog, "1")], DispatchType.DINE_IN, 0, draft, PaymentStatus.PAID
        )

        assert order.details == DineInDetails(table_number="9", guests=1)

    def test_returned_order_is_a_copy(self, order_service, placed):
        placed.items.clear()

        assert len(order_service.get(placed.id).items) == 1

    def test_unknown_order_raises(self, order_service):
        with pytest.raises(OrderNotFoundError):
            order_service.get("ord_missing")


class TestHoldAndRecall:
    """Held orders, recall and merging back."""

    def test_hold_sends_nothing(self, held):
        assert held.status == OrderStatus.NEW
        assert held.payment_status == PaymentStatus.PENDING
        assert not any(line.is_sent_to_kitchen for line in held.items)

    def test_recall_returns_editable_copy(self, order_service, held):
        draft = order_service.recall(held.id)

        assert draft.order_id == held.id
        assert draft.dispatch_type == DispatchType.TAKE_OUT
        assert draft.details == PickupDetails(customer_name="Niamh")

        draft.items[0].quantity = 9
        assert order_service.get(held.id).items[0].quantity == 2

    def test_paid_order_cannot_be_recalled(self, order_service, placed):
        with pytest.raises(InvalidStateError):
            order_service.recall(placed.id)

    def test_cancelled_order_cannot_be_recalled(self, order_service, held):
        order_service.cancel(held.id)

        with pytest.raises(InvalidStateError):
            order_service.recall(held.id)

    def test_sending_held_order_moves_it_to_preparing(self, order_service, held):
        draft = order_service.recall(held.id)

        updated = order_service.commit(
            draft.items,
            draft.dispatch_type,
            draft.discount,
            draft.details,
            PaymentStatus.PAID,
            existing_order_id=held.id,
        )

        assert updated.id == held.id
        assert updated.order_number == held.order_number
        assert updated.status == OrderStatus.PREPARING
        assert updated.payment_status == PaymentStatus.PAID
        assert all(line.is_sent_to_kitchen for line in updated.items)
        assert len(order_service.orders) == 1

    def test_merge_keeps_sent_lines_frozen(self, order_service, placed, catalog):
        order_service.set_payment_status(placed.id, PaymentStatus.PENDING)
        draft = order_service.recall(placed.id)
        tampered = draft.items[0]
        tampered.quantity = 10
        extra = line_for(catalog, "5", seat=2)

        updated = order_service.commit(
            [tampered, extra],
            draft.dispatch_type,
            draft.discount,
            draft.details,
            PaymentStatus.PENDING,
            existing_order_id=placed.id,
        )

        assert [line.quantity for line in updated.items] == [2, 1]
        assert updated.items[1].is_sent_to_kitchen is True
        assert updated.subtotal == Decimal("28.48")

    def test_dropped_sent_lines_are_kept(self, order_service, placed, catalog):
        order_service.set_payment_status(placed.id, PaymentStatus.PENDING)

        updated = order_service.commit(
            [line_for(catalog, "5")],
            DispatchType.DINE_IN,
            0,
            TABLE_4,
            PaymentStatus.PENDING,
            existing_order_id=placed.id,
        )

        assert [line.menu_item_id for line in updated.items] == ["5", "1"]

    def test_hold_again_keeps_new_lines_unsent(self, order_service, held, catalog):
        draft = order_service.recall(held.id)

        updated = order_service.hold(
            draft.items + [line_for(catalog, "30")],
            draft.dispatch_type,
            draft.discount,
            draft.details,
            existing_order_id=held.id,
        )

        assert updated.status == OrderStatus.NEW
        assert not any(line.is_sent_to_kitchen for line in updated.items)

    def test_merge_into_completed_order_is_rejected(self, order_service, held):
        order_service.advance(held.id, OrderStatus.COMPLETED)
        draft = order_service.recall(held.id)

        with pytest.raises(InvalidStateError):
            order_service.commit(
                draft.items,
                draft.dispatch_type,
                draft.discount,
                draft.details,
                PaymentStatus.PAID,
                existing_order_id=held.id,
            )


class TestStatusChanges:
    """Tests for advance, advance_to_next and cancel."""

    def test_advance_records_audit_event(self, order_service, placed, audit_sink):
        updated = order_service.advance(placed.id, OrderStatus.READY)

        assert updated.status == OrderStatus.READY
        assert audit_sink.events == [
            (
                AuditAction.STATUS_CHANGE,
                {"order_number": 101, "from_status": "NEW", "to_status": "READY"},
                AuditSeverity.LOW,
            )
        ]

    def test_same_status_is_a_no_op(self, order_service, placed, audit_sink):
        order_service.advance(placed.id, OrderStatus.NEW)

        assert audit_sink.events == []

    def test_backward_move_is_allowed(self, order_service, placed):
        order_service.advance(placed.id, OrderStatus.READY)

        updated = order_service.advance(placed.id, OrderStatus.PREPARING)

        assert updated.status == OrderStatus.PREPARING

    def test_advance_to_next_walks_the_flow(self, order_service, placed):
        statuses = [order_service.advance_to_next(placed.id).status for _ in range(3)]

        assert statuses == [OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.COMPLETED]
        with pytest.raises(InvalidTransitionError):
            order_service.advance_to_next(placed.id)

    def test_cancel_records_high_severity_event(self, order_service, placed, audit_sink):
        cancelled = order_service.cancel(placed.id)

        assert cancelled.status == OrderStatus.CANCELLED
        assert audit_sink.events[-1] == (
            AuditAction.ORDER_CANCELLED,
            {"order_number": 101, "from_status": "NEW", "total": "28.06"},
            AuditSeverity.HIGH,
        )

    def test_cancel_twice_is_rejected(self, order_service, placed):
        order_service.cancel(placed.id)

        with pytest.raises(InvalidTransitionError):
            order_service.cancel(placed.id)

    def test_cancelled_order_payment_is_locked(self, order_service, placed):
        order_service.cancel(placed.id)

        with pytest.raises(InvalidStateError):
            order_service.set_payment_status(placed.id, PaymentStatus.PENDING)

    def test_status_change_on_unknown_order(self, order_service):
        with pytest.raises(OrderNotFoundError):
            order_service.advance("ord_missing", OrderStatus.READY)
