"""
Tests for CartService and ItemConfiguration.
"""

from decimal import Decimal

import pytest

from shared.config.constants import AuditAction, AuditSeverity, DispatchType, Limits
from shared.utils.exceptions import NotFoundError, StockExceededError, ValidationError
from pos_api.models.dispatch import DineInDetails
from pos_api.models.order import OrderDraft, OrderItem
from pos_api.services.domain.cart_service import ItemConfiguration, validate_modifier_selection


def sent_draft(catalog, item_id: str, quantity: int) -> OrderDraft:
    """A recalled order holding one line already sent to the kitchen."""
    line = OrderItem.from_menu_item(catalog.get(item_id), quantity=quantity)
    line.is_sent_to_kitchen = True
    return OrderDraft(
        order_id="ord_1",
        items=[line],
        dispatch_type=DispatchType.DINE_IN,
        details=DineInDetails(table_number="4"),
        discount=Decimal("0"),
    )


class TestAddSimple:
    """Tests for one-tap adds."""

    def test_first_add_appends_line(self, cart, catalog):
        assert cart.add_simple(catalog.get("1")) is True

        lines = cart.lines
        assert len(lines) == 1
        assert lines[0].menu_item_id == "1"
        assert lines[0].quantity == 1
        assert lines[0].seat == 1

    def test_repeat_add_increments_compatible_line(self, cart, catalog):
        cart.add_simple(catalog.get("1"))
        cart.add_simple(catalog.get("1"))

        assert len(cart) == 1
        assert cart.lines[0].quantity == 2

    def test_different_seat_gets_its_own_line(self, cart, catalog):
        cart.add_simple(catalog.get("1"))
        cart.set_active_seat(2)
        cart.add_simple(catalog.get("1"))

        assert [line.seat for line in cart.lines] == [1, 2]

    def test_explicit_seat_wins_over_active_seat(self, cart, catalog):
        cart.add_simple(catalog.get("5"), seat=0)

        assert cart.lines[0].seat == 0

    def test_line_with_note_is_not_merged(self, cart, catalog):
        cart.add_simple(catalog.get("1"))
        cart.set_note(0, "extra crispy")
        cart.add_simple(catalog.get("1"))

        assert [line.quantity for line in cart.lines] == [1, 1]

    def test_sent_line_is_not_merged(self, cart, catalog):
        cart.load(sent_draft(catalog, "1", 1))
        cart.add_simple(catalog.get("1"))

        lines = cart.lines
        assert len(lines) == 2
        assert lines[0].quantity == 1
        assert lines[1].is_sent_to_kitchen is False

    def test_item_with_modifier_groups_must_be_configured(self, cart, catalog):
        with pytest.raises(ValidationError):
            cart.add_simple(catalog.get("3"))
        assert cart.is_empty()


class TestStockCeiling:
    """Cumulative quantity per item never exceeds its stock."""

    def test_add_simple_stops_at_stock(self, cart, catalog):
        item = catalog.get("L1")
        results = [cart.add_simple(item) for _ in range(6)]

        assert results == [True] * 5 + [False]
        assert cart.quantity_in_cart("L1") == 5

    def test_add_configured_raises_past_stock(self, cart, catalog):
        for _ in range(5):
            cart.add_simple(catalog.get("L1"))

        with pytest.raises(StockExceededError) as exc_info:
            cart.add_configured(ItemConfiguration(catalog.get("L1")).build())

        assert exc_info.value.available == 5
        assert exc_info.value.requested == 6
        assert exc_info.value.status_code == 409
        assert cart.quantity_in_cart("L1") == 5

    def test_update_quantity_increase_past_stock_is_refused(self, cart, catalog):
        cart.add_simple(catalog.get("L1"))
        cart.add_simple(catalog.get("L1"), seat=2)

        assert cart.update_quantity(0, 5) is False
        assert cart.update_quantity(0, 4) is True
        assert cart.quantity_in_cart("L1") == 5

    def test_sent_quantity_counts_toward_stock(self, cart, catalog):
        cart.load(sent_draft(catalog, "L1", 3))

        assert cart.add_simple(catalog.get("L1")) is True
        assert cart.add_simple(catalog.get("L1")) is True
        assert cart.add_simple(catalog.get("L1")) is False

    def test_item_without_stock_has_no_ceiling(self, cart, catalog, menu):
        from pos_api.models.menu import MenuItem
        from pos_api.services.catalog.menu_catalog import MenuCatalog
        from pos_api.services.domain.cart_service import CartService

        unlimited = MenuItem(id="u", name="Water", price=Decimal("1.00"), category="Drinks")
        open_cart = CartService(MenuCatalog(menu + [unlimited]))

        assert all(open_cart.add_simple(unlimited) for _ in range(50))


class TestLineEdits:
    """Tests for quantity, note, modifier edits and removal."""

    def test_quantity_zero_removes_line(self, cart, catalog):
        cart.add_simple(catalog.get("1"))

        assert cart.update_quantity(0, 0) is True
        assert cart.is_empty()

    def test_quantity_decrease_is_absolute(self, cart, catalog):
        for _ in range(3):
            cart.add_simple(catalog.get("1"))

        cart.update_quantity(0, 1)

        assert cart.lines[0].quantity == 1

    def test_quantity_above_limit_is_rejected(self, cart, catalog):
        cart.add_simple(catalog.get("5"))

        with pytest.raises(ValidationError):
            cart.update_quantity(0, 1000)

    def test_unknown_line_index_raises_not_found(self, cart):
        with pytest.raises(NotFoundError):
            cart.update_quantity(3, 1)

    def test_remove_line(self, cart, catalog):
        cart.add_simple(catalog.get("1"))
        cart.add_simple(catalog.get("5"))

        assert cart.remove_line(0) is True
        assert [line.menu_item_id for line in cart.lines] == ["5"]

    def test_set_note_strips_text(self, cart, catalog):
        cart.add_simple(catalog.get("1"))

        cart.set_note(0, "  no basil  ")

        assert cart.lines[0].notes == "no basil"

    def test_set_modifiers_validates_selection(self, cart, catalog):
        cart.add_configured(ItemConfiguration(catalog.get("3")).build())

        assert cart.set_modifiers(0, ["m_well_done", "m_bacon"]) is True
        assert [m.id for m in cart.lines[0].modifiers] == ["m_well_done", "m_bacon"]

        with pytest.raises(ValidationError):
            cart.set_modifiers(0, ["m_medium", "m_well_done"])
        with pytest.raises(ValidationError):
            cart.set_modifiers(0, ["m_bacon"])
        with pytest.raises(ValidationError):
            cart.set_modifiers(0, ["m_medium", "m_hot"])

    def test_edit_line_applies_every_change(self, cart, catalog):
        cart.add_configured(ItemConfiguration(catalog.get("3")).build())

        assert cart.edit_line(0, quantity=2, modifier_ids=["m_well_done"], notes="no pickles") is True

        line = cart.lines[0]
        assert line.quantity == 2
        assert [m.id for m in line.modifiers] == ["m_well_done"]
        assert line.notes == "no pickles"

    def test_edit_line_refused_on_stock_leaves_line_untouched(self, cart, catalog):
        cart.add_simple(catalog.get("L1"))
        before = cart.lines[0]

        assert cart.edit_line(0, quantity=6, notes="extra hot") is False

        assert cart.lines[0] == before

    def test_edit_line_rejected_note_rolls_back_modifiers(self, cart, catalog):
        cart.add_configured(ItemConfiguration(catalog.get("3")).build())
        before = cart.lines[0]

        with pytest.raises(ValidationError):
            cart.edit_line(0, modifier_ids=["m_well_done"], notes="x" * (Limits.MAX_NOTE_LENGTH + 1))

        assert cart.lines[0] == before


class TestSentLinesAreFrozen:
    """Lines already sent to the kitchen cannot change."""

    def test_every_edit_is_a_no_op(self, cart, catalog):
        cart.load(sent_draft(catalog, "3", 2))
        before = cart.lines[0]

        assert cart.update_quantity(0, 5) is False
        assert cart.update_quantity(0, 0) is False
        assert cart.remove_line(0) is False
        assert cart.set_note(0, "late change") is False
        assert cart.set_modifiers(0, ["m_well_done"]) is False

        assert cart.lines[0] == before


class TestItemConfiguration:
    """Tests for modifier defaults, selection and the override gate."""

    def test_single_groups_default_to_zero_price_option(self, catalog):
        config = ItemConfiguration(catalog.get("12"))

        assert [m.id for m in config.selected_modifiers] == ["m_hot"]

    def test_multiple_groups_start_empty(self, catalog):
        config = ItemConfiguration(catalog.get("3"))

        assert [m.id for m in config.selected_modifiers] == ["m_medium"]

    def test_shared_seat_gets_the_same_defaults(self, catalog):
        config = ItemConfiguration(catalog.get("3"), seat=0)

        assert [m.id for m in config.selected_modifiers] == ["m_medium"]
        assert config.build().seat == 0

    def test_single_select_replaces_group_choice(self, catalog):
        config = ItemConfiguration(catalog.get("12"))

        config.select("m_bbq")

        assert [m.id for m in config.selected_modifiers] == ["m_bbq"]
        assert config.unit_total == Decimal("9.49")

    def test_multiple_select_toggles(self, catalog):
        config = ItemConfiguration(catalog.get("3"))

        config.select("m_bacon")
        config.select("m_extra_cheese")
        config.select("m_bacon")

        assert [m.id for m in config.selected_modifiers] == ["m_medium", "m_extra_cheese"]

    def test_unknown_modifier_is_rejected(self, catalog):
        with pytest.raises(ValidationError):
            ItemConfiguration(catalog.get("3")).select("m_hot")

    def test_build_keeps_menu_order(self, catalog):
        config = ItemConfiguration(catalog.get("3"))
        config.set_selection(["m_extra_cheese", "m_bacon", "m_well_done"])

        line = config.build()

        assert [m.id for m in line.modifiers] == ["m_well_done", "m_bacon", "m_extra_cheese"]

    def test_override_accepted(self, catalog):
        config = ItemConfiguration(catalog.get("1"))

        override = config.apply_override("9.99", "Manager comp")

        assert override.override_price == Decimal("9.99")
        assert override.original_price == Decimal("12.99")
        assert override.reason == "Manager comp"

    @pytest.mark.parametrize("price_text", ["", "abc", "nan", "inf", None])
    def test_override_rejects_non_numeric_price(self, catalog, price_text):
        with pytest.raises(ValidationError):
            ItemConfiguration(catalog.get("1")).apply_override(price_text, "Manager comp")

    @pytest.mark.parametrize("reason", ["ok", "  ab  ", "", None])
    def test_override_rejects_short_reason(self, catalog, reason):
        with pytest.raises(ValidationError):
            ItemConfiguration(catalog.get("1")).apply_override("9.99", reason)

    def test_override_rejects_negative_price(self, catalog):
        with pytest.raises(ValidationError):
            ItemConfiguration(catalog.get("1")).apply_override("-1", "Manager comp")


class TestAddConfigured:
    """Tests for configured adds and the override audit event."""

    def test_override_emits_audit_event(self, cart, catalog, audit_sink):
        config = ItemConfiguration(catalog.get("1"))
        config.apply_override("9.99", "Manager comp")

        cart.add_configured(config.build())

        assert audit_sink.events == [
            (
                AuditAction.PRICE_OVERRIDE,
                {
                    "item": "Margherita Pizza",
                    "original_price": "12.99",
                    "new_price": "9.99",
                    "reason": "Manager comp",
                },
                AuditSeverity.MEDIUM,
            )
        ]
        assert cart.totals().subtotal == Decimal("9.99")

    def test_no_audit_without_override(self, cart, catalog, audit_sink):
        cart.add_configured(ItemConfiguration(catalog.get("3")).build())

        assert audit_sink.events == []

    def test_refused_line_emits_no_audit(self, cart, catalog, audit_sink):
        for _ in range(5):
            cart.add_simple(catalog.get("L1"))
        config = ItemConfiguration(catalog.get("L1"))
        config.apply_override("1.00", "Staff meal")

        with pytest.raises(StockExceededError):
            cart.add_configured(config.build())
        assert audit_sink.events == []

    def test_configured_lines_always_append(self, cart, catalog):
        cart.add_configured(ItemConfiguration(catalog.get("3")).build())
        cart.add_configured(ItemConfiguration(catalog.get("3")).build())

        assert len(cart) == 2

    def test_incoming_line_is_copied(self, cart, catalog):
        line = ItemConfiguration(catalog.get("3")).build()
        cart.add_configured(line)

        line.quantity = 40

        assert cart.lines[0].quantity == 1

    def test_catalog_snapshot_wins_over_incoming_line(self, cart, catalog, audit_sink):
        line = OrderItem.from_menu_item(catalog.get("1"))
        line.unit_price = Decimal("0.01")
        line.name = "Free Pizza"
        line.category = "Drinks"
        line.allergens = frozenset()

        added = cart.add_configured(line)

        assert added.unit_price == Decimal("12.99")
        assert added.name == "Margherita Pizza"
        assert added.category == "Pizza"
        assert added.allergens == frozenset({"Dairy", "Gluten"})
        assert cart.totals().subtotal == Decimal("12.99")
        assert audit_sink.events == []

    def test_incoming_modifier_prices_are_ignored(self, cart, catalog):
        line = ItemConfiguration(catalog.get("3")).build()
        bacon = catalog.get("3").group_of("m_bacon").find("m_bacon")
        line.modifiers = line.modifiers + [bacon.model_copy(update={"price_delta": Decimal("-9.00")})]

        added = cart.add_configured(line)

        assert [m.price_delta for m in added.modifiers if m.id == "m_bacon"] == [bacon.price_delta]

    def test_carries_seat_notes_and_override(self, cart, catalog):
        config = ItemConfiguration(catalog.get("1"), seat=3)
        config.apply_override("9.99", "Manager comp")
        line = config.build()
        line.notes = "well done"

        added = cart.add_configured(line)

        assert (added.seat, added.notes) == (3, "well done")
        assert added.effective_unit_price == Decimal("9.99")
        assert added.is_sent_to_kitchen is False

    def test_invalid_selection_is_rejected(self, catalog):
        with pytest.raises(ValidationError):
            validate_modifier_selection(catalog.get("3"), [])


class TestBarcodeAndTotals:
    """Tests for barcode entry, discount and totals."""

    def test_barcode_adds_simple_item(self, cart):
        result = cart.add_by_barcode("1001")

        assert result.added is True
        assert result.configuration is None
        assert cart.lines[0].menu_item_id == "1"

    def test_barcode_for_configurable_item_returns_configuration(self, cart):
        result = cart.add_by_barcode("1003")

        assert result.added is False
        assert result.configuration is not None
        assert result.configuration.menu_item.id == "3"
        assert cart.is_empty()

    def test_unknown_barcode_raises_not_found(self, cart):
        with pytest.raises(NotFoundError):
            cart.add_by_barcode("0000")

    def test_totals_include_discount(self, cart, catalog):
        cart.add_simple(catalog.get("1"))
        cart.add_simple(catalog.get("1"))
        cart.set_discount(Decimal("3.00"))

        totals = cart.totals()

        assert totals.total == Decimal("25.06")

    def test_seat_out_of_range_is_rejected(self, cart):
        with pytest.raises(ValidationError):
            cart.set_active_seat(-1)

    def test_clear_resets_everything(self, cart, catalog):
        cart.add_simple(catalog.get("1"))
        cart.set_active_seat(3)
        cart.set_discount(Decimal("1"))

        cart.clear()

        assert cart.is_empty()
        assert cart.active_seat == 1
        assert cart.discount == Decimal("0")
