"""
Cart Domain Service.

Builds the in-progress order on the sales terminal:
- simple adds merge into a compatible line, configured adds always append
- cumulative stock ceilings per menu item (sent and unsent lines count)
- lines already sent to the kitchen are frozen
- modifier selection rules and the price-override gate

Mutations that can be silently refused (stock ceiling, frozen line) return
False instead of raising, matching how the terminal treats them: the tap
simply has no effect.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from shared.config.constants import AuditAction, AuditSeverity, Limits, SelectionMode
from shared.config.logging import cart_logger as logger
from shared.config.settings import settings
from shared.utils.exceptions import NotFoundError, StockExceededError, ValidationError
from shared.utils.validators import parse_price, validate_quantity
from pos_api.models.menu import MenuItem, Modifier
from pos_api.models.order import OrderDraft, OrderItem, PriceBreakdown, PriceOverride
from pos_api.services.audit import AuditSink, LoggingAuditSink
from pos_api.services.catalog.menu_catalog import MenuCatalog
from pos_api.services.domain.pricing_service import PricingService


# =============================================================================
# Modifier rules
# =============================================================================


def validate_modifier_selection(menu_item: MenuItem, modifiers: Iterable[Modifier]) -> list[Modifier]:
    """
    Check a modifier selection against an item's groups.

    Every modifier must belong to one of the item's groups, at most once.
    Single groups need exactly one selection; multiple groups accept any
    number. Returns the selection in menu order.

    Raises:
        ValidationError: If the selection breaks a rule
    """
    by_group: dict[str, list[Modifier]] = {group.id: [] for group in menu_item.modifier_groups}
    seen: set[str] = set()

    for modifier in modifiers:
        group = menu_item.group_of(modifier.id)
        if group is None:
            raise ValidationError(
                f"Modifier '{modifier.id}' is not offered for {menu_item.name}",
                item_id=menu_item.id,
                modifier_id=modifier.id,
            )
        if modifier.id in seen:
            raise ValidationError(
                f"Modifier '{modifier.id}' selected more than once",
                item_id=menu_item.id,
                modifier_id=modifier.id,
            )
        seen.add(modifier.id)
        by_group[group.id].append(modifier)

    ordered: list[Modifier] = []
    for group in menu_item.modifier_groups:
        selected = by_group[group.id]
        if group.selection_mode == SelectionMode.SINGLE and group.modifiers and len(selected) != 1:
            raise ValidationError(
                f"Choose exactly one option for {group.name}",
                item_id=menu_item.id,
                group_id=group.id,
            )
        # Catalog copies, in menu order, so stale deltas never leak in
        selected_ids = {m.id for m in selected}
        ordered.extend(m for m in group.modifiers if m.id in selected_ids)
    return ordered


# =============================================================================
# Item configuration
# =============================================================================


class ItemConfiguration:
    """
    Configuration flow for one menu item before it enters the cart.

    Single-select groups start on their zero-price option (or the first
    option), multi-select groups start empty.
    """

    def __init__(self, menu_item: MenuItem, seat: int = Limits.DEFAULT_SEAT, quantity: int = 1):
        self.menu_item = menu_item
        self.seat = seat
        self.quantity = quantity
        self.notes = ""
        self.override: PriceOverride | None = None
        self._selected: dict[str, list[Modifier]] = {}

        for group in menu_item.modifier_groups:
            default = group.default_modifier()
            self._selected[group.id] = [default] if default is not None else []

    @property
    def selected_modifiers(self) -> list[Modifier]:
        """Current selection in menu order."""
        result: list[Modifier] = []
        for group in self.menu_item.modifier_groups:
            result.extend(self._selected.get(group.id, []))
        return result

    def select(self, modifier_id: str) -> None:
        """
        Select a modifier.

        In a single group this replaces the group's current choice. In a
        multiple group it toggles membership.

        Raises:
            ValidationError: If the item does not offer this modifier
        """
        group = self.menu_item.group_of(modifier_id)
        if group is None:
            raise ValidationError(
                f"Modifier '{modifier_id}' is not offered for {self.menu_item.name}",
                item_id=self.menu_item.id,
                modifier_id=modifier_id,
            )
        modifier = group.find(modifier_id)
        current = self._selected.setdefault(group.id, [])

        if group.selection_mode == SelectionMode.SINGLE:
            self._selected[group.id] = [modifier]
        elif any(m.id == modifier_id for m in current):
            self._selected[group.id] = [m for m in current if m.id != modifier_id]
        else:
            current.append(modifier)

    def set_selection(self, modifier_ids: Iterable[str]) -> None:
        """Replace the whole selection; groups not mentioned end up empty."""
        self._selected = {group.id: [] for group in self.menu_item.modifier_groups}
        for modifier_id in modifier_ids:
            self.select(modifier_id)

    def apply_override(self, price_text: str | int | float | Decimal | None, reason: str | None) -> PriceOverride:
        """
        Attach a manager price override.

        Raises:
            ValidationError: If the price is not a finite, non-negative number
                or the reason is too short
        """
        price = parse_price(price_text)
        if price is None:
            raise ValidationError("A valid override price is required.", item_id=self.menu_item.id)
        if price < 0:
            raise ValidationError("Override price cannot be negative.", item_id=self.menu_item.id)

        reason = (reason or "").strip()
        min_length = settings.override_reason_min_length
        if len(reason) < min_length:
            raise ValidationError(
                f"A valid reason (min {min_length} chars) is required for price overrides.",
                item_id=self.menu_item.id,
            )

        self.override = PriceOverride(
            override_price=price,
            original_price=self.menu_item.price,
            reason=reason,
        )
        return self.override

    def clear_override(self) -> None:
        self.override = None

    @property
    def unit_total(self) -> Decimal:
        """Preview of one unit: effective price plus selected modifiers."""
        base = self.override.override_price if self.override else self.menu_item.price
        return base + sum((m.price_delta for m in self.selected_modifiers), Decimal("0"))

    def build(self) -> OrderItem:
        """Produce the cart line for this configuration."""
        item = OrderItem.from_menu_item(self.menu_item, quantity=self.quantity, seat=self.seat)
        item.modifiers = validate_modifier_selection(self.menu_item, self.selected_modifiers)
        item.notes = self.notes.strip()
        item.override = self.override
        return item


@dataclass(frozen=True, slots=True)
class BarcodeScanResult:
    """
    Outcome of a barcode scan.

    Items without modifier groups are added directly (``added`` tells whether
    stock allowed it). Items with groups come back as a configuration for the
    operator to complete.
    """

    menu_item: MenuItem
    added: bool = False
    configuration: ItemConfiguration | None = None


# =============================================================================
# Cart
# =============================================================================


class CartService:
    """
    Domain service for the terminal's in-progress cart.

    Holds the active seat, the lines and the discount. Prices are always
    derived through the pricing service, never stored on the cart.
    """

    def __init__(
        self,
        catalog: MenuCatalog,
        pricing: PricingService | None = None,
        audit_sink: AuditSink | None = None,
    ):
        self._catalog = catalog
        self._pricing = pricing or PricingService()
        self._audit = audit_sink or LoggingAuditSink()
        self._lines: list[OrderItem] = []
        self._discount = Decimal("0")
        self.active_seat = Limits.DEFAULT_SEAT

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def lines(self) -> list[OrderItem]:
        """Copies of the cart lines."""
        return [line.model_copy(deep=True) for line in self._lines]

    @property
    def discount(self) -> Decimal:
        return self._discount

    def __len__(self) -> int:
        return len(self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def quantity_in_cart(self, menu_item_id: str) -> int:
        """Cumulative quantity of an item across all lines, sent or not."""
        return sum(line.quantity for line in self._lines if line.menu_item_id == menu_item_id)

    def totals(self) -> PriceBreakdown:
        return self._pricing.price(self._lines, self._discount)

    # -------------------------------------------------------------------------
    # Cart-level state
    # -------------------------------------------------------------------------

    def set_active_seat(self, seat: int) -> None:
        """Seat 0 is the shared course."""
        if not Limits.SHARED_SEAT <= seat <= Limits.MAX_SEAT:
            raise ValidationError(
                f"Seat must be between {Limits.SHARED_SEAT} and {Limits.MAX_SEAT}",
                seat=seat,
            )
        self.active_seat = seat

    def set_discount(self, amount: Decimal | int | str) -> None:
        amount = Decimal(amount)
        if not amount.is_finite() or amount < 0:
            raise ValidationError("Discount must be a non-negative amount", discount=str(amount))
        self._discount = amount

    def clear(self) -> None:
        self._lines = []
        self._discount = Decimal("0")
        self.active_seat = Limits.DEFAULT_SEAT

    def load(self, draft: OrderDraft) -> None:
        """Replace the cart with a recalled order's lines and discount."""
        self._lines = [line.model_copy(deep=True) for line in draft.items]
        self._discount = draft.discount
        self.active_seat = Limits.DEFAULT_SEAT
        logger.info("Cart loaded from order", order_id=draft.order_id, lines=len(self._lines))

    # -------------------------------------------------------------------------
    # Adds
    # -------------------------------------------------------------------------

    def begin_configuration(self, menu_item_id: str) -> ItemConfiguration:
        """Open a configuration flow for an item on the active seat."""
        return ItemConfiguration(self._catalog.get(menu_item_id), seat=self.active_seat)

    def add_simple(self, menu_item: MenuItem, seat: int | None = None) -> bool:
        """
        Add one unit of an item that has no modifier groups.

        Merges into a compatible line on the same seat, else appends a new
        line. Returns False when the stock ceiling would be exceeded.

        Raises:
            ValidationError: If the item has modifier groups
        """
        if menu_item.has_modifiers:
            raise ValidationError(
                f"{menu_item.name} has options and must be configured before adding",
                item_id=menu_item.id,
            )

        seat = self.active_seat if seat is None else seat
        if menu_item.stock is not None and self.quantity_in_cart(menu_item.id) + 1 > menu_item.stock:
            logger.info("Stock ceiling reached", item_id=menu_item.id, stock=menu_item.stock)
            return False

        for line in self._lines:
            if line.menu_item_id == menu_item.id and line.seat == seat and line.is_plain():
                line.quantity += 1
                return True

        self._lines.append(OrderItem.from_menu_item(menu_item, quantity=1, seat=seat))
        return True

    def add_configured(self, order_item: OrderItem) -> OrderItem:
        """
        Append a configured line.

        Emits a price-override audit event once the line is accepted.

        Raises:
            StockExceededError: If the cumulative quantity would exceed stock
            ValidationError: If the modifier selection or override is invalid
        """
        menu_item = self._catalog.get(order_item.menu_item_id)
        validate_quantity_or_raise(order_item.quantity)

        if menu_item.stock is not None:
            requested = self.quantity_in_cart(menu_item.id) + order_item.quantity
            if requested > menu_item.stock:
                raise StockExceededError(menu_item.name, available=menu_item.stock, requested=requested)

        # Name, category, allergens and price always come from the catalog
        line = OrderItem.from_menu_item(menu_item, quantity=order_item.quantity, seat=order_item.seat)
        line.line_id = order_item.line_id
        line.notes = order_item.notes
        line.modifiers = validate_modifier_selection(menu_item, order_item.modifiers)
        if order_item.override is not None:
            line.override = order_item.override.model_copy()

        if line.override is not None and line.override.original_price != menu_item.price:
            raise ValidationError(
                "Override original price does not match the catalog price",
                item_id=menu_item.id,
            )

        self._lines.append(line)
        logger.info(
            "Configured line added",
            item_id=menu_item.id,
            quantity=line.quantity,
            seat=line.seat,
            modifiers=len(line.modifiers),
        )

        if line.override is not None:
            self._audit.record(
                AuditAction.PRICE_OVERRIDE,
                {
                    "item": line.name,
                    "original_price": str(line.override.original_price),
                    "new_price": str(line.override.override_price),
                    "reason": line.override.reason,
                },
                AuditSeverity.MEDIUM,
            )
        return line.model_copy(deep=True)

    def add_by_barcode(self, barcode: str) -> BarcodeScanResult:
        """
        Handle a scanned barcode.

        Raises:
            NotFoundError: If no menu item carries this barcode
        """
        menu_item = self._catalog.find_by_barcode(barcode)
        if menu_item is None:
            raise NotFoundError(f"Menu item for barcode '{barcode}'")
        if menu_item.has_modifiers:
            return BarcodeScanResult(
                menu_item=menu_item,
                configuration=ItemConfiguration(menu_item, seat=self.active_seat),
            )
        return BarcodeScanResult(menu_item=menu_item, added=self.add_simple(menu_item))

    # -------------------------------------------------------------------------
    # Line edits (no-op on sent lines)
    # -------------------------------------------------------------------------

    def _line(self, index: int) -> OrderItem:
        if not 0 <= index < len(self._lines):
            raise NotFoundError("Cart line", index)
        return self._lines[index]

    def update_quantity(self, index: int, quantity: int) -> bool:
        """
        Set a line's quantity. Zero or less removes the line.

        An increase re-checks the item's stock against the rest of the cart.
        Returns False when refused.
        """
        line = self._line(index)
        if line.is_sent_to_kitchen:
            return False

        if quantity <= 0:
            del self._lines[index]
            return True

        validate_quantity_or_raise(quantity)

        if quantity > line.quantity:
            stock = self._stock_of(line.menu_item_id)
            if stock is not None:
                total = self.quantity_in_cart(line.menu_item_id) - line.quantity + quantity
                if total > stock:
                    logger.info("Stock ceiling reached", item_id=line.menu_item_id, stock=stock)
                    return False

        line.quantity = quantity
        return True

    def remove_line(self, index: int) -> bool:
        line = self._line(index)
        if line.is_sent_to_kitchen:
            return False
        del self._lines[index]
        return True

    def set_note(self, index: int, note: str) -> bool:
        line = self._line(index)
        if line.is_sent_to_kitchen:
            return False
        note = (note or "").strip()
        if len(note) > Limits.MAX_NOTE_LENGTH:
            raise ValidationError(f"Notes cannot exceed {Limits.MAX_NOTE_LENGTH} characters")
        line.notes = note
        return True

    def set_modifiers(self, index: int, modifier_ids: Iterable[str]) -> bool:
        """
        Replace a line's modifiers.

        Raises:
            ValidationError: If the selection breaks the item's group rules
        """
        line = self._line(index)
        if line.is_sent_to_kitchen:
            return False

        menu_item = self._catalog.get(line.menu_item_id)
        chosen: list[Modifier] = []
        for modifier_id in modifier_ids:
            group = menu_item.group_of(modifier_id)
            if group is None:
                raise ValidationError(
                    f"Modifier '{modifier_id}' is not offered for {menu_item.name}",
                    item_id=menu_item.id,
                    modifier_id=modifier_id,
                )
            chosen.append(group.find(modifier_id))

        line.modifiers = validate_modifier_selection(menu_item, chosen)
        return True

    def edit_line(
        self,
        index: int,
        quantity: int | None = None,
        modifier_ids: Iterable[str] | None = None,
        notes: str | None = None,
    ) -> bool:
        """
        Apply several edits to one line as a unit.

        Either every requested edit lands or the cart is left as it was.
        Returns False when any edit is refused.
        """
        self._line(index)
        saved = [line.model_copy(deep=True) for line in self._lines]
        try:
            applied = True
            if modifier_ids is not None:
                applied = self.set_modifiers(index, modifier_ids)
            if applied and notes is not None:
                applied = self.set_note(index, notes)
            # Last, since a quantity of zero removes the line
            if applied and quantity is not None:
                applied = self.update_quantity(index, quantity)
        except ValidationError:
            self._lines = saved
            raise
        if not applied:
            self._lines = saved
        return applied

    def _stock_of(self, menu_item_id: str) -> int | None:
        try:
            return self._catalog.get(menu_item_id).stock
        except NotFoundError:
            # Line snapshot of an item no longer on the menu
            return None


def validate_quantity_or_raise(quantity: int) -> int:
    try:
        return validate_quantity(quantity)
    except ValueError as e:
        raise ValidationError(str(e), quantity=quantity) from e
