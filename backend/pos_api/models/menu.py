"""
Menu Models: MenuItem, ModifierGroup, Modifier.

Immutable reference data supplied by the catalog provider at startup.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from shared.config.constants import DispatchType, SelectionMode


class Modifier(BaseModel):
    """An add-on or choice with a price delta (may be negative)."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price_delta: Decimal = Decimal("0")


class ModifierGroup(BaseModel):
    """A named set of modifiers, either single- or multi-select."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    selection_mode: SelectionMode
    modifiers: tuple[Modifier, ...] = ()

    def find(self, modifier_id: str) -> Modifier | None:
        for modifier in self.modifiers:
            if modifier.id == modifier_id:
                return modifier
        return None

    def contains(self, modifier_id: str) -> bool:
        return self.find(modifier_id) is not None

    def default_modifier(self) -> Modifier | None:
        """
        Modifier pre-selected when a configuration flow opens.

        Single groups default to their zero-delta modifier, falling back to
        the first one. Multiple groups start empty.
        """
        if self.selection_mode != SelectionMode.SINGLE or not self.modifiers:
            return None
        for modifier in self.modifiers:
            if modifier.price_delta == 0:
                return modifier
        return self.modifiers[0]


class MenuItem(BaseModel):
    """A sellable catalog item."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: Decimal
    category: str
    stock: int | None = Field(default=None, ge=0)
    barcode: str | None = None
    allergens: frozenset[str] = frozenset()
    # None means available for every dispatch type
    available_for: frozenset[DispatchType] | None = None
    modifier_groups: tuple[ModifierGroup, ...] = ()

    @property
    def has_modifiers(self) -> bool:
        return len(self.modifier_groups) > 0

    def is_available_for(self, dispatch_type: DispatchType) -> bool:
        return self.available_for is None or dispatch_type in self.available_for

    def group_of(self, modifier_id: str) -> ModifierGroup | None:
        """Return the group that owns a modifier id."""
        for group in self.modifier_groups:
            if group.contains(modifier_id):
                return group
        return None
