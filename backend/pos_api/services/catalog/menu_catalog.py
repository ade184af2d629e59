"""
Menu catalog.

Holds the immutable menu supplied at startup and answers the lookups the
sales terminal needs: by id, by barcode, by dispatch availability, category
listing with counts and free-text search.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from shared.config.constants import DispatchType, get_category_priority
from shared.config.logging import get_logger
from shared.utils.exceptions import MenuItemNotFoundError, ValidationError
from shared.utils.validators import sanitize_search_term
from pos_api.models.menu import MenuItem

logger = get_logger(__name__)

ALL_CATEGORIES = "All"


@dataclass(frozen=True, slots=True)
class CategoryCount:
    """A category tab with the number of items it holds."""

    name: str
    count: int


class MenuCatalog:
    """Read-only menu lookups."""

    def __init__(self, items: Iterable[MenuItem]):
        self._items: tuple[MenuItem, ...] = tuple(items)
        self._by_id: dict[str, MenuItem] = {}
        self._by_barcode: dict[str, MenuItem] = {}

        for item in self._items:
            if item.id in self._by_id:
                raise ValidationError(f"Duplicate menu item id '{item.id}'", item_id=item.id)
            self._by_id[item.id] = item
            if item.barcode:
                self._by_barcode.setdefault(item.barcode, item)

        logger.info("Menu catalog loaded", items=len(self._items))

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> tuple[MenuItem, ...]:
        return self._items

    def get(self, item_id: str) -> MenuItem:
        """
        Return a menu item by id.

        Raises:
            MenuItemNotFoundError: If no item has this id
        """
        item = self._by_id.get(item_id)
        if item is None:
            raise MenuItemNotFoundError(item_id)
        return item

    def find_by_barcode(self, barcode: str) -> MenuItem | None:
        """Exact barcode match, or None."""
        if not barcode:
            return None
        return self._by_barcode.get(barcode.strip())

    def available_for(self, dispatch_type: DispatchType) -> list[MenuItem]:
        return [item for item in self._items if item.is_available_for(dispatch_type)]

    def categories(self, dispatch_type: DispatchType) -> list[CategoryCount]:
        """
        Category tabs for a dispatch type.

        The first entry is "All". The rest only include categories with at
        least one available item, in course order.
        """
        available = self.available_for(dispatch_type)
        counts: dict[str, int] = {}
        for item in available:
            counts[item.category] = counts.get(item.category, 0) + 1

        ordered = sorted(counts, key=lambda name: (get_category_priority(name), name))
        return [CategoryCount(ALL_CATEGORIES, len(available))] + [
            CategoryCount(name, counts[name]) for name in ordered
        ]

    def search(
        self,
        dispatch_type: DispatchType,
        category: str = ALL_CATEGORIES,
        query: str | None = None,
    ) -> list[MenuItem]:
        """
        Items available for a dispatch type, filtered by category and query.

        The query matches item names case-insensitively or barcodes by substring.
        """
        items = self.available_for(dispatch_type)
        if category and category != ALL_CATEGORIES:
            items = [item for item in items if item.category == category]

        term = sanitize_search_term(query)
        if term:
            lowered = term.lower()
            items = [
                item
                for item in items
                if lowered in item.name.lower() or (item.barcode and term in item.barcode)
            ]
        return items
