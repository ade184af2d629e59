"""
Catalog Services - menu lookups for the sales terminal.
"""

from .menu_catalog import ALL_CATEGORIES, CategoryCount, MenuCatalog

__all__ = [
    "ALL_CATEGORIES",
    "CategoryCount",
    "MenuCatalog",
]
