"""
Menu router.
Read-only catalog lookups for the sales terminal.
"""

from fastapi import APIRouter, Depends, Query

from shared.config.constants import DispatchType
from pos_api.core.dependencies import get_terminal
from pos_api.models.menu import MenuItem
from pos_api.routers.schemas import CategoryOutput
from pos_api.services.catalog.menu_catalog import ALL_CATEGORIES
from pos_api.services.terminal import PosTerminal

router = APIRouter(prefix="/api/menu", tags=["menu"])


@router.get("", response_model=list[MenuItem])
def list_menu(
    dispatch_type: DispatchType = Query(...),
    category: str = Query(default=ALL_CATEGORIES),
    q: str | None = Query(default=None, description="Name or barcode fragment"),
    terminal: PosTerminal = Depends(get_terminal),
) -> list[MenuItem]:
    """Items available for a dispatch type, filtered by category and search."""
    return terminal.catalog.search(dispatch_type, category, q)


@router.get("/categories", response_model=list[CategoryOutput])
def list_categories(
    dispatch_type: DispatchType = Query(...),
    terminal: PosTerminal = Depends(get_terminal),
) -> list[CategoryOutput]:
    """Category tabs in course order, "All" first."""
    return [
        CategoryOutput(name=c.name, count=c.count)
        for c in terminal.catalog.categories(dispatch_type)
    ]


@router.get("/{item_id}", response_model=MenuItem)
def get_menu_item(item_id: str, terminal: PosTerminal = Depends(get_terminal)) -> MenuItem:
    return terminal.catalog.get(item_id)
