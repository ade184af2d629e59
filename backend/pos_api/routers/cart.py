"""
Cart router.
Thin adapter over the terminal's cart and dispatch operations.
"""

from fastapi import APIRouter, Depends, status

from pos_api.core.dependencies import get_terminal
from pos_api.models.order import OrderItem
from pos_api.routers.schemas import (
    AddConfiguredItemRequest,
    AddItemRequest,
    BarcodeOutput,
    BarcodeRequest,
    CartOutput,
    ConfigurationOutput,
    DiscountRequest,
    DispatchDraftOutput,
    DispatchFieldsRequest,
    LineEditOutput,
    SeatRequest,
    StartOrderRequest,
    UpdateLineRequest,
)
from pos_api.services.domain.cart_service import ItemConfiguration
from pos_api.services.domain.dispatch_service import DRAFT_FIELDS, DispatchDraft
from pos_api.services.terminal import PosTerminal

router = APIRouter(prefix="/api/cart", tags=["cart"])


# =============================================================================
# Helpers
# =============================================================================


def cart_output(terminal: PosTerminal) -> CartOutput:
    snapshot = terminal.snapshot()
    return CartOutput(
        lines=list(snapshot.cart),
        totals=snapshot.totals,
        active_seat=terminal.cart.active_seat,
        active_order_id=snapshot.active_order_id,
        dispatch_type=snapshot.dispatch_type,
        details=snapshot.details,
    )


def configuration_output(configuration: ItemConfiguration) -> ConfigurationOutput:
    return ConfigurationOutput(
        menu_item_id=configuration.menu_item.id,
        seat=configuration.seat,
        selected_modifier_ids=[m.id for m in configuration.selected_modifiers],
        unit_total=configuration.unit_total,
    )


def to_draft(terminal: PosTerminal, body: DispatchFieldsRequest) -> DispatchDraft:
    draft = terminal.new_draft()
    for name in DRAFT_FIELDS:
        setattr(draft, name, getattr(body, name))
    draft.edited = {name for name in body.edited if name in DRAFT_FIELDS}
    return draft


def draft_output(draft: DispatchDraft) -> DispatchDraftOutput:
    return DispatchDraftOutput(
        dispatch_type=draft.dispatch_type,
        table_number=draft.table_number,
        guests=draft.guests,
        customer_name=draft.customer_name,
        customer_phone=draft.customer_phone,
        eircode=draft.eircode,
        address_line1=draft.address_line1,
        address_line2=draft.address_line2,
        city=draft.city,
        edited=sorted(draft.edited),
        advisory=draft.advisory,
        found_customer_id=draft.found_customer.id if draft.found_customer else None,
    )


# =============================================================================
# Cart
# =============================================================================


@router.get("", response_model=CartOutput)
def get_cart(terminal: PosTerminal = Depends(get_terminal)) -> CartOutput:
    return cart_output(terminal)


@router.delete("", response_model=CartOutput)
def clear_cart(terminal: PosTerminal = Depends(get_terminal)) -> CartOutput:
    terminal.clear_cart()
    return cart_output(terminal)


@router.post("/items", response_model=LineEditOutput)
def add_item(body: AddItemRequest, terminal: PosTerminal = Depends(get_terminal)) -> LineEditOutput:
    """
    Add one unit of an item without options.

    ``applied`` is False when the stock ceiling refused the add.
    """
    applied = terminal.add_item(body.menu_item_id, body.seat)
    return LineEditOutput(applied=applied, cart=cart_output(terminal))


@router.post("/items/configured", response_model=OrderItem, status_code=status.HTTP_201_CREATED)
def add_configured_item(
    body: AddConfiguredItemRequest,
    terminal: PosTerminal = Depends(get_terminal),
) -> OrderItem:
    """Add a configured line (options, notes, optional price override)."""
    configuration = terminal.begin_configuration(body.menu_item_id)
    configuration.quantity = body.quantity
    if body.seat is not None:
        configuration.seat = body.seat
    if body.modifier_ids is not None:
        configuration.set_selection(body.modifier_ids)
    configuration.notes = body.notes
    if body.override_price is not None or body.override_reason is not None:
        configuration.apply_override(body.override_price, body.override_reason)
    return terminal.add_configured(configuration)


@router.get("/items/{menu_item_id}/configuration", response_model=ConfigurationOutput)
def get_configuration(menu_item_id: str, terminal: PosTerminal = Depends(get_terminal)) -> ConfigurationOutput:
    """Default option selection for an item on the active seat."""
    return configuration_output(terminal.begin_configuration(menu_item_id))


@router.post("/barcode", response_model=BarcodeOutput)
def scan_barcode(body: BarcodeRequest, terminal: PosTerminal = Depends(get_terminal)) -> BarcodeOutput:
    result = terminal.scan_barcode(body.barcode)
    return BarcodeOutput(
        menu_item=result.menu_item,
        added=result.added,
        configuration=configuration_output(result.configuration) if result.configuration else None,
    )


@router.patch("/lines/{index}", response_model=LineEditOutput)
def update_line(
    index: int,
    body: UpdateLineRequest,
    terminal: PosTerminal = Depends(get_terminal),
) -> LineEditOutput:
    """
    Edit a line. The edits land together or not at all; sent lines and
    stock breaches come back as ``applied`` False with the line untouched.
    """
    applied = terminal.edit_line(
        index,
        quantity=body.quantity,
        modifier_ids=body.modifier_ids,
        notes=body.notes,
    )
    return LineEditOutput(applied=applied, cart=cart_output(terminal))


@router.delete("/lines/{index}", response_model=LineEditOutput)
def remove_line(index: int, terminal: PosTerminal = Depends(get_terminal)) -> LineEditOutput:
    applied = terminal.remove_line(index)
    return LineEditOutput(applied=applied, cart=cart_output(terminal))


@router.put("/seat", response_model=CartOutput)
def set_seat(body: SeatRequest, terminal: PosTerminal = Depends(get_terminal)) -> CartOutput:
    terminal.set_active_seat(body.seat)
    return cart_output(terminal)


@router.put("/discount", response_model=CartOutput)
def set_discount(body: DiscountRequest, terminal: PosTerminal = Depends(get_terminal)) -> CartOutput:
    terminal.set_discount(body.amount)
    return cart_output(terminal)


# =============================================================================
# Dispatch
# =============================================================================


@router.post("/dispatch", response_model=CartOutput)
def start_order(body: StartOrderRequest, terminal: PosTerminal = Depends(get_terminal)) -> CartOutput:
    """Choose how the order reaches the customer."""
    terminal.start_order(body.dispatch_type)
    return cart_output(terminal)


@router.put("/dispatch/details", response_model=CartOutput)
def confirm_details(
    body: DispatchFieldsRequest,
    terminal: PosTerminal = Depends(get_terminal),
) -> CartOutput:
    """Validate the dispatch fields and attach them to the cart."""
    terminal.confirm_details(to_draft(terminal, body))
    return cart_output(terminal)


@router.post("/dispatch/phone-lookup", response_model=DispatchDraftOutput)
def phone_lookup(
    body: DispatchFieldsRequest,
    terminal: PosTerminal = Depends(get_terminal),
) -> DispatchDraftOutput:
    """Auto-fill from the CRM when the phone matches a returning customer."""
    draft = to_draft(terminal, body)
    terminal.resolver.on_phone_changed(draft, body.customer_phone)
    return draft_output(draft)


@router.post("/dispatch/address-lookup", response_model=DispatchDraftOutput)
async def address_lookup(
    body: DispatchFieldsRequest,
    terminal: PosTerminal = Depends(get_terminal),
) -> DispatchDraftOutput:
    """
    Resolve the eircode into address fields.

    Never fails: when nothing is found the draft carries an advisory and
    the operator enters the address by hand.
    """
    draft = to_draft(terminal, body)
    await terminal.lookup_address(draft)
    return draft_output(draft)
