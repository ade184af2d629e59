"""
Pytest configuration and fixtures for backend tests.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from shared.config.constants import AuditSeverity
from pos_api.core.dependencies import get_terminal
from pos_api.main import app
from pos_api.models.menu import MenuItem
from pos_api.seed import SEED_CUSTOMERS, SEED_MENU
from pos_api.services.catalog.menu_catalog import MenuCatalog
from pos_api.services.crm.customer_directory import InMemoryCustomerDirectory
from pos_api.services.domain.cart_service import CartService
from pos_api.services.domain.dispatch_service import DispatchDetailsResolver
from pos_api.services.domain.order_service import OrderService
from pos_api.services.domain.pricing_service import PricingService
from pos_api.services.terminal import PosTerminal


# Monday 19 October 2026, noon UTC
FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

# Plain item with a tight stock ceiling for stock tests
LIMITED_ITEM = MenuItem(
    id="L1",
    name="Daily Special",
    price=Decimal("10.00"),
    category="Mains",
    stock=5,
    barcode="9001",
)


class RecordingAuditSink:
    """Audit sink that keeps events in memory for assertions."""

    def __init__(self):
        self.events: list[tuple[str, dict, AuditSeverity]] = []

    def record(self, action, details, severity):
        self.events.append((action, dict(details), severity))

    def actions(self) -> list[str]:
        return [action for action, _, _ in self.events]


class FixedClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


@pytest.fixture
def menu() -> list[MenuItem]:
    return list(SEED_MENU) + [LIMITED_ITEM]


@pytest.fixture
def catalog(menu) -> MenuCatalog:
    return MenuCatalog(menu)


@pytest.fixture
def customers() -> InMemoryCustomerDirectory:
    return InMemoryCustomerDirectory(SEED_CUSTOMERS)


@pytest.fixture
def audit_sink() -> RecordingAuditSink:
    return RecordingAuditSink()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def pricing() -> PricingService:
    return PricingService(Decimal("0.08"))


@pytest.fixture
def cart(catalog, pricing, audit_sink) -> CartService:
    return CartService(catalog, pricing, audit_sink)


@pytest.fixture
def resolver(customers) -> DispatchDetailsResolver:
    return DispatchDetailsResolver(customers)


@pytest.fixture
def order_service(resolver, pricing, audit_sink, clock) -> OrderService:
    return OrderService(resolver, pricing, audit_sink, clock=clock, order_number_start=101)


@pytest.fixture
def terminal(catalog, customers, audit_sink, clock) -> PosTerminal:
    return PosTerminal(
        catalog,
        customers,
        audit_sink=audit_sink,
        clock=clock,
        tax_rate=Decimal("0.08"),
        order_number_start=101,
    )


@pytest.fixture(scope="function")
def client(terminal):
    """
    Create a test client bound to a fresh terminal.
    """
    app.dependency_overrides[get_terminal] = lambda: terminal
    test_client = TestClient(app)
    try:
        yield test_client
    finally:
        app.dependency_overrides.clear()
