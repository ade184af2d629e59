"""
Seed data for development and testing.
Provides the starter menu and a few CRM customers for the terminal.
"""

from decimal import Decimal

from shared.config.constants import DispatchType, SelectionMode
from shared.config.logging import get_logger
from pos_api.models.customer import Customer
from pos_api.models.dispatch import DeliveryAddress
from pos_api.models.menu import MenuItem, Modifier, ModifierGroup

logger = get_logger(__name__)


# =============================================================================
# Modifier groups
# =============================================================================

BURGER_COOKING = ModifierGroup(
    id="mg_cooking",
    name="Cooking",
    selection_mode=SelectionMode.SINGLE,
    modifiers=(
        Modifier(id="m_medium", name="Medium"),
        Modifier(id="m_well_done", name="Well Done"),
    ),
)

BURGER_EXTRAS = ModifierGroup(
    id="mg_extras",
    name="Extras",
    selection_mode=SelectionMode.MULTIPLE,
    modifiers=(
        Modifier(id="m_bacon", name="Bacon", price_delta=Decimal("1.50")),
        Modifier(id="m_extra_cheese", name="Extra Cheese", price_delta=Decimal("1.00")),
        Modifier(id="m_no_onion", name="No Onion"),
    ),
)

WING_SAUCE = ModifierGroup(
    id="mg_sauce",
    name="Sauce",
    selection_mode=SelectionMode.SINGLE,
    modifiers=(
        Modifier(id="m_hot", name="Hot"),
        Modifier(id="m_bbq", name="BBQ", price_delta=Decimal("0.50")),
        Modifier(id="m_garlic_parm", name="Garlic Parmesan", price_delta=Decimal("0.75")),
    ),
)

# Dine-in only: not packaged for takeaway or delivery
DINE_IN_ONLY = frozenset({DispatchType.DINE_IN, DispatchType.QR_ORDER})


# =============================================================================
# Menu
# =============================================================================


def _item(item_id, name, price, category, stock, barcode, allergens=(), **extra) -> MenuItem:
    return MenuItem(
        id=item_id,
        name=name,
        price=Decimal(price),
        category=category,
        stock=stock,
        barcode=barcode,
        allergens=frozenset(allergens),
        **extra,
    )


SEED_MENU: tuple[MenuItem, ...] = (
    # Starters
    _item("10", "Garlic Bread with Cheese", "4.99", "Starters", 50, "2001", ("Dairy", "Gluten")),
    _item("11", "Bruschetta Pomodoro", "6.50", "Starters", 30, "2002", ("Gluten",)),
    _item("12", "Chicken Wings", "8.99", "Starters", 40, "2003", modifier_groups=(WING_SAUCE,)),
    # Pizza
    _item("1", "Margherita Pizza", "12.99", "Pizza", 20, "1001", ("Dairy", "Gluten")),
    _item("2", "Pepperoni Pizza", "14.99", "Pizza", 15, "1002", ("Dairy", "Gluten")),
    # Burgers
    _item(
        "3", "Classic Cheeseburger", "9.99", "Burgers", 50, "1003", ("Dairy", "Gluten", "Mustard"),
        modifier_groups=(BURGER_COOKING, BURGER_EXTRAS),
    ),
    # Pasta
    _item("20", "Spaghetti Carbonara", "13.50", "Pasta", 25, "3001", ("Eggs", "Dairy", "Gluten")),
    _item("21", "Penne Arrabbiata", "11.99", "Pasta", 30, "3002", ("Gluten",)),
    # Sides
    _item("30", "French Fries", "3.50", "Sides", 100, "4001"),
    _item("31", "Sweet Potato Fries", "4.50", "Sides", 60, "4002"),
    _item("32", "Onion Rings", "3.99", "Sides", 80, "4003", ("Gluten",)),
    # Others
    _item("4", "Caesar Salad", "8.99", "Salads", 12, "1004", ("Dairy", "Fish", "Eggs")),
    _item("5", "Iced Tea", "2.50", "Drinks", 200, "1005"),
    _item(
        "40", "Chocolate Lava Cake", "6.99", "Desserts", 15, "5001", ("Dairy", "Eggs", "Gluten"),
        available_for=DINE_IN_ONLY,
    ),
)


# =============================================================================
# CRM
# =============================================================================

SEED_CUSTOMERS: tuple[Customer, ...] = (
    Customer(
        id="c1",
        name="Aoife Byrne",
        phone="0871234567",
        email="aoife@example.com",
        addresses=(DeliveryAddress(eircode="D02 X285", line1="12 Main Street", city="Dublin"),),
        total_orders=14,
        total_spent=Decimal("312.40"),
    ),
    Customer(
        id="c2",
        name="Sean Murphy",
        phone="0857654321",
        addresses=(
            DeliveryAddress(eircode="T12 AB34", line1="4 River Walk", line2="Apt 2", city="Cork"),
        ),
        total_orders=3,
        total_spent=Decimal("58.75"),
    ),
)


def seed_menu() -> list[MenuItem]:
    logger.info("Seeding menu", items=len(SEED_MENU))
    return list(SEED_MENU)


def seed_customers() -> list[Customer]:
    logger.info("Seeding CRM customers", customers=len(SEED_CUSTOMERS))
    return list(SEED_CUSTOMERS)
