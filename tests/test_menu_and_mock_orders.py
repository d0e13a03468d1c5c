from datetime import date

from catering.models.order import Order
from catering.services.menu import (
    DEFAULT_MENU_ITEMS,
    list_available_menu_items,
    load_menu_lookup,
    seed_default_menu,
    update_menu_item,
)
from catering.services.mock_orders import MOCK_ORDERS, add_mock_orders, clear_orders, count_orders
from catering.services.pricing import calculate_total_price
from tests.fixtures_data import build_session_factory


def test_seed_default_menu_is_idempotent():
    db = build_session_factory(seed_menu=False)()

    first = seed_default_menu(db)
    second = seed_default_menu(db)

    assert first == len(DEFAULT_MENU_ITEMS)
    assert second == 0
    db.close()


def test_unavailable_items_still_price_existing_orders():
    db = build_session_factory()()
    update_menu_item(db, "dessert-platter", {"is_available": False})

    lookup = load_menu_lookup(db)
    total = calculate_total_price([{"menu_item_id": "dessert-platter", "quantity": 2}], lookup)

    assert total == 8000
    assert "dessert-platter" not in [item.id for item in list_available_menu_items(db)]
    db.close()


def test_update_menu_item_can_clear_serves_but_not_name():
    db = build_session_factory()()

    item = update_menu_item(db, "pasta-bar", {"serves": None, "name": None})

    assert item.serves is None
    assert item.name == "Pasta Bar"
    db.close()


def test_mock_orders_cover_every_lifecycle_state():
    db = build_session_factory()()

    created = add_mock_orders(db, today=date(2099, 1, 1))

    assert count_orders(db) == len(MOCK_ORDERS)
    statuses = {order.status for order in created}
    assert statuses == {"pending", "approved_pending_time", "invoice_sent", "paid", "denied"}
    paid = next(order for order in created if order.status == "paid")
    assert paid.paid_at is not None
    assert paid.payment_reference_id.startswith("in_mock_")
    assert db.query(Order).filter(Order.date_needed == "2099-01-08").count() == 1

    assert clear_orders(db) == len(MOCK_ORDERS)
    assert count_orders(db) == 0
    db.close()
