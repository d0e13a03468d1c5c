import dataclasses
from datetime import datetime, timedelta, timezone

from catering.integrations.email import LoggingEmailSender
from catering.models.order import Order
from catering.routers.menu import router as menu_router
from catering.routers.orders import router as orders_router
from catering.services.menu import update_menu_item
from catering.services.promo_codes import create_promo_code
from tests.fixtures_data import HAPPY_PATH_ORDER, TEST_SETTINGS, build_client, build_session_factory


def _build_client(sender=None):
    session_factory = build_session_factory()
    client = build_client(orders_router, menu_router, session_factory=session_factory, sender=sender)
    return client, session_factory


def test_create_order_returns_summary_and_notifies():
    sender = LoggingEmailSender()
    client, session_factory = _build_client(sender)

    response = client.post("/api/orders", json=HAPPY_PATH_ORDER)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Order created successfully"
    assert body["order"]["status"] == "pending"
    assert "discount_percent" not in body["order"]
    assert [m.template for m in sender.sent] == ["new_order_owner", "pending_customer"]

    db = session_factory()
    stored = db.get(Order, body["order"]["id"])
    assert stored.customer_email == "sarah.johnson@example.com"
    assert stored.date_needed == "2099-06-01"
    db.close()


def test_create_order_with_promo_reports_discount():
    client, session_factory = _build_client()
    db = session_factory()
    create_promo_code(db, {"code": "SAVE15", "discount_percent": 15})
    db.close()

    response = client.post("/api/orders", json={**HAPPY_PATH_ORDER, "promo_code": "save15"})

    assert response.status_code == 201
    assert response.json()["order"]["discount_percent"] == 15


def test_create_order_with_unknown_promo_is_rejected():
    client, session_factory = _build_client()

    response = client.post("/api/orders", json={**HAPPY_PATH_ORDER, "promo_code": "NOPE"})

    assert response.status_code == 400
    assert response.json() == {"error": "Promo code not found"}
    db = session_factory()
    assert db.query(Order).count() == 0
    db.close()


def test_create_order_validation_errors_use_envelope():
    client, _ = _build_client()

    response = client.post("/api/orders", json={**HAPPY_PATH_ORDER, "customer_email": "not-an-email", "food_selection": []})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    assert {detail["field"] for detail in body["details"]} == {"customer_email", "food_selection"}


def test_create_order_after_cutoff_date_is_rejected():
    client, _ = _build_client()

    response = client.post("/api/orders", json={**HAPPY_PATH_ORDER, "date_needed": "2000-01-01"})

    assert response.status_code == 400
    details = response.json()["details"]
    assert details[0]["field"] == "date_needed"
    assert "the day before delivery" in details[0]["message"]


def _tomorrow_utc() -> str:
    return (datetime.now(timezone.utc).date() + timedelta(days=1)).isoformat()


def test_create_order_cutoff_follows_settings():
    settings = dataclasses.replace(TEST_SETTINGS, order_cutoff_hour=0, business_timezone="UTC")
    client = build_client(orders_router, settings=settings)

    response = client.post("/api/orders", json={**HAPPY_PATH_ORDER, "date_needed": _tomorrow_utc()})

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "date_needed"


def test_create_order_accepts_tomorrow_before_cutoff():
    # a cutoff at midnight of the next day is never reached
    settings = dataclasses.replace(TEST_SETTINGS, order_cutoff_hour=24, business_timezone="UTC")
    client = build_client(orders_router, settings=settings)

    response = client.post("/api/orders", json={**HAPPY_PATH_ORDER, "date_needed": _tomorrow_utc()})

    assert response.status_code == 201


def test_create_order_with_malformed_date():
    client, _ = _build_client()

    response = client.post("/api/orders", json={**HAPPY_PATH_ORDER, "date_needed": "soon"})

    assert response.status_code == 400
    assert "YYYY-MM-DD" in response.json()["details"][0]["message"]


def test_validate_promo_route():
    client, session_factory = _build_client()
    db = session_factory()
    create_promo_code(db, {"code": "SAVE10", "discount_percent": 10})
    db.close()

    valid = client.post("/api/orders/validate-promo", json={"code": "save10"})
    invalid = client.post("/api/orders/validate-promo", json={"code": "OTHER"})

    assert valid.status_code == 200
    assert valid.json()["valid"] is True
    assert valid.json()["promo_code"]["discount_percent"] == 10
    assert invalid.json() == {"valid": False, "error": "Promo code not found"}


def test_catering_interest_emails_catering_inbox():
    sender = LoggingEmailSender()
    client, _ = _build_client(sender)

    response = client.post("/api/catering-interest", json={"email": "Guest@Example.com"})

    assert response.status_code == 200
    assert "catering menu" in response.json()["message"]
    assert sender.sent[0].to == "catering@example.com"
    assert "guest@example.com" in sender.sent[0].subject


def test_public_menu_lists_available_items_in_display_order():
    client, session_factory = _build_client()
    db = session_factory()
    update_menu_item(db, "taco-bar", {"is_available": False})
    db.close()

    response = client.get("/api/menu")

    assert response.status_code == 200
    ids = [item["id"] for item in response.json()["menuItems"]]
    assert ids == ["family-dinner-meal", "party-platter", "sandwich-box", "pasta-bar", "dessert-platter"]
