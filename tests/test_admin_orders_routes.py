from catering.integrations.payments import MockPaymentProvider
from catering.routers.admin_orders import router as admin_orders_router
from catering.routers.orders import router as orders_router
from catering.services.auth import create_admin_token
from catering.services.promo_codes import create_promo_code
from tests.fixtures_data import (
    APPROVAL_MESSAGE,
    DENIAL_REASON,
    HAPPY_PATH_ORDER,
    TEST_SETTINGS,
    FailingPaymentProvider,
    admin_headers,
    build_client,
    build_session_factory,
)


def _build_client(payment_provider=None):
    session_factory = build_session_factory()
    client = build_client(
        orders_router,
        admin_orders_router,
        session_factory=session_factory,
        payment_provider=payment_provider or MockPaymentProvider(),
    )
    return client, session_factory


def _place_order(client, **overrides):
    response = client.post("/api/orders", json={**HAPPY_PATH_ORDER, **overrides})
    assert response.status_code == 201
    return response.json()["order"]["id"]


def test_admin_routes_require_token():
    client, _ = _build_client()

    response = client.get("/api/admin/orders")

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized - No token provided"}


def test_admin_routes_reject_invalid_token():
    client, _ = _build_client()

    response = client.get("/api/admin/orders", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized - Invalid token"}


def test_admin_routes_reject_token_for_other_email():
    client, _ = _build_client()
    token = create_admin_token("someone@example.com", TEST_SETTINGS)

    response = client.get("/api/admin/orders", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_full_lifecycle_with_price_override_and_discount():
    provider = MockPaymentProvider()
    client, session_factory = _build_client(provider)
    db = session_factory()
    create_promo_code(db, {"code": "SAVE20", "discount_percent": 20})
    db.close()
    order_id = _place_order(client, promo_code="SAVE20")
    headers = admin_headers()

    approved = client.post(f"/api/admin/orders/{order_id}/approve", json={"approval_message": APPROVAL_MESSAGE}, headers=headers)
    invoiced = client.post(
        f"/api/admin/orders/{order_id}/confirm-time-and-send-invoice",
        json={"total_price_cents": 5000},
        headers=headers,
    )
    paid = client.post(f"/api/admin/orders/{order_id}/mark-paid", headers=headers)

    assert approved.status_code == 200
    assert approved.json()["message"] == "Order approved successfully"
    assert approved.json()["order"]["status"] == "approved_pending_time"
    assert invoiced.status_code == 200
    invoice_order = invoiced.json()["order"]
    assert invoice_order["status"] == "invoice_sent"
    assert invoice_order["total_price_cents"] == 4000
    assert invoice_order["original_price_cents"] == 5000
    assert invoice_order["payment_url"].startswith("http://localhost:5173/pay/mock_inv_")
    assert paid.json()["order"]["status"] == "paid"
    assert paid.json()["order"]["paid_at"] is not None


def test_confirm_without_body_uses_menu_prices():
    client, _ = _build_client()
    order_id = _place_order(client)
    headers = admin_headers()
    client.post(f"/api/admin/orders/{order_id}/approve", json={"approval_message": APPROVAL_MESSAGE}, headers=headers)

    response = client.post(f"/api/admin/orders/{order_id}/confirm-time-and-send-invoice", headers=headers)

    assert response.status_code == 200
    assert response.json()["order"]["total_price_cents"] == 10000
    assert response.json()["order"]["original_price_cents"] is None


def test_approving_denied_order_conflicts():
    client, _ = _build_client()
    order_id = _place_order(client)
    headers = admin_headers()
    client.post(f"/api/admin/orders/{order_id}/deny", json={"admin_reason": DENIAL_REASON}, headers=headers)

    response = client.post(f"/api/admin/orders/{order_id}/approve", json={"approval_message": APPROVAL_MESSAGE}, headers=headers)

    assert response.status_code == 409
    assert response.json() == {"error": "Order is already denied"}


def test_invoice_for_pending_order_conflicts():
    client, _ = _build_client()
    order_id = _place_order(client)

    response = client.post(
        f"/api/admin/orders/{order_id}/confirm-time-and-send-invoice",
        json={"total_price_cents": 1000},
        headers=admin_headers(),
    )

    assert response.status_code == 409
    assert response.json() == {"error": "Order status must be approved_pending_time, currently pending"}


def test_payment_failure_returns_bad_gateway_and_keeps_status():
    client, _ = _build_client(FailingPaymentProvider())
    order_id = _place_order(client)
    headers = admin_headers()
    client.post(f"/api/admin/orders/{order_id}/approve", json={"approval_message": APPROVAL_MESSAGE}, headers=headers)

    response = client.post(f"/api/admin/orders/{order_id}/confirm-time-and-send-invoice", headers=headers)
    stored = client.get(f"/api/admin/orders/{order_id}", headers=headers)

    assert response.status_code == 502
    assert response.json() == {"error": "Failed to create Stripe invoice: card_declined"}
    assert stored.json()["order"]["status"] == "approved_pending_time"


def test_negative_override_is_a_validation_error():
    client, _ = _build_client()
    order_id = _place_order(client)

    response = client.post(
        f"/api/admin/orders/{order_id}/confirm-time-and-send-invoice",
        json={"total_price_cents": -1},
        headers=admin_headers(),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_deny_requires_a_reason():
    client, _ = _build_client()
    order_id = _place_order(client)

    response = client.post(f"/api/admin/orders/{order_id}/deny", json={"admin_reason": "no"}, headers=admin_headers())

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "admin_reason"


def test_list_orders_with_status_filter():
    client, _ = _build_client()
    headers = admin_headers()
    first = _place_order(client)
    _place_order(client)
    client.post(f"/api/admin/orders/{first}/deny", json={"admin_reason": DENIAL_REASON}, headers=headers)

    denied = client.get("/api/admin/orders", params={"status": "denied"}, headers=headers)
    legacy = client.get("/api/admin/orders", params={"status": "time_confirmed"}, headers=headers)
    everything = client.get("/api/admin/orders", headers=headers)

    assert [order["id"] for order in denied.json()["orders"]] == [first]
    assert legacy.json() == {"orders": []}
    assert len(everything.json()["orders"]) == 2


def test_list_orders_rejects_unknown_status():
    client, _ = _build_client()

    response = client.get("/api/admin/orders", params={"status": "shipped"}, headers=admin_headers())

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid status parameter"}


def test_unknown_order_is_not_found():
    client, _ = _build_client()

    response = client.post("/api/admin/orders/missing/mark-paid", headers=admin_headers())

    assert response.status_code == 404
    assert response.json() == {"error": "Order not found"}
