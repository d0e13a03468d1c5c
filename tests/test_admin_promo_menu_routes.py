from catering.routers.admin_menu import router as admin_menu_router
from catering.routers.admin_promo_codes import router as admin_promo_codes_router
from catering.routers.menu import router as menu_router
from tests.fixtures_data import admin_headers, build_client

NEW_ITEM = {
    "id": "breakfast-bar",
    "name": "Breakfast Bar",
    "description": "Eggs, bacon and pastries.",
    "price_cents": 9000,
    "category": "meals",
    "serves": 10,
    "display_order": 7,
}


def _build_client():
    return build_client(admin_menu_router, admin_promo_codes_router, menu_router)


def test_promo_code_crud_round():
    client = _build_client()
    headers = admin_headers()

    created = client.post(
        "/api/admin/promo-codes",
        json={"code": "spring25", "discount_percent": 25, "max_uses": 10, "description": "Spring sale"},
        headers=headers,
    )
    promo_id = created.json()["promoCode"]["id"]
    updated = client.put(f"/api/admin/promo-codes/{promo_id}", json={"is_active": False}, headers=headers)
    validated = client.post("/api/admin/promo-codes/validate", json={"code": "SPRING25"}, headers=headers)
    listed = client.get("/api/admin/promo-codes", headers=headers)
    deleted = client.delete(f"/api/admin/promo-codes/{promo_id}", headers=headers)
    missing = client.get(f"/api/admin/promo-codes/{promo_id}", headers=headers)

    assert created.status_code == 201
    assert created.json()["promoCode"]["code"] == "SPRING25"
    assert created.json()["promoCode"]["current_uses"] == 0
    assert updated.json()["promoCode"]["is_active"] is False
    assert validated.json() == {"valid": False, "error": "This promo code is no longer active"}
    assert [promo["code"] for promo in listed.json()["promoCodes"]] == ["SPRING25"]
    assert deleted.json() == {"message": "Promo code deleted successfully"}
    assert missing.status_code == 404
    assert missing.json() == {"error": "Promo code not found"}


def test_duplicate_promo_code_conflicts():
    client = _build_client()
    headers = admin_headers()
    client.post("/api/admin/promo-codes", json={"code": "SAVE10", "discount_percent": 10}, headers=headers)

    response = client.post("/api/admin/promo-codes", json={"code": "save10", "discount_percent": 20}, headers=headers)

    assert response.status_code == 409
    assert response.json() == {"error": "A promo code with this code already exists"}


def test_promo_window_must_be_ordered():
    client = _build_client()

    response = client.post(
        "/api/admin/promo-codes",
        json={
            "code": "BACKWARDS",
            "discount_percent": 10,
            "valid_from": "2025-06-01T00:00:00Z",
            "valid_until": "2025-05-01T00:00:00Z",
        },
        headers=admin_headers(),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_promo_update_cannot_end_before_start():
    client = _build_client()
    headers = admin_headers()
    created = client.post(
        "/api/admin/promo-codes",
        json={"code": "SUMMER", "discount_percent": 10, "valid_from": "2025-06-01T00:00:00Z"},
        headers=headers,
    )
    promo_id = created.json()["promoCode"]["id"]

    both = client.put(
        f"/api/admin/promo-codes/{promo_id}",
        json={"valid_from": "2025-06-01T00:00:00Z", "valid_until": "2025-05-01T00:00:00Z"},
        headers=headers,
    )
    until_only = client.put(
        f"/api/admin/promo-codes/{promo_id}",
        json={"valid_until": "2025-05-01T00:00:00Z"},
        headers=headers,
    )

    assert both.status_code == 400
    assert both.json()["error"] == "Validation failed"
    assert until_only.status_code == 400
    assert until_only.json() == {"error": "valid_until must be after valid_from"}


def test_promo_discount_out_of_range_is_rejected():
    client = _build_client()

    response = client.post("/api/admin/promo-codes", json={"code": "FREE", "discount_percent": 101}, headers=admin_headers())

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "discount_percent"


def test_menu_item_crud_round():
    client = _build_client()
    headers = admin_headers()

    created = client.post("/api/admin/menu", json=NEW_ITEM, headers=headers)
    updated = client.put("/api/admin/menu/breakfast-bar", json={"price_cents": 9500, "is_available": False}, headers=headers)
    admin_list = client.get("/api/admin/menu", headers=headers)
    public_list = client.get("/api/menu")
    deleted = client.delete("/api/admin/menu/breakfast-bar", headers=headers)
    missing = client.get("/api/admin/menu/breakfast-bar", headers=headers)

    assert created.status_code == 201
    assert created.json()["menuItem"]["price_cents"] == 9000
    assert updated.json()["menuItem"]["price_cents"] == 9500
    assert "breakfast-bar" in [item["id"] for item in admin_list.json()["menuItems"]]
    assert "breakfast-bar" not in [item["id"] for item in public_list.json()["menuItems"]]
    assert deleted.status_code == 200
    assert missing.status_code == 404
    assert missing.json() == {"error": "Menu item not found"}


def test_duplicate_menu_item_conflicts():
    client = _build_client()

    response = client.post("/api/admin/menu", json={**NEW_ITEM, "id": "taco-bar"}, headers=admin_headers())

    assert response.status_code == 409
    assert response.json() == {"error": "A menu item with id taco-bar already exists"}


def test_menu_item_id_must_be_a_slug():
    client = _build_client()

    response = client.post("/api/admin/menu", json={**NEW_ITEM, "id": "Breakfast Bar"}, headers=admin_headers())

    assert response.status_code == 400


def test_admin_menu_requires_token():
    client = _build_client()

    assert client.get("/api/admin/menu").status_code == 401
