from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from catering.core.errors import DuplicateMenuItemError, MenuItemNotFoundError, PersistenceError
from catering.models.menu_item import MenuItem
from catering.services.pricing import menu_lookup_from_items

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("name", "description", "price_cents", "category", "serves", "display_order", "is_available")
_NULLABLE_FIELDS = {"serves"}

# Starter catalogue, prices in cents
DEFAULT_MENU_ITEMS: list[dict[str, Any]] = [
    {
        "id": "family-dinner-meal",
        "name": "Family Dinner Meal",
        "description": "Complete family-style dinner with your choice of entree, two sides, and dessert.",
        "price_cents": 5000,
        "category": "meals",
        "serves": 4,
        "display_order": 1,
    },
    {
        "id": "party-platter",
        "name": "Party Platter",
        "description": "Generous platter with assorted appetizers and finger foods.",
        "price_cents": 7500,
        "category": "platters",
        "serves": 8,
        "display_order": 2,
    },
    {
        "id": "sandwich-box",
        "name": "Sandwich Box",
        "description": "Assorted gourmet sandwiches with chips and cookies.",
        "price_cents": 12000,
        "category": "boxes",
        "serves": 10,
        "display_order": 3,
    },
    {
        "id": "pasta-bar",
        "name": "Pasta Bar",
        "description": "Build-your-own pasta bar with multiple pasta types, sauces, and toppings.",
        "price_cents": 15000,
        "category": "meals",
        "serves": 15,
        "display_order": 4,
    },
    {
        "id": "taco-bar",
        "name": "Taco Bar",
        "description": "Complete taco bar with seasoned meats, tortillas, and all the fixings.",
        "price_cents": 13500,
        "category": "meals",
        "serves": 12,
        "display_order": 5,
    },
    {
        "id": "dessert-platter",
        "name": "Dessert Platter",
        "description": "Assorted homemade desserts including cookies, brownies, and seasonal treats.",
        "price_cents": 4000,
        "category": "desserts",
        "serves": 8,
        "display_order": 6,
    },
]


def menu_item_to_dict(item: MenuItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description,
        "price_cents": item.price_cents,
        "category": item.category,
        "serves": item.serves,
        "display_order": item.display_order,
        "is_available": item.is_available,
        "created_at": item.created_at.isoformat() if item.created_at else None,
        "updated_at": item.updated_at.isoformat() if item.updated_at else None,
    }


def list_available_menu_items(db: Session) -> list[MenuItem]:
    return (
        db.query(MenuItem)
        .filter(MenuItem.is_available.is_(True))
        .order_by(MenuItem.display_order.asc(), MenuItem.name.asc())
        .all()
    )


def list_menu_items(db: Session) -> list[MenuItem]:
    return db.query(MenuItem).order_by(MenuItem.display_order.asc(), MenuItem.name.asc()).all()


def load_menu_lookup(db: Session) -> dict[str, MenuItem]:
    # unavailable items still price existing orders
    return menu_lookup_from_items(db.query(MenuItem).all())


def get_menu_item(db: Session, menu_item_id: str) -> MenuItem:
    item = db.get(MenuItem, menu_item_id)
    if item is None:
        raise MenuItemNotFoundError(menu_item_id)
    return item


def create_menu_item(db: Session, data: dict[str, Any]) -> MenuItem:
    item = MenuItem(
        id=data["id"],
        name=data["name"],
        description=data.get("description") or "",
        price_cents=int(data["price_cents"]),
        category=data.get("category") or "meals",
        serves=data.get("serves"),
        display_order=data.get("display_order") or 0,
        is_available=True if data.get("is_available") is None else bool(data["is_available"]),
    )
    db.add(item)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateMenuItemError(item.id) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error creating menu item id=%s", item.id)
        raise PersistenceError(f"Failed to create menu item: {exc}") from exc
    db.refresh(item)
    return item


def update_menu_item(db: Session, menu_item_id: str, updates: dict[str, Any]) -> MenuItem:
    item = get_menu_item(db, menu_item_id)
    for key, value in updates.items():
        if key not in _EDITABLE_FIELDS:
            continue
        if value is None and key not in _NULLABLE_FIELDS:
            continue
        setattr(item, key, value)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error updating menu item id=%s", menu_item_id)
        raise PersistenceError(f"Failed to update menu item: {exc}") from exc
    db.refresh(item)
    return item


def delete_menu_item(db: Session, menu_item_id: str) -> None:
    item = get_menu_item(db, menu_item_id)
    try:
        db.delete(item)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error deleting menu item id=%s", menu_item_id)
        raise PersistenceError(f"Failed to delete menu item: {exc}") from exc


def seed_default_menu(db: Session) -> int:
    """Insert the starter catalogue items that are missing; returns how many were added."""
    existing = {row[0] for row in db.query(MenuItem.id).all()}
    added = 0
    for data in DEFAULT_MENU_ITEMS:
        if data["id"] in existing:
            continue
        db.add(MenuItem(**data))
        added += 1
    if added:
        db.commit()
    return added
