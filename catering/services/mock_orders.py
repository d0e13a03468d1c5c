from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any

from sqlalchemy.orm import Session

from catering.models.order import Order, OrderStatus

# (days from today, order fields)
MOCK_ORDERS: list[tuple[int, dict[str, Any]]] = [
    (7, {
        "customer_name": "Sarah Johnson",
        "customer_email": "sarah.johnson@example.com",
        "address": "123 Main Street, Springfield, IL 62701",
        "food_selection": [
            {"menu_item_id": "family-dinner-meal", "quantity": 2, "notes": "No nuts please"},
            {"menu_item_id": "dessert-platter", "quantity": 1},
        ],
        "notes": "Birthday party for my daughter. Please arrive by 5 PM.",
        "status": OrderStatus.PENDING.value,
    }),
    (14, {
        "customer_name": "Michael Chen",
        "customer_email": "michael.chen@example.com",
        "address": "456 Oak Avenue, Chicago, IL 60614",
        "food_selection": [
            {"menu_item_id": "pasta-bar", "quantity": 1},
            {"menu_item_id": "party-platter", "quantity": 2},
        ],
        "notes": "Corporate event. Need setup assistance.",
        "status": OrderStatus.INVOICE_SENT.value,
        "approval_message": "We can deliver at 11:30 AM and help with setup.",
        "total_price_cents": 30000,
    }),
    (3, {
        "customer_name": "Emily Rodriguez",
        "customer_email": "emily.rodriguez@example.com",
        "address": "789 Elm Street, Naperville, IL 60540",
        "food_selection": [{"menu_item_id": "sandwich-box", "quantity": 3}],
        "notes": "Office lunch meeting for 30 people.",
        "status": OrderStatus.APPROVED_PENDING_TIME.value,
        "approval_message": "Happy to help! Does a noon delivery work for you?",
    }),
    (10, {
        "customer_name": "David Thompson",
        "customer_email": "david.thompson@example.com",
        "address": "321 Pine Road, Evanston, IL 60201",
        "food_selection": [
            {"menu_item_id": "taco-bar", "quantity": 2},
            {"menu_item_id": "dessert-platter", "quantity": 2},
        ],
        "notes": "Graduation party. Vegetarian options needed.",
        "status": OrderStatus.PAID.value,
        "approval_message": "Delivery at 4 PM, vegetarian fillings included.",
        "total_price_cents": 35000,
    }),
    (2, {
        "customer_name": "Jessica Martinez",
        "customer_email": "jessica.martinez@example.com",
        "address": "555 Maple Drive, Aurora, IL 60505",
        "food_selection": [{"menu_item_id": "party-platter", "quantity": 1}],
        "notes": "Small gathering, about 10 people.",
        "status": OrderStatus.DENIED.value,
        "admin_reason": "Unfortunately, we are fully booked for that date. Please try a different date.",
    }),
    (21, {
        "customer_name": "Robert Williams",
        "customer_email": "robert.williams@example.com",
        "address": "888 Cedar Lane, Joliet, IL 60435",
        "food_selection": [
            {"menu_item_id": "family-dinner-meal", "quantity": 3},
            {"menu_item_id": "party-platter", "quantity": 1},
            {"menu_item_id": "dessert-platter", "quantity": 1},
        ],
        "notes": "Family reunion. Need delivery by noon.",
        "status": OrderStatus.PENDING.value,
    }),
    (30, {
        "customer_name": "Lisa Anderson",
        "customer_email": "lisa.anderson@example.com",
        "address": "222 Spruce Avenue, Peoria, IL 61602",
        "food_selection": [
            {"menu_item_id": "pasta-bar", "quantity": 2},
            {"menu_item_id": "dessert-platter", "quantity": 3},
        ],
        "notes": "Wedding reception. Very important event!",
        "status": OrderStatus.PENDING.value,
    }),
]


def _lifecycle_fields(status: str, now: datetime, total_price_cents: int | None) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    if status in {OrderStatus.APPROVED_PENDING_TIME.value, OrderStatus.INVOICE_SENT.value, OrderStatus.PAID.value}:
        fields["approved_at"] = now
    if status in {OrderStatus.INVOICE_SENT.value, OrderStatus.PAID.value}:
        reference_id = f"in_mock_{uuid.uuid4().hex[:10]}"
        fields.update(
            time_confirmed_at=now,
            invoice_sent_at=now,
            total_price_cents=total_price_cents,
            payment_reference_id=reference_id,
            payment_url=f"https://invoice.stripe.com/i/acct_mock/{reference_id}",
        )
    if status == OrderStatus.PAID.value:
        fields["paid_at"] = now
    return fields


def add_mock_orders(db: Session, today: date | None = None) -> list[Order]:
    today = today or date.today()
    now = datetime.now(timezone.utc)
    created = []
    for days_ahead, data in MOCK_ORDERS:
        fields = dict(data)
        total_price_cents = fields.pop("total_price_cents", None)
        fields.update(_lifecycle_fields(fields["status"], now, total_price_cents))
        order = Order(date_needed=(today + timedelta(days=days_ahead)).isoformat(), **fields)
        db.add(order)
        created.append(order)
    db.commit()
    return created


def count_orders(db: Session) -> int:
    return db.query(Order).count()


def clear_orders(db: Session) -> int:
    deleted = db.query(Order).delete(synchronize_session=False)
    db.commit()
    return deleted
