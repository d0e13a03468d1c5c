import enum
import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from catering.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED_PENDING_TIME = "approved_pending_time"
    # legacy value: still accepted as a list filter, never produced
    TIME_CONFIRMED = "time_confirmed"
    INVOICE_SENT = "invoice_sent"
    PAID = "paid"
    DENIED = "denied"


ORDER_STATUSES = tuple(status.value for status in OrderStatus)


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (Index("ix_orders_status_created_at", "status", "created_at"),)

    id = Column(String(36), primary_key=True, default=_new_id)

    customer_name = Column(String(100), nullable=False)
    customer_email = Column(String(320), nullable=False, index=True)
    address = Column(Text, nullable=False)
    # [{"menu_item_id": "...", "quantity": 2, "notes": "..."}]
    food_selection = Column(JSONB().with_variant(sa.JSON(), "sqlite"), nullable=False, default=list)
    date_needed = Column(String(10), nullable=False)
    notes = Column(Text, nullable=True)

    status = Column(String(32), nullable=False, default=OrderStatus.PENDING.value)
    admin_reason = Column(Text, nullable=True)
    approval_message = Column(Text, nullable=True)

    total_price_cents = Column(Integer, nullable=True)
    original_price_cents = Column(Integer, nullable=True)
    promo_code_id = Column(String(36), ForeignKey("promo_codes.id", ondelete="SET NULL"), nullable=True)
    discount_percent = Column(Integer, nullable=True)

    payment_reference_id = Column(String(255), nullable=True)
    payment_url = Column(Text, nullable=True)

    approved_at = Column(DateTime(timezone=True), nullable=True)
    time_confirmed_at = Column(DateTime(timezone=True), nullable=True)
    invoice_sent_at = Column(DateTime(timezone=True), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
