import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, Text

from catering.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PromoCode(Base):
    __tablename__ = "promo_codes"
    __table_args__ = (
        CheckConstraint("discount_percent BETWEEN 1 AND 100", name="ck_promo_codes_discount_percent"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # always stored uppercase
    code = Column(String(64), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    discount_percent = Column(Integer, nullable=False)
    max_uses = Column(Integer, nullable=True)
    current_uses = Column(Integer, nullable=False, default=0)
    valid_from = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    valid_until = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
