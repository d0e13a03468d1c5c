from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from catering.core.errors import (
    DuplicatePromoCodeError,
    InvalidPromoWindowError,
    PersistenceError,
    PromoCodeNotFoundError,
)
from catering.models.promo_code import PromoCode

logger = logging.getLogger(__name__)

NOT_FOUND = "Promo code not found"
NOT_ACTIVE = "This promo code is no longer active"
NOT_YET_VALID = "This promo code is not yet valid"
EXPIRED = "This promo code has expired"
USAGE_LIMIT = "This promo code has reached its usage limit"

_EDITABLE_FIELDS = ("code", "description", "discount_percent", "max_uses", "valid_from", "valid_until", "is_active")
_NON_NULLABLE_FIELDS = {"code", "discount_percent", "valid_from", "is_active"}


@dataclass
class PromoValidationResult:
    valid: bool
    promo_code: Optional[PromoCode] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"valid": self.valid}
        if self.promo_code is not None:
            payload["promo_code"] = promo_code_to_dict(self.promo_code)
        if self.error:
            payload["error"] = self.error
        return payload


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; they were written as UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _isoformat(value: datetime | None) -> str | None:
    value = _as_utc(value)
    return value.isoformat() if value else None


def promo_code_to_dict(promo: PromoCode) -> dict[str, Any]:
    return {
        "id": promo.id,
        "code": promo.code,
        "description": promo.description,
        "discount_percent": promo.discount_percent,
        "max_uses": promo.max_uses,
        "current_uses": promo.current_uses,
        "valid_from": _isoformat(promo.valid_from),
        "valid_until": _isoformat(promo.valid_until),
        "is_active": promo.is_active,
        "created_at": _isoformat(promo.created_at),
        "updated_at": _isoformat(promo.updated_at),
    }


def get_promo_code_by_code(db: Session, code: str) -> PromoCode | None:
    normalized = normalize_code(code)
    if not normalized:
        return None
    return db.query(PromoCode).filter(PromoCode.code == normalized).first()


def get_promo_code(db: Session, promo_code_id: str) -> PromoCode:
    promo = db.get(PromoCode, promo_code_id)
    if promo is None:
        raise PromoCodeNotFoundError(promo_code_id)
    return promo


def list_promo_codes(db: Session) -> list[PromoCode]:
    return db.query(PromoCode).order_by(PromoCode.created_at.desc()).all()


def check_promo_code(promo: PromoCode | None, now: datetime) -> str | None:
    """Return the first failing rule's message, or None when the code is usable."""
    if promo is None:
        return NOT_FOUND
    if not promo.is_active:
        return NOT_ACTIVE
    valid_from = _as_utc(promo.valid_from)
    if valid_from is not None and now < valid_from:
        return NOT_YET_VALID
    valid_until = _as_utc(promo.valid_until)
    if valid_until is not None and now > valid_until:
        return EXPIRED
    if promo.max_uses is not None and (promo.current_uses or 0) >= promo.max_uses:
        return USAGE_LIMIT
    return None


def validate_promo_code(db: Session, code: str, now: datetime | None = None) -> PromoValidationResult:
    now = _as_utc(now) or datetime.now(timezone.utc)
    promo = get_promo_code_by_code(db, code)
    error = check_promo_code(promo, now)
    if error:
        return PromoValidationResult(valid=False, error=error)
    return PromoValidationResult(valid=True, promo_code=promo)


def create_promo_code(db: Session, data: dict[str, Any]) -> PromoCode:
    promo = PromoCode(
        code=normalize_code(data["code"]),
        description=data.get("description"),
        discount_percent=int(data["discount_percent"]),
        max_uses=data.get("max_uses"),
        current_uses=0,
        valid_from=data.get("valid_from") or datetime.now(timezone.utc),
        valid_until=data.get("valid_until"),
        is_active=True if data.get("is_active") is None else bool(data["is_active"]),
    )
    db.add(promo)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicatePromoCodeError() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error creating promo code")
        raise PersistenceError(f"Failed to create promo code: {exc}") from exc
    db.refresh(promo)
    return promo


def update_promo_code(db: Session, promo_code_id: str, updates: dict[str, Any]) -> PromoCode:
    promo = get_promo_code(db, promo_code_id)
    valid_from = _as_utc(updates.get("valid_from") or promo.valid_from)
    valid_until = _as_utc(updates["valid_until"] if "valid_until" in updates else promo.valid_until)
    if valid_from and valid_until and valid_until <= valid_from:
        raise InvalidPromoWindowError()

    for key, value in updates.items():
        if key not in _EDITABLE_FIELDS:
            continue
        if value is None and key in _NON_NULLABLE_FIELDS:
            continue
        if key == "code":
            value = normalize_code(value)
        setattr(promo, key, value)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicatePromoCodeError() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error updating promo code id=%s", promo_code_id)
        raise PersistenceError(f"Failed to update promo code: {exc}") from exc
    db.refresh(promo)
    return promo


def delete_promo_code(db: Session, promo_code_id: str) -> None:
    promo = get_promo_code(db, promo_code_id)
    try:
        db.delete(promo)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error deleting promo code id=%s", promo_code_id)
        raise PersistenceError(f"Failed to delete promo code: {exc}") from exc


def increment_promo_code_usage(db: Session, promo_code_id: str) -> None:
    """Bump current_uses by one.

    Tries a single atomic UPDATE first; when that statement fails it falls back
    to read-then-write, which can lose an increment under concurrent orders.
    """
    try:
        result = db.execute(
            update(PromoCode)
            .where(PromoCode.id == promo_code_id)
            .values(current_uses=PromoCode.current_uses + 1)
        )
        db.commit()
        if not result.rowcount:
            logger.warning("Promo code usage not incremented, id=%s not found", promo_code_id)
        return
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Atomic promo usage increment failed id=%s, falling back", promo_code_id, exc_info=True)

    promo = db.get(PromoCode, promo_code_id)
    if promo is None:
        return
    promo.current_uses = (promo.current_uses or 0) + 1
    db.commit()
