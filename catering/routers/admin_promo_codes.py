from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from catering.core.database import get_db
from catering.deps import require_admin
from catering.schemas.admin import PromoCodeCreate, PromoCodeUpdate
from catering.schemas.orders import ValidatePromoPayload
from catering.services import promo_codes as promo_service

router = APIRouter(prefix="/api/admin/promo-codes", tags=["admin-promo-codes"])


@router.get("")
def list_promo_codes(db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    return {"promoCodes": [promo_service.promo_code_to_dict(promo) for promo in promo_service.list_promo_codes(db)]}


# declared before /{promo_code_id} routes
@router.post("/validate")
def validate_promo_code(payload: ValidatePromoPayload, db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    return promo_service.validate_promo_code(db, payload.code).to_dict()


@router.get("/{promo_code_id}")
def get_promo_code(promo_code_id: str, db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    return {"promoCode": promo_service.promo_code_to_dict(promo_service.get_promo_code(db, promo_code_id))}


@router.post("", status_code=201)
def create_promo_code(payload: PromoCodeCreate, db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    promo = promo_service.create_promo_code(db, payload.model_dump())
    return {"message": "Promo code created successfully", "promoCode": promo_service.promo_code_to_dict(promo)}


@router.put("/{promo_code_id}")
def update_promo_code(
    promo_code_id: str,
    payload: PromoCodeUpdate,
    db: Session = Depends(get_db),
    _admin: str = Depends(require_admin),
):
    promo = promo_service.update_promo_code(db, promo_code_id, payload.model_dump(exclude_unset=True))
    return {"message": "Promo code updated successfully", "promoCode": promo_service.promo_code_to_dict(promo)}


@router.delete("/{promo_code_id}")
def delete_promo_code(promo_code_id: str, db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    promo_service.delete_promo_code(db, promo_code_id)
    return {"message": "Promo code deleted successfully"}
