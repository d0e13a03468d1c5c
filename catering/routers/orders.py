from __future__ import annotations

import logging
from functools import partial

from fastapi import APIRouter, Depends
from fastapi.exceptions import RequestValidationError
from sqlalchemy.orm import Session

from catering.core.config import Settings
from catering.core.database import get_db
from catering.deps import get_dispatcher, get_lifecycle_engine, get_notifier, get_settings
from catering.schemas.orders import CateringInterestPayload, OrderCreate, ValidatePromoPayload
from catering.services.delivery_dates import DeliveryDateTooSoonError, local_now, validate_date_needed
from catering.services.notifications import NotificationDispatcher, OrderNotifier
from catering.services.order_lifecycle import OrderLifecycleEngine
from catering.services.promo_codes import validate_promo_code

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["orders"])


@router.post("/orders", status_code=201)
def create_order(
    payload: OrderCreate,
    settings: Settings = Depends(get_settings),
    engine: OrderLifecycleEngine = Depends(get_lifecycle_engine),
):
    try:
        validate_date_needed(payload.date_needed, local_now(settings.business_timezone), settings.order_cutoff_hour)
    except DeliveryDateTooSoonError as exc:
        raise RequestValidationError(
            [{"loc": ("body", "date_needed"), "msg": str(exc), "type": "value_error", "input": payload.date_needed}]
        ) from exc

    order = engine.create_order(payload.model_dump())
    summary = {
        "id": order.id,
        "status": order.status,
        "created_at": order.created_at.isoformat() if order.created_at else None,
    }
    if order.discount_percent:
        summary["discount_percent"] = order.discount_percent
    return {"message": "Order created successfully", "order": summary}


@router.post("/orders/validate-promo")
def validate_promo(payload: ValidatePromoPayload, db: Session = Depends(get_db)):
    return validate_promo_code(db, payload.code).to_dict()


@router.post("/catering-interest")
def catering_interest(
    payload: CateringInterestPayload,
    notifier: OrderNotifier = Depends(get_notifier),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    email = str(payload.email).lower()
    dispatcher.dispatch("catering.interest", partial(notifier.catering_interest, email))
    logger.info("Catering interest registered")
    return {"message": "Thank you for your interest! We'll notify you when our catering menu launches."}
