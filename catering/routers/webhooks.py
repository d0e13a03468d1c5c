from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from catering.core.config import Settings
from catering.core.errors import InvalidOrderStatusError, OrderNotFoundError
from catering.deps import get_lifecycle_engine, get_settings
from catering.integrations.payments import verify_stripe_signature
from catering.models.order import OrderStatus
from catering.services.order_lifecycle import OrderLifecycleEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])

PAID_EVENTS = {"invoice.paid", "invoice.payment_succeeded"}


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    engine: OrderLifecycleEngine = Depends(get_lifecycle_engine),
):
    if not settings.stripe_webhook_secret:
        logger.error("Stripe webhook received but STRIPE_WEBHOOK_SECRET is not set")
        raise HTTPException(status_code=503, detail="Webhook not configured")

    body = await request.body()
    signature = request.headers.get("Stripe-Signature", "")
    if not verify_stripe_signature(body, signature, settings.stripe_webhook_secret):
        logger.warning("Stripe webhook signature rejected")
        raise HTTPException(status_code=400, detail="Invalid signature")

    try:
        event = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload")
    if not isinstance(event, dict):
        raise HTTPException(status_code=400, detail="Invalid payload")

    event_type = event.get("type")
    if event_type not in PAID_EVENTS:
        return {"received": True}

    data = event.get("data") or {}
    invoice = (data.get("object") or {}) if isinstance(data, dict) else None
    if not isinstance(invoice, dict):
        raise HTTPException(status_code=400, detail="Invalid payload")
    metadata = invoice.get("metadata")
    order_id = metadata.get("order_id") if isinstance(metadata, dict) else None
    if not order_id:
        logger.warning("Stripe %s event %s without order_id metadata", event_type, event.get("id"))
        return {"received": True}

    try:
        order = engine.get_order(order_id)
    except OrderNotFoundError:
        logger.warning("Stripe %s event for unknown order", event_type, extra={"order_id": order_id})
        return {"received": True}

    if order.status == OrderStatus.PAID.value:
        return {"received": True, "status": order.status}

    try:
        order = engine.mark_paid(order_id)
    except InvalidOrderStatusError as exc:
        # payment for an order outside invoice_sent needs a human look, not a retry
        logger.warning("Stripe payment ignored: %s", exc.message, extra={"order_id": order_id})
        return {"received": True, "status": exc.current_status}

    return {"received": True, "status": order.status}
