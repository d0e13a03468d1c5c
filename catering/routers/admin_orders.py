from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from catering.deps import get_lifecycle_engine, require_admin
from catering.models.order import ORDER_STATUSES, Order
from catering.schemas.orders import ApprovePayload, ConfirmInvoicePayload, DenyPayload
from catering.services.order_lifecycle import OrderLifecycleEngine

router = APIRouter(prefix="/api/admin/orders", tags=["admin-orders"])


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def order_to_dict(o: Order) -> Dict[str, Any]:
    return {
        "id": o.id,
        "customer_name": o.customer_name,
        "customer_email": o.customer_email,
        "address": o.address,
        "food_selection": o.food_selection or [],
        "date_needed": o.date_needed,
        "notes": o.notes,
        "status": o.status,
        "admin_reason": o.admin_reason,
        "approval_message": o.approval_message,
        "total_price_cents": o.total_price_cents,
        "original_price_cents": o.original_price_cents,
        "promo_code_id": o.promo_code_id,
        "discount_percent": o.discount_percent,
        "payment_reference_id": o.payment_reference_id,
        "payment_url": o.payment_url,
        "approved_at": _isoformat(o.approved_at),
        "time_confirmed_at": _isoformat(o.time_confirmed_at),
        "invoice_sent_at": _isoformat(o.invoice_sent_at),
        "paid_at": _isoformat(o.paid_at),
        "created_at": _isoformat(o.created_at),
        "updated_at": _isoformat(o.updated_at),
    }


@router.get("")
def list_orders(
    status: Optional[str] = Query(None),
    engine: OrderLifecycleEngine = Depends(get_lifecycle_engine),
    _admin: str = Depends(require_admin),
):
    if status and status not in ORDER_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status parameter")
    return {"orders": [order_to_dict(order) for order in engine.list_orders(status or None)]}


@router.get("/{order_id}")
def get_order(
    order_id: str,
    engine: OrderLifecycleEngine = Depends(get_lifecycle_engine),
    _admin: str = Depends(require_admin),
):
    return {"order": order_to_dict(engine.get_order(order_id))}


@router.post("/{order_id}/approve")
def approve_order(
    order_id: str,
    payload: ApprovePayload,
    engine: OrderLifecycleEngine = Depends(get_lifecycle_engine),
    _admin: str = Depends(require_admin),
):
    order = engine.approve(order_id, payload.approval_message)
    return {"message": "Order approved successfully", "order": order_to_dict(order)}


@router.post("/{order_id}/confirm-time-and-send-invoice")
def confirm_time_and_send_invoice(
    order_id: str,
    payload: Optional[ConfirmInvoicePayload] = Body(None),
    engine: OrderLifecycleEngine = Depends(get_lifecycle_engine),
    _admin: str = Depends(require_admin),
):
    total_price_cents = payload.total_price_cents if payload else None
    order = engine.confirm_time_and_send_invoice(order_id, total_price_cents)
    return {"message": "Time confirmed and invoice sent successfully", "order": order_to_dict(order)}


@router.post("/{order_id}/mark-paid")
def mark_paid(
    order_id: str,
    engine: OrderLifecycleEngine = Depends(get_lifecycle_engine),
    _admin: str = Depends(require_admin),
):
    order = engine.mark_paid(order_id)
    return {"message": "Order marked as paid successfully", "order": order_to_dict(order)}


@router.post("/{order_id}/deny")
def deny_order(
    order_id: str,
    payload: DenyPayload,
    engine: OrderLifecycleEngine = Depends(get_lifecycle_engine),
    _admin: str = Depends(require_admin),
):
    order = engine.deny(order_id, payload.admin_reason)
    return {"message": "Order denied successfully", "order": order_to_dict(order)}
