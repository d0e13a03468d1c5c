from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from catering.core.config import Settings
from catering.core.errors import InvalidOrderStatusError, PaymentProviderError, PromoCodeRejectedError
from catering.integrations.payments import InvoiceRequest, PaymentLinkProvider
from catering.models.order import Order, OrderStatus
from catering.services.menu import load_menu_lookup
from catering.services.notifications import NotificationDispatcher, OrderNotifier, build_order_payload
from catering.services.order_repository import OrderRepository
from catering.services.pricing import MenuLookup, apply_discount, calculate_total_price
from catering.services.promo_codes import increment_promo_code_usage, validate_promo_code

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _with_session(session_factory: Callable[[], Session], handler: Callable[[Session], Any]) -> Any:
    db = session_factory()
    try:
        return handler(db)
    finally:
        db.close()


def _clean_selection(selection: list[Any]) -> list[dict[str, Any]]:
    lines = []
    for line in selection:
        data = line if isinstance(line, dict) else line.model_dump()
        clean = {"menu_item_id": data["menu_item_id"], "quantity": int(data["quantity"])}
        if data.get("notes"):
            clean["notes"] = data["notes"]
        lines.append(clean)
    return lines


class OrderLifecycleEngine:
    """Status transitions for catering orders.

    Every transition reads the order, checks the current status, runs any
    external call, then writes with a status guard so a concurrent transition
    surfaces as InvalidOrderStatusError instead of being overwritten.
    Notifications are dispatched after the write and never affect the result.
    """

    def __init__(
        self,
        db: Session,
        settings: Settings,
        *,
        payment_provider: PaymentLinkProvider,
        notifier: OrderNotifier,
        dispatcher: NotificationDispatcher,
        session_factory: Callable[[], Session],
        clock: Optional[Clock] = None,
        menu_lookup: Optional[MenuLookup] = None,
    ):
        self.db = db
        self.settings = settings
        self.repository = OrderRepository(db)
        self.payment_provider = payment_provider
        self.notifier = notifier
        self.dispatcher = dispatcher
        self.session_factory = session_factory
        self.clock = clock or _utcnow
        self._menu_lookup = menu_lookup

    def _lookup(self) -> MenuLookup:
        if self._menu_lookup is not None:
            return self._menu_lookup
        return load_menu_lookup(self.db)

    def _payload(self, order: Order) -> dict[str, Any]:
        return build_order_payload(order, self._lookup())

    def _transition(
        self,
        order_id: str,
        *,
        expected: OrderStatus,
        fields: dict[str, Any],
        conflict_message: str,
    ) -> Order:
        try:
            return self.repository.update(order_id, fields, expected_status=expected.value)
        except InvalidOrderStatusError as exc:
            logger.warning(
                "Order changed status concurrently, expected=%s current=%s",
                expected.value,
                exc.current_status,
                extra={"order_id": order_id},
            )
            raise InvalidOrderStatusError(
                conflict_message.format(status=exc.current_status),
                current_status=exc.current_status,
            ) from exc

    def create_order(self, data: dict[str, Any]) -> Order:
        promo_code_id = None
        discount_percent = None
        code = (data.get("promo_code") or "").strip()
        if code:
            result = validate_promo_code(self.db, code, now=self.clock())
            if not result.valid:
                logger.info("Order rejected, promo code %s: %s", code.upper(), result.error)
                raise PromoCodeRejectedError(result.error)
            promo_code_id = result.promo_code.id
            discount_percent = result.promo_code.discount_percent

        order = Order(
            customer_name=data["customer_name"],
            customer_email=data["customer_email"],
            address=data["address"],
            food_selection=_clean_selection(data["food_selection"]),
            date_needed=str(data["date_needed"]),
            notes=data.get("notes") or None,
            status=OrderStatus.PENDING.value,
            promo_code_id=promo_code_id,
            discount_percent=discount_percent,
        )
        order = self.repository.insert(order)
        logger.info("Order created", extra={"order_id": order.id})

        if promo_code_id:
            self.dispatcher.dispatch(
                "promo_code.usage",
                partial(_with_session, self.session_factory, partial(increment_promo_code_usage, promo_code_id=promo_code_id)),
            )

        payload = self._payload(order)
        self.dispatcher.dispatch(
            "order.created",
            partial(self.notifier.new_order_to_owner, payload),
            partial(self.notifier.pending_to_customer, payload),
        )
        return order

    def get_order(self, order_id: str) -> Order:
        return self.repository.get_by_id(order_id)

    def list_orders(self, status: Optional[str] = None) -> list[Order]:
        return self.repository.list(status)

    def approve(self, order_id: str, approval_message: str) -> Order:
        order = self.repository.get_by_id(order_id)
        if order.status != OrderStatus.PENDING.value:
            raise InvalidOrderStatusError(f"Order is already {order.status}", current_status=order.status)

        order = self._transition(
            order_id,
            expected=OrderStatus.PENDING,
            fields={
                "status": OrderStatus.APPROVED_PENDING_TIME.value,
                "approval_message": approval_message,
                "approved_at": self.clock(),
            },
            conflict_message="Order is already {status}",
        )
        logger.info("Order approved", extra={"order_id": order_id})

        payload = self._payload(order)
        self.dispatcher.dispatch(
            "order.approved",
            partial(self.notifier.approved_to_customer, payload),
            partial(self.notifier.approved_to_owner, payload),
        )
        return order

    def confirm_time_and_send_invoice(self, order_id: str, total_price_cents: Optional[int] = None) -> Order:
        """Price the order, create the payment link, then move it to invoice_sent.

        An explicit total_price_cents (zero included) replaces the computed
        subtotal. The order's locked-in discount applies to either source. A
        payment provider failure leaves the order untouched.
        """
        order = self.repository.get_by_id(order_id)
        if order.status != OrderStatus.APPROVED_PENDING_TIME.value:
            raise InvalidOrderStatusError(
                f"Order status must be approved_pending_time, currently {order.status}",
                current_status=order.status,
            )

        if total_price_cents is not None:
            original_cents = int(total_price_cents)
        else:
            original_cents = calculate_total_price(order.food_selection, self._lookup())
        final_cents = apply_discount(original_cents, order.discount_percent)

        request = InvoiceRequest(
            order_id=order.id,
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            address=order.address,
            date_needed=order.date_needed,
            amount_cents=final_cents,
        )
        try:
            link = self.payment_provider.create_payment_link(request)
        except PaymentProviderError:
            raise
        except Exception as exc:
            logger.exception("Payment provider failed", extra={"order_id": order_id})
            raise PaymentProviderError(f"Failed to create payment link: {exc}") from exc

        now = self.clock()
        order = self._transition(
            order_id,
            expected=OrderStatus.APPROVED_PENDING_TIME,
            fields={
                "status": OrderStatus.INVOICE_SENT.value,
                "time_confirmed_at": now,
                "invoice_sent_at": now,
                "total_price_cents": final_cents,
                "original_price_cents": original_cents if order.discount_percent else None,
                "payment_reference_id": link.reference_id,
                "payment_url": link.url,
            },
            conflict_message="Order status must be approved_pending_time, currently {status}",
        )
        logger.info(
            "Invoice %s sent for %s cents",
            link.reference_id,
            final_cents,
            extra={"order_id": order_id},
        )

        payload = self._payload(order)
        self.dispatcher.dispatch("order.invoice_sent", partial(self.notifier.invoice_to_customer, payload))
        return order

    def mark_paid(self, order_id: str) -> Order:
        order = self.repository.get_by_id(order_id)
        if order.status != OrderStatus.INVOICE_SENT.value:
            raise InvalidOrderStatusError(
                f"Order status must be invoice_sent, currently {order.status}",
                current_status=order.status,
            )

        order = self._transition(
            order_id,
            expected=OrderStatus.INVOICE_SENT,
            fields={"status": OrderStatus.PAID.value, "paid_at": self.clock()},
            conflict_message="Order status must be invoice_sent, currently {status}",
        )
        logger.info("Order marked paid", extra={"order_id": order_id})
        return order

    def deny(self, order_id: str, admin_reason: str) -> Order:
        order = self.repository.get_by_id(order_id)
        if order.status != OrderStatus.PENDING.value:
            raise InvalidOrderStatusError(f"Order is already {order.status}", current_status=order.status)

        order = self._transition(
            order_id,
            expected=OrderStatus.PENDING,
            fields={"status": OrderStatus.DENIED.value, "admin_reason": admin_reason},
            conflict_message="Order is already {status}",
        )
        logger.info("Order denied", extra={"order_id": order_id})

        payload = self._payload(order)
        self.dispatcher.dispatch(
            "order.denied",
            partial(self.notifier.denied_to_customer, payload),
            partial(self.notifier.denied_to_owner, payload),
        )
        return order
