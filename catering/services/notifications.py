from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from catering.core.config import Settings
from catering.core.errors import NotificationError
from catering.integrations.email import EmailMessage, EmailSender
from catering.models.order import Order
from catering.services import email_templates
from catering.services.pricing import MenuLookup, format_price, resolve_menu_item

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[str, BaseException], None]

_default_executor: ThreadPoolExecutor | None = None


def get_default_executor() -> ThreadPoolExecutor:
    global _default_executor
    if _default_executor is None:
        _default_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="notifications")
    return _default_executor


def shutdown_default_executor() -> None:
    global _default_executor
    if _default_executor is not None:
        _default_executor.shutdown(wait=True)
        _default_executor = None


def log_dispatch_error(name: str, exc: BaseException) -> None:
    logger.error("Notification batch %s failed: %s", name, exc, exc_info=(type(exc), exc, exc.__traceback__))


class NotificationDispatcher:
    """Runs notification batches as detached futures.

    A batch runs every task even when an earlier one fails; the future then
    rejects with the first error and on_error receives it. Callers never wait
    on the future.
    """

    def __init__(self, executor: Optional[Executor] = None, on_error: Optional[ErrorCallback] = None):
        self._executor = executor
        self._on_error = on_error or log_dispatch_error

    def dispatch(self, name: str, *tasks: Callable[[], Any]) -> Future:
        executor = self._executor or get_default_executor()
        future = executor.submit(self._run_batch, name, tasks)
        future.add_done_callback(lambda done: self._report(name, done))
        return future

    def _run_batch(self, name: str, tasks: tuple[Callable[[], Any], ...]) -> list[Any]:
        results: list[Any] = []
        first_error: BaseException | None = None
        for task in tasks:
            try:
                results.append(task())
            except Exception as exc:
                if first_error is None:
                    first_error = exc
                results.append(None)
        if first_error is not None:
            raise first_error
        logger.debug("Notification batch %s completed (%s tasks)", name, len(tasks))
        return results

    def _report(self, name: str, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self._on_error(name, exc)


def _isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def format_food_lines(selection: list[dict[str, Any]], lookup: MenuLookup) -> list[str]:
    lines = []
    for line in selection or []:
        menu_item_id = str(line.get("menu_item_id", ""))
        menu_item = resolve_menu_item(lookup, menu_item_id)
        name = menu_item.name if menu_item is not None else menu_item_id
        price = f" {format_price(menu_item.price_cents)}" if menu_item is not None else ""
        notes = f" ({line['notes']})" if line.get("notes") else ""
        lines.append(f"• {name} x{line.get('quantity', 0)}{price}{notes}")
    return lines


def build_order_payload(order: Order, lookup: MenuLookup) -> dict[str, Any]:
    """Plain snapshot of an order for background sends, safe outside the session."""
    return {
        "id": order.id,
        "status": order.status,
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "address": order.address,
        "date_needed": order.date_needed,
        "notes": order.notes,
        "food_lines": format_food_lines(order.food_selection, lookup),
        "approval_message": order.approval_message,
        "admin_reason": order.admin_reason,
        "total_price_cents": order.total_price_cents,
        "original_price_cents": order.original_price_cents,
        "discount_percent": order.discount_percent,
        "payment_url": order.payment_url,
        "created_at": _isoformat(order.created_at),
    }


class OrderNotifier:
    def __init__(self, sender: EmailSender, settings: Settings):
        self.sender = sender
        self.settings = settings

    def _send(self, template: str, to: str, subject: str, html: str, *, order_id: str | None, essential: bool) -> None:
        message = EmailMessage(
            to=to,
            subject=subject,
            html=html,
            sender=self.settings.sender,
            template=template,
            tags={"template": template},
        )
        try:
            self.sender.send(message)
        except Exception as exc:
            logger.exception("Failed to send %s email to=%s", template, to, extra={"order_id": order_id})
            if essential:
                raise NotificationError(template, to, exc) from exc

    def _send_order_email(self, template: str, to: str, payload: dict[str, Any], *, essential: bool = False) -> None:
        subject = email_templates.subject_for(
            template,
            customer_name=payload["customer_name"],
            business_name=self.settings.business_name,
        )
        html = email_templates.RENDERERS[template](payload, business_name=self.settings.business_name)
        self._send(template, to, subject, html, order_id=payload["id"], essential=essential)

    def new_order_to_owner(self, payload: dict[str, Any]) -> None:
        self._send_order_email("new_order_owner", self.settings.owner_email, payload)

    def pending_to_customer(self, payload: dict[str, Any]) -> None:
        self._send_order_email("pending_customer", payload["customer_email"], payload)

    def approved_to_customer(self, payload: dict[str, Any]) -> None:
        self._send_order_email("approved_customer", payload["customer_email"], payload)

    def approved_to_owner(self, payload: dict[str, Any]) -> None:
        self._send_order_email("approved_owner", self.settings.owner_email, payload, essential=True)

    def invoice_to_customer(self, payload: dict[str, Any]) -> None:
        self._send_order_email("invoice_customer", payload["customer_email"], payload, essential=True)

    def denied_to_customer(self, payload: dict[str, Any]) -> None:
        self._send_order_email("denied_customer", payload["customer_email"], payload)

    def denied_to_owner(self, payload: dict[str, Any]) -> None:
        self._send_order_email("denied_owner", self.settings.owner_email, payload)

    def catering_interest(self, email: str) -> None:
        submitted_at = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
        self._send(
            "catering_interest",
            self.settings.catering_email,
            email_templates.subject_for("catering_interest", email=email),
            email_templates.render_catering_interest(email, submitted_at),
            order_id=None,
            essential=False,
        )
