from __future__ import annotations

import hashlib
import hmac
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from catering.core.errors import PaymentProviderError

logger = logging.getLogger(__name__)

STRIPE_API_BASE = "https://api.stripe.com/v1"
STRIPE_SIGNATURE_TOLERANCE_SECONDS = 300
RECORDED_HISTORY_SIZE = 50


@dataclass(frozen=True)
class PaymentLink:
    reference_id: str
    url: str


@dataclass(frozen=True)
class InvoiceRequest:
    order_id: str
    customer_name: str
    customer_email: str
    address: str
    date_needed: str
    amount_cents: int


class PaymentLinkProvider(Protocol):
    def create_payment_link(self, request: InvoiceRequest) -> PaymentLink:
        ...


class StripeInvoiceProvider:
    """Creates and finalizes a Stripe invoice; the hosted invoice page is the payment link."""

    INTEGRATION_NAME = "stripe"

    def __init__(
        self,
        secret_key: str,
        *,
        business_name: str = "Gio's Corner",
        currency: str = "usd",
        days_until_due: int = 7,
        timeout: float = 20.0,
        client: httpx.Client | None = None,
    ):
        if not secret_key:
            raise RuntimeError("Missing STRIPE_SECRET_KEY in .env")
        self._secret_key = secret_key
        self._business_name = business_name
        self._currency = currency
        self._days_until_due = days_until_due
        self._timeout = timeout
        self._client = client

    def create_payment_link(self, request: InvoiceRequest) -> PaymentLink:
        client = self._client or httpx.Client(base_url=STRIPE_API_BASE, timeout=self._timeout)
        try:
            customer_id = self._find_or_create_customer(client, request)
            self._request(
                client,
                "POST",
                "/invoiceitems",
                data={
                    "customer": customer_id,
                    "amount": str(request.amount_cents),
                    "currency": self._currency,
                    "description": f"{self._business_name} Catering - {request.date_needed}",
                    "metadata[order_id]": request.order_id,
                    "metadata[date_needed]": request.date_needed,
                },
            )
            invoice = self._request(
                client,
                "POST",
                "/invoices",
                data={
                    "customer": customer_id,
                    "auto_advance": "false",
                    "collection_method": "send_invoice",
                    "days_until_due": str(self._days_until_due),
                    "pending_invoice_items_behavior": "include",
                    "description": f"Catering order for {request.date_needed}",
                    "metadata[order_id]": request.order_id,
                    "metadata[customer_name]": request.customer_name,
                },
            )
            finalized = self._request(client, "POST", f"/invoices/{invoice['id']}/finalize")
        except httpx.HTTPError as exc:
            logger.exception("Stripe request failed order_id=%s", request.order_id)
            raise PaymentProviderError(f"Failed to create Stripe invoice: {exc}") from exc
        finally:
            if self._client is None:
                client.close()

        logger.info("Created Stripe invoice %s for order %s", finalized["id"], request.order_id)
        return PaymentLink(reference_id=finalized["id"], url=finalized.get("hosted_invoice_url") or "")

    def _find_or_create_customer(self, client: httpx.Client, request: InvoiceRequest) -> str:
        existing = self._request(client, "GET", "/customers", params={"email": request.customer_email, "limit": "1"})
        customers = existing.get("data") or []
        if customers:
            logger.info("Using existing Stripe customer %s", customers[0]["id"])
            return customers[0]["id"]

        created = self._request(
            client,
            "POST",
            "/customers",
            data={
                "email": request.customer_email,
                "name": request.customer_name,
                "address[line1]": request.address,
                "metadata[order_id]": request.order_id,
            },
        )
        logger.info("Created Stripe customer %s", created["id"])
        return created["id"]

    def _request(self, client: httpx.Client, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        response = client.request(method, path, auth=(self._secret_key, ""), **kwargs)
        if not 200 <= response.status_code < 300:
            message = response.text
            try:
                message = (response.json().get("error") or {}).get("message") or message
            except ValueError:
                pass
            raise PaymentProviderError(f"Failed to create Stripe invoice: {message}")
        return response.json()


class MockPaymentProvider:
    INTEGRATION_NAME = "mock"

    def __init__(self, base_url: str = "http://localhost:5173", history_size: int = RECORDED_HISTORY_SIZE):
        self._base_url = base_url.rstrip("/")
        self.created: deque[InvoiceRequest] = deque(maxlen=history_size)

    def create_payment_link(self, request: InvoiceRequest) -> PaymentLink:
        self.created.append(request)
        reference_id = f"mock_inv_{request.order_id.replace('-', '')[:12]}"
        return PaymentLink(reference_id=reference_id, url=f"{self._base_url}/pay/{reference_id}")


def build_payment_provider(
    provider: str,
    *,
    stripe_secret_key: str = "",
    business_name: str = "Gio's Corner",
    currency: str = "usd",
    days_until_due: int = 7,
    frontend_url: str = "http://localhost:5173",
) -> PaymentLinkProvider:
    if provider == "stripe":
        return StripeInvoiceProvider(
            stripe_secret_key,
            business_name=business_name,
            currency=currency,
            days_until_due=days_until_due,
        )
    if provider == "mock":
        return MockPaymentProvider(frontend_url)
    raise RuntimeError(f"Unknown PAYMENT_PROVIDER: {provider}")


def verify_stripe_signature(
    payload: bytes,
    signature_header: str,
    secret: str,
    *,
    tolerance: int = STRIPE_SIGNATURE_TOLERANCE_SECONDS,
    now: float | None = None,
) -> bool:
    if not secret or not signature_header:
        return False

    timestamp = None
    signatures: list[str] = []
    for part in signature_header.split(","):
        key, _, value = part.strip().partition("=")
        if key == "t":
            timestamp = value
        elif key == "v1":
            signatures.append(value)
    if not timestamp or not signatures:
        return False

    try:
        signed_at = int(timestamp)
    except ValueError:
        return False
    current = time.time() if now is None else now
    if abs(current - signed_at) > tolerance:
        return False

    signed_payload = f"{timestamp}.".encode("utf-8") + payload
    expected = hmac.new(secret.encode("utf-8"), signed_payload, hashlib.sha256).hexdigest()
    return any(hmac.compare_digest(expected, candidate) for candidate in signatures)
