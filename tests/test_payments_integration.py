import dataclasses
import hashlib
import hmac

import httpx
import pytest

from catering.core.errors import PaymentProviderError
from catering.integrations.payments import (
    STRIPE_API_BASE,
    InvoiceRequest,
    MockPaymentProvider,
    StripeInvoiceProvider,
    build_payment_provider,
    verify_stripe_signature,
)

REQUEST = InvoiceRequest(
    order_id="8f14e45f-ceea-467a-9af3-5c4a1c1b2d3e",
    customer_name="Sarah Johnson",
    customer_email="sarah.johnson@example.com",
    address="123 Main Street",
    date_needed="2099-06-01",
    amount_cents=4000,
)


def _stripe_client(handler):
    return httpx.Client(base_url=STRIPE_API_BASE, transport=httpx.MockTransport(handler))


def _form(request):
    return dict(httpx.QueryParams(request.content.decode()))


def test_stripe_invoice_flow_creates_customer_and_finalizes():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path))
        path = request.url.path
        if path == "/v1/customers" and request.method == "GET":
            assert request.url.params["email"] == "sarah.johnson@example.com"
            return httpx.Response(200, json={"data": []})
        if path == "/v1/customers":
            assert _form(request)["email"] == "sarah.johnson@example.com"
            return httpx.Response(200, json={"id": "cus_123"})
        if path == "/v1/invoiceitems":
            form = _form(request)
            assert form["amount"] == "4000"
            assert form["customer"] == "cus_123"
            assert form["metadata[order_id]"] == REQUEST.order_id
            return httpx.Response(200, json={"id": "ii_1"})
        if path == "/v1/invoices":
            assert _form(request)["pending_invoice_items_behavior"] == "include"
            return httpx.Response(200, json={"id": "in_abc"})
        if path == "/v1/invoices/in_abc/finalize":
            return httpx.Response(200, json={"id": "in_abc", "hosted_invoice_url": "https://invoice.stripe.com/i/in_abc"})
        return httpx.Response(404, json={"error": {"message": "unexpected"}})

    provider = StripeInvoiceProvider("sk_test_123", client=_stripe_client(handler))

    link = provider.create_payment_link(REQUEST)

    assert link.reference_id == "in_abc"
    assert link.url == "https://invoice.stripe.com/i/in_abc"
    assert seen == [
        ("GET", "/v1/customers"),
        ("POST", "/v1/customers"),
        ("POST", "/v1/invoiceitems"),
        ("POST", "/v1/invoices"),
        ("POST", "/v1/invoices/in_abc/finalize"),
    ]


def test_stripe_reuses_existing_customer():
    paths = []

    def handler(request):
        paths.append((request.method, request.url.path))
        if request.url.path == "/v1/customers":
            return httpx.Response(200, json={"data": [{"id": "cus_existing"}]})
        if request.url.path == "/v1/invoiceitems":
            assert _form(request)["customer"] == "cus_existing"
        if request.url.path.endswith("/finalize"):
            return httpx.Response(200, json={"id": "in_1", "hosted_invoice_url": "https://pay/in_1"})
        return httpx.Response(200, json={"id": "in_1"})

    provider = StripeInvoiceProvider("sk_test_123", client=_stripe_client(handler))
    provider.create_payment_link(REQUEST)

    assert ("POST", "/v1/customers") not in paths


def test_stripe_error_message_is_surfaced():
    def handler(request):
        if request.method == "GET":
            return httpx.Response(200, json={"data": [{"id": "cus_1"}]})
        return httpx.Response(402, json={"error": {"message": "Your card was declined."}})

    provider = StripeInvoiceProvider("sk_test_123", client=_stripe_client(handler))

    with pytest.raises(PaymentProviderError) as exc_info:
        provider.create_payment_link(REQUEST)

    assert exc_info.value.message == "Failed to create Stripe invoice: Your card was declined."


def test_stripe_transport_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    provider = StripeInvoiceProvider("sk_test_123", client=_stripe_client(handler))

    with pytest.raises(PaymentProviderError) as exc_info:
        provider.create_payment_link(REQUEST)

    assert "connection refused" in exc_info.value.message


def test_stripe_requires_secret_key():
    with pytest.raises(RuntimeError):
        StripeInvoiceProvider("")


def test_mock_provider_builds_deterministic_link():
    provider = MockPaymentProvider("http://localhost:5173/")

    link = provider.create_payment_link(REQUEST)

    assert link.reference_id == "mock_inv_8f14e45fceea"
    assert link.url == "http://localhost:5173/pay/mock_inv_8f14e45fceea"
    assert list(provider.created) == [REQUEST]


def test_mock_provider_keeps_only_recent_requests():
    provider = MockPaymentProvider(history_size=1)
    later = dataclasses.replace(REQUEST, order_id="later-order")

    provider.create_payment_link(REQUEST)
    provider.create_payment_link(later)

    assert list(provider.created) == [later]


def test_build_payment_provider_rejects_unknown_name():
    assert isinstance(build_payment_provider("mock"), MockPaymentProvider)
    with pytest.raises(RuntimeError):
        build_payment_provider("paypal")


def _signature_header(payload: bytes, secret: str, timestamp: int) -> str:
    digest = hmac.new(secret.encode(), f"{timestamp}.".encode() + payload, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def test_valid_signature_is_accepted():
    payload = b'{"type": "invoice.paid"}'
    header = _signature_header(payload, "whsec_test", 1_700_000_000)

    assert verify_stripe_signature(payload, header, "whsec_test", now=1_700_000_010) is True


def test_tampered_payload_is_rejected():
    header = _signature_header(b'{"type": "invoice.paid"}', "whsec_test", 1_700_000_000)

    assert verify_stripe_signature(b'{"type": "other"}', header, "whsec_test", now=1_700_000_000) is False


def test_stale_signature_is_rejected():
    payload = b"{}"
    header = _signature_header(payload, "whsec_test", 1_700_000_000)

    assert verify_stripe_signature(payload, header, "whsec_test", now=1_700_000_000 + 301) is False


@pytest.mark.parametrize("header", ["", "garbage", "t=abc,v1=deadbeef", "v1=deadbeef"])
def test_malformed_signature_header_is_rejected(header):
    assert verify_stripe_signature(b"{}", header, "whsec_test", now=0) is False
