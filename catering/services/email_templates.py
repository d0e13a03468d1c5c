from __future__ import annotations

from html import escape
from typing import Any

from catering.services.pricing import format_price

_WRAPPER = '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">{body}</div>'
_PANEL = '<div style="background: #f8f9fa; padding: 20px; border-radius: 8px; margin: 20px 0;">{body}</div>'

SUBJECTS: dict[str, str] = {
    "new_order_owner": "New Order from {customer_name} - Pending Review",
    "pending_customer": "Your {business_name} Request is Pending Review",
    "approved_customer": "Your {business_name} Order is Approved!",
    "approved_owner": "Order Approved - {customer_name}",
    "invoice_customer": "Payment Link for Your {business_name} Order",
    "denied_customer": "Update on Your {business_name} Request",
    "denied_owner": "Order Denied - {customer_name}",
    "catering_interest": "New Catering Menu Interest - {email}",
}


def _e(value: Any) -> str:
    return escape(str(value or ""))


def _multiline(value: Any) -> str:
    return _e(value).replace("\n", "<br/>")


def _food_block(payload: dict[str, Any]) -> str:
    lines = payload.get("food_lines") or []
    return '<pre style="white-space: pre-wrap; font-family: monospace;">{}</pre>'.format(
        "\n".join(_e(line) for line in lines)
    )


def _signature(business_name: str) -> str:
    return f'<p style="margin-top: 30px;">Best regards,<br/><strong>{_e(business_name)} Team</strong></p>'


def subject_for(template: str, **values: Any) -> str:
    return SUBJECTS[template].format(**values)


def render_new_order_owner(payload: dict[str, Any], *, business_name: str) -> str:
    details = (
        '<h3 style="margin-top: 0;">Order Details</h3>'
        f"<p><strong>Order ID:</strong> {_e(payload['id'])}</p>"
        f"<p><strong>Customer:</strong> {_e(payload['customer_name'])}</p>"
        f"<p><strong>Email:</strong> {_e(payload['customer_email'])}</p>"
        f"<p><strong>Date Needed:</strong> {_e(payload['date_needed'])}</p>"
        f"<p><strong>Delivery Address:</strong><br/>{_multiline(payload['address'])}</p>"
    )
    if payload.get("discount_percent"):
        details += f"<p><strong>Promo Discount:</strong> {payload['discount_percent']}%</p>"
    body = '<h2 style="color: #2c3e50;">New Catering Order Received</h2>'
    body += _PANEL.format(body=details)
    body += _PANEL.format(body='<h3 style="margin-top: 0;">Food Selection</h3>' + _food_block(payload))
    if payload.get("notes"):
        body += _PANEL.format(body=f'<h4 style="margin-top: 0;">Special Notes</h4><p>{_multiline(payload["notes"])}</p>')
    body += "<p>Review and approve or deny this order from the admin dashboard.</p>"
    return _WRAPPER.format(body=body)


def render_pending_customer(payload: dict[str, Any], *, business_name: str) -> str:
    body = (
        '<h2 style="color: #2c3e50;">Thank You for Your Order Request!</h2>'
        f"<p>Hi {_e(payload['customer_name'])},</p>"
        f"<p>We've received your catering request for <strong>{_e(payload['date_needed'])}</strong> "
        "and it's currently pending review.</p>"
    )
    body += _PANEL.format(
        body='<h3 style="margin-top: 0;">Your Order Summary</h3>'
        + _food_block(payload)
        + f"<p><strong>Delivery Address:</strong><br/>{_multiline(payload['address'])}</p>"
    )
    body += "<p>We'll review your request and get back to you shortly.</p>"
    body += "<p>If you have any questions, feel free to reply to this email.</p>"
    body += _signature(business_name)
    return _WRAPPER.format(body=body)


def render_approved_customer(payload: dict[str, Any], *, business_name: str) -> str:
    body = (
        '<h2 style="color: #28a745;">Great News! Your Order is Approved</h2>'
        f"<p>Hi {_e(payload['customer_name'])},</p>"
        f"<p>We're excited to cater your event on <strong>{_e(payload['date_needed'])}</strong>!</p>"
    )
    if payload.get("approval_message"):
        body += (
            '<div style="background: #d4edda; padding: 20px; border-radius: 8px; margin: 20px 0;">'
            '<h3 style="margin-top: 0; color: #155724;">Delivery Details</h3>'
            f"<p style=\"margin: 0;\">{_multiline(payload['approval_message'])}</p></div>"
        )
    body += _PANEL.format(
        body='<h3 style="margin-top: 0;">Your Order</h3>'
        + _food_block(payload)
        + f"<p><strong>Delivery Address:</strong><br/>{_multiline(payload['address'])}</p>"
    )
    body += "<p>Please reply to confirm the delivery time and we'll send your payment link.</p>"
    body += "<p>We look forward to serving you!</p>"
    body += _signature(business_name)
    return _WRAPPER.format(body=body)


def render_approved_owner(payload: dict[str, Any], *, business_name: str) -> str:
    details = (
        f"<p><strong>Customer:</strong> {_e(payload['customer_name'])}</p>"
        f"<p><strong>Email:</strong> {_e(payload['customer_email'])}</p>"
        f"<p><strong>Date:</strong> {_e(payload['date_needed'])}</p>"
    )
    if payload.get("approval_message"):
        details += f"<p><strong>Message Sent:</strong><br/>{_multiline(payload['approval_message'])}</p>"
    body = (
        '<h2 style="color: #28a745;">Order Approved Successfully</h2>'
        f"<p>Order <strong>{_e(payload['id'])}</strong> has been approved and is pending time confirmation.</p>"
    )
    body += _PANEL.format(body=details)
    body += "<p>Customer has been notified and asked to confirm the delivery time.</p>"
    return _WRAPPER.format(body=body)


def render_invoice_customer(payload: dict[str, Any], *, business_name: str) -> str:
    total = format_price(payload["total_price_cents"]) if payload.get("total_price_cents") is not None else "TBD"
    summary = (
        '<h3 style="margin-top: 0; color: #155724;">Order Confirmed</h3>'
        f"<p style=\"margin: 0;\"><strong>Delivery Date:</strong> {_e(payload['date_needed'])}</p>"
    )
    if payload.get("original_price_cents") is not None and payload.get("discount_percent"):
        summary += (
            f"<p style=\"margin: 10px 0 0 0;\"><strong>Subtotal:</strong> {format_price(payload['original_price_cents'])}</p>"
            f"<p style=\"margin: 10px 0 0 0;\"><strong>Discount ({payload['discount_percent']}%):</strong> "
            f"-{format_price(payload['original_price_cents'] - payload['total_price_cents'])}</p>"
        )
    summary += f'<p style="margin: 10px 0 0 0;"><strong>Total Amount:</strong> {total}</p>'

    body = (
        '<h2 style="color: #2c3e50;">Payment Ready for Your Order</h2>'
        f"<p>Hi {_e(payload['customer_name'])},</p>"
        "<p>Thank you for confirming the delivery time! Your order is ready for payment.</p>"
        '<div style="background: #d4edda; padding: 20px; border-radius: 8px; margin: 20px 0;">'
        f"{summary}</div>"
    )
    body += _PANEL.format(
        body='<h3 style="margin-top: 0;">Your Order</h3>'
        + _food_block(payload)
        + f"<p><strong>Delivery Address:</strong><br/>{_multiline(payload['address'])}</p>"
    )
    if payload.get("payment_url"):
        body += (
            '<div style="margin: 30px 0; text-align: center;">'
            f'<a href="{_e(payload["payment_url"])}" style="background: #007bff; color: white; '
            'padding: 15px 40px; text-decoration: none; border-radius: 5px; display: inline-block;">Pay Now</a>'
            "</div>"
            '<p style="color: #6c757d; font-size: 14px; text-align: center;">'
            "Please complete payment to finalize your order.</p>"
        )
    body += "<p>We look forward to serving you!</p>"
    body += _signature(business_name)
    return _WRAPPER.format(body=body)


def render_denied_customer(payload: dict[str, Any], *, business_name: str) -> str:
    body = (
        '<h2 style="color: #2c3e50;">Update on Your Catering Request</h2>'
        f"<p>Hi {_e(payload['customer_name'])},</p>"
        f"<p>Thank you for your interest in {_e(business_name)}. Unfortunately, we're unable to fulfill "
        f"your catering request for <strong>{_e(payload['date_needed'])}</strong>.</p>"
    )
    if payload.get("admin_reason"):
        body += _PANEL.format(
            body=f'<h3 style="margin-top: 0;">Reason</h3><p>{_multiline(payload["admin_reason"])}</p>'
        )
    body += (
        "<p>We apologize for any inconvenience. If you have questions or would like to discuss "
        "alternative options, please don't hesitate to reach out.</p>"
        "<p>We hope to serve you in the future!</p>"
    )
    body += _signature(business_name)
    return _WRAPPER.format(body=body)


def render_denied_owner(payload: dict[str, Any], *, business_name: str) -> str:
    details = (
        f"<p><strong>Customer:</strong> {_e(payload['customer_name'])}</p>"
        f"<p><strong>Email:</strong> {_e(payload['customer_email'])}</p>"
        f"<p><strong>Date:</strong> {_e(payload['date_needed'])}</p>"
    )
    if payload.get("admin_reason"):
        details += f"<p><strong>Reason:</strong> {_multiline(payload['admin_reason'])}</p>"
    body = (
        '<h2 style="color: #dc3545;">Order Denied</h2>'
        f"<p>Order <strong>{_e(payload['id'])}</strong> has been denied.</p>"
    )
    body += _PANEL.format(body=details)
    body += "<p>Customer has been notified.</p>"
    return _WRAPPER.format(body=body)


def render_catering_interest(email: str, submitted_at: str) -> str:
    body = (
        '<h2 style="color: #2D3B2D;">New Catering Menu Interest</h2>'
        "<p>Someone has signed up to receive updates about the catering menu launch!</p>"
    )
    body += _PANEL.format(
        body=f"<p><strong>Email:</strong> {_e(email)}</p><p><strong>Submitted:</strong> {_e(submitted_at)}</p>"
    )
    return _WRAPPER.format(body=body)


RENDERERS = {
    "new_order_owner": render_new_order_owner,
    "pending_customer": render_pending_customer,
    "approved_customer": render_approved_customer,
    "approved_owner": render_approved_owner,
    "invoice_customer": render_invoice_customer,
    "denied_customer": render_denied_customer,
    "denied_owner": render_denied_owner,
}
