from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
# most recent messages kept by LoggingEmailSender
RECORDED_HISTORY_SIZE = 50


@dataclass
class EmailMessage:
    to: str
    subject: str
    html: str
    sender: str
    template: str = ""
    tags: dict[str, str] = field(default_factory=dict)


class EmailSendError(RuntimeError):
    def __init__(self, status_code: int, body_text: str):
        super().__init__(f"Resend error {status_code}: {body_text}")
        self.status_code = status_code
        self.body_text = body_text


class EmailSender(Protocol):
    def send(self, message: EmailMessage) -> dict[str, Any]:
        ...


class ResendEmailSender:
    INTEGRATION_NAME = "resend"

    def __init__(self, api_key: str, *, timeout: float = 15.0, client: httpx.Client | None = None):
        if not api_key:
            raise RuntimeError("Missing RESEND_API_KEY in .env")
        self._api_key = api_key
        self._timeout = timeout
        self._client = client

    def send(self, message: EmailMessage) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "from": message.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        if message.tags:
            payload["tags"] = [{"name": key, "value": value} for key, value in message.tags.items()]
        headers = {"Authorization": f"Bearer {self._api_key}", "Content-Type": "application/json"}

        client = self._client or httpx.Client(timeout=self._timeout)
        try:
            response = client.post(RESEND_API_URL, headers=headers, json=payload)
        finally:
            if self._client is None:
                client.close()

        if not 200 <= response.status_code < 300:
            raise EmailSendError(response.status_code, response.text)
        try:
            data = response.json()
        except ValueError:
            data = {"ok": True, "raw": response.text}
        logger.info("Email sent template=%s to=%s id=%s", message.template, message.to, data.get("id"))
        return data


class LoggingEmailSender:
    """Dev/test sender: records messages instead of delivering them."""

    INTEGRATION_NAME = "log"

    def __init__(self, history_size: int = RECORDED_HISTORY_SIZE) -> None:
        self.sent: deque[EmailMessage] = deque(maxlen=history_size)
        self._count = 0

    def send(self, message: EmailMessage) -> dict[str, Any]:
        self._count += 1
        self.sent.append(message)
        logger.info("Email (not delivered) template=%s to=%s subject=%s", message.template, message.to, message.subject)
        return {"id": f"log-{self._count}"}


def build_email_sender(provider: str, *, resend_api_key: str = "") -> EmailSender:
    if provider == "resend":
        return ResendEmailSender(resend_api_key)
    if provider == "log":
        return LoggingEmailSender()
    raise RuntimeError(f"Unknown EMAIL_PROVIDER: {provider}")
