from __future__ import annotations

import json
import logging
import os
import re
from datetime import datetime, timezone

from catering.core.request_context import get_admin_email, get_request_id

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# group 1 is kept, group 2 is replaced
_SECRET_PATTERNS = (
    re.compile(r"(sk_(?:live|test)_|whsec_|re_)([A-Za-z0-9_]{6,})"),
    re.compile(r"(bearer\s+)([^\s\"',]+)", re.IGNORECASE),
    re.compile(r"((?:password|secret|token|api_key)\"?\s*[:=]\s*\"?)([^\s\",}]+)", re.IGNORECASE),
)

_CONTEXT_FIELDS = ("endpoint", "method", "status_code", "order_id")


def mask_secrets(text: str) -> str:
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(lambda match: f"{match.group(1)}***", text)
    return text


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with request context attached and secrets masked."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "message": mask_secrets(record.getMessage()),
            "request_id": getattr(record, "request_id", None) or get_request_id(),
            "admin": getattr(record, "admin_email", None) or get_admin_email(),
            "duration_ms": getattr(record, "duration_ms", None),
        }
        entry.update(
            {field: getattr(record, field) for field in _CONTEXT_FIELDS if getattr(record, field, None) is not None}
        )
        if record.exc_info:
            entry["exception"] = mask_secrets(self.formatException(record.exc_info))
        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging(level: str | None = None) -> None:
    level = level or LOG_LEVEL
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    # httpx logs every request line at INFO, including Stripe URLs
    logging.getLogger("httpx").setLevel(logging.WARNING)
