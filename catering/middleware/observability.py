from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from catering.core.metrics import request_metrics
from catering.core.request_context import clear_request_context, set_request_context

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Tags every request with an id, times it and records per-route metrics."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        set_request_context(request_id=request_id)

        response = None
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            status_code = response.status_code if response is not None else 500
            duration_ms = round((time.perf_counter() - started) * 1000, 2)
            endpoint = _route_template(request)
            admin_email = getattr(request.state, "admin_email", None)

            request_metrics.observe(endpoint=endpoint, method=request.method, status_code=status_code, duration_ms=duration_ms)
            logger.log(
                logging.WARNING if status_code >= 500 else logging.INFO,
                "%s %s -> %s",
                request.method,
                endpoint,
                status_code,
                extra={
                    "request_id": request_id,
                    "admin_email": admin_email,
                    "endpoint": endpoint,
                    "method": request.method,
                    "status_code": status_code,
                    "duration_ms": duration_ms,
                },
            )
            clear_request_context()


def _route_template(request: Request) -> str:
    # /api/admin/orders/{order_id} instead of one metric per order id
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path
