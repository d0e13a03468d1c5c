from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from threading import Lock


@dataclass
class RouteStats:
    requests: int = 0
    client_errors: int = 0
    server_errors: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0

    def record(self, status_code: int, duration_ms: float) -> None:
        self.requests += 1
        self.total_ms += duration_ms
        self.max_ms = max(self.max_ms, duration_ms)
        if 400 <= status_code < 500:
            self.client_errors += 1
        elif status_code >= 500:
            self.server_errors += 1

    def as_dict(self) -> dict[str, float | int]:
        return {
            "total_requests": self.requests,
            "total_duration_ms": round(self.total_ms, 2),
            "avg_duration_ms": round(self.total_ms / self.requests, 2) if self.requests else 0.0,
            "max_duration_ms": round(self.max_ms, 2),
            "error_count": self.client_errors + self.server_errors,
            "server_error_count": self.server_errors,
        }


class InMemoryRequestMetrics:
    """Per-route request counters, process local; reset on restart."""

    def __init__(self) -> None:
        self._routes: defaultdict[str, RouteStats] = defaultdict(RouteStats)
        self._lock = Lock()

    def observe(self, endpoint: str, method: str, status_code: int, duration_ms: float) -> None:
        with self._lock:
            self._routes[f"{method} {endpoint}"].record(status_code, duration_ms)

    def snapshot(self) -> dict[str, dict[str, float | int]]:
        with self._lock:
            return {route: stats.as_dict() for route, stats in sorted(self._routes.items())}

    def reset(self) -> None:
        with self._lock:
            self._routes.clear()


request_metrics = InMemoryRequestMetrics()
