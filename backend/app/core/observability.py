import json
import logging
import threading
import time
import uuid
from collections import defaultdict
from typing import DefaultDict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


logger = logging.getLogger("app.observability")
UNMATCHED_ROUTE = "<unmatched>"


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


class MetricsRegistry:
    """Request counters rendered in the Prometheus text format."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.requests: DefaultDict[tuple[str, str, int], int] = defaultdict(int)
        self.duration_sum: DefaultDict[tuple[str, str], float] = defaultdict(float)
        self.duration_count: DefaultDict[tuple[str, str], int] = defaultdict(int)

    def observe(self, method: str, route: str, status_code: int, duration_ms: float) -> None:
        with self._lock:
            self.requests[(route, method, status_code)] += 1
            self.duration_sum[(route, method)] += duration_ms
            self.duration_count[(route, method)] += 1

    def render_prometheus(self) -> str:
        lines: list[str] = []
        with self._lock:
            errors_5xx = sum(c for (_, _, code), c in self.requests.items() if code >= 500)
            lines.append("# HELP http_requests_total HTTP requests split by route, method and status code.")
            lines.append("# TYPE http_requests_total counter")
            for (route, method, status_code), count in sorted(self.requests.items()):
                lines.append(
                    f'http_requests_total{{route="{_escape_label(route)}",method="{method}",status="{status_code}"}} {count}'
                )

            lines.append("# HELP http_request_errors_5xx_total Total number of HTTP 5xx responses.")
            lines.append("# TYPE http_request_errors_5xx_total counter")
            lines.append(f"http_request_errors_5xx_total {errors_5xx}")

            lines.append("# HELP http_request_duration_ms_sum Sum of request durations in milliseconds.")
            lines.append("# TYPE http_request_duration_ms_sum counter")
            for (route, method), total in sorted(self.duration_sum.items()):
                lines.append(
                    f'http_request_duration_ms_sum{{route="{_escape_label(route)}",method="{method}"}} {total:.3f}'
                )

            lines.append("# HELP http_request_duration_ms_count Number of observed request durations.")
            lines.append("# TYPE http_request_duration_ms_count counter")
            for (route, method), count in sorted(self.duration_count.items()):
                lines.append(
                    f'http_request_duration_ms_count{{route="{_escape_label(route)}",method="{method}"}} {count}'
                )

        return "\n".join(lines) + "\n"


def _route_template(request: Request) -> str:
    # Label by template (/api/v1/entities/{entity_id}); unmatched paths share one label.
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


class ObservabilityMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, registry: MetricsRegistry, exclude_paths: set[str] | None = None) -> None:
        super().__init__(app)
        self.registry = registry
        self.exclude_paths = exclude_paths or set()

    def _record(self, request: Request, request_id: str, status_code: int, started: float, failed: bool) -> None:
        duration_ms = (time.perf_counter() - started) * 1000.0
        path = request.url.path
        route = _route_template(request)
        if path not in self.exclude_paths:
            self.registry.observe(request.method, route, status_code, duration_ms)

        message = json.dumps(
            {
                "event": "http_request",
                "request_id": request_id,
                "method": request.method,
                "path": path,
                "route": route,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 3),
                "client_ip": request.client.host if request.client else None,
            },
            ensure_ascii=False,
        )
        if failed:
            logger.exception(message)
        else:
            logger.info(message)

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            self._record(request, request_id, 500, started, failed=True)
            raise

        response.headers["X-Request-ID"] = request_id
        self._record(request, request_id, response.status_code, started, failed=False)
        return response
