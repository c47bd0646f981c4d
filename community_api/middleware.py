"""Request logging and metrics middleware."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

from community_api.metrics import Metrics

logger = logging.getLogger("uvicorn.error")


def _match_path(routes, scope: dict, prefix: str = "") -> str | None:
    for route in routes:
        match, child_scope = route.matches(scope)
        if match != Match.FULL:
            continue
        # Mounted apps and routers carry their own routes below the mount path
        children = getattr(route, "routes", None)
        if children:
            return _match_path(children, {**scope, **child_scope}, prefix + route.path)
        return prefix + route.path
    return None


def _route_template(request: Request) -> str:
    """Full matched route path (e.g. /communities/{community_id}/posts), or "unknown".

    Looked up from the app's route table, since ``scope["route"]`` may hold the
    included router's path without its prefix.
    """
    return _match_path(request.app.router.routes, request.scope) or "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request and record it in the metrics registry."""

    def __init__(self, app, metrics: Metrics) -> None:
        super().__init__(app)
        self.metrics = metrics

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            duration = time.perf_counter() - start
            self.metrics.observe_http(_route_template(request), request.method, status, duration)
            logger.info(
                "http_request method=%s path=%s status=%s duration_ms=%.2f",
                request.method,
                request.url.path,
                status,
                duration * 1000,
            )
