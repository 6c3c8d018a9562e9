from __future__ import annotations

import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from transcriptlab.api.metrics import UNMATCHED_PATH, inc_http_request
from transcriptlab.utils.logger import get_logger, get_trace_id

logger = get_logger("transcriptlab.access")


def route_template(request: Request) -> str:
    """
    Path pattern of the route that served the request, e.g.
    "/api/transcript/{transcript_id}". Requests that never reached a route
    (404s, uploads rejected by the size guard) share one label.
    """
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_PATH


class AccessLogMiddleware(BaseHTTPMiddleware):
    """
    One ACCESS line per request plus the HTTP request counter.

    The log line carries the concrete URL path; the counter is labeled by
    route template so record ids do not create new series.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        status = 500
        try:
            resp = await call_next(request)
            status = resp.status_code
            return resp
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000.0
            template = route_template(request)
            inc_http_request(method=request.method, path=template, status=status)
            logger.info(
                "ACCESS method=%s path=%s route=%s status=%s dur_ms=%.2f rid=%s",
                request.method,
                request.url.path,
                template,
                status,
                elapsed_ms,
                get_trace_id(),
            )
