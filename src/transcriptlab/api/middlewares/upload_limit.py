from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from transcriptlab.api.middlewares.error_handler import error_payload
from transcriptlab.api.middlewares.request_context import get_request_id
from transcriptlab.utils.logger import get_logger

logger = get_logger("transcriptlab.api")


class UploadLimitMiddleware(BaseHTTPMiddleware):
    """
    Reject requests whose declared Content-Length exceeds max_bytes before
    the body is read. Requests without the header pass; the upload route
    re-checks the actual file size.
    """

    def __init__(self, app, max_bytes: int) -> None:
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next) -> Response:
        raw = request.headers.get("content-length")
        try:
            length = int(raw) if raw else 0
        except ValueError:
            length = 0

        if length > self.max_bytes:
            limit_mb = self.max_bytes // (1024 * 1024)
            rid = get_request_id(request)
            logger.info("UPLOAD_TOO_LARGE rid=%s content_length=%s limit=%s", rid, length, self.max_bytes)
            return JSONResponse(
                status_code=413,
                content=error_payload(
                    code="payload_too_large",
                    message=f"File size exceeds the maximum limit of {limit_mb}MB",
                    request_id=rid,
                    details={"content_length": length, "max_bytes": self.max_bytes},
                ),
            )

        return await call_next(request)
