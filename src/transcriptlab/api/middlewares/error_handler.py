from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from transcriptlab.api.errors import TranscriptApiError
from transcriptlab.api.middlewares.request_context import get_request_id
from transcriptlab.utils.logger import get_logger

logger = get_logger("transcriptlab")


def error_payload(
    *,
    code: str,
    message: str,
    request_id: Optional[str],
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
            "request_id": request_id or "",
        }
    }


def install_error_handlers(app: FastAPI) -> None:
    """
    Centralized error handling: every error leaves as the same JSON shape
    with the request id attached.
    """

    @app.exception_handler(TranscriptApiError)
    async def _handle_api_error(request: Request, exc: TranscriptApiError) -> JSONResponse:
        rid = get_request_id(request)
        logger.info(f"API_ERROR rid={rid} code={exc.code} status={exc.status_code} msg={exc.message}")
        logger.debug(f"API_ERROR rid={rid} details={exc.details}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_payload(code=exc.code, message=exc.message, request_id=rid, details=exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        rid = get_request_id(request)
        logger.info(f"API_VALIDATION_ERROR rid={rid} errors={exc.errors()}")
        return JSONResponse(
            status_code=422,
            content=error_payload(
                code="validation_error",
                message="Invalid request",
                request_id=rid,
                details={"errors": jsonable_errors(exc)},
            ),
        )

    @app.exception_handler(Exception)
    async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        rid = get_request_id(request)
        logger.exception(f"API_UNHANDLED_ERROR rid={rid}")
        return JSONResponse(
            status_code=500,
            content=error_payload(code="internal_error", message=str(exc), request_id=rid),
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": [str(p) for p in e.get("loc", ())], "msg": str(e.get("msg", "")), "type": str(e.get("type", ""))}
        for e in exc.errors()
    ]
