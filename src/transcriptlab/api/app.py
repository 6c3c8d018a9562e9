from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from transcriptlab import __version__
from transcriptlab.api.config import ApiConfig, load_config
from transcriptlab.api.middlewares.access_log import AccessLogMiddleware
from transcriptlab.api.middlewares.error_handler import install_error_handlers
from transcriptlab.api.middlewares.request_context import RequestContextMiddleware
from transcriptlab.api.middlewares.upload_limit import UploadLimitMiddleware
from transcriptlab.api.routes import api_router
from transcriptlab.utils.logger import configure_logging, get_logger, parse_level

logger = get_logger("transcriptlab")


def create_app(cfg: Optional[ApiConfig] = None) -> FastAPI:
    cfg = cfg or load_config()

    @asynccontextmanager
    async def _lifespan(_: FastAPI) -> AsyncIterator[None]:
        # console -> stderr at cfg.log_level, optional process log file at DEBUG
        configure_logging(
            logger_name="transcriptlab",
            console_level=parse_level(cfg.log_level),
            file_level=logging.DEBUG,
            log_path=(cfg.log_path or None),
        )
        logger.info("API_STARTUP")
        yield
        logger.info("API_SHUTDOWN")

    app = FastAPI(
        title="Transcript Lab API",
        version=__version__,
        lifespan=_lifespan,
    )

    # Added innermost first: request context must wrap access log and the size guard.
    app.add_middleware(UploadLimitMiddleware, max_bytes=cfg.max_upload_bytes)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestContextMiddleware, header_name="X-Request-Id")

    install_error_handlers(app)

    app.include_router(api_router)

    return app


app = create_app()
