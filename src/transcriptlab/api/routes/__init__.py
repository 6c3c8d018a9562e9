from __future__ import annotations

from fastapi import APIRouter

# Root router to be included by app.py
api_router = APIRouter()

from transcriptlab.api.routes.health import router as health_router  # noqa: E402
from transcriptlab.api.routes.metrics import router as metrics_router  # noqa: E402
from transcriptlab.api.routes.transcripts import router as transcripts_router  # noqa: E402

api_router.include_router(health_router)
api_router.include_router(metrics_router)
api_router.include_router(transcripts_router)
