from __future__ import annotations

from fastapi import APIRouter

from transcriptlab.api.config import load_config
from transcriptlab import __version__

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz() -> dict:
    """
    Liveness: must be fast and never block on external deps.
    """
    return {"ok": True}


@router.get("/readyz")
def readyz() -> dict:
    """
    Readiness: reports the config surface that is safe to expose.
    """
    cfg = load_config()
    return {
        "ok": True,
        "service": "transcriptlab-api",
        "version": __version__,
        "max_upload_mb": cfg.max_upload_mb,
        "allowed_extensions": cfg.allowed_extensions,
    }
