from __future__ import annotations

from fastapi import APIRouter, Response

from transcriptlab.api.metrics import to_prometheus_text

router = APIRouter(tags=["metrics"])


@router.get("/metrics")
def prom_metrics() -> Response:
    """
    Prometheus scrape endpoint.
    """
    return Response(content=to_prometheus_text(), media_type="text/plain; version=0.0.4; charset=utf-8")
