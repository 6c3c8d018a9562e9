from __future__ import annotations

import shutil
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, File, UploadFile

from transcriptlab.api.config import load_config
from transcriptlab.api.errors import NoFileError
from transcriptlab.api.schemas.transcripts import (
    DeleteResponse,
    ErrorResponse,
    QuizCompletionRequest,
    TranscriptListResponse,
    TranscriptResponse,
    UploadResponse,
)
from transcriptlab.api.services.transcripts_service import TranscriptsService
from transcriptlab.core.analysis import AnalysisClient
from transcriptlab.core.records import TranscriptStore
from transcriptlab.core.transcript import UploadedFile

router = APIRouter(prefix="/api", tags=["transcripts"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    413: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@lru_cache(maxsize=1)
def _svc() -> TranscriptsService:
    cfg = load_config()
    store = TranscriptStore(cfg.records_dir, cfg.uploads_dir)
    client = AnalysisClient(
        cfg.analysis_url,
        timeout_sec=cfg.analysis_timeout_sec,
        health_timeout_sec=cfg.health_timeout_sec,
        origin=cfg.app_url or None,
    )
    return TranscriptsService(cfg=cfg, store=store, client=client)


def _spool_to_disk(upload: UploadFile) -> UploadedFile:
    """
    Copy the multipart body into a named temp file so the pipeline can work
    with a real path. The returned handle owns that file.
    """
    filename = upload.filename or ""
    suffix = Path(filename).suffix
    with tempfile.NamedTemporaryFile(prefix="upload_", suffix=suffix, delete=False) as tmp:
        shutil.copyfileobj(upload.file, tmp)
    return UploadedFile(
        filename=filename,
        path=Path(tmp.name),
        content_type=upload.content_type,
        owns_path=True,
    )


@router.post("/transcript/upload", response_model=UploadResponse, responses=_ERROR_RESPONSES)
def upload_transcript(transcript_file: Optional[UploadFile] = File(None)) -> UploadResponse:
    if transcript_file is None or not transcript_file.filename:
        raise NoFileError()

    incoming = _spool_to_disk(transcript_file)
    try:
        transcript_id = _svc().upload(incoming)
    finally:
        incoming.release()
    return UploadResponse(transcript_id=transcript_id)


@router.get("/transcripts", response_model=TranscriptListResponse, responses=_ERROR_RESPONSES)
def list_transcripts() -> TranscriptListResponse:
    return TranscriptListResponse(data=_svc().list())


@router.get("/transcript/{transcript_id}", response_model=TranscriptResponse, responses=_ERROR_RESPONSES)
def get_transcript(transcript_id: int) -> TranscriptResponse:
    return TranscriptResponse(data=_svc().get(transcript_id))


@router.delete("/transcript/{transcript_id}", response_model=DeleteResponse, responses=_ERROR_RESPONSES)
def delete_transcript(transcript_id: int) -> DeleteResponse:
    _svc().delete(transcript_id)
    return DeleteResponse()


@router.post(
    "/transcript/{transcript_id}/test-completion",
    response_model=TranscriptResponse,
    responses=_ERROR_RESPONSES,
)
def complete_test(transcript_id: int, req: QuizCompletionRequest) -> TranscriptResponse:
    rec = _svc().complete_test(transcript_id, score=req.score, answers=req.answers)
    return TranscriptResponse(data=rec)


@router.get("/health")
def analysis_health() -> dict:
    """
    Analysis service health, proxied. Errors come back as {"status": "error", ...}.
    """
    return _svc().health()
