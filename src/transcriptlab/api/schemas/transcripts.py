from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from transcriptlab.core.records.models import TranscriptRecord


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)
    request_id: str = ""


class ErrorResponse(BaseModel):
    error: ErrorBody


class UploadResponse(BaseModel):
    success: bool = True
    transcript_id: int
    message: str = "Transcript uploaded and analyzed successfully"


class TranscriptListResponse(BaseModel):
    success: bool = True
    data: List[TranscriptRecord]


class TranscriptResponse(BaseModel):
    success: bool = True
    data: TranscriptRecord


class DeleteResponse(BaseModel):
    success: bool = True
    message: str = "Transcript deleted successfully"


class QuizCompletionRequest(BaseModel):
    score: int = Field(..., ge=0, le=100, description="Quiz score in percent")
    answers: Optional[Any] = Field(None, description="Submitted answers, stored as-is")
