from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TranscriptRecord(BaseModel):
    id: int
    filename: str
    file_path: str  # relative to the uploads root
    file_type: str

    analysis_result: Optional[Any] = None
    tests: Optional[Any] = None

    test_completed: bool = False
    test_score: Optional[int] = None
    test_answers: Optional[Any] = None
    completed_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    model_config = {"extra": "allow"}
