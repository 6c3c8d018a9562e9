from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class TranscriptApiError(Exception):
    """
    Typed API error carrying a stable machine-readable code.
    """

    code: str
    message: str
    status_code: int = 400
    details: Optional[Dict[str, Any]] = None


class NoFileError(TranscriptApiError):
    def __init__(self, message: str = "No file was uploaded", *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(code="no_file", message=message, status_code=400, details=details)


class InvalidFileError(TranscriptApiError):
    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(code="invalid_file", message=message, status_code=422, details=details)


class PayloadTooLargeError(TranscriptApiError):
    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(code="payload_too_large", message=message, status_code=413, details=details)


class NotFoundError(TranscriptApiError):
    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(code="not_found", message=message, status_code=404, details=details)


class AnalysisFailedError(TranscriptApiError):
    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(code="analysis_failed", message=message, status_code=400, details=details)


class ProcessingError(TranscriptApiError):
    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(code="internal_error", message=message, status_code=500, details=details)
