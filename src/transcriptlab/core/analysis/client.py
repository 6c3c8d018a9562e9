from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from transcriptlab.core.transcript.upload import UploadedFile
from transcriptlab.utils.logger import get_logger

logger = get_logger("transcriptlab.analysis")

UPLOAD_FIELD = "transcript_file"


class AnalysisClient:
    """
    HTTP client for the external transcript analysis service.

    Contract:
    - upload_transcript() and health_check() never raise; failures come back
      as {"success": False, "error": ...} / {"status": "error", ...} dicts.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_sec: float = 30.0,
        health_timeout_sec: float = 5.0,
        origin: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_sec = timeout_sec
        self.health_timeout_sec = health_timeout_sec
        self.origin = origin
        self.session = session or requests.Session()

    def upload_transcript(self, file: UploadedFile) -> Dict[str, Any]:
        content_type = file.content_type or "application/octet-stream"
        try:
            logger.info(
                "ANALYSIS_UPLOAD name=%s size=%s type=%s",
                file.filename,
                file.size,
                content_type,
            )
            with file.path.open("rb") as fh:
                resp = self.session.post(
                    f"{self.base_url}/api/upload",
                    files={UPLOAD_FIELD: (file.filename, fh, content_type)},
                    headers={"Accept": "application/json"},
                    timeout=self.timeout_sec,
                )

            logger.info("ANALYSIS_RESPONSE status=%s", resp.status_code)
            logger.debug("ANALYSIS_RESPONSE body=%s", resp.text)

            if not resp.ok:
                logger.error("ANALYSIS_ERROR status=%s body=%s", resp.status_code, resp.text)
                return {
                    "success": False,
                    "error": f"Analysis service returned an error: {resp.status_code} - {resp.text}",
                }

            data = resp.json()
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            return data
        except (requests.exceptions.RequestException, ValueError, OSError) as e:
            logger.exception("ANALYSIS_EXCEPTION name=%s", file.filename)
            return {
                "success": False,
                "error": f"Failed to communicate with analysis service: {e}",
            }

    def health_check(self) -> Dict[str, Any]:
        headers = {"Accept": "application/json"}
        if self.origin:
            headers["Origin"] = self.origin
        try:
            resp = self.session.get(
                f"{self.base_url}/api/health",
                headers=headers,
                timeout=self.health_timeout_sec,
            )
            if not resp.ok:
                logger.error("ANALYSIS_HEALTH_FAILED status=%s body=%s", resp.status_code, resp.text)
                return {
                    "status": "error",
                    "message": f"Health check failed with status {resp.status_code}",
                }
            return resp.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.exception("ANALYSIS_HEALTH_EXCEPTION")
            return {"status": "error", "message": str(e)}
