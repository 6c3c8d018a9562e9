from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


def _split_csv(v: str) -> List[str]:
    parts = [p.strip().lower().lstrip(".") for p in (v or "").split(",")]
    return [p for p in parts if p]


@dataclass(frozen=True)
class ApiConfig:
    """
    API runtime config (env-driven).

    Storage:
      <data_root>/records   transcript records (JSON)
      <data_root>/uploads   stored original uploads
    """

    data_root: str = os.getenv("TRANSCRIPTLAB_DATA_ROOT", "./data")
    records_dir: str = os.getenv("TRANSCRIPTLAB_RECORDS_DIR", "")
    uploads_dir: str = os.getenv("TRANSCRIPTLAB_UPLOADS_DIR", "")

    # Analysis service
    # Backward compatible env name: FLASK_API_URL
    analysis_url: str = os.getenv("TRANSCRIPTLAB_ANALYSIS_URL", os.getenv("FLASK_API_URL", "http://127.0.0.1:5000"))
    analysis_timeout_sec: float = float(os.getenv("TRANSCRIPTLAB_ANALYSIS_TIMEOUT_SEC", "30"))
    health_timeout_sec: float = float(os.getenv("TRANSCRIPTLAB_HEALTH_TIMEOUT_SEC", "5"))
    app_url: str = os.getenv("TRANSCRIPTLAB_APP_URL", "")

    # Upload policy
    max_upload_mb: int = int(os.getenv("TRANSCRIPTLAB_MAX_UPLOAD_MB", "30"))
    allowed_extensions: List[str] = None  # type: ignore[assignment]

    # Logging
    log_level: str = os.getenv("TRANSCRIPTLAB_API_LOG_LEVEL", "INFO")
    log_path: str = os.getenv("TRANSCRIPTLAB_LOG_PATH", "")

    def __post_init__(self) -> None:
        # dataclass(frozen=True) + derived defaults: use object.__setattr__
        if self.allowed_extensions is None:
            exts_env = os.getenv("TRANSCRIPTLAB_ALLOWED_EXTENSIONS", "").strip()
            exts = _split_csv(exts_env) if exts_env else ["txt", "csv", "pdf", "doc", "docx"]
            object.__setattr__(self, "allowed_extensions", exts)

        if not self.records_dir:
            object.__setattr__(self, "records_dir", os.path.join(self.data_root, "records"))
        if not self.uploads_dir:
            object.__setattr__(self, "uploads_dir", os.path.join(self.data_root, "uploads"))

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


def load_config() -> ApiConfig:
    return ApiConfig()
