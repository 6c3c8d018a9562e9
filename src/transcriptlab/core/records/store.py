from __future__ import annotations

import shutil
import threading
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from transcriptlab.core.records.models import TranscriptRecord, utc_now
from transcriptlab.utils.io import ensure_dir, read_json, write_json
from transcriptlab.utils.logger import get_logger

logger = get_logger("transcriptlab.records")


class RecordNotFound(FileNotFoundError):
    def __init__(self, record_id: int) -> None:
        super().__init__(f"transcript record not found: {record_id}")
        self.record_id = record_id


class TranscriptStore:
    """
    On-disk transcript records + stored uploads.

    Layout:
      <records_root>/
        <id>.json
      <uploads_root>/
        transcripts/<uuid>.<ext>

    Ids are allocated as max(existing) + 1 under a process-local lock.
    Records are written atomically (temp file + replace).
    """

    uploads_subdir = "transcripts"

    def __init__(self, records_root: str | Path, uploads_root: str | Path) -> None:
        self.records_root = Path(records_root)
        self.uploads_root = Path(uploads_root)
        self._lock = threading.Lock()

    # -------------------------
    # Paths
    # -------------------------

    def record_path(self, record_id: int) -> Path:
        return self.records_root / f"{int(record_id)}.json"

    def upload_path(self, rel_path: str) -> Path:
        return self.uploads_root / rel_path

    def _record_ids(self) -> List[int]:
        if not self.records_root.exists():
            return []
        ids = []
        for p in self.records_root.glob("*.json"):
            if p.stem.isdigit():
                ids.append(int(p.stem))
        return ids

    # -------------------------
    # Uploads
    # -------------------------

    def save_upload(self, src: str | Path, extension: str) -> str:
        """
        Copy an uploaded file into storage under a random name.

        Returns:
            path relative to uploads_root (stored on the record)
        """
        ext = extension.lower().lstrip(".")
        name = f"{uuid.uuid4().hex}.{ext}" if ext else uuid.uuid4().hex
        rel = f"{self.uploads_subdir}/{name}"
        dst = self.upload_path(rel)
        ensure_dir(dst.parent)
        shutil.copyfile(src, dst)
        return rel

    # -------------------------
    # Records
    # -------------------------

    def create(self, *, filename: str, file_path: str, file_type: str) -> TranscriptRecord:
        with self._lock:
            ids = self._record_ids()
            rid = (max(ids) + 1) if ids else 1
            rec = TranscriptRecord(id=rid, filename=filename, file_path=file_path, file_type=file_type)
            write_json(self.record_path(rid), rec.model_dump(mode="json"))
        logger.info("RECORD_CREATED id=%s filename=%s", rid, filename)
        return rec

    def get(self, record_id: int) -> TranscriptRecord:
        path = self.record_path(record_id)
        if not path.exists():
            raise RecordNotFound(record_id)
        return TranscriptRecord.model_validate(read_json(path))

    def list(self) -> List[TranscriptRecord]:
        """Newest first (created_at, then id)."""
        records = [self.get(rid) for rid in self._record_ids()]
        return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)

    def update(self, record_id: int, **fields: Any) -> TranscriptRecord:
        with self._lock:
            current = self.get(record_id)
            data: Dict[str, Any] = current.model_dump()
            data.update(fields)
            data["updated_at"] = utc_now()
            rec = TranscriptRecord.model_validate(data)
            write_json(self.record_path(record_id), rec.model_dump(mode="json"))
        return rec

    def delete(self, record_id: int) -> Optional[str]:
        """
        Remove the stored upload (if still present) and the record.

        Returns:
            the relative upload path that was removed, or None
        """
        with self._lock:
            rec = self.get(record_id)
            removed: Optional[str] = None
            upload = self.upload_path(rec.file_path)
            if rec.file_path and upload.is_file():
                upload.unlink()
                removed = rec.file_path
            self.record_path(record_id).unlink()
        logger.info("RECORD_DELETED id=%s upload=%s", record_id, removed)
        return removed
