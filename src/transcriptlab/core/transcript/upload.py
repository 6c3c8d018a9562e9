from __future__ import annotations

import contextlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from transcriptlab.utils.logger import get_logger

logger = get_logger("transcriptlab.upload")


@dataclass(frozen=True)
class UploadedFile:
    """
    Handle to an uploaded file on disk.

    - filename is the client-side name, extension is taken from it as-is
      (no lower-casing, so "CSV" != "csv").
    - owns_path marks generated artifacts (temp files) that release() deletes.
      Handles wrapping the client's upload never delete anything.
    """
    filename: str
    path: Path
    content_type: Optional[str] = None
    owns_path: bool = False

    @property
    def extension(self) -> str:
        _, dot, ext = self.filename.rpartition(".")
        return ext if dot else ""

    @property
    def stem(self) -> str:
        stem, dot, _ = self.filename.rpartition(".")
        return stem if dot else self.filename

    @property
    def size(self) -> int:
        return self.path.stat().st_size

    def exists(self) -> bool:
        return self.path.is_file()

    def is_readable(self) -> bool:
        return self.exists() and os.access(self.path, os.R_OK)

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def release(self) -> None:
        if not self.owns_path:
            return
        try:
            self.path.unlink(missing_ok=True)
        except OSError:
            logger.exception("Failed to delete temporary artifact %s (best-effort).", self.path)


@contextlib.contextmanager
def owned_artifact(original: UploadedFile, processed: UploadedFile) -> Iterator[UploadedFile]:
    """
    Scope a processed artifact: yields it and releases it on every exit path
    when it is a different handle from the original upload.
    """
    try:
        yield processed
    finally:
        if processed is not original:
            processed.release()
