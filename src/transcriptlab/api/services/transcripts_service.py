from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from transcriptlab.api.config import ApiConfig
from transcriptlab.api.errors import AnalysisFailedError, InvalidFileError, NotFoundError, ProcessingError, TranscriptApiError
from transcriptlab.api.metrics import inc_extraction, inc_upload
from transcriptlab.core.analysis import AnalysisClient, normalize_analysis
from transcriptlab.core.records import RecordNotFound, TranscriptRecord, TranscriptStore
from transcriptlab.core.records.models import utc_now
from transcriptlab.core.transcript import UploadedFile, extract, owned_artifact
from transcriptlab.utils.logger import get_logger

logger = get_logger("transcriptlab.api")


class TranscriptsService:
    """
    Upload pipeline + record access.

    Upload flow:
      validate -> store original -> create record -> CSV extraction
      -> analysis service -> release generated artifact -> persist analysis
    Extraction never blocks an upload; only validation and analysis
    failures surface as errors.
    """

    def __init__(
        self,
        cfg: ApiConfig,
        store: TranscriptStore,
        client: AnalysisClient,
        tmp_dir: Optional[Path] = None,
    ) -> None:
        self.cfg = cfg
        self.store = store
        self.client = client
        self.tmp_dir = tmp_dir

    # -------------------------
    # Upload
    # -------------------------

    def validate_upload(self, file: UploadedFile) -> None:
        problems: List[str] = []

        ext = file.extension.lower()
        if ext not in self.cfg.allowed_extensions:
            problems.append(f"The transcript file must be a file of type: {', '.join(self.cfg.allowed_extensions)}.")

        size = file.size
        if size > self.cfg.max_upload_bytes:
            problems.append(
                f"The transcript file must not be greater than {self.cfg.max_upload_bytes // 1024} kilobytes."
            )

        if problems:
            raise InvalidFileError(
                "Invalid file: " + ", ".join(problems),
                details={"filename": file.filename, "extension": file.extension, "size": size},
            )

    def upload(self, file: UploadedFile) -> int:
        logger.info("UPLOAD_RECEIVED name=%s size=%s type=%s", file.filename, file.size, file.content_type)
        self.validate_upload(file)

        try:
            rel_path = self.store.save_upload(file.path, file.extension)
            logger.info("UPLOAD_STORED path=%s", rel_path)

            record = self.store.create(filename=file.filename, file_path=rel_path, file_type=file.extension)
            inc_upload(file.extension.lower())

            processed = extract(file, tmp_dir=self.tmp_dir)
            inc_extraction("converted" if processed is not file else "passthrough")

            with owned_artifact(file, processed) as artifact:
                result = self.client.upload_transcript(artifact)
            logger.debug("ANALYSIS_RESULT id=%s result=%s", record.id, result)

            if result.get("error"):
                logger.error("UPLOAD_ANALYSIS_FAILED id=%s error=%s", record.id, result["error"])
                raise AnalysisFailedError(str(result["error"]), details={"transcript_id": record.id})

            norm = normalize_analysis(result)
            self.store.update(record.id, analysis_result=norm.analysis, tests=norm.tests)
            logger.info(
                "UPLOAD_ANALYZED id=%s has_analysis=%s has_tests=%s",
                record.id,
                norm.has_analysis,
                norm.has_tests,
            )
            return record.id
        except TranscriptApiError:
            raise
        except Exception as e:
            logger.exception("UPLOAD_FAILED name=%s", file.filename)
            raise ProcessingError(f"Failed to process transcript: {e}") from e

    # -------------------------
    # Records
    # -------------------------

    def list(self) -> List[TranscriptRecord]:
        return self.store.list()

    def get(self, record_id: int) -> TranscriptRecord:
        try:
            return self.store.get(record_id)
        except RecordNotFound as e:
            raise NotFoundError(str(e), details={"id": record_id}) from e

    def delete(self, record_id: int) -> None:
        try:
            self.store.delete(record_id)
        except RecordNotFound as e:
            raise NotFoundError(str(e), details={"id": record_id}) from e

    def complete_test(self, record_id: int, *, score: int, answers: Any) -> TranscriptRecord:
        try:
            return self.store.update(
                record_id,
                test_completed=True,
                test_score=score,
                test_answers=answers,
                completed_at=utc_now(),
            )
        except RecordNotFound as e:
            raise NotFoundError(str(e), details={"id": record_id}) from e

    def health(self) -> Dict[str, Any]:
        return self.client.health_check()
