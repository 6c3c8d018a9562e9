from transcriptlab.core.records.models import TranscriptRecord
from transcriptlab.core.records.store import RecordNotFound, TranscriptStore

__all__ = ["RecordNotFound", "TranscriptRecord", "TranscriptStore"]
