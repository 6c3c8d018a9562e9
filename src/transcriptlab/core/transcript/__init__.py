from transcriptlab.core.transcript.csv_extract import extract, extract_conversation
from transcriptlab.core.transcript.delimiter import detect_delimiter
from transcriptlab.core.transcript.models import ConversationTranscript, Utterance
from transcriptlab.core.transcript.upload import UploadedFile, owned_artifact

__all__ = [
    "ConversationTranscript",
    "UploadedFile",
    "Utterance",
    "detect_delimiter",
    "extract",
    "extract_conversation",
    "owned_artifact",
]
