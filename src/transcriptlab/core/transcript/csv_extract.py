"""
CSV transcript extraction.

Conversation exports arrive as CSV files whose cells carry speech-to-text
payloads from several vendors. This module flattens those payloads into one
chronological plain-text conversation ("Speaker: text" blocks separated by a
blank line) and hands back a .txt artifact in place of the CSV.

Extraction is best-effort: any problem degrades to returning the original
upload, so `extract` never raises.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import math
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from transcriptlab.core.transcript.models import DEFAULT_SPEAKER, ConversationTranscript, Utterance
from transcriptlab.core.transcript.upload import UploadedFile
from transcriptlab.utils.logger import get_logger

GLADIA_COLUMN = "gladia_response"
OPENAI_COLUMN = "openai_response"
ZOOM_COLUMN = "zoom_transcription"

UTF8_BOM = b"\xef\xbb\xbf"

_GLADIA_NULL = "NULL"
_ZOOM_EMPTY_QUOTED = '""'

_default_logger = get_logger("transcriptlab.extract")


class ExtractionError(RuntimeError):
    """Raised inside the extractor for conditions that end in a pass-through."""


@dataclass(frozen=True)
class ColumnIndex:
    """Zero-based vendor column positions. None means the column is absent."""

    gladia: Optional[int] = None
    openai: Optional[int] = None
    zoom: Optional[int] = None

    def any_found(self) -> bool:
        return any(i is not None for i in (self.gladia, self.openai, self.zoom))


@dataclass(frozen=True)
class JsonCell:
    """Result of decoding one cell: ok=False when the text is not valid JSON."""

    ok: bool
    value: Any = None


def strip_bom(data: bytes) -> bytes:
    if data.startswith(UTF8_BOM):
        return data[len(UTF8_BOM):]
    return data


def locate_columns(header: Sequence[str]) -> ColumnIndex:
    def _find(name: str) -> Optional[int]:
        for i, cell in enumerate(header):
            if cell == name:
                return i
        return None

    return ColumnIndex(gladia=_find(GLADIA_COLUMN), openai=_find(OPENAI_COLUMN), zoom=_find(ZOOM_COLUMN))


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def decode_json_cell(raw: str) -> JsonCell:
    try:
        return JsonCell(ok=True, value=json.loads(raw, parse_constant=_reject_constant))
    except (ValueError, RecursionError):
        return JsonCell(ok=False)


def _cell(row: Sequence[str], idx: Optional[int]) -> str:
    if idx is None or idx >= len(row):
        return ""
    return row[idx]


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _sort_time(value: Any) -> float:
    """Numeric sort key; anything non-numeric or non-finite sorts as 0."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return 0
    if isinstance(value, float):
        return value if math.isfinite(value) else 0
    return 0


def _timestamp_seconds(value: Any) -> float:
    """ISO-8601 timestamp -> whole epoch seconds. Naive times are UTC; unparseable -> 0."""
    if not isinstance(value, str) or not value.strip():
        return 0
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return 0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def gladia_utterances(cell: str) -> List[Utterance]:
    """
    gladia_response: JSON array of {time_begin, speaker?, transcription}.
    Undecodable cells and incomplete entries are skipped.
    """
    if not cell or cell == _GLADIA_NULL:
        return []

    decoded = decode_json_cell(cell)
    if not decoded.ok or not isinstance(decoded.value, list):
        return []

    out: List[Utterance] = []
    for item in decoded.value:
        if not isinstance(item, dict):
            continue
        if item.get("transcription") is None or item.get("time_begin") is None:
            continue
        speaker = item.get("speaker")
        out.append(
            Utterance(
                time=_sort_time(item["time_begin"]),
                speaker=f"{DEFAULT_SPEAKER} {_as_text(speaker)}" if speaker is not None else DEFAULT_SPEAKER,
                text=_as_text(item["transcription"]),
            )
        )
    return out


def zoom_utterances(cell: str) -> List[Utterance]:
    """
    zoom_transcription: {transcript}, an array (or object) of
    {text, timestamp?, speaker?} entries, or plain text. Anything that does
    not decode to a usable JSON value is kept verbatim as a single untimed turn.
    """
    if not cell or cell == _ZOOM_EMPTY_QUOTED:
        return []

    text = cell.strip('"')
    if not text:
        return []

    decoded = decode_json_cell(text)
    # empty/zero JSON values fall back to the raw text as well
    if not decoded.ok or not decoded.value:
        return [Utterance(time=0, speaker=DEFAULT_SPEAKER, text=text)]

    value = decoded.value
    if isinstance(value, dict) and value.get("transcript") is not None:
        return [Utterance(time=0, speaker=DEFAULT_SPEAKER, text=_as_text(value["transcript"]))]

    # objects without "transcript" are scanned like arrays, by value
    items = value.values() if isinstance(value, dict) else value if isinstance(value, list) else ()
    out: List[Utterance] = []
    for item in items:
        if not isinstance(item, dict) or item.get("text") is None:
            continue
        speaker = item.get("speaker")
        out.append(
            Utterance(
                time=_timestamp_seconds(item.get("timestamp")),
                speaker=_as_text(speaker) if speaker is not None else DEFAULT_SPEAKER,
                text=_as_text(item["text"]),
            )
        )
    return out


def _allow_field_size(n: int) -> None:
    # csv caps fields at 128 KiB by default; a single vendor cell may hold a whole meeting
    if n > csv.field_size_limit():
        csv.field_size_limit(n)


def extract_conversation(
    content: bytes,
    *,
    logger: Optional[logging.Logger] = None,
) -> Tuple[ConversationTranscript, int]:
    """
    Parse comma-delimited CSV bytes into a time-ordered conversation.

    Only gladia_response and zoom_transcription cells are read;
    openai_response is located and logged but its payload is not interpreted.

    Returns:
        (sorted transcript, number of data rows read)

    Raises:
        ExtractionError: no header row, or none of the vendor columns present.
        csv.Error: structurally broken CSV.
    """
    log = logger or _default_logger

    text = strip_bom(content).decode("utf-8", errors="replace")
    _allow_field_size(len(text))
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=",")

    header = next(reader, None)
    if not header:
        raise ExtractionError("Could not read CSV headers")
    log.info("CSV_HEADERS headers=%s", header)

    cols = locate_columns(header)
    log.info("CSV_COLUMNS gladia=%s openai=%s zoom=%s", cols.gladia, cols.openai, cols.zoom)
    if not cols.any_found():
        raise ExtractionError("Could not find any transcript columns in CSV")

    utterances: List[Utterance] = []
    rows = 0
    for row in reader:
        rows += 1
        utterances.extend(gladia_utterances(_cell(row, cols.gladia)))
        utterances.extend(zoom_utterances(_cell(row, cols.zoom)))

    return ConversationTranscript(utterances=utterances).sorted(), rows


def _write_artifact(text: str, original: UploadedFile, tmp_dir: Optional[Path]) -> UploadedFile:
    fd, tmp_path = tempfile.mkstemp(prefix="transcript_", suffix=".txt", dir=str(tmp_dir) if tmp_dir else None)
    with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    return UploadedFile(
        filename=f"{original.stem}.txt",
        path=Path(tmp_path),
        content_type="text/plain",
        owns_path=True,
    )


def extract(
    file: UploadedFile,
    *,
    logger: Optional[logging.Logger] = None,
    tmp_dir: Optional[Path] = None,
) -> UploadedFile:
    """
    Replace a vendor-export CSV upload with its plain-text conversation.

    Returns the original handle unchanged when the file is not a ".csv"
    (case-sensitive), when it cannot be read or parsed, or when no utterance
    was found. Otherwise returns a new owning handle "<stem>.txt"; the caller
    must release() it once consumed.
    """
    log = logger or _default_logger

    if file.extension != "csv":
        log.info("CSV_EXTRACT_SKIP not a csv file name=%s extension=%s", file.filename, file.extension)
        return file

    try:
        if not file.exists():
            raise ExtractionError(f"CSV file does not exist at path: {file.path}")
        if not file.is_readable():
            raise ExtractionError(f"CSV file is not readable at path: {file.path}")

        log.info(
            "CSV_EXTRACT_START name=%s size=%s type=%s",
            file.filename,
            file.size,
            file.content_type,
        )

        conversation, rows = extract_conversation(file.read_bytes(), logger=log)
        text = conversation.render()

        if not text:
            log.warning("CSV_EXTRACT_EMPTY no transcript text found name=%s rows=%s", file.filename, rows)
            return file

        artifact = _write_artifact(text, file, tmp_dir)
        log.info(
            "CSV_EXTRACT_OK name=%s new_name=%s utterances=%s text_len=%s rows=%s",
            file.filename,
            artifact.filename,
            len(conversation),
            len(text),
            rows,
        )
        return artifact
    except Exception as e:
        log.exception("CSV_EXTRACT_FAILED name=%s error=%s", file.filename, e)
        return file
