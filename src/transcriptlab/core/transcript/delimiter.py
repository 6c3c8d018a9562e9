from __future__ import annotations

import csv
import logging
from typing import Optional, Sequence

from transcriptlab.utils.logger import get_logger

CANDIDATE_DELIMITERS: Sequence[str] = (",", ";", "\t", "|")

_default_logger = get_logger("transcriptlab.extract")


def _display(delimiter: str) -> str:
    return "TAB" if delimiter == "\t" else delimiter


def count_fields(line: str, delimiter: str) -> int:
    row = next(csv.reader([line], delimiter=delimiter), [])
    return len(row)


def detect_delimiter(
    line: str,
    *,
    candidates: Sequence[str] = CANDIDATE_DELIMITERS,
    logger: Optional[logging.Logger] = None,
) -> str:
    """
    Pick the delimiter that splits `line` into the most fields.

    Ties go to the earliest candidate. The CSV extractor always reads
    comma-delimited input; this helper is only used by tooling (CLI).
    """
    log = logger or _default_logger

    best = candidates[0]
    best_count = -1
    counts = {}
    for d in candidates:
        try:
            n = count_fields(line, d)
        except csv.Error as e:
            log.error("DELIMITER_FAILED delimiter=%s error=%s", _display(d), e)
            n = 0
        counts[_display(d)] = n
        log.debug("DELIMITER_TRY delimiter=%s columns=%s", _display(d), n)
        if n > best_count:
            best, best_count = d, n

    log.info("DELIMITER_SELECTED delimiter=%s columns=%s all=%s", _display(best), best_count, counts)
    return best
