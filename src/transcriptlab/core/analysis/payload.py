from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from transcriptlab.utils.logger import get_logger

logger = get_logger("transcriptlab.analysis")

# The service wraps the analysis JSON in a markdown code block most of the time.
_FENCED_JSON_RE = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL)


@dataclass(frozen=True)
class NormalizedAnalysis:
    analysis: Any
    tests: Any = None

    @property
    def has_analysis(self) -> bool:
        return not (isinstance(self.analysis, dict) and "error" in self.analysis)

    @property
    def has_tests(self) -> bool:
        return bool(self.tests)


def unwrap_fenced_json(text: str) -> str:
    m = _FENCED_JSON_RE.search(text)
    return m.group(1) if m else text


def _data_section(result: Dict[str, Any]) -> Dict[str, Any]:
    data = result.get("data")
    return data if isinstance(data, dict) else {}


def normalize_analysis(result: Dict[str, Any]) -> NormalizedAnalysis:
    """
    Turn a successful service response into storable analysis/tests values.

    - data.analysis as string: unwrap ```json fences, then JSON-decode.
      Undecodable text is kept as {"error": "Invalid analysis format", "raw_response": ...}.
    - data.analysis already structured: stored as is.
    - missing/empty: {"error": "No analysis data available"}.
    """
    data = _data_section(result)
    raw: Optional[Any] = data.get("analysis")
    tests = data.get("tests")

    if not raw:
        logger.warning("ANALYSIS_MISSING response_keys=%s", sorted(result.keys()))
        return NormalizedAnalysis(analysis={"error": "No analysis data available"}, tests=tests)

    if not isinstance(raw, str):
        return NormalizedAnalysis(analysis=raw, tests=tests)

    text = unwrap_fenced_json(raw)
    try:
        analysis = json.loads(text)
    except ValueError as e:
        logger.error("ANALYSIS_INVALID_JSON error=%s", e)
        logger.debug("ANALYSIS_INVALID_JSON raw=%s", text)
        analysis = {"error": "Invalid analysis format", "raw_response": text}

    return NormalizedAnalysis(analysis=analysis, tests=tests)
