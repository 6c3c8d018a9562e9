from __future__ import annotations

import threading
from typing import Dict, List, Sequence, Tuple

UNMATCHED_PATH = "unmatched"


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


class CounterFamily:
    """
    One Prometheus counter with a fixed label set.

    Label values must stay bounded: HTTP paths are recorded as route
    templates ("/api/transcript/{transcript_id}"), never raw URLs.
    """

    def __init__(self, name: str, help_text: str, label_names: Sequence[str] = ()) -> None:
        self.name = name
        self.help_text = help_text
        self.label_names = tuple(label_names)
        self._lock = threading.Lock()
        self._values: Dict[Tuple[str, ...], int] = {}

    def inc(self, value: int = 1, **labels: str) -> None:
        if set(labels) != set(self.label_names):
            raise ValueError(f"{self.name} expects labels {self.label_names}, got {sorted(labels)}")
        key = tuple(str(labels[n]) for n in self.label_names)
        with self._lock:
            self._values[key] = self._values.get(key, 0) + int(value)

    def series(self) -> Dict[Tuple[str, ...], int]:
        with self._lock:
            return dict(self._values)

    def render(self) -> List[str]:
        lines = [f"# HELP {self.name} {self.help_text}", f"# TYPE {self.name} counter"]
        for key, count in sorted(self.series().items()):
            if key:
                inner = ",".join(f'{n}="{_escape(v)}"' for n, v in zip(self.label_names, key))
                lines.append(f"{self.name}{{{inner}}} {count}")
            else:
                lines.append(f"{self.name} {count}")
        return lines


HTTP_REQUESTS = CounterFamily(
    "transcriptlab_http_requests_total",
    "HTTP requests by method, route template and status.",
    ("method", "path", "status"),
)
UPLOADS = CounterFamily(
    "transcriptlab_uploads_total",
    "Accepted transcript uploads by file type.",
    ("file_type",),
)
EXTRACTIONS = CounterFamily(
    "transcriptlab_extractions_total",
    "CSV extraction outcomes (converted or passthrough).",
    ("outcome",),
)

_FAMILIES = (HTTP_REQUESTS, UPLOADS, EXTRACTIONS)


def to_prometheus_text() -> str:
    # process-local; scrape each worker separately
    lines: List[str] = []
    for family in _FAMILIES:
        lines.extend(family.render())
    return "\n".join(lines) + "\n"


def inc_http_request(method: str, path: str, status: int) -> None:
    HTTP_REQUESTS.inc(method=method, path=path or UNMATCHED_PATH, status=str(status))


def inc_upload(file_type: str) -> None:
    UPLOADS.inc(file_type=file_type or "unknown")


def inc_extraction(outcome: str) -> None:
    EXTRACTIONS.inc(outcome=outcome)
