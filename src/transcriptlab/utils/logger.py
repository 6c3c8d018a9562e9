import logging
from contextvars import ContextVar
from pathlib import Path
from typing import Optional

_FORMAT = "[%(levelname)s] %(message)s"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_trace_id: ContextVar[str] = ContextVar("transcriptlab_trace_id", default="")


def get_logger(name: str = "transcriptlab") -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers or name.startswith("transcriptlab."):
        # children propagate to the "transcriptlab" root handler
        return logger
    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    fmt = logging.Formatter(_FORMAT)
    handler.setFormatter(fmt)
    logger.addHandler(handler)
    return logger


def configure_logging(
    *,
    logger_name: str = "transcriptlab",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    log_path: Optional[str] = None,
) -> logging.Logger:
    """
    Process-level logging baseline.

    - console handler on stderr at console_level
    - optional file handler at file_level (parent dir is created)
    Calling it twice replaces the handlers instead of stacking them.
    """
    logger = logging.getLogger(logger_name)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    logger.setLevel(min(console_level, file_level) if log_path else console_level)

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(console)

    if log_path:
        p = Path(log_path).expanduser()
        p.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(p, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(fh)

    return logger


def set_trace_id(trace_id: str) -> None:
    _trace_id.set(trace_id or "")


def clear_trace_id() -> None:
    _trace_id.set("")


def get_trace_id() -> str:
    return _trace_id.get()


def parse_level(name: str, default: int = logging.INFO) -> int:
    level = logging.getLevelName((name or "").strip().upper())
    return level if isinstance(level, int) else default
