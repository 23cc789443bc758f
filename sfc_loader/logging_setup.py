"""Logging bootstrap for the sfc-loader CLI.

Console output goes through rich; an optional JSONL sink records every log
record with its structured extras.
"""

import json
import logging
import os
from datetime import UTC
from datetime import datetime
from pathlib import Path

from rich.logging import RichHandler

from .console import err_console

DEFAULT_PATH = os.environ.get("SFC_LOADER_LOG_PATH")
DEFAULT_LEVEL = os.environ.get("SFC_LOADER_LOG_LEVEL", "WARNING").upper()

# LogRecord attributes that are not user-supplied extras
_RECORD_ATTRS = frozenset(
    {
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "name",
        "message",
    }
)


class JsonlHandler(logging.Handler):
    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def format_record(self, record: logging.LogRecord) -> dict:
        base = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "lvl": record.levelname,
            "schema": {"name": "sfc_loader.log", "ver": "1.0.0"},
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            base["exc"] = logging.Formatter().formatException(record.exc_info)
        for k, v in record.__dict__.items():
            if k in _RECORD_ATTRS:
                continue
            base.setdefault(k, v)
        return base

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(self.format_record(record), ensure_ascii=False, default=str)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            self.handleError(record)


def init_logging(level: str | None = None, path: str | None = None) -> None:
    """Configure the root logger.

    Args:
        level: Log level name (default: SFC_LOADER_LOG_LEVEL or WARNING)
        path: JSONL log file (default: SFC_LOADER_LOG_PATH; unset disables it)
    """
    level = (level or DEFAULT_LEVEL).upper()
    path = path or DEFAULT_PATH
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.WARNING))

    # Remove handlers we installed earlier to avoid duplicates
    for h in list(root.handlers):
        if isinstance(h, (JsonlHandler, RichHandler)):
            root.removeHandler(h)

    root.addHandler(RichHandler(console=err_console, show_path=False, rich_tracebacks=True))
    if path:
        root.addHandler(JsonlHandler(path))
