"""
App-layer JSONL logging bootstrap.
Initializes a single JSONL sink early in CLI startup.
"""

import json
import logging
import os
from datetime import UTC
from datetime import datetime
from pathlib import Path

from .paths import get_log_path

LOG_PATH_ENV = "KIRO_AGENT_LOG_PATH"
LOG_LEVEL_ENV = "KIRO_AGENT_LOG_LEVEL"

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = frozenset(
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
    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            base = {
                "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
                "lvl": record.levelname,
                "schema": {"name": "kiro-agent.log", "ver": "1.0.0"},
                "logger": record.name,
                "message": record.getMessage(),
            }
            if record.exc_info:
                base["exc"] = logging.Formatter().formatException(record.exc_info)
            for k, v in record.__dict__.items():
                if k in _RESERVED_ATTRS:
                    continue
                base.setdefault(k, v)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(base, ensure_ascii=False, default=str) + "\n")
        except Exception:
            self.handleError(record)


def init_json_logging(path: str | Path | None = None, level: str | None = None) -> None:
    path = path or os.environ.get(LOG_PATH_ENV) or get_log_path()
    level = (level or os.environ.get(LOG_LEVEL_ENV, "INFO")).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    # Replace any previous sink rather than duplicating lines
    for h in list(root.handlers):
        if isinstance(h, JsonlHandler):
            root.removeHandler(h)
    root.addHandler(JsonlHandler(path))
