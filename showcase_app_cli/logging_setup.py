"""
JSONL log file for catalog resolution runs.

Each record is one JSON object. Records emitted for a failed stage carry
``stage`` and ``error_kind`` so a run can be reconstructed from the file.
"""

import json
import logging
import os
from datetime import UTC
from datetime import datetime
from pathlib import Path

LOG_PATH_ENV = "SHOWCASE_LOG_PATH"
LOG_LEVEL_ENV = "SHOWCASE_LOG_LEVEL"

# Record attributes copied into the JSON object when set
CATALOG_FIELDS = ("stage", "error_kind", "source")


class CatalogJsonFormatter(logging.Formatter):
    """Formats a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "lvl": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CATALOG_FIELDS:
            value = getattr(record, name, None)
            if value:
                payload[name] = value
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class CatalogLogFileHandler(logging.FileHandler):
    """Appends JSON lines to the run log, creating its directory."""

    def __init__(self, path: str | Path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(path, mode="a", encoding="utf-8", delay=True)
        self.setFormatter(CatalogJsonFormatter())


def configure_run_log(path: str | Path | None = None, level: str | None = None) -> CatalogLogFileHandler:
    """Install the run log on the root logger, replacing an earlier one.

    Args:
        path: Log file, defaults to $SHOWCASE_LOG_PATH or ./showcase.log.jsonl
        level: Level name, defaults to $SHOWCASE_LOG_LEVEL or INFO

    Returns:
        The installed handler
    """
    path = path or os.environ.get(LOG_PATH_ENV, "./showcase.log.jsonl")
    level = (level or os.environ.get(LOG_LEVEL_ENV, "INFO")).upper()

    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    for handler in list(root.handlers):
        if isinstance(handler, CatalogLogFileHandler):
            root.removeHandler(handler)
            handler.close()

    handler = CatalogLogFileHandler(path)
    root.addHandler(handler)
    return handler
