"""Structured Logging — JSON and key=value formatters for repository events.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Entity extras (entity, entity_id, status, attempt, ...) surfaced when present;
      UUIDs and enums are rendered as strings
    - setup_logging is idempotent: calling it again replaces, never stacks, its handler

Design Decisions:
    - stdlib logging only: repositories log with `extra=`, formatters decide layout
    - Text format keeps the same extras as trailing key=value pairs for local runs
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_KEYS = (
    "entity", "entity_id", "user_id", "status",
    "attempt", "error_code", "path",
)

_HANDLER_NAME = "bloxmarket"


def _extras(record: logging.LogRecord) -> dict:
    found = {}
    for key in EXTRA_KEYS:
        val = record.__dict__.get(key)
        if val is None:
            continue
        if isinstance(val, (int, float, bool)):
            found[key] = val
        else:
            found[key] = getattr(val, "value", None) or str(val)
    return found


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_extras(record),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = " ".join(f"{k}={v}" for k, v in _extras(record).items())
        return f"{line} [{pairs}]" if pairs else line


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the process log handler on the root logger."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
