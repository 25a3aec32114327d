"""Structured Logging: JSON formatter and setup for the tracker shell.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Tracker context (event_id, wine_id, taster_name, error_code, ...) surfaced when present
    - A logged TastingError contributes its code, category and entity ids to the record
    - setup_logging owns at most one root handler; repeat calls replace it

Design Decisions:
    - JSONFormatter on stdlib logging: no extra dependency for a single-user tool
    - Explicit extra= keys win over values pulled from an attached TastingError
"""

import logging
import json
from datetime import datetime, timezone

from tasting.core.errors import TastingError

TRACKER_CONTEXT_KEYS: tuple[str, ...] = (
    "event_id", "wine_id", "rating_id", "taster_name",
    "error_code", "storage_key", "operation",
)

_HANDLER_MARK = "_tasting_handler"


def _error_context(error: TastingError) -> dict:
    """Flatten a TastingError into log fields. None values are dropped."""
    fields = {
        "error_code": error.code,
        "error_category": error.category.value,
        "severity": error.severity.value,
        "event_id": error.context.event_id,
        "wine_id": error.context.wine_id,
        "taster_name": error.context.taster_name,
        "operation": getattr(error, "operation", None),
    }
    return {key: value for key, value in fields.items() if value is not None}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, carrying the tracker's entity context."""

    def __init__(self, context_keys: tuple[str, ...] = TRACKER_CONTEXT_KEYS):
        super().__init__()
        self.context_keys = tuple(context_keys)

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        error = record.exc_info[1] if record.exc_info else None
        if isinstance(error, TastingError):
            log.update(_error_context(error))
        for key in self.context_keys:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the tracker's root handler, replacing one from an earlier call."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, _HANDLER_MARK, False):
            root.removeHandler(existing)

    handler = logging.StreamHandler()
    setattr(handler, _HANDLER_MARK, True)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(event_id)s] - %(message)s",
            defaults={"event_id": "-"},
        ))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
