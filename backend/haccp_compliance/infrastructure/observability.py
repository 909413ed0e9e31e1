"""Structured Logging — audit-friendly log lines for compliance decisions.

Invariants:
    - Timestamps come from the LogRecord (when the verdict was logged, not formatted)
    - Compliance identifiers (ccp_id, trap_location_id, equipment_id, source_id,
      reference_id) travel with the line in both JSON and text formats
    - setup_logging is idempotent: repeated lifespans never duplicate lines

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - SQLAlchemy engine chatter capped at WARNING: statements carry readings and
      lot numbers that belong in records, not logs
"""

import json
import logging
from datetime import datetime, timezone

SERVICE_NAME = "haccp-compliance-api"

CONTEXT_FIELDS = (
    "ccp_id", "trap_location_id", "equipment_id", "check_date",
    "source_type", "source_id", "reference_id", "error_code", "attempt", "path",
)

QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite")


def log_context(record: logging.LogRecord) -> dict:
    return {
        key: record.__dict__[key]
        for key in CONTEXT_FIELDS
        if record.__dict__.get(key) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line, context fields flattened in."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
            **log_context(record),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class ContextTextFormatter(logging.Formatter):
    """Human-readable line with the same context as key=value pairs."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = log_context(record)
        if context:
            line += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return line


class _HaccpHandler(logging.StreamHandler):
    """Marker type so setup_logging can find and replace its own handler."""


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, _HaccpHandler)]:
        root.removeHandler(existing)

    handler = _HaccpHandler()
    handler.setFormatter(JSONFormatter() if fmt == "json" else ContextTextFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
