"""JSON line logging with request correlation and session context."""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

CORRELATION_ID_CTX: ContextVar[str] = ContextVar("correlation_id", default="")

# Extras copied from ``logger.info(..., extra={...})`` into the JSON line.
CONTEXT_FIELDS = (
    "session_id",
    "scan_state",
    "document_type",
    "path",
    "method",
    "status_code",
)


class JsonLogFormatter(logging.Formatter):
    """Render each record as one compact JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        correlation_id = CORRELATION_ID_CTX.get()
        if correlation_id:
            entry["correlation_id"] = correlation_id

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value not in (None, ""):
                entry[name] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO") -> None:
    """Route all records through a single stdout JSON handler."""
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonLogFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.addHandler(handler)


def set_correlation_id(correlation_id: str) -> None:
    CORRELATION_ID_CTX.set(correlation_id)
