"""JSON log lines tagged with the request's correlation ID and user.

One line per record on stdout:
``{"timestamp", "level", "logger", "message", "correlationId"?, "uid"?, ...extra_fields}``.
Callers attach structured data with ``extra={"extra_fields": {...}}``; values
must already be safe (see ``redaction``).
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

from .correlation import get_correlation_id, get_user_id

LOG_LEVEL_ENV = "LOG_LEVEL"


def _request_fields() -> dict[str, str]:
    fields = {}
    if cid := get_correlation_id():
        fields["correlationId"] = cid
    if uid := get_user_id():
        fields["uid"] = uid
    return fields


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_request_fields(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            entry.update(extra_fields)

        return json.dumps(entry, default=str)


def get_logger(name: str) -> logging.Logger:
    """Return a logger writing JSON to stdout at LOG_LEVEL (default INFO)."""
    logger = logging.getLogger(name)

    # Configured once per name; later calls reuse the handler
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(os.environ.get(LOG_LEVEL_ENV, "INFO").upper())
        logger.propagate = False

    return logger
