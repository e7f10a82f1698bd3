"""Observability port for service-level events.

Services receive an ``EventSink`` at construction instead of writing to a
logger directly, so tests can assert on emitted events. Fields must already
be safe to log: IDs, counts, category tags. Never prompt or message text.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from .logging import get_logger


class EventSink(Protocol):
    def emit(self, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
        """Record one structured event."""


class LoggingEventSink:
    """EventSink that writes events as JSON log lines."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_logger("govind.events")

    def emit(self, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
        self._logger.log(level, event, extra={"extra_fields": {"event": event, **fields}})
