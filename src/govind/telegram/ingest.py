"""Exactly-once ingestion of Telegram webhook updates.

RECEIVED -> VALIDATED -> {DUPLICATE | PERSISTED} -> DONE

The idempotency guard's insert carries the full record, so there is no
window in which an update is marked seen but not persisted. Storage errors
propagate so the webhook route can answer with a retryable status and let
Telegram redeliver; redelivery is safe because the insert is conditional.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Callable

from govind.infra.idempotency import IdempotencyStore
from govind.infra.time import utc_now
from govind.observability.events import EventSink, LoggingEventSink
from govind.observability.redaction import hash_identifier

from .adapter import InvalidUpdateError, normalize
from .models import ProcessedUpdateRecord


class IngestOutcome(str, Enum):
    IGNORED = "ignored"
    DUPLICATE = "duplicate"
    PERSISTED = "processed"


class WebhookIngestor:
    def __init__(
        self,
        store: IdempotencyStore,
        events: EventSink | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._events = events or LoggingEventSink()
        self._clock = clock

    def ingest(self, payload: Any) -> IngestOutcome:
        """Validate and persist one delivery.

        Returns:
            IGNORED for malformed or non-text updates, DUPLICATE when the
            update_id was already recorded, PERSISTED when this call
            created the record.

        Raises:
            StorageUnavailable: The store failed; the record may or may not exist.
        """
        try:
            update = normalize(payload)
        except InvalidUpdateError as exc:
            self._events.emit("telegram.update.ignored", reason=str(exc))
            return IngestOutcome.IGNORED

        record = ProcessedUpdateRecord.from_update(update, processed_at=self._clock())
        result = self._store.check_and_record(record.key, record.to_payload())

        if not result.was_new:
            self._events.emit("telegram.update.duplicate", update_id=update.update_id)
            return IngestOutcome.DUPLICATE

        self._events.emit(
            "telegram.update.processed",
            update_id=update.update_id,
            chat_hash=hash_identifier(update.chat_id) if update.chat_id is not None else None,
            text_len=len(update.text),
            edited=update.edited,
        )
        return IngestOutcome.PERSISTED
