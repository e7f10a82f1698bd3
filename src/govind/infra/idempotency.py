"""Idempotency guard: atomic create-if-absent over a durable store.

``check_and_record(key, payload)`` either creates the record for ``key``
carrying ``payload`` and reports ``was_new=True``, or finds it already there
and changes nothing. There is no separate read step: the Postgres backend
relies on ``INSERT ... ON CONFLICT DO NOTHING`` so two concurrent deliveries
of the same key can never both observe ``was_new=True``.
"""

from __future__ import annotations

import copy
import json
import threading
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

import psycopg2
from psycopg2.extras import Json

from govind.config import Settings
from govind.errors import ConfigurationError, StorageUnavailable
from govind.observability.logging import get_logger
from govind.observability.redaction import safe_log_context

from . import db

logger = get_logger(__name__)


@dataclass(frozen=True)
class CheckResult:
    was_new: bool


class IdempotencyStore(Protocol):
    def check_and_record(self, key: str, payload: Mapping[str, Any]) -> CheckResult:
        """Create the record for key if absent. Raises StorageUnavailable."""

    def get(self, key: str) -> dict[str, Any] | None:
        """Return the stored payload for key, or None."""

    def ping(self) -> None:
        """Raise if the store is unreachable."""


class PostgresIdempotencyStore:
    """Store backed by the ``processed_updates`` table."""

    def __init__(self, dsn: str) -> None:
        self._dsn = dsn

    def check_and_record(self, key: str, payload: Mapping[str, Any]) -> CheckResult:
        try:
            with db.txn(self._dsn) as cur:
                cur.execute(
                    """
                    INSERT INTO processed_updates (key, payload)
                    VALUES (%s, %s)
                    ON CONFLICT (key) DO NOTHING
                    """,
                    (key, Json(dict(payload), dumps=_dumps)),
                )
                was_new = cur.rowcount == 1
        except psycopg2.Error as exc:
            logger.error(
                "idempotency store write failed",
                extra={
                    "extra_fields": safe_log_context(
                        key=key, error_type=type(exc).__name__
                    )
                },
            )
            raise StorageUnavailable(details=type(exc).__name__) from exc

        return CheckResult(was_new=was_new)

    def get(self, key: str) -> dict[str, Any] | None:
        try:
            with db.txn(self._dsn) as cur:
                cur.execute(
                    "SELECT payload, processed_at FROM processed_updates WHERE key = %s",
                    (key,),
                )
                row = cur.fetchone()
        except psycopg2.Error as exc:
            raise StorageUnavailable(details=type(exc).__name__) from exc

        if row is None:
            return None
        payload = dict(row[0])
        payload.setdefault("processedAt", row[1].isoformat())
        return payload

    def ping(self) -> None:
        db.ping(self._dsn)


class InMemoryIdempotencyStore:
    """Process-local store for development and tests.

    Atomic within one process only; never use behind more than one worker.
    """

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def check_and_record(self, key: str, payload: Mapping[str, Any]) -> CheckResult:
        with self._lock:
            if key in self._records:
                return CheckResult(was_new=False)
            self._records[key] = copy.deepcopy(dict(payload))
        return CheckResult(was_new=True)

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            record = self._records.get(key)
            return copy.deepcopy(record) if record is not None else None

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._records)

    def ping(self) -> None:
        return None


def _dumps(value: Any) -> str:
    return json.dumps(value, default=str)


def build_store(settings: Settings) -> IdempotencyStore:
    """Create the store selected by STORE_BACKEND."""
    if settings.store_backend == "postgres":
        if not settings.database_url:
            raise ConfigurationError("STORE_BACKEND=postgres requires DATABASE_URL")
        return PostgresIdempotencyStore(settings.database_url)
    if settings.store_backend == "memory":
        return InMemoryIdempotencyStore()
    raise ConfigurationError(f"Unknown STORE_BACKEND: {settings.store_backend}")
