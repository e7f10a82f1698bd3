"""Service container built once per app and shared read-only by requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from concurrent.futures import ThreadPoolExecutor

    from govind.ai.proxy import AIProxy
    from govind.api.auth import FirebaseTokenVerifier
    from govind.config import Settings
    from govind.infra.idempotency import IdempotencyStore
    from govind.observability.events import EventSink
    from govind.telegram.ingest import WebhookIngestor
    from govind.telegram.messenger import TelegramMessenger


@dataclass(frozen=True)
class Services:
    settings: Settings
    store: IdempotencyStore
    ingestor: WebhookIngestor
    messenger: TelegramMessenger
    ai_proxy: AIProxy
    verifier: FirebaseTokenVerifier
    events: EventSink
    # Store probes for the health route; kept off the loop's default executor,
    # which is joined at shutdown.
    probe_executor: ThreadPoolExecutor


def get_services(request: Request) -> Services:
    """FastAPI dependency: the app's service container."""
    return request.app.state.services
