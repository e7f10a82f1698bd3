"""Health endpoint tests."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

import psycopg2
from fastapi.testclient import TestClient

from govind.api.factory import build_services, create_app
from govind.infra.idempotency import InMemoryIdempotencyStore

from .helpers import make_settings


class SlowStore(InMemoryIdempotencyStore):
    """Store whose ping blocks until released."""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()

    def ping(self) -> None:
        self.release.wait(timeout=10)


class BrokenStore(InMemoryIdempotencyStore):
    def ping(self) -> None:
        raise psycopg2.OperationalError("could not connect to server")


def _client(store, **settings_overrides) -> TestClient:
    settings = make_settings(**settings_overrides)
    return TestClient(create_app(services=build_services(settings, store=store)))


def test_health_ok(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["error"] is None
    assert body["data"]["db"]["status"] == "ok"
    assert body["data"]["region"] == "local"
    assert body["data"]["env"] == {
        "has_bot_token": True,
        "has_webhook_secret": True,
        "has_gemini_key": True,
        "has_database_url": False,
    }


def test_health_reports_latency(client):
    db = client.get("/api/health").json()["data"]["db"]
    assert set(db) == {"status", "latency"}
    assert db["latency"] >= 0


def test_health_probe_runs_on_service_executor():
    """The store is pinged on the container's probe executor."""
    thread_names = []

    class RecordingStore(InMemoryIdempotencyStore):
        def ping(self) -> None:
            thread_names.append(threading.current_thread().name)

    services = build_services(make_settings(), store=RecordingStore())
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="govind-test-probe")
    try:
        client = TestClient(create_app(services=replace(services, probe_executor=executor)))
        assert client.get("/api/health").json()["success"] is True
    finally:
        executor.shutdown(wait=True)

    assert len(thread_names) == 1
    assert thread_names[0].startswith("govind-test-probe")


def test_each_container_gets_its_own_executor():
    first = build_services(make_settings())
    second = build_services(make_settings())
    assert first.probe_executor is not second.probe_executor


def test_health_reports_no_secret_values(client):
    response = client.get("/api/health")
    assert "123:test-token" not in response.text
    assert "test-gemini-key" not in response.text


def test_health_timeout_bound():
    """A hung store is reported as a failure within the timeout bound."""
    store = SlowStore()
    client = _client(store, health_timeout_seconds=0.3)
    try:
        started = time.monotonic()
        response = client.get("/api/health")
        elapsed = time.monotonic() - started
    finally:
        store.release.set()

    assert elapsed < 3
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["error"]["code"] == "STORAGE_UNAVAILABLE"
    assert body["error"]["details"]["db"] == {"status": "timeout"}


def test_health_store_error():
    response = _client(BrokenStore()).get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["error"]["details"]["db"] == {
        "status": "error",
        "error_type": "OperationalError",
    }
    assert "could not connect" not in response.text


def test_wrong_method():
    response = _client(InMemoryIdempotencyStore()).post("/api/health")
    assert response.status_code == 405
    assert response.json()["error"]["code"] == "METHOD_NOT_ALLOWED"
