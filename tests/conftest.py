"""Shared pytest fixtures for Govind backend tests."""
import sys
sys.dont_write_bytecode = True

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from govind.api.auth import FirebaseTokenVerifier  # noqa: E402
from govind.api.factory import build_services, create_app  # noqa: E402
from govind.infra.idempotency import InMemoryIdempotencyStore  # noqa: E402

from .helpers import (  # noqa: E402
    FakeProvider,
    RecordingEventSink,
    _create_jwks,
    _create_token,
    _generate_rsa_keypair,
    make_settings,
)


@pytest.fixture(scope="session")
def rsa_keypair():
    """RSA key pair shared by the session (generation is slow)."""
    return _generate_rsa_keypair()


@pytest.fixture
def verifier(rsa_keypair):
    """Firebase verifier whose JWKS fetch returns the test key."""
    _, public_key = rsa_keypair
    v = FirebaseTokenVerifier("govind-test")
    v._fetch_jwks = MagicMock(return_value=_create_jwks(public_key))
    return v


@pytest.fixture
def auth_headers(rsa_keypair):
    private_key, _ = rsa_keypair
    return {"Authorization": f"Bearer {_create_token(private_key)}"}


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def store():
    return InMemoryIdempotencyStore()


@pytest.fixture
def events():
    return RecordingEventSink()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def messenger():
    mock = MagicMock()
    mock.send.return_value = {"message_id": 555, "chat": {"id": 42}}
    return mock


@pytest.fixture
def services(settings, store, events, provider, messenger, verifier):
    return build_services(
        settings,
        store=store,
        messenger=messenger,
        provider=provider,
        verifier=verifier,
        events=events,
    )


@pytest.fixture
def client(services):
    """Test client over an app wired with in-memory fakes."""
    return TestClient(create_app(services=services))
