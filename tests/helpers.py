"""Plain helpers and fakes shared by conftest.py and the test modules."""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import jwt
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm

from govind.ai.gemini import ProviderReply
from govind.config import Settings

TEST_PROJECT_ID = "govind-test"
TEST_WEBHOOK_SECRET = "test-webhook-secret"
TEST_KID = "test-key-1"


def _generate_rsa_keypair():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return private_key, private_key.public_key()


def _create_jwks(public_key, kid: str = TEST_KID) -> dict:
    """JWKS document publishing public_key under kid."""
    jwk = json.loads(RSAAlgorithm.to_jwk(public_key))
    jwk.update({"kid": kid, "use": "sig", "alg": "RS256"})
    return {"keys": [jwk]}


def _create_token(
    private_key,
    kid: str = TEST_KID,
    sub: str = "user-123",
    project_id: str = TEST_PROJECT_ID,
    iss: str | None = None,
    aud: str | None = None,
    exp: int | None = None,
    email: str | None = None,
) -> str:
    """Signed ID token shaped like Firebase's; override claims to break it."""
    issued_at = int(time.time())
    claims: dict[str, Any] = {
        "sub": sub,
        "iat": issued_at,
        "exp": issued_at + 3600 if exp is None else exp,
        "iss": iss if iss is not None else f"https://securetoken.google.com/{project_id}",
        "aud": aud if aud is not None else project_id,
    }
    if email:
        claims["email"] = email
    return jwt.encode(claims, private_key, algorithm="RS256", headers={"kid": kid})


def make_settings(**overrides: Any) -> Settings:
    """Settings for tests: memory store, all credentials present."""
    values: dict[str, Any] = {
        "app_env": "test",
        "telegram_bot_token": "123:test-token",
        "telegram_webhook_secret": TEST_WEBHOOK_SECRET,
        "gemini_api_key": "test-gemini-key",
        "store_backend": "memory",
        "firebase_project_id": TEST_PROJECT_ID,
        "health_timeout_seconds": 1.0,
    }
    values.update(overrides)
    return Settings(**values)


def make_update(
    update_id: int = 1001,
    text: str = "hello",
    chat_id: int = 42,
    edited: bool = False,
) -> dict:
    """Build a Telegram text-message update."""
    message = {
        "message_id": 7,
        "from": {"id": 99, "is_bot": False, "first_name": "Asha"},
        "chat": {"id": chat_id, "type": "private"},
        "date": 1760000000,
        "text": text,
    }
    return {
        "update_id": update_id,
        "edited_message" if edited else "message": message,
    }


class LogRecorder:
    """Simple recorder to capture log calls deterministically."""

    def __init__(self):
        self.calls: list[tuple[str, tuple, dict]] = []

    def _record(self, level: str, *args, **kwargs):
        self.calls.append((level, args, kwargs))

    def info(self, *args, **kwargs):
        self._record("info", *args, **kwargs)

    def warning(self, *args, **kwargs):
        self._record("warning", *args, **kwargs)

    def error(self, *args, **kwargs):
        self._record("error", *args, **kwargs)

    def exception(self, *args, **kwargs):
        self._record("exception", *args, **kwargs)

    def debug(self, *args, **kwargs):
        self._record("debug", *args, **kwargs)

    def get_all_logged_content(self) -> str:
        """Concatenate all args and kwargs from all calls into one string."""
        parts = []
        for _, args, kwargs in self.calls:
            parts.append(str(args))
            parts.append(str(kwargs))
        return " ".join(parts)

    def extra_fields(self, level: str) -> list[dict]:
        return [
            kwargs.get("extra", {}).get("extra_fields", {})
            for lvl, _, kwargs in self.calls
            if lvl == level
        ]


class RecordingEventSink:
    """EventSink that keeps events in memory."""

    def __init__(self):
        self.events: list[tuple[str, int, dict]] = []

    def emit(self, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
        self.events.append((event, level, fields))

    def names(self) -> list[str]:
        return [name for name, _, _ in self.events]

    def fields_for(self, event: str) -> dict:
        for name, _, fields in self.events:
            if name == event:
                return fields
        raise KeyError(event)

    def dump(self) -> str:
        return repr(self.events)


class FakeProvider:
    """TextProvider returning a canned reply, or raising."""

    def __init__(self, reply: str = "Hello from Govind.", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def generate(self, contents: str, system_instruction: str) -> ProviderReply:
        self.calls.append((contents, system_instruction))
        if self.error is not None:
            raise self.error
        return ProviderReply(text=self.reply, model="fake-model")
