"""Runtime settings loaded once from the environment.

``load_settings()`` is called by ``create_app()`` at process start; the
resulting ``Settings`` instance is immutable and handed to every component
that needs it. Tests build ``Settings(...)`` directly.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

StoreBackend = Literal["memory", "postgres"]

DEFAULT_TELEGRAM_API_BASE_URL = "https://api.telegram.org"
DEFAULT_GEMINI_MODELS = ("gemini-2.5-flash",)

_DEV_ENVS = {"development", "test"}


@dataclass(frozen=True)
class Settings:
    """Service configuration.

    Attributes:
        app_env: development | test | staging | production.
        telegram_bot_token: Bot API credential. Required at first send.
        telegram_webhook_secret: Shared secret Telegram echoes on each delivery.
        telegram_api_base_url: Bot API base URL.
        telegram_timeout_seconds: Timeout for a single Bot API call.
        gemini_api_key: Google AI credential.
        gemini_models: Models tried in order until one answers.
        gemini_max_output_tokens: Reply length cap.
        gemini_timeout_seconds: Timeout for a single model call.
        database_url: Postgres DSN for the update store.
        store_backend: memory (dev/test only) or postgres.
        firebase_project_id: Firebase project whose ID tokens are accepted.
        region: Deployment region reported by the health check.
        public_base_url: Public URL the webhook is registered under.
        health_timeout_seconds: Upper bound for the store probe.
    """

    app_env: str = "development"
    telegram_bot_token: str = ""
    telegram_webhook_secret: str = ""
    telegram_api_base_url: str = DEFAULT_TELEGRAM_API_BASE_URL
    telegram_timeout_seconds: float = 10.0
    gemini_api_key: str = ""
    gemini_models: tuple[str, ...] = field(default=DEFAULT_GEMINI_MODELS)
    gemini_max_output_tokens: int = 800
    gemini_timeout_seconds: float = 30.0
    database_url: str = ""
    store_backend: StoreBackend = "memory"
    firebase_project_id: str = ""
    region: str = "local"
    public_base_url: str = ""
    health_timeout_seconds: float = 8.0

    @property
    def is_development(self) -> bool:
        return self.app_env in _DEV_ENVS

    def validate(self) -> list[str]:
        """Return configuration errors that make the process unusable."""
        errors: list[str] = []

        if self.store_backend not in ("memory", "postgres"):
            errors.append(f"STORE_BACKEND invalid: {self.store_backend}")
        if self.store_backend == "memory" and not self.is_development:
            errors.append(
                "STORE_BACKEND=memory is not allowed in staging/production. Use postgres."
            )
        if self.store_backend == "postgres" and not self.database_url:
            errors.append("STORE_BACKEND=postgres requires DATABASE_URL")
        if not self.gemini_models:
            errors.append("GEMINI_MODELS must list at least one model")
        if self.health_timeout_seconds <= 0:
            errors.append("HEALTH_TIMEOUT_SECONDS must be > 0")

        return errors


def _split_csv(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from environment variables."""
    env = os.environ if environ is None else environ

    backend = env.get("STORE_BACKEND", "").lower()
    if not backend:
        backend = "postgres" if env.get("DATABASE_URL") else "memory"

    models = _split_csv(env.get("GEMINI_MODELS", "")) or DEFAULT_GEMINI_MODELS

    return Settings(
        app_env=env.get("APP_ENV", "development").lower(),
        telegram_bot_token=env.get("TELEGRAM_BOT_TOKEN", ""),
        telegram_webhook_secret=env.get("TELEGRAM_WEBHOOK_SECRET", ""),
        telegram_api_base_url=env.get(
            "TELEGRAM_API_BASE_URL", DEFAULT_TELEGRAM_API_BASE_URL
        ).rstrip("/"),
        telegram_timeout_seconds=float(env.get("TELEGRAM_TIMEOUT_SECONDS", "10")),
        gemini_api_key=env.get("GEMINI_API_KEY", ""),
        gemini_models=models,
        gemini_max_output_tokens=int(env.get("GEMINI_MAX_OUTPUT_TOKENS", "800")),
        gemini_timeout_seconds=float(env.get("GEMINI_TIMEOUT_SECONDS", "30")),
        database_url=env.get("DATABASE_URL", ""),
        store_backend=backend,  # type: ignore[arg-type]
        firebase_project_id=env.get("FIREBASE_PROJECT_ID", ""),
        region=env.get("REGION", "local"),
        public_base_url=env.get("PUBLIC_BASE_URL", "").rstrip("/"),
        health_timeout_seconds=float(env.get("HEALTH_TIMEOUT_SECONDS", "8")),
    )
