"""Register the Telegram webhook for this deployment.

Usage:
    TELEGRAM_BOT_TOKEN=... TELEGRAM_WEBHOOK_SECRET=... PUBLIC_BASE_URL=https://... \
        python scripts/set_telegram_webhook.py

Telegram will POST updates to {PUBLIC_BASE_URL}/api/v1/telegram/webhook and
echo the secret in X-Telegram-Bot-Api-Secret-Token on every delivery.
"""

from __future__ import annotations

import sys

from govind.config import load_settings
from govind.errors import ConfigurationError
from govind.telegram.messenger import TelegramMessenger

WEBHOOK_PATH = "/api/v1/telegram/webhook"
ALLOWED_UPDATES = ("message", "edited_message")


def main() -> None:
    settings = load_settings()

    missing = [
        name
        for name, value in (
            ("TELEGRAM_BOT_TOKEN", settings.telegram_bot_token),
            ("TELEGRAM_WEBHOOK_SECRET", settings.telegram_webhook_secret),
            ("PUBLIC_BASE_URL", settings.public_base_url),
        )
        if not value
    ]
    if missing:
        print(f"ERROR: missing environment variables: {', '.join(missing)}")
        sys.exit(1)

    webhook_url = settings.public_base_url + WEBHOOK_PATH
    messenger = TelegramMessenger(
        bot_token=settings.telegram_bot_token,
        api_base_url=settings.telegram_api_base_url,
        timeout=settings.telegram_timeout_seconds,
    )

    print(f"Registering webhook: {webhook_url}")
    try:
        reply = messenger.set_webhook(
            webhook_url,
            secret_token=settings.telegram_webhook_secret,
            allowed_updates=ALLOWED_UPDATES,
        )
    except (OSError, ValueError, ConfigurationError) as e:
        print(f"ERROR: request failed: {e}")
        sys.exit(1)

    if not reply.get("ok"):
        print(f"ERROR: Telegram rejected the webhook: {reply.get('description')}")
        sys.exit(1)

    print(f"OK: {reply.get('description') or 'Webhook was set'}")


if __name__ == "__main__":
    main()
