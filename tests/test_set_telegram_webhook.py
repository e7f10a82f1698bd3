"""Tests for scripts/set_telegram_webhook.py."""

from unittest.mock import patch

import pytest

from scripts import set_telegram_webhook

ENV = {
    "TELEGRAM_BOT_TOKEN": "123:abc",
    "TELEGRAM_WEBHOOK_SECRET": "s3cret",
    "PUBLIC_BASE_URL": "https://govind.example.com/",
}


@pytest.fixture
def env(monkeypatch):
    for key, value in ENV.items():
        monkeypatch.setenv(key, value)


def test_registers_webhook(env, capsys):
    with patch(
        "scripts.set_telegram_webhook.TelegramMessenger.set_webhook",
        return_value={"ok": True, "description": "Webhook was set"},
    ) as set_webhook:
        set_telegram_webhook.main()

    set_webhook.assert_called_once_with(
        "https://govind.example.com/api/v1/telegram/webhook",
        secret_token="s3cret",
        allowed_updates=("message", "edited_message"),
    )
    assert "Webhook was set" in capsys.readouterr().out


def test_missing_config_exits(monkeypatch, capsys):
    for key in ENV:
        monkeypatch.delenv(key, raising=False)
    with pytest.raises(SystemExit) as exc_info:
        set_telegram_webhook.main()
    assert exc_info.value.code == 1
    assert "TELEGRAM_BOT_TOKEN" in capsys.readouterr().out


def test_rejected_by_telegram_exits(env):
    with patch(
        "scripts.set_telegram_webhook.TelegramMessenger.set_webhook",
        return_value={"ok": False, "description": "bad webhook: HTTPS url must be provided"},
    ):
        with pytest.raises(SystemExit) as exc_info:
            set_telegram_webhook.main()
    assert exc_info.value.code == 1


def test_transport_failure_exits(env):
    with patch(
        "scripts.set_telegram_webhook.TelegramMessenger.set_webhook",
        side_effect=OSError("network unreachable"),
    ):
        with pytest.raises(SystemExit) as exc_info:
            set_telegram_webhook.main()
    assert exc_info.value.code == 1
