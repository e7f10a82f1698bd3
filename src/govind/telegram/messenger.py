"""Outbound Telegram messaging via the Bot API.

Security: NEVER log chat_id or text. Only log hashes and lengths.
No retries here: one attempt per call, retry policy belongs to the caller.
"""

import http.client
import json
import urllib.error
import urllib.request
from typing import Any, Sequence

from govind.context import EMPTY_CONTEXT, RequestContext
from govind.errors import ConfigurationError, MessagingFailed
from govind.observability.logging import get_logger
from govind.observability.redaction import hash_identifier, safe_log_context

logger = get_logger(__name__)

DEFAULT_API_BASE_URL = "https://api.telegram.org"

# Timeout for HTTP requests (seconds)
HTTP_TIMEOUT = 10


def _do_request(url: str, data: bytes, headers: dict[str, str], timeout: float) -> dict[str, Any]:
    """Execute HTTP POST and decode the Bot API JSON reply.

    Bot API errors come back as 4xx with an ``{"ok": false, ...}`` body;
    that body is returned instead of raising so the description survives.
    """
    req = urllib.request.Request(url, data=data, headers=headers, method="POST")
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return json.loads(resp.read().decode())
    except urllib.error.HTTPError as e:
        try:
            body = json.loads(e.read().decode())
        except (ValueError, OSError):
            raise e
        if isinstance(body, dict) and "ok" in body:
            return body
        raise


class TelegramMessenger:
    """Bot API client for sendMessage and setWebhook."""

    def __init__(
        self,
        bot_token: str,
        api_base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = HTTP_TIMEOUT,
    ) -> None:
        self._bot_token = bot_token
        self._api_base_url = api_base_url.rstrip("/")
        self._timeout = timeout

    def _method_url(self, method: str) -> str:
        if not self._bot_token:
            raise ConfigurationError("TELEGRAM_BOT_TOKEN missing")
        return f"{self._api_base_url}/bot{self._bot_token}/{method}"

    def _call(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = self._method_url(method)
        data = json.dumps(payload).encode("utf-8")
        return _do_request(url, data, {"Content-Type": "application/json"}, self._timeout)

    def send(
        self,
        chat_id: int | str,
        text: str,
        context: RequestContext = EMPTY_CONTEXT,
    ) -> dict[str, Any]:
        """Send a text message.

        Args:
            chat_id: Telegram chat ID. NEVER logged.
            text: Message text. NEVER logged.
            context: Trace identifiers for logs.

        Returns:
            The Bot API ``result`` object (the sent Message).

        Raises:
            ConfigurationError: If the bot token is not configured.
            MessagingFailed: On transport errors or a non-ok reply.
        """
        log_ctx = {
            **context.log_fields(),
            **safe_log_context(chat_hash=hash_identifier(chat_id), text_len=len(text)),
        }

        try:
            body = self._call("sendMessage", {"chat_id": chat_id, "text": text})
        except (OSError, http.client.HTTPException, ValueError) as e:
            logger.error(
                "telegram send failed",
                extra={"extra_fields": {**log_ctx, "error_type": type(e).__name__}},
            )
            raise MessagingFailed(details=str(e)) from e

        if not isinstance(body, dict) or not body.get("ok"):
            description = (
                body.get("description") if isinstance(body, dict) else None
            ) or "Telegram API Error"
            logger.error(
                "telegram send rejected",
                extra={
                    "extra_fields": {
                        **log_ctx,
                        "description": description,
                    }
                },
            )
            raise MessagingFailed(details=description)

        logger.info("telegram message sent", extra={"extra_fields": log_ctx})
        return body.get("result") or {}

    def set_webhook(
        self,
        url: str,
        secret_token: str,
        allowed_updates: Sequence[str] = ("message", "edited_message"),
    ) -> dict[str, Any]:
        """Register the webhook URL. Returns the raw Bot API reply."""
        return self._call(
            "setWebhook",
            {
                "url": url,
                "secret_token": secret_token,
                "allowed_updates": list(allowed_updates),
            },
        )
