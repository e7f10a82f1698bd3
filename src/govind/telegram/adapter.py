"""Telegram Bot API adapter - validate and normalize webhook updates."""

from typing import Any

from govind.infra.time import from_unix_seconds

from .models import InboundUpdate


class InvalidUpdateError(Exception):
    """Raised when an update is malformed or carries no supported text."""

    pass


def _as_int(value: Any) -> int | None:
    # bool is an int subclass; Telegram never sends one for these fields
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def normalize(payload: Any) -> InboundUpdate:
    """Normalize a raw Telegram update into an InboundUpdate.

    Only ``message`` and ``edited_message`` updates with non-empty text are
    supported; everything else (photos, stickers, callback queries, channel
    posts) is rejected.

    Args:
        payload: Decoded JSON body of the webhook delivery.

    Returns:
        InboundUpdate with sender name and text (PII).

    Raises:
        InvalidUpdateError: If update_id is missing or there is no text message.
    """
    if not isinstance(payload, dict):
        raise InvalidUpdateError("update is not an object")

    update_id = _as_int(payload.get("update_id"))
    if update_id is None:
        raise InvalidUpdateError("missing or invalid update_id")

    edited = False
    message = payload.get("message")
    if not isinstance(message, dict) or not message.get("text"):
        message = payload.get("edited_message")
        edited = True
    if not isinstance(message, dict):
        raise InvalidUpdateError("no message or edited_message")

    text = message.get("text")
    if not isinstance(text, str) or not text.strip():
        raise InvalidUpdateError("message has no text")

    chat = message.get("chat")
    chat_id = _as_int(chat.get("id")) if isinstance(chat, dict) else None

    sender = message.get("from")
    sender_id = None
    sender_name = None
    if isinstance(sender, dict):
        sender_id = _as_int(sender.get("id"))
        sender_name = sender.get("first_name")

    date = _as_int(message.get("date"))

    return InboundUpdate(
        update_id=update_id,
        chat_id=chat_id,
        sender_id=sender_id,
        sender_name=sender_name,
        text=text,
        sent_at=from_unix_seconds(date) if date is not None else None,
        edited=edited,
    )
