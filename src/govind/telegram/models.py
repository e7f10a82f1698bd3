"""Telegram update models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


def update_key(update_id: int) -> str:
    """Idempotency key for an update: ``update_{update_id}``."""
    return f"update_{update_id}"


@dataclass(frozen=True)
class InboundUpdate:
    """Text message normalized from a Telegram webhook delivery.

    Contains PII (sender name, text). Never log it; log update_id and
    hashes only.
    """

    update_id: int
    chat_id: int | None
    sender_id: int | None
    sender_name: str | None
    text: str
    sent_at: datetime | None
    edited: bool = False


@dataclass(frozen=True)
class ProcessedUpdateRecord:
    """Row persisted once per update_id by the idempotency guard."""

    update_id: int
    processed_at: datetime
    chat_id: int | None
    sender_id: int | None
    sender_name: str | None
    text: str
    sent_at: datetime | None

    @property
    def key(self) -> str:
        return update_key(self.update_id)

    @classmethod
    def from_update(cls, update: InboundUpdate, processed_at: datetime) -> "ProcessedUpdateRecord":
        return cls(
            update_id=update.update_id,
            processed_at=processed_at,
            chat_id=update.chat_id,
            sender_id=update.sender_id,
            sender_name=update.sender_name,
            text=update.text,
            sent_at=update.sent_at,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "processedAt": self.processed_at.isoformat(),
            "chatId": self.chat_id,
            "senderId": self.sender_id,
            "senderName": self.sender_name,
            "text": self.text,
            "sentAt": self.sent_at.isoformat() if self.sent_at else None,
        }
