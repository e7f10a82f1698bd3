"""Redaction helpers. Anything derived from user input or provider replies
goes through ``safe_log_context`` before it reaches a log line.
"""

import hashlib
import re
from enum import Enum
from typing import Any

_REDACTED = "[REDACTED]"

# Ordered: credentials first so a token is never half-matched as a phone.
_PATTERNS = (
    # Telegram bot token, e.g. inside a Bot API URL
    re.compile(r"\b\d{6,12}:[A-Za-z0-9_-]{30,}"),
    # Google API key
    re.compile(r"AIza[0-9A-Za-z_-]{35}"),
    re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"),
    re.compile(r"\+?\d[\d\s\-()]{8,}\d"),
)


def hash_identifier(value: Any) -> str:
    """Short non-reversible tag for an identifier (first 12 hex of sha256)."""
    return hashlib.sha256(str(value).encode()).hexdigest()[:12]


def redact_string(value: str) -> str:
    """Mask credentials, emails and phone numbers in value."""
    for pattern in _PATTERNS:
        value = pattern.sub(_REDACTED, value)
    return value


def redact_value(value: Any) -> str:
    """String form of value that is safe to log.

    Containers are reduced to their shape: dict keys, sequence length.
    Unknown objects are reduced to their type name.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return redact_string(value)
    if isinstance(value, dict):
        return f"dict(keys={list(value.keys())})"
    if isinstance(value, (list, tuple, set)):
        return f"list(len={len(value)})"
    return f"<{type(value).__name__}>"


def safe_log_context(**kwargs: Any) -> dict[str, str]:
    """Build an ``extra_fields`` dict with every value passed through redact_value."""
    return {key: redact_value(value) for key, value in kwargs.items()}
