"""UTC timestamp helpers. Every datetime the service stores is timezone-aware."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def from_unix_seconds(seconds: int) -> datetime:
    """Convert a Unix timestamp (as sent by the Bot API) to an aware UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc)
