"""Correlation ID management for request tracing."""

import uuid
from contextvars import ContextVar, Token

from starlette.requests import Request

# Context variable for correlation ID - accessible across async calls
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_ID_HEADER = "X-Correlation-ID"
# Accepted on input for callers that still send the older header name.
REQUEST_ID_HEADER = "X-Request-ID"


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return f"req-{uuid.uuid4().hex}"


def correlation_id_from(request: Request) -> str:
    """Return the caller-supplied correlation ID, or a fresh one."""
    return (
        request.headers.get(CORRELATION_ID_HEADER)
        or request.headers.get(REQUEST_ID_HEADER)
        or generate_correlation_id()
    )


def get_correlation_id() -> str:
    """Get current correlation ID from context."""
    return correlation_id_var.get()


def set_correlation_id(cid: str) -> Token[str]:
    """Set correlation ID in context."""
    return correlation_id_var.set(cid)


def reset_correlation_id(token: Token[str]) -> None:
    """Reset correlation ID to previous value."""
    correlation_id_var.reset(token)


# Authenticated Firebase UID for the current request, when known.
user_id_var: ContextVar[str] = ContextVar("user_id", default="")


def get_user_id() -> str:
    """Get the authenticated user ID from context."""
    return user_id_var.get()


def set_user_id(uid: str) -> Token[str]:
    """Set the authenticated user ID in context."""
    return user_id_var.set(uid)
