"""Error taxonomy shared by every boundary of the service.

Every failure that crosses a route, a service or the API client is a
``ServiceError`` carrying one ``ErrorCode``. Subclasses pin the code so
callers can ``except`` on the kind of failure instead of inspecting strings.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    BAD_REQUEST = "BAD_REQUEST"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    NOT_FOUND = "NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    SECURITY_VIOLATION = "SECURITY_VIOLATION"
    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_UNAVAILABLE = "AUTH_UNAVAILABLE"
    AI_TEMPORARILY_UNAVAILABLE = "AI_TEMPORARILY_UNAVAILABLE"
    MESSAGING_FAILED = "MESSAGING_FAILED"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    NETWORK_ERROR = "NETWORK_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# HTTP status returned when a ServiceError reaches the API boundary.
HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.METHOD_NOT_ALLOWED: 405,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.SECURITY_VIOLATION: 422,
    ErrorCode.AUTH_REQUIRED: 401,
    ErrorCode.AUTH_UNAVAILABLE: 503,
    ErrorCode.AI_TEMPORARILY_UNAVAILABLE: 503,
    ErrorCode.MESSAGING_FAILED: 502,
    ErrorCode.STORAGE_UNAVAILABLE: 503,
    ErrorCode.NETWORK_ERROR: 503,
    ErrorCode.INTERNAL_ERROR: 500,
}

# Codes a caller may retry later without changing the request.
RETRYABLE: frozenset[ErrorCode] = frozenset(
    {
        ErrorCode.AUTH_UNAVAILABLE,
        ErrorCode.AI_TEMPORARILY_UNAVAILABLE,
        ErrorCode.MESSAGING_FAILED,
        ErrorCode.STORAGE_UNAVAILABLE,
        ErrorCode.NETWORK_ERROR,
    }
)


class ServiceError(Exception):
    """Failure with a taxonomy code, a caller-safe message and optional details."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    default_message = "An unexpected error occurred. Please try again later."

    def __init__(
        self,
        message: str | None = None,
        *,
        code: ErrorCode | None = None,
        details: Any = None,
    ) -> None:
        if code is not None:
            self.code = code
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS.get(self.code, 500)

    @property
    def retryable(self) -> bool:
        return self.code in RETRYABLE

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value!r}, message={self.message!r})"


class BadRequest(ServiceError):
    code = ErrorCode.BAD_REQUEST
    default_message = "Malformed request."


class InvalidInput(ServiceError):
    code = ErrorCode.INVALID_INPUT
    default_message = "The provided prompt was empty or contained only illegal characters."


class SecurityViolation(ServiceError):
    code = ErrorCode.SECURITY_VIOLATION
    default_message = "Raw sensitive data cannot be sent to the AI provider."


class AuthRequired(ServiceError):
    code = ErrorCode.AUTH_REQUIRED
    default_message = "Authorization Bearer token required."


class AuthUnavailable(ServiceError):
    code = ErrorCode.AUTH_UNAVAILABLE
    default_message = "Auth temporarily unavailable."


class AITemporarilyUnavailable(ServiceError):
    code = ErrorCode.AI_TEMPORARILY_UNAVAILABLE
    default_message = (
        "I am having trouble reaching my brain right now. Please try again in a moment."
    )


class MessagingFailed(ServiceError):
    code = ErrorCode.MESSAGING_FAILED
    default_message = "Failed to send Telegram message."


class StorageUnavailable(ServiceError):
    code = ErrorCode.STORAGE_UNAVAILABLE
    default_message = "Storage temporarily unavailable."


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing. Indicates misdeployment."""
