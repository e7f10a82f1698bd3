"""Caller-side client for the backend API.

Every request carries a fresh X-Correlation-ID and, once a token is set, a
Firebase bearer token. Every failure, whether the server answered with an
error envelope, answered with something unreadable, or never answered,
surfaces as ``ApiError`` carrying an ``ErrorEnvelope``.
"""

from __future__ import annotations

from typing import Any

import requests

from govind.api.envelope import ErrorEnvelope
from govind.errors import ErrorCode
from govind.observability.correlation import CORRELATION_ID_HEADER, generate_correlation_id
from govind.observability.logging import get_logger
from govind.observability.redaction import safe_log_context

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30.0

NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."
UNEXPECTED_RESPONSE_MESSAGE = "Unexpected response from server."


class ApiError(Exception):
    """A failed API call, normalized to the server's error shape."""

    def __init__(self, error: ErrorEnvelope, status_code: int | None = None) -> None:
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code

    @property
    def code(self) -> ErrorCode:
        return self.error.code


def _error_code(raw: Any) -> ErrorCode:
    try:
        return ErrorCode(raw)
    except ValueError:
        return ErrorCode.INTERNAL_ERROR


class ApiClient:
    def __init__(
        self,
        base_url: str,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout
        self._auth_token: str | None = None

    def set_auth_token(self, token: str | None) -> None:
        """Set (or clear with None) the bearer token sent on later requests."""
        self._auth_token = token

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            CORRELATION_ID_HEADER: generate_correlation_id(),
        }
        if self._auth_token:
            headers["Authorization"] = f"Bearer {self._auth_token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the envelope's ``data``.

        Raises:
            ApiError: For any failure. ``code`` is NETWORK_ERROR when no
                response was received.
        """
        headers = self._headers()
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            response = self._session.request(
                method,
                url,
                json=json,
                params=params,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            if exc.response is None:
                logger.warning(
                    "api request failed without response",
                    extra={
                        "extra_fields": safe_log_context(
                            correlationId=headers[CORRELATION_ID_HEADER],
                            path=path,
                            error_type=type(exc).__name__,
                        )
                    },
                )
                raise ApiError(
                    ErrorEnvelope(
                        code=ErrorCode.NETWORK_ERROR,
                        message=NETWORK_ERROR_MESSAGE,
                        details=type(exc).__name__,
                    )
                ) from exc
            response = exc.response

        return self._unwrap(response)

    def _unwrap(self, response: requests.Response) -> Any:
        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict) or not isinstance(body.get("success"), bool):
            raise ApiError(
                ErrorEnvelope(
                    code=ErrorCode.INTERNAL_ERROR,
                    message=UNEXPECTED_RESPONSE_MESSAGE,
                    details={"status": response.status_code},
                ),
                status_code=response.status_code,
            )

        if body["success"]:
            return body.get("data")

        error = body.get("error") if isinstance(body.get("error"), dict) else {}
        message = error.get("message")
        raise ApiError(
            ErrorEnvelope(
                code=_error_code(error.get("code")),
                message=message if isinstance(message, str) and message else UNEXPECTED_RESPONSE_MESSAGE,
                details=error.get("details"),
            ),
            status_code=response.status_code,
        )

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)
