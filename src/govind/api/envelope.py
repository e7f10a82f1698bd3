"""Uniform response envelope for every HTTP response.

``{"success": bool, "data": T | null, "error": ErrorEnvelope | null}`` with
exactly one of ``data``/``error`` set, matching ``success``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Generic, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel, model_validator

from govind.errors import ErrorCode, ServiceError

T = TypeVar("T")


class ErrorEnvelope(BaseModel):
    code: ErrorCode
    message: str
    details: Any = None


class ApiEnvelope(BaseModel, Generic[T]):
    success: bool
    data: T | None = None
    error: ErrorEnvelope | None = None

    @model_validator(mode="after")
    def _exactly_one_of_data_or_error(self) -> "ApiEnvelope[T]":
        if self.success and (self.data is None or self.error is not None):
            raise ValueError("successful envelope needs data and no error")
        if not self.success and (self.error is None or self.data is not None):
            raise ValueError("failed envelope needs error and no data")
        return self


def success(data: Any, status_code: int = 200) -> JSONResponse:
    envelope = ApiEnvelope[Any](success=True, data=data)
    return JSONResponse(status_code=status_code, content=envelope.model_dump(mode="json"))


def failure(
    code: ErrorCode,
    message: str,
    details: Any = None,
    status_code: int = 500,
) -> JSONResponse:
    envelope = ApiEnvelope[Any](
        success=False,
        error=ErrorEnvelope(code=code, message=message, details=details),
    )
    return JSONResponse(status_code=status_code, content=envelope.model_dump(mode="json"))


def from_service_error(exc: ServiceError) -> JSONResponse:
    return failure(exc.code, exc.message, exc.details, status_code=exc.status_code)


def validation_message(errors: Sequence[Mapping[str, Any]]) -> str:
    """One-line summary of the first pydantic error, e.g. "Missing field: text"."""
    if not errors:
        return "Malformed request."
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid JSON body"
    loc = [str(part) for part in first.get("loc", ()) if part not in _LOC_ROOTS]
    name = ".".join(loc) or "body"
    if first.get("type") == "missing":
        return f"Missing field: {name}"
    return f"Invalid field: {name}"


_LOC_ROOTS = ("body", "query", "header", "path")
