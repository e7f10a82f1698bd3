"""Telegram routes: inbound webhook and authenticated outbound send.

Security:
- Webhook deliveries must echo TELEGRAM_WEBHOOK_SECRET (fail-closed)
- chat_id and text are never logged, only hashes and lengths
"""

from __future__ import annotations

import hmac
from typing import Any

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError
from starlette.concurrency import run_in_threadpool

from govind.context import RequestContext
from govind.errors import AuthRequired, BadRequest
from govind.observability.correlation import get_correlation_id
from govind.observability.logging import get_logger
from govind.observability.redaction import safe_log_context

from ..auth import CurrentUser, authenticate, get_current_user
from ..dependencies import Services, get_services
from ..envelope import success, validation_message

router = APIRouter(prefix="/api/v1/telegram", tags=["telegram"])

logger = get_logger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


class SendMessageRequest(BaseModel):
    chatId: int | str
    text: str = Field(min_length=1)


def _check_webhook_secret(services: Services, received: str | None) -> None:
    expected = services.settings.telegram_webhook_secret
    if not expected:
        logger.error(
            "TELEGRAM_WEBHOOK_SECRET not configured - rejecting webhook (fail-closed)",
            extra={"extra_fields": safe_log_context(correlationId=get_correlation_id())},
        )
        raise AuthRequired("Webhook not authorized")
    if not received or not hmac.compare_digest(received, expected):
        logger.warning(
            "telegram webhook secret mismatch",
            extra={"extra_fields": safe_log_context(correlationId=get_correlation_id())},
        )
        raise AuthRequired("Webhook not authorized")


async def _handle_webhook(
    request: Request, services: Services, secret: str | None
) -> JSONResponse:
    _check_webhook_secret(services, secret)

    try:
        payload: Any = await request.json()
    except ValueError:
        logger.warning(
            "invalid json body",
            extra={"extra_fields": safe_log_context(correlationId=get_correlation_id())},
        )
        return success({"status": "ignored"})

    # StorageUnavailable propagates as 503 so Telegram redelivers
    outcome = await run_in_threadpool(services.ingestor.ingest, payload)
    return success({"status": outcome.value})


async def _handle_send(
    body: SendMessageRequest, services: Services, user: CurrentUser
) -> JSONResponse:
    context = RequestContext(request_id=get_correlation_id(), uid=user.uid)
    result = await run_in_threadpool(
        services.messenger.send, body.chatId, body.text, context
    )
    return success(result)


@router.post("/webhook")
async def telegram_webhook(
    request: Request,
    services: Services = Depends(get_services),
    x_telegram_bot_api_secret_token: str | None = Header(None, alias=SECRET_HEADER),
) -> JSONResponse:
    """Receive one Telegram update.

    Returns 200 with status processed, duplicate or ignored. Anything that
    cannot be processed (bad JSON, unsupported update) is acknowledged so
    Telegram stops redelivering it.
    """
    return await _handle_webhook(request, services, x_telegram_bot_api_secret_token)


@router.post("/send")
async def telegram_send(
    body: SendMessageRequest,
    services: Services = Depends(get_services),
    user: CurrentUser = Depends(get_current_user),
) -> JSONResponse:
    """Send a text message to a chat on behalf of the authenticated user."""
    return await _handle_send(body, services, user)


@router.post("")
async def telegram_action(
    request: Request,
    action: str = Query(...),
    services: Services = Depends(get_services),
    x_telegram_bot_api_secret_token: str | None = Header(None, alias=SECRET_HEADER),
) -> JSONResponse:
    """Single entry point dispatching on ``?action=send|webhook``."""
    if action == "webhook":
        return await _handle_webhook(request, services, x_telegram_bot_api_secret_token)
    if action != "send":
        raise BadRequest(f"Unknown action: {action}")

    user = await authenticate(request, services)
    try:
        body = SendMessageRequest.model_validate(await request.json())
    except ValueError as exc:
        errors = exc.errors() if isinstance(exc, ValidationError) else []
        raise BadRequest(validation_message(errors) if errors else "Invalid JSON body")
    return await _handle_send(body, services, user)
