"""FastAPI application factory.

Settings are loaded and validated once; services are built once and stored
on ``app.state`` for the lifetime of the process. Every response, including
framework errors and unhandled exceptions, leaves in the envelope shape.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from govind.ai.gemini import GeminiProvider, TextProvider
from govind.ai.proxy import AIProxy
from govind.config import Settings, load_settings
from govind.errors import ConfigurationError, ErrorCode, ServiceError
from govind.infra.idempotency import IdempotencyStore, build_store
from govind.observability.correlation import (
    CORRELATION_ID_HEADER,
    correlation_id_from,
    reset_correlation_id,
    set_correlation_id,
)
from govind.observability.events import EventSink, LoggingEventSink
from govind.observability.logging import get_logger
from govind.observability.redaction import safe_log_context
from govind.privacy.boundary import PrivacyBoundary
from govind.telegram.ingest import WebhookIngestor
from govind.telegram.messenger import TelegramMessenger

from .auth import FirebaseTokenVerifier
from .dependencies import Services
from .envelope import failure, from_service_error, validation_message
from .routes import ai, health, telegram

logger = get_logger(__name__)

_HTTP_ERROR_CODES = {
    401: ErrorCode.AUTH_REQUIRED,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.METHOD_NOT_ALLOWED,
    503: ErrorCode.AUTH_UNAVAILABLE,
}


def build_services(
    settings: Settings,
    *,
    store: IdempotencyStore | None = None,
    messenger: TelegramMessenger | None = None,
    provider: TextProvider | None = None,
    verifier: FirebaseTokenVerifier | None = None,
    events: EventSink | None = None,
) -> Services:
    """Wire every service from settings. Keyword overrides replace a part."""
    events = events or LoggingEventSink()
    store = store or build_store(settings)
    provider = provider or GeminiProvider(
        api_key=settings.gemini_api_key,
        models=settings.gemini_models,
        max_output_tokens=settings.gemini_max_output_tokens,
        timeout_seconds=settings.gemini_timeout_seconds,
    )
    return Services(
        settings=settings,
        store=store,
        ingestor=WebhookIngestor(store, events=events),
        messenger=messenger
        or TelegramMessenger(
            bot_token=settings.telegram_bot_token,
            api_base_url=settings.telegram_api_base_url,
            timeout=settings.telegram_timeout_seconds,
        ),
        ai_proxy=AIProxy(provider, PrivacyBoundary(events=events), events=events),
        verifier=verifier or FirebaseTokenVerifier(settings.firebase_project_id),
        events=events,
        probe_executor=ThreadPoolExecutor(max_workers=4, thread_name_prefix="health-probe"),
    )


def _http_error_code(status_code: int) -> ErrorCode:
    if status_code in _HTTP_ERROR_CODES:
        return _HTTP_ERROR_CODES[status_code]
    return ErrorCode.INTERNAL_ERROR if status_code >= 500 else ErrorCode.BAD_REQUEST


def create_app(
    settings: Settings | None = None, *, services: Services | None = None
) -> FastAPI:
    """Create the FastAPI app.

    Args:
        settings: Explicit settings. If None, read from the environment.
        services: Prebuilt services (tests). If None, built from settings.

    Raises:
        ConfigurationError: Settings are unusable (e.g. memory store in production).
    """
    if settings is None:
        settings = services.settings if services is not None else load_settings()

    errors = settings.validate()
    if errors:
        for err in errors:
            logger.error("invalid configuration", extra={"extra_fields": {"error": err}})
        raise ConfigurationError("; ".join(errors))

    app = FastAPI(
        title="Govind Backend",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.services = services or build_services(settings)

    # Correlation ID middleware; also the last line for unhandled exceptions
    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        cid = correlation_id_from(request)
        token = set_correlation_id(cid)
        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.exception(
                    "unhandled exception",
                    extra={
                        "extra_fields": safe_log_context(
                            correlationId=cid,
                            path=request.url.path,
                            error_type=type(exc).__name__,
                        )
                    },
                )
                details = (
                    {"error_type": type(exc).__name__, "error": str(exc)}
                    if settings.is_development
                    else None
                )
                response = failure(
                    ErrorCode.INTERNAL_ERROR,
                    "An unexpected error occurred. Please try again later.",
                    details=details,
                    status_code=500,
                )
            response.headers[CORRELATION_ID_HEADER] = cid
            return response
        finally:
            reset_correlation_id(token)

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> Response:
        if exc.status_code >= 500:
            logger.warning(
                "request failed",
                extra={
                    "extra_fields": safe_log_context(
                        path=request.url.path, code=exc.code.value
                    )
                },
            )
        return from_service_error(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> Response:
        return failure(
            ErrorCode.BAD_REQUEST, validation_message(exc.errors()), status_code=400
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed."
        response = failure(
            _http_error_code(exc.status_code), message, status_code=exc.status_code
        )
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    app.include_router(health.router)
    app.include_router(telegram.router)
    app.include_router(ai.router)

    return app
