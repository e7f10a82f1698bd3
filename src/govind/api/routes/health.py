"""Health check route.

Always answers 200. The envelope's success flag reports whether the store
answered within HEALTH_TIMEOUT_SECONDS; configuration is reported as
presence flags only, never values.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from govind.errors import ErrorCode
from govind.infra.time import utc_now
from govind.observability.logging import get_logger
from govind.observability.redaction import safe_log_context

from ..dependencies import Services, get_services
from ..envelope import failure, success

router = APIRouter(prefix="/api", tags=["health"])

logger = get_logger(__name__)


async def probe_store(services: Services) -> dict[str, Any]:
    """Ping the store, bounded by the configured timeout."""
    loop = asyncio.get_running_loop()
    started = time.perf_counter()
    try:
        # Abandoned on timeout; the worker thread finishes on its own.
        await asyncio.wait_for(
            loop.run_in_executor(services.probe_executor, services.store.ping),
            timeout=services.settings.health_timeout_seconds,
        )
    except asyncio.TimeoutError:
        return {"status": "timeout"}
    except Exception as exc:
        logger.warning(
            "health store probe failed",
            extra={"extra_fields": safe_log_context(error_type=type(exc).__name__)},
        )
        return {"status": "error", "error_type": type(exc).__name__}

    return {
        "status": "ok",
        "latency": round((time.perf_counter() - started) * 1000, 1),
    }


@router.get("/health")
async def health(services: Services = Depends(get_services)) -> JSONResponse:
    """Health check endpoint."""
    settings = services.settings
    diagnostics = {
        "timestamp": utc_now().isoformat(),
        "region": settings.region,
        "env": {
            "has_bot_token": bool(settings.telegram_bot_token),
            "has_webhook_secret": bool(settings.telegram_webhook_secret),
            "has_gemini_key": bool(settings.gemini_api_key),
            "has_database_url": bool(settings.database_url),
        },
        "db": await probe_store(services),
    }

    if diagnostics["db"]["status"] == "ok":
        return success(diagnostics)
    return failure(
        ErrorCode.STORAGE_UNAVAILABLE,
        "Storage check failed.",
        details=diagnostics,
        status_code=200,
    )
