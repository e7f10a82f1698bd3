"""AI proxy route."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from govind.context import RequestContext
from govind.observability.correlation import get_correlation_id

from ..auth import CurrentUser, get_current_user
from ..dependencies import Services, get_services
from ..envelope import success

router = APIRouter(prefix="/api/v1/ai", tags=["ai"])


class GeminiRequest(BaseModel):
    prompt: str
    # Mask detected data instead of rejecting the prompt
    sanitize: bool = False


@router.post("/gemini")
async def gemini_generate(
    body: GeminiRequest,
    services: Services = Depends(get_services),
    user: CurrentUser = Depends(get_current_user),
) -> JSONResponse:
    context = RequestContext(request_id=get_correlation_id(), uid=user.uid)
    text = await services.ai_proxy.generate(body.prompt, context, sanitize=body.sanitize)
    return success({"response": text})
