"""Guarded AI proxy.

Order of operations for every prompt:

1. normalize; empty -> INVALID_INPUT
2. privacy boundary (enforce, or sanitize then enforce); breach -> SECURITY_VIOLATION
3. provider call with the fixed system instruction
4. provider failure -> AI_TEMPORARILY_UNAVAILABLE, detail kept in logs only

Nothing reaches the provider before step 2 passes.
"""

from __future__ import annotations

import logging

from govind.context import EMPTY_CONTEXT, RequestContext
from govind.errors import AITemporarilyUnavailable, ConfigurationError, InvalidInput
from govind.observability.events import EventSink, LoggingEventSink
from govind.observability.logging import get_logger
from govind.privacy.boundary import PrivacyBoundary

from .gemini import ProviderError, TextProvider
from .prompts import SYSTEM_INSTRUCTION, normalize_prompt, wrap_user_prompt

logger = get_logger(__name__)


class AIProxy:
    def __init__(
        self,
        provider: TextProvider,
        boundary: PrivacyBoundary,
        events: EventSink | None = None,
    ) -> None:
        self._provider = provider
        self._boundary = boundary
        self._events = events or LoggingEventSink()

    async def generate(
        self,
        prompt: str,
        context: RequestContext = EMPTY_CONTEXT,
        *,
        sanitize: bool = False,
    ) -> str:
        """Return the model's reply to prompt.

        Args:
            prompt: User prompt. Never logged.
            context: Trace identifiers attached to every log entry.
            sanitize: Mask sensitive data instead of rejecting it.

        Raises:
            InvalidInput: Prompt is empty after normalization.
            SecurityViolation: Sensitive data detected (or left after masking).
            AITemporarilyUnavailable: The provider failed.
        """
        clean = normalize_prompt(prompt or "")
        if not clean:
            raise InvalidInput()

        if sanitize:
            clean = self._boundary.protect(clean, context).sanitized_text
        else:
            self._boundary.enforce(clean, context)

        try:
            reply = await self._provider.generate(wrap_user_prompt(clean), SYSTEM_INSTRUCTION)
        except ConfigurationError:
            raise
        except Exception as e:
            attempts = e.attempts if isinstance(e, ProviderError) else []
            logger.error(
                "gemini service failure",
                exc_info=True,
                extra={
                    "extra_fields": {
                        **context.log_fields(),
                        "error_type": type(e).__name__,
                        "error": str(e),
                        "attempts": attempts,
                    }
                },
            )
            self._events.emit(
                "ai.generate.failed",
                level=logging.ERROR,
                error_type=type(e).__name__,
                prompt_len=len(clean),
                **context.log_fields(),
            )
            raise AITemporarilyUnavailable() from e

        self._events.emit(
            "ai.generate.succeeded",
            model=reply.model,
            prompt_len=len(clean),
            response_len=len(reply.text),
            **context.log_fields(),
        )
        return reply.text
