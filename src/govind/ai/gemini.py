"""Gemini provider on the google-genai async client.

The client is built lazily on first call and then reused read-only.
Models are tried in order; the first non-empty answer wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from google import genai
from google.genai import types

from govind.errors import ConfigurationError
from govind.observability.logging import get_logger
from govind.observability.redaction import safe_log_context

logger = get_logger(__name__)


class ProviderError(Exception):
    """Raised when no configured model produced a usable answer."""

    def __init__(self, message: str, attempts: list[tuple[str, str]]) -> None:
        super().__init__(message)
        # (model, error summary) per failed attempt, for diagnostics only.
        self.attempts = attempts


@dataclass(frozen=True)
class ProviderReply:
    text: str
    model: str


class TextProvider(Protocol):
    async def generate(self, contents: str, system_instruction: str) -> ProviderReply:
        """Return the model's text reply. Raises on any provider failure."""


class GeminiProvider:
    def __init__(
        self,
        api_key: str,
        models: tuple[str, ...],
        max_output_tokens: int = 800,
        timeout_seconds: float = 30.0,
        client: genai.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._models = models
        self._max_output_tokens = max_output_tokens
        self._timeout_ms = int(timeout_seconds * 1000)
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError("GEMINI_API_KEY missing")
            self._client = genai.Client(
                api_key=self._api_key,
                http_options=types.HttpOptions(timeout=self._timeout_ms),
            )
        return self._client

    async def generate(self, contents: str, system_instruction: str) -> ProviderReply:
        client = self._get_client()
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            max_output_tokens=self._max_output_tokens,
        )

        attempts: list[tuple[str, str]] = []
        for model in self._models:
            try:
                response = await client.aio.models.generate_content(
                    model=model,
                    contents=contents,
                    config=config,
                )
                text = response.text
            except Exception as e:
                attempts.append((model, f"{type(e).__name__}: {e}"))
                logger.warning(
                    "gemini model failed",
                    extra={
                        "extra_fields": safe_log_context(
                            model=model, error_type=type(e).__name__
                        )
                    },
                )
                continue

            if text:
                return ProviderReply(text=text, model=model)
            attempts.append((model, "empty response"))

        raise ProviderError("all Gemini models failed", attempts)
