"""Replace sensitive spans with opaque placeholders."""

from __future__ import annotations

from collections.abc import Sequence

from govind.errors import SecurityViolation

from .detector import Detector
from .entities import SanitizedResult, SensitiveSpan, placeholder_for

# Masking can expose a neighbouring match; repeat until clean, at most MAX_PASSES times.
MAX_PASSES = 5


def mask_spans(text: str, spans: Sequence[SensitiveSpan]) -> str:
    """Replace spans back to front so earlier offsets stay valid."""
    result = text
    last_start = len(text) + 1
    for span in sorted(spans, key=lambda s: s.start, reverse=True):
        if span.end > last_start:
            # Overlaps a span already masked.
            continue
        result = result[: span.start] + placeholder_for(span.type) + result[span.end :]
        last_start = span.start
    return result


class Sanitizer:
    """Masks detected spans until the detector reports nothing."""

    def __init__(self, detector: Detector, max_passes: int = MAX_PASSES) -> None:
        self._detector = detector
        self._max_passes = max_passes

    def sanitize(self, text: str, spans: Sequence[SensitiveSpan]) -> SanitizedResult:
        """Mask spans in text.

        Returns:
            SanitizedResult whose text re-detects as empty. ``entities`` are
            the spans given by the caller, ordered by start.

        Raises:
            SecurityViolation: If the text cannot be made clean.
        """
        sanitized = mask_spans(text, spans)
        residual = self._detector.detect(sanitized)
        passes = 1
        while residual:
            if passes >= self._max_passes:
                raise SecurityViolation(
                    "Prompt could not be sanitized.",
                    details={"entity_types": sorted({s.type.value for s in residual})},
                )
            sanitized = mask_spans(sanitized, residual)
            residual = self._detector.detect(sanitized)
            passes += 1

        return SanitizedResult(
            sanitized_text=sanitized,
            entities=tuple(sorted(spans, key=lambda s: s.start)),
        )
