"""Hard privacy boundary in front of the AI provider.

Nothing may be sent to the provider unless ``detect(text)`` is empty at the
moment of sending. Two call patterns:

* ``enforce(text)``: caller already sanitized; re-validate and refuse with
  ``SecurityViolation`` if anything is still detected.
* ``protect(text)``: sanitize first, then validate, then return the text to
  send.

Only entity type tags and counts are ever logged.
"""

from __future__ import annotations

import logging

from govind.context import EMPTY_CONTEXT, RequestContext
from govind.errors import SecurityViolation
from govind.observability.events import EventSink, LoggingEventSink

from .detector import Detector, RegexDetector
from .entities import SanitizedResult
from .sanitizer import Sanitizer


class PrivacyBoundary:
    def __init__(
        self,
        detector: Detector | None = None,
        sanitizer: Sanitizer | None = None,
        events: EventSink | None = None,
    ) -> None:
        self.detector = detector or RegexDetector()
        self.sanitizer = sanitizer or Sanitizer(self.detector)
        self._events = events or LoggingEventSink()

    def enforce(self, text: str, context: RequestContext = EMPTY_CONTEXT) -> None:
        """Raise SecurityViolation if text contains sensitive data."""
        spans = self.detector.detect(text)
        if not spans:
            return

        entity_types = [span.type.value for span in spans]
        self._events.emit(
            "privacy.violation",
            level=logging.ERROR,
            entity_types=",".join(entity_types),
            entity_count=len(spans),
            **context.log_fields(),
        )
        raise SecurityViolation(details={"entity_types": sorted(set(entity_types))})

    def protect(
        self, text: str, context: RequestContext = EMPTY_CONTEXT
    ) -> SanitizedResult:
        """Sanitize text, then enforce. Returns the result to send."""
        result = self.sanitizer.sanitize(text, self.detector.detect(text))
        if result.entities:
            self._events.emit(
                "privacy.sanitized",
                entity_types=",".join(result.entity_types),
                entity_count=len(result.entities),
                **context.log_fields(),
            )
        self.enforce(result.sanitized_text, context)
        return result

