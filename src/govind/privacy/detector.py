"""Rule-based sensitive data detector.

Any object with ``detect(text) -> list[SensitiveSpan]`` can stand in for
``RegexDetector``; the boundary and the sanitizer only depend on that
method. Returned spans are non-overlapping and ordered by start offset.

Sanitizer placeholders (``<EMAIL_MASKED>`` ...) are opaque: they are blanked
before scanning, so their letters never count as keywords and no span may
overlap one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol

from .entities import PLACEHOLDER_PATTERN, EntityType, SensitiveSpan

# Characters inspected on each side of a match for keyword-gated rules.
KEYWORD_WINDOW = 30


class Detector(Protocol):
    def detect(self, text: str) -> list[SensitiveSpan]:
        """Return sensitive spans in text, ordered by start."""


@dataclass(frozen=True)
class DetectionRule:
    type: EntityType
    pattern: re.Pattern[str]
    # When set, a match only counts if one keyword is within KEYWORD_WINDOW.
    keywords: tuple[str, ...] = ()


# Specific rules first: an earlier rule wins when two matches overlap.
DEFAULT_RULES: tuple[DetectionRule, ...] = (
    DetectionRule(
        EntityType.SECRET_KEY,
        re.compile(
            r"\b(?:sk-[A-Za-z0-9_\-]{16,}|AIza[0-9A-Za-z_\-]{35}"
            r"|AKIA[0-9A-Z]{16}|gh[pousr]_[A-Za-z0-9]{36,})"
        ),
    ),
    DetectionRule(
        EntityType.PASSWORD,
        re.compile(
            r"(?:password|passwd|pwd|secret|key)[\"']?\s*[:=]\s*[\"']?([^\"'\s]{4,})",
            re.IGNORECASE,
        ),
    ),
    DetectionRule(
        EntityType.EMAIL,
        re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"),
    ),
    DetectionRule(EntityType.AADHAAR, re.compile(r"\b\d{4}\s\d{4}\s\d{4}\b")),
    DetectionRule(EntityType.SSN, re.compile(r"\b\d{3}-\d{2}-\d{4}\b")),
    DetectionRule(
        EntityType.BANK_ACCOUNT,
        re.compile(r"\b\d{9,18}\b"),
        keywords=("account", "acct", "a/c", "iban", "ifsc", "bank"),
    ),
    DetectionRule(
        EntityType.PHONE,
        re.compile(r"(\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}"),
    ),
    DetectionRule(EntityType.PAN, re.compile(r"\b[A-Z]{5}\d{4}[A-Z]\b")),
    DetectionRule(
        EntityType.OTP,
        re.compile(r"\b\d{4,8}\b"),
        keywords=("otp", "verification", "code", "expires", "valid", "pin"),
    ),
)


def _blank_placeholders(text: str) -> tuple[str, list[tuple[int, int]]]:
    """Replace placeholders with spaces, keeping offsets. Returns (scan, regions)."""
    regions = [m.span() for m in PLACEHOLDER_PATTERN.finditer(text)]
    if not regions:
        return text, regions
    chars = list(text)
    for start, end in regions:
        chars[start:end] = " " * (end - start)
    return "".join(chars), regions


class RegexDetector:
    """Detector driven by an ordered list of DetectionRule."""

    def __init__(
        self,
        rules: tuple[DetectionRule, ...] = DEFAULT_RULES,
        keyword_window: int = KEYWORD_WINDOW,
    ) -> None:
        self._rules = rules
        self._keyword_window = keyword_window

    def detect(self, text: str) -> list[SensitiveSpan]:
        if not text:
            return []

        scan, opaque = _blank_placeholders(text)
        lowered = scan.lower()
        spans: list[SensitiveSpan] = []

        for rule in self._rules:
            for match in rule.pattern.finditer(scan):
                start, end = match.span()
                if start == end:
                    continue
                if any(start < o_end and end > o_start for o_start, o_end in opaque):
                    continue
                if rule.keywords and not self._near_keyword(lowered, start, end, rule.keywords):
                    continue
                if any(span.overlaps(start, end) for span in spans):
                    continue
                spans.append(SensitiveSpan(rule.type, start, end, text[start:end]))

        return sorted(spans, key=lambda span: span.start)

    def _near_keyword(
        self, lowered: str, start: int, end: int, keywords: tuple[str, ...]
    ) -> bool:
        window = lowered[max(0, start - self._keyword_window) : end + self._keyword_window]
        return any(keyword in window for keyword in keywords)
