"""Privacy entity types.

A ``SensitiveSpan`` holds the matched value in memory so the sanitizer can
work, but the value is excluded from ``repr`` and from ``to_dict`` so it
never reaches a log line or a response body.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum


class EntityType(str, Enum):
    OTP = "OTP"
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    AADHAAR = "AADHAAR"
    PAN = "PAN"
    SSN = "SSN"
    BANK_ACCOUNT = "BANK_ACCOUNT"
    PASSWORD = "PASSWORD"
    SECRET_KEY = "SECRET_KEY"


# Placeholders written by the sanitizer, e.g. "<EMAIL_MASKED>".
PLACEHOLDER_PATTERN = re.compile(
    r"<(?:" + "|".join(t.value for t in EntityType) + r")_MASKED>"
)


def placeholder_for(entity_type: EntityType) -> str:
    return f"<{entity_type.value}_MASKED>"


@dataclass(frozen=True)
class SensitiveSpan:
    type: EntityType
    start: int
    end: int
    value: str = field(default="", repr=False, compare=False)

    def overlaps(self, start: int, end: int) -> bool:
        return start < self.end and end > self.start

    def to_dict(self) -> dict[str, object]:
        return {"type": self.type.value, "start": self.start, "end": self.end}


@dataclass(frozen=True)
class SanitizedResult:
    sanitized_text: str
    entities: tuple[SensitiveSpan, ...] = ()

    @property
    def entity_types(self) -> list[str]:
        return [span.type.value for span in self.entities]
