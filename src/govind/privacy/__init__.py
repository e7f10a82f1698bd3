"""Sensitive data detection and the privacy boundary for outbound prompts."""

from .boundary import PrivacyBoundary
from .detector import Detector, RegexDetector
from .entities import EntityType, SanitizedResult, SensitiveSpan
from .sanitizer import Sanitizer

__all__ = [
    "Detector",
    "EntityType",
    "PrivacyBoundary",
    "RegexDetector",
    "SanitizedResult",
    "Sanitizer",
    "SensitiveSpan",
]
