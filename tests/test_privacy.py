"""Tests for sensitive data detection, sanitization and the privacy boundary."""

import logging
import re

import pytest

from govind.errors import SecurityViolation
from govind.privacy import (
    EntityType,
    PrivacyBoundary,
    RegexDetector,
    Sanitizer,
    SensitiveSpan,
)
from govind.privacy.sanitizer import mask_spans

from .helpers import RecordingEventSink

detector = RegexDetector()


def _types(text: str) -> list[EntityType]:
    return [span.type for span in detector.detect(text)]


class TestRegexDetector:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("mail me at a.b@example.com", EntityType.EMAIL),
            ("call me at (555) 123-4567", EntityType.PHONE),
            ("aadhaar 1234 5678 9012", EntityType.AADHAAR),
            ("my PAN is ABCDE1234F", EntityType.PAN),
            ("my SSN is 123-45-6789", EntityType.SSN),
            ("your otp is 482913", EntityType.OTP),
            ("account number 123456789012", EntityType.BANK_ACCOUNT),
            ("password: hunter22", EntityType.PASSWORD),
            ("use sk-abcdefghijklmnop1234 for it", EntityType.SECRET_KEY),
        ],
    )
    def test_detects_entity(self, text, expected):
        assert _types(text) == [expected]

    @pytest.mark.parametrize(
        "text",
        [
            "What is the weather in Mumbai tomorrow?",
            "I have 3 cats and 2 dogs",
            "Remind me at 2026 new year",
            "",
        ],
    )
    def test_clean_text(self, text):
        assert detector.detect(text) == []

    def test_digits_need_keyword_for_otp(self):
        assert _types("the year 1999 was fun") == []
        assert _types("verification 1999") == [EntityType.OTP]

    def test_keyword_outside_window_does_not_count(self):
        text = "otp" + " " * 40 + "4829"
        assert detector.detect(text) == []

    def test_spans_sorted_and_disjoint(self):
        spans = detector.detect("ABCDE1234F then a@b.io then 123-45-6789")
        assert [s.type for s in spans] == [EntityType.PAN, EntityType.EMAIL, EntityType.SSN]
        for left, right in zip(spans, spans[1:]):
            assert left.end <= right.start

    def test_placeholders_are_opaque(self):
        # "OTP" inside the placeholder must not act as a keyword for 4829
        assert detector.detect("<OTP_MASKED> 4829") == []
        assert detector.detect("secret: <PASSWORD_MASKED>") == []

    def test_span_value_not_in_repr(self):
        span = detector.detect("a.b@example.com")[0]
        assert "example" not in repr(span)
        assert "example" not in str(span.to_dict())


class TestSanitizer:
    def test_masks_email(self):
        sanitizer = Sanitizer(detector)
        text = "Email me at a.b@example.com please"
        result = sanitizer.sanitize(text, detector.detect(text))
        assert result.sanitized_text == "Email me at <EMAIL_MASKED> please"
        assert result.entity_types == ["EMAIL"]

    def test_masks_multiple_back_to_front(self):
        sanitizer = Sanitizer(detector)
        text = "PAN ABCDE1234F, SSN 123-45-6789"
        result = sanitizer.sanitize(text, detector.detect(text))
        assert result.sanitized_text == "PAN <PAN_MASKED>, SSN <SSN_MASKED>"

    def test_mask_spans_skips_overlaps(self):
        spans = [
            SensitiveSpan(EntityType.EMAIL, 0, 5),
            SensitiveSpan(EntityType.PHONE, 3, 8),
        ]
        masked = mask_spans("0123456789", spans)
        assert masked.count("_MASKED>") == 1

    def test_residual_matches_are_masked(self):
        """Spans passed in incompletely are topped up until detection is clean."""
        sanitizer = Sanitizer(detector)
        text = "a@b.io and c@d.io"
        first_only = detector.detect(text)[:1]
        result = sanitizer.sanitize(text, first_only)
        assert detector.detect(result.sanitized_text) == []
        assert "c@d.io" not in result.sanitized_text

    def test_unmaskable_text_raises(self):
        class StubbornDetector:
            def detect(self, text):
                return [SensitiveSpan(EntityType.SECRET_KEY, 0, 1)]

        sanitizer = Sanitizer(StubbornDetector(), max_passes=3)
        with pytest.raises(SecurityViolation):
            sanitizer.sanitize("x", [])


# Prompts mixing entities, keywords and punctuation next to each other
SOUNDNESS_CORPUS = [
    "my SSN is 123-45-6789",
    "key: a.b@example.com",
    "otp 1234 and code 5678 valid 10 min",
    "account 123456789 bank ifsc 987654321012",
    "password=hunter22 email=x@y.com phone 555-123-4567",
    "PAN ABCDE1234F aadhaar 1234 5678 9012 pin 4321",
    "sk-abcdefghijklmnop1234sk-abcdefghijklmnop1234",
    "verification code: 000000, expires in 5; call +1 555 123 4567",
    "a@b.co,c@d.co;e@f.co",
    "pwd: 'abcd' secret=\"efgh\" key=ijkl",
    "123-45-6789123-45-6789",
    "otp<EMAIL_MASKED>1234",
]


class TestSoundness:
    @pytest.mark.parametrize("text", SOUNDNESS_CORPUS)
    def test_sanitized_text_detects_nothing(self, text):
        result = Sanitizer(detector).sanitize(text, detector.detect(text))
        assert detector.detect(result.sanitized_text) == []

    @pytest.mark.parametrize("text", SOUNDNESS_CORPUS)
    def test_protect_output_passes_enforce(self, text):
        boundary = PrivacyBoundary(events=RecordingEventSink())
        result = boundary.protect(text)
        boundary.enforce(result.sanitized_text)

    def test_no_digits_of_ssn_survive(self):
        result = Sanitizer(detector).sanitize(
            "my SSN is 123-45-6789", detector.detect("my SSN is 123-45-6789")
        )
        assert not re.search(r"\d", result.sanitized_text)


class TestPrivacyBoundary:
    def test_enforce_rejects_ssn(self):
        """Scenario: "my SSN is 123-45-6789" is refused."""
        events = RecordingEventSink()
        boundary = PrivacyBoundary(events=events)

        with pytest.raises(SecurityViolation) as exc_info:
            boundary.enforce("my SSN is 123-45-6789")

        assert exc_info.value.details == {"entity_types": ["SSN"]}
        name, level, fields = events.events[0]
        assert name == "privacy.violation"
        assert level == logging.ERROR
        assert fields["entity_types"] == "SSN"
        assert "123-45-6789" not in events.dump()

    def test_enforce_passes_clean_text(self):
        events = RecordingEventSink()
        PrivacyBoundary(events=events).enforce("hello there")
        assert events.events == []

    def test_protect_emits_types_only(self):
        events = RecordingEventSink()
        result = PrivacyBoundary(events=events).protect("mail a.b@example.com")
        assert result.sanitized_text == "mail <EMAIL_MASKED>"
        assert events.names() == ["privacy.sanitized"]
        assert "a.b@example.com" not in events.dump()

    def test_custom_detector(self):
        class BananaDetector:
            def detect(self, text):
                i = text.find("banana")
                return [] if i < 0 else [SensitiveSpan(EntityType.SECRET_KEY, i, i + 6)]

        boundary = PrivacyBoundary(detector=BananaDetector(), events=RecordingEventSink())
        with pytest.raises(SecurityViolation):
            boundary.enforce("the password is banana")
        assert boundary.protect("one banana").sanitized_text == "one <SECRET_KEY_MASKED>"
