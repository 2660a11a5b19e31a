"""Guardrail pipeline: injection detection, PII scrubbing, data classification."""

from rai.guardrails.destructive import is_destructive_command
from rai.guardrails.injection import deflection_message, detect_injection
from rai.guardrails.models import (
    Category,
    Classification,
    Confidence,
    DataClassification,
    InjectionFinding,
    RedactionResult,
)
from rai.guardrails.scrubber import classify_data, contains_email, scrub_pii

__all__ = [
    "Category",
    "Classification",
    "Confidence",
    "DataClassification",
    "InjectionFinding",
    "RedactionResult",
    "classify_data",
    "contains_email",
    "deflection_message",
    "detect_injection",
    "is_destructive_command",
    "scrub_pii",
]
