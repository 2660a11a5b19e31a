"""Result types produced by the guardrail checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Confidence(str, Enum):
    """Severity of an injection finding."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]


_CONFIDENCE_RANK = {Confidence.LOW: 0, Confidence.MEDIUM: 1, Confidence.HIGH: 2}


class Category(str, Enum):
    """Redaction category of a scrubber pattern."""

    PII = "PII"
    SECRETS = "SECRETS"
    NETWORK = "NETWORK"
    PCI = "PCI"
    PHI = "PHI"  # reserved, no pattern produces it yet


SENSITIVE_CATEGORIES: frozenset[Category] = frozenset({Category.PCI, Category.PHI})


class Classification(str, Enum):
    """Coarse routing decision for a piece of text."""

    SAFE = "SAFE"
    INTERNAL = "INTERNAL"
    SENSITIVE = "SENSITIVE"


@dataclass(frozen=True)
class InjectionFinding:
    """Outcome of running the injection detector over one input."""

    is_injection: bool
    confidence: Confidence
    matched_patterns: tuple[str, ...] = ()
    sanitized_text: str = ""

    def to_dict(self) -> dict:
        return {
            "is_injection": self.is_injection,
            "confidence": self.confidence.value,
            "matched_patterns": list(self.matched_patterns),
            "sanitized_text": self.sanitized_text,
        }


@dataclass(frozen=True)
class RedactionResult:
    """Outcome of running the PII/secret scrubber over one input."""

    redacted_text: str
    redaction_count: int = 0
    categories: frozenset[Category] = field(default_factory=frozenset)

    @property
    def is_sensitive(self) -> bool:
        """True when PCI or PHI data was found."""
        return bool(self.categories & SENSITIVE_CATEGORIES)

    def sorted_categories(self) -> list[str]:
        return sorted(c.value for c in self.categories)

    def to_dict(self) -> dict:
        return {
            "redacted_text": self.redacted_text,
            "redaction_count": self.redaction_count,
            "categories": self.sorted_categories(),
            "is_sensitive": self.is_sensitive,
        }


@dataclass(frozen=True)
class DataClassification:
    """Routing decision derived from a :class:`RedactionResult`."""

    classification: Classification
    reason: str

    def to_dict(self) -> dict:
        return {"classification": self.classification.value, "reason": self.reason}
