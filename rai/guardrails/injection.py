"""Prompt injection detection.

Runs a table of labelled regex patterns over user input. Every pattern that
matches contributes its label and severity; the finding's confidence is the
highest severity seen. A flagged input is never partially cleaned: its
sanitized form is a fixed placeholder.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from rai.guardrails.models import Confidence, InjectionFinding

INJECTION_PLACEHOLDER = (
    "[USER INPUT CONTAINED POTENTIALLY MALICIOUS INSTRUCTIONS - REDACTED]"
)

_DEFLECTION_MESSAGE = (
    "I'm not able to follow instructions embedded in the conversation that "
    "override my purpose. Is there a technical question I can help you with?"
)


@dataclass(frozen=True)
class InjectionPattern:
    """A single labelled detection rule."""

    label: str
    pattern: re.Pattern[str]
    severity: Confidence


def _rule(label: str, regex: str, severity: Confidence) -> InjectionPattern:
    return InjectionPattern(label, re.compile(regex, re.IGNORECASE), severity)


# ---------------------------------------------------------------------------
# Pattern table (order is the order labels are reported in)
# ---------------------------------------------------------------------------

INJECTION_PATTERNS: list[InjectionPattern] = [
    _rule(
        "Instruction override attempt",
        r"ignore\s+(?:all\s+)?(?:previous|prior|above|preceding)\s+"
        r"(?:instructions?|prompts?|rules?|context)",
        Confidence.HIGH,
    ),
    _rule(
        "System prompt reveal attempt",
        r"(?:print|show|reveal|tell\s+me|output|repeat|display)\s+(?:your\s+)?"
        r"(?:system\s+)?(?:prompt|instructions?|rules?|context)",
        Confidence.HIGH,
    ),
    _rule(
        "Role jailbreak attempt",
        r"(?:you\s+are\s+now|act\s+as|pretend\s+to\s+be|roleplay\s+as|behave\s+as|"
        r"from\s+now\s+on\s+you\s+are)\s+(?:an?\s+)?"
        r"(?:different|unrestricted|evil|bad|harmful|DAN|jailbreak)",
        Confidence.HIGH,
    ),
    _rule(
        "DAN / jailbreak keyword",
        r"\b(?:DAN|jailbreak|do\s+anything\s+now|no\s+restrictions?|without\s+limits?)\b",
        Confidence.HIGH,
    ),
    _rule(
        "New instructions injection",
        r"(?:new\s+)?instructions?:\s*(?:you\s+must|always|never|from\s+now)",
        Confidence.MEDIUM,
    ),
    _rule(
        "Forget previous context",
        r"(?:forget|disregard|ignore)\s+(?:everything|all|what)\s+"
        r"(?:above|before|i\s+said)",
        Confidence.MEDIUM,
    ),
    _rule(
        "Developer/admin mode claim",
        r"(?:developer|admin|debug|maintenance|override|sudo)\s+"
        r"(?:mode|access|command|key)",
        Confidence.MEDIUM,
    ),
    _rule(
        "Base64 encoded instruction",
        r"(?:decode|run|execute)\s+(?:this\s+)?base64",
        Confidence.MEDIUM,
    ),
    _rule(
        "Token manipulation attempt",
        r"<\|(?:im_start|im_end|system|user|assistant)\|>",
        Confidence.HIGH,
    ),
]


def detect_injection(text: str) -> InjectionFinding:
    """Classify *text* as a prompt injection attempt or not.

    Overlapping matches are reported once per pattern, so a single phrase can
    surface several labels.
    """
    if not text or not text.strip():
        return InjectionFinding(
            is_injection=False,
            confidence=Confidence.LOW,
            matched_patterns=(),
            sanitized_text=text or "",
        )

    matched: list[str] = []
    highest = Confidence.LOW
    for rule in INJECTION_PATTERNS:
        if rule.pattern.search(text):
            matched.append(rule.label)
            if rule.severity.rank > highest.rank:
                highest = rule.severity

    if not matched:
        return InjectionFinding(
            is_injection=False,
            confidence=Confidence.LOW,
            matched_patterns=(),
            sanitized_text=text,
        )

    return InjectionFinding(
        is_injection=True,
        confidence=highest,
        matched_patterns=tuple(matched),
        sanitized_text=INJECTION_PLACEHOLDER,
    )


def deflection_message() -> str:
    """Return the fixed refusal sent in place of a blocked request."""
    return _DEFLECTION_MESSAGE
