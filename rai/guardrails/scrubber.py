"""PII and secret scrubbing.

Masks personally identifiable and sensitive data before it is sent to any
completion service, and derives a coarse routing classification from what
was found. Detection is best-effort regex matching.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from rai.guardrails.models import (
    Category,
    Classification,
    DataClassification,
    RedactionResult,
)


@dataclass(frozen=True)
class PiiPattern:
    """A labelled redaction rule."""

    label: str
    category: Category
    pattern: re.Pattern[str]
    replacement: str


# ---------------------------------------------------------------------------
# Pattern table
# ---------------------------------------------------------------------------
# Rules run top to bottom against the progressively redacted text. Multi-part
# secrets (key blocks, connection strings) come first so their pieces are not
# picked up by the narrower rules below. No replacement token matches any rule.

PII_PATTERNS: list[PiiPattern] = [
    PiiPattern(
        "Private key block",
        Category.SECRETS,
        re.compile(
            r"-----BEGIN\s+(?:RSA\s+|EC\s+|OPENSSH\s+)?PRIVATE\s+KEY-----"
            r"[\s\S]*?-----END\s+(?:RSA\s+|EC\s+|OPENSSH\s+)?PRIVATE\s+KEY-----"
        ),
        "[PRIVATE_KEY_REDACTED]",
    ),
    PiiPattern(
        "Database connection string",
        Category.SECRETS,
        re.compile(
            r"(?:postgres(?:ql)?|mysql|mongodb(?:\+srv)?|redis|mssql)://[^\s\"']+",
            re.IGNORECASE,
        ),
        "[DB_CONN_REDACTED]",
    ),
    PiiPattern(
        "Session token (JWT-style)",
        Category.SECRETS,
        re.compile(r"eyJ[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]*"),
        "[SESSION_TOKEN_REDACTED]",
    ),
    PiiPattern(
        "Email address",
        Category.PII,
        re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}"),
        "[EMAIL_REDACTED]",
    ),
    PiiPattern(
        "API key or secret",
        Category.SECRETS,
        re.compile(
            r"(?:api[_\-]?key|secret|token|password|passwd|pwd)\s*[:=]\s*"
            r"['\"]?[\w\-.]{8,}['\"]?",
            re.IGNORECASE,
        ),
        "[API_KEY_REDACTED]",
    ),
    PiiPattern(
        "Vendor secret key",
        Category.SECRETS,
        re.compile(r"\b(?:sk|rk)_(?:live|test)_[A-Za-z0-9]{8,}\b|\bsk-[A-Za-z0-9\-_]{20,}"),
        "[API_KEY_REDACTED]",
    ),
    PiiPattern(
        "AWS access key",
        Category.SECRETS,
        re.compile(r"\b(?:AKIA|AROA|AIDA|AIPA|ANPA|ANVA|ASIA)[A-Z0-9]{16}"),
        "[AWS_KEY_REDACTED]",
    ),
    PiiPattern(
        "Internal IP address",
        Category.NETWORK,
        re.compile(
            r"\b(?:10\.\d{1,3}\.\d{1,3}\.\d{1,3}"
            r"|172\.(?:1[6-9]|2\d|3[01])\.\d{1,3}\.\d{1,3}"
            r"|192\.168\.\d{1,3}\.\d{1,3})\b"
        ),
        "[IP_INTERNAL]",
    ),
    PiiPattern(
        "Credit card number",
        Category.PCI,
        re.compile(
            r"\b(?:(?:4\d{3}|5[1-5]\d{2}|6(?:011|5\d{2}))(?:[- ]?\d{4}){3}"
            r"|4\d{12}"
            r"|3[47]\d{2}[- ]?\d{6}[- ]?\d{5})\b"
        ),
        "[CARD_NUMBER_REDACTED]",
    ),
    PiiPattern(
        "Social security number",
        Category.PII,
        re.compile(r"\b\d{3}-\d{2}-\d{4}\b"),
        "[SSN_REDACTED]",
    ),
    PiiPattern(
        "Phone number",
        Category.PII,
        re.compile(r"(?<![\w-])(?:\+?1[-.\s]?)?\(?[2-9]\d{2}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b"),
        "[PHONE_REDACTED]",
    ),
]

# Cheap pre-check used to decide whether a guarded request needs scrubbing.
EMAIL_SHAPE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")


def contains_email(text: str) -> bool:
    """Return True if *text* holds an email-shaped substring."""
    return bool(EMAIL_SHAPE.search(text or ""))


def scrub_pii(text: str) -> RedactionResult:
    """Redact every rule match in *text* and report what was found."""
    if not text:
        return RedactionResult(redacted_text=text or "")

    redacted = text
    count = 0
    found: set[Category] = set()
    for rule in PII_PATTERNS:
        redacted, hits = rule.pattern.subn(rule.replacement, redacted)
        if hits:
            count += hits
            found.add(rule.category)

    return RedactionResult(
        redacted_text=redacted,
        redaction_count=count,
        categories=frozenset(found),
    )


def classify_data(text: str) -> DataClassification:
    """Decide where *text* may be processed.

    PCI/PHI outranks every other signal, then credentials, then any other
    redaction.
    """
    result = scrub_pii(text)

    if Category.PCI in result.categories or Category.PHI in result.categories:
        return DataClassification(
            Classification.SENSITIVE,
            "Contains PCI or PHI data - route to on-prem/private processing only",
        )
    if Category.SECRETS in result.categories:
        return DataClassification(
            Classification.SENSITIVE, "Contains credentials or secrets"
        )
    if result.redaction_count > 0:
        names = ", ".join(result.sorted_categories())
        return DataClassification(
            Classification.INTERNAL,
            f"Contains {names} data - scrubbed before sending",
        )
    return DataClassification(Classification.SAFE, "No sensitive data detected")
