"""Data models for the interaction audit log."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum

SUMMARY_LIMIT = 120
ELLIPSIS = "..."


class Verdict(str, Enum):
    """Which guardrail mode produced an audit entry."""

    GUARDED = "GUARDED"
    UNGUARDED = "UNGUARDED"

    @classmethod
    def for_mode(cls, mode: str) -> Verdict:
        return cls.GUARDED if mode == "guarded" else cls.UNGUARDED


def summarize(text: str, limit: int = SUMMARY_LIMIT) -> str:
    """Truncate *text* to *limit* characters, marking the cut with ``...``."""
    text = text or ""
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


@dataclass
class AuditEntry:
    """One completed (or deflected) interaction."""

    id: str
    timestamp: str
    scenario_id: str
    scenario_title: str
    verdict: Verdict
    prompt_summary: str
    response_summary: str
    guardrails_triggered: list[str] = field(default_factory=list)
    injection_detected: bool = False
    pii_redacted: bool = False
    pii_categories: list[str] = field(default_factory=list)
    human_review_required: bool = False
    duration_ms: int = 0
    model_used: str = ""

    def to_dict(self) -> dict:
        data = asdict(self)
        data["verdict"] = self.verdict.value
        return data


@dataclass
class AuditStats:
    """Aggregate counts over the retained audit entries."""

    total: int = 0
    guarded: int = 0
    unguarded: int = 0
    injection_attempts: int = 0
    pii_redactions: int = 0
    human_review_required: int = 0
    avg_duration_ms: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
