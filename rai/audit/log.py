"""Bounded in-memory audit log.

Entries are kept newest-first; once ``capacity`` is reached the oldest entry
is dropped on every add. Nothing is persisted.
"""

from __future__ import annotations

import threading
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Sequence

import structlog

from rai.audit.models import AuditEntry, AuditStats, Verdict, summarize

logger = structlog.get_logger(__name__)

DEFAULT_CAPACITY = 500


class AuditLog:
    """Append-only ring buffer of :class:`AuditEntry` records."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._entries: deque[AuditEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    # -- writes --------------------------------------------------------------

    def add(
        self,
        *,
        scenario_id: str,
        scenario_title: str,
        verdict: Verdict,
        prompt: str,
        response: str,
        guardrails_triggered: Sequence[str] = (),
        injection_detected: bool = False,
        pii_redacted: bool = False,
        pii_categories: Sequence[str] = (),
        human_review_required: bool = False,
        duration_ms: int = 0,
        model_used: str = "",
    ) -> AuditEntry:
        """Record an interaction and return the stored entry.

        ``prompt`` and ``response`` are summarized to 120 characters.
        """
        entry = AuditEntry(
            id=uuid.uuid4().hex,
            timestamp=datetime.now(timezone.utc).isoformat(),
            scenario_id=scenario_id,
            scenario_title=scenario_title,
            verdict=verdict,
            prompt_summary=summarize(prompt),
            response_summary=summarize(response),
            guardrails_triggered=list(guardrails_triggered),
            injection_detected=injection_detected,
            pii_redacted=pii_redacted,
            pii_categories=list(pii_categories),
            human_review_required=human_review_required,
            duration_ms=max(0, int(duration_ms)),
            model_used=model_used,
        )
        with self._lock:
            self._entries.appendleft(entry)
        logger.info(
            "audit_entry_added",
            entry_id=entry.id,
            scenario_id=scenario_id,
            verdict=verdict.value,
            guardrails=entry.guardrails_triggered,
        )
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("audit_log_cleared")

    # -- reads ---------------------------------------------------------------

    def get_all(self) -> list[AuditEntry]:
        """Return every retained entry, newest first."""
        with self._lock:
            return list(self._entries)

    def get_by_scenario(self, scenario_id: str) -> list[AuditEntry]:
        return [e for e in self.get_all() if e.scenario_id == scenario_id]

    def get_stats(self) -> AuditStats:
        """Aggregate counts; the average is 0 for an empty log."""
        entries = self.get_all()
        total = len(entries)
        if not total:
            return AuditStats()
        return AuditStats(
            total=total,
            guarded=sum(1 for e in entries if e.verdict is Verdict.GUARDED),
            unguarded=sum(1 for e in entries if e.verdict is Verdict.UNGUARDED),
            injection_attempts=sum(1 for e in entries if e.injection_detected),
            pii_redactions=sum(1 for e in entries if e.pii_redacted),
            human_review_required=sum(1 for e in entries if e.human_review_required),
            avg_duration_ms=round(sum(e.duration_ms for e in entries) / total),
        )
