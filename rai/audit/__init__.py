"""Interaction audit log."""

from rai.audit.log import DEFAULT_CAPACITY, AuditLog
from rai.audit.models import AuditEntry, AuditStats, Verdict, summarize

__all__ = ["DEFAULT_CAPACITY", "AuditEntry", "AuditLog", "AuditStats", "Verdict", "summarize"]
