"""FastAPI dependencies for the shared RAI state.

The session store, audit log, and completion client are created once per
process and injected into routers through :func:`get_orchestrator`. Tests
swap them via ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Optional

from rai.audit.log import AuditLog
from rai.config import Settings
from rai.llm.client import LLMClient
from rai.relay.orchestrator import GuardrailOrchestrator
from rai.sessions.store import SessionStore

_orchestrator: Optional[GuardrailOrchestrator] = None


def build_orchestrator(settings: Settings) -> GuardrailOrchestrator:
    """Wire a fresh orchestrator from *settings*."""
    return GuardrailOrchestrator(
        sessions=SessionStore(max_sessions=settings.max_sessions),
        audit=AuditLog(capacity=settings.audit_capacity),
        completion=LLMClient(api_key=settings.api_key, model=settings.model),
        settings=settings,
    )


def get_orchestrator() -> GuardrailOrchestrator:
    """Return the process-wide orchestrator, creating it on first use."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = build_orchestrator(Settings.from_env())
    return _orchestrator
