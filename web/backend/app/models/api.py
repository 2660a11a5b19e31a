"""Pydantic models for API request/response serialization.

These models mirror the RAI dataclasses and provide proper JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Chat session models
# ---------------------------------------------------------------------------


class CreateSessionRequest(BaseModel):
    """Request body for starting a chat session."""

    mode: Literal["guarded", "unguarded"]


class CreateSessionResponse(BaseModel):
    session_id: str
    mode: str


class ChatMessageResponse(BaseModel):
    """Mirrors rai.sessions.models.ChatMessage."""

    role: str
    content: str


class SessionResponse(BaseModel):
    """Mirrors rai.sessions.models.ChatSession (system prompt hidden)."""

    id: str
    mode: str
    messages: list[ChatMessageResponse] = Field(default_factory=list)
    created_at: str = ""
    turn_count: int = 0


class ChatTurnRequest(BaseModel):
    """Request body for sending a chat message."""

    message: str = ""


class MessageResponse(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Scenario models
# ---------------------------------------------------------------------------


class GuardrailInfoResponse(BaseModel):
    """Mirrors rai.scenarios.models.GuardrailInfo."""

    id: str
    label: str
    description: str


class PromptConfigResponse(BaseModel):
    """Mirrors rai.scenarios.models.PromptConfig."""

    user_prompt_template: str
    label: str
    system_prompt: Optional[str] = None
    failure_mode: str = ""


class ScenarioSummaryResponse(BaseModel):
    id: str
    title: str
    dimension: str
    key_principle: str
    sample_input: str
    demo_tip: str = ""
    guardrails: list[GuardrailInfoResponse] = Field(default_factory=list)


class ScenarioResponse(ScenarioSummaryResponse):
    """Mirrors rai.scenarios.models.Scenario."""

    unguarded: PromptConfigResponse
    guarded: PromptConfigResponse
    scrubs_pii: bool = False
    requires_human_review: bool = False


class ScenarioRunRequest(BaseModel):
    """Request body for running a scenario."""

    input: str = ""
    mode: str = ""


# ---------------------------------------------------------------------------
# Audit models
# ---------------------------------------------------------------------------


class AuditEntryResponse(BaseModel):
    """Mirrors rai.audit.models.AuditEntry."""

    id: str
    timestamp: str
    scenario_id: str
    scenario_title: str
    verdict: str
    prompt_summary: str
    response_summary: str
    guardrails_triggered: list[str] = Field(default_factory=list)
    injection_detected: bool = False
    pii_redacted: bool = False
    pii_categories: list[str] = Field(default_factory=list)
    human_review_required: bool = False
    duration_ms: int = 0
    model_used: str = ""


class AuditStatsResponse(BaseModel):
    """Mirrors rai.audit.models.AuditStats."""

    total: int = 0
    guarded: int = 0
    unguarded: int = 0
    injection_attempts: int = 0
    pii_redactions: int = 0
    human_review_required: int = 0
    avg_duration_ms: int = 0


class AuditLogResponse(BaseModel):
    entries: list[AuditEntryResponse] = Field(default_factory=list)
    stats: AuditStatsResponse = Field(default_factory=AuditStatsResponse)


# ---------------------------------------------------------------------------
# Guardrail inspection models
# ---------------------------------------------------------------------------


class InspectRequest(BaseModel):
    text: str = ""


class InjectionFindingResponse(BaseModel):
    """Mirrors rai.guardrails.models.InjectionFinding."""

    is_injection: bool
    confidence: str
    matched_patterns: list[str] = Field(default_factory=list)
    sanitized_text: str = ""


class RedactionResultResponse(BaseModel):
    """Mirrors rai.guardrails.models.RedactionResult."""

    redacted_text: str
    redaction_count: int = 0
    categories: list[str] = Field(default_factory=list)
    is_sensitive: bool = False


class DataClassificationResponse(BaseModel):
    """Mirrors rai.guardrails.models.DataClassification."""

    classification: str
    reason: str


class InspectResponse(BaseModel):
    injection: InjectionFindingResponse
    redaction: RedactionResultResponse
    classification: DataClassificationResponse
    destructive: bool = False


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


class StatusResponse(BaseModel):
    configured: bool
    model: str
    message: str
