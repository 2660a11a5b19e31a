"""Scenarios router -- guarded vs unguarded runs for UC-01 through UC-08,
plus the audit log view.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from rai.errors import RAIError
from rai.relay.orchestrator import GuardrailOrchestrator
from rai.scenarios.catalog import SCENARIOS, get_scenario
from rai.scenarios.models import Scenario
from web.backend.app.dependencies import get_orchestrator
from web.backend.app.models.api import (
    AuditLogResponse,
    GuardrailInfoResponse,
    MessageResponse,
    PromptConfigResponse,
    ScenarioResponse,
    ScenarioRunRequest,
    ScenarioSummaryResponse,
)
from web.backend.app.routers._streaming import sse_response, to_http_error

router = APIRouter(prefix="/api", tags=["scenarios"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _guardrails(s: Scenario) -> list[GuardrailInfoResponse]:
    return [GuardrailInfoResponse(**asdict(g)) for g in s.guardrails]


def _summary(s: Scenario) -> ScenarioSummaryResponse:
    return ScenarioSummaryResponse(
        id=s.id,
        title=s.title,
        dimension=s.dimension,
        key_principle=s.key_principle,
        sample_input=s.sample_input,
        demo_tip=s.demo_tip,
        guardrails=_guardrails(s),
    )


# ---------------------------------------------------------------------------
# Scenario endpoints
# ---------------------------------------------------------------------------


@router.get("/scenarios", response_model=list[ScenarioSummaryResponse])
async def list_scenarios():
    """List metadata for all scenarios."""
    return [_summary(s) for s in SCENARIOS]


@router.get("/scenarios/{scenario_id}", response_model=ScenarioResponse)
async def get_scenario_detail(scenario_id: str):
    """Return the full configuration of one scenario."""
    s = get_scenario(scenario_id)
    if s is None:
        raise HTTPException(status_code=404, detail="Scenario not found")
    return ScenarioResponse(
        **_summary(s).model_dump(),
        unguarded=PromptConfigResponse(**asdict(s.unguarded)),
        guarded=PromptConfigResponse(**asdict(s.guarded)),
        scrubs_pii=s.scrubs_pii,
        requires_human_review=s.requires_human_review,
    )


@router.post("/scenarios/{scenario_id}/run")
async def run_scenario(
    scenario_id: str,
    req: ScenarioRunRequest,
    orchestrator: GuardrailOrchestrator = Depends(get_orchestrator),
):
    """Run a scenario and stream the model output as server-sent events."""
    try:
        plan = orchestrator.prepare_scenario_run(scenario_id, req.mode, req.input)
    except RAIError as exc:
        raise to_http_error(exc) from exc
    return sse_response(orchestrator.relay_scenario_run(plan))


# ---------------------------------------------------------------------------
# Audit log endpoints
# ---------------------------------------------------------------------------


@router.get("/audit", response_model=AuditLogResponse)
async def get_audit_log(
    orchestrator: GuardrailOrchestrator = Depends(get_orchestrator),
):
    """Return audit entries (newest first) with aggregate stats."""
    return orchestrator.audit_report()


@router.delete("/audit", response_model=MessageResponse)
async def clear_audit_log(
    orchestrator: GuardrailOrchestrator = Depends(get_orchestrator),
):
    """Clear the audit log (demo reset)."""
    orchestrator.audit.clear()
    return MessageResponse(message="Audit log cleared")
