"""Guardrails router -- run the guardrail checks on arbitrary text.

Nothing here calls the model or touches sessions; it lets the UI show what
each check would do to a given input.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from rai.guardrails import (
    classify_data,
    deflection_message,
    detect_injection,
    is_destructive_command,
    scrub_pii,
)
from rai.relay.orchestrator import GuardrailOrchestrator
from web.backend.app.dependencies import get_orchestrator
from web.backend.app.models.api import (
    DataClassificationResponse,
    InjectionFindingResponse,
    InspectRequest,
    InspectResponse,
    MessageResponse,
    RedactionResultResponse,
    StatusResponse,
)

router = APIRouter(prefix="/api", tags=["guardrails"])


@router.post("/guardrails/inspect", response_model=InspectResponse)
async def inspect_text(req: InspectRequest):
    """Run injection detection, PII scrubbing, and classification on *text*."""
    return InspectResponse(
        injection=InjectionFindingResponse(**detect_injection(req.text).to_dict()),
        redaction=RedactionResultResponse(**scrub_pii(req.text).to_dict()),
        classification=DataClassificationResponse(**classify_data(req.text).to_dict()),
        destructive=is_destructive_command(req.text),
    )


@router.get("/guardrails/deflection", response_model=MessageResponse)
async def get_deflection():
    """Return the fixed refusal used for blocked requests."""
    return MessageResponse(message=deflection_message())


@router.get("/status", response_model=StatusResponse)
async def get_status(
    orchestrator: GuardrailOrchestrator = Depends(get_orchestrator),
):
    """Check whether the completion service is configured."""
    model = orchestrator.settings.model
    if orchestrator.completion.configured:
        return StatusResponse(configured=True, model=model, message="LLM is configured and ready.")
    return StatusResponse(
        configured=False,
        model=model,
        message="LLM not configured. Set ANTHROPIC_API_KEY environment variable.",
    )
