"""Chat router -- multi-turn engineering assistant sessions.

Guarded sessions run the injection, destructive-action, and PII guardrails
on every turn; unguarded sessions go straight to the model.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from rai.errors import RAIError
from rai.relay.orchestrator import GuardrailOrchestrator
from web.backend.app.dependencies import get_orchestrator
from web.backend.app.models.api import (
    ChatMessageResponse,
    ChatTurnRequest,
    CreateSessionRequest,
    CreateSessionResponse,
    MessageResponse,
    SessionResponse,
)
from web.backend.app.routers._streaming import sse_response, to_http_error

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post("/sessions", response_model=CreateSessionResponse)
async def create_session(
    req: CreateSessionRequest,
    orchestrator: GuardrailOrchestrator = Depends(get_orchestrator),
):
    """Start a new chat session in guarded or unguarded mode."""
    session = orchestrator.create_session(req.mode)
    return CreateSessionResponse(session_id=session.id, mode=session.mode)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    orchestrator: GuardrailOrchestrator = Depends(get_orchestrator),
):
    """Return session history without the system prompt."""
    session = orchestrator.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return SessionResponse(
        id=session.id,
        mode=session.mode,
        messages=[
            ChatMessageResponse(role=m.role, content=m.content)
            for m in session.public_messages()
        ],
        created_at=session.created_at,
        turn_count=session.turn_count,
    )


@router.post("/sessions/{session_id}/message")
async def send_message(
    session_id: str,
    req: ChatTurnRequest,
    orchestrator: GuardrailOrchestrator = Depends(get_orchestrator),
):
    """Send a message and stream the reply as server-sent events."""
    try:
        plan = orchestrator.prepare_chat_turn(session_id, req.message)
    except RAIError as exc:
        raise to_http_error(exc) from exc
    return sse_response(orchestrator.relay_chat_turn(plan))


@router.delete("/sessions/{session_id}", response_model=MessageResponse)
async def clear_session(
    session_id: str,
    orchestrator: GuardrailOrchestrator = Depends(get_orchestrator),
):
    """Delete a session so the user can start over."""
    if not orchestrator.clear_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return MessageResponse(message="Session cleared")
