"""Guardrail orchestration and the streaming event relay."""

from rai.relay.events import DeltaEvent, DoneEvent, ErrorEvent, Event, MetadataEvent, to_sse
from rai.relay.orchestrator import GuardrailOrchestrator, TurnPlan

__all__ = [
    "DeltaEvent",
    "DoneEvent",
    "ErrorEvent",
    "Event",
    "GuardrailOrchestrator",
    "MetadataEvent",
    "TurnPlan",
    "to_sse",
]
