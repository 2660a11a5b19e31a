"""Typed events emitted by the streaming relay.

A turn produces at most one :class:`MetadataEvent` (first), any number of
:class:`DeltaEvent` s, then exactly one :class:`DoneEvent` or
:class:`ErrorEvent`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class MetadataEvent:
    """Guardrail outcome for the turn, sent before any content."""

    mode: str
    guardrails_triggered: tuple[str, ...] = ()
    injection_detected: bool = False
    deflected: bool = False
    destructive_warning: bool = False
    pii_redacted: bool = False
    pii_categories: tuple[str, ...] = ()
    processed_input: str | None = None

    type: str = field(default="metadata", init=False)

    def to_dict(self) -> dict:
        data = {
            "type": self.type,
            "mode": self.mode,
            "guardrailsTriggered": list(self.guardrails_triggered),
            "injectionDetected": self.injection_detected,
            "deflected": self.deflected,
            "destructiveWarning": self.destructive_warning,
            "piiRedacted": self.pii_redacted,
            "piiCategories": list(self.pii_categories),
        }
        if self.processed_input is not None:
            data["processedInput"] = self.processed_input
        return data


@dataclass(frozen=True)
class DeltaEvent:
    """A fragment of assistant output."""

    content: str

    type: str = field(default="delta", init=False)

    def to_dict(self) -> dict:
        return {"type": self.type, "content": self.content}


@dataclass(frozen=True)
class DoneEvent:
    """Successful end of a turn."""

    duration_ms: int
    turn_count: int | None = None

    type: str = field(default="done", init=False)

    def to_dict(self) -> dict:
        data: dict = {"type": self.type, "durationMs": self.duration_ms}
        if self.turn_count is not None:
            data["turnCount"] = self.turn_count
        return data


@dataclass(frozen=True)
class ErrorEvent:
    """Failed end of a turn."""

    message: str
    auth_failure: bool = False

    type: str = field(default="error", init=False)

    def to_dict(self) -> dict:
        return {"type": self.type, "message": self.message, "authFailure": self.auth_failure}


Event = Union[MetadataEvent, DeltaEvent, DoneEvent, ErrorEvent]

TERMINAL_TYPES = frozenset({"done", "error"})


def to_sse(event: Event) -> str:
    """Encode *event* as one server-sent-events frame."""
    return f"data: {json.dumps(event.to_dict())}\n\n"
