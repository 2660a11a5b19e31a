"""Data models for chat sessions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

Role = Literal["system", "user", "assistant"]
Mode = Literal["guarded", "unguarded"]

MODES: tuple[str, ...] = ("guarded", "unguarded")


@dataclass
class ChatMessage:
    """A single role-tagged message."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class ChatSession:
    """Conversation state for one chat session."""

    id: str
    mode: Mode
    messages: list[ChatMessage] = field(default_factory=list)
    created_at: str = ""
    turn_count: int = 0

    def __post_init__(self) -> None:
        if not self.id:
            self.id = uuid.uuid4().hex
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc).isoformat()

    def public_messages(self) -> list[ChatMessage]:
        """Messages without the system prompt."""
        return [m for m in self.messages if m.role != "system"]
