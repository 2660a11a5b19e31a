"""Chat session state."""

from rai.sessions.models import MODES, ChatMessage, ChatSession
from rai.sessions.store import SessionStore

__all__ = ["MODES", "ChatMessage", "ChatSession", "SessionStore"]
