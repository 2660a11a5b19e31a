"""In-memory chat session store.

Sessions live only for the lifetime of the process. Each session has its own
``asyncio.Lock`` so a turn can hold it from the user append to the assistant
append; turns on different sessions never wait on each other.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict

import structlog

from rai.sessions.models import ChatMessage, ChatSession, Mode

logger = structlog.get_logger(__name__)


class SessionStore:
    """Keyed conversation state.

    Parameters
    ----------
    max_sessions : int
        Maximum number of live sessions. When exceeded, the oldest session is
        evicted. ``0`` disables eviction.
    """

    def __init__(self, max_sessions: int = 0) -> None:
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, ChatSession] = OrderedDict()
        self._locks: dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    # -- lifecycle -----------------------------------------------------------

    def create(self, mode: Mode, system_prompt: str | None = None) -> ChatSession:
        """Create a session, seeding it with *system_prompt* when given."""
        session = ChatSession(id="", mode=mode)
        if system_prompt:
            session.messages.append(ChatMessage(role="system", content=system_prompt))
        self._sessions[session.id] = session
        self._locks[session.id] = asyncio.Lock()
        self._evict()
        logger.info("session_created", session_id=session.id, mode=mode)
        return session

    def get(self, session_id: str) -> ChatSession | None:
        return self._sessions.get(session_id)

    def clear(self, session_id: str) -> bool:
        """Remove a session. Returns True if it existed."""
        self._locks.pop(session_id, None)
        existed = self._sessions.pop(session_id, None) is not None
        if existed:
            logger.info("session_cleared", session_id=session_id)
        return existed

    def lock(self, session_id: str) -> asyncio.Lock:
        """Return the turn lock for *session_id*.

        Unknown ids get a fresh, unstored lock so a cleared session leaves
        nothing behind.
        """
        if session_id not in self._sessions:
            return asyncio.Lock()
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        return lock

    def _evict(self) -> None:
        if not self._max_sessions:
            return
        while len(self._sessions) > self._max_sessions:
            oldest_id, _ = self._sessions.popitem(last=False)
            self._locks.pop(oldest_id, None)
            logger.info("session_evicted", session_id=oldest_id)

    # -- mutation ------------------------------------------------------------

    def append_user_turn(self, session_id: str, content: str) -> bool:
        session = self._sessions.get(session_id)
        if session is None:
            return False
        session.messages.append(ChatMessage(role="user", content=content))
        return True

    def append_assistant_turn(self, session_id: str, content: str) -> int | None:
        """Append an assistant reply and count the turn.

        Returns the new turn count, or None if the session is gone.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return None
        session.messages.append(ChatMessage(role="assistant", content=content))
        session.turn_count += 1
        return session.turn_count

    def discard_last_user_turn(self, session_id: str) -> bool:
        """Drop a trailing user message left by a turn that never completed."""
        session = self._sessions.get(session_id)
        if session is None or not session.messages:
            return False
        if session.messages[-1].role != "user":
            return False
        session.messages.pop()
        return True
