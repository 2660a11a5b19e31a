"""Shared fixtures: a scripted completion service and a wired orchestrator."""

import asyncio
from contextlib import asynccontextmanager

import pytest

from rai.audit.log import AuditLog
from rai.config import Settings
from rai.errors import UpstreamServiceError
from rai.relay.orchestrator import GuardrailOrchestrator
from rai.sessions.store import SessionStore


class FakeCompletion:
    """Completion service that replays scripted fragments.

    ``fail_on_open`` raises before any fragment; ``fail_after`` raises once
    that many fragments have been yielded; ``hang_after`` blocks forever at
    that point, like an upstream read that never returns.
    """

    def __init__(self, fragments=("Hello", ", ", "world"), configured=True):
        self.fragments = list(fragments)
        self._configured = configured
        self.fail_on_open: Exception | None = None
        self.fail_after: int | None = None
        self.hang_after: int | None = None
        self.fail_with: Exception = UpstreamServiceError("upstream exploded", status_code=500)
        self.calls: list[dict] = []
        self.opened = 0
        self.closed = 0

    @property
    def configured(self) -> bool:
        return self._configured

    @asynccontextmanager
    async def stream(self, messages, *, model, temperature, max_tokens):
        self.calls.append(
            {
                "messages": [m.to_dict() for m in messages],
                "model": model,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if self.fail_on_open is not None:
            raise self.fail_on_open
        self.opened += 1
        try:
            yield self._iterate()
        finally:
            self.closed += 1

    async def _iterate(self):
        for i, fragment in enumerate(self.fragments):
            if self.fail_after is not None and i >= self.fail_after:
                raise self.fail_with
            if self.hang_after is not None and i >= self.hang_after:
                await asyncio.Event().wait()
            yield fragment


@pytest.fixture
def fake_completion():
    return FakeCompletion()


@pytest.fixture
def orchestrator(fake_completion):
    return GuardrailOrchestrator(
        sessions=SessionStore(),
        audit=AuditLog(),
        completion=fake_completion,
        settings=Settings(api_key="sk-ant-real-looking-key"),
    )
