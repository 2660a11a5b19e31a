"""Server-sent-events helpers shared by the streaming routers."""

from __future__ import annotations

from contextlib import aclosing
from typing import AsyncIterator

from fastapi import HTTPException
from fastapi.responses import StreamingResponse

from rai.errors import (
    ConfigurationError,
    RAIError,
    ScenarioNotFoundError,
    SessionNotFoundError,
    ValidationError,
)
from rai.relay.events import Event, to_sse

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def _encode(events: AsyncIterator[Event]) -> AsyncIterator[str]:
    async with aclosing(events) as stream:
        async for event in stream:
            yield to_sse(event)


def sse_response(events: AsyncIterator[Event]) -> StreamingResponse:
    """Wrap an event iterator in a ``text/event-stream`` response."""
    return StreamingResponse(
        _encode(events), media_type="text/event-stream", headers=SSE_HEADERS
    )


def to_http_error(exc: RAIError) -> HTTPException:
    """Map a planning error onto the HTTP status the client expects."""
    if isinstance(exc, (SessionNotFoundError, ScenarioNotFoundError)):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, ConfigurationError):
        return HTTPException(status_code=503, detail=exc.setup_message)
    return HTTPException(status_code=500, detail=str(exc))
