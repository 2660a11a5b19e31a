"""Completion-service client for RAI.

Wraps the Anthropic streaming API behind a small protocol so the guardrail
orchestrator can be driven by any streaming text-completion backend.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Protocol, Sequence

import anthropic
import structlog

from rai.config import DEFAULT_MODEL
from rai.errors import UpstreamServiceError
from rai.sessions.models import ChatMessage

logger = structlog.get_logger(__name__)

# Fragments that mark a copied-from-docs key rather than a real one.
PLACEHOLDER_PATTERNS: tuple[str, ...] = (
    "your_key",
    "your-key",
    "sk-ant-your",
    "placeholder",
    "xxx",
    "test_key",
    "add_your",
)

API_KEY_SETUP_MESSAGE = (
    "ANTHROPIC_API_KEY not configured.\n\n"
    "Setup steps:\n"
    "1. Create an API key at https://console.anthropic.com\n"
    "2. Export ANTHROPIC_API_KEY=sk-ant-... in the backend environment\n"
    "3. Restart the backend server"
)

AUTH_FAILURE_MESSAGE = (
    "ANTHROPIC_API_KEY not configured or invalid.\n\n"
    "To fix:\n"
    "1. Check the key at https://console.anthropic.com\n"
    "2. Export ANTHROPIC_API_KEY=sk-ant-... in the backend environment\n"
    "3. Restart the backend server"
)


def is_api_key_valid(key: str | None) -> bool:
    """Return True if *key* is set and is not a known placeholder value."""
    if not key or not key.strip():
        return False
    lowered = key.lower()
    return not any(p in lowered for p in PLACEHOLDER_PATTERNS)


class CompletionService(Protocol):
    """A streaming text-completion backend."""

    @property
    def configured(self) -> bool: ...

    def stream(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> AsyncContextManager[AsyncIterator[str]]:
        """Open a completion stream yielding text fragments.

        Leaving the context manager releases the underlying connection.
        """
        ...


def to_upstream_error(exc: Exception) -> UpstreamServiceError:
    """Translate an Anthropic SDK error into :class:`UpstreamServiceError`."""
    if isinstance(exc, anthropic.AuthenticationError):
        return UpstreamServiceError(AUTH_FAILURE_MESSAGE, auth_failure=True, status_code=401)
    if isinstance(exc, anthropic.RateLimitError):
        return UpstreamServiceError(
            "Completion service rate limit reached. Try again shortly.", status_code=429
        )
    if isinstance(exc, anthropic.APIStatusError):
        return UpstreamServiceError(
            f"Completion service error ({exc.status_code}): {exc.message}",
            status_code=exc.status_code,
        )
    if isinstance(exc, anthropic.APIConnectionError):
        return UpstreamServiceError("Could not reach the completion service.")
    return UpstreamServiceError(str(exc) or exc.__class__.__name__)


def split_system(messages: Sequence[ChatMessage]) -> tuple[str | None, list[dict[str, str]]]:
    """Lift system messages out and normalise the rest for the Messages API.

    The API expects alternating turns starting with the user, so leading
    assistant messages are dropped and consecutive same-role messages merged.
    """
    system_parts = [m.content for m in messages if m.role == "system"]
    turns: list[dict[str, str]] = []
    for m in messages:
        if m.role == "system":
            continue
        if not turns and m.role == "assistant":
            continue
        if turns and turns[-1]["role"] == m.role:
            turns[-1]["content"] += "\n\n" + m.content
        else:
            turns.append({"role": m.role, "content": m.content})
    system = "\n\n".join(system_parts) if system_parts else None
    return system, turns


class LLMClient:
    """Thin wrapper around the Anthropic async SDK.

    Parameters
    ----------
    api_key : str | None
        Anthropic API key. Falls back to the ``ANTHROPIC_API_KEY``
        environment variable when *None*.
    model : str
        Default model identifier.
    """

    def __init__(self, api_key: str | None = None, model: str = DEFAULT_MODEL) -> None:
        self.model = model
        self.api_key = api_key if api_key is not None else os.environ.get("ANTHROPIC_API_KEY", "")
        self._configured = is_api_key_valid(self.api_key)

        if self._configured:
            self._async_client = anthropic.AsyncAnthropic(api_key=self.api_key)
        else:
            self._async_client = None  # type: ignore[assignment]

    # -- properties ----------------------------------------------------------

    @property
    def configured(self) -> bool:
        """Return *True* if a usable API key is available."""
        return self._configured

    # -- async streaming completion ------------------------------------------

    @asynccontextmanager
    async def stream(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ) -> AsyncIterator[AsyncIterator[str]]:
        """Stream text fragments for *messages*.

        SDK failures, whether raised when opening the stream or while reading
        it, surface as :class:`UpstreamServiceError`.
        """
        if not self._configured:
            raise UpstreamServiceError(API_KEY_SETUP_MESSAGE, auth_failure=True)

        system, turns = split_system(messages)
        kwargs: dict = {
            "model": model or self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": turns,
        }
        if system:
            kwargs["system"] = system

        try:
            async with self._async_client.messages.stream(**kwargs) as stream:
                yield stream.text_stream
        except anthropic.AnthropicError as exc:
            logger.warning("completion_stream_failed", error=exc.__class__.__name__)
            raise to_upstream_error(exc) from exc
