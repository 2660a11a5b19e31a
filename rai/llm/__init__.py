"""RAI completion-service integration.

Provides a thin wrapper around the Anthropic streaming API, credential
validation, and the protocol the orchestrator depends on.
"""

from rai.llm.client import (
    API_KEY_SETUP_MESSAGE,
    CompletionService,
    LLMClient,
    is_api_key_valid,
)

__all__ = [
    "API_KEY_SETUP_MESSAGE",
    "CompletionService",
    "LLMClient",
    "is_api_key_valid",
]
