"""Runtime settings for the RAI backend, read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"

# Sampling temperature per session mode; unguarded runs hotter on purpose.
CHAT_TEMPERATURES: dict[str, float] = {"unguarded": 0.8, "guarded": 0.2}
SCENARIO_TEMPERATURES: dict[str, float] = {"unguarded": 0.7, "guarded": 0.1}


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    """Read an integer setting; malformed or out-of-range values fall back to *default*."""
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("invalid_env_setting", name=name, value=raw, default=default)
        return default
    if value < minimum:
        logger.warning("env_setting_below_minimum", name=name, value=value, minimum=minimum, default=default)
        return default
    return value


@dataclass
class Settings:
    """Application settings.

    Parameters
    ----------
    api_key : str
        Completion-service credential (``ANTHROPIC_API_KEY``).
    model : str
        Model identifier sent with every completion request.
    chat_max_tokens, scenario_max_tokens : int
        Output token limits for chat turns and scenario runs.
    audit_capacity : int
        Number of audit entries retained in memory.
    max_sessions : int
        Session store capacity; ``0`` means unbounded.
    """

    api_key: str = ""
    model: str = DEFAULT_MODEL
    chat_max_tokens: int = 1024
    scenario_max_tokens: int = 2048
    audit_capacity: int = 500
    max_sessions: int = 0
    log_level: str = "INFO"
    dev_mode: bool = False
    chat_temperatures: dict[str, float] = field(
        default_factory=lambda: dict(CHAT_TEMPERATURES)
    )
    scenario_temperatures: dict[str, float] = field(
        default_factory=lambda: dict(SCENARIO_TEMPERATURES)
    )

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from the process environment."""
        return cls(
            api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
            model=os.environ.get("RAI_MODEL", DEFAULT_MODEL),
            chat_max_tokens=_env_int("RAI_CHAT_MAX_TOKENS", 1024, minimum=1),
            scenario_max_tokens=_env_int("RAI_SCENARIO_MAX_TOKENS", 2048, minimum=1),
            audit_capacity=_env_int("RAI_AUDIT_CAPACITY", 500, minimum=1),
            max_sessions=_env_int("RAI_MAX_SESSIONS", 0),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            dev_mode=os.environ.get("RAI_DEV_MODE") == "1",
        )
