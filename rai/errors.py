"""Error hierarchy for the RAI backend.

Guardrail checks never raise; these errors cover request validation,
configuration, lookups, and failures of the upstream completion service.
"""

from __future__ import annotations


class RAIError(Exception):
    """Base error for the RAI backend."""


class ConfigurationError(RAIError):
    """The completion-service credential is missing or a placeholder.

    Reported before any network call and never retried.
    """

    def __init__(self, message: str) -> None:
        self.setup_message = message
        super().__init__(message)


class ValidationError(RAIError):
    """A required request field is missing or empty."""

    def __init__(self, field_name: str, reason: str = "is required") -> None:
        self.field_name = field_name
        super().__init__(f"{field_name} {reason}")


class SessionNotFoundError(RAIError):
    """No chat session exists for the given id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class ScenarioNotFoundError(RAIError):
    """No scenario exists for the given id."""

    def __init__(self, scenario_id: str) -> None:
        self.scenario_id = scenario_id
        super().__init__(f"Scenario not found: {scenario_id}")


class UpstreamServiceError(RAIError):
    """The completion service failed (transport, rate limit, or auth).

    ``auth_failure`` is set when the credential was rejected so callers can
    show setup guidance instead of a raw status code.
    """

    def __init__(
        self,
        message: str,
        auth_failure: bool = False,
        status_code: int | None = None,
    ) -> None:
        self.auth_failure = auth_failure
        self.status_code = status_code
        super().__init__(message)
