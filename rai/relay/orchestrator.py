"""Guardrail orchestration and streaming relay.

Each inbound request is planned synchronously, then relayed as a stream of
typed events. Planning runs every pure check in a fixed order:

1. request validation and lookups
2. injection check (guarded only); a hit ends planning with a deflection
3. credential preflight
4. destructive-action flag and PII scrub (guarded only)

so deflection still works when no credential is configured and nothing
reaches the network before all checks have run. Relaying a chat turn holds
the session's lock from the user append to the assistant append; a turn that
fails or is cancelled leaves the history exactly as it was.
"""

from __future__ import annotations

import time
from contextlib import aclosing
from dataclasses import dataclass, field
from typing import AsyncIterator, Sequence

import structlog

from rai.audit.log import AuditLog
from rai.audit.models import Verdict
from rai.config import Settings
from rai.errors import (
    ConfigurationError,
    ScenarioNotFoundError,
    SessionNotFoundError,
    UpstreamServiceError,
    ValidationError,
)
from rai.guardrails.destructive import is_destructive_command
from rai.guardrails.injection import deflection_message, detect_injection
from rai.guardrails.models import InjectionFinding, RedactionResult
from rai.guardrails.scrubber import contains_email, scrub_pii
from rai.llm.client import API_KEY_SETUP_MESSAGE, CompletionService
from rai.relay.events import DeltaEvent, DoneEvent, ErrorEvent, Event, MetadataEvent
from rai.scenarios.catalog import CHATBOT_SCENARIO_ID, get_scenario
from rai.scenarios.models import Scenario
from rai.sessions.models import MODES, ChatMessage, ChatSession
from rai.sessions.store import SessionStore

logger = structlog.get_logger(__name__)

# Labels recorded in ``guardrails_triggered``.
INJECTION_DEFENSE = "injection-defense"
DESTRUCTIVE_GATE = "destructive-gate"
PII_SCRUBBER = "pii-scrubber"

DEFLECTED_MODEL = "DEFLECTED"
DEFLECTED_RESPONSE = "Deflected - prompt injection detected"


@dataclass
class TurnPlan:
    """Outcome of the synchronous guardrail checks for one request."""

    scenario: Scenario
    mode: str
    original_text: str
    outbound_text: str
    session_id: str | None = None
    guardrails_triggered: list[str] = field(default_factory=list)
    injection: InjectionFinding | None = None
    redaction: RedactionResult | None = None
    destructive_warning: bool = False
    started: float = field(default_factory=time.monotonic)

    @property
    def deflected(self) -> bool:
        return self.injection is not None and self.injection.is_injection

    @property
    def pii_redacted(self) -> bool:
        return self.redaction is not None and self.redaction.redaction_count > 0

    @property
    def pii_categories(self) -> list[str]:
        return self.redaction.sorted_categories() if self.pii_redacted else []

    @property
    def human_review_required(self) -> bool:
        if self.mode != "guarded":
            return False
        return self.destructive_warning or self.scenario.requires_human_review

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started) * 1000)

    def metadata(self) -> MetadataEvent:
        return MetadataEvent(
            mode=self.mode,
            guardrails_triggered=tuple(self.guardrails_triggered),
            injection_detected=self.deflected,
            deflected=self.deflected,
            destructive_warning=self.destructive_warning,
            pii_redacted=self.pii_redacted,
            pii_categories=tuple(self.pii_categories),
            processed_input=self.outbound_text if self.pii_redacted else None,
        )


class GuardrailOrchestrator:
    """Runs guarded and unguarded turns against a completion service.

    All state is injected: the session store, the audit log, and the
    completion service are owned by the caller.
    """

    def __init__(
        self,
        sessions: SessionStore,
        audit: AuditLog,
        completion: CompletionService,
        settings: Settings | None = None,
    ) -> None:
        self.sessions = sessions
        self.audit = audit
        self.completion = completion
        self.settings = settings or Settings()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self, mode: str) -> ChatSession:
        """Start a chat session; guarded sessions get the chatbot system prompt."""
        if mode not in MODES:
            raise ValidationError("mode", "must be 'guarded' or 'unguarded'")
        system_prompt = None
        if mode == "guarded":
            system_prompt = get_scenario(CHATBOT_SCENARIO_ID).guarded.system_prompt
        return self.sessions.create(mode, system_prompt=system_prompt)  # type: ignore[arg-type]

    def get_session(self, session_id: str) -> ChatSession | None:
        return self.sessions.get(session_id)

    def clear_session(self, session_id: str) -> bool:
        return self.sessions.clear(session_id)

    def audit_report(self) -> dict:
        """Return ``{"entries": [...], "stats": {...}}`` for the audit view."""
        return {
            "entries": [e.to_dict() for e in self.audit.get_all()],
            "stats": self.audit.get_stats().to_dict(),
        }

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def _preflight(self) -> None:
        if not self.completion.configured:
            logger.warning("preflight_failed", reason="credential_missing_or_placeholder")
            raise ConfigurationError(API_KEY_SETUP_MESSAGE)

    def _content_checks(self, plan: TurnPlan) -> None:
        if is_destructive_command(plan.original_text):
            plan.destructive_warning = True
            plan.guardrails_triggered.append(DESTRUCTIVE_GATE)
            logger.info("destructive_command_flagged", scenario_id=plan.scenario.id)

        if plan.scenario.scrubs_pii or contains_email(plan.original_text):
            result = scrub_pii(plan.outbound_text)
            if result.redaction_count > 0:
                plan.redaction = result
                plan.outbound_text = result.redacted_text
                plan.guardrails_triggered.append(PII_SCRUBBER)
                logger.info(
                    "pii_redacted",
                    scenario_id=plan.scenario.id,
                    redactions=result.redaction_count,
                    categories=result.sorted_categories(),
                )

    def _plan(self, plan: TurnPlan) -> TurnPlan:
        if plan.mode == "guarded":
            finding = detect_injection(plan.original_text)
            if finding.is_injection:
                plan.injection = finding
                plan.outbound_text = finding.sanitized_text
                plan.guardrails_triggered.append(INJECTION_DEFENSE)
                logger.warning(
                    "injection_detected",
                    scenario_id=plan.scenario.id,
                    confidence=finding.confidence.value,
                    patterns=list(finding.matched_patterns),
                )
                return plan

        self._preflight()

        if plan.mode == "guarded":
            self._content_checks(plan)
        return plan

    def prepare_chat_turn(self, session_id: str, text: str) -> TurnPlan:
        """Run the synchronous checks for a chat turn.

        Raises
        ------
        SessionNotFoundError
            Unknown session id.
        ValidationError
            Empty message.
        ConfigurationError
            No usable credential and the turn was not deflected.
        """
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        if not text or not text.strip():
            raise ValidationError("message")
        plan = TurnPlan(
            scenario=get_scenario(CHATBOT_SCENARIO_ID),
            mode=session.mode,
            original_text=text,
            outbound_text=text,
            session_id=session_id,
        )
        return self._plan(plan)

    def prepare_scenario_run(self, scenario_id: str, mode: str, text: str) -> TurnPlan:
        """Run the synchronous checks for a single-shot scenario run."""
        if not text or not text.strip():
            raise ValidationError("input")
        if mode not in MODES:
            raise ValidationError("mode", "must be 'guarded' or 'unguarded'")
        scenario = get_scenario(scenario_id)
        if scenario is None:
            raise ScenarioNotFoundError(scenario_id)
        plan = TurnPlan(
            scenario=scenario,
            mode=mode,
            original_text=text,
            outbound_text=text,
        )
        return self._plan(plan)

    # ------------------------------------------------------------------
    # Relaying
    # ------------------------------------------------------------------

    def _audit_deflection(self, plan: TurnPlan) -> None:
        self.audit.add(
            scenario_id=plan.scenario.id,
            scenario_title=plan.scenario.title,
            verdict=Verdict.GUARDED,
            prompt=f"[INJECTION ATTEMPT] {plan.original_text}",
            response=DEFLECTED_RESPONSE,
            guardrails_triggered=plan.guardrails_triggered,
            injection_detected=True,
            duration_ms=plan.elapsed_ms(),
            model_used=DEFLECTED_MODEL,
        )

    def _audit_completion(self, plan: TurnPlan, response: str) -> None:
        self.audit.add(
            scenario_id=plan.scenario.id,
            scenario_title=plan.scenario.title,
            verdict=Verdict.for_mode(plan.mode),
            prompt=plan.outbound_text,
            response=response,
            guardrails_triggered=plan.guardrails_triggered,
            injection_detected=False,
            pii_redacted=plan.pii_redacted,
            pii_categories=plan.pii_categories,
            human_review_required=plan.human_review_required,
            duration_ms=plan.elapsed_ms(),
            model_used=self.settings.model,
        )

    async def _relay_completion(
        self,
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
        sink: list[str],
    ) -> AsyncIterator[DeltaEvent]:
        async with self.completion.stream(
            messages,
            model=self.settings.model,
            temperature=temperature,
            max_tokens=max_tokens,
        ) as fragments:
            async for fragment in fragments:
                if fragment:
                    sink.append(fragment)
                    yield DeltaEvent(fragment)

    async def _deflect(self, plan: TurnPlan) -> AsyncIterator[Event]:
        message = deflection_message()
        turn_count = None
        if plan.session_id is not None:
            async with self.sessions.lock(plan.session_id):
                if plan.session_id not in self.sessions:
                    yield ErrorEvent(f"Session not found: {plan.session_id}")
                    return
                self._audit_deflection(plan)
                turn_count = self.sessions.append_assistant_turn(plan.session_id, message)
        else:
            self._audit_deflection(plan)

        yield plan.metadata()
        yield DeltaEvent(message)
        yield DoneEvent(duration_ms=plan.elapsed_ms(), turn_count=turn_count)

    async def relay_chat_turn(self, plan: TurnPlan) -> AsyncIterator[Event]:
        """Relay a planned chat turn as events, updating session and audit."""
        if plan.deflected:
            async for event in self._deflect(plan):
                yield event
            return

        session_id = plan.session_id
        if session_id is None:
            raise ValidationError("session_id", "is required for a chat turn")
        async with self.sessions.lock(session_id):
            session = self.sessions.get(session_id)
            if session is None:
                yield ErrorEvent(f"Session not found: {session_id}")
                return

            self.sessions.append_user_turn(session_id, plan.outbound_text)
            completed = False
            chunks: list[str] = []
            try:
                yield plan.metadata()
                try:
                    async with aclosing(
                        self._relay_completion(
                            list(session.messages),
                            self.settings.chat_temperatures[plan.mode],
                            self.settings.chat_max_tokens,
                            chunks,
                        )
                    ) as deltas:
                        async for delta in deltas:
                            yield delta
                except UpstreamServiceError as exc:
                    logger.warning(
                        "chat_turn_failed",
                        session_id=session_id,
                        auth_failure=exc.auth_failure,
                        status_code=exc.status_code,
                    )
                    yield ErrorEvent(str(exc), auth_failure=exc.auth_failure)
                    return
                except Exception:
                    logger.exception("chat_turn_crashed", session_id=session_id)
                    yield ErrorEvent("The completion service failed unexpectedly.")
                    return

                response = "".join(chunks)
                turn_count = self.sessions.append_assistant_turn(session_id, response)
                completed = True
            finally:
                if not completed:
                    self.sessions.discard_last_user_turn(session_id)
                    logger.info("chat_turn_rolled_back", session_id=session_id)

        self._audit_completion(plan, response)
        yield DoneEvent(duration_ms=plan.elapsed_ms(), turn_count=turn_count)

    async def relay_scenario_run(self, plan: TurnPlan) -> AsyncIterator[Event]:
        """Relay a planned scenario run as events and audit it on success."""
        if plan.deflected:
            async for event in self._deflect(plan):
                yield event
            return

        config = plan.scenario.config_for(plan.mode)
        messages: list[ChatMessage] = []
        if config.system_prompt:
            messages.append(ChatMessage(role="system", content=config.system_prompt))
        messages.append(ChatMessage(role="user", content=config.render(plan.outbound_text)))

        yield plan.metadata()
        chunks: list[str] = []
        try:
            async with aclosing(
                self._relay_completion(
                    messages,
                    self.settings.scenario_temperatures[plan.mode],
                    self.settings.scenario_max_tokens,
                    chunks,
                )
            ) as deltas:
                async for delta in deltas:
                    yield delta
        except UpstreamServiceError as exc:
            logger.warning(
                "scenario_run_failed",
                scenario_id=plan.scenario.id,
                auth_failure=exc.auth_failure,
                status_code=exc.status_code,
            )
            yield ErrorEvent(str(exc), auth_failure=exc.auth_failure)
            return
        except Exception:
            logger.exception("scenario_run_crashed", scenario_id=plan.scenario.id)
            yield ErrorEvent("The completion service failed unexpectedly.")
            return

        self._audit_completion(plan, "".join(chunks))
        yield DoneEvent(duration_ms=plan.elapsed_ms())

    # ------------------------------------------------------------------
    # Convenience entry points
    # ------------------------------------------------------------------

    async def chat_turn(self, session_id: str, text: str) -> AsyncIterator[Event]:
        """Plan and relay a chat turn. Planning errors raise on first iteration."""
        plan = self.prepare_chat_turn(session_id, text)
        async with aclosing(self.relay_chat_turn(plan)) as events:
            async for event in events:
                yield event

    async def run_scenario(self, scenario_id: str, mode: str, text: str) -> AsyncIterator[Event]:
        """Plan and relay a scenario run."""
        plan = self.prepare_scenario_run(scenario_id, mode, text)
        async with aclosing(self.relay_scenario_run(plan)) as events:
            async for event in events:
                yield event
