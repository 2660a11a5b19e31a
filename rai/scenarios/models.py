"""Data models for demo scenarios."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GuardrailInfo:
    """A guardrail shown alongside a scenario."""

    id: str
    label: str
    description: str


@dataclass(frozen=True)
class PromptConfig:
    """Prompt setup for one side (guarded or unguarded) of a scenario."""

    user_prompt_template: str  # contains ``{input}``
    label: str  # warning label (unguarded) or success label (guarded)
    system_prompt: str | None = None
    failure_mode: str = ""

    def render(self, text: str) -> str:
        return self.user_prompt_template.format(input=text)


@dataclass(frozen=True)
class Scenario:
    """One of the eight demo scenarios."""

    id: str
    title: str
    dimension: str
    key_principle: str
    unguarded: PromptConfig
    guarded: PromptConfig
    sample_input: str
    guardrails: tuple[GuardrailInfo, ...] = field(default_factory=tuple)
    demo_tip: str = ""
    scrubs_pii: bool = False
    requires_human_review: bool = False

    def config_for(self, mode: str) -> PromptConfig:
        return self.guarded if mode == "guarded" else self.unguarded
