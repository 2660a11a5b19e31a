"""Scenario catalog for the guarded vs unguarded demo."""

from rai.scenarios.catalog import CHATBOT_SCENARIO_ID, SCENARIOS, get_scenario
from rai.scenarios.models import GuardrailInfo, PromptConfig, Scenario

__all__ = [
    "CHATBOT_SCENARIO_ID",
    "GuardrailInfo",
    "PromptConfig",
    "SCENARIOS",
    "Scenario",
    "get_scenario",
]
