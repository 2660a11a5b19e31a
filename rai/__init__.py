"""RAI: guardrail pipeline and audited LLM sessions for the Responsible AI demo."""

__version__ = "0.1.0"
