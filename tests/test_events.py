"""Tests for relay event serialization."""

import json

from rai.relay.events import DeltaEvent, DoneEvent, ErrorEvent, MetadataEvent, to_sse


def _decode(frame: str) -> dict:
    assert frame.startswith("data: ")
    assert frame.endswith("\n\n")
    return json.loads(frame[len("data: "):])


def test_metadata_frame():
    event = MetadataEvent(
        mode="guarded",
        guardrails_triggered=("pii-scrubber",),
        pii_redacted=True,
        pii_categories=("PII",),
        processed_input="hi [EMAIL_REDACTED]",
    )
    data = _decode(to_sse(event))
    assert data == {
        "type": "metadata",
        "mode": "guarded",
        "guardrailsTriggered": ["pii-scrubber"],
        "injectionDetected": False,
        "deflected": False,
        "destructiveWarning": False,
        "piiRedacted": True,
        "piiCategories": ["PII"],
        "processedInput": "hi [EMAIL_REDACTED]",
    }


def test_metadata_omits_processed_input_when_unset():
    assert "processedInput" not in MetadataEvent(mode="unguarded").to_dict()


def test_delta_frame():
    assert _decode(to_sse(DeltaEvent("abc"))) == {"type": "delta", "content": "abc"}


def test_done_frame():
    assert _decode(to_sse(DoneEvent(duration_ms=12, turn_count=3))) == {
        "type": "done",
        "durationMs": 12,
        "turnCount": 3,
    }
    assert "turnCount" not in DoneEvent(duration_ms=1).to_dict()


def test_error_frame():
    data = _decode(to_sse(ErrorEvent("bad key", auth_failure=True)))
    assert data == {"type": "error", "message": "bad key", "authFailure": True}
