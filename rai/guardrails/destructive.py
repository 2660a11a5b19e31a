"""Destructive-command detection.

Flags requests that ask for deletions, force pushes, or permission blowouts.
The flag is advisory: it annotates the turn and requests human review but
never blocks the request.
"""

from __future__ import annotations

import re

DESTRUCTIVE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    (
        "delete/drop/truncate",
        re.compile(r"\b(?:rm|remove|delete|drop|truncate|destroy|wipe|purge)\b", re.IGNORECASE),
    ),
    (
        "force push",
        re.compile(r"(?:\bforce[\s_-]?push\b|\bgit\s+push\b.*(?:--force\b|\s-f\b)|--force\b)", re.IGNORECASE),
    ),
    (
        "recursive chmod",
        re.compile(r"\bchmod\s+(?:-R\s+)?(?:777|a\+[wx])", re.IGNORECASE),
    ),
]


def matched_destructive_patterns(text: str) -> list[str]:
    """Return the labels of every destructive pattern found in *text*."""
    if not text:
        return []
    return [label for label, pattern in DESTRUCTIVE_PATTERNS if pattern.search(text)]


def is_destructive_command(text: str) -> bool:
    """Return True if *text* looks like a destructive command request."""
    return bool(matched_destructive_patterns(text))
