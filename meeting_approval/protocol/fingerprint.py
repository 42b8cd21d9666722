"""Semantic fingerprint of a calendar proposal.

Two tool calls with the same meeting, target, title and start time describe
the same proposal, even if the live model re-issued the call after an
interruption with slightly different casing or whitespace.
"""

import hashlib
from datetime import UTC, datetime


_SEPARATOR = "\x1f"


def _normalize_text(value: str) -> str:
    return " ".join(value.split()).casefold()


def _normalize_start(value: str) -> str:
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return _normalize_text(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC)
    return parsed.isoformat()


def compute_fingerprint(meeting_id: str, target_descriptor: str, title: str, start_time: str) -> str:
    """Deterministic dedup key for a proposal."""
    material = _SEPARATOR.join(
        [
            meeting_id,
            _normalize_text(target_descriptor),
            _normalize_text(title),
            _normalize_start(start_time),
        ]
    )
    return hashlib.sha256(material.encode("utf-8")).hexdigest()[:32]
