from __future__ import annotations


def normalize_key(raw: str) -> str:
    """Canonical cache key for a location: trimmed and case-folded."""
    return raw.strip().casefold()
