"""Identity normalization for joining records across independently authored sources."""

from __future__ import annotations

from typing import Optional

UNASSIGNED_KEY = "unassigned"
UNKNOWN_AGENT_LABEL = "Unknown"


def normalize_key(text: Optional[str]) -> str:
    """Return the comparison key for a free-text identity field.

    Surrounding whitespace is trimmed, inner runs of whitespace collapse to a
    single space and the result is case-folded. Empty or whitespace-only
    input maps to ``"unassigned"``.
    """

    if not isinstance(text, str):
        return UNASSIGNED_KEY
    collapsed = " ".join(text.split())
    if not collapsed:
        return UNASSIGNED_KEY
    return collapsed.casefold()


def display_name(text: Optional[str], fallback: str = UNKNOWN_AGENT_LABEL) -> str:
    """Capitalize each word for display while keeping the rest of its casing."""

    if not isinstance(text, str) or not text.strip():
        return fallback
    return " ".join(word[:1].upper() + word[1:] for word in text.split())


def full_name(first: Optional[str], last: Optional[str]) -> str:
    return f"{(first or '').strip()} {(last or '').strip()}".strip()


def names_match(left: Optional[str], right: Optional[str]) -> bool:
    return normalize_key(left) == normalize_key(right)
