"""Stable card identifiers."""

from ulid import ULID

from .constants import CARD_ID_PREFIX


def generate_card_id() -> str:
    """Generate a stable card ID using ULID (lexicographically time-ordered)."""
    return f"{CARD_ID_PREFIX}{ULID()}"
