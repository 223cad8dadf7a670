"""Browsing helpers for a card collection: search, tag filter, sorting."""

from collections.abc import Iterable
from datetime import datetime
from typing import cast

from recallkit.domain.models import Card

ALL_TAGS = "all"

_DIFFICULTY_ORDER = {"easy": 1, "medium": 2, "hard": 3}

SORT_KEYS = ("due", "difficulty", "repetitions", "last_reviewed")


def search_cards(cards: Iterable[Card], term: str | None) -> list[Card]:
    """Case-insensitive substring match on front, back or any tag."""
    cards = list(cards)
    if not term:
        return cards
    needle = term.lower()
    return [
        c
        for c in cards
        if needle in c.front.lower()
        or needle in c.back.lower()
        or any(needle in tag.lower() for tag in c.tags)
    ]


def filter_by_tag(cards: Iterable[Card], tag: str | None) -> list[Card]:
    if tag is None or tag == ALL_TAGS:
        return list(cards)
    return [c for c in cards if tag in c.tags]


def sort_cards(cards: Iterable[Card], sort_by: str = "due") -> list[Card]:
    """
    Sort cards for display.

    - due: soonest next_review first
    - difficulty: easy, medium, hard
    - repetitions: most repetitions first
    - last_reviewed: most recently reviewed first, never-reviewed last
    """
    cards = list(cards)
    if sort_by == "due":
        return sorted(cards, key=lambda c: (c.next_review, c.id))
    if sort_by == "difficulty":
        return sorted(cards, key=lambda c: _DIFFICULTY_ORDER[c.difficulty])
    if sort_by == "repetitions":
        return sorted(cards, key=lambda c: c.repetitions, reverse=True)
    if sort_by == "last_reviewed":
        reviewed = [c for c in cards if c.last_reviewed is not None]
        never = [c for c in cards if c.last_reviewed is None]
        reviewed.sort(key=lambda c: cast(datetime, c.last_reviewed), reverse=True)
        return reviewed + never
    raise ValueError(f"Unknown sort key '{sort_by}'. Choose from: {', '.join(SORT_KEYS)}")


def all_tags(cards: Iterable[Card]) -> list[str]:
    tags: set[str] = set()
    for card in cards:
        tags.update(card.tags)
    return sorted(tags)
