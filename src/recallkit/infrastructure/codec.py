"""
Lossless (de)serialization of cards for hosts that persist them.

Every Card field round-trips, including the full review history.
Timestamps are written as ISO-8601 strings.
"""

import json
from collections.abc import Iterable
from typing import Any

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, ValidationError

from recallkit.domain.constants import DEFAULT_DIFFICULTY, INITIAL_EASE, INITIAL_INTERVAL
from recallkit.domain.errors import DeckFormatError, InvalidCardError
from recallkit.domain.models import Card, ReviewEntry

FORMAT_VERSION = 1


class ReviewRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reviewed_at: AwareDatetime
    quality: int
    interval: int


class CardRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    front: str
    back: str
    tags: list[str] = Field(default_factory=list)
    interval: int = INITIAL_INTERVAL
    repetitions: int = 0
    ease_factor: float = INITIAL_EASE
    next_review: AwareDatetime
    last_reviewed: AwareDatetime | None = None
    review_history: list[ReviewRecord] = Field(default_factory=list)
    difficulty: str = DEFAULT_DIFFICULTY
    created_at: AwareDatetime | None = None


class DeckRecord(BaseModel):
    version: int = FORMAT_VERSION
    cards: list[CardRecord] = Field(default_factory=list)


def card_to_dict(card: Card) -> dict[str, Any]:
    record = CardRecord(
        id=card.id,
        front=card.front,
        back=card.back,
        # sorted so output is stable across runs
        tags=sorted(card.tags),
        interval=card.interval,
        repetitions=card.repetitions,
        ease_factor=card.ease_factor,
        next_review=card.next_review,
        last_reviewed=card.last_reviewed,
        review_history=[
            ReviewRecord(reviewed_at=r.reviewed_at, quality=r.quality, interval=r.interval)
            for r in card.review_history
        ],
        difficulty=card.difficulty,
        created_at=card.created_at,
    )
    return record.model_dump(mode="json")


def card_from_dict(data: dict[str, Any]) -> Card:
    """
    Raises:
        DeckFormatError: the record is malformed or breaks a Card invariant.
    """
    try:
        record = CardRecord.model_validate(data)
    except ValidationError as e:
        raise DeckFormatError(f"Invalid card record: {e}") from e
    return _record_to_card(record)


def _record_to_card(record: CardRecord) -> Card:
    try:
        return Card(
            id=record.id,
            front=record.front,
            back=record.back,
            tags=frozenset(record.tags),
            interval=record.interval,
            repetitions=record.repetitions,
            ease_factor=record.ease_factor,
            next_review=record.next_review,
            last_reviewed=record.last_reviewed,
            review_history=tuple(
                ReviewEntry(r.reviewed_at, r.quality, r.interval) for r in record.review_history
            ),
            difficulty=record.difficulty,
            created_at=record.created_at,
        )
    except InvalidCardError as e:
        raise DeckFormatError(f"Invalid card record {record.id}: {e}") from e


def dumps_cards(cards: Iterable[Card], indent: int | None = 2) -> str:
    payload = {"version": FORMAT_VERSION, "cards": [card_to_dict(c) for c in cards]}
    return json.dumps(payload, indent=indent, ensure_ascii=False)


def loads_cards(text: str) -> list[Card]:
    """
    Raises:
        DeckFormatError: text is not a valid card document.
    """
    try:
        deck = DeckRecord.model_validate_json(text)
    except ValidationError as e:
        raise DeckFormatError(f"Invalid card document: {e}") from e

    if deck.version != FORMAT_VERSION:
        raise DeckFormatError(f"Unsupported card document version {deck.version}")
    return [_record_to_card(r) for r in deck.cards]
