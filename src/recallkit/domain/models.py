"""
Domain models for spaced repetition scheduling.

These are pure data structures with no I/O or external dependencies.
Cards are immutable: the scheduler produces a new Card for every review.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from .constants import (
    DEFAULT_DIFFICULTY,
    DIFFICULTIES,
    INITIAL_EASE,
    INITIAL_INTERVAL,
    MAX_QUALITY,
    MIN_EASE,
    MIN_QUALITY,
    PASSING_QUALITY,
)
from .errors import InvalidCardError


@dataclass(frozen=True)
class ReviewEntry:
    """
    A single review log entry.

    Attributes:
        reviewed_at: When the review happened.
        quality: Grade given (0=total failure ... 4=perfect recall).
        interval: Interval assigned by this review (days).
    """

    reviewed_at: datetime
    quality: int
    interval: int

    @property
    def passed(self) -> bool:
        return self.quality >= PASSING_QUALITY


@dataclass(frozen=True)
class Card:
    """
    A study card and its scheduling state.

    Only the scheduler derives new scheduling state; the store just keeps
    whatever the scheduler returned.
    """

    id: str
    front: str
    back: str
    next_review: datetime
    tags: frozenset[str] = frozenset()

    # SM-2 state
    interval: int = INITIAL_INTERVAL
    repetitions: int = 0
    ease_factor: float = INITIAL_EASE

    last_reviewed: datetime | None = None
    review_history: tuple[ReviewEntry, ...] = ()

    # Caller-supplied label, only used for catalog sorting
    difficulty: str = DEFAULT_DIFFICULTY
    created_at: datetime | None = field(default=None, compare=False)

    def __post_init__(self):
        # Normalize containers so callers can pass lists/sets
        if not isinstance(self.tags, frozenset):
            object.__setattr__(self, "tags", frozenset(self.tags))
        if not isinstance(self.review_history, tuple):
            object.__setattr__(self, "review_history", tuple(self.review_history))
        if self.created_at is None:
            object.__setattr__(self, "created_at", self.next_review)
        _validate_card(self)

    @classmethod
    def new(
        cls,
        card_id: str,
        front: str,
        back: str,
        now: datetime,
        tags: Iterable[str] = (),
        difficulty: str = DEFAULT_DIFFICULTY,
    ) -> "Card":
        """Build a never-reviewed card that is due immediately."""
        front = front.strip() if isinstance(front, str) else front
        back = back.strip() if isinstance(back, str) else back
        return cls(
            id=card_id,
            front=front,
            back=back,
            next_review=now,
            tags=frozenset(_clean_tags(tags)),
            difficulty=difficulty,
            created_at=now,
        )

    @property
    def review_count(self) -> int:
        return len(self.review_history)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


def _validate_card(card: Card) -> None:
    if not card.id or not isinstance(card.id, str):
        raise InvalidCardError(f"Card id must be a non-empty string, got {card.id!r}")
    for name in ("front", "back"):
        value = getattr(card, name)
        if not isinstance(value, str) or not value.strip():
            raise InvalidCardError(f"Card {card.id}: {name} must be non-empty text")
    if not all(isinstance(t, str) for t in card.tags):
        raise InvalidCardError(f"Card {card.id}: tags must be strings")
    if card.difficulty not in DIFFICULTIES:
        raise InvalidCardError(
            f"Card {card.id}: difficulty must be one of {DIFFICULTIES}, got {card.difficulty!r}"
        )

    if isinstance(card.interval, bool) or not isinstance(card.interval, int) or card.interval < 1:
        raise InvalidCardError(f"Card {card.id}: interval must be an int >= 1")
    if (
        isinstance(card.repetitions, bool)
        or not isinstance(card.repetitions, int)
        or card.repetitions < 0
    ):
        raise InvalidCardError(f"Card {card.id}: repetitions must be an int >= 0")
    if card.ease_factor < MIN_EASE:
        raise InvalidCardError(f"Card {card.id}: ease_factor must be >= {MIN_EASE}")

    history = card.review_history
    for name in ("next_review", "last_reviewed", "created_at"):
        value = getattr(card, name)
        if value is not None and _is_naive(value):
            raise InvalidCardError(f"Card {card.id}: {name} must be timezone-aware")
    for entry in history:
        if _is_naive(entry.reviewed_at):
            raise InvalidCardError(f"Card {card.id}: review timestamps must be timezone-aware")
        if not MIN_QUALITY <= entry.quality <= MAX_QUALITY or entry.interval < 1:
            raise InvalidCardError(f"Card {card.id}: malformed review entry {entry!r}")
    for earlier, later in zip(history, history[1:]):
        if later.reviewed_at < earlier.reviewed_at:
            raise InvalidCardError(f"Card {card.id}: review history is not chronological")
    if history and not history[-1].passed and card.repetitions != 0:
        raise InvalidCardError(f"Card {card.id}: repetitions must be 0 after a failed review")


def _clean_tags(tags: Iterable[str]) -> Iterable[str]:
    if isinstance(tags, str):
        tags = [tags]
    for tag in tags:
        if isinstance(tag, str):
            tag = tag.strip()
            if not tag:
                continue
        yield tag


def _is_naive(value: datetime) -> bool:
    return value.tzinfo is None or value.utcoffset() is None
