"""
Review Session: application layer orchestrator.

Drives a fixed snapshot of due cards through one review cycle:

    NotStarted -> InProgress -> Completed

submit_review() is the single mutation entry point. It delegates the state
change to the Scheduler and records it through the CardStore.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from recallkit.domain.constants import PASSING_QUALITY
from recallkit.domain.errors import (
    EmptySessionError,
    SessionCompletedError,
    SessionStateError,
)
from recallkit.domain.models import Card
from recallkit.domain.ports import CardStore

from .ranking import Ranker, build_review_queue, get_ranker
from .scheduler import Scheduler

if TYPE_CHECKING:
    from .config import RecallkitSettings

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class SessionStats:
    """Running counters; only ever incremented."""

    correct: int = 0
    incorrect: int = 0

    @property
    def total(self) -> int:
        return self.correct + self.incorrect


@dataclass(frozen=True)
class SessionSummary:
    """
    Final statistics handed to the host (e.g. for XP or streak bookkeeping).

    Attributes:
        total: Cards reviewed in this session.
        correct: Reviews graded >= 3.
        incorrect: Reviews graded < 3.
        accuracy: correct / total, 0.0 when nothing was reviewed.
        remaining: Cards left unreviewed (non-zero only for aborted sessions).
        aborted: True if end() was called before the last card.
    """

    total: int
    correct: int
    incorrect: int
    accuracy: float
    remaining: int = 0
    aborted: bool = False


class ReviewSession:
    """
    Single-owner state machine over a snapshot of due cards.

    The snapshot is taken at start() and never changes; cards that become
    due mid-session are not added, and each card appears at most once.
    """

    def __init__(self, store: CardStore, scheduler: Scheduler | None = None):
        self._store = store
        self._scheduler = scheduler or Scheduler()
        self._due_cards: tuple[Card, ...] = ()
        self._cursor = 0
        self._stats = SessionStats()
        self._state = SessionState.NOT_STARTED
        self._summary: SessionSummary | None = None

    # ------------------------------------------------------------------
    # State inspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def due_cards(self) -> tuple[Card, ...]:
        return self._due_cards

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def stats(self) -> SessionStats:
        return SessionStats(self._stats.correct, self._stats.incorrect)

    @property
    def remaining(self) -> int:
        return len(self._due_cards) - self._cursor

    @property
    def progress(self) -> tuple[int, int]:
        """(reviewed, total) for progress bars."""
        return (self._cursor, len(self._due_cards))

    def current_card(self) -> Card | None:
        if self._state is not SessionState.IN_PROGRESS:
            return None
        if self._cursor < len(self._due_cards):
            return self._due_cards[self._cursor]
        return None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self, due_cards: Iterable[Card]) -> "ReviewSession":
        """
        Fix the card snapshot and enter InProgress.

        Raises:
            SessionCompletedError: the session was already started.
            EmptySessionError: due_cards is empty.
        """
        if self._state is not SessionState.NOT_STARTED:
            raise SessionCompletedError("Session has already been started")

        snapshot = _dedupe(due_cards)
        if not snapshot:
            raise EmptySessionError("No cards due for review")

        self._due_cards = snapshot
        self._cursor = 0
        self._stats = SessionStats()
        self._state = SessionState.IN_PROGRESS
        logger.debug(f"Review session started with {len(snapshot)} cards")
        return self

    def submit_review(self, quality: int, now: datetime | None = None) -> Card:
        """
        Grade the current card, persist its new state and advance.

        Either everything (card state, stats, cursor) changes or nothing
        does: an InvalidQuality or store error leaves the session as it was.

        Raises:
            SessionCompletedError: no card left to review, or end() was called.
            InvalidQuality: quality is not an integer in [0, 4].
            NotFoundError: the store no longer knows the current card.
        """
        card = self.current_card()
        if card is None:
            raise SessionCompletedError("Review session is already complete")

        updated = self._scheduler.review(card, quality, now)
        self._store.apply_update(card.id, updated)

        if quality >= PASSING_QUALITY:
            self._stats.correct += 1
        else:
            self._stats.incorrect += 1
        self._cursor += 1

        if self._cursor >= len(self._due_cards):
            self._state = SessionState.COMPLETED
            logger.debug(f"Review session completed: {self._stats.total} reviewed")
        return updated

    def end(self) -> SessionSummary:
        """
        Close the session and summarise it. May be called early to abort.

        Raises:
            SessionStateError: the session was never started.
        """
        if self._state is SessionState.NOT_STARTED:
            raise SessionStateError("Session was never started")
        if self._summary is not None:
            return self._summary

        total = self._stats.total
        self._summary = SessionSummary(
            total=total,
            correct=self._stats.correct,
            incorrect=self._stats.incorrect,
            accuracy=self._stats.correct / total if total else 0.0,
            remaining=self.remaining,
            aborted=self.remaining > 0,
        )
        self._state = SessionState.COMPLETED
        if self._summary.aborted:
            logger.debug(f"Review session aborted with {self.remaining} cards left")
        return self._summary


def _dedupe(cards: Iterable[Card]) -> tuple[Card, ...]:
    seen: set[str] = set()
    unique: list[Card] = []
    for card in cards:
        if card.id in seen:
            logger.warning(f"Dropping duplicate card {card.id} from session snapshot")
            continue
        seen.add(card.id)
        unique.append(card)
    return tuple(unique)


def start_review_session(
    store: CardStore,
    now: datetime | None = None,
    tag_filter: str | None = None,
    limit: int | None = None,
    ranker: Ranker | None = None,
    scheduler: Scheduler | None = None,
) -> ReviewSession:
    """
    Query the store for due cards and start a session over them.

    Raises:
        EmptySessionError: nothing is due.
    """
    scheduler = scheduler or Scheduler()
    now = now if now is not None else scheduler.now()
    queue: Sequence[Card] = build_review_queue(
        store, now, tag_filter=tag_filter, ranker=ranker, limit=limit
    )
    return ReviewSession(store, scheduler).start(queue)


def start_configured_session(
    store: CardStore,
    settings: "RecallkitSettings | None" = None,
    now: datetime | None = None,
    scheduler: Scheduler | None = None,
) -> ReviewSession:
    """Start a session using the host's configured ranking, tag and size limit."""
    from .config import resolve_config

    settings = settings or resolve_config()
    return start_review_session(
        store,
        now=now,
        tag_filter=settings.default_tag,
        limit=settings.session_limit,
        ranker=get_ranker(settings.ranking),
        scheduler=scheduler,
    )
