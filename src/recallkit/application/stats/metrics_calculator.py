"""
Metrics calculator for deriving insights from card review state.

This is a pure computation module with no I/O.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from recallkit.domain.constants import MIN_REVIEWS_FOR_VOLATILITY, VOLATILITY_WINDOW
from recallkit.domain.models import Card, ReviewEntry

SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class DeckStats:
    """Collection overview: Total / Due / Reviewed / Avg Reviews."""

    total: int
    due: int
    reviewed: int  # cards with at least one successful streak running
    average_repetitions: float


def compute_deck_stats(cards: Iterable[Card], now: datetime) -> DeckStats:
    """
    Summarise a collection.

    A card counts as reviewed once it has a passing streak running, so a
    lapsed card drops out until it is answered correctly again.
    """
    cards = list(cards)
    total = len(cards)
    return DeckStats(
        total=total,
        due=sum(1 for c in cards if c.next_review <= now),
        reviewed=sum(1 for c in cards if c.repetitions > 0),
        average_repetitions=(sum(c.repetitions for c in cards) / total) if total else 0.0,
    )


@dataclass
class CardMetrics:
    """
    Card state enriched with computed metrics.
    """

    card_id: str
    front: str
    interval: int
    repetitions: int
    ease_factor: float

    # Computed metrics
    review_count: int
    lapse_count: int
    lapse_rate: float | None  # lapses / reviews
    volatility: float | None  # Interval variance over recent reviews
    days_overdue: int  # Negative if not yet due
    days_until_due: int  # 0 once due


class MetricsCalculator:
    """
    Computes derived metrics from Card objects.

    Stateless and side-effect free.
    """

    def enrich(self, card: Card, now: datetime) -> CardMetrics:
        """
        Enrich a card with computed metrics.
        """
        history = card.review_history
        lapses = sum(1 for r in history if not r.passed)

        return CardMetrics(
            card_id=card.id,
            front=card.front,
            interval=card.interval,
            repetitions=card.repetitions,
            ease_factor=card.ease_factor,
            review_count=len(history),
            lapse_count=lapses,
            lapse_rate=lapses / len(history) if history else None,
            volatility=self._compute_volatility(history),
            days_overdue=self._compute_days_overdue(card, now),
            days_until_due=self._compute_days_until_due(card, now),
        )

    def deck_stats(self, cards: Iterable[Card], now: datetime) -> DeckStats:
        return compute_deck_stats(cards, now)

    def _compute_volatility(self, reviews: tuple[ReviewEntry, ...]) -> float | None:
        """
        Compute variance in intervals over recent reviews.

        High volatility indicates unstable learning (repeated lapses).
        """
        if len(reviews) < MIN_REVIEWS_FOR_VOLATILITY:
            return None

        intervals = [r.interval for r in reviews[-VOLATILITY_WINDOW:]]
        mean = sum(intervals) / len(intervals)
        return sum((i - mean) ** 2 for i in intervals) / len(intervals)

    def _compute_days_overdue(self, card: Card, now: datetime) -> int:
        """Whole days past next_review (negative if not yet due)."""
        return math.floor((now - card.next_review).total_seconds() / SECONDS_PER_DAY)

    def _compute_days_until_due(self, card: Card, now: datetime) -> int:
        """Days left before next_review, rounded up; 0 for due cards."""
        remaining = (card.next_review - now).total_seconds() / SECONDS_PER_DAY
        return max(0, math.ceil(remaining))
