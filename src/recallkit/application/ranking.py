"""
Ranking for review queues.

Builds ordered review queues by:
1. Asking the store for due cards (ascending next_review, then id)
2. Optionally reordering them with a pluggable Ranker
3. Capping the queue at a maximum size

Rankers only reorder; they never change card state or which cards are due.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from recallkit.domain.models import Card
from recallkit.domain.ports import CardStore

logger = logging.getLogger(__name__)

Ranker = Callable[[list[Card], datetime], list[Card]]


def by_due_date(cards: list[Card], now: datetime) -> list[Card]:
    """Oldest due date first (the store's own order)."""
    return sorted(cards, key=lambda c: (c.next_review, c.id))


def most_overdue_first(cards: list[Card], now: datetime) -> list[Card]:
    """Largest (now - next_review) first."""
    return sorted(cards, key=lambda c: (-(now - c.next_review).total_seconds(), c.id))


def weakest_first(cards: list[Card], now: datetime) -> list[Card]:
    """
    Weakest cards first.

    Lower ease factor means the card has been recalled poorly. Among equal
    ease, a card whose last review was a lapse comes before one that passed.
    Remaining ties keep due-date order.
    """

    def weakness(card: Card) -> tuple:
        last_failed = bool(card.review_history) and not card.review_history[-1].passed
        return (card.ease_factor, not last_failed, card.next_review, card.id)

    return sorted(cards, key=weakness)


RANKERS: dict[str, Ranker] = {
    "due": by_due_date,
    "overdue": most_overdue_first,
    "weakest": weakest_first,
}


def get_ranker(name: str) -> Ranker:
    try:
        return RANKERS[name]
    except KeyError:
        raise ValueError(f"Unknown ranking '{name}'. Choose from: {', '.join(RANKERS)}") from None


def build_review_queue(
    store: CardStore,
    now: datetime,
    tag_filter: str | None = None,
    ranker: Ranker | None = None,
    limit: int | None = None,
) -> list[Card]:
    """
    Build the ordered list of cards to review.

    Args:
        store: Card store to query
        now: Reference time for due-ness
        tag_filter: Only include cards carrying this tag
        ranker: Optional reordering; defaults to store order
        limit: Maximum cards in queue (None for no cap)

    Returns:
        Ordered due cards, at most `limit` long
    """
    if limit is not None and limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    due = store.get_due_cards(now, tag_filter)
    if ranker is not None:
        due = ranker(list(due), now)

    if limit is not None and len(due) > limit:
        logger.debug(f"Capping review queue at {limit} of {len(due)} due cards")
        due = due[:limit]
    return due
