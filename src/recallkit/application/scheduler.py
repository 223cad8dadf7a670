"""
SM-2 Spaced Repetition Scheduler.

The SM-2 algorithm adjusts review intervals based on recall quality.
Quality ratings:
  0 - Complete blackout
  1 - Incorrect, remembered upon seeing answer ("Again")
  2 - Incorrect, but easy to recall once seen ("Hard")
  3 - Correct with some difficulty ("Good")
  4 - Perfect recall ("Easy")

This is a pure computation module with no I/O.
"""

import logging
import math
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta

from recallkit.domain.clock import utc_now
from recallkit.domain.constants import (
    FAILED_INTERVAL,
    FIRST_INTERVAL,
    MAX_QUALITY,
    MIN_EASE,
    MIN_QUALITY,
    PASSING_QUALITY,
    SECOND_INTERVAL,
)
from recallkit.domain.errors import InvalidQuality
from recallkit.domain.models import Card, ReviewEntry

logger = logging.getLogger(__name__)


def validate_quality(quality: object) -> int:
    """Return quality unchanged if it is a valid grade, else raise InvalidQuality."""
    # bool is an int subclass; True/False are not grades
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQuality(quality)
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidQuality(quality)
    return quality


def _round_half_up(value: float) -> int:
    # round() is banker's rounding; intervals round .5 upwards
    return int(math.floor(value + 0.5))


def sm2_step(
    quality: int, ease_factor: float, interval: int, repetitions: int
) -> tuple[float, int, int]:
    """
    SM-2 arithmetic core.

    Args:
        quality: Grade 0-4 (0-2 = failed, 3-4 = recalled)
        ease_factor: Current ease factor (min 1.3)
        interval: Current interval in days
        repetitions: Consecutive successful reviews so far

    Returns:
        Tuple of (new_ease_factor, new_interval, new_repetitions)
    """
    validate_quality(quality)

    if quality >= PASSING_QUALITY:
        if repetitions == 0:
            new_interval = FIRST_INTERVAL
        elif repetitions == 1:
            new_interval = SECOND_INTERVAL
        else:
            new_interval = _round_half_up(interval * ease_factor)
        new_repetitions = repetitions + 1
    else:
        new_interval = FAILED_INTERVAL
        new_repetitions = 0

    # Ease moves on every review, success or not
    new_ease = ease_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
    new_ease = max(MIN_EASE, new_ease)

    return (new_ease, max(1, new_interval), new_repetitions)


def review(card: Card, quality: int, now: datetime) -> Card:
    """
    Apply one review to a card and return its next state.

    The input card is left untouched. An invalid grade raises InvalidQuality
    before anything is computed.
    """
    new_ease, new_interval, new_reps = sm2_step(
        quality, card.ease_factor, card.interval, card.repetitions
    )

    updated = replace(
        card,
        interval=new_interval,
        repetitions=new_reps,
        ease_factor=new_ease,
        next_review=now + timedelta(days=new_interval),
        last_reviewed=now,
        review_history=card.review_history + (ReviewEntry(now, quality, new_interval),),
    )
    logger.debug(
        f"Reviewed {card.id} q={quality}: interval {card.interval}->{new_interval}, "
        f"reps {card.repetitions}->{new_reps}, ease {card.ease_factor:.2f}->{new_ease:.2f}"
    )
    return updated


def is_due(card: Card, now: datetime) -> bool:
    return card.next_review <= now


def format_interval(days: int) -> str:
    """Format an interval as a human-readable string."""
    if days <= 0:
        return "now"
    elif days == 1:
        return "1 day"
    elif days < 7:
        return f"{days} days"
    elif days < 30:
        weeks = days // 7
        return f"{weeks} week{'s' if weeks > 1 else ''}"
    elif days < 365:
        months = days // 30
        return f"{months} month{'s' if months > 1 else ''}"
    else:
        years = days // 365
        return f"{years} year{'s' if years > 1 else ''}"


class Scheduler:
    """
    SM-2 scheduler bound to a clock.

    Stateless apart from the clock, so one instance can be shared freely.
    """

    def __init__(self, now_fn: Callable[[], datetime] | None = None):
        """
        Args:
            now_fn: Returns the current time; defaults to timezone-aware UTC now.
        """
        self._now = now_fn or utc_now

    def now(self) -> datetime:
        return self._now()

    def review(self, card: Card, quality: int, now: datetime | None = None) -> Card:
        return review(card, quality, now if now is not None else self._now())

    def preview(self, card: Card) -> dict[int, int]:
        """
        Interval (days) each grade would produce, without changing the card.

        Useful for labelling grade buttons ("Again 1d", "Easy 15d").
        """
        return {
            q: sm2_step(q, card.ease_factor, card.interval, card.repetitions)[1]
            for q in range(MIN_QUALITY, MAX_QUALITY + 1)
        }

    def is_due(self, card: Card, now: datetime | None = None) -> bool:
        return is_due(card, now if now is not None else self._now())
