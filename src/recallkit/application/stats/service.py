"""
Deck Stats Service: application layer orchestrator.

Coordinates reading cards from the store and enriching them with computed metrics.
"""

import logging
from datetime import datetime

from recallkit.application.catalog import filter_by_tag
from recallkit.domain.ports import CardStore

from .metrics_calculator import CardMetrics, DeckStats, MetricsCalculator

logger = logging.getLogger(__name__)


class DeckStatsService:
    """
    Application service for card collection statistics.

    Depends on the CardStore abstraction, not a concrete store.
    """

    def __init__(
        self,
        store: CardStore,
        calculator: MetricsCalculator | None = None,
    ):
        """
        Args:
            store: The card store (port) to read from.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self._store = store
        self._calc = calculator or MetricsCalculator()

    def get_deck_stats(self, now: datetime, tag_filter: str | None = None) -> DeckStats:
        cards = filter_by_tag(self._store.list_cards(), tag_filter)
        return self._calc.deck_stats(cards, now)

    def get_card_metrics(self, now: datetime, tag_filter: str | None = None) -> list[CardMetrics]:
        cards = filter_by_tag(self._store.list_cards(), tag_filter)
        return [self._calc.enrich(card, now) for card in cards]

    def get_struggling_cards(
        self,
        now: datetime,
        ease_threshold: float = 1.8,
        lapse_rate_threshold: float = 0.5,
    ) -> list[CardMetrics]:
        """
        Identify cards the learner keeps failing.

        A card is struggling if:
        - ease_factor < ease_threshold, OR
        - lapse_rate >= lapse_rate_threshold

        Cards with no reviews are never struggling.

        Returns:
            CardMetrics for struggling cards, lowest ease first.
        """
        struggling = []
        for metrics in self.get_card_metrics(now):
            if metrics.review_count == 0:
                continue

            is_struggling = False

            if metrics.ease_factor < ease_threshold:
                is_struggling = True

            if metrics.lapse_rate is not None and metrics.lapse_rate >= lapse_rate_threshold:
                is_struggling = True

            if is_struggling:
                struggling.append(metrics)

        struggling.sort(key=lambda m: (m.ease_factor, m.card_id))
        logger.debug(f"Found {len(struggling)} struggling cards")
        return struggling
