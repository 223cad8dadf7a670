# Application Stats Package
from .metrics_calculator import CardMetrics, DeckStats, MetricsCalculator, compute_deck_stats
from .service import DeckStatsService

__all__ = [
    "MetricsCalculator",
    "CardMetrics",
    "DeckStats",
    "DeckStatsService",
    "compute_deck_stats",
]
