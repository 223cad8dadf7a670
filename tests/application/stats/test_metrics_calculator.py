from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from recallkit.application.scheduler import review
from recallkit.application.stats.metrics_calculator import MetricsCalculator, compute_deck_stats
from recallkit.application.stats.service import DeckStatsService
from recallkit.domain.models import ReviewEntry


@pytest.fixture
def calculator():
    return MetricsCalculator()


@pytest.fixture
def mock_store():
    return MagicMock()


def test_metrics_for_new_card(calculator, make_card, now):
    metrics = calculator.enrich(make_card(), now)

    assert metrics.review_count == 0
    assert metrics.lapse_count == 0
    assert metrics.lapse_rate is None
    assert metrics.volatility is None
    assert metrics.days_overdue == 0
    assert metrics.days_until_due == 0


def test_metrics_lapse_rate(calculator, make_card, now):
    history = [
        ReviewEntry(now - timedelta(days=10), 4, 1),
        ReviewEntry(now - timedelta(days=9), 1, 1),
        ReviewEntry(now - timedelta(days=8), 4, 1),
        ReviewEntry(now - timedelta(days=7), 0, 1),
    ]
    card = make_card(review_history=history, last_reviewed=now - timedelta(days=7))

    metrics = calculator.enrich(card, now)

    assert metrics.lapse_count == 2
    assert metrics.lapse_rate == 0.5


def test_metrics_volatility(calculator, make_card, now):
    # Volatility needs 3+ reviews
    history = [
        ReviewEntry(now - timedelta(days=30), 3, 1),
        ReviewEntry(now - timedelta(days=29), 3, 6),
        ReviewEntry(now - timedelta(days=23), 3, 15),
    ]
    card = make_card(
        review_history=history, repetitions=3, interval=15, last_reviewed=now - timedelta(days=23)
    )

    metrics = calculator.enrich(card, now)

    mean = (1 + 6 + 15) / 3
    expected = sum((i - mean) ** 2 for i in (1, 6, 15)) / 3
    assert metrics.volatility == pytest.approx(expected)


def test_metrics_days_overdue(calculator, make_card, now):
    card = make_card(due_in_days=-3, last_reviewed=now - timedelta(days=9))
    assert calculator.enrich(card, now).days_overdue == 3

    card = make_card(due_in_days=2, last_reviewed=now - timedelta(days=4))
    assert calculator.enrich(card, now).days_overdue == -2


def test_metrics_never_reviewed_card_scheduled_ahead(calculator, make_card, now):
    metrics = calculator.enrich(make_card(due_in_days=4), now)

    assert metrics.review_count == 0
    assert metrics.days_overdue == -4
    assert metrics.days_until_due == 4


def test_metrics_days_until_due(calculator, make_card, now):
    card = make_card(due_in_days=6, last_reviewed=now)
    assert calculator.enrich(card, now).days_until_due == 6

    # partial days round up
    later = make_card(due_in_days=0)
    metrics = calculator.enrich(later, now - timedelta(hours=30))
    assert metrics.days_until_due == 2
    assert metrics.days_overdue == -2

    card = make_card(due_in_days=-3, last_reviewed=now - timedelta(days=9))
    assert calculator.enrich(card, now).days_until_due == 0


def test_deck_stats(calculator, make_card, now):
    cards = [
        make_card("c1", due_in_days=-1, repetitions=2),
        make_card("c2", due_in_days=3, repetitions=4),
        make_card("c3", due_in_days=0),
    ]

    stats = calculator.deck_stats(cards, now)

    assert stats.total == 3
    assert stats.due == 2
    assert stats.reviewed == 2
    assert stats.average_repetitions == 2.0


def test_deck_stats_empty(calculator, now):
    stats = calculator.deck_stats([], now)
    assert stats.total == 0
    assert stats.average_repetitions == 0.0


def test_compute_deck_stats_function(make_card, now):
    cards = [
        make_card("c1", due_in_days=-2, repetitions=1),
        make_card("c2", due_in_days=1),
    ]

    stats = compute_deck_stats(iter(cards), now)

    assert stats.total == 2
    assert stats.due == 1
    assert stats.reviewed == 1
    assert stats.average_repetitions == 0.5
    assert stats == MetricsCalculator().deck_stats(cards, now)


def test_service_deck_stats_with_tag(mock_store, make_card, now):
    mock_store.list_cards.return_value = [
        make_card("c1", tags={"math"}),
        make_card("c2", tags={"bio"}, due_in_days=5),
    ]
    service = DeckStatsService(store=mock_store)

    stats = service.get_deck_stats(now, tag_filter="bio")

    assert stats.total == 1
    assert stats.due == 0
    mock_store.list_cards.assert_called_once_with()


def test_service_struggling_cards(store, now):
    strong = store.create_card("Strong", "A")
    shaky = store.create_card("Shaky", "A")
    store.create_card("Untouched", "A")

    store.apply_update(strong.id, review(strong, 4, now))
    card = shaky
    for q in (0, 1, 0):
        card = review(card, q, now)
    store.apply_update(shaky.id, card)

    struggling = DeckStatsService(store).get_struggling_cards(now)

    assert [m.card_id for m in struggling] == [shaky.id]
    assert struggling[0].lapse_rate == 1.0
