"""Tests for the review session state machine."""

from dataclasses import replace
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from recallkit.application.config import RecallkitSettings
from recallkit.application.session import (
    ReviewSession,
    SessionState,
    start_configured_session,
    start_review_session,
)
from recallkit.domain.errors import (
    EmptySessionError,
    InvalidQuality,
    NotFoundError,
    SessionCompletedError,
    SessionStateError,
)


@pytest.fixture
def three_due(store, now):
    cards = [store.create_card(f"Q{i}", f"A{i}") for i in range(3)]
    return store.get_due_cards(now), cards


def test_starts_not_started(store, scheduler):
    session = ReviewSession(store, scheduler)
    assert session.state is SessionState.NOT_STARTED
    assert session.current_card() is None


def test_empty_session_rejected(store, scheduler):
    session = ReviewSession(store, scheduler)
    with pytest.raises(EmptySessionError):
        session.start([])
    assert session.state is SessionState.NOT_STARTED


def test_start_initialises(store, scheduler, three_due):
    due, _ = three_due
    session = ReviewSession(store, scheduler).start(due)

    assert session.state is SessionState.IN_PROGRESS
    assert session.cursor == 0
    assert session.stats.total == 0
    assert session.current_card() == due[0]
    assert session.progress == (0, 3)


def test_cannot_start_twice(store, scheduler, three_due):
    due, _ = three_due
    session = ReviewSession(store, scheduler).start(due)
    with pytest.raises(SessionCompletedError):
        session.start(due)


def test_full_session(store, scheduler, three_due, now):
    due, _ = three_due
    session = ReviewSession(store, scheduler).start(due)

    for quality in (4, 1, 3):
        session.submit_review(quality)

    assert session.state is SessionState.COMPLETED
    assert session.current_card() is None

    summary = session.end()
    assert summary.total == 3
    assert summary.correct == 2
    assert summary.incorrect == 1
    assert summary.accuracy == pytest.approx(2 / 3)
    assert summary.remaining == 0
    assert not summary.aborted

    with pytest.raises(SessionCompletedError):
        session.submit_review(4)


def test_submit_after_completion_without_end(store, scheduler, three_due):
    due, _ = three_due
    session = ReviewSession(store, scheduler).start(due)
    for _ in range(3):
        session.submit_review(3)

    with pytest.raises(SessionCompletedError):
        session.submit_review(3)


def test_submit_persists_to_store(store, scheduler, three_due, now):
    due, _ = three_due
    session = ReviewSession(store, scheduler).start(due)

    updated = session.submit_review(4)

    stored = store.get_card(due[0].id)
    assert stored == updated
    assert stored.repetitions == 1
    assert stored.next_review == now + timedelta(days=1)
    assert len(stored.review_history) == 1
    assert store.get_due_cards(now) == list(due[1:])


def test_invalid_quality_changes_nothing(store, scheduler, three_due):
    due, _ = three_due
    session = ReviewSession(store, scheduler).start(due)

    with pytest.raises(InvalidQuality):
        session.submit_review(9)

    assert session.cursor == 0
    assert session.stats.total == 0
    assert store.get_card(due[0].id) == due[0]
    assert session.current_card() == due[0]


def test_store_failure_changes_nothing(scheduler, three_due):
    due, _ = three_due
    broken_store = MagicMock()
    broken_store.apply_update.side_effect = NotFoundError(due[0].id)
    session = ReviewSession(broken_store, scheduler).start(due)

    with pytest.raises(NotFoundError):
        session.submit_review(4)

    assert session.cursor == 0
    assert session.stats.total == 0


def test_early_end_aborts(store, scheduler, three_due):
    due, _ = three_due
    session = ReviewSession(store, scheduler).start(due)
    session.submit_review(4)

    summary = session.end()

    assert summary.total == 1
    assert summary.accuracy == 1.0
    assert summary.remaining == 2
    assert summary.aborted
    assert session.state is SessionState.COMPLETED
    assert session.current_card() is None
    with pytest.raises(SessionCompletedError):
        session.submit_review(4)
    # untouched cards keep their state
    assert store.get_card(due[1].id) == due[1]


def test_end_immediately(store, scheduler, three_due):
    due, _ = three_due
    summary = ReviewSession(store, scheduler).start(due).end()
    assert summary.total == 0
    assert summary.accuracy == 0.0


def test_end_is_idempotent(store, scheduler, three_due):
    due, _ = three_due
    session = ReviewSession(store, scheduler).start(due)
    assert session.end() is session.end()


def test_end_before_start(store, scheduler):
    with pytest.raises(SessionStateError):
        ReviewSession(store, scheduler).end()


def test_snapshot_is_fixed(store, scheduler, now, three_due):
    due, _ = three_due
    session = ReviewSession(store, scheduler).start(due)

    store.create_card("Late", "Arrival")

    assert len(session.due_cards) == 3
    assert session.remaining == 3


def test_duplicate_cards_reviewed_once(store, scheduler, three_due):
    due, _ = three_due
    session = ReviewSession(store, scheduler).start([due[0], due[1], due[0]])
    assert [c.id for c in session.due_cards] == [due[0].id, due[1].id]


def test_stats_property_is_a_copy(store, scheduler, three_due):
    due, _ = three_due
    session = ReviewSession(store, scheduler).start(due)
    stats = session.stats
    stats.correct = 99
    assert session.stats.correct == 0


class TestStartReviewSession:
    def test_nothing_due(self, store, scheduler, now):
        store.create_card("Q", "A", now=now + timedelta(days=1))
        with pytest.raises(EmptySessionError):
            start_review_session(store, now=now, scheduler=scheduler)

    def test_tag_and_limit(self, store, scheduler, now):
        store.create_card("Q1", "A1", ["math"])
        store.create_card("Q2", "A2", ["bio"])
        store.create_card("Q3", "A3", ["math"])

        session = start_review_session(
            store, now=now, tag_filter="math", limit=1, scheduler=scheduler
        )

        assert [c.front for c in session.due_cards] == ["Q1"]

    def test_uses_scheduler_clock(self, store, scheduler):
        store.create_card("Q", "A")
        session = start_review_session(store, scheduler=scheduler)
        assert session.remaining == 1


def test_start_configured_session(store, scheduler, now, mock_home):
    store.create_card("Strong", "A", ["lang"])
    weak = store.create_card("Weak", "A", ["lang"])
    store.create_card("Other", "A", ["math"])
    store.apply_update(weak.id, replace(weak, ease_factor=1.5))
    settings = RecallkitSettings(ranking="weakest", default_tag="lang", session_limit=5)

    session = start_configured_session(store, settings, now=now, scheduler=scheduler)

    assert [c.front for c in session.due_cards] == ["Weak", "Strong"]
