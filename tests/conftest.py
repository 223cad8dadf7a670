from datetime import datetime, timedelta, timezone

import pytest

from recallkit.application.scheduler import Scheduler
from recallkit.domain.models import Card
from recallkit.infrastructure.memory_store import InMemoryCardStore

NOW = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def scheduler(now):
    """Scheduler whose clock is frozen at `now`."""
    return Scheduler(now_fn=lambda: now)


@pytest.fixture
def store(now):
    counter = iter(range(1, 10_000))
    return InMemoryCardStore(
        id_factory=lambda: f"card_{next(counter):04d}",
        clock=lambda: now,
    )


@pytest.fixture
def make_card(now):
    """Factory for cards with arbitrary scheduling state."""

    def _make(card_id="card_x", due_in_days=0, **kwargs):
        kwargs.setdefault("front", f"Front of {card_id}")
        kwargs.setdefault("back", f"Back of {card_id}")
        return Card(id=card_id, next_review=now + timedelta(days=due_in_days), **kwargs)

    return _make


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config files
    monkeypatch.setenv("HOME", str(home))
    return home
