"""recallkit: SM-2 spaced repetition scheduling engine."""

import logging

from recallkit.application.scheduler import Scheduler, review
from recallkit.application.session import (
    ReviewSession,
    SessionState,
    SessionSummary,
    start_review_session,
)
from recallkit.consts import VERSION
from recallkit.domain import (
    Card,
    CardStore,
    DeckFormatError,
    EmptySessionError,
    InvalidCardError,
    InvalidQuality,
    NotFoundError,
    RecallkitError,
    ReviewEntry,
    SessionCompletedError,
    SessionStateError,
)
from recallkit.infrastructure.memory_store import InMemoryCardStore

# Library: emit nothing unless the host configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = VERSION

__all__ = [
    "Card",
    "ReviewEntry",
    "CardStore",
    "InMemoryCardStore",
    "Scheduler",
    "review",
    "ReviewSession",
    "SessionState",
    "SessionSummary",
    "start_review_session",
    "RecallkitError",
    "InvalidQuality",
    "InvalidCardError",
    "NotFoundError",
    "SessionStateError",
    "EmptySessionError",
    "SessionCompletedError",
    "DeckFormatError",
]
