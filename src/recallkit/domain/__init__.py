# Domain Package
from .errors import (
    DeckFormatError,
    EmptySessionError,
    InvalidCardError,
    InvalidQuality,
    NotFoundError,
    RecallkitError,
    SessionCompletedError,
    SessionStateError,
)
from .models import Card, ReviewEntry
from .ports import CardStore

__all__ = [
    "Card",
    "ReviewEntry",
    "CardStore",
    "RecallkitError",
    "InvalidQuality",
    "InvalidCardError",
    "NotFoundError",
    "SessionStateError",
    "EmptySessionError",
    "SessionCompletedError",
    "DeckFormatError",
]
