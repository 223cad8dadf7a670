"""
Ports (interfaces) for card storage.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime

from .constants import DEFAULT_DIFFICULTY
from .models import Card


class CardStore(ABC):
    """
    Port for holding cards and their scheduling state.

    Implementations:
        - InMemoryCardStore: dict-backed store with per-card locking.

    Hosts that persist cards elsewhere (a file, a database) implement this
    port and round-trip state through recallkit.infrastructure.codec.
    """

    @abstractmethod
    def create_card(
        self,
        front: str,
        back: str,
        tags: Iterable[str] = (),
        *,
        now: datetime | None = None,
        difficulty: str = DEFAULT_DIFFICULTY,
    ) -> Card:
        """
        Register new content as a never-reviewed card, due at `now`.

        Raises:
            InvalidCardError: front or back is empty.
        """
        pass

    @abstractmethod
    def add_card(self, card: Card) -> None:
        """
        Register an already-built card (e.g. one rehydrated from storage).

        Raises:
            InvalidCardError: a card with the same id is already stored.
        """
        pass

    @abstractmethod
    def get_card(self, card_id: str) -> Card:
        """
        Raises:
            NotFoundError: card_id is unknown.
        """
        pass

    @abstractmethod
    def list_cards(self) -> list[Card]:
        """All cards in registration order."""
        pass

    @abstractmethod
    def get_due_cards(self, now: datetime, tag_filter: str | None = None) -> list[Card]:
        """
        Cards whose next_review <= now, optionally restricted to a tag.

        Returns:
            Cards sorted ascending by next_review, ties broken by id.
        """
        pass

    @abstractmethod
    def apply_update(self, card_id: str, updated_card: Card) -> None:
        """
        Replace the stored state of a card (last writer wins).

        Raises:
            NotFoundError: card_id is unknown.
            InvalidCardError: updated_card.id does not match card_id.
        """
        pass
