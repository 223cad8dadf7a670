import logging
import threading
from collections.abc import Callable, Iterable
from datetime import datetime

from recallkit.domain.clock import utc_now
from recallkit.domain.constants import DEFAULT_DIFFICULTY
from recallkit.domain.errors import InvalidCardError, NotFoundError
from recallkit.domain.id_service import generate_card_id
from recallkit.domain.models import Card
from recallkit.domain.ports import CardStore


class InMemoryCardStore(CardStore):
    """
    Dict-backed CardStore.

    Writes to one card are serialised by a lock scoped to that card's id;
    the registry lock only guards the id -> card mapping itself, so updates
    to different cards do not contend.
    """

    def __init__(
        self,
        cards: Iterable[Card] = (),
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._cards: dict[str, Card] = {}
        self._card_locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._new_id = id_factory or generate_card_id
        self._clock = clock or utc_now
        self.logger = logging.getLogger(__name__)

        for card in cards:
            self.add_card(card)

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._cards

    def create_card(
        self,
        front: str,
        back: str,
        tags: Iterable[str] = (),
        *,
        now: datetime | None = None,
        difficulty: str = DEFAULT_DIFFICULTY,
    ) -> Card:
        card = Card.new(
            self._new_id(),
            front,
            back,
            now if now is not None else self._clock(),
            tags=tags,
            difficulty=difficulty,
        )
        self.add_card(card)
        self.logger.debug(f"Created card {card.id}")
        return card

    def add_card(self, card: Card) -> None:
        with self._registry_lock:
            if card.id in self._cards:
                raise InvalidCardError(f"Card {card.id} already exists")
            self._cards[card.id] = card
            self._card_locks[card.id] = threading.Lock()

    def get_card(self, card_id: str) -> Card:
        try:
            return self._cards[card_id]
        except KeyError:
            raise NotFoundError(card_id) from None

    def list_cards(self) -> list[Card]:
        with self._registry_lock:
            return list(self._cards.values())

    def get_due_cards(self, now: datetime, tag_filter: str | None = None) -> list[Card]:
        due = [
            card
            for card in self.list_cards()
            if card.next_review <= now and (tag_filter is None or tag_filter in card.tags)
        ]
        due.sort(key=lambda c: (c.next_review, c.id))
        return due

    def apply_update(self, card_id: str, updated_card: Card) -> None:
        if updated_card.id != card_id:
            raise InvalidCardError(
                f"Update for {card_id} carries a card with id {updated_card.id}"
            )

        with self._registry_lock:
            lock = self._card_locks.get(card_id)
        if lock is None:
            raise NotFoundError(card_id)

        with lock:
            self._cards[card_id] = updated_card
        self.logger.debug(f"Applied update to {card_id} (next review {updated_card.next_review})")
