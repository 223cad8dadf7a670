# Infrastructure Package
from .codec import card_from_dict, card_to_dict, dumps_cards, loads_cards
from .memory_store import InMemoryCardStore

__all__ = ["InMemoryCardStore", "card_to_dict", "card_from_dict", "dumps_cards", "loads_cards"]
