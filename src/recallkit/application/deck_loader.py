"""
Bulk registration of lesson content as cards.

Decks are YAML, either a bare list of entries or a mapping with a `cards`
key. Markdown files with a YAML frontmatter block are accepted too:

    ---
    deck: Biology
    tags: [cells]
    cards:
      - front: What is the powerhouse of the cell?
        back: Mitochondria
        tags: [organelles]
      - question: ...
        answer: ...
    ---
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

import yaml
import yaml.constructor

from recallkit.domain.constants import DEFAULT_DIFFICULTY, DIFFICULTIES
from recallkit.domain.errors import DeckFormatError, InvalidCardError
from recallkit.domain.models import Card
from recallkit.domain.ports import CardStore

logger = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that forbids duplicate keys."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    None, None, f"found duplicate key '{key}'", key_node.start_mark
                )
            seen.add(key)
        return super().construct_mapping(node, deep)


def _split_frontmatter(text: str) -> str:
    """Return the YAML block of a frontmatter document, or the text unchanged."""
    lines = text.split("\n")
    if not lines or lines[0].strip() != "---":
        return text

    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            return "\n".join(lines[1:i])

    raise DeckFormatError("Unclosed YAML frontmatter. Found starting '---' but no closing '---'.")


def parse_deck_yaml(text: str) -> list[dict[str, Any]]:
    """
    Parse a deck document into raw card entries.

    Deck-level `tags` are merged into every entry.

    Raises:
        DeckFormatError: YAML is malformed, has no card list, or tags are not
            a list or comma-separated string.
    """
    # Handle potential BOM (Byte Order Mark)
    raw = _split_frontmatter(text.lstrip("\ufeff"))

    # Fix tabs (common user error)
    if "\t" in raw:
        raw = raw.replace("\t", "  ")

    try:
        data = yaml.load(raw, Loader=UniqueKeyLoader)
    except yaml.YAMLError as e:
        raise DeckFormatError(f"Invalid deck YAML: {e}") from e

    deck_tags: list[str] = []
    if isinstance(data, Mapping):
        try:
            deck_tags = _split_tags(data.get("tags"))
        except ValueError as e:
            raise DeckFormatError(f"Deck {e}") from e
        data = data.get("cards")

    if not isinstance(data, list):
        raise DeckFormatError("Deck must be a list of cards or a mapping with a 'cards' list")

    entries = []
    for index, entry in enumerate(data):
        if not isinstance(entry, Mapping):
            raise DeckFormatError(f"Card #{index} must be a mapping, got {type(entry).__name__}")
        entry = dict(entry)
        if deck_tags:
            try:
                card_tags = _split_tags(entry.get("tags"))
            except ValueError as e:
                raise DeckFormatError(f"Card #{index}: {e}") from e
            entry["tags"] = deck_tags + [t for t in card_tags if t not in deck_tags]
        entries.append(entry)
    return entries


def load_deck(
    store: CardStore,
    entries: Iterable[Mapping[str, Any]],
    now: datetime | None = None,
) -> list[Card]:
    """
    Register each entry as a new card.

    Entries use `front`/`back`, or the `question`/`answer` aliases lesson
    data is usually written with. All entries are validated before any
    card is created, so a bad entry leaves the store untouched.

    Raises:
        InvalidCardError: an entry is missing text or has a bad field.
    """
    prepared = [_prepare_entry(index, entry) for index, entry in enumerate(entries)]

    created = [
        store.create_card(front, back, tags, now=now, difficulty=difficulty)
        for front, back, tags, difficulty in prepared
    ]
    logger.debug(f"Loaded {len(created)} cards into store")
    return created


def load_deck_file(store: CardStore, text: str, now: datetime | None = None) -> list[Card]:
    return load_deck(store, parse_deck_yaml(text), now=now)


def _prepare_entry(index: int, entry: Mapping[str, Any]) -> tuple[str, str, list[str], str]:
    front = entry.get("front", entry.get("question"))
    back = entry.get("back", entry.get("answer"))
    if not isinstance(front, str) or not front.strip():
        raise InvalidCardError(f"Card #{index}: missing front/question text")
    if not isinstance(back, str) or not back.strip():
        raise InvalidCardError(f"Card #{index}: missing back/answer text")

    try:
        tags = _split_tags(entry.get("tags"))
    except ValueError as e:
        raise InvalidCardError(f"Card #{index}: {e}") from e
    if not all(isinstance(t, str) for t in tags):
        raise InvalidCardError(f"Card #{index}: tags must be strings")

    difficulty = entry.get("difficulty") or DEFAULT_DIFFICULTY
    if difficulty not in DIFFICULTIES:
        raise InvalidCardError(f"Card #{index}: unknown difficulty {difficulty!r}")
    return front, back, list(tags), difficulty


def _split_tags(tags: Any) -> list:
    # "a, b" shorthand is accepted alongside YAML lists
    if not tags:
        return []
    if isinstance(tags, str):
        return [t.strip() for t in tags.split(",") if t.strip()]
    if not isinstance(tags, (list, tuple)):
        raise ValueError(
            f"tags must be a list or comma-separated string, got {type(tags).__name__}"
        )
    return list(tags)
