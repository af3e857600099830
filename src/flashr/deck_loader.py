"""Load and validate decks from JSON files, directories, or bundled resources."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

from .errors import DeckError
from .models import MIN_FACE_COUNT, Card, Deck, display, face_from_raw, is_empty

DECKS_PACKAGE = "flashr.decks"

logger = logging.getLogger(__name__)


def _card_from_raw(deck_name: str, raw: object) -> Card:
    """Build a card from one JSON row."""
    if not isinstance(raw, list):
        raise DeckError(f'Deck "{deck_name}" contains a card that is not a list: {raw!r}')
    try:
        faces = tuple(face_from_raw(item) for item in raw)
    except TypeError as exc:
        raise DeckError(f'Deck "{deck_name}" contains an invalid card: {exc}') from exc
    return Card(faces=faces)


def _deck_from_dict(raw: dict[str, Any], source: str) -> Deck:
    """Build a deck from raw JSON content."""
    name = raw.get("name")
    if not isinstance(name, str):
        raise DeckError(f"SerdeError: deck name must be a string, path: {source}")
    faces = raw.get("faces")
    if not isinstance(faces, list) or not all(isinstance(face, str) for face in faces):
        raise DeckError(f'SerdeError: faces of deck "{name}" must be a list of strings, path: {source}')
    cards = raw.get("cards", [])
    if not isinstance(cards, list):
        raise DeckError(f'SerdeError: cards of deck "{name}" must be a list, path: {source}')
    deck = Deck(name=name, faces=tuple(faces), cards=tuple(_card_from_raw(name, item) for item in cards))
    return validate_deck(deck)


def _describe(card: Card) -> str:
    """Render a card for error messages."""
    return json.dumps([display(face) if face is not None else None for face in card.faces], ensure_ascii=False)


def validate_deck(deck: Deck) -> Deck:
    """Check the invariants the problem generator relies on."""
    expected = len(deck.faces)
    if expected < MIN_FACE_COUNT:
        raise DeckError(
            f'NotEnoughFaces: Deck "{deck.name}" does not have enough faces. Requires {MIN_FACE_COUNT}, has {expected}'
        )

    seen_faces: set[str] = set()
    for face in deck.faces:
        if face in seen_faces:
            raise DeckError(f'DuplicateFaces: Deck "{deck.name}" has more than one "{face}" face')
        seen_faces.add(face)

    for card in deck.cards:
        if len(card) > expected:
            raise DeckError(
                f'InvalidCard: Deck "{deck.name}" contains an invalid card: '
                f"{_describe(card)} has too many faces. Has {len(card)}, needs {expected}"
            )
        if len(card) < expected:
            raise DeckError(
                f'InvalidCard: Deck "{deck.name}" contains an invalid card: '
                f"{_describe(card)} does not have enough faces. Has {len(card)}, needs {expected}"
            )

    for card in deck.cards:
        if card.present_count() < MIN_FACE_COUNT:
            raise DeckError(
                f'InvalidCard: Deck "{deck.name}" contains an invalid card: '
                f"{_describe(card)} does not have enough usable (non-null) faces, needs {MIN_FACE_COUNT}"
            )
        if any(face is not None and is_empty(face) for face in card.faces):
            raise DeckError(
                f'InvalidCard: Deck "{deck.name}" contains an invalid card: {_describe(card)} has at least one empty face'
            )

    fronts: dict[object, Card] = {}
    for card in deck.cards:
        front = card.front()
        previous = fronts.get(front)
        if previous is not None:
            raise DeckError(
                f'InvalidCard: Deck "{deck.name}" contains an invalid card: '
                f"{_describe(previous)} and {_describe(card)} both have the same front, {card.front_string()}"
            )
        fronts[front] = card

    return deck


def validate_decks(decks: list[Deck]) -> None:
    """Validate that deck names are globally unique."""
    seen: set[str] = set()
    for deck in decks:
        if deck.name in seen:
            raise DeckError(f"DuplicateDecks: At least two decks loaded have the same name, {deck.name}")
        seen.add(deck.name)


def _load_deck_file(path: Path | Traversable) -> Deck:
    try:
        raw = json.loads(path.read_text(encoding="utf-8-sig"))
    except OSError as exc:
        raise DeckError(f"IoError: {exc}, path: {path}") from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DeckError(f"SerdeError: {exc}, path: {path}") from exc
    if not isinstance(raw, dict):
        raise DeckError(f"SerdeError: deck root must be a JSON object, path: {path}")
    deck = _deck_from_dict(raw, str(path))
    logger.debug("Loaded deck %r with %d cards from %s", deck.name, len(deck), path)
    return deck


def _load_decks_from_path(path: Path) -> list[Deck]:
    if not path.exists():
        raise DeckError(f"IoError: No such file or directory, path: {path}")
    if path.is_dir():
        decks: list[Deck] = []
        for child in sorted(path.iterdir()):
            decks.extend(_load_decks_from_path(child))
        return decks
    if path.suffix.lower() == ".json":
        return [_load_deck_file(path)]
    logger.debug("Skipping non-deck file %s", path)
    return []


def load_decks(paths: Iterable[Path | str]) -> list[Deck]:
    """Load decks from files and directories.

    Directories are searched recursively; files without a `.json` extension are
    ignored. Deck names must be unique across everything loaded.
    """
    decks: list[Deck] = []
    for path in paths:
        decks.extend(_load_decks_from_path(Path(path)))
    validate_decks(decks)
    logger.info("Loaded %d decks with %d cards", len(decks), sum(len(deck) for deck in decks))
    return decks


def load_bundled_decks() -> list[Deck]:
    """Load the example decks shipped with the package."""
    decks: list[Deck] = []
    for entry in sorted(resources.files(DECKS_PACKAGE).iterdir(), key=lambda item: item.name):
        if entry.name.endswith(".json"):
            decks.append(_load_deck_file(entry))
    validate_decks(decks)
    return decks
