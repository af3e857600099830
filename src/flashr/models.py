"""Core domain models for decks, cards, and faces."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TypeAlias

# A card must carry at least a front and a back.
MIN_FACE_COUNT = 2


@dataclass(frozen=True)
class Single:
    """Face holding one value."""

    value: str


@dataclass(frozen=True)
class Multi:
    """Face holding alternative renderings of the same answer."""

    values: tuple[str, ...]


Face: TypeAlias = Single | Multi


def join(face: Face, sep: str) -> str:
    """Join a face's values with `sep`."""
    match face:
        case Single(value):
            return value
        case Multi(values):
            return sep.join(values)


def join_random(face: Face, rng: random.Random, sep: str | None = None) -> str:
    """Join a face's values in shuffled order."""
    if sep is None:
        sep = infer_separator(face)
    match face:
        case Single(value):
            return value
        case Multi(values):
            shuffled = list(values)
            rng.shuffle(shuffled)
            return sep.join(shuffled)


def contains(face: Face, pattern: str) -> bool:
    """Return whether any value of the face contains `pattern`."""
    match face:
        case Single(value):
            return pattern in value
        case Multi(values):
            return any(pattern in value for value in values)


def infer_separator(face: Face) -> str:
    """Pick a separator that does not collide with commas inside values."""
    return "; " if contains(face, ",") else ", "


def display(face: Face) -> str:
    """Render a face with its inferred separator."""
    return join(face, infer_separator(face))


def is_empty(face: Face) -> bool:
    """Return whether the face carries no usable text."""
    match face:
        case Single(value):
            return value == ""
        case Multi(values):
            return not values or any(value == "" for value in values)


def face_from_raw(raw: object) -> Face | None:
    """Build a face from its JSON form: a string, a list of strings, or null."""
    if raw is None:
        return None
    if isinstance(raw, str):
        return Single(raw)
    if isinstance(raw, list) and all(isinstance(item, str) for item in raw):
        return Multi(tuple(raw))
    raise TypeError(f"Face must be a string, a list of strings, or null, got {raw!r}")


@dataclass(frozen=True)
class Card:
    """One flashcard, index-aligned with its deck's face names."""

    faces: tuple[Face | None, ...]

    def __len__(self) -> int:
        return len(self.faces)

    def __getitem__(self, index: int) -> Face | None:
        return self.faces[index]

    def present_count(self) -> int:
        """Count non-null faces."""
        return sum(1 for face in self.faces if face is not None)

    def front(self) -> Face | None:
        """Return the first present face."""
        return next((face for face in self.faces if face is not None), None)

    def front_string(self) -> str:
        front = self.front()
        if front is None:
            raise ValueError("Card has no present faces.")
        return display(front)


@dataclass(frozen=True)
class Deck:
    """Named collection of cards sharing one ordered set of face names."""

    name: str
    faces: tuple[str, ...]
    cards: tuple[Card, ...]

    def __len__(self) -> int:
        return len(self.cards)

    def face_index(self, face_name: str) -> int | None:
        """Return the slot of a face name, if the deck has it."""
        try:
            return self.faces.index(face_name)
        except ValueError:
            return None

    def face_value(self, card: Card, face_name: str) -> Face | None:
        """Return a card's value for a named face, if present."""
        index = self.face_index(face_name)
        if index is None:
            return None
        return card[index]


@dataclass(frozen=True)
class DeckCard:
    """Handle to one card of one deck in a loaded deck list."""

    deck_index: int
    card_index: int

    def resolve(self, decks: list[Deck]) -> tuple[Deck, Card]:
        deck = decks[self.deck_index]
        return deck, deck.cards[self.card_index]


def card_id(deck: Deck, card: Card) -> str:
    """Stable persistence key for a card: `<deck name>:<front>`."""
    return f"{deck.name}:{card.front_string()}"


def possible_faces(deck: Deck, card: Card) -> list[tuple[int, str, Face]]:
    """Return `(index, face name, face)` for every present face of a card."""
    return [(index, deck.faces[index], face) for index, face in enumerate(card.faces) if face is not None]


def face_key(face: Face) -> frozenset[str]:
    """Order-insensitive identity of a face as a learner sees it.

    Multi values are shown in random order, so two faces holding the same
    alternatives compare equal here even when their stored order differs.
    """
    match face:
        case Single(value):
            return frozenset((value,))
        case Multi(values):
            return frozenset(values)
