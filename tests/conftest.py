from __future__ import annotations

import json
import random
import shutil
import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from uuid import uuid4

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from flashr.models import Card, Deck, face_from_raw  # noqa: E402

DeckFactory = Callable[[str, list[str], list[list[object]]], Deck]


def _workspace_tmp_path() -> Iterator[Path]:
    """Per-test scratch directory under `.tmp_pytest/` in the project root.

    Overrides pytest's builtin ``tmp_path`` so deck and stats files written by the
    tests stay inside the checkout; the base directory is removed once empty.
    """
    base = ROOT / ".tmp_pytest"
    base.mkdir(parents=True, exist_ok=True)
    path = base / uuid4().hex
    path.mkdir()
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        try:
            base.rmdir()
        except OSError:
            pass


tmp_path = pytest.fixture(name="tmp_path")(_workspace_tmp_path)


def build_deck(name: str, faces: list[str], rows: list[list[object]]) -> Deck:
    """Build a deck from JSON-shaped rows without touching the filesystem."""
    cards = tuple(Card(faces=tuple(face_from_raw(value) for value in row)) for row in rows)
    return Deck(name=name, faces=tuple(faces), cards=cards)


@pytest.fixture
def deck_factory() -> DeckFactory:
    return build_deck


@pytest.fixture
def rng() -> random.Random:
    return random.Random(20240101)


@pytest.fixture
def animals() -> Deck:
    # "dog" and "hound" share a Spanish face on purpose.
    return build_deck(
        "Animals",
        ["English", "Spanish"],
        [
            ["dog", "perro"],
            ["hound", "perro"],
            ["cat", "gato"],
            ["bird", "pájaro"],
            ["fish", "pez"],
            ["cow", "vaca"],
            ["horse", ["caballo", "corcel"]],
        ],
    )


@pytest.fixture
def colors() -> Deck:
    return build_deck(
        "Colors",
        ["English", "Spanish", "French"],
        [
            ["red", "rojo", "rouge"],
            ["blue", "azul", "bleu"],
            ["green", "verde", "vert"],
            ["black", "negro", "noir"],
            ["white", "blanco", None],
        ],
    )


@pytest.fixture
def write_deck(tmp_path: Path) -> Callable[..., Path]:
    """Write a raw deck payload to `tmp_path` and return its path."""

    def _write(payload: object, name: str = "deck.json") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        return path

    return _write
