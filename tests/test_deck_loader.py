from collections.abc import Callable
from pathlib import Path
from typing import Any

import flashr.deck_loader as deck_loader
from flashr.deck_loader import load_bundled_decks, load_decks
from flashr.errors import DeckError
from flashr.models import Multi, Single

KANJI = {
    "name": "Kanji Words",
    "faces": ["Kanji", "Hiragana", "Definition"],
    "cards": [
        ["日本", "にほん", "Japan"],
        [None, "いいえ", ["No", "Don't mention it (eg in reply to apology/praise)"]],
    ],
}


def _expect_deck_error(paths: list[Path], fragment: str) -> None:
    try:
        load_decks(paths)
        raise AssertionError(f"Expected a DeckError containing {fragment!r}.")
    except DeckError as exc:
        assert fragment in str(exc)


def test_load_deck_from_file(write_deck: Callable[..., Path]) -> None:
    path = write_deck(KANJI)
    decks = load_decks([path])
    assert len(decks) == 1
    deck = decks[0]
    assert deck.name == "Kanji Words"
    assert deck.faces == ("Kanji", "Hiragana", "Definition")
    assert deck.cards[0][2] == Single("Japan")
    assert deck.cards[1][0] is None
    assert isinstance(deck.cards[1][2], Multi)


def test_load_decks_from_directory_recurses_and_skips_other_files(
    tmp_path: Path, write_deck: Callable[..., Path]
) -> None:
    write_deck(KANJI, "dir/kanji.json")
    write_deck({"name": "Other", "faces": ["A", "B"], "cards": [["a", "b"]]}, "dir/nested/other.JSON")
    (tmp_path / "dir" / "another_random_file.txt").write_text("not a deck", encoding="utf-8")
    (tmp_path / "empty_dir").mkdir()

    decks = load_decks([tmp_path / "dir", tmp_path / "empty_dir"])
    assert sorted(deck.name for deck in decks) == ["Kanji Words", "Other"]


def test_load_decks_from_non_deck_file(tmp_path: Path) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("hello", encoding="utf-8")
    assert load_decks([path]) == []


def test_load_deck_with_no_cards(write_deck: Callable[..., Path]) -> None:
    path = write_deck({"name": "Empty", "faces": ["Front", "Back"], "cards": []})
    assert load_decks([path])[0].cards == ()


def test_load_decks_missing_path(tmp_path: Path) -> None:
    _expect_deck_error([tmp_path / "missing.json"], "IoError")


def test_load_decks_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    _expect_deck_error([path], "SerdeError")


def test_load_decks_duplicate_deck_names(write_deck: Callable[..., Path]) -> None:
    first = write_deck(KANJI, "a.json")
    second = write_deck(KANJI, "b.json")
    _expect_deck_error([first, second], "DuplicateDecks")


def test_load_deck_not_enough_faces(write_deck: Callable[..., Path]) -> None:
    path = write_deck({"name": "One", "faces": ["Front"], "cards": []})
    _expect_deck_error([path], "NotEnoughFaces")


def test_load_deck_duplicate_faces(write_deck: Callable[..., Path]) -> None:
    path = write_deck({"name": "Dup", "faces": ["Front", "Front"], "cards": []})
    _expect_deck_error([path], "DuplicateFaces")


def test_load_deck_card_face_count_mismatch(write_deck: Callable[..., Path]) -> None:
    too_many = write_deck({"name": "Many", "faces": ["A", "B"], "cards": [["a", "b", "c"]]}, "many.json")
    _expect_deck_error([too_many], "too many faces")
    too_few = write_deck({"name": "Few", "faces": ["A", "B", "C"], "cards": [["a", "b"]]}, "few.json")
    _expect_deck_error([too_few], "does not have enough faces")


def test_load_deck_not_enough_usable_faces(write_deck: Callable[..., Path]) -> None:
    path = write_deck({"name": "Nulls", "faces": ["A", "B", "C"], "cards": [["a", None, None]]})
    _expect_deck_error([path], "usable")


def test_load_deck_empty_face(write_deck: Callable[..., Path]) -> None:
    path = write_deck({"name": "Blank", "faces": ["A", "B"], "cards": [["a", []]]})
    _expect_deck_error([path], "empty face")


def test_load_deck_duplicate_front(write_deck: Callable[..., Path]) -> None:
    plain = write_deck({"name": "Fronts", "faces": ["A", "B"], "cards": [["a", "x"], ["a", "y"]]}, "plain.json")
    _expect_deck_error([plain], "same front")
    subfaced = write_deck(
        {"name": "Subfaced", "faces": ["A", "B"], "cards": [[["a", "b"], "x"], [["a", "b"], "y"]]},
        "subfaced.json",
    )
    _expect_deck_error([subfaced], "same front")


def test_load_deck_rejects_non_string_face(write_deck: Callable[..., Path]) -> None:
    path = write_deck({"name": "Numbers", "faces": ["A", "B"], "cards": [["a", 1]]})
    _expect_deck_error([path], "invalid card")


def test_deck_error_is_a_value_error(write_deck: Callable[..., Path]) -> None:
    path = write_deck({"name": "One", "faces": ["Front"], "cards": []})
    try:
        load_decks([path])
        raise AssertionError("Expected a ValueError.")
    except ValueError:
        pass


def test_load_bundled_decks() -> None:
    decks = load_bundled_decks()
    names = {deck.name for deck in decks}
    assert {"Hiragana", "Kanji Words"} <= names
    for deck in decks:
        assert len(deck.faces) >= 2
        assert all(card.present_count() >= 2 for card in deck.cards)


def test_load_deck_rejects_wrong_shapes(write_deck: Callable[..., Path]) -> None:
    cases = [
        ({"name": "Cards", "faces": ["A", "B"], "cards": 5}, "cards"),
        ({"name": "Faces", "faces": "ab", "cards": []}, "faces"),
        ({"name": "Faces", "faces": ["A", 2], "cards": []}, "faces"),
        ({"name": None, "faces": ["A", "B"], "cards": []}, "name"),
        ({"faces": ["A", "B"], "cards": []}, "name"),
    ]
    for index, (payload, fragment) in enumerate(cases):
        path = write_deck(payload, f"shape{index}.json")
        _expect_deck_error([path], fragment)


def test_load_deck_file_that_is_not_utf8(tmp_path: Path) -> None:
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"name": "Caf\xe9", "faces": ["A", "B"], "cards": []}')
    _expect_deck_error([path], "SerdeError")


def test_load_bundled_decks_reports_unreadable_files(tmp_path: Path, monkeypatch: Any) -> None:
    (tmp_path / "broken.json").write_bytes(b"\xff")
    monkeypatch.setattr(deck_loader.resources, "files", lambda _: tmp_path)
    try:
        load_bundled_decks()
        raise AssertionError("Expected a DeckError for an undecodable bundled deck.")
    except DeckError as exc:
        assert "SerdeError" in str(exc)
