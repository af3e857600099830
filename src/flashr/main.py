"""CLI entrypoint for terminal flashcards."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from . import __version__
from .deck_loader import load_bundled_decks, load_decks
from .errors import FlashrError
from .models import Deck, DeckCard, display, possible_faces
from .problems import ANSWERS_PER_PROBLEM, MatchProblem
from .service import MatchSession, Progress, SessionResult
from .stats import StatsStore, default_stats_path

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
QUIT_COMMANDS = {"q", ":q", ":quit", ":exit"}
WEIGHT_LINE_WIDTH = 60
SPARK_CHARS = "▁▂▃▄▅▆▇█"

logger = logging.getLogger(__name__)


class QuitApp(Exception):
    """Signal immediate exit from a nested flow."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flashr", description="Weighted multiple-choice flashcards")
    parser.add_argument("paths", nargs="*", help="Deck JSON files or directories (default: bundled decks)")
    parser.add_argument(
        "-c",
        "--count",
        dest="problem_count",
        type=int,
        metavar="PROBLEM_COUNT",
        help="Number of problems to show. If omitted, continues until you quit.",
    )
    parser.add_argument(
        "-f",
        "--faces",
        action="append",
        metavar="FACE",
        help="Face to ask questions about; repeat for several (e.g. -f Front -f Back).",
    )
    parser.add_argument("--line", action="store_true", help="Show a line of the current card weights.")
    parser.add_argument(
        "-m",
        "--mode",
        choices=["match", "flash"],
        default="match",
        help="match: multiple-choice problems; flash: browse flashcards",
    )
    parser.add_argument("--stats", type=Path, help="Stats file path (default: ~/.config/flashr/stats.json)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run(argv: list[str] | None = None, input_fn: InputFn = input, print_fn: PrintFn = print) -> int:
    """Run the CLI application."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.problem_count is not None and args.problem_count < 0:
        print(f"Error: problem count must not be negative, given: {args.problem_count}", file=sys.stderr)
        return 2

    try:
        decks = load_decks(args.paths) if args.paths else load_bundled_decks()
        if args.mode == "flash":
            deck_cards = [
                DeckCard(deck_index, card_index)
                for deck_index, deck in enumerate(decks)
                for card_index in range(len(deck.cards))
            ]
            try:
                flashcards_flow(decks, deck_cards, input_fn, print_fn)
            except QuitApp:
                pass
            return 0

        store = StatsStore(args.stats if args.stats is not None else default_stats_path())
        session = MatchSession(
            decks,
            store,
            faces=args.faces,
            problem_count=args.problem_count,
            line=args.line,
        )
        result = session.run(TerminalPresenter(decks, input_fn, print_fn))
    except FlashrError as exc:
        logger.debug("flashr failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print_summary(result, print_fn)
    return 0


def weight_line(weights: list[float], width: int = WEIGHT_LINE_WIDTH) -> str:
    """Render weights as a unicode bar chart, bucketing when there are more than `width`."""
    if not weights:
        return ""
    bucket = max(1, -(-len(weights) // width))
    values = [max(weights[i : i + bucket]) for i in range(0, len(weights), bucket)]
    top = max(values)
    if top <= 0:
        return SPARK_CHARS[0] * len(values)
    last = len(SPARK_CHARS) - 1
    return "".join(SPARK_CHARS[min(last, int(value / top * last))] for value in values)


class TerminalPresenter:
    """Plain line-based presenter using injectable input/print callables."""

    def __init__(self, decks: list[Deck], input_fn: InputFn = input, print_fn: PrintFn = print) -> None:
        self.decks = decks
        self.input_fn = input_fn
        self.print_fn = print_fn

    def _header(self, problem: MatchProblem, progress: Progress) -> None:
        _, percent = progress.ratio_percent()
        self.print_fn(f"\n[{progress.correct}/{progress.total} correct, {percent:.0f}%]")
        if problem.weights is not None:
            self.print_fn(weight_line(problem.weights))
        self.print_fn(f"{problem.question_face}: {problem.question.prompt}")
        self.print_fn(f"Pick the {problem.answer_face}:")
        for index, (answer, _) in enumerate(problem.answers, start=1):
            self.print_fn(f"  {index}) {answer.prompt}")

    def show_problem(self, problem: MatchProblem, progress: Progress) -> int | None:
        self._header(problem, progress)
        while True:
            choice = self.input_fn("Answer (1-4, q to quit): ").strip().lower()
            if choice in QUIT_COMMANDS:
                return None
            if choice.isdigit() and 1 <= int(choice) <= ANSWERS_PER_PROBLEM:
                return int(choice) - 1
            self.print_fn("Invalid choice.")

    def show_result(self, problem: MatchProblem, progress: Progress, chosen: int) -> bool:
        correct_answer = problem.answers[problem.answer_index][0]
        if chosen == problem.answer_index:
            self.print_fn("Correct.")
        else:
            self.print_fn(f"Incorrect. {problem.question.prompt} -> {correct_answer.prompt}")
        while True:
            choice = self.input_fn("Enter to continue, f[1-4] for flashcards, q to quit: ").strip().lower()
            if choice in QUIT_COMMANDS:
                return False
            if choice == "":
                return True
            if choice == "f":
                cards = [answer.deck_card for answer, _ in problem.answers]
            elif choice[:1] == "f" and choice[1:].isdigit() and 1 <= int(choice[1:]) <= len(problem.answers):
                cards = [problem.answers[int(choice[1:]) - 1][0].deck_card]
            else:
                self.print_fn("Invalid choice.")
                continue
            try:
                flashcards_flow(self.decks, cards, self.input_fn, self.print_fn)
            except QuitApp:
                return False


def flashcards_flow(decks: list[Deck], deck_cards: list[DeckCard], input_fn: InputFn, print_fn: PrintFn) -> None:
    """Browse cards face by face; indices wrap at both ends."""
    if not deck_cards:
        print_fn("No cards to show.")
        return

    card_position = 0
    face_position = 0
    while True:
        deck, card = deck_cards[card_position].resolve(decks)
        faces = possible_faces(deck, card)
        _, face_name, face = faces[face_position % len(faces)]
        print_fn(f"\n[{deck.name} {card_position + 1}/{len(deck_cards)}] {face_name}: {display(face)}")
        choice = input_fn("s/Enter next face, a prev face, n next card, p prev card, b back, q quit: ")
        choice = choice.strip().lower()
        if choice in {"", "s", "d", "l"}:
            face_position = (face_position + 1) % len(faces)
        elif choice in {"a", "h"}:
            face_position = (face_position - 1) % len(faces)
        elif choice in {"n", "j"}:
            card_position = (card_position + 1) % len(deck_cards)
            face_position = 0
        elif choice in {"p", "k", "w"}:
            card_position = (card_position - 1) % len(deck_cards)
            face_position = 0
        elif choice == "b":
            return
        elif choice in QUIT_COMMANDS:
            raise QuitApp()
        else:
            print_fn("Invalid choice.")


def print_summary(result: SessionResult, print_fn: PrintFn = print) -> None:
    """Print the session score and a word of encouragement."""
    progress = result.progress
    if progress.total == 0:
        return
    _, percent = progress.ratio_percent()
    print_fn(f"You got {progress.correct} correct out of {progress.total} ({percent:.2f}%)")
    if progress.total < 10:
        return
    if percent == 100.0:
        if progress.total >= 1000:
            print_fn("🌌🌟🚀 Out of this world! 🚀🌟🌌")
        elif progress.total >= 100:
            print_fn("🚀🌌 Spectacular! 🌌🚀")
        else:
            print_fn("🌟 Perfect! 🌟")
    elif percent >= 90.0:
        print_fn("🥇 Excellent! 🥇")
    elif percent >= 80.0:
        print_fn("🥈 Well done! 🥈")
    elif percent >= 70.0:
        print_fn("🥉 Nice! 🥉")
    else:
        print_fn("Keep up the practice!")


def main_entry() -> None:
    """Console script entrypoint."""
    try:
        raise SystemExit(run())
    except (QuitApp, KeyboardInterrupt, EOFError):
        raise SystemExit(0) from None


if __name__ == "__main__":  # pragma: no cover
    main_entry()
