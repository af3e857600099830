"""Quiz session: feed learner answers back into card weights."""

from __future__ import annotations

import enum
import logging
import random
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from .models import Deck, DeckCard
from .problems import MatchProblem, MatchProblemGenerator, PromptCard
from .stats import PerformanceModel, StatsStore

logger = logging.getLogger(__name__)


@dataclass
class Progress:
    """Running correct/total counts for one session."""

    correct: int = 0
    total: int = 0

    def add_correct(self) -> None:
        self.correct += 1
        self.total += 1

    def add_incorrect(self) -> None:
        self.total += 1

    def ratio_percent(self) -> tuple[float, float]:
        """Return (ratio, percent) correct; an empty session counts as 0%."""
        ratio = self.correct / self.total if self.total else 0.0
        return ratio, ratio * 100.0


class SessionState(enum.Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    QUIT = "quit"


@dataclass(frozen=True)
class SessionResult:
    """Final progress and how the session ended."""

    progress: Progress
    state: SessionState


class Presenter(Protocol):
    """Presentation layer for match problems.

    A presenter may also define `show_result(problem, progress, chosen) -> bool`,
    called after every answer; returning False quits the session.
    """

    def show_problem(self, problem: MatchProblem, progress: Progress) -> int | None:
        """Show a problem and return the chosen answer index, or None to quit."""
        ...


def eligible_deck_cards(decks: list[Deck], faces: Iterable[str] | None = None) -> list[DeckCard]:
    """Return handles to every card that can be asked.

    With a face filter, a card is eligible only if one of its present faces is
    named in the filter.
    """
    wanted = set(faces) if faces else None
    deck_cards: list[DeckCard] = []
    for deck_index, deck in enumerate(decks):
        if wanted is not None:
            slots = [index for index, name in enumerate(deck.faces) if name in wanted]
            if not slots:
                continue
        for card_index, card in enumerate(deck.cards):
            if wanted is not None and all(card[slot] is None for slot in slots):
                continue
            deck_cards.append(DeckCard(deck_index, card_index))
    return deck_cards


class MatchSession:
    """Runs match problems until the count is reached, the learner quits, or the pool is empty."""

    def __init__(
        self,
        decks: list[Deck],
        store: StatsStore,
        faces: Iterable[str] | None = None,
        problem_count: int | None = None,
        line: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        """Load stats once and build the weighted pool of eligible cards."""
        self.decks = decks
        self.store = store
        self.problem_count = problem_count
        self.model = PerformanceModel(store.load())
        face_filter = set(faces) if faces else None
        self.problems = MatchProblemGenerator(
            decks,
            eligible_deck_cards(decks, face_filter),
            self.model,
            faces=face_filter,
            line=line,
            rng=rng,
        )
        self.progress = Progress()
        self.state = SessionState.RUNNING

    def record_correct(self, card: PromptCard) -> None:
        weight = self.model.record_correct(self.problems.id_for(card.deck_card))
        if card.index is not None:
            self.problems.change_weight(card.index, weight)

    def record_incorrect(self, card: PromptCard) -> None:
        weight = self.model.record_incorrect(self.problems.id_for(card.deck_card))
        if card.index is not None:
            self.problems.change_weight(card.index, weight)

    def answer(self, problem: MatchProblem, chosen: int) -> bool:
        """Apply one answer to the stats and pool weights; return whether it was correct."""
        if not 0 <= chosen < len(problem.answers):
            raise IndexError(f"Answer index {chosen} out of range")
        if chosen == problem.answer_index:
            self.record_correct(problem.question)
            self.progress.add_correct()
            return True
        # A wrong pick implicates both the asked card and the one mistaken for it.
        self.record_incorrect(problem.question)
        self.record_incorrect(problem.answers[chosen][0])
        self.progress.add_incorrect()
        return False

    def run(self, presenter: Presenter) -> SessionResult:
        """Drive the session loop, saving stats once at the end."""
        try:
            self._loop(presenter)
        finally:
            self.store.save(self.model.card_stats)
        logger.info(
            "Session %s: %d/%d correct",
            self.state.value,
            self.progress.correct,
            self.progress.total,
        )
        return SessionResult(progress=self.progress, state=self.state)

    def _loop(self, presenter: Presenter) -> None:
        show_result = getattr(presenter, "show_result", None)
        asked = 0
        while self.problem_count is None or asked < self.problem_count:
            problem = next(self.problems, None)
            if problem is None:
                logger.info("No eligible cards left")
                break
            asked += 1

            chosen = presenter.show_problem(problem, self.progress)
            if chosen is None:
                self.state = SessionState.QUIT
                return
            self.answer(problem, chosen)
            if show_result is not None and not show_result(problem, self.progress, chosen):
                self.state = SessionState.QUIT
                return
        self.state = SessionState.COMPLETED
