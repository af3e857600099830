"""Build multiple-choice problems from a weighted pool of cards."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterator
from dataclasses import dataclass

from .errors import DeckMismatchError
from .models import Deck, DeckCard, Face, card_id, display, face_key, join_random, possible_faces
from .stats import PerformanceModel
from .weighted import WeightedList

ANSWERS_PER_PROBLEM = 4

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptCard:
    """One rendered face bound to the card it came from.

    `index` is the card's slot in the session pool, or None when the card was
    only used as a distractor and is not itself eligible to be asked.
    """

    prompt: str
    deck_card: DeckCard
    index: int | None


@dataclass(frozen=True)
class MatchProblem:
    """A question and its shuffled answers, exactly one of them correct."""

    question: PromptCard
    question_face: str
    answer_face: str
    answers: list[tuple[PromptCard, bool]]
    answer_index: int
    weights: list[float] | None = None


@dataclass(frozen=True)
class _Candidate:
    value: Face
    deck_card: DeckCard
    index: int | None


class MatchProblemGenerator(Iterator[MatchProblem]):
    """Endless stream of match problems drawn by card weight.

    Raises StopIteration only when the pool is empty, and DeckMismatchError when a
    drawn face pairing cannot produce enough distinct answers.
    """

    def __init__(
        self,
        decks: list[Deck],
        deck_cards: list[DeckCard],
        model: PerformanceModel,
        faces: set[str] | None = None,
        line: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        self.decks = decks
        self.model = model
        self.faces = set(faces) if faces else None
        self.line = line
        self.rng = rng or random.Random()
        self.pool: WeightedList[DeckCard] = WeightedList.from_pairs(
            (deck_card, model.weight(self.id_for(deck_card))) for deck_card in deck_cards
        )
        self._pool_index = {deck_card: index for index, deck_card in enumerate(deck_cards)}

    def id_for(self, deck_card: DeckCard) -> str:
        return card_id(*deck_card.resolve(self.decks))

    def change_weight(self, index: int, weight: float) -> None:
        self.pool.change_weight(index, weight)

    def __iter__(self) -> MatchProblemGenerator:
        return self

    def __next__(self) -> MatchProblem:
        drawn = self.pool.get_random(self.rng)
        if drawn is None:
            raise StopIteration
        problem_card, problem_index = drawn
        deck, card = problem_card.resolve(self.decks)

        question, answer = self._choose_faces(possible_faces(deck, card))
        _, question_face, problem_question = question
        _, answer_face, problem_answer = answer

        correct_answer = PromptCard(join_random(problem_answer, self.rng), problem_card, problem_index)
        answers = [correct_answer]
        answers.extend(
            self._distractors(problem_card, question_face, problem_question, answer_face, correct_answer, problem_answer)
        )

        if len(answers) < ANSWERS_PER_PROBLEM:
            raise DeckMismatchError(display(problem_question), question_face, answer_face, deck.name)

        flagged = [(answer, answer is correct_answer) for answer in answers]
        self.rng.shuffle(flagged)
        answer_index = next(i for i, (_, correct) in enumerate(flagged) if correct)

        return MatchProblem(
            question=PromptCard(join_random(problem_question, self.rng), problem_card, problem_index),
            question_face=question_face,
            answer_face=answer_face,
            answers=flagged,
            answer_index=answer_index,
            weights=self.pool.weights() if self.line else None,
        )

    def _choose_faces(
        self, faces: list[tuple[int, str, Face]]
    ) -> tuple[tuple[int, str, Face], tuple[int, str, Face]]:
        """Pick (question, answer) faces; only the question face is filtered."""
        shuffled = list(faces)
        self.rng.shuffle(shuffled)
        if self.faces is None:
            assert len(shuffled) >= 2, "Unable to find valid question and answer faces"
            return shuffled[0], shuffled[1]

        question = next((face for face in shuffled if face[1] in self.faces), None)
        assert question is not None, "Unable to find a valid question face"
        self.rng.shuffle(shuffled)
        answer = next((face for face in shuffled if face[0] != question[0]), None)
        assert answer is not None, "Unable to find a valid answer face"
        return question, answer

    def _distractors(
        self,
        problem_card: DeckCard,
        question_face: str,
        problem_question: Face,
        answer_face: str,
        correct_answer: PromptCard,
        problem_answer: Face,
    ) -> list[PromptCard]:
        """Collect rendered wrong answers from every loaded deck.

        A candidate is skipped when its value matches one already taken, when its
        question face matches the problem's, or when it would print the same text
        as an answer already taken.
        """
        candidates: WeightedList[_Candidate] = WeightedList()
        for deck_index, deck in enumerate(self.decks):
            answer_slot = deck.face_index(answer_face)
            if answer_slot is None:
                continue
            for card_index, card in enumerate(deck.cards):
                value = card[answer_slot]
                if value is None:
                    continue
                deck_card = DeckCard(deck_index, card_index)
                if deck_card == problem_card:
                    continue
                candidates.add(
                    _Candidate(value, deck_card, self._pool_index.get(deck_card)),
                    self.model.weight(card_id(deck, card)),
                )

        seen = {face_key(problem_answer)}
        shown = {display(problem_answer), correct_answer.prompt}
        question_key = face_key(problem_question)
        accepted: list[PromptCard] = []
        for candidate, _ in candidates.iter_shuffled(self.rng):
            key = face_key(candidate.value)
            if key in seen:
                continue
            seen.add(key)

            deck, card = candidate.deck_card.resolve(self.decks)
            candidate_question = deck.face_value(card, question_face)
            if candidate_question is not None and face_key(candidate_question) == question_key:
                continue

            # "a, b" and ["a", "b"] are different values that print the same.
            prompt = join_random(candidate.value, self.rng)
            texts = {display(candidate.value), prompt}
            if not shown.isdisjoint(texts):
                continue
            shown.update(texts)

            accepted.append(PromptCard(prompt, candidate.deck_card, candidate.index))
            if len(accepted) == ANSWERS_PER_PROBLEM - 1:
                break
        logger.debug(
            "Found %d distractors for %r (%s -> %s)",
            len(accepted),
            display(problem_question),
            question_face,
            answer_face,
        )
        return accepted
