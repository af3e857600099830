"""Error types surfaced to callers of the quiz engine."""

from __future__ import annotations


class FlashrError(Exception):
    """Base class for recoverable flashr failures."""


class DeckError(FlashrError, ValueError):
    """A deck file could not be read or failed validation."""


class StatsError(FlashrError):
    """The stats file could not be read, parsed, or written."""


class DeckMismatchError(FlashrError):
    """Not enough distinct answers exist for a question/answer face pairing."""

    def __init__(self, question: str, question_face: str, answer_face: str, deck: str) -> None:
        self.question = question
        self.question_face = question_face
        self.answer_face = answer_face
        self.deck = deck
        super().__init__(
            f'Cannot find enough answers for question {question}, which is a "{question_face}" face, '
            f'from deck {deck}, given answer face "{answer_face}"'
        )
