"""Quiz session state machine.

A session walks a fixed list of verbs exactly once. Each item is answered
(``submit``) and then left (``advance``); there is no way back and no
re-grading. The session is usable without any terminal so the console loop
and tests drive the same object.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from ..verbs.models import VerbRecord


class QuizSessionError(RuntimeError):
    """Raised when an operation is attempted in the wrong phase."""


class Outcome(Enum):
    UNANSWERED = "unanswered"
    CORRECT = "correct"
    INCORRECT = "incorrect"


class Phase(Enum):
    AWAITING_ANSWER = "awaiting_answer"
    GRADED = "graded"
    FINISHED = "finished"


@dataclass
class QuizItem:
    """A verb plus the learner's answer for one session."""

    verb: VerbRecord
    past_input: str = ""
    participle_input: str = ""
    outcome: Outcome = Outcome.UNANSWERED


@dataclass(frozen=True)
class GradeResult:
    """Feedback for one submitted answer."""

    index: int
    outcome: Outcome
    past_correct: bool
    participle_correct: bool
    expected_past: str
    expected_participle: str

    @property
    def is_correct(self) -> bool:
        return self.outcome is Outcome.CORRECT


@dataclass(frozen=True)
class QuizSummary:
    total: int
    correct: int
    answered: int

    @property
    def accuracy(self) -> float:
        if self.total == 0:
            return 0.0
        return self.correct / self.total


class QuizSession:
    """One pass over ``verbs`` with a cursor and a running score."""

    def __init__(self, verbs: Sequence[VerbRecord]) -> None:
        self._items = tuple(QuizItem(verb) for verb in verbs)
        self._index = 0
        self._score = 0
        self._phase = (
            Phase.AWAITING_ANSWER if self._items else Phase.FINISHED
        )

    @property
    def items(self) -> tuple[QuizItem, ...]:
        return self._items

    @property
    def total(self) -> int:
        return len(self._items)

    @property
    def index(self) -> int:
        """Cursor position; equals ``total`` once finished."""
        if self._phase is Phase.FINISHED:
            return self.total
        return self._index

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def score(self) -> int:
        return self._score

    @property
    def is_finished(self) -> bool:
        return self._phase is Phase.FINISHED

    @property
    def current(self) -> QuizItem:
        if self._phase is Phase.FINISHED:
            raise QuizSessionError("Quiz is finished; no current item.")
        return self._items[self._index]

    def submit(self, past: str, participle: str) -> GradeResult | None:
        """Grade the current item.

        Blank answers (after trimming) are ignored and return ``None`` with
        no state change. Matching is case-insensitive on trimmed text and
        both forms must match for the item to count as correct.
        """
        self._require(Phase.AWAITING_ANSWER, "submit")
        if not past.strip() or not participle.strip():
            return None

        item = self._items[self._index]
        past_ok = item.verb.matches_past(past)
        participle_ok = item.verb.matches_participle(participle)
        item.past_input = past.strip()
        item.participle_input = participle.strip()
        if past_ok and participle_ok:
            item.outcome = Outcome.CORRECT
            self._score += 1
        else:
            item.outcome = Outcome.INCORRECT
        self._phase = Phase.GRADED
        return GradeResult(
            index=self._index,
            outcome=item.outcome,
            past_correct=past_ok,
            participle_correct=participle_ok,
            expected_past=item.verb.past,
            expected_participle=item.verb.participle,
        )

    def advance(self) -> None:
        self._require(Phase.GRADED, "advance")
        if self._index + 1 < self.total:
            self._index += 1
            self._phase = Phase.AWAITING_ANSWER
        else:
            self._phase = Phase.FINISHED

    def summary(self) -> QuizSummary:
        answered = sum(
            1 for item in self._items if item.outcome is not Outcome.UNANSWERED
        )
        return QuizSummary(
            total=self.total, correct=self._score, answered=answered
        )

    def _require(self, phase: Phase, action: str) -> None:
        if self._phase is not phase:
            raise QuizSessionError(
                f"Cannot {action} while the quiz is {self._phase.value}."
            )
