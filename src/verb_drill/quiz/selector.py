import random
from enum import Enum
from typing import List, Optional, Sequence

from ..verbs.models import VerbRecord

DEFAULT_QUESTION_COUNT = 10


class QuizMode(Enum):
    """Which verbs a quiz draws from."""

    MIX = "mix"
    IRREGULAR = "irregular"
    REGULAR = "regular"

    @classmethod
    def from_value(cls, value: str) -> "QuizMode":
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        expected = ", ".join(member.value for member in cls)
        raise ValueError(
            f"Unknown quiz mode '{value}'. Expected one of: {expected}."
        )


def filter_by_mode(
    records: Sequence[VerbRecord], mode: QuizMode
) -> List[VerbRecord]:
    if mode is QuizMode.IRREGULAR:
        return [r for r in records if r.is_irregular]
    if mode is QuizMode.REGULAR:
        return [r for r in records if not r.is_irregular]
    return list(records)


def select_verbs(
    records: Sequence[VerbRecord],
    count: int = DEFAULT_QUESTION_COUNT,
    *,
    mode: QuizMode = QuizMode.MIX,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> List[VerbRecord]:
    """Pick up to ``count`` distinct verbs for a quiz.

    The pool (after the mode filter) is shuffled uniformly and the prefix of
    ``min(count, len(pool))`` is returned, so insertion order never biases the
    draw. Deterministic when ``seed`` or ``rng`` is provided.
    """
    pool = filter_by_mode(records, mode)
    if count <= 0 or not pool:
        return []
    rnd = rng or random.Random(seed)
    rnd.shuffle(pool)
    return pool[:count]
