from .console import QuizRunResult, run_quiz
from .selector import (
    DEFAULT_QUESTION_COUNT,
    QuizMode,
    filter_by_mode,
    select_verbs,
)
from .session import (
    GradeResult,
    Outcome,
    Phase,
    QuizItem,
    QuizSession,
    QuizSessionError,
    QuizSummary,
)

__all__ = [
    "QuizRunResult",
    "run_quiz",
    "DEFAULT_QUESTION_COUNT",
    "QuizMode",
    "filter_by_mode",
    "select_verbs",
    "GradeResult",
    "Outcome",
    "Phase",
    "QuizItem",
    "QuizSession",
    "QuizSessionError",
    "QuizSummary",
]
