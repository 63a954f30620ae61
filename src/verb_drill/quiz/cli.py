import argparse
from typing import Optional, Sequence

from rich.console import Console

from ..config import VerbDrillConfigError
from ..context import add_common_arguments, build_context
from .console import InputProvider, run_quiz
from .selector import QuizMode, select_verbs
from .session import QuizSession


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="verb-drill quiz",
        description=(
            "Quiz yourself on past simple and past participle forms from "
            "your verb collection."
        ),
    )
    parser.add_argument(
        "--num",
        type=int,
        help="Number of verbs to ask (defaults to quiz.question_count).",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in QuizMode],
        help="Draw from all verbs, only irregular ones, or only regular ones.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed the verb shuffle for a repeatable quiz.",
    )
    add_common_arguments(parser)
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
    input_provider: Optional[InputProvider] = None,
) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.num is not None and args.num < 1:
        parser.error("--num must be a positive integer")
    try:
        ctx = build_context(args)
    except VerbDrillConfigError as exc:
        parser.error(str(exc))

    console = console or Console()
    provider = input_provider or (lambda: console.input())
    count = args.num or ctx.config.question_count
    mode = (
        QuizMode.from_value(args.mode) if args.mode else ctx.config.quiz_mode
    )

    verbs = select_verbs(ctx.store.records, count, mode=mode, seed=args.seed)
    ctx.logger.info(
        "Quiz started",
        extra={"requested": count, "selected": len(verbs), "mode": mode.value},
    )
    result = run_quiz(QuizSession(verbs), console, provider)
    ctx.logger.info(
        "Quiz ended",
        extra={
            "exit_action": result.exit_action,
            "correct": result.summary.correct,
            "answered": result.summary.answered,
            "total": result.summary.total,
        },
    )
    return 1 if result.exit_action == "empty" else 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
