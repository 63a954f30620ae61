"""Rich-powered console loop over a :class:`QuizSession`.

The loop only renders and collects input; grading and progression live in
the session. Input comes from an injectable provider so tests can script a
whole run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .session import GradeResult, Outcome, QuizSession, QuizSummary

InputProvider = Callable[[], str]
ExitAction = Literal["finished", "quit", "empty"]

_QUIT_WORDS = frozenset({"q", "quit", "exit"})


class _QuitRequested(Exception):
    pass


@dataclass(frozen=True)
class QuizRunResult:
    """Return value from :func:`run_quiz`."""

    summary: QuizSummary
    exit_action: ExitAction


def run_quiz(
    session: QuizSession,
    console: Console,
    input_provider: InputProvider,
) -> QuizRunResult:
    """Drive ``session`` to completion (or until the learner quits)."""

    if session.is_finished:
        console.print(
            Panel(
                "No verbs available for this quiz.",
                title="Verb Quiz",
                border_style="yellow",
            )
        )
        return QuizRunResult(session.summary(), "empty")

    exit_action: ExitAction = "finished"
    try:
        while not session.is_finished:
            _render_item(console, session)
            result = _collect_and_grade(console, session, input_provider)
            _render_feedback(console, result)
            _prompt(console, input_provider, "Press Enter to continue")
            session.advance()
    except _QuitRequested:
        console.print("\n[bold yellow]Quiz ended early.[/]")
        exit_action = "quit"

    summary = session.summary()
    _render_summary(console, session, summary)
    return QuizRunResult(summary, exit_action)


def _collect_and_grade(
    console: Console, session: QuizSession, input_provider: InputProvider
) -> GradeResult:
    while True:
        past = _prompt(console, input_provider, "Past simple")
        participle = _prompt(console, input_provider, "Past participle")
        result = session.submit(past, participle)
        if result is not None:
            return result
        console.print("[red]Both forms are required. Try again.[/]")


def _prompt(
    console: Console, input_provider: InputProvider, label: str
) -> str:
    console.print(Text(f"{label}:", style="bold"), end=" ")
    try:
        raw = input_provider()
    except (EOFError, KeyboardInterrupt) as exc:
        raise _QuitRequested() from exc
    text = raw if isinstance(raw, str) else ""
    if text.strip().lower() in _QUIT_WORDS:
        raise _QuitRequested()
    return text


def _render_item(console: Console, session: QuizSession) -> None:
    verb = session.current.verb
    header = Text.assemble(
        (f"Verb {session.index + 1}", "bold cyan"),
        (f" / {session.total}", "dim"),
        (f"   score {session.score}", "magenta"),
    )
    console.print()
    console.rule(header)
    console.print(Text(verb.base, style="bold"), justify="center")
    if verb.meaning:
        console.print(Text(verb.meaning, style="dim"), justify="center")
    console.print(Text("Type q to quit.", style="dim"))


def _render_feedback(console: Console, result: GradeResult) -> None:
    if result.is_correct:
        console.print("[bold green]Correct![/]")
        return
    table = Table(show_header=True, box=box.SIMPLE, expand=False)
    table.add_column("Form")
    table.add_column("Answer")
    table.add_column("", justify="center")
    table.add_row(
        "Past simple",
        result.expected_past,
        "✅" if result.past_correct else "❌",
    )
    table.add_row(
        "Past participle",
        result.expected_participle,
        "✅" if result.participle_correct else "❌",
    )
    console.print("[bold red]Incorrect.[/]")
    console.print(table)


def _render_summary(
    console: Console, session: QuizSession, summary: QuizSummary
) -> None:
    console.print()
    console.rule(Text("Quiz Summary", style="bold magenta"))

    overview = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD)
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Questions", str(summary.total))
    overview.add_row("Answered", str(summary.answered))
    overview.add_row("Score", f"{summary.correct} / {summary.total}")
    overview.add_row("Accuracy", f"{summary.accuracy * 100:.1f}%")
    console.print(overview)

    answered = [
        item
        for item in session.items
        if item.outcome is not Outcome.UNANSWERED
    ]
    if not answered:
        return
    responses = Table(title="Responses", box=box.SIMPLE, expand=True)
    responses.add_column("#", justify="right")
    responses.add_column("Verb")
    responses.add_column("Your answer")
    responses.add_column("Correct answer")
    responses.add_column("Result", justify="center")
    for idx, item in enumerate(answered, start=1):
        responses.add_row(
            str(idx),
            item.verb.base,
            f"{item.past_input} / {item.participle_input}",
            f"{item.verb.past} / {item.verb.participle}",
            "✅" if item.outcome is Outcome.CORRECT else "❌",
        )
    console.print(responses)
