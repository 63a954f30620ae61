"""CLI entry points for browsing and generating verbs."""

from __future__ import annotations

import argparse
import shlex
from typing import Any, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from ..config import VerbDrillConfigError
from ..context import add_common_arguments, build_context
from ..core.ai import API_KEY_ENV, ConfigurationFailure
from ..quiz.selector import QuizMode, filter_by_mode
from .generation import GenerationClient, GenerationFailure
from .models import VerbRecord
from .storage import SlotStorageError


def render_verb_table(
    records: Sequence[VerbRecord],
    *,
    title: str | None = None,
    show_examples: bool = False,
) -> Table:
    table = Table(title=title, box=box.SIMPLE, expand=False)
    table.add_column("Base", style="bold")
    table.add_column("Past")
    table.add_column("Participle")
    table.add_column("Meaning")
    table.add_column("Type", justify="center")
    if show_examples:
        table.add_column("Example", overflow="fold")
    for record in records:
        row = [
            record.base,
            record.past,
            record.participle,
            record.meaning,
            "irregular" if record.is_irregular else "regular",
        ]
        if show_examples:
            row.append(record.example)
        table.add_row(*row)
    return table


def _build_list_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="verb-drill list",
        description="Show the verbs in your collection.",
    )
    parser.add_argument(
        "--filter",
        help="Only show verbs whose base form or meaning contains this text.",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in QuizMode],
        default=QuizMode.MIX.value,
        help="Restrict the listing to irregular or regular verbs.",
    )
    parser.add_argument(
        "--examples",
        action="store_true",
        help="Include the example sentence column.",
    )
    parser.add_argument(
        "--reset-seed",
        action="store_true",
        help="Replace the collection with the built-in seed verbs first.",
    )
    add_common_arguments(parser)
    return parser


def list_main(
    argv: Sequence[str] | None = None, *, console: Console | None = None
) -> int:
    parser = _build_list_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    try:
        ctx = build_context(args)
    except VerbDrillConfigError as exc:
        parser.error(str(exc))
    console = console or Console()

    if args.reset_seed:
        try:
            ctx.store.reset()
        except SlotStorageError as exc:
            console.print(f"[red]{exc}[/]")
            return 1
        ctx.logger.info("Collection reset to seed verbs")

    records = ctx.store.search(args.filter or "")
    records = filter_by_mode(records, QuizMode.from_value(args.mode))
    if not records:
        console.print("No verbs match the given filters.")
        return 1
    console.print(render_verb_table(records, show_examples=args.examples))
    console.print(
        f"[dim]{len(records)} of {len(ctx.store)} verb(s) shown.[/]"
    )
    return 0


def _build_generate_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="verb-drill generate",
        description=(
            "Ask the AI backend for new verbs about a topic and add the ones "
            "you do not have yet."
        ),
    )
    parser.add_argument(
        "topic",
        nargs="+",
        help="Topic for the new verbs, e.g. cooking or business travel.",
    )
    parser.add_argument(
        "--count",
        type=int,
        help="Number of verbs to request (defaults to the config value).",
    )
    add_common_arguments(parser)
    return parser


def generate_main(
    argv: Sequence[str] | None = None,
    *,
    console: Console | None = None,
    client: Any = None,
) -> int:
    parser = _build_generate_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    topic = " ".join(args.topic).strip()
    if not topic:
        parser.error("topic must not be empty")
    if args.count is not None and args.count < 1:
        parser.error("--count must be a positive integer")
    try:
        ctx = build_context(args)
    except VerbDrillConfigError as exc:
        parser.error(str(exc))
    console = console or Console()

    settings = ctx.config.generation
    count = args.count or settings.default_count
    generator = GenerationClient(
        client,
        model=settings.model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
        meaning_language=settings.meaning_language,
    )

    with console.status(f"Generating {count} verb(s) about '{topic}'..."):
        try:
            candidates = generator.generate(topic, count)
        except ConfigurationFailure as exc:
            ctx.logger.error(
                "Generation not configured", extra={"reason": str(exc)}
            )
            console.print(f"[red]{exc}[/]")
            console.print(
                f"Set {API_KEY_ENV} in your environment or a .env file, "
                "then run the command again."
            )
            return 2
        except GenerationFailure as exc:
            ctx.logger.error(
                "Generation failed",
                extra={"topic": topic, "reason": str(exc)},
            )
            console.print(
                "[red]Failed to generate verbs. Please try again.[/]"
            )
            console.print(
                "Retry with: verb-drill generate {0}".format(
                    shlex.quote(topic)
                )
            )
            return 1

    try:
        result = ctx.store.merge(candidates)
    except SlotStorageError as exc:
        ctx.logger.error("Saving verbs failed", extra={"reason": str(exc)})
        console.print(f"[red]{exc}[/]")
        return 1

    if not result.added_any:
        if result.rejected_count:
            console.print(
                "[yellow]All generated verbs are already in your "
                "collection.[/]"
            )
        else:
            console.print(
                f"[yellow]No verbs were returned for '{topic}'. "
                "Try a different topic.[/]"
            )
        return 0
    console.print(
        render_verb_table(result.accepted, title=f"New verbs: {topic}")
    )
    if result.rejected_count:
        console.print(
            f"[dim]Skipped {result.rejected_count} verb(s) you already "
            "have.[/]"
        )
    console.print(f"Collection now holds {len(ctx.store)} verb(s).")
    return 0
