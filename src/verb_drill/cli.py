"""``verb-drill`` entry point: routes a subcommand to its module's ``main``."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from importlib import import_module, metadata
from typing import Callable, Mapping, Optional, Sequence

DIST_NAME = "verb-drill"
PROG = "verb-drill"

Writer = Callable[[str], object]


@dataclass(frozen=True)
class CommandSpec:
    """A subcommand and the ``module:function`` that implements it."""

    name: str
    summary: str
    target: str
    interactive: bool = False

    @property
    def prog(self) -> str:
        return f"{PROG} {self.name}"

    def load(self) -> Callable[[Sequence[str]], object]:
        module_name, _, func_name = self.target.partition(":")
        return getattr(import_module(module_name), func_name)


_COMMAND_SPECS: tuple[CommandSpec, ...] = (
    CommandSpec(
        "init",
        "Bootstrap the verb-drill workspace (and optional config).",
        "verb_drill.workspace.cli:main",
    ),
    CommandSpec(
        "list",
        "Show the verbs in your collection.",
        "verb_drill.verbs.cli:list_main",
    ),
    CommandSpec(
        "quiz",
        "Quiz yourself on past and participle forms.",
        "verb_drill.quiz.cli:main",
        interactive=True,
    ),
    CommandSpec(
        "generate",
        "Add AI-generated verbs about a topic to your collection.",
        "verb_drill.verbs.cli:generate_main",
    ),
)

COMMANDS: Mapping[str, CommandSpec] = {
    spec.name: spec for spec in _COMMAND_SPECS
}


def format_command_table() -> str:
    width = max(len(name) for name in COMMANDS)
    rows = ["Available commands:"]
    for spec in _COMMAND_SPECS:
        tag = " (interactive)" if spec.interactive else ""
        rows.append(f"  {spec.name:<{width}}  {spec.summary}{tag}")
    return "\n".join(rows)


def format_usage() -> str:
    return "\n".join(
        (
            f"Usage: {PROG} <command> [args...]",
            f"Run `{PROG} commands` for commands or "
            f"`{PROG} help <name>` for details.",
            "",
            format_command_table(),
        )
    )


def _emit(text: str, write: Optional[Writer] = None) -> None:
    (write or sys.stdout.write)(text + "\n")


def _err(text: str) -> None:
    _emit(text, sys.stderr.write)


def _unknown(name: str) -> int:
    _err(f"Unknown command '{name}'.")
    _err(format_command_table())
    return 2


def _version() -> int:
    try:
        _emit(metadata.version(DIST_NAME))
    except metadata.PackageNotFoundError:
        _emit("unknown")
    return 0


def _help(topic: Sequence[str]) -> int:
    if not topic:
        _emit(format_usage())
        return 0
    spec = COMMANDS.get(topic[0])
    if spec is None:
        return _unknown(topic[0])
    _emit(f"{spec.name}: {spec.summary}")
    _emit(f"Run `{spec.prog} --help` for CLI-specific options.")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        _emit(format_usage())
        return 2

    head, rest = args[0], args[1:]
    if head in ("-h", "--help"):
        _emit(format_usage())
        return 0
    if head in ("-V", "--version", "version"):
        return _version()
    if head == "commands":
        _emit(format_command_table())
        return 0
    if head == "help":
        return _help(rest)

    spec = COMMANDS.get(head)
    if spec is None:
        return _unknown(head)
    return run_command(spec, rest)


def run_command(spec: CommandSpec, argv: Sequence[str]) -> int:
    """Call ``spec``'s entry point with ``sys.argv`` set to its own prog."""

    handler = spec.load()
    forwarded = list(argv)
    saved_argv = sys.argv
    sys.argv = [spec.prog, *forwarded]
    try:
        result = handler(forwarded)
    except SystemExit as exc:
        return _exit_code(exc.code)
    finally:
        sys.argv = saved_argv
    return result if isinstance(result, int) else 0


def _exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    if isinstance(code, str):
        _err(code)
    return 1


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
