import sys
import types

import pytest

from verb_drill import cli


@pytest.fixture(autouse=True)
def pinned_version(monkeypatch):
    def version_of(dist: str) -> str:
        assert dist == "verb-drill"
        return "0.0-test"

    monkeypatch.setattr(cli.metadata, "version", version_of)


@pytest.fixture
def entry_point(monkeypatch):
    """Route ``import_module`` to a namespace holding one fake entry point."""

    def install(module_name: str, func_name: str, func):
        seen: list[str] = []

        def importer(name: str):
            seen.append(name)
            return types.SimpleNamespace(**{func_name: func})

        monkeypatch.setattr(cli, "import_module", importer)
        return seen

    return install


def run(capsys, *argv: str):
    code = cli.main(list(argv))
    out, err = capsys.readouterr()
    return code, out, err


def test_missing_distribution_reports_unknown_version(monkeypatch, capsys):
    def missing(dist: str) -> str:
        raise cli.metadata.PackageNotFoundError(dist)

    monkeypatch.setattr(cli.metadata, "version", missing)

    assert run(capsys, "version") == (0, "unknown\n", "")


def test_bare_invocation_shows_usage_with_error_code(capsys):
    code, out, _ = run(capsys)

    assert code == 2
    assert out.startswith("Usage: verb-drill")
    assert "Available commands:" in out


@pytest.mark.parametrize("flag", ["--help", "-h", "help"])
def test_help_flags_show_usage(flag, capsys):
    code, out, _ = run(capsys, flag)

    assert code == 0
    assert "Usage: verb-drill" in out


def test_commands_lists_every_subcommand(capsys):
    code, out, _ = run(capsys, "commands")

    assert code == 0
    assert out.splitlines()[0] == "Available commands:"
    for name in cli.COMMANDS:
        assert f"  {name}" in out
    quiz_row = next(line for line in out.splitlines() if "  quiz" in line)
    assert quiz_row.endswith("(interactive)")


def test_help_for_a_command_points_at_its_options(capsys):
    code, out, _ = run(capsys, "help", "generate")

    assert code == 0
    assert out.startswith("generate: ")
    assert "Run `verb-drill generate --help`" in out


@pytest.mark.parametrize(
    "argv", [("help", "conjugate"), ("conjugate",), ("conjugate", "-x")]
)
def test_unknown_names_fail_with_command_table(argv, capsys):
    code, out, err = run(capsys, *argv)

    assert code == 2
    assert out == ""
    assert "Unknown command 'conjugate'." in err
    assert "Available commands:" in err


@pytest.mark.parametrize("flag", ["version", "--version", "-V"])
def test_version_spellings(flag, capsys):
    assert run(capsys, flag) == (0, "0.0-test\n", "")


@pytest.mark.parametrize(
    "command, target",
    [
        ("init", "verb_drill.workspace.cli:main"),
        ("list", "verb_drill.verbs.cli:list_main"),
        ("generate", "verb_drill.verbs.cli:generate_main"),
        ("quiz", "verb_drill.quiz.cli:main"),
    ],
)
def test_subcommand_receives_remaining_args(entry_point, command, target):
    module_name, _, func_name = target.partition(":")
    original_argv = list(sys.argv)
    calls = []

    def fake_main(argv):
        calls.append((list(argv), list(sys.argv)))
        return 7

    imported = entry_point(module_name, func_name, fake_main)

    assert cli.main([command, "--seed", "3"]) == 7
    assert imported == [module_name]
    assert calls == [
        (["--seed", "3"], [f"verb-drill {command}", "--seed", "3"])
    ]
    assert sys.argv == original_argv


@pytest.mark.parametrize(
    "outcome, expected",
    [(SystemExit(5), 5), (SystemExit(), 0), (None, 0), ("text", 0), (3, 3)],
)
def test_exit_codes_are_normalized(entry_point, outcome, expected):
    def fake_main(argv):
        if isinstance(outcome, SystemExit):
            raise outcome
        return outcome

    entry_point("verb_drill.quiz.cli", "main", fake_main)

    assert cli.main(["quiz"]) == expected


def test_system_exit_message_goes_to_stderr(entry_point, capsys):
    def fake_main(argv):
        raise SystemExit("generation aborted")

    entry_point("verb_drill.verbs.cli", "generate_main", fake_main)

    code, _, err = run(capsys, "generate", "food")

    assert code == 1
    assert err == "generation aborted\n"


def test_argparse_usage_errors_return_two(capsys):
    code, _, err = run(capsys, "list", "--mode", "sometimes")

    assert code == 2
    assert "invalid choice" in err
