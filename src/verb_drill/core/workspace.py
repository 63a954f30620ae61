"""Locate and prepare the per-user directory tree verb-drill writes into.

The tree looks like::

    <home>/
        config/   optional verb_drill.toml
        logs/     verb_drill.log (rotated)
        data/     verbs.json slot
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping


WORKSPACE_ENV = "VERB_DRILL_DATA_HOME"
DEFAULT_WORKSPACE = Path.home() / ".verb-drill"

SUBDIRECTORIES: tuple[str, ...] = ("config", "logs", "data")


class WorkspaceError(RuntimeError):
    """The workspace tree could not be resolved or created."""


@dataclass(frozen=True)
class WorkspaceLayout:
    home: Path
    directories: Mapping[str, Path]
    created: Mapping[str, bool]

    def path_for(self, key: str) -> Path:
        if key not in self.directories:
            raise KeyError(f"Unknown workspace directory '{key}'.")
        return self.directories[key]

    def items(self) -> tuple[tuple[str, Path], ...]:
        return tuple(self.directories.items())


def ensure_workspace(
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
    create: bool = True,
) -> WorkspaceLayout:
    """Return the workspace layout, creating directories when ``create``.

    Precedence is ``path``, then ``VERB_DRILL_DATA_HOME``, then
    ``~/.verb-drill``. Only the built-in default may be swapped for a
    directory under the system temp dir when it turns out to be unwritable.
    """

    source = os.environ if env is None else env
    home, explicit = _pick_home(source, path)

    if not create:
        return _build(home, create=False)

    attempts = [home]
    if not explicit and _fallback_base() != home:
        attempts.append(_fallback_base())

    denied: PermissionError | None = None
    for candidate in attempts:
        try:
            return _build(candidate, create=True)
        except PermissionError as exc:
            denied = exc
    raise WorkspaceError(f"Cannot create workspace at {home}") from denied


def describe_layout(
    *, env: Mapping[str, str] | None = None, path: Path | None = None
) -> Mapping[str, Path]:
    """Map ``home`` and each subdirectory to its path without creating."""

    layout = ensure_workspace(env=env, path=path, create=False)
    return MappingProxyType({"home": layout.home, **layout.directories})


def _pick_home(
    env: Mapping[str, str], override: Path | None
) -> tuple[Path, bool]:
    if override is not None:
        return _absolute(override), True
    from_env = (env.get(WORKSPACE_ENV) or "").strip()
    if from_env:
        return _absolute(Path(from_env)), True
    return _absolute(DEFAULT_WORKSPACE), False


def _absolute(path: Path) -> Path:
    expanded = path.expanduser()
    try:
        return expanded.resolve()
    except FileNotFoundError:
        return expanded.absolute()


def _fallback_base() -> Path:
    return Path(tempfile.gettempdir()) / "verb-drill"


def _build(home: Path, *, create: bool) -> WorkspaceLayout:
    if home.exists() and not home.is_dir():
        raise WorkspaceError(
            f"Workspace path exists and is not a directory: {home}"
        )

    directories = {name: home / name for name in SUBDIRECTORIES}
    if create:
        created = {"home": _ensure_dir(home)}
        created.update(
            (name, _ensure_dir(target))
            for name, target in directories.items()
        )
    else:
        _reject_files(directories.items())
        created = dict.fromkeys(("home", *SUBDIRECTORIES), False)

    return WorkspaceLayout(
        home=home,
        directories=MappingProxyType(directories),
        created=MappingProxyType(created),
    )


def _reject_files(entries: Iterable[tuple[str, Path]]) -> None:
    for name, target in entries:
        if target.exists() and not target.is_dir():
            raise WorkspaceError(
                f"Workspace entry '{name}' is a file, not a directory: "
                f"{target}"
            )


def _ensure_dir(path: Path) -> bool:
    """Create ``path`` with owner-only permissions; True when it is new."""

    fresh = not path.exists()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except FileExistsError as exc:
        raise WorkspaceError(f"Not a directory: {path}") from exc
    try:
        path.chmod(0o700)
    except (PermissionError, NotImplementedError):
        pass
    return fresh
