"""Read, overlay, and seed TOML config files."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Mapping, MutableMapping

__all__ = [
    "TomlConfigError",
    "load_toml",
    "merge_defaults",
    "write_toml_template",
]


class TomlConfigError(RuntimeError):
    """A TOML file could not be read, parsed, merged or written."""


def load_toml(path: Path) -> Mapping[str, Any]:
    if not path.is_file():
        raise TomlConfigError(f"Config file not found: {path}")
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Could not parse {path}: {exc}") from exc


def merge_defaults(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    """Overlay ``override`` onto ``base`` in place.

    Every key in ``override`` must already exist in ``base``; tables are
    merged key by key and scalars replace the default. ``path`` is the
    dotted prefix used in error messages.
    """

    for key, value in override.items():
        dotted = path + key
        if key not in base:
            raise TomlConfigError(f"Unknown configuration key '{dotted}'.")
        if not isinstance(base[key], MutableMapping):
            base[key] = value
        elif isinstance(value, Mapping):
            merge_defaults(base[key], value, path=dotted + ".")
        else:
            kind = type(value).__name__
            raise TomlConfigError(
                f"Expected table for '{dotted}', found {kind}."
            )


def write_toml_template(
    path: Path,
    *,
    template: str,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Write ``template`` to ``path``; an existing file needs ``overwrite``."""

    if path.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(template, encoding="utf-8")
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path
