"""``verb-drill init``: create the workspace tree and optionally a config."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from verb_drill import config as config_mod
from verb_drill.core import workspace as workspace_mod


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="verb-drill init",
        description="Create the verb-drill workspace directories.",
    )
    parser.add_argument(
        "--path",
        type=Path,
        help="Workspace root (default: $VERB_DRILL_DATA_HOME, ~/.verb-drill).",
    )
    parser.add_argument(
        "--with-config",
        action="store_true",
        help="Write a commented verb_drill.toml into config/.",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="With --with-config, replace an existing verb_drill.toml.",
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Print nothing on success."
    )
    return parser


def _summary(
    layout: workspace_mod.WorkspaceLayout, config_path: Optional[Path]
) -> str:
    def state(key: str) -> str:
        return "created" if layout.created.get(key) else "exists"

    out = [f"Workspace ready at {layout.home} ({state('home')})"]
    pairs = layout.items()
    if pairs:
        pad = max(len(name) for name, _ in pairs)
        out.append("Subdirectories:")
        out.extend(
            f"  {name:<{pad}}  {folder} ({state(name)})"
            for name, folder in pairs
        )
    if config_path is not None:
        out.append(f"Config template written to {config_path}")
    return "\n".join(out)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _parser()
    args = parser.parse_args(None if argv is None else list(argv))
    if args.force and not args.with_config:
        parser.error("--force requires --with-config")

    try:
        layout = workspace_mod.ensure_workspace(path=args.path)
    except workspace_mod.WorkspaceError as exc:
        print(exc, file=sys.stderr)
        return 1

    written: Optional[Path] = None
    if args.with_config:
        written = layout.path_for("config") / config_mod.CONFIG_FILENAME
        try:
            config_mod.write_template(written, overwrite=args.force)
        except config_mod.VerbDrillConfigError as exc:
            print(exc, file=sys.stderr)
            print("Use --force to overwrite it.", file=sys.stderr)
            return 1

    if not args.quiet:
        print(_summary(layout, written))
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
