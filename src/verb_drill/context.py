"""Per-command runtime wiring: config, logging and the loaded verb store."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .config import ConfigOverrides, LoadResult, VerbDrillConfig, load_config
from .core.logging import configure_logger
from .core.workspace import WorkspaceLayout
from .verbs.storage import FileSlotStorage
from .verbs.store import VerbStore

LOGGER_NAME = "verb_drill"


@dataclass(frozen=True)
class AppContext:
    config: VerbDrillConfig
    layout: WorkspaceLayout
    store: VerbStore
    logger: logging.Logger
    log_path: Path


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help=(
            "Path to a TOML config file (defaults to the workspace config "
            "directory)."
        ),
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root (defaults to VERB_DRILL_DATA_HOME).",
    )
    parser.add_argument(
        "--log-level",
        help="Set the file logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Mirror log output to stderr.",
    )


def build_context(
    args: argparse.Namespace, *, env: Optional[Mapping[str, str]] = None
) -> AppContext:
    """Load config, configure logging and load the verb collection.

    Raises :class:`~verb_drill.config.VerbDrillConfigError` on bad config.
    """

    load_result: LoadResult = load_config(
        config_path=getattr(args, "config", None),
        overrides=ConfigOverrides(
            log_level=getattr(args, "log_level", None),
            verbose=getattr(args, "verbose", None),
        ),
        env=env,
        workspace_path=getattr(args, "workspace", None),
    )
    config = load_result.config
    logger, log_path = configure_logger(
        LOGGER_NAME,
        log_dir=load_result.layout.path_for("logs"),
        level=config.log_level,
        verbose=config.verbose,
    )
    store = VerbStore(FileSlotStorage(config.data_dir), key=config.slot_key)
    store.load()
    logger.debug(
        "Command context ready",
        extra={
            "config_path": load_result.config_path,
            "data_dir": config.data_dir,
            "verb_count": len(store),
        },
    )
    return AppContext(
        config=config,
        layout=load_result.layout,
        store=store,
        logger=logger,
        log_path=log_path,
    )
