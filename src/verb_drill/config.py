"""Configuration loader for verb-drill.

Precedence is CLI overrides > ``VERB_DRILL_*`` environment variables >
``verb_drill.toml`` > built-in defaults. The TOML file is optional unless a
path is requested explicitly.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

from .core import config as core_config
from .core import workspace as workspace_mod
from .quiz.selector import QuizMode
from .verbs.storage import SLOT_KEY_PATTERN
from .verbs.store import DEFAULT_SLOT_KEY

CONFIG_FILENAME = "verb_drill.toml"
CONFIG_ENV = "VERB_DRILL_CONFIG"
ENV_PREFIX = "VERB_DRILL_"

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

_DEFAULTS: dict[str, dict[str, Any]] = {
    "storage": {
        "data_dir": "",
        "slot_key": DEFAULT_SLOT_KEY,
    },
    "quiz": {
        "question_count": 10,
        "mode": QuizMode.MIX.value,
    },
    "generation": {
        "model": "gpt-4o-mini",
        "temperature": 0.7,
        "max_tokens": 1500,
        "default_count": 5,
        "meaning_language": "Korean",
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
    },
}


class VerbDrillConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class GenerationConfig:
    model: str
    temperature: float
    max_tokens: int
    default_count: int
    meaning_language: str


@dataclass(frozen=True)
class VerbDrillConfig:
    """Fully resolved configuration for one command run."""

    data_dir: Path
    slot_key: str
    question_count: int
    quiz_mode: QuizMode
    generation: GenerationConfig
    log_level: str
    verbose: bool


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    log_level: Optional[str] = None
    verbose: Optional[bool] = None


@dataclass(frozen=True)
class LoadResult:
    config: VerbDrillConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise VerbDrillConfigError(str(exc)) from exc

    requested = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=layout.path_for("config") / CONFIG_FILENAME,
    )
    tree = default_tree()
    loaded_path: Optional[Path] = None
    if requested.exists():
        try:
            core_config.merge_defaults(
                tree, core_config.load_toml(requested)
            )
        except core_config.TomlConfigError as exc:
            raise VerbDrillConfigError(str(exc)) from exc
        loaded_path = requested
    elif config_path is not None or _env_string(env_map, "CONFIG"):
        raise VerbDrillConfigError(f"Config file not found: {requested}")

    storage = tree["storage"]
    quiz = tree["quiz"]
    generation = tree["generation"]
    logging_section = tree["logging"]

    env_model = _env_string(env_map, "MODEL")
    if env_model is not None:
        generation["model"] = env_model

    log_level = _pick_first(
        overrides.log_level,
        _env_string(env_map, "LOG_LEVEL"),
        logging_section["level"],
    )
    verbose = _pick_first(overrides.verbose, logging_section["verbose"])

    config = VerbDrillConfig(
        data_dir=_resolve_data_dir(storage["data_dir"], layout),
        slot_key=_resolve_slot_key(storage["slot_key"]),
        question_count=_require_positive_int(
            quiz["question_count"], "quiz.question_count"
        ),
        quiz_mode=_resolve_mode(quiz["mode"]),
        generation=_build_generation(generation),
        log_level=_resolve_log_level(log_level),
        verbose=_require_bool(verbose, "logging.verbose"),
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def default_tree() -> dict[str, dict[str, Any]]:
    """Return a copy of the default configuration tree."""

    return copy.deepcopy(_DEFAULTS)


def config_template() -> str:
    """Return the packaged TOML template."""

    resource = resources.files("verb_drill").joinpath(CONFIG_FILENAME)
    return resource.read_text(encoding="utf-8")


def write_template(path: Path, *, overwrite: bool = False) -> Path:
    try:
        return core_config.write_toml_template(
            path, template=config_template(), overwrite=overwrite
        )
    except core_config.TomlConfigError as exc:
        raise VerbDrillConfigError(str(exc)) from exc


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = _env_string(env_map, "CONFIG")
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _resolve_data_dir(
    value: object, layout: workspace_mod.WorkspaceLayout
) -> Path:
    if value is None or (isinstance(value, str) and not value.strip()):
        return layout.path_for("data")
    if not isinstance(value, str):
        raise VerbDrillConfigError("storage.data_dir must be a string.")
    candidate = Path(value.strip()).expanduser()
    if not candidate.is_absolute():
        candidate = layout.home / candidate
    return candidate.resolve()


def _resolve_mode(value: object) -> QuizMode:
    if not isinstance(value, str):
        raise VerbDrillConfigError("quiz.mode must be a string.")
    try:
        return QuizMode.from_value(value)
    except ValueError as exc:
        raise VerbDrillConfigError(f"quiz.mode: {exc}") from exc


def _resolve_log_level(value: object) -> str:
    level = _require_string(value, "logging.level").upper()
    if level not in _LOG_LEVELS:
        raise VerbDrillConfigError(
            "logging.level must be one of "
            "DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )
    return level


def _build_generation(section: MutableMapping[str, Any]) -> GenerationConfig:
    temperature = section["temperature"]
    if isinstance(temperature, bool) or not isinstance(
        temperature, (int, float)
    ):
        raise VerbDrillConfigError("generation.temperature must be a number.")
    if not 0.0 <= float(temperature) <= 2.0:
        raise VerbDrillConfigError(
            "generation.temperature must be between 0.0 and 2.0."
        )
    return GenerationConfig(
        model=_require_string(section["model"], "generation.model"),
        temperature=float(temperature),
        max_tokens=_require_positive_int(
            section["max_tokens"], "generation.max_tokens"
        ),
        default_count=_require_positive_int(
            section["default_count"], "generation.default_count"
        ),
        meaning_language=_require_string(
            section["meaning_language"], "generation.meaning_language"
        ),
    )


def _require_positive_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise VerbDrillConfigError(f"'{field}' must be a positive integer.")
    return value


def _require_bool(value: Any, field: str) -> bool:
    if not isinstance(value, bool):
        raise VerbDrillConfigError(f"'{field}' must be a boolean.")
    return value


def _require_string(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise VerbDrillConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def _resolve_slot_key(value: Any) -> str:
    key = _require_string(value, "storage.slot_key")
    if not SLOT_KEY_PATTERN.fullmatch(key):
        raise VerbDrillConfigError(
            "'storage.slot_key' must start with a letter or digit and use "
            f"only letters, digits, '.', '_' or '-' (got {key!r})."
        )
    return key


def _env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
