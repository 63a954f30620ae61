"""JSON-lines file logging for the ``verb_drill`` logger tree."""

from __future__ import annotations

import json
import logging
import sys
import tempfile
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

__all__ = [
    "JsonLogFormatter",
    "configure_logger",
]

_FILE_MARKER = "_verb_drill_file"
_CONSOLE_MARKER = "_verb_drill_console"
_FALLBACK_DIRNAME = "verb-drill-logs"

_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record; ``extra=`` fields land under ``extra``."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": stamp.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = {
            key: _jsonable(value)
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS
        }
        if extra:
            entry["extra"] = extra
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack"] = record.stack_info
        return json.dumps(entry, ensure_ascii=False)


def configure_logger(
    name: str,
    *,
    log_dir: Path,
    level: str = "INFO",
    verbose: bool = False,
    max_bytes: int = 2 * 1024 * 1024,
    backup_count: int = 3,
    filename: str | None = None,
) -> tuple[logging.Logger, Path]:
    """Attach a rotating JSON file handler to ``name`` (stderr if verbose).

    Safe to call more than once: the file handler is kept while the target
    path is unchanged and the stderr handler is added or dropped to follow
    ``verbose``. Returns the logger and the resolved log file path.
    """

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    target = _writable_log_path(
        log_dir, filename or name.rpartition(".")[2] + ".log"
    )
    file_handler = _managed(logger, _FILE_MARKER)
    if file_handler is not None and _handler_path(file_handler) != target:
        _drop(logger, file_handler)
        file_handler = None
    if file_handler is None:
        file_handler = RotatingFileHandler(
            target,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(JsonLogFormatter())
        _attach(logger, file_handler, _FILE_MARKER)
    file_handler.setLevel(logging.DEBUG if verbose else _coerce_level(level))

    console = _managed(logger, _CONSOLE_MARKER)
    if verbose and console is None:
        console = logging.StreamHandler(stream=sys.stderr)
        console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        _attach(logger, console, _CONSOLE_MARKER)
    elif not verbose and console is not None:
        _drop(logger, console)
    if console is not None and verbose:
        console.setLevel(logging.DEBUG)

    return logger, target


def _coerce_level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def _managed(
    logger: logging.Logger, marker: str
) -> Optional[logging.Handler]:
    return next(
        (h for h in logger.handlers if getattr(h, marker, False)), None
    )


def _attach(
    logger: logging.Logger, handler: logging.Handler, marker: str
) -> None:
    setattr(handler, marker, True)
    logger.addHandler(handler)


def _drop(logger: logging.Logger, handler: logging.Handler) -> None:
    logger.removeHandler(handler)
    handler.close()


def _handler_path(handler: logging.Handler) -> Path:
    return Path(getattr(handler, "baseFilename", ""))


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(item) for item in value]
    return repr(value)


def _fallback_dir() -> Path:
    folder = Path(tempfile.gettempdir()) / _FALLBACK_DIRNAME
    folder.mkdir(parents=True, exist_ok=True)
    return folder


def _writable_log_path(log_dir: Path, filename: str) -> Path:
    """Return a touchable ``log_dir/filename``, else one in the temp dir."""

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        path = log_dir / filename
        path.touch(exist_ok=True)
    except PermissionError:
        path = _fallback_dir() / filename
        path.touch(exist_ok=True)
    try:
        path.chmod(0o600)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path
