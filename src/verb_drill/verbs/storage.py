"""Named-slot persistence for the verb collection snapshot."""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path

__all__ = ["FileSlotStorage", "SLOT_KEY_PATTERN", "SlotStorageError"]

SLOT_KEY_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*")


class SlotStorageError(RuntimeError):
    """Raised when a slot cannot be read or written."""


class FileSlotStorage:
    """Store each slot as ``<root>/<key>.json``.

    Writes go through a temporary file in the same directory followed by
    ``os.replace`` so a slot always holds either the previous or the new
    snapshot.
    """

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str) -> Path:
        if not SLOT_KEY_PATTERN.fullmatch(key):
            raise SlotStorageError(f"Invalid slot key: {key!r}")
        return self._root / f"{key}.json"

    def read(self, key: str) -> str | None:
        """Return the slot text, or ``None`` if it was never written."""

        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SlotStorageError(f"Failed to read slot: {path}") from exc

    def write(self, key: str, text: str) -> Path:
        path = self.path_for(key)
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                delete=False,
                encoding="utf-8",
                dir=str(path.parent),
                suffix=".tmp",
            ) as handle:
                tmp_name = handle.name
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise SlotStorageError(f"Failed to write slot: {path}") from exc
        try:
            path.chmod(0o600)
        except PermissionError:  # pragma: no cover - depends on filesystem
            pass
        return path
