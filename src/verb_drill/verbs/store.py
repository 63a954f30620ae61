"""The verb collection: load, save and merge with base-form uniqueness.

``VerbStore`` is the only place the collection changes. Every record is keyed
by its casefolded base form and no two stored records share a key. A missing
or damaged snapshot never reaches the caller: ``load`` falls back to the seed
set and logs why.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol

from .ids import IdAllocator, generate_verb_id
from .models import VerbRecord, VerbRecordError, normalize_form
from .seed import seed_verbs
from .storage import SlotStorageError

__all__ = [
    "DEFAULT_SLOT_KEY",
    "MergeResult",
    "SlotStorage",
    "VerbStore",
]

DEFAULT_SLOT_KEY = "verb-drill-verbs"

_LOGGER = logging.getLogger(__name__)


class SlotStorage(Protocol):
    def read(self, key: str) -> str | None: ...

    def write(self, key: str, text: str) -> object: ...


@dataclass(frozen=True)
class MergeResult:
    """Outcome of :meth:`VerbStore.merge`."""

    accepted: tuple[VerbRecord, ...]
    rejected_count: int

    @property
    def added_any(self) -> bool:
        return bool(self.accepted)


class _SnapshotError(ValueError):
    pass


class VerbStore:
    """Ordered, deduplicated verb collection bound to one storage slot."""

    def __init__(
        self,
        storage: SlotStorage,
        *,
        key: str = DEFAULT_SLOT_KEY,
        id_allocator: IdAllocator = generate_verb_id,
    ) -> None:
        self._storage = storage
        self._key = key
        self._allocate_id = id_allocator
        self._records: list[VerbRecord] = list(seed_verbs())

    @property
    def key(self) -> str:
        return self._key

    @property
    def records(self) -> tuple[VerbRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[VerbRecord]:
        return iter(tuple(self._records))

    def load(self) -> tuple[VerbRecord, ...]:
        """Replace the in-memory collection with the persisted snapshot."""

        try:
            raw = self._storage.read(self._key)
        except SlotStorageError as exc:
            return self._recover(f"unreadable slot: {exc}")
        if raw is None:
            _LOGGER.info(
                "No saved verb collection; using seed set",
                extra={"slot": self._key},
            )
            self._records = list(seed_verbs())
            return self.records
        try:
            records = _decode_snapshot(raw)
        except _SnapshotError as exc:
            return self._recover(str(exc))
        self._records = records
        _LOGGER.debug(
            "Loaded verb collection",
            extra={"slot": self._key, "count": len(records)},
        )
        return self.records

    def save(self) -> None:
        """Write the full current collection to the slot."""

        payload = [record.to_dict() for record in self._records]
        self._storage.write(
            self._key, json.dumps(payload, ensure_ascii=False, indent=2)
        )
        _LOGGER.debug(
            "Saved verb collection",
            extra={"slot": self._key, "count": len(payload)},
        )

    def merge(self, candidates: Iterable[VerbRecord]) -> MergeResult:
        """Admit candidates whose base form is not stored yet.

        Accepted records are prepended newest-first (batch order kept) and the
        collection is saved once. Rejections are a normal outcome.
        """

        seen_keys = {record.key for record in self._records}
        used_ids = {record.id for record in self._records}
        accepted: list[VerbRecord] = []
        rejected = 0
        for candidate in candidates:
            if candidate.key in seen_keys:
                rejected += 1
                continue
            record = candidate
            if not record.id or record.id in used_ids:
                record = record.with_id(self._fresh_id(used_ids))
            seen_keys.add(record.key)
            used_ids.add(record.id)
            accepted.append(record)

        if accepted:
            self._records = accepted + self._records
            self.save()
        _LOGGER.info(
            "Merged generated verbs",
            extra={
                "accepted": [record.base for record in accepted],
                "rejected_count": rejected,
            },
        )
        return MergeResult(accepted=tuple(accepted), rejected_count=rejected)

    def reset(self) -> tuple[VerbRecord, ...]:
        """Restore the seed set and persist it."""

        self._records = list(seed_verbs())
        self.save()
        return self.records

    def find(self, base: str) -> VerbRecord | None:
        target = normalize_form(base)
        for record in self._records:
            if record.key == target:
                return record
        return None

    def search(self, text: str) -> list[VerbRecord]:
        """Match ``text`` against base forms (any case) and meanings."""

        needle = text.strip()
        if not needle:
            return list(self._records)
        folded = needle.casefold()
        return [
            record
            for record in self._records
            if folded in record.base.casefold() or needle in record.meaning
        ]

    def _fresh_id(self, used: set[str]) -> str:
        identifier = self._allocate_id()
        while not identifier or identifier in used:
            identifier = self._allocate_id()
        return identifier

    def _recover(self, reason: str) -> tuple[VerbRecord, ...]:
        _LOGGER.warning(
            "Verb collection snapshot unusable; falling back to seed set",
            extra={"slot": self._key, "reason": reason},
        )
        self._records = list(seed_verbs())
        return self.records


def _decode_snapshot(raw: str) -> list[VerbRecord]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise _SnapshotError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise _SnapshotError("snapshot root is not an array")

    records: list[VerbRecord] = []
    keys: set[str] = set()
    for index, item in enumerate(data):
        try:
            record = VerbRecord.from_dict(item)
        except VerbRecordError as exc:
            raise _SnapshotError(f"entry {index}: {exc}") from exc
        if not record.id:
            raise _SnapshotError(f"entry {index}: empty id")
        if record.key in keys:
            raise _SnapshotError(
                f"entry {index}: duplicate base form '{record.base}'"
            )
        keys.add(record.key)
        records.append(record)
    return records
