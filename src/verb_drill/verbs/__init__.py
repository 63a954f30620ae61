"""Verb records, their persisted collection and AI-backed generation."""

from __future__ import annotations

from .generation import (
    DEFAULT_COUNT,
    GenerationClient,
    GenerationFailure,
    decode_verb_batch,
)
from .ids import IdAllocator, generate_verb_id
from .models import VerbRecord, VerbRecordError, normalize_form
from .seed import seed_verbs
from .storage import FileSlotStorage, SlotStorageError
from .store import DEFAULT_SLOT_KEY, MergeResult, VerbStore

__all__ = [
    "DEFAULT_COUNT",
    "GenerationClient",
    "GenerationFailure",
    "decode_verb_batch",
    "IdAllocator",
    "generate_verb_id",
    "VerbRecord",
    "VerbRecordError",
    "normalize_form",
    "seed_verbs",
    "FileSlotStorage",
    "SlotStorageError",
    "DEFAULT_SLOT_KEY",
    "MergeResult",
    "VerbStore",
]
