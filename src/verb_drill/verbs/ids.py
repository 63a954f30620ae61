"""Identifier allocation for verb records."""

from __future__ import annotations

import uuid
from typing import Callable

# Any zero-argument callable returning a fresh, never-reused string id.
IdAllocator = Callable[[], str]


def generate_verb_id() -> str:
    return uuid.uuid4().hex
