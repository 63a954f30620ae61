"""Verb record data structures and their JSON mapping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, MutableMapping

__all__ = [
    "FORM_FIELDS",
    "GENERATED_FIELDS",
    "VerbRecord",
    "VerbRecordError",
    "normalize_form",
]

FORM_FIELDS: tuple[str, ...] = ("base", "past", "participle")

# Fields a generated entry must carry; ``id`` is always assigned locally.
GENERATED_FIELDS: tuple[str, ...] = (
    "base",
    "past",
    "participle",
    "meaning",
    "example",
    "isIrregular",
)


class VerbRecordError(ValueError):
    """Raised when a payload cannot be turned into a :class:`VerbRecord`."""


def normalize_form(text: str) -> str:
    """Return the comparison key for a verb form (trimmed, casefolded)."""

    return text.strip().casefold()


@dataclass(frozen=True)
class VerbRecord:
    """One conjugation entry. Replace rather than edit."""

    id: str
    base: str
    past: str
    participle: str
    meaning: str
    example: str
    is_irregular: bool

    def __post_init__(self) -> None:
        for name in FORM_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise VerbRecordError(
                    f"'{name}' must be a non-empty string."
                )

    @property
    def key(self) -> str:
        return normalize_form(self.base)

    def matches_past(self, text: str) -> bool:
        return normalize_form(text) == normalize_form(self.past)

    def matches_participle(self, text: str) -> bool:
        return normalize_form(text) == normalize_form(self.participle)

    def with_id(self, identifier: str) -> "VerbRecord":
        return VerbRecord(
            id=identifier,
            base=self.base,
            past=self.past,
            participle=self.participle,
            meaning=self.meaning,
            example=self.example,
            is_irregular=self.is_irregular,
        )

    def to_dict(self) -> MutableMapping[str, Any]:
        return {
            "id": self.id,
            "base": self.base,
            "past": self.past,
            "participle": self.participle,
            "meaning": self.meaning,
            "example": self.example,
            "isIrregular": self.is_irregular,
        }

    @classmethod
    def from_dict(
        cls, payload: Mapping[str, Any], *, require_id: bool = True
    ) -> "VerbRecord":
        """Build a record from its JSON mapping, validating every field.

        With ``require_id=False`` a missing ``id`` becomes an empty string so
        the caller can allocate one.
        """

        if not isinstance(payload, Mapping):
            raise VerbRecordError(
                f"Verb entry must be an object, found "
                f"{type(payload).__name__}."
            )
        missing = [name for name in GENERATED_FIELDS if name not in payload]
        if require_id and "id" not in payload:
            missing.insert(0, "id")
        if missing:
            raise VerbRecordError(
                "Verb entry is missing field(s): {0}.".format(
                    ", ".join(missing)
                )
            )

        identifier = payload.get("id", "")
        if not isinstance(identifier, str):
            raise VerbRecordError("'id' must be a string.")
        forms = {name: _require_form(payload, name) for name in FORM_FIELDS}
        meaning = _require_text(payload, "meaning")
        example = _require_text(payload, "example")
        irregular = payload["isIrregular"]
        if not isinstance(irregular, bool):
            raise VerbRecordError("'isIrregular' must be a boolean.")

        return cls(
            id=identifier.strip(),
            base=forms["base"],
            past=forms["past"],
            participle=forms["participle"],
            meaning=meaning,
            example=example,
            is_irregular=irregular,
        )


def _require_text(payload: Mapping[str, Any], name: str) -> str:
    value = payload[name]
    if not isinstance(value, str):
        raise VerbRecordError(f"'{name}' must be a string.")
    return value.strip()


def _require_form(payload: Mapping[str, Any], name: str) -> str:
    value = _require_text(payload, name)
    if not value:
        raise VerbRecordError(f"'{name}' must be a non-empty string.")
    return value
