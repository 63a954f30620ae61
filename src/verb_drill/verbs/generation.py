"""Topic-driven verb generation through the OpenAI chat completions API.

The request pins the response to a strict JSON schema and the decoder fails
closed: one malformed element rejects the whole batch with
:class:`GenerationFailure`. Missing credentials surface as
:class:`~verb_drill.core.ai.ConfigurationFailure` before any request is made.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Mapping

from openai import AuthenticationError

from ..core.ai import ConfigurationFailure, load_client
from .ids import IdAllocator, generate_verb_id
from .models import GENERATED_FIELDS, VerbRecord, VerbRecordError

__all__ = [
    "DEFAULT_COUNT",
    "GenerationClient",
    "GenerationFailure",
    "build_prompts",
    "decode_verb_batch",
    "response_format",
]

DEFAULT_COUNT = 5

_LOGGER = logging.getLogger(__name__)
_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)

_SYSTEM_PROMPT = (
    "You are an English teacher who writes accurate verb conjugation tables "
    "for language learners."
)


class GenerationFailure(RuntimeError):
    """Raised when the backend call fails or returns an unusable payload."""


def response_format() -> dict[str, Any]:
    """Return the structured-output constraint sent with every request."""

    item_schema = {
        "type": "object",
        "properties": {
            "base": {"type": "string"},
            "past": {"type": "string"},
            "participle": {"type": "string"},
            "meaning": {"type": "string"},
            "example": {"type": "string"},
            "isIrregular": {"type": "boolean"},
        },
        "required": list(GENERATED_FIELDS),
        "additionalProperties": False,
    }
    return {
        "type": "json_schema",
        "json_schema": {
            "name": "verb_batch",
            "strict": True,
            "schema": {
                "type": "object",
                "properties": {
                    "verbs": {"type": "array", "items": item_schema},
                },
                "required": ["verbs"],
                "additionalProperties": False,
            },
        },
    }


def build_prompts(
    topic: str, count: int, *, meaning_language: str
) -> tuple[str, str]:
    user_prompt = (
        f'Generate {count} English verbs related to the topic "{topic}". '
        "Mix regular and irregular verbs.\n"
        "For each verb give: base (infinitive), past (past simple), "
        "participle (past participle), "
        f"meaning (a short {meaning_language} translation), "
        "example (one natural English sentence using the verb), and "
        "isIrregular (true when the past forms do not follow the -ed rule).\n"
        'Return a JSON object of the form {"verbs": [...]}.'
    )
    return _SYSTEM_PROMPT, user_prompt


def decode_verb_batch(content: str | None) -> list[VerbRecord]:
    """Parse a backend payload into id-less records, rejecting any defect."""

    text = (content or "").strip()
    if not text:
        raise GenerationFailure("Empty response from the generation backend.")
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise GenerationFailure(
            f"Generation response is not valid JSON: {exc.msg}."
        ) from exc

    if isinstance(data, Mapping):
        if set(data.keys()) != {"verbs"}:
            raise GenerationFailure(
                "Generation response object must only contain 'verbs'."
            )
        data = data["verbs"]
    if not isinstance(data, list):
        raise GenerationFailure("Generation response is not a list of verbs.")

    records: list[VerbRecord] = []
    for index, item in enumerate(data):
        try:
            records.append(VerbRecord.from_dict(item, require_id=False))
        except VerbRecordError as exc:
            raise GenerationFailure(
                f"Generated verb #{index + 1} is invalid: {exc}"
            ) from exc
    return records


class GenerationClient:
    """Request new verb entries for a topic from the generation backend."""

    def __init__(
        self,
        client: Any = None,
        *,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 1500,
        meaning_language: str = "Korean",
        id_allocator: IdAllocator = generate_verb_id,
        client_factory: Callable[[], Any] = load_client,
    ) -> None:
        self._client = client
        self._client_factory = client_factory
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.meaning_language = meaning_language
        self._allocate_id = id_allocator

    def generate(
        self, topic: str, count: int = DEFAULT_COUNT
    ) -> list[VerbRecord]:
        if not isinstance(topic, str) or not topic.strip():
            raise ValueError("topic must be a non-empty string")
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ValueError("count must be a positive integer")

        client = self._resolve_client()
        topic = topic.strip()
        system_prompt, user_prompt = build_prompts(
            topic, count, meaning_language=self.meaning_language
        )
        _LOGGER.info(
            "Requesting generated verbs",
            extra={"topic": topic, "count": count, "model": self.model},
        )
        content = self._request(client, system_prompt, user_prompt)
        records = [
            record.with_id(self._allocate_id())
            for record in decode_verb_batch(content)
        ]
        _LOGGER.info(
            "Received generated verbs",
            extra={"topic": topic, "received": len(records)},
        )
        return records

    def _resolve_client(self) -> Any:
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    def _request(
        self, client: Any, system_prompt: str, user_prompt: str
    ) -> str | None:
        try:
            resp = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format=response_format(),
            )
        except AuthenticationError as exc:
            raise ConfigurationFailure(
                "The generation backend rejected the configured API key."
            ) from exc
        except Exception as exc:
            _LOGGER.error(
                "Generation request failed",
                extra={"error": repr(exc)},
            )
            raise GenerationFailure(
                f"Generation request failed: {exc}"
            ) from exc

        try:
            message = resp.choices[0].message
        except (AttributeError, IndexError, TypeError) as exc:
            raise GenerationFailure(
                "Generation response had no choices."
            ) from exc
        refusal = getattr(message, "refusal", None)
        if refusal:
            raise GenerationFailure(f"Generation was refused: {refusal}")
        return getattr(message, "content", None)
