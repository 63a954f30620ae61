"""In-memory OpenAI client doubles shared across tests.

Production code only touches ``client.chat.completions.create``. The fake
mirrors that surface, records every request and returns queued content so
generation runs offline. Tests pass the fake directly or patch
``verb_drill.core.ai.OpenAI`` with a :class:`FakeOpenAIFactory`.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional


@dataclass
class Choice:
    """Represents a single completion choice returned by the fake."""

    content: Optional[str]
    refusal: Optional[str] = None

    @property
    def message(self) -> SimpleNamespace:
        return SimpleNamespace(content=self.content, refusal=self.refusal)


class FakeOpenAIClient:
    """Lightweight stand-in for the ``OpenAI`` chat completion client."""

    def __init__(
        self,
        *,
        side_effect: Optional[Callable[[Dict[str, Any]], Any]] = None,
    ) -> None:
        self.side_effect = side_effect
        self.calls: List[Dict[str, Any]] = []
        self.responses: List[Any] = []
        self._chat = SimpleNamespace(
            completions=SimpleNamespace(create=self._create_completion)
        )

    @property
    def chat(self) -> SimpleNamespace:
        return self._chat

    def queue_response(self, content: Optional[str]) -> None:
        """Append message content returned on the next call."""

        self.responses.append(Choice(content))

    def queue_refusal(self, reason: str) -> None:
        self.responses.append(Choice(None, refusal=reason))

    def _create_completion(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.side_effect:
            result = self.side_effect(kwargs)
            if result is not None:
                return result
        choice = self.responses.pop(0) if self.responses else Choice("")
        return SimpleNamespace(choices=[choice])


class FakeOpenAIFactory:
    """Callable patched in place of ``OpenAI`` that records its clients."""

    def __init__(self) -> None:
        self.instances: List[FakeOpenAIClient] = []
        self.pending: List[str] = []

    def __call__(self, *args: Any, **kwargs: Any) -> FakeOpenAIClient:
        client = FakeOpenAIClient()
        client.init_args = args  # type: ignore[attr-defined]
        client.init_kwargs = kwargs  # type: ignore[attr-defined]
        for content in self.pending:
            client.queue_response(content)
        self.pending.clear()
        self.instances.append(client)
        return client

    def queue_response(self, content: str) -> None:
        """Queue content for the next client the factory builds."""

        self.pending.append(content)

    @property
    def last(self) -> Optional[FakeOpenAIClient]:
        return self.instances[-1] if self.instances else None
