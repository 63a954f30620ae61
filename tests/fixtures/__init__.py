"""Shared testing fixtures for the verb_drill test suite."""

from .openai import FakeOpenAIClient, FakeOpenAIFactory  # noqa: F401
from .quiz import make_provider  # noqa: F401
from .verbs import batch_json, make_verb, verb_payload  # noqa: F401

__all__ = [
    "FakeOpenAIClient",
    "FakeOpenAIFactory",
    "batch_json",
    "make_provider",
    "make_verb",
    "verb_payload",
]
