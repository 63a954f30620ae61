"""OpenAI client bootstrap."""

from __future__ import annotations

import os
from typing import Any, Mapping

from dotenv import find_dotenv, load_dotenv
from openai import OpenAI

__all__ = ["API_KEY_ENV", "ConfigurationFailure", "load_client"]

API_KEY_ENV = "OPENAI_API_KEY"


class ConfigurationFailure(RuntimeError):
    """Raised when the generation backend credential is missing or rejected."""


def load_client(env: Mapping[str, str] | None = None) -> Any:
    """Initialize an OpenAI client using environment-derived credentials.

    A ``.env`` file found from the working directory upwards is honoured
    through ``python-dotenv``; values already in the process environment
    take precedence. The check happens before any client is built so a
    missing key never reaches the network.
    """

    if env is None:
        load_dotenv(find_dotenv(usecwd=True))
        env = os.environ
    api_key = (env.get(API_KEY_ENV) or "").strip()
    if not api_key:
        raise ConfigurationFailure(
            f"{API_KEY_ENV} not found in environment. Set it or add it to "
            "a .env file."
        )
    return OpenAI(api_key=api_key)
