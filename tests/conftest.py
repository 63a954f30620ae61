from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
# Make the test helpers and the src/ tree importable without an install.
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import FakeOpenAIFactory  # noqa: E402
from verb_drill.core import ai  # noqa: E402

_ISOLATED_ENV = (
    "VERB_DRILL_CONFIG",
    "VERB_DRILL_LOG_LEVEL",
    "VERB_DRILL_MODEL",
    "OPENAI_API_KEY",
)


@pytest.fixture(autouse=True)
def workspace_home(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Path]:
    """Point every test at its own workspace and a clean environment."""

    home = tmp_path / "workspace"
    monkeypatch.setenv("VERB_DRILL_DATA_HOME", str(home))
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the run.
    monkeypatch.chdir(tmp_path)
    yield home
    logger = logging.getLogger("verb_drill")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


@pytest.fixture
def openai_factory(monkeypatch: pytest.MonkeyPatch) -> FakeOpenAIFactory:
    """Replace the ``OpenAI`` constructor with a recording fake."""

    factory = FakeOpenAIFactory()
    monkeypatch.setattr(ai, "OpenAI", factory)
    return factory
