"""Built-in verb set used on first run and when the snapshot is unusable."""

from __future__ import annotations

from .models import VerbRecord

# base, past, participle, meaning, example, irregular
_SEED_ROWS: tuple[tuple[str, str, str, str, str, bool], ...] = (
    ("go", "went", "gone", "가다", "She went to the market yesterday.", True),
    ("eat", "ate", "eaten", "먹다", "I have already eaten lunch.", True),
    ("see", "saw", "seen", "보다", "Have you seen my keys?", True),
    ("take", "took", "taken", "가져가다", "He took the last train.", True),
    ("write", "wrote", "written", "쓰다", "She has written a novel.", True),
    ("speak", "spoke", "spoken", "말하다", "They spoke about it.", True),
    ("begin", "began", "begun", "시작하다", "The show has begun.", True),
    ("drink", "drank", "drunk", "마시다", "He drank some water.", True),
    ("play", "played", "played", "놀다", "We played soccer.", False),
    ("work", "worked", "worked", "일하다", "I have worked here.", False),
)


def seed_verbs() -> tuple[VerbRecord, ...]:
    """Return fresh copies of the ten hand-authored seed records."""

    return tuple(
        VerbRecord(
            id=f"seed-{base}",
            base=base,
            past=past,
            participle=participle,
            meaning=meaning,
            example=example,
            is_irregular=irregular,
        )
        for base, past, participle, meaning, example, irregular in _SEED_ROWS
    )
