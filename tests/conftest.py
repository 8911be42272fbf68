"""Pytest configuration and shared fakes.

The repository uses a flat `src/` layout. This conftest ensures tests can import from the `src.*`
namespace when running `pytest` without installing the package.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure `import src...` works when running pytest without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

REFERENCE_REPLY = (
    '{"main_query":"machine learning","exact_phrases":["research papers"],'
    '"site_filter":"arxiv.org","file_type":"pdf","exclude_words":["blog"],"date_range":"2024"}'
)


class FakeCapability:
    """In-memory `LLMCapability`: returns a canned reply or raises a canned error."""

    def __init__(self, reply: str = REFERENCE_REPLY, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, str, float]] = []

    async def complete(self, system_instruction: str, user_text: str, temperature: float) -> str:
        self.calls.append((system_instruction, user_text, temperature))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def reference_reply() -> str:
    return REFERENCE_REPLY


@pytest.fixture
def fake_capability() -> FakeCapability:
    return FakeCapability()
