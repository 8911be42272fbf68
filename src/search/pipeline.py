"""Search request pipeline: free text -> SearchIntent -> search URL.

This is the single operation the transport layer calls per inbound request.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from src.intent.extractor import IntentExtractor
from src.intent.schema import SearchIntent
from src.search.builder import build_search_url


class EmptyPromptError(ValueError):
    """Raised when the request text is empty or whitespace-only."""


@dataclass(frozen=True)
class SearchResult:
    """Rendered search URL plus the intent it was built from."""

    url: str
    intent: SearchIntent

    def to_payload(self) -> dict[str, Any]:
        return {"search_url": self.url, "intent": self.intent.model_dump()}


async def handle(
        free_text: str,
        *,
        extractor: IntentExtractor,
        timeout_s: float | None = None,
        cancel_event: asyncio.Event | None = None,
) -> SearchResult:
    """Extract an intent from `free_text` and render its search URL.

    Raises:
        EmptyPromptError: If `free_text` is blank.
        ExtractionError: If the model call or its reply fails; no URL is built in that case.
    """

    if not (free_text or "").strip():
        raise EmptyPromptError("prompt must not be empty")

    intent = await extractor.extract(free_text, timeout_s=timeout_s, cancel_event=cancel_event)
    return SearchResult(url=build_search_url(intent), intent=intent)
