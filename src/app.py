"""Application composition root.

This module wires together configuration, the LLM client and the intent extractor for the bot
runtime.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.config.settings import Settings
from src.intent.extractor import IntentExtractor
from src.intent.llm_client import ChatCompletionsClient, LLMConfig


@dataclass(frozen=True)
class App:
    """Shared application dependencies for handlers."""

    settings: Settings
    extractor: IntentExtractor


def create_app(settings: Settings) -> App:
    """Create the application container from validated settings."""

    client = ChatCompletionsClient(
        LLMConfig(
            api_key=settings.llm_api_key,
            model=settings.llm_model,
            api_base=settings.llm_api_base,
            timeout_s=settings.llm_timeout_s,
        )
    )
    extractor = IntentExtractor(client, temperature=settings.llm_temperature)
    return App(settings=settings, extractor=extractor)
