"""Tests for the LLM intent extractor: reply validation, error kinds, and cancellation."""

from __future__ import annotations

import asyncio

import pytest

from conftest import FakeCapability
from src.intent.extractor import (
    DEFAULT_TEMPERATURE,
    ExtractionError,
    ExtractionErrorKind,
    IntentExtractor,
    load_system_instruction,
)
from src.intent.llm_client import LLMEmptyResponseError, LLMProviderError, LLMTransportError


class _HangingCapability:
    """Capability whose call never finishes unless cancelled."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.cancelled = False

    async def complete(self, system_instruction: str, user_text: str, temperature: float) -> str:
        self.started.set()
        try:
            await asyncio.sleep(3600)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return "{}"


def test_system_instruction_describes_all_fields() -> None:
    instruction = load_system_instruction()

    for key in ("main_query", "exact_phrases", "site_filter", "file_type", "exclude_words", "date_range"):
        assert f'"{key}"' in instruction
    assert "ONLY a JSON object" in instruction


@pytest.mark.asyncio
async def test_extract_sends_text_as_user_turn(fake_capability: FakeCapability) -> None:
    intent = await IntentExtractor(fake_capability).extract("pdf papers about ML on arxiv, no blogs")

    system_instruction, user_text, temperature = fake_capability.calls[0]
    assert len(fake_capability.calls) == 1
    assert system_instruction == load_system_instruction()
    assert user_text == "pdf papers about ML on arxiv, no blogs"
    assert temperature == DEFAULT_TEMPERATURE
    assert intent.main_query == "machine learning"
    assert intent.exclude_words == ["blog"]


@pytest.mark.asyncio
async def test_extract_uses_configured_temperature(fake_capability: FakeCapability) -> None:
    await IntentExtractor(fake_capability, temperature=0.0).extract("x")
    assert fake_capability.calls[0][2] == 0.0


@pytest.mark.asyncio
async def test_missing_exact_phrases_is_empty_list() -> None:
    capability = FakeCapability(reply='{"main_query": "go generics", "exclude_words": ["reddit"]}')

    intent = await IntentExtractor(capability).extract("go generics, not reddit")

    assert intent.exact_phrases == []
    assert intent.exclude_words == ["reddit"]


@pytest.mark.asyncio
async def test_prose_around_json_is_malformed() -> None:
    reply = 'Sure! Here you go: {"main_query": "x"}'
    capability = FakeCapability(reply=reply)

    with pytest.raises(ExtractionError) as exc_info:
        await IntentExtractor(capability).extract("x")

    assert exc_info.value.kind == ExtractionErrorKind.malformed_intent
    assert exc_info.value.raw_content == reply


@pytest.mark.asyncio
async def test_schema_mismatch_is_malformed() -> None:
    capability = FakeCapability(reply='{"main_query": "x", "exact_phrases": "not a list"}')

    with pytest.raises(ExtractionError) as exc_info:
        await IntentExtractor(capability).extract("x")

    assert exc_info.value.kind == ExtractionErrorKind.malformed_intent


@pytest.mark.parametrize(
    ("error", "kind"),
    [
        (LLMTransportError("LLM connection error: refused"), ExtractionErrorKind.transport),
        (LLMProviderError("LLM API error: quota exceeded"), ExtractionErrorKind.provider_rejected),
        (LLMEmptyResponseError("no response choices from LLM"), ExtractionErrorKind.empty_response),
    ],
)
@pytest.mark.asyncio
async def test_capability_errors_map_to_kinds(error: Exception, kind: ExtractionErrorKind) -> None:
    capability = FakeCapability(error=error)

    with pytest.raises(ExtractionError) as exc_info:
        await IntentExtractor(capability).extract("x")

    assert exc_info.value.kind == kind
    assert exc_info.value.detail == str(error)
    assert exc_info.value.__cause__ is error
    assert len(capability.calls) == 1


@pytest.mark.asyncio
async def test_cancel_event_aborts_in_flight_call() -> None:
    capability = _HangingCapability()
    cancel_event = asyncio.Event()
    extractor = IntentExtractor(capability)

    async def _cancel_when_started() -> None:
        await capability.started.wait()
        cancel_event.set()

    canceller = asyncio.create_task(_cancel_when_started())
    with pytest.raises(ExtractionError) as exc_info:
        await asyncio.wait_for(extractor.extract("x", cancel_event=cancel_event), timeout=2)
    await canceller
    await asyncio.sleep(0.01)

    assert exc_info.value.kind == ExtractionErrorKind.transport
    assert "canceled" in exc_info.value.detail
    assert capability.cancelled is True


@pytest.mark.asyncio
async def test_timeout_aborts_in_flight_call() -> None:
    capability = _HangingCapability()

    with pytest.raises(ExtractionError) as exc_info:
        await asyncio.wait_for(IntentExtractor(capability).extract("x", timeout_s=0.05), timeout=2)
    await asyncio.sleep(0.01)

    assert exc_info.value.kind == ExtractionErrorKind.transport
    assert "timed out" in exc_info.value.detail
    assert capability.cancelled is True


@pytest.mark.asyncio
async def test_unset_cancel_event_does_not_interfere(fake_capability: FakeCapability) -> None:
    intent = await IntentExtractor(fake_capability).extract("x", cancel_event=asyncio.Event(), timeout_s=5)
    assert intent.site_filter == "arxiv.org"


@pytest.mark.asyncio
async def test_non_text_reply_is_malformed() -> None:
    capability = FakeCapability(reply=[{"type": "text", "text": "{}"}])  # type: ignore[arg-type]

    with pytest.raises(ExtractionError) as exc_info:
        await IntentExtractor(capability).extract("x")

    assert exc_info.value.kind == ExtractionErrorKind.malformed_intent
    assert exc_info.value.raw_content == "[{'type': 'text', 'text': '{}'}]"


@pytest.mark.asyncio
async def test_deeply_nested_reply_is_malformed() -> None:
    reply = "[" * 100_000 + "]" * 100_000
    capability = FakeCapability(reply=reply)

    with pytest.raises(ExtractionError) as exc_info:
        await IntentExtractor(capability).extract("x")

    assert exc_info.value.kind == ExtractionErrorKind.malformed_intent
    assert exc_info.value.raw_content == reply
