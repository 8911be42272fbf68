"""LLM-based search intent extractor.

The model is only allowed to produce **SearchIntent JSON**. Its reply is treated as untrusted text
and validated against the schema; any failure is terminal for the request and never retried.
"""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum
from functools import cache
from pathlib import Path

from src.intent.llm_client import (
    LLMCapability,
    LLMEmptyResponseError,
    LLMProviderError,
    LLMTransportError,
)
from src.intent.schema import SearchIntent, intent_from_json

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.3


class ExtractionErrorKind(StrEnum):
    """Why an extraction failed."""

    transport = "transport"
    provider_rejected = "provider_rejected"
    empty_response = "empty_response"
    malformed_intent = "malformed_intent"


class ExtractionError(RuntimeError):
    """Raised when a free-text request cannot be turned into a SearchIntent."""

    def __init__(self, kind: ExtractionErrorKind, detail: str, *, raw_content: str | None = None) -> None:
        super().__init__(f"{kind}: {detail}")
        self.kind = kind
        self.detail = detail
        self.raw_content = raw_content


@cache
def load_system_instruction() -> str:
    prompt_path = Path(__file__).resolve().parent / "prompt_search_intent_v1.md"
    return prompt_path.read_text(encoding="utf-8")


class IntentExtractor:
    """Turns free text into a validated SearchIntent with one LLM call."""

    def __init__(
            self,
            capability: LLMCapability,
            *,
            temperature: float = DEFAULT_TEMPERATURE,
            system_instruction: str | None = None,
    ) -> None:
        self._capability = capability
        self._temperature = temperature
        self._system_instruction = system_instruction or load_system_instruction()

    async def extract(
            self,
            free_text: str,
            *,
            timeout_s: float | None = None,
            cancel_event: asyncio.Event | None = None,
    ) -> SearchIntent:
        """Ask the model for search parameters and validate its reply.

        Args:
            free_text: Non-empty user request. Rejecting empty input is the caller's job.
            timeout_s: Optional deadline for the model call.
            cancel_event: Optional signal; setting it aborts the in-flight call.

        Raises:
            ExtractionError: With `kind` describing the failure. A malformed reply carries the
                raw model output in `raw_content`.
        """

        content = await self._complete(free_text, timeout_s=timeout_s, cancel_event=cancel_event)

        try:
            intent = intent_from_json(content)
        except ValueError as exc:
            raw_content = content if isinstance(content, str) else repr(content)
            logger.info("malformed intent reply chars=%d", len(raw_content))
            raise ExtractionError(
                ExtractionErrorKind.malformed_intent,
                f"error parsing intent JSON: {exc}",
                raw_content=raw_content,
            ) from exc

        return intent

    async def _complete(
            self,
            free_text: str,
            *,
            timeout_s: float | None,
            cancel_event: asyncio.Event | None,
    ) -> str:
        call = asyncio.ensure_future(
            self._capability.complete(self._system_instruction, free_text, self._temperature)
        )
        waiters: set[asyncio.Future[object]] = {call}
        cancel_waiter: asyncio.Future[object] | None = None
        if cancel_event is not None:
            cancel_waiter = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(waiters, timeout=timeout_s, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()
            if not call.done():
                call.cancel()

        if call not in done:
            reason = "canceled" if cancel_event is not None and cancel_event.is_set() else "timed out"
            logger.info("llm call aborted reason=%s", reason)
            raise ExtractionError(ExtractionErrorKind.transport, f"LLM call {reason}")

        try:
            return call.result()
        except LLMTransportError as exc:
            raise ExtractionError(ExtractionErrorKind.transport, str(exc)) from exc
        except LLMProviderError as exc:
            raise ExtractionError(ExtractionErrorKind.provider_rejected, str(exc)) from exc
        except LLMEmptyResponseError as exc:
            raise ExtractionError(ExtractionErrorKind.empty_response, str(exc)) from exc
