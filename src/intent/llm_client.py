"""LLM capability used by the intent extractor.

The extractor only depends on `LLMCapability.complete`. `ChatCompletionsClient` implements it on top
of an OpenAI-style `/v1/chat/completions` endpoint.
"""

from __future__ import annotations

import asyncio
import http.client
import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

logger = logging.getLogger(__name__)


class LLMClientError(RuntimeError):
    """Base class for LLM capability failures."""


class LLMTransportError(LLMClientError):
    """Raised when the provider cannot be reached (connection error, socket timeout)."""


class LLMProviderError(LLMClientError):
    """Raised when the provider explicitly rejects the request (quota, auth, bad request)."""


class LLMEmptyResponseError(LLMClientError):
    """Raised when the provider returns no result candidates."""


class LLMCapability(Protocol):
    """Given a system instruction and user text, return the model's reply text."""

    async def complete(self, system_instruction: str, user_text: str, temperature: float) -> str:
        ...


@dataclass(frozen=True)
class LLMConfig:
    """Configuration for the OpenAI-style Chat Completions API call."""

    api_key: str
    model: str = "gpt-3.5-turbo"
    api_base: str = "https://api.openai.com/v1"
    timeout_s: float = 30.0


def _chat_completions_url(api_base: str) -> str:
    return api_base.rstrip("/") + "/chat/completions"


def _error_message(decoded: Any) -> str | None:
    if not isinstance(decoded, dict):
        return None
    error = decoded.get("error")
    if not error:
        return None
    if isinstance(error, dict):
        return str(error.get("message") or "unknown provider error")
    return str(error)


def _http_error_message(exc: HTTPError) -> str:
    try:
        message = _error_message(json.loads(exc.read()))
    except (OSError, ValueError):
        message = None
    return f"LLM HTTP error {exc.code}: {message}" if message else f"LLM HTTP error {exc.code}"


def extract_reply_content(body: bytes) -> str:
    """Extract the first choice's message content from a Chat Completions response body."""

    try:
        decoded = json.loads(body)
    except (ValueError, RecursionError) as exc:
        raise LLMProviderError("Unexpected LLM response format") from exc

    message = _error_message(decoded)
    if message is not None:
        raise LLMProviderError(f"LLM API error: {message}")

    choices = decoded.get("choices") if isinstance(decoded, dict) else None
    if not choices:
        raise LLMEmptyResponseError("no response choices from LLM")

    try:
        content = choices[0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise LLMProviderError("Unexpected LLM response format") from exc

    # Some providers return `null` content for refusals; treat it as an empty reply string.
    if content is None:
        return ""
    if not isinstance(content, str):
        raise LLMProviderError("Unexpected LLM response format")
    return content


class ChatCompletionsClient:
    """Blocking Chat Completions client, exposed to asyncio callers via a worker thread."""

    def __init__(self, config: LLMConfig) -> None:
        self._config = config

    @property
    def config(self) -> LLMConfig:
        return self._config

    def build_request(self, system_instruction: str, user_text: str, temperature: float) -> Request:
        payload = {
            "model": self._config.model,
            "temperature": temperature,
            "messages": [
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": user_text},
            ],
        }
        body = json.dumps(payload).encode()
        logger.debug("llm request model=%s body=%s", self._config.model, body.decode())

        return Request(
            _chat_completions_url(self._config.api_base),
            method="POST",
            headers={
                "Authorization": f"Bearer {self._config.api_key}",
                "Content-Type": "application/json",
            },
            data=body,
        )

    def complete_sync(self, system_instruction: str, user_text: str, temperature: float) -> str:
        """Perform the HTTP call and return the reply content.

        Raises:
            LLMTransportError: Connection failures and socket timeouts.
            LLMProviderError: HTTP error statuses, `error` objects and unexpected bodies.
            LLMEmptyResponseError: A response with no choices.
        """

        req = self.build_request(system_instruction, user_text, temperature)
        try:
            with urlopen(req, timeout=self._config.timeout_s) as resp:  # noqa: S310 (fixed provider URL)
                body = resp.read()
        except HTTPError as exc:
            raise LLMProviderError(_http_error_message(exc)) from exc
        except URLError as exc:
            raise LLMTransportError(f"LLM connection error: {exc.reason}") from exc
        except http.client.HTTPException as exc:
            raise LLMTransportError(f"LLM connection error: {exc!r}") from exc
        except OSError as exc:
            raise LLMTransportError(f"LLM connection error: {exc}") from exc

        logger.debug("llm response body=%s", body.decode("utf-8", errors="replace"))
        return extract_reply_content(body)

    async def complete(self, system_instruction: str, user_text: str, temperature: float) -> str:
        return await asyncio.to_thread(self.complete_sync, system_instruction, user_text, temperature)
