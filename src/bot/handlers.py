"""aiogram message handlers.

Contract: every incoming message produces exactly one reply. On success the reply is the rendered
search URL; on failure it is a short error line. Exceptions never escape the handler.
"""

from __future__ import annotations

import logging
from time import monotonic

from aiogram.types import Message

from src.app import App
from src.intent.extractor import ExtractionError
from src.search.builder import build_query_clauses
from src.search.pipeline import EmptyPromptError, handle

logger = logging.getLogger(__name__)

USAGE_REPLY = (
    "Describe what you are looking for, e.g. "
    "find PDF research papers about machine learning from arxiv published in the last year"
)
INTERNAL_ERROR_REPLY = "Error analyzing prompt: internal error"


def _is_command_text(text: str) -> bool:
    return text.lstrip().startswith("/")


async def handle_message(message: Message, app: App) -> None:
    """Handle any incoming Telegram message and reply with a search URL or an error line."""

    started = monotonic()
    raw_text = message.text or message.caption or ""

    if _is_command_text(raw_text):
        await message.answer(USAGE_REPLY)
        return

    # noinspection PyBroadException
    try:
        result = await handle(
            raw_text,
            extractor=app.extractor,
            timeout_s=app.settings.extract_timeout_s,
        )
        reply = result.url

        latency_ms = int((monotonic() - started) * 1000)
        logger.info(
            "handled clauses=%d url_len=%d latency_ms=%d",
            len(build_query_clauses(result.intent)),
            len(result.url),
            latency_ms,
        )
        logger.debug("handled main_query=%r", result.intent.main_query)
    except EmptyPromptError:
        reply = USAGE_REPLY
    except ExtractionError as exc:
        latency_ms = int((monotonic() - started) * 1000)
        logger.info("extraction failed kind=%s latency_ms=%d", exc.kind, latency_ms)
        logger.debug("extraction failed detail=%s", exc.detail)
        reply = f"Error analyzing prompt: {exc.detail}"
    except Exception:
        # Handler boundary: internal errors are logged, never leaked to the user.
        logger.exception("handler failed")
        reply = INTERNAL_ERROR_REPLY

    await message.answer(reply)
