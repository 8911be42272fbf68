"""Logging configuration for the search bot.

At INFO the bot logs one line per request with counts and latency only. User prompts, model
replies and extraction details are logged at DEBUG.
"""

from __future__ import annotations

import logging
import os


def configure_logging(level: str | None = None) -> None:
    """Configure Python logging for the process (level from `LOG_LEVEL`, default INFO)."""

    log_level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    # aiogram logs every handled update at INFO; keep only its warnings.
    logging.getLogger("aiogram.event").setLevel(logging.WARNING)
