"""Deterministic search URL builder.

The builder converts a validated `SearchIntent` into a search-engine query URL. Clause order is
fixed; empty fields and empty list entries are skipped rather than rejected, so the builder never
raises.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import urlencode

from src.intent.schema import SearchIntent

SEARCH_BASE_URL = "https://www.google.com/search"


@dataclass(frozen=True)
class BuiltSearch:
    """A rendered search: the raw `q` text and the encoded URL carrying it."""

    query: str
    url: str


def _quoted(phrases: Iterable[str]) -> list[str]:
    return [f'"{p}"' for p in phrases if p]


def _negated(words: Iterable[str]) -> list[str]:
    return [f"-{w}" for w in words if w]


def _prefixed(operator: str, value: str) -> list[str]:
    return [f"{operator}:{value}"] if value else []


def build_query_clauses(intent: SearchIntent) -> list[str]:
    """Return the query clauses in their fixed order.

    Order: main query, exact phrases, `site:`, `filetype:`, excluded words, `after:`.
    """

    clauses: list[str] = []
    if intent.main_query:
        clauses.append(intent.main_query)
    clauses.extend(_quoted(intent.exact_phrases))
    clauses.extend(_prefixed("site", intent.site_filter))
    clauses.extend(_prefixed("filetype", intent.file_type))
    clauses.extend(_negated(intent.exclude_words))
    clauses.extend(_prefixed("after", intent.date_range))
    return clauses


def build_query_text(intent: SearchIntent) -> str:
    """Join the clauses with single spaces (the unencoded `q` value)."""

    return " ".join(build_query_clauses(intent))


def build_search(intent: SearchIntent, *, base_url: str = SEARCH_BASE_URL) -> BuiltSearch:
    query = build_query_text(intent)
    return BuiltSearch(query=query, url=f"{base_url}?{urlencode({'q': query})}")


def build_search_url(intent: SearchIntent) -> str:
    """Render the intent as a search URL with a single form-encoded `q` parameter.

    An intent with every field empty yields `<base>?q=`.
    """

    return build_search(intent).url
