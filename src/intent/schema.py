"""Search intent JSON schema (Pydantic model).

This schema is the contract between the LLM intent extractor and the deterministic search URL
builder. Model replies must validate against it; otherwise the request is rejected.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator


class SearchIntent(BaseModel):
    """Structured search parameters extracted from a free-text request.

    All six fields are always present after validation. Missing or `null` values collapse to the
    empty string (scalar fields) or the empty list (list fields). Unexpected keys are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    main_query: StrictStr = ""
    exact_phrases: list[StrictStr] = Field(default_factory=list)
    site_filter: StrictStr = ""
    file_type: StrictStr = ""
    exclude_words: list[StrictStr] = Field(default_factory=list)
    date_range: StrictStr = ""

    @field_validator("main_query", "site_filter", "file_type", "date_range", mode="before")
    @classmethod
    def null_to_empty_str(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("exact_phrases", "exclude_words", mode="before")
    @classmethod
    def null_to_empty_list(cls, value: Any) -> Any:
        """Normalize absent list fields to `[]` and reject anything that is not a JSON array."""

        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("must be a JSON array of strings")
        return value


def intent_from_obj(obj: Any) -> SearchIntent:
    """Validate and parse a SearchIntent from an arbitrary decoded JSON object."""

    if not isinstance(obj, dict):
        raise ValueError("search intent must be a JSON object")
    return SearchIntent.model_validate(obj)


def intent_from_json(text: str) -> SearchIntent:
    """Parse a model reply that must be exactly one JSON object.

    Only surrounding whitespace is tolerated; prose or code fences make the reply invalid.

    Raises:
        ValueError: If the text is not valid JSON or does not match the schema (pydantic's
            `ValidationError` and `json.JSONDecodeError` are both `ValueError` subclasses). Replies
            nested deeper than the recursion limit and non-text replies are reported the same way.
    """

    if not isinstance(text, str):
        raise ValueError(f"model reply must be text, got {type(text).__name__}")
    try:
        obj = json.loads(text.strip())
    except RecursionError as exc:
        raise ValueError("JSON nesting is too deep") from exc
    return intent_from_obj(obj)
