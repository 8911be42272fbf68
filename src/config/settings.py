"""Environment configuration and validation.

This module defines strongly-typed application settings loaded from environment variables
(optionally via a local `.env` file). Settings are passed explicitly into the components that need
them; nothing reads the environment at request time.
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    telegram_bot_token: str = Field(alias="TELEGRAM_BOT_TOKEN")

    llm_api_key: str = Field(alias="LLM_API_KEY")
    llm_model: str = Field(default="gpt-3.5-turbo", alias="LLM_MODEL")
    llm_api_base: str = Field(default="https://api.openai.com/v1", alias="LLM_API_BASE")
    llm_timeout_s: float = Field(default=30.0, gt=0, alias="LLM_TIMEOUT_S")
    llm_temperature: float = Field(default=0.3, ge=0, le=2, alias="LLM_TEMPERATURE")

    extract_timeout_s: float | None = Field(default=None, alias="EXTRACT_TIMEOUT_S")

    @field_validator("extract_timeout_s")
    @classmethod
    def validate_extract_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("EXTRACT_TIMEOUT_S must be positive")
        return value

    @field_validator("llm_api_key")
    @classmethod
    def validate_llm_api_key(cls, value: str) -> str:
        """Reject blank API keys at startup instead of on the first request."""

        value = value.strip()
        if not value:
            raise ValueError("LLM_API_KEY must not be empty")
        return value


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Raises:
        RuntimeError: If the environment configuration is missing or invalid.
    """

    try:
        return Settings()
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc
