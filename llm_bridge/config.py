"""Invocation configuration."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings, injected into each orchestrator."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    provider: str = Field(default="bedrock", alias="LLM_PROVIDER")
    # Falls back to the provider's catalog default when unset.
    default_model_id: str | None = Field(default=None, alias="LLM_DEFAULT_MODEL")
    max_tokens: int | None = Field(default=None, alias="LLM_MAX_TOKENS")
    temperature: float | None = Field(default=None, alias="LLM_TEMPERATURE")
    top_p: float | None = Field(default=None, alias="LLM_TOP_P")
    enable_token_tracking: bool = Field(default=True, alias="LLM_ENABLE_TOKEN_TRACKING")
    debug: bool = Field(default=False, alias="LLM_DEBUG")
    chat_size: int | None = Field(default=None, alias="LLM_CHAT_SIZE")
    max_attempts: int = Field(default=3, alias="LLM_MAX_ATTEMPTS")
    request_timeout_seconds: float = Field(default=30.0, alias="REQUEST_TIMEOUT_SECONDS")
    openrouter_api_key: str = Field(default="", alias="OPENROUTER_API_KEY")
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        alias="OPENROUTER_BASE_URL",
    )
    mistral_api_key: str = Field(default="", alias="MISTRAL_API_KEY")
    mistral_base_url: str = Field(default="https://api.mistral.ai/v1", alias="MISTRAL_BASE_URL")
    ollama_base_url: str = Field(default="http://localhost:11434", alias="OLLAMA_BASE_URL")


def load_settings() -> Settings:
    """Load and validate settings."""

    return Settings()


def configured_inference(settings: Settings) -> dict[str, float | int]:
    """Return the inference parameters explicitly set in configuration.

    Unset values are omitted so model-specific defaults show through.
    """
    values = {
        "max_tokens": settings.max_tokens,
        "temperature": settings.temperature,
        "top_p": settings.top_p,
    }
    return {key: value for key, value in values.items() if value is not None}
