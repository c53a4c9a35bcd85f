"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from form_scanner.constants import (
    DEFAULT_FETCH_MAX_REDIRECTS,
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    DEFAULT_GEMINI_API_BASE_URL,
    DEFAULT_GEMINI_MAX_OUTPUT_TOKENS,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_GEMINI_TEMPERATURE,
    DEFAULT_GEMINI_TIMEOUT_SECONDS,
    DEFAULT_GEMINI_TOP_K,
    DEFAULT_GEMINI_TOP_P,
    DEFAULT_INPUT_COST_PER_1K_TOKENS,
    DEFAULT_OUTPUT_COST_PER_1K_TOKENS,
    DEFAULT_PORT,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # Later files override earlier ones, so .env.local takes precedence
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Gemini Configuration
    gemini_api_key: str = Field(..., min_length=1, description="Google Gemini API key")
    gemini_model: str = Field(
        default=DEFAULT_GEMINI_MODEL,
        description="Gemini model name used for extraction and value generation",
    )
    gemini_api_base_url: str = Field(
        default=DEFAULT_GEMINI_API_BASE_URL,
        description="Base URL of the Generative Language API",
    )
    gemini_timeout_seconds: float = Field(
        default=DEFAULT_GEMINI_TIMEOUT_SECONDS,
        gt=0,
        description="Client-side timeout for a single generateContent call (seconds)",
    )
    gemini_temperature: float = Field(default=DEFAULT_GEMINI_TEMPERATURE, ge=0.0, le=2.0)
    gemini_top_p: float = Field(default=DEFAULT_GEMINI_TOP_P, ge=0.0, le=1.0)
    gemini_top_k: int = Field(default=DEFAULT_GEMINI_TOP_K, ge=1)
    gemini_max_output_tokens: int = Field(default=DEFAULT_GEMINI_MAX_OUTPUT_TOKENS, ge=1)

    # Pricing
    input_cost_per_1k_tokens: float = Field(
        default=DEFAULT_INPUT_COST_PER_1K_TOKENS,
        ge=0.0,
        description="USD per 1K prompt tokens",
    )
    output_cost_per_1k_tokens: float = Field(
        default=DEFAULT_OUTPUT_COST_PER_1K_TOKENS,
        ge=0.0,
        description="USD per 1K generated tokens",
    )

    # ==========================================================================
    # Page Fetching
    # ==========================================================================

    fetch_timeout_seconds: float = Field(
        default=DEFAULT_FETCH_TIMEOUT_SECONDS,
        gt=0,
        description="HTTP timeout for page and iframe fetches (seconds)",
    )
    fetch_max_redirects: int = Field(
        default=DEFAULT_FETCH_MAX_REDIRECTS,
        ge=0,
        description="Maximum redirects followed per fetch",
    )

    # Environment
    env: Literal["local", "staging", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Python logging level")
    port: int = Field(default=DEFAULT_PORT, description="Port for the uvicorn server")

    # Sentry Configuration
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN for error tracking (optional)"
    )
    sentry_traces_sample_rate: float = Field(
        default=1.0, description="Sentry traces sample rate (0.0 to 1.0)"
    )

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for observability"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
