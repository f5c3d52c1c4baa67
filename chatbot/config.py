"""Centralized application configuration using Pydantic Settings.

Loads configuration from environment variables and `.env` file with
full validation, type coercion, and sensible defaults.

Usage:
    from chatbot.config import get_settings

    settings = get_settings()  # cached singleton
    print(settings.OPENAI_MODEL)
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file.

    Required:
        OPENAI_API_KEY: Must be set — the app will refuse to start without it.

    All other fields have sensible defaults and are optional overrides.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Flask ──────────────────────────────────────────────────────────
    FLASK_ENV: str = Field(default="development", description="Flask environment (development/production)")
    FLASK_DEBUG: bool = Field(default=True, description="Enable Flask debug mode")
    SECRET_KEY: str = Field(default="change-me-in-production", description="Flask secret key")
    CORS_ORIGINS: str = Field(default="*", description="Allowed origins for /api/* (comma separated or '*')")

    # ── OpenAI Responses API ──────────────────────────────────────────
    OPENAI_API_KEY: str = Field(..., description="OpenAI API key (required)")
    OPENAI_BASE_URL: str = Field(default="https://api.openai.com/v1", description="OpenAI API base URL")
    OPENAI_MODEL: str = Field(default="gpt-5-nano", description="Model identifier")
    OPENAI_MAX_OUTPUT_TOKENS: int | None = Field(default=None, ge=1, description="Cap on generated tokens (unset = provider default)")

    # ── HTTP Client ───────────────────────────────────────────────────
    HTTP_TIMEOUT: int = Field(default=60, ge=1, le=600, description="Upstream request timeout (seconds)")
    HTTP_MAX_RETRIES: int = Field(default=2, ge=1, le=10, description="Attempts per upstream call")

    # ── Logging ───────────────────────────────────────────────────────
    LOG_LEVEL: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    LOG_FORMAT: str = Field(default="json", description="Log output format ('json' for prod, 'console' for dev)")

    # ── Chat ──────────────────────────────────────────────────────────
    PROMPT_MAX_LENGTH: int = Field(default=1000, ge=1, description="Max prompt length after trimming")
    CONVERSATION_TTL_SECONDS: int = Field(default=86400, ge=60, description="Idle time before a conversation pointer is dropped")
    CONVERSATION_MAX_ENTRIES: int = Field(default=10000, ge=1, description="Max conversations tracked in memory")

    # ── Validators ────────────────────────────────────────────────────

    @field_validator("OPENAI_API_KEY")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Ensure the API key is not empty or a placeholder."""
        v = v.strip()
        if not v or v in ("sk-xxxxx", "your-api-key-here"):
            raise ValueError(
                "OPENAI_API_KEY must be set to a valid API key. "
                "Get one at https://platform.openai.com/api-keys"
            )
        return v

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, v: str, info) -> str:
        """Refuse the default secret key in production."""
        env = info.data.get("FLASK_ENV", "development")
        if env == "production" and v == "change-me-in-production":
            raise ValueError("SECRET_KEY must be changed from the default in production.")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate log level."""
        v = v.upper().strip()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got '{v}'")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in ("json", "console"):
            raise ValueError("LOG_FORMAT must be 'json' or 'console'")
        return v

    @field_validator("OPENAI_BASE_URL")
    @classmethod
    def validate_urls(cls, v: str) -> str:
        """Ensure base URLs don't have trailing slashes."""
        return v.rstrip("/")

    @property
    def cors_origins(self) -> str | list[str]:
        """CORS origins in the shape flask-cors expects."""
        if self.CORS_ORIGINS.strip() == "*":
            return "*"
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance.

    Uses `lru_cache` so the `.env` file is only read once.
    """
    return Settings()
