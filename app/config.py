# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 secret used to verify Supabase access tokens"
    )

    # -------------------------------------------------------------------------
    # OpenAI / Report Generation
    # -------------------------------------------------------------------------
    # Optional - report endpoints answer 503 when no key is configured

    OPENAI_API_KEY: str = Field(
        default="",
        description="OpenAI API key for AI reports"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="Model used to write reports"
    )

    REPORT_TEMPERATURE: float = Field(
        default=0.4,
        ge=0.0,
        le=2.0,
        description="OpenAI temperature for report writing"
    )

    REPORT_CACHE_TTL_SECONDS: int = Field(
        default=3600,
        ge=0,
        description="How long a generated report is served from cache"
    )

    # -------------------------------------------------------------------------
    # Business Rules
    # -------------------------------------------------------------------------

    COMMISSION_CLOSER_RATE: float = Field(
        default=0.10,
        ge=0.0,
        le=1.0,
        description="Share of each payment owed to the closer"
    )

    COMMISSION_FORMATEUR_RATE: float = Field(
        default=0.05,
        ge=0.0,
        le=1.0,
        description="Share of each payment owed to the trainer"
    )

    ACCOUNTING_STRICT_AMOUNT_EDIT: bool = Field(
        default=False,
        description=(
            "Reject amount edits with an invalid value or a missing entry "
            "instead of writing the raw value and skipping the recompute"
        )
    )

    DEFAULT_TRAINER_FEE: float = Field(
        default=350.0,
        ge=0.0,
        description="Trainer fee shown for sessions without an explicit amount"
    )

    TIMEZONE: str = Field(
        default="Europe/Paris",
        description="Timezone training sessions are scheduled in"
    )

    SESSION_START_HOUR: int = Field(default=9, ge=0, le=23)
    SESSION_END_HOUR: int = Field(default=17, ge=0, le=23)

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    SECRET_KEY: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Secret key for signing tokens"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://crm.example.com"
        -> ["http://localhost:3000", "https://crm.example.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def ai_enabled(self) -> bool:
        """True when an OpenAI key is configured."""
        return bool(self.OPENAI_API_KEY)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Parses .env and validates once, not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
