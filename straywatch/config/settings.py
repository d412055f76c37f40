"""
Application settings loaded from environment variables.

Uses Pydantic Settings for validation and type coercion.
Never log or expose sensitive values.
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "StrayWatch"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Supabase backend
    supabase_url: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_URL", "PUBLIC_SUPABASE_URL"),
        description="Base URL of the Supabase project",
    )
    supabase_anon_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("SUPABASE_ANON_KEY", "PUBLIC_SUPABASE_ANON_KEY"),
        description="Public anon API key of the Supabase project",
    )
    reports_table: str = "reports"

    @field_validator("supabase_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str:
        """Normalize the project URL so paths can be appended safely."""
        return (v or "").strip().rstrip("/")

    # Backend requests
    request_timeout_seconds: float = 10.0
    request_max_retries: int = Field(default=2, ge=0)
    request_backoff_seconds: float = Field(default=0.5, ge=0)

    # Client behaviour
    reports_stale_seconds: float = 30.0
    reports_query_retries: int = 1
    toast_duration_seconds: float = 5.0
    strict_count_validation: bool = True
    min_password_length: int = 6

    @property
    def is_backend_configured(self) -> bool:
        """Both the project URL and the anon key are required."""
        return bool(self.supabase_url and self.supabase_anon_key.get_secret_value())

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings instance loaded from environment variables.
    """
    return Settings()
