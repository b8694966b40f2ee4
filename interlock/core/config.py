"""Application configuration management using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MS_PER_HOUR = 60 * 60 * 1000
MS_PER_DAY = 24 * MS_PER_HOUR


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Every setting has a default so the service starts on a bare machine.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="interlock-wizard", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/staging/production)")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Server
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8080, description="Server port")

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins",
    )

    # Requests
    max_request_body_size: int = Field(default=262_144, gt=0, description="Maximum request body size in bytes")

    # Storage medium
    storage_backend: Literal["file", "memory"] = Field(
        default="file",
        description="Persistent medium for device-local records",
    )
    storage_path: str = Field(default=".interlock/storage.json", description="JSON file backing the file medium")
    storage_quota_chars: int = Field(
        default=5_000_000,
        gt=0,
        description="Maximum characters (keys + values) the medium will hold",
    )

    # Record lifetimes
    session_ttl_hours: int = Field(default=24, gt=0, description="Draft session lifetime, measured from creation")
    checkout_progress_ttl_hours: int = Field(default=24, gt=0, description="Checkout progress lifetime")
    consent_ttl_days: int = Field(default=365, gt=0, description="Cookie consent lifetime")

    # Recovery
    progress_debounce_ms: int = Field(default=1000, ge=0, description="Checkout progress write debounce window")
    exit_intent_threshold_px: int = Field(default=5, ge=0, description="Pointer-leave distance from the top edge")
    exit_intent_arm_delay_ms: int = Field(
        default=0,
        ge=0,
        description="Delay before a pointer-leave fires; 0 fires immediately",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def session_ttl_ms(self) -> int:
        return self.session_ttl_hours * MS_PER_HOUR

    @property
    def checkout_progress_ttl_ms(self) -> int:
        return self.checkout_progress_ttl_hours * MS_PER_HOUR

    @property
    def consent_ttl_ms(self) -> int:
        return self.consent_ttl_days * MS_PER_DAY


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings: Application settings instance.

    Note:
        Settings are cached using lru_cache for performance.
        Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
