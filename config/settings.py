"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        default="http://localhost:54321",
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        default="",
        description="Supabase anon/public key"
    )

    # ===================
    # CALENDAR WINDOW
    # ===================
    calendar_days_back: int = Field(
        default=5,
        ge=0,
        le=60,
        description="Days shown before the pivot date"
    )
    calendar_days_forward: int = Field(
        default=10,
        ge=0,
        le=120,
        description="Days shown after the pivot date"
    )
    calendar_navigation_step_days: int = Field(
        default=7,
        ge=1,
        le=31,
        description="Days the pivot moves on forward/backward navigation"
    )

    # ===================
    # DATA FETCHING
    # ===================
    calendar_page_size: int = Field(
        default=10000,
        ge=1,
        le=10000,
        description="Page size for bulk calendar fetches"
    )
    status_page_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Page size for status lookup tables"
    )
    notification_history_size: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="How many user-facing messages are kept for display"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def supabase_configured(self) -> bool:
        """Check if Supabase credentials are present."""
        return bool(self.supabase_url and self.supabase_key)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
