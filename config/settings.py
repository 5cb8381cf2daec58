"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


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
    supabase_url: Optional[str] = Field(
        None,
        description="Supabase project URL"
    )
    supabase_key: Optional[str] = Field(
        None,
        description="Supabase anon/public key"
    )

    # ===================
    # RECORD STORE
    # ===================
    accounts_table: str = Field(
        default="shadows",
        description="Table holding account (source) records"
    )
    subjects_table: str = Field(
        default="users",
        description="Table holding subject (owner/target) records"
    )
    progress_table: str = Field(
        default="mapping_suggestion_runs",
        description="Table where suggestion run progress is persisted"
    )
    attribute_mapping_examples: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Maximum number of owned records sampled as examples"
    )

    # ===================
    # SUGGESTION SERVICE
    # ===================
    suggestion_service_url: Optional[str] = Field(
        None,
        description="Base URL of the mapping suggestion microservice (HTTP transport)"
    )
    suggestion_service_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        le=600,
        description="Timeout for one suggestion request"
    )
    anthropic_api_key: Optional[str] = Field(
        None,
        description="Anthropic API key (Claude transport, used when no service URL is set)"
    )
    suggestion_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Claude model used to suggest transformation scripts"
    )
    suggestion_max_tokens: int = Field(
        default=2048,
        ge=256,
        le=8192,
        description="Maximum tokens for a suggestion response"
    )
    no_transformation_sentinel: str = Field(
        default="input",
        min_length=1,
        description="Script text meaning 'no transformation needed'"
    )

    # ===================
    # PROGRESS
    # ===================
    persist_progress: bool = Field(
        default=True,
        description="Persist run progress to Supabase (otherwise log only)"
    )
    progress_memory_runs: int = Field(
        default=200,
        ge=1,
        description="Runs kept by the in-memory progress sink; oldest evicted first"
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

    @property
    def claude_configured(self) -> bool:
        """Check if the Claude transport can be used."""
        return bool(self.anthropic_api_key)


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
