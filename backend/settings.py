"""
Centralized settings configuration using Pydantic BaseSettings.

Part of IRL-2: Settings for storage slots, catalog and progression defaults

All environment variables are defined here with types, defaults, and validation.
Use get_settings() for dependency injection compatibility in FastAPI.

Usage:
    from backend.settings import get_settings, Settings

    # In FastAPI endpoints (dependency injection)
    @app.get("/")
    def read_root(settings: Settings = Depends(get_settings)):
        return {"environment": settings.environment}

    # Direct access (module-level)
    settings = get_settings()
    print(settings.local_slot_key)
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production",
    )

    # -------------------------------------------------------------------------
    # Local cache slot
    # -------------------------------------------------------------------------
    local_store_path: str = Field(
        default=".ironlog/local_slots.json",
        description="JSON file holding this device's storage slots",
    )
    local_slot_key: str = Field(
        default="ironlog_data_v5",
        description="Slot key of the local state envelope",
    )
    identity_slot_key: str = Field(
        default="ironlog_auth_user",
        description="Slot key holding the signed-in user id (read only)",
    )

    # -------------------------------------------------------------------------
    # Remote mirror
    # -------------------------------------------------------------------------
    remote_backend: Literal["memory", "file", "supabase"] = Field(
        default="memory",
        description="Where the remote mirror lives",
    )
    remote_slot_prefix: str = Field(
        default="ironlog_remote_v1",
        description="Remote slot key prefix; the key is '<prefix>:<userId>'",
    )
    remote_store_path: str = Field(
        default=".ironlog/remote_slots.json",
        description="JSON file used when remote_backend is 'file'",
    )

    # -------------------------------------------------------------------------
    # Supabase Database
    # -------------------------------------------------------------------------
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL",
    )
    supabase_service_role_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key (full access)",
    )
    supabase_anon_key: Optional[str] = Field(
        default=None,
        description="Supabase anonymous key (limited access)",
    )
    state_table: str = Field(
        default="state_slots",
        description="Table holding remote state slots",
    )

    @property
    def supabase_key(self) -> Optional[str]:
        """Get the best available Supabase key (service role preferred)."""
        return self.supabase_service_role_key or self.supabase_anon_key

    # -------------------------------------------------------------------------
    # Exercise catalog
    # -------------------------------------------------------------------------
    catalog_path: Optional[str] = Field(
        default=None,
        description="Exercise catalog YAML; defaults to the bundled sample",
    )

    # -------------------------------------------------------------------------
    # Progression defaults
    # -------------------------------------------------------------------------
    default_progression_profile: Literal["strength", "hypertrophy", "recomposition"] = Field(
        default="hypertrophy",
        description="Progression preset used when the user has none",
    )
    history_weeks: int = Field(
        default=4,
        ge=2,
        le=6,
        description="Trailing history window fed to the progression engine",
    )
    default_target_sets: int = Field(
        default=3,
        ge=1,
        description="Compliance denominator for exercises without targetSets",
    )

    # -------------------------------------------------------------------------
    # Observability - Sentry
    # -------------------------------------------------------------------------
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN for error tracking",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    For testing, you can clear the cache with get_settings.cache_clear().

    Returns:
        Settings: Application settings instance
    """
    return Settings()
