"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


MODULE_ID = "survival-needs"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SURVIVAL_NEEDS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///survival_needs.db"

    # ==========================================================================
    # Simulation
    # ==========================================================================
    # In-game hours per accrual interval. 4h = six updates per in-game day.
    update_interval_hours: float = Field(default=4.0, ge=0)
    # When False, NPC characters are left alone by time advance and init.
    affects_npcs: bool = False

    # Optional JSON overrides for the built-in tracker / consumption tables
    tracker_config_path: str | None = None
    consumption_config_path: str | None = None

    # ==========================================================================
    # Reconciliation scheduling
    # ==========================================================================
    # Trailing-edge debounce for reconciles triggered by outside writes
    reconcile_debounce_seconds: float = Field(default=0.25, ge=0)
    # Pause between characters during a batch time advance
    inter_character_delay_seconds: float = Field(default=0.0, ge=0)

    # Debug
    debug: bool = False

    @property
    def update_interval_seconds(self) -> float:
        """Length of one accrual interval in seconds."""
        return self.update_interval_hours * 3600


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience alias
settings = get_settings()
