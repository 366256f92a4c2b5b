"""
Application configuration using Pydantic Settings.

Environment-based infrastructure switching is controlled by the ENVIRONMENT variable.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./dayplanner.db"

    # ===========================================
    # Clock
    # ===========================================
    # IANA timezone for the user's wall clock (plan times are stored naive)
    TIMEZONE: str = "Europe/London"

    # ===========================================
    # Planning
    # ===========================================
    BUFFER_MINUTES: int = 5
    PLAN_START_ROUNDING_MINUTES: int = 5
    TASK_FETCH_LIMIT: int = 10
    BEHIND_SCHEDULE_GRACE_MINUTES: int = 30

    # Local exit-time calculator
    DEFAULT_TRAVEL_MINUTES: int = 20
    DEFAULT_PREPARATION_MINUTES: int = 10

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
