"""Configuration for moneymngr.

Settings are read from ``MONEYMNGR_*`` environment variables and an optional
``.env`` file. Command line options override them where both exist.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="MONEYMNGR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    db_path: Optional[str] = Field(
        default=None,
        description="SQLite database file (defaults to ~/.moneymngr/moneymngr.db)",
    )
    owner_id: str = Field(default="local", description="Owner of all records (single-user)")
    currency: str = Field(default="INR", description="Currency tag for new transactions")

    # Extraction oracle
    gemini_api_key: Optional[str] = Field(default=None, description="Gemini API key")
    gemini_model: str = Field(default="gemini-1.5-flash", description="Gemini model name")
    oracle_timeout_seconds: float = Field(default=20.0, gt=0)

    # Auto-commit countdown
    countdown_ticks: int = Field(default=3, ge=1)
    countdown_tick_seconds: float = Field(default=1.0, ge=0)

    log_level: str = Field(default="WARNING")
    log_json: bool = Field(default=False, description="Render log lines as JSON")


@lru_cache()
def get_settings() -> Settings:
    """Get application settings (cached).

    Call ``get_settings.cache_clear()`` to reload.
    """
    return Settings()
