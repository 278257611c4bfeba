"""
Configuration management for EverQuest item resolution.

Loads settings from environment variables and config file, with sensible defaults.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EQ_ITEMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    wiki_base_url: str = Field(
        default="https://wiki.project1999.com",
        description="Base URL item and spell pages are fetched from",
    )
    wiki_timeout: float = Field(default=30.0, description="HTTP request timeout in seconds")
    database_path: Path = Field(
        default_factory=lambda: Path("data/items.db"),
        description="SQLite database holding items, statistics and effects",
    )
    cache_dir: Path = Field(
        default_factory=lambda: Path(".cache/eq_items"),
        description="Cache storage directory",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    persist_workers: int = Field(
        default=4, ge=1, description="Threads used for background persistence"
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    global _settings
    _settings = Settings()
    return _settings
