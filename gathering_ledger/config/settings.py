"""
Configuration Management for Gathering Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The ledger itself has no required configuration - every setting has a
default so the store works out of the box with a local JSON file.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Persistence store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GATHERINGS_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: str = Field(
        default="json",
        pattern="^(json|memory)$",
        description="Storage backend: 'json' file or in-process 'memory'"
    )
    data_path: Path = Field(
        default=Path("gatherings.json"),
        description="Path to the JSON file holding the store"
    )
    store_key: str = Field(
        default="gatheringsDB_v2",
        min_length=1,
        description="Namespaced key the store is saved under"
    )
    strict: bool = Field(
        default=False,
        description="Raise on storage I/O failures instead of degrading"
    )


class LedgerSettings(BaseSettings):
    """
    Main ledger settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="GATHERINGS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    log_level: str = Field(
        default="INFO",
        description="Minimum log level for ledger events"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (False: human-readable console output)"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {allowed}")
        return v.upper()


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
