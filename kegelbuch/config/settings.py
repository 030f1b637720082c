"""
Configuration Management for Kegelbuch

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see where data lives and how the app logs,
and ensures every setting is validated at startup.

Note: this is the *application* configuration (paths, logging).
The bowling fee schedule lives in the ledger itself (see models.ledger).
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local JSON storage configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="KEGELBUCH_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the JSON files"
    )
    
    # One file per store (full overwrite on every save)
    configuration_file: str = Field(
        default="kegelbuch_config.json",
        description="File name for the fee schedule"
    )
    evenings_file: str = Field(
        default="kegelbuch_kegelabende.json",
        description="File name for the evening records"
    )
    saved_players_file: str = Field(
        default="kegelbuch_spieler.json",
        description="File name for the saved player names"
    )
    
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How often a failed write is retried before giving up"
    )
    
    @field_validator("configuration_file", "evenings_file", "saved_players_file")
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """File names must not point outside the data directory."""
        if not v or Path(v).name != v:
            raise ValueError(f"Invalid storage file name: {v!r}")
        return v


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="KEGELBUCH_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    level: str = Field(
        default="INFO",
        description="Log level name"
    )
    json_output: bool = Field(
        default=True,
        description="Render log lines as JSON (False = console renderer)"
    )
    
    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.strip().upper()
        if level not in allowed:
            raise ValueError(f"Unknown log level: {v}. Allowed: {sorted(allowed)}")
        return level


class AppSettings(BaseSettings):
    """
    Main application settings.
    
    Loads configuration from environment variables and .env file.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG level regardless of KEGELBUCH_LOG_LEVEL"
    )
    
    # Export
    export_prefix: str = Field(
        default="kegelbuch_export",
        min_length=1,
        description="Prefix of downloaded snapshot file names"
    )


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
    
    # Note: These are loaded lazily to allow partial configuration
    
    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()
    
    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()
    
    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    
    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.
    
    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the failing ones.
    Useful for startup checks.
    """
    results = {}
    
    settings = get_settings()
    
    for name in ("storage", "logging", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)
    
    return results
