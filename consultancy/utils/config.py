"""
Configuration management for the consultancy auto-save service.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from consultancy.utils.constants import DEFAULT_DEBOUNCE_WINDOW_MS


class AutoSaveSettings(BaseSettings):
    """Debounced auto-save configuration for edit sessions."""

    model_config = SettingsConfigDict(env_prefix="AUTOSAVE_")

    # Quiet period before a pending edit is committed
    debounce_window_ms: int = DEFAULT_DEBOUNCE_WINDOW_MS

    # Master switch for the automatic path; manual saves always work
    enabled: bool = True

    @field_validator("debounce_window_ms")
    @classmethod
    def validate_debounce_window(cls, v: int) -> int:
        """Reject non-positive debounce windows."""
        if v <= 0:
            raise ValueError(f"debounce_window_ms must be > 0, got {v}")
        return v

    @property
    def debounce_window_seconds(self) -> float:
        """Debounce window converted for the event loop timer."""
        return self.debounce_window_ms / 1000.0


class DatabaseSettings(BaseSettings):
    """MongoDB database configuration for the draft store."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    host: str = "localhost"
    port: int = 27017
    name: str = "consultancy"
    username: str | None = None
    password: str | None = None
    drafts_collection: str = "drafts"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    # Per-user location; relative overrides resolve against the working directory
    file_path: Path = Field(
        default_factory=lambda: Path.home() / ".consultancy-autosave" / "logs" / "consultancy.log"
    )
    rotation: str = "10 MB"
    retention: str = "30 days"
    console_output: bool = True
    file_output: bool = True


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    name: str = "Consultancy Auto-Save"
    version: str = "0.1.0"
    description: str = "Debounced auto-persistence for consultancy record editing"
    debug: bool = False

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Nested settings
    autosave: AutoSaveSettings = Field(default_factory=AutoSaveSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Global settings instance (singleton pattern)
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Force reload settings from environment."""
    global _settings
    _settings = AppSettings()
    return _settings
