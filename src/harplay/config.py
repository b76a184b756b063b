"""Configuration management with pydantic-settings."""

from enum import StrEnum
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(StrEnum):
    """Log renderer selection."""

    CONSOLE = "console"
    JSON = "json"


class HarplaySettings(BaseSettings):
    """harplay settings loaded from environment variables.

    All settings use the HARPLAY_ prefix for environment variables.
    """

    # Logging configuration
    log_level: str = Field(default="WARNING", description="Logging level")
    log_format: str = Field(
        default="console",
        description="Log output format: console or json",
    )

    # Replay configuration
    replay_timeout: float | None = Field(
        default=None,
        description="Replay timeout in seconds (unset: transport default)",
    )
    replay_follow_redirects: bool = Field(
        default=False,
        description="Follow redirects when replaying a request",
    )
    replay_verify_tls: bool = Field(
        default=True,
        description="Verify TLS certificates when replaying a request",
    )

    # Export / summary configuration
    export_dir: Path = Field(
        default_factory=Path.cwd,
        description="Directory exported entry documents are written to",
    )
    top_content_types: int = Field(
        default=5,
        description="Number of content types kept in summaries",
    )

    model_config = SettingsConfigDict(
        env_prefix="HARPLAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in {fmt.value for fmt in LogFormat}:
            raise ValueError(f"Unsupported log format: {value}. Supported: console, json")
        return value

    @field_validator("top_content_types")
    @classmethod
    def _check_top_content_types(cls, value: int) -> int:
        if value < 1:
            raise ValueError("top_content_types must be at least 1")
        return value


# Global settings instance
_settings: HarplaySettings | None = None


def get_settings() -> HarplaySettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = HarplaySettings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance (useful for testing)."""
    global _settings
    _settings = None
