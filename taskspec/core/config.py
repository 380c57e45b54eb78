"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    taskspec_log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    taskspec_debug: bool = Field(
        default=False,
        description="Enable debug mode (forces DEBUG console logging)",
    )
    taskspec_log_file: str | None = Field(
        default=None,
        description="Optional log file path; rotated daily",
    )
    taskspec_default_output: str = Field(
        default="spec.md",
        description="Default output path for generated spec files",
    )
    taskspec_strict: bool = Field(
        default=False,
        description="Treat validation warnings as failures in the CLI",
    )

    @property
    def console_log_level(self) -> str:
        """Level used for the console sink."""
        return "DEBUG" if self.taskspec_debug else self.taskspec_log_level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance loaded from environment.

    Example:
        >>> settings = get_settings()
        >>> settings.taskspec_default_output
        'spec.md'
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
