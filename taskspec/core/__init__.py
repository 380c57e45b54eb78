"""Core module - configuration, logging and exceptions."""

from taskspec.core.config import Settings, clear_settings_cache, get_settings
from taskspec.core.exceptions import CircularDependencyError, SpecReadError, TaskSpecError
from taskspec.core.logging import configure_logging

__all__ = [
    "CircularDependencyError",
    "Settings",
    "SpecReadError",
    "TaskSpecError",
    "clear_settings_cache",
    "configure_logging",
    "get_settings",
]
