"""Loguru sink configuration."""

import sys

from loguru import logger

from taskspec.core.config import Settings, get_settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def configure_logging(settings: Settings | None = None) -> None:
    """Configure loguru based on settings.

    Replaces the default handler with a stderr sink so that rendered
    documents written to stdout stay clean, and adds a rotating file sink
    when ``taskspec_log_file`` is set.

    Args:
        settings: Optional settings override. Uses cached settings if not provided.
    """
    settings = settings or get_settings()

    logger.remove()  # Remove default handler

    logger.add(
        lambda msg: print(msg, end="", file=sys.stderr),
        level=settings.console_log_level,
        format=LOG_FORMAT,
        colorize=True,
    )

    if settings.taskspec_log_file:
        logger.add(
            settings.taskspec_log_file,
            rotation="1 day",
            retention="7 days",
            level=settings.taskspec_log_level,
            format=LOG_FORMAT,
        )

    logger.debug(f"Logging configured at {settings.console_log_level}")
