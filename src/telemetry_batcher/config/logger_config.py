"""Logger configuration for the telemetry batcher."""

import sys
from typing import Optional

from loguru import logger

from .settings import ReporterSettings, get_current_settings


def setup_logging(settings: Optional[ReporterSettings] = None) -> None:
    """Configure loguru for console and optional file output.

    Sets up:
    - Console output on stderr with colored output
    - File output with rotation and retention when ``log_file`` is set
    - Level taken from settings
    """
    settings = settings or get_current_settings()

    # Remove default loguru handler
    logger.remove()

    if settings.log_to_console:
        logger.add(
            sink=sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            level=settings.log_level,
            colorize=True,
        )

    if settings.log_file is not None:
        logger.add(
            sink=str(settings.log_file),
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level=settings.log_level,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            compression="gz",
            enqueue=True,  # Thread-safe logging
        )

        logger.info(f"File logging enabled: {settings.log_file}")
        logger.info(f"Log level: {settings.log_level}")
