"""
Logging configuration using Loguru.

Modules log through ``from loguru import logger``; this module only decides
where the records go.
"""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from .settings import Settings

_VALID_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logger(settings: Settings) -> None:
    """
    Replace loguru's default sink with:
    - a colorized stderr sink at LOG_LEVEL
    - when LOG_DIR is set, app.log (everything) and error.log (ERROR+), rotated and compressed

    Safe to call more than once; each call starts from a clean set of sinks.
    """
    level = settings.log_level.upper() if settings.log_level else "INFO"
    if level not in _VALID_LEVELS:
        level = "INFO"

    logger.remove()
    logger.add(
        sys.stderr,
        colorize=True,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
    )

    if not settings.log_dir:
        return

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_dir / "app.log",
        rotation="100 MB",
        retention="30 days",
        compression="zip",
        format=_FILE_FORMAT,
        level="DEBUG",
    )
    logger.add(
        log_dir / "error.log",
        rotation="100 MB",
        retention="30 days",
        compression="zip",
        format=_FILE_FORMAT,
        level="ERROR",
    )
