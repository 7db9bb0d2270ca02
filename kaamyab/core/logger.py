"""Logger configuration for the Kaamyab execution core.

Library modules only ever call ``from loguru import logger``; sinks are
installed by ``setup_logger`` (or ``setup_logger_from_settings``) from the
process entry point, never at import time.
"""

import sys
from pathlib import Path

from loguru import logger

from kaamyab.config.settings import Settings

# Structured context from logger.bind(...) and keyword extras lands in {extra}
CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level> {extra}"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message} {extra}"


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """Replace loguru's sinks with a console sink and an optional file sink.

    Args:
        level: Minimum level for both sinks
        log_file: Rotating log file path; parent directories are created
        rotation: When to rotate the file (e.g. "10 MB", "1 day")
        retention: How long rotated files are kept (e.g. "7 days")
    """
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format=FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

    logger.bind(log_file=log_file).info(f"Logger initialized with level={level}")


def setup_logger_from_settings(config: Settings) -> None:
    """Configure logging from LOG_LEVEL, LOG_FILE, LOG_ROTATION and LOG_RETENTION."""
    setup_logger(
        level=config.log_level,
        log_file=config.log_file,
        rotation=config.log_rotation,
        retention=config.log_retention,
    )
