"""Logging setup."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

STDERR_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[Path] = None,
    verbose: bool = False,
) -> Optional[int]:
    """
    Replace loguru's default sink with a stderr sink and an optional file sink.

    Returns the stderr sink id so the caller can remove it while the
    full-screen interface owns the terminal.
    """
    logger.remove()
    stderr_id = logger.add(
        sys.stderr,
        format=STDERR_FORMAT,
        level="DEBUG" if verbose else level.upper(),
    )

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Cannot create log directory {log_file.parent}: {e}")
        else:
            logger.add(
                log_file,
                rotation="1 day",
                retention="7 days",
                level="DEBUG",
                enqueue=True,
            )

    return stderr_id
