"""Utility functions for directory-minifier."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    verbose: bool = False,
) -> None:
    """
    Configure loguru sinks for the process.

    Args:
        level: Minimum level for the console sink
        log_file: Optional path of a rotating log file
        verbose: Force DEBUG output on the console
    """
    logger.remove()

    console_level = "DEBUG" if verbose else level.upper()
    logger.add(
        sys.stderr,
        level=console_level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
        colorize=True,
    )

    if log_file is not None:
        log_file = Path(log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level="DEBUG",
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )

    logger.debug(f"Logging configured (console={console_level}, file={log_file})")
