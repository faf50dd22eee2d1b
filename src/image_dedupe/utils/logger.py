"""Logging configuration for image-dedupe.

Console output goes through Rich; the per-day log file keeps full DEBUG detail
of every run regardless of the console level.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str = "image_dedupe",
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Set up a logger with Rich console output and an optional log file.

    Args:
        name: Logger name
        level: Console logging level (default: INFO)
        log_file: Optional file path; always written at DEBUG level
        console: Rich console to log to (default: Rich's global console)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if log_file else level)
    logger.handlers.clear()

    console_handler = RichHandler(
        console=console,
        level=level,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def daily_log_file(log_dir: Path, day: Optional[date] = None) -> Path:
    """Return the per-day log file path (app-log-YYYY-MM-DD.log) inside log_dir."""
    day = day or date.today()
    return log_dir / f"app-log-{day.isoformat()}.log"
