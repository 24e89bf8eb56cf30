"""Logging setup for the study tracker."""
import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "study_tracker"


def setup_logging(
    log_level: str = "WARNING",
    log_file: Optional[str] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Configure the `study_tracker` logger.

    Console records go through rich so they share the CLI's console; a
    rotating file handler is added when `log_file` is given.
    """
    level = getattr(logging, log_level.upper(), logging.WARNING)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = RichHandler(console=console, show_path=False, markup=False)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(module)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(file_handler)

    return logger
