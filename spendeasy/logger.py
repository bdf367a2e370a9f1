"""Logging configuration for spendeasy.

Sets up logging to both file (with date-based naming) and console.
"""

import logging
from datetime import date
from pathlib import Path

from rich.logging import RichHandler

LOGGER_NAME = "spendeasy"


def setup_logging(level: str = "INFO", log_dir: Path | None = None) -> logging.Logger:
    """Set up application logging with file and console handlers.

    Args:
        level: Log level name (e.g., "INFO", "DEBUG").
        log_dir: Directory for log files. If None, logs only to the console.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Clear any existing handlers (in case this is called multiple times)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(show_path=False, markup=False)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)

        # File handler - logs to spendeasy-{date}.log
        file_handler = logging.FileHandler(log_dir / f"spendeasy-{date.today().isoformat()}.log")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    return logger


def get_logger() -> logging.Logger:
    """Get the application logger.

    Returns:
        The spendeasy logger instance.
    """
    return logging.getLogger(LOGGER_NAME)
