"""
Logging setup for the command-line interface.

Library modules only create module loggers (logging.getLogger(__name__));
handlers are installed here, by the CLI, never on import.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from insight_framework.core.constants import LOG_FORMAT, LOG_DATE_FORMAT

ROOT_LOGGER_NAME = "insight_framework"


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure console (stderr) and optional file logging.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path for a log file; parent dirs are created

    Returns:
        The package root logger
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(numeric_level)

    # Clear existing handlers to avoid duplicates on repeated CLI invocations
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode='a', encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.info(f"Log file: {log_path}")

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger below the package root logger."""
    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
