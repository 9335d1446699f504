"""Logging setup for plandiff: one stderr handler on the ``plandiff`` logger."""

import logging
import sys
from typing import Optional

ROOT_LOGGER = "plandiff"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int = logging.INFO, format_string: Optional[str] = None) -> logging.Logger:
    """
    Attach a stderr handler to the ``plandiff`` logger.

    Calling it again only updates the level and format, so importing the
    package more than once never duplicates output. The root logger of the
    host application is left alone.

    Args:
        level: Logging level (default: INFO)
        format_string: Custom format string (optional)

    Returns:
        The ``plandiff`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handler = next((h for h in logger.handlers if getattr(h, "_plandiff", False)), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler._plandiff = True
        logger.addHandler(handler)
    handler.setFormatter(formatter)

    logger.setLevel(level)
    logger.propagate = False
    return logger


def set_level(level: int) -> None:
    """Change the level of every plandiff logger at once (e.g. WARNING for --quiet)."""
    logging.getLogger(ROOT_LOGGER).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
