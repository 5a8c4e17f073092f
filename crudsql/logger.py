"""
Centralized logging configuration
All modules should use `logger` or `get_logger(__name__)` from here.
"""

import logging
import sys
from typing import Optional

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_ROOT_NAME = "crudsql"
_configured = False

logger = logging.getLogger(_ROOT_NAME)
logger.addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger under the package logger

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        logging.Logger: Child of the ``crudsql`` logger
    """
    if name == _ROOT_NAME or name.startswith(_ROOT_NAME + "."):
        return logging.getLogger(name)
    return logger.getChild(name)


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a stream handler to the package logger once

    Args:
        level: Log level name; defaults to the configured settings

    Returns:
        logging.Logger: The package logger
    """
    global _configured
    if level is None:
        from .config import Settings
        level = Settings.from_env().log_level

    logger.setLevel(level.upper())
    if _configured:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    logger.addHandler(handler)
    _configured = True
    return logger
