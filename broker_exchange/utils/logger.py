"""Logging configuration for the Broker Exchange application."""

import logging
import sys

from .config import Config


def setup_logger(name, level=None):
    """Set up and return a logger with the specified name."""
    logger = logging.getLogger(name)
    logger.setLevel(level or Config.LOG_LEVEL)

    # Repeated calls must not stack console handlers
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level or Config.LOG_LEVEL)
        handler.setFormatter(logging.Formatter(Config.LOG_FORMAT))
        logger.addHandler(handler)

    return logger
