"""
Logging configuration shared by the bot, the API server and the storage layer.

Usage:
    from logging_config import logger           # application logger
    logger = logging.getLogger(__name__)        # per-module loggers also work
"""
from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers that only matter when debugging transport issues
_NOISY_LOGGERS = ("aiogram.event", "aiohttp.access", "httpx", "psycopg.pool")


def configure_logging(app_name: str = "cafebot", log_level: str | None = None) -> logging.Logger:
    """Configure the root handler once and return the application logger.

    Args:
        app_name: Name of the application logger
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR); defaults to LOG_LEVEL env

    Returns:
        Configured logger instance
    """
    level_name = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    app_logger = logging.getLogger(app_name)
    app_logger.setLevel(level)
    return app_logger


logger = configure_logging()
