"""Logging configuration for client-side sync events."""
import logging
from logging.handlers import RotatingFileHandler

from . import config

ROOT_LOGGER = "chat_sync"


def configure_logging(name: str = ROOT_LOGGER) -> logging.Logger:
    """Attach the rotating file handler to the package logger and return ``name``'s logger."""
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(logging.INFO)
    if not root.handlers:
        config.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(config.LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3)
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
    return logging.getLogger(name)
