"""Logging setup shared by the storefront package."""
from __future__ import annotations

import logging
import os

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("storefront")


def setup_logging(level: str | int | None = None, fmt: str = DEFAULT_FORMAT) -> logging.Logger:
    """Configure the root handler once and set the storefront log level."""
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=fmt)
    logger.setLevel(level)
    return logger
