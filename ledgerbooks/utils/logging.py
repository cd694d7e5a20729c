"""
Logging utilities for Ledgerbooks Backend.

SECURITY RULES:
- NEVER log refresh tokens, access tokens, cookies, secrets or API keys
- NEVER log full request bodies
- Ids, user ids, amounts and high-level events are fine
"""

import logging
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Union[str, int] = "INFO") -> None:
    """Configure the root logger once for the whole application."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT)


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional level override; otherwise inherited from the root logger

    Usage:
        >>> from ledgerbooks.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Refresh token rotated")
    """
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger
