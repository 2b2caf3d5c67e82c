"""Logging configuration for lit.

The library logs through loguru's global ``logger`` and stays disabled until
``configure_logging`` is called, which the CLI does on startup.
"""

import os
import sys
from typing import Optional

from loguru import logger

from litvcs.constants import DEFAULT_LOG_LEVEL, LOG_FORMAT, LOG_LEVEL_ENV


def resolve_log_level(level: Optional[str] = None) -> str:
    """Pick the effective log level.

    Args:
        level: Explicit level, takes precedence when given

    Returns:
        Upper-case level name, from ``level``, then ``LIT_LOG_LEVEL``, then
        the default
    """
    chosen = level or os.getenv(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL
    return chosen.upper()


def configure_logging(level: Optional[str] = None) -> str:
    """Install a stderr sink for lit's log records.

    Args:
        level: Log level name (e.g. "DEBUG"); see ``resolve_log_level``

    Returns:
        The level that was configured
    """
    effective = resolve_log_level(level)
    logger.remove()
    logger.add(sys.stderr, level=effective, format=LOG_FORMAT)
    logger.enable("litvcs")
    return effective
