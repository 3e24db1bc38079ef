"""Logging configuration for the sales tracker entry points.

Library modules only call ``logging.getLogger(__name__)``; entry points call
``configure_logging`` once to attach a single handler to the package logger.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO, Optional, Union

PACKAGE_LOGGER = "salesdesk"
LOG_LEVEL_ENV = "SALES_TRACKER_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_configured = False


def parse_level(level: Union[int, str, None]) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or "WARNING"
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = getattr(logging, name, None)
    if isinstance(numeric, int):
        return numeric
    raise ValueError(f"Unknown log level: {level}")


def configure_logging(
    level: Union[int, str, None] = None,
    *,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Attach one stream handler to the package logger; repeated calls only adjust the level."""
    global _configured
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(parse_level(level))
    if not _configured:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
        _configured = True
    return logger
