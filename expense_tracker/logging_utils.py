"""Mini README: Application-wide logging helpers for the expense tracker.

Structure:
    * get_logger - factory returning module loggers with baseline configuration.
    * configure_root_logger - adjusts the global logging level and handler.

Usage:
    Modules import ``get_logger`` and keep a module level ``LOGGER``. The
    root handler is installed exactly once so that reloading modules under
    the development server never duplicates log lines. Later calls to
    ``configure_root_logger`` only change the level, which lets the CLI and
    the web shell apply the configured ``log_level`` after import time.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

_LOGGER_INITIALISED = False


def _coerce_level(level: Union[int, str]) -> int:
    """Translate level names such as ``"debug"`` into logging constants."""

    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def configure_root_logger(level: Union[int, str] = logging.INFO) -> None:
    """Configure the root logger with a readable, timestamped formatter."""

    global _LOGGER_INITIALISED
    root_logger = logging.getLogger()
    root_logger.setLevel(_coerce_level(level))
    if _LOGGER_INITIALISED:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(handler)
    _LOGGER_INITIALISED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger, installing the root handler on first use."""

    if not _LOGGER_INITIALISED:
        configure_root_logger()
    return logging.getLogger(name)
