"""Logging helpers for medianplots.

Pipeline modules only ask for a logger with ``get_logger(__name__)``; the
package installs a NullHandler, so nothing is printed until a script opts in
with ``configure_logging()``. Rendering a figure logs each pipeline step
(load, reshape, filter, build) at INFO and the details at DEBUG.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

LOGGER_NAME = "medianplots"
LOG_LEVEL_ENV = "MEDIANPLOTS_LOG_LEVEL"

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# handler added by configure_logging(); reused on later calls
_console: Optional[logging.Handler] = None


def _parse_level(level: Union[str, int, None]) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, int):
        return level
    # getLevelName maps a known name to its number, anything else to a string
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Union[str, int, None] = None) -> logging.Logger:
    """Print medianplots logs to stderr at the given level.

    The level defaults to ``$MEDIANPLOTS_LOG_LEVEL`` (or INFO); unknown level
    names fall back to INFO. Calling it again only changes the level. The
    root logger is never touched.

    Returns:
        The ``medianplots`` logger.
    """
    global _console
    numeric_level = _parse_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)
    if _console is None or _console not in logger.handlers:
        _console = logging.StreamHandler(sys.stderr)
        _console.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(_console)
    _console.setLevel(numeric_level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger for a medianplots module; the package logger when name is None."""
    return logging.getLogger(name or LOGGER_NAME)
