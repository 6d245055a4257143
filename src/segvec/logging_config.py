# Copyright (c) 2025.
# This file is part of SegVec-JIT, released under the MIT License.
"""
Logging configuration for the ``segvec`` logger namespace.

Library modules only create module-level loggers and log at DEBUG
(reallocations, capacity failures, structure mismatches). Nothing is
printed until an application, benchmark or test session calls
:func:`setup_logging`.

Level resolution
----------------
1. ``level`` argument (int or name such as ``"debug"``)
2. ``SEGVEC_LOG_LEVEL`` environment variable
3. ``WARNING``
"""

import logging
import os
import sys
from typing import Optional, Union

LOGGER_NAME = "segvec"
LEVEL_ENV_VAR = "SEGVEC_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s:%(funcName)s - %(message)s"


def resolve_level(level: Union[int, str, None] = None) -> int:
    """Turn an int, a level name, or nothing (environment/default) into a level."""
    if level is None:
        level = os.environ.get(LEVEL_ENV_VAR, "WARNING")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown logging level '{level}'")
    return resolved


def setup_logging(
    level: Union[int, str, None] = None,
    log_file: Optional[str] = None,
    fmt: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """
    Configure the 'segvec' logger and return it.

    Args:
        level: Logging level; see the module docstring for defaults.
        log_file: Optional path to also write logs to (overwritten).
        fmt: Record format shared by all handlers.
    """
    level = resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Only drop handlers we own, so calling twice does not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt, datefmt="%H:%M:%S")
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging initialized at %s.", logging.getLevelName(level))
    return logger
