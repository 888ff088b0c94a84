# opaquery/utils/log.py
"""
Logger setup for the command line.

The CLI builds one configured logger per invocation and hands it to the
pipeline; library code never reconfigures logging on its own.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

LOGGER_NAME = "opaquery"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_log_level(name: str) -> int:
    """
    Map a --log-level value to a logging level.

    Raises:
        ValueError: Unknown level name
    """
    try:
        return LOG_LEVELS[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"invalid log level: '{name}' (must be one of debug, info, warn, error)"
        ) from None


def setup_logger(level: str = "info", stream: Optional[IO[str]] = None) -> logging.Logger:
    """
    Return the "opaquery" logger writing to stderr (or stream) at level.

    Existing handlers are replaced so repeated calls (e.g. in tests) do not
    duplicate output.
    """
    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(parse_log_level(level))

    for handler in list(log.handlers):
        log.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    log.addHandler(handler)
    log.propagate = False
    return log


__all__ = [
    "LOGGER_NAME",
    "parse_log_level",
    "setup_logger",
]
