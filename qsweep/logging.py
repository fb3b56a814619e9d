"""Logging utilities for qsweep.

Every module logs through a cached ``qsweep.*`` logger that writes to
stderr, so simulation traces never mix with the probability table printed
on stdout. The initial level comes from ``QSWEEP_LOG_LEVEL`` (default
WARNING).
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO, Optional

_LOG_LEVEL_ENV_VAR = "QSWEEP_LOG_LEVEL"
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _parse_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return int(level)


_DEFAULT_LEVEL = _parse_level(os.getenv(_LOG_LEVEL_ENV_VAR, "WARNING"))
_DEFAULT_STREAM: Optional[IO[str]] = None
_DEFAULT_FORMATTER = logging.Formatter(_DEFAULT_FORMAT)

# Module-level logger cache
_loggers: dict[str, logging.Logger] = {}


def _make_handler(level: int) -> logging.Handler:
    # Resolve sys.stderr lazily so pytest's capture replacement is honored.
    stream = _DEFAULT_STREAM if _DEFAULT_STREAM is not None else sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(_DEFAULT_FORMATTER)
    return handler


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create a logger for the given module name.

    Loggers are cached so repeated calls never stack handlers. Names are
    placed under the ``qsweep`` namespace.

    Args:
        name: Logger name (typically ``__name__``). If None, returns the
            package logger.

    Returns:
        Configured logger instance.

    Example:
        >>> from qsweep.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("Applying H on (0,)")
    """
    if name is None:
        name = "qsweep"

    if name == "qsweep" or name.startswith("qsweep."):
        logger_name = name
    else:
        logger_name = f"qsweep.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        logger.addHandler(_make_handler(_DEFAULT_LEVEL))
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the logging level for all qsweep loggers.

    Args:
        level: Logging level (``logging.DEBUG`` etc.) or its name
            ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL').
    """
    global _DEFAULT_LEVEL
    level = _parse_level(level)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """Reconfigure level, format and output stream of every qsweep logger.

    Typically called once by the command line entry point.

    Args:
        level: Logging level (default: WARNING).
        format_string: Custom format string. If None, uses
            ``[LEVEL] name: message``.
        stream: Output stream (default: sys.stderr).
    """
    global _DEFAULT_LEVEL, _DEFAULT_STREAM, _DEFAULT_FORMATTER

    _DEFAULT_LEVEL = _parse_level(level)
    _DEFAULT_STREAM = stream
    _DEFAULT_FORMATTER = logging.Formatter(format_string or _DEFAULT_FORMAT)

    for logger in _loggers.values():
        logger.setLevel(_DEFAULT_LEVEL)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.addHandler(_make_handler(_DEFAULT_LEVEL))
