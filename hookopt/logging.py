"""Logging utilities for hookopt.

Every module obtains its logger through :func:`get_logger` so that all
optimisation output shares one handler layout and one level switch.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, TextIO

_ENV_VAR = "HOOKOPT_LOG_LEVEL"
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
_FORMAT = _DEFAULT_FORMAT


def _parse_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return int(level)


_DEFAULT_LEVEL = _parse_level(os.environ.get(_ENV_VAR, "WARNING"))
_DEFAULT_STREAM: Optional[TextIO] = None

# Module-level logger cache
_loggers: dict[str, logging.Logger] = {}


def _make_handler(level: int, stream: Optional[TextIO], fmt: str) -> logging.Handler:
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create a logger living under the ``hookopt`` namespace.

    Args:
        name: Logger name, typically ``__name__``. ``None`` returns the
            package logger itself.

    Returns:
        Cached, configured logger instance.

    Example:
        >>> from hookopt.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("k=%d residual=%.3e", 3, 1e-4)
    """
    if name is None or name == "hookopt":
        logger_name = "hookopt"
    elif name.startswith("hookopt."):
        logger_name = name
    else:
        logger_name = f"hookopt.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        logger.addHandler(_make_handler(_DEFAULT_LEVEL, _DEFAULT_STREAM, _FORMAT))
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the level of every hookopt logger, present and future.

    Args:
        level: ``logging`` constant or its name (``"DEBUG"``, ``"INFO"``, ...).
            The ``HOOKOPT_LOG_LEVEL`` environment variable sets the initial
            value.
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
    stream: Optional[TextIO] = None,
) -> None:
    """Replace the handlers of every hookopt logger.

    Args:
        level: Logging level (default: WARNING).
        format_string: Custom format string. ``None`` restores the default
            ``[LEVEL] name: message`` layout.
        stream: Output stream (default: ``sys.stderr``). Loggers created later
            write to the same stream.
    """
    global _DEFAULT_LEVEL, _DEFAULT_STREAM, _FORMAT
    level = _parse_level(level)
    _FORMAT = format_string if format_string is not None else _DEFAULT_FORMAT
    _DEFAULT_LEVEL = level
    _DEFAULT_STREAM = stream

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.addHandler(_make_handler(level, stream, _FORMAT))


__all__ = ["get_logger", "set_log_level", "configure_logging"]
