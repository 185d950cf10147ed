"""Centralized logging configuration for the ``statement_ingest`` package.

Entrypoints (the CLI, a host application) call ``configure_logging(...)`` once
at startup; it attaches a single ``StreamHandler`` to the package logger
(``"statement_ingest"``). Library modules only ever call
``get_logger(__name__)`` and never attach handlers of their own.

Until configuration runs, the package logger carries a ``NullHandler`` so
importing the library stays silent.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "statement_ingest"
_LEVEL_ENV_VAR = "STATEMENT_INGEST_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str) and level.strip():
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelName(name)
        if isinstance(numeric, int):
            return numeric
        return logging.INFO
    env_val = os.getenv(_LEVEL_ENV_VAR)
    if env_val:
        return _parse_level(env_val)
    return logging.INFO


def level_for_verbosity(verbose: int, *, quiet: bool = False) -> int | None:
    """Map CLI ``-v``/``--quiet`` flags to a level; ``None`` defers to env/defaults."""

    if quiet:
        return logging.WARNING
    if verbose >= 1:
        return logging.DEBUG
    return None


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Configure the package logger exactly once.

    Parameters
    ----------
    level:
        Level as ``int`` or level name (``"DEBUG"``, ``"INFO"``...). ``None``
        reads ``STATEMENT_INGEST_LOG_LEVEL`` and falls back to ``INFO``.
    fmt:
        Optional ``logging`` format string.
    stream:
        Destination of the single ``StreamHandler`` (``sys.stderr`` by default).
    """

    global _handler
    if _handler is not None:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    # Keep records off the root logger so host apps don't print them twice.
    logger.propagate = False
    _handler = handler


def reset_logging() -> None:
    """Detach the handler installed by :func:`configure_logging` (tests only)."""

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name with a silent default for library use."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "level_for_verbosity", "reset_logging"]
