"""Process-wide log level.

Levels, from most to least verbose: ``debug``, ``info``, ``warn``,
``error``; ``none`` disables all output.  ``error`` is always emitted
unless the level is ``none``.

The current level resolves, in order, to:

1. the value passed to :func:`set_log_level`;
2. the ``MASKGURU_LOG_LEVEL`` environment variable;
3. ``debug`` in development mode (see :func:`~maskguru.environment.is_development`);
4. ``warn``.
"""

from __future__ import annotations

import logging
import os
from typing import Literal

from maskguru.environment import is_development
from maskguru.errors import ErrorKind, MaskguruError, handle_error

LogLevel = Literal["debug", "info", "warn", "error", "none"]

LOG_LEVELS: tuple[str, ...] = ("debug", "info", "warn", "error", "none")

_RANKS: dict[str, int] = {"debug": 0, "info": 1, "warn": 2, "error": 3}

_ALIASES: dict[str, str] = {
    "trace": "debug",
    "success": "info",
    "warning": "warn",
    "critical": "error",
    "fatal": "error",
    "exception": "error",
}

_current: str | None = None


def _normalize(level: object) -> str | None:
    if not isinstance(level, str):
        return None
    lowered = level.strip().lower()
    lowered = _ALIASES.get(lowered, lowered)
    return lowered if lowered in LOG_LEVELS else None


def is_valid_log_level(level: object) -> bool:
    return _normalize(level) is not None


def _to_logging_level(level_name: str) -> int:
    """Convert a human-readable level name to its :mod:`logging` constant."""
    upper_level = level_name.upper()
    if upper_level == "WARN":
        return logging.WARNING
    if upper_level == "NONE":
        return logging.CRITICAL + 10
    result: int = getattr(logging, upper_level, logging.INFO)
    return result


def get_log_level() -> str:
    """Return the currently active level name."""
    if _current is not None:
        return _current
    env_level = _normalize(os.environ.get("MASKGURU_LOG_LEVEL"))
    if env_level is not None:
        return env_level
    return "debug" if is_development() else "warn"


def set_log_level(level: str) -> None:
    """Set the process-wide level and move the stdlib root logger with it.

    An invalid *level* raises :class:`MaskguruError` in development mode and
    is reported and ignored otherwise.
    """
    global _current
    normalized = _normalize(level)
    if normalized is None:
        error = MaskguruError(
            ErrorKind.INVALID_LOG_LEVEL,
            f"Invalid log level: {level!r}. Must be one of: {', '.join(LOG_LEVELS)}",
        )
        if is_development():
            raise error
        handle_error(error, "set_log_level")
        return
    _current = normalized
    logging.getLogger().setLevel(_to_logging_level(normalized))


def reset_log_level() -> None:
    """Forget the level set with :func:`set_log_level`."""
    global _current
    _current = None


def should_log(requested: str, current: str | None = None) -> bool:
    """Return ``True`` if a *requested*-level call passes the *current* level."""
    active = get_log_level() if current is None else _normalize(current) or "warn"
    if active == "none":
        return False
    wanted = _normalize(requested) or "info"
    if wanted == "error":
        return True
    if wanted == "none":
        return False
    return _RANKS[wanted] >= _RANKS[active]
