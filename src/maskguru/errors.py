"""Error types and the internal error reporter.

Sanitization failures are never raised to the caller.  They are wrapped in a
:class:`MaskguruError` and handed to :func:`handle_error`, which emits a
warning on the ``maskguru`` stdlib logger in development mode and stays
silent otherwise.
"""

from __future__ import annotations

import enum
import logging

from maskguru.environment import is_development

_log = logging.getLogger("maskguru")


class ErrorKind(str, enum.Enum):
    REGEX_TIMEOUT = "REGEX_TIMEOUT"
    REGEX_ERROR = "REGEX_ERROR"
    INVALID_LOG_LEVEL = "INVALID_LOG_LEVEL"


class MaskguruError(Exception):
    """An internal failure tagged with its :class:`ErrorKind`."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.original_error = original_error

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.args[0]}"


def handle_error(error: BaseException, context: str) -> None:
    """Report *error* as a warning when running in development mode."""
    if is_development():
        _log.warning("%s: %s", context, error)
