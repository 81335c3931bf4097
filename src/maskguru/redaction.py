"""Sensitive data sanitizing processor.

Provides a structlog processor that runs every event field through a
:class:`~maskguru.sanitizer.Sanitizer`: values under sensitive keys are
partially masked, and every string is scrubbed with the sensitive patterns.
Exceptions passed via ``exc_info`` are replaced by a sanitized
``exception_info`` record so a message or traceback cannot leak either.
"""

from __future__ import annotations

import sys
from typing import Any

from maskguru.api import default_sanitizer
from maskguru.environment import is_development
from maskguru.sanitizer import Sanitizer

_PASSTHROUGH_KEYS: frozenset[str] = frozenset(
    {"exc_info", "stack_info", "_record", "_from_structlog"}
)


def _exception_from(exc_info: Any) -> BaseException | None:
    if isinstance(exc_info, BaseException):
        return exc_info
    if exc_info is True:
        exc_info = sys.exc_info()
    if isinstance(exc_info, tuple) and len(exc_info) == 3:
        return exc_info[1]
    return None


def _is_internal(event_dict: dict[str, Any]) -> bool:
    # Diagnostics from the sanitizer itself must not be fed back into it.
    record = event_dict.get("_record")
    return getattr(record, "name", "") == "maskguru"


class SanitizingProcessor:
    """Structlog processor that sanitizes sensitive data in event dicts.

    Parameters
    ----------
    sanitizer:
        The sanitizer to use.  Defaults to the process-wide
        :data:`~maskguru.api.default_sanitizer`.
    enabled:
        Whether masking is applied.  Defaults to ``True`` in production and
        ``False`` in development mode so developers see real values.
    """

    def __init__(
        self,
        sanitizer: Sanitizer | None = None,
        *,
        enabled: bool | None = None,
    ) -> None:
        self._sanitizer = sanitizer if sanitizer is not None else default_sanitizer
        self._enabled = enabled if enabled is not None else not is_development()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def __call__(
        self,
        _logger: Any,
        _method_name: str,
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        if not self._enabled or _is_internal(event_dict):
            return event_dict

        result = self._sanitizer.sanitize_fields(event_dict, passthrough=_PASSTHROUGH_KEYS)

        exc_info = result.get("exc_info")
        if exc_info:
            exc = _exception_from(exc_info)
            if exc is not None:
                result["exception_info"] = self._sanitizer.sanitize(exc)
                del result["exc_info"]
        return result
