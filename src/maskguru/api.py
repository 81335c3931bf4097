"""Process-wide default sanitizer and its module-level entry points.

Every function forwards to :data:`default_sanitizer`.  Applications that
need isolation (tests, multi-tenant services) construct their own
:class:`~maskguru.sanitizer.Sanitizer` instead.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from maskguru.sanitizer import Sanitizer

default_sanitizer = Sanitizer()


def sanitize(value: Any) -> Any:
    """Return a copy of *value* with sensitive content masked."""
    return default_sanitizer.sanitize(value)


def add_sensitive_key(key: str) -> None:
    default_sanitizer.add_sensitive_key(key)


def remove_sensitive_key(key: str) -> None:
    default_sanitizer.remove_sensitive_key(key)


def get_sensitive_keys() -> list[str]:
    return default_sanitizer.get_sensitive_keys()


def set_sensitive_keys(keys: Iterable[str]) -> None:
    default_sanitizer.set_sensitive_keys(keys)


def reset_sensitive_keys() -> None:
    default_sanitizer.reset_sensitive_keys()


def set_sensitive_patterns(patterns: Mapping[str, re.Pattern[str]]) -> None:
    default_sanitizer.set_sensitive_patterns(patterns)


def add_sensitive_patterns(patterns: Mapping[str, re.Pattern[str]]) -> None:
    default_sanitizer.add_sensitive_patterns(patterns)


def get_sensitive_patterns() -> dict[str, re.Pattern[str]]:
    return default_sanitizer.get_sensitive_patterns()


def reset_sensitive_patterns() -> None:
    default_sanitizer.reset_sensitive_patterns()


def set_sensitive_pattern_warnings(suppress: bool) -> None:
    default_sanitizer.set_sensitive_pattern_warnings(suppress)


def clear_caches() -> None:
    default_sanitizer.clear_caches()


def configure_sanitizer(
    sanitizer: Sanitizer | None = None,
    *,
    sensitive_keys: Iterable[str] | None = None,
    sensitive_patterns: Mapping[str, re.Pattern[str]] | None = None,
    suppress_pattern_warnings: bool | None = None,
) -> Sanitizer:
    """Apply logger-style options to *sanitizer* (the default one if omitted).

    Parameters
    ----------
    sensitive_keys:
        Replaces the whole key list.
    sensitive_patterns:
        Replaces the whole pattern map when non-empty.
    suppress_pattern_warnings:
        Toggles the warning for dropped default patterns.  Applied first so
        it already governs a replacement made in the same call.
    """
    target = sanitizer if sanitizer is not None else default_sanitizer
    if suppress_pattern_warnings is not None:
        target.set_sensitive_pattern_warnings(suppress_pattern_warnings)
    if sensitive_keys is not None:
        target.set_sensitive_keys(sensitive_keys)
    if sensitive_patterns:
        target.set_sensitive_patterns(sensitive_patterns)
    return target
