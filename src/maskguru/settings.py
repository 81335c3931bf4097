"""Sanitizer policy settings.

The defaults are fixed policy (see :mod:`maskguru.constants`); they can be
overridden per :class:`~maskguru.sanitizer.Sanitizer` or read from the
environment with :meth:`SanitizerSettings.from_env`:

- ``MASKGURU_MAX_DEPTH``
- ``MASKGURU_MAX_STRING_LENGTH``
- ``MASKGURU_REGEX_TIMEOUT_MS``
- ``MASKGURU_MASK_CACHE_SIZE``
- ``MASKGURU_IDENTITY_CACHE_SIZE`` (``0`` disables the identity cache)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields

from maskguru.constants import (
    IDENTITY_CACHE_SIZE,
    MASK_CACHE_SIZE,
    MAX_DEPTH,
    MAX_STRING_LENGTH,
    REGEX_TIMEOUT_MS,
)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True, kw_only=True)
class SanitizerSettings:
    max_depth: int = MAX_DEPTH
    max_string_length: int = MAX_STRING_LENGTH
    regex_timeout_ms: float = REGEX_TIMEOUT_MS
    mask_cache_size: int = MASK_CACHE_SIZE
    identity_cache_size: int = IDENTITY_CACHE_SIZE

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if value < 0:
                msg = f"{f.name} must be >= 0, got {value}"
                raise ValueError(msg)
        if self.mask_cache_size < 1:
            msg = f"mask_cache_size must be >= 1, got {self.mask_cache_size}"
            raise ValueError(msg)

    @classmethod
    def from_env(cls) -> SanitizerSettings:
        """Build settings from ``MASKGURU_*`` environment variables."""
        return cls(
            max_depth=_env_int("MASKGURU_MAX_DEPTH", MAX_DEPTH),
            max_string_length=_env_int("MASKGURU_MAX_STRING_LENGTH", MAX_STRING_LENGTH),
            regex_timeout_ms=_env_int("MASKGURU_REGEX_TIMEOUT_MS", REGEX_TIMEOUT_MS),
            mask_cache_size=_env_int("MASKGURU_MASK_CACHE_SIZE", MASK_CACHE_SIZE),
            identity_cache_size=_env_int("MASKGURU_IDENTITY_CACHE_SIZE", IDENTITY_CACHE_SIZE),
        )
