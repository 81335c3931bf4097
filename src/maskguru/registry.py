"""Sensitive key and sensitive pattern registries.

Both registries notify their subscribers after every mutation.  A
:class:`~maskguru.sanitizer.Sanitizer` subscribes its ``clear_caches``
method, so a change to either registry is never followed by a sanitize call
that reads a stale cache entry.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping

from maskguru.constants import DEFAULT_SENSITIVE_KEYS, DEFAULT_SENSITIVE_PATTERNS

_log = logging.getLogger("maskguru")

Listener = Callable[[], None]


class _Observable:
    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        """Call *listener* after every mutation of this registry."""
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in self._listeners:
            listener()


class SensitiveKeyRegistry(_Observable):
    """Case-insensitive set of keyword fragments marking a property sensitive.

    Parameters
    ----------
    keys:
        Initial keywords.  Defaults to :data:`DEFAULT_SENSITIVE_KEYS`.
    """

    def __init__(self, keys: Iterable[str] | None = None) -> None:
        super().__init__()
        self._keys = self._normalize(DEFAULT_SENSITIVE_KEYS if keys is None else keys)

    @staticmethod
    def _normalize(keys: Iterable[str]) -> set[str]:
        return {key.lower() for key in keys if key and isinstance(key, str)}

    def add(self, key: str) -> None:
        if not isinstance(key, str) or not key:
            return
        self._keys.add(key.lower())
        self._changed()

    def remove(self, key: str) -> None:
        if not isinstance(key, str) or not key:
            return
        self._keys.discard(key.lower())
        self._changed()

    def replace_all(self, keys: Iterable[str]) -> None:
        """Replace every keyword; falsy entries are discarded."""
        self._keys = self._normalize(keys)
        self._changed()

    def list(self) -> list[str]:
        """Return a sorted copy of the registered keywords."""
        return sorted(self._keys)

    def reset_to_defaults(self) -> None:
        self._keys = self._normalize(DEFAULT_SENSITIVE_KEYS)
        self._changed()

    def is_sensitive(self, key: object) -> bool:
        """Return ``True`` if any keyword is a substring of *key* (case-insensitive)."""
        if not isinstance(key, str) or not key:
            return False
        lowered = key.lower()
        return any(keyword in lowered for keyword in self._keys)

    def __contains__(self, key: object) -> bool:
        return self.is_sensitive(key)

    def __len__(self) -> int:
        return len(self._keys)


class SensitivePatternRegistry(_Observable):
    """Named regular expressions marking sensitive content inside strings.

    Parameters
    ----------
    patterns:
        Initial patterns.  Defaults to :data:`DEFAULT_SENSITIVE_PATTERNS`.
    suppress_warnings:
        Silence the warning :meth:`replace_all` emits when default pattern
        names are dropped.
    """

    def __init__(
        self,
        patterns: Mapping[str, re.Pattern[str]] | None = None,
        *,
        suppress_warnings: bool = False,
    ) -> None:
        super().__init__()
        self._patterns: dict[str, re.Pattern[str]] = (
            dict(DEFAULT_SENSITIVE_PATTERNS) if patterns is None else self._filter(patterns)
        )
        self._suppress_warnings = suppress_warnings

    @staticmethod
    def _filter(patterns: Mapping[str, object]) -> dict[str, re.Pattern[str]]:
        return {
            name: pattern
            for name, pattern in patterns.items()
            if isinstance(name, str) and isinstance(pattern, re.Pattern)
        }

    def get_all(self) -> dict[str, re.Pattern[str]]:
        """Return the live mapping read by the pattern guard (no copy)."""
        return self._patterns

    def replace_all(self, patterns: Mapping[str, object]) -> None:
        """Replace every pattern, warning if a default name goes missing."""
        filtered = self._filter(patterns)
        missing = [name for name in DEFAULT_SENSITIVE_PATTERNS if name not in filtered]
        if missing and not self._suppress_warnings:
            _log.warning(
                "Default sensitive patterns removed: %s. Ensure this is intentional.",
                ", ".join(missing),
            )
        self._patterns = filtered
        self._changed()

    def merge(self, patterns: Mapping[str, object]) -> None:
        """Add or override patterns, keeping every other existing entry."""
        self._patterns = {**self._patterns, **self._filter(patterns)}
        self._changed()

    def reset_to_defaults(self) -> None:
        self._patterns = dict(DEFAULT_SENSITIVE_PATTERNS)
        self._changed()

    def set_suppress_warnings(self, suppress: bool) -> None:
        self._suppress_warnings = bool(suppress)

    @property
    def suppress_warnings(self) -> bool:
        return self._suppress_warnings

    def __len__(self) -> int:
        return len(self._patterns)
