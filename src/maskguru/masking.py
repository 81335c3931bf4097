"""Key-based partial masking.

The strategy depends on the property name the value was found under:

- ``email``-like keys: first 3 characters + ``***`` + ``@domain``
  (``user@example.com`` -> ``use***@example.com``)
- ``password``/``pwd``/``passwd`` keys: first 2 characters + ``***``
- any other sensitive key: first 2 characters + ``***``

Values of 2 characters or less collapse to ``***``.
"""

from __future__ import annotations

import re
from typing import Any

from maskguru.cache import LRUCache
from maskguru.constants import MASK, MASK_CACHE_SIZE

_EMAIL_KEY_RE = re.compile(r"email", re.IGNORECASE)
_PASSWORD_KEY_RE = re.compile(r"password|pwd|passwd", re.IGNORECASE)


def _mask_email(value: str) -> str:
    local, _, domain = value.partition("@")
    if not domain:
        return MASK
    if len(local) <= 3:
        return f"{MASK}@{domain}"
    return f"{local[:3]}{MASK}@{domain}"


def _mask_prefix(value: str, keep: int = 2) -> str:
    if len(value) <= keep:
        return MASK
    return f"{value[:keep]}{MASK}"


class ValueMasker:
    """Produce partially obscured strings for values under sensitive keys.

    Results are cached per ``(value, key)`` pair; masking depends only on the
    stringified value and the key name.
    """

    def __init__(self, cache: LRUCache[str, str] | None = None) -> None:
        self.cache: LRUCache[str, str] = cache if cache is not None else LRUCache(MASK_CACHE_SIZE)

    def mask(self, value: Any, key: str | None = None) -> str:
        if value is None:
            return MASK
        try:
            text = str(value)
        except Exception:
            return MASK
        if not text:
            return MASK

        cache_key = f"{text}|{key or ''}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        if key and _EMAIL_KEY_RE.search(key) and "@" in text:
            masked = _mask_email(text)
        elif key and _PASSWORD_KEY_RE.search(key):
            masked = _mask_prefix(text)
        else:
            masked = _mask_prefix(text)

        self.cache.set(cache_key, masked)
        return masked
