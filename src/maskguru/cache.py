"""Caches used by the sanitizer.

- :class:`LRUCache` — bounded mask-result cache keyed by ``"value|key"``.
- :class:`IdentityCache` — sanitize results keyed by object *identity*.

``dict`` instances cannot be weakly referenced, so the identity cache keeps
a weak reference when the object supports one and otherwise a strong
reference bounded by LRU eviction.  Either way a hit requires the stored
referent to *be* the looked-up object, so a recycled ``id()`` never serves a
stale entry.
"""

from __future__ import annotations

import threading
import weakref
from collections import OrderedDict
from collections.abc import Hashable
from typing import Any, Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

MISSING: Any = object()


class LRUCache(Generic[K, V]):
    """Least-recently-used cache with a fixed capacity."""

    def __init__(self, maxsize: int = 1000) -> None:
        if maxsize < 1:
            msg = f"maxsize must be >= 1, got {maxsize}"
            raise ValueError(msg)
        self._maxsize = maxsize
        self._data: OrderedDict[K, V] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: K, default: Any = None) -> Any:
        with self._lock:
            try:
                self._data.move_to_end(key)
            except KeyError:
                return default
            return self._data[key]

    def set(self, key: K, value: V) -> None:
        with self._lock:
            if key in self._data:
                self._data.move_to_end(key)
            elif len(self._data) >= self._maxsize:
                self._data.popitem(last=False)
            self._data[key] = value

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    @property
    def maxsize(self) -> int:
        return self._maxsize

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data


class IdentityCache:
    """Cache sanitize results by object identity.

    Parameters
    ----------
    maxsize:
        Maximum number of live entries.  ``0`` disables the cache: every
        lookup misses and nothing is stored.
    """

    def __init__(self, maxsize: int = 1000) -> None:
        if maxsize < 0:
            msg = f"maxsize must be >= 0, got {maxsize}"
            raise ValueError(msg)
        self._maxsize = maxsize
        # id(obj) -> (weakref or the object itself, cached value)
        self._entries: OrderedDict[int, tuple[Any, Any]] = OrderedDict()
        # Reentrant: a weakref callback may fire while this thread holds it.
        self._lock = threading.RLock()

    def get(self, obj: object) -> Any:
        """Return the cached value for *obj*, or :data:`MISSING`."""
        key = id(obj)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return MISSING
            holder, value = entry
            target = holder() if isinstance(holder, weakref.ref) else holder
            if target is not obj:
                self._entries.pop(key, None)
                return MISSING
            self._entries.move_to_end(key)
            return value

    def set(self, obj: object, value: Any) -> None:
        if not self._maxsize:
            return
        key = id(obj)
        try:
            holder: Any = weakref.ref(obj, self._make_reaper(key))
        except TypeError:
            holder = obj
        with self._lock:
            self._entries.pop(key, None)
            while len(self._entries) >= self._maxsize:
                self._entries.popitem(last=False)
            self._entries[key] = (holder, value)

    def _make_reaper(self, key: int) -> Any:
        cache_ref = weakref.ref(self)

        def _reap(ref: weakref.ref[Any]) -> None:
            cache = cache_ref()
            if cache is None:
                return
            with cache._lock:
                entry = cache._entries.get(key)
                if entry is not None and entry[0] is ref:
                    del cache._entries[key]

        return _reap

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
