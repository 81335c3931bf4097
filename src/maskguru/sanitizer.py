"""Recursive sanitizer.

:class:`Sanitizer` walks an arbitrary value and returns a structurally
equivalent copy with sensitive content masked:

- strings are truncated and scrubbed with the pattern registry
  (``"mail me at a@b.io"`` -> ``"mail me at [EMAIL]"``);
- values stored under a sensitive key are partially masked by
  :class:`~maskguru.masking.ValueMasker` and never pattern-scrubbed
  (``{"email": "user@example.com"}`` -> ``{"email": "use***@example.com"}``);
- recursion stops at ``max_depth`` with ``"[MAX_DEPTH]"`` and at back-edges
  with ``"[CIRCULAR]"``.

Each value is classified into a :class:`ValueKind` and handled by exactly one
branch.  Records (``dict``, namedtuples, dataclasses and objects with a
``__dict__`` or ``__slots__``) are walked attribute by attribute and cached by
identity until a registry changes.  Any other object (iterators, UUIDs, paths)
is rendered with ``str()`` and scrubbed like a string; only classes, modules
and functions pass through untouched.
"""

from __future__ import annotations

import array
import collections
import dataclasses
import datetime
import enum
import ipaddress
import numbers
import pathlib
import re
import traceback
import types
import uuid
from collections.abc import Callable, Container, ItemsView, Iterable, KeysView, Mapping, ValuesView
from dataclasses import dataclass, field
from typing import Any

from maskguru.cache import MISSING, IdentityCache, LRUCache
from maskguru.constants import (
    BINARY_DATA_MARKER,
    BUFFER_MARKER,
    CIRCULAR_MARKER,
    MAX_DEPTH_MARKER,
    SANITIZE_ERROR_MARKER,
    UNSAFE_KEY_MARKER,
    UNSAFE_KEYS,
)
from maskguru.errors import handle_error
from maskguru.guard import apply_patterns, truncate
from maskguru.masking import ValueMasker
from maskguru.registry import SensitiveKeyRegistry, SensitivePatternRegistry
from maskguru.settings import SanitizerSettings


class ValueKind(enum.Enum):
    NONE = "none"
    PRIMITIVE = "primitive"
    STRING = "string"
    ERROR = "error"
    DATE = "date"
    MAP = "map"
    SET = "set"
    BUFFER = "buffer"
    BINARY = "binary"
    RECORD = "record"
    SEQUENCE = "sequence"
    OBJECT = "object"
    OPAQUE = "opaque"


_OPAQUE_TYPES: tuple[type, ...] = (
    type,
    types.ModuleType,
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
)

# Value types whose text form is the useful part; their slots are internals.
_TEXT_TYPES: tuple[type, ...] = (
    uuid.UUID,
    pathlib.PurePath,
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    ipaddress.IPv4Network,
    ipaddress.IPv6Network,
)


# Kinds that can reach themselves and therefore take part in cycle tracking.
_TRACKED_KINDS = frozenset(
    {ValueKind.ERROR, ValueKind.MAP, ValueKind.SET, ValueKind.RECORD, ValueKind.SEQUENCE}
)


def _is_namedtuple(value: object) -> bool:
    return isinstance(value, tuple) and hasattr(type(value), "_fields")


def classify(value: Any) -> ValueKind:
    """Return the :class:`ValueKind` that decides how *value* is sanitized."""
    if value is None:
        return ValueKind.NONE
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (numbers.Number, enum.Enum)):
        return ValueKind.PRIMITIVE
    if isinstance(value, BaseException):
        return ValueKind.ERROR
    if isinstance(value, (datetime.date, datetime.time)):
        return ValueKind.DATE
    if isinstance(value, (bytes, bytearray)):
        return ValueKind.BUFFER
    if isinstance(value, (memoryview, array.array)):
        return ValueKind.BINARY
    if isinstance(value, dict) or _is_namedtuple(value):
        return ValueKind.RECORD
    if isinstance(value, (Mapping, ItemsView)):
        return ValueKind.MAP
    if isinstance(value, (set, frozenset)):
        return ValueKind.SET
    if isinstance(value, (list, tuple, collections.deque, KeysView, ValuesView)):
        return ValueKind.SEQUENCE
    if isinstance(value, _OPAQUE_TYPES):
        return ValueKind.OPAQUE
    if isinstance(value, _TEXT_TYPES):
        return ValueKind.OBJECT
    if (
        dataclasses.is_dataclass(value)
        or hasattr(value, "__dict__")
        or _slot_names(type(value))
    ):
        return ValueKind.RECORD
    return ValueKind.OBJECT


def _slot_names(cls: type) -> list[str]:
    """Return the instance slot names declared anywhere in *cls*'s MRO."""
    names: list[str] = []
    for klass in cls.__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__"):
                continue
            if name.startswith("__") and not name.endswith("__"):
                name = f"_{klass.__name__.lstrip('_')}{name}"
            names.append(name)
    return names


def _attribute_names(value: Any) -> list[str]:
    names: dict[str, None] = {}
    if dataclasses.is_dataclass(value):
        names.update(dict.fromkeys(f.name for f in dataclasses.fields(value)))
    names.update(dict.fromkeys(_slot_names(type(value))))
    if hasattr(value, "__dict__"):
        names.update(dict.fromkeys(vars(value)))
    return list(names)


def _record_items(value: Any) -> Iterable[tuple[Any, Any]]:
    if isinstance(value, dict):
        return value.items()
    if isinstance(value, tuple):
        return value._asdict().items()
    items: dict[str, Any] = {}
    for name in _attribute_names(value):
        # Unset slots raise AttributeError and are left out.
        attr = getattr(value, name, MISSING)
        if attr is not MISSING:
            items[name] = attr
    return items.items()


def _hashable(value: Any) -> Any:
    try:
        hash(value)
    except TypeError:
        return str(value)
    return value


@dataclass(frozen=True)
class SanitizationContext:
    """Per-walk state: current depth and the ids of the objects on the current path."""

    depth: int = 0
    visited: frozenset[int] = field(default_factory=frozenset)

    def child(self) -> SanitizationContext:
        return SanitizationContext(self.depth + 1, self.visited)

    def entering(self, obj: object) -> SanitizationContext:
        return SanitizationContext(self.depth, self.visited | {id(obj)})


class Sanitizer:
    """Mask sensitive data in arbitrary Python values.

    Parameters
    ----------
    keys:
        Sensitive key registry.  A fresh one with the default keys if omitted.
    patterns:
        Sensitive pattern registry.  A fresh one with the default patterns if
        omitted.
    settings:
        Policy limits.  Defaults to :class:`SanitizerSettings` defaults.

    Registries may be shared between sanitizers; each subscribed sanitizer
    drops its caches whenever a shared registry changes.
    """

    def __init__(
        self,
        *,
        keys: SensitiveKeyRegistry | None = None,
        patterns: SensitivePatternRegistry | None = None,
        settings: SanitizerSettings | None = None,
    ) -> None:
        self.settings = settings if settings is not None else SanitizerSettings()
        self.keys = keys if keys is not None else SensitiveKeyRegistry()
        self.patterns = patterns if patterns is not None else SensitivePatternRegistry()
        self.masker = ValueMasker(LRUCache(self.settings.mask_cache_size))
        self._identity_cache = IdentityCache(self.settings.identity_cache_size)
        self.keys.subscribe(self.clear_caches)
        self.patterns.subscribe(self.clear_caches)
        self._handlers: dict[ValueKind, Callable[[Any, SanitizationContext], Any]] = {
            ValueKind.ERROR: self._sanitize_error,
            ValueKind.DATE: self._sanitize_date,
            ValueKind.MAP: self._sanitize_map,
            ValueKind.SET: self._sanitize_set,
            ValueKind.BUFFER: lambda _value, _ctx: BUFFER_MARKER,
            ValueKind.BINARY: lambda _value, _ctx: BINARY_DATA_MARKER,
            ValueKind.RECORD: self._sanitize_record,
            ValueKind.SEQUENCE: self._sanitize_sequence,
        }

    # -- entry points -------------------------------------------------------

    def sanitize(self, value: Any) -> Any:
        """Return a sanitized copy of *value*.  Never raises."""
        return self._walk(value, SanitizationContext())

    def sanitize_fields(
        self,
        fields: Mapping[str, Any],
        *,
        passthrough: Container[str] = (),
    ) -> dict[str, Any]:
        """Sanitize a top-level mapping of fields with record rules, uncached.

        Keys listed in *passthrough* are copied unchanged.
        """
        ctx = SanitizationContext().entering(fields)
        result: dict[str, Any] = {}
        for key, value in fields.items():
            if key in passthrough:
                result[key] = value
            else:
                result[key] = self._sanitize_property(key, value, ctx)
        return result

    def mask(self, value: Any, key: str | None = None) -> str:
        return self.masker.mask(value, key)

    def clear_caches(self) -> None:
        """Drop the mask-result cache and the identity cache."""
        self.masker.cache.clear()
        self._identity_cache.clear()

    # -- registry operations --------------------------------------------------

    def add_sensitive_key(self, key: str) -> None:
        self.keys.add(key)

    def remove_sensitive_key(self, key: str) -> None:
        self.keys.remove(key)

    def get_sensitive_keys(self) -> list[str]:
        return self.keys.list()

    def set_sensitive_keys(self, keys: Iterable[str]) -> None:
        self.keys.replace_all(keys)

    def reset_sensitive_keys(self) -> None:
        self.keys.reset_to_defaults()

    def set_sensitive_patterns(self, patterns: Mapping[str, re.Pattern[str]]) -> None:
        self.patterns.replace_all(patterns)

    def add_sensitive_patterns(self, patterns: Mapping[str, re.Pattern[str]]) -> None:
        self.patterns.merge(patterns)

    def get_sensitive_patterns(self) -> dict[str, re.Pattern[str]]:
        return self.patterns.get_all()

    def reset_sensitive_patterns(self) -> None:
        self.patterns.reset_to_defaults()

    def set_sensitive_pattern_warnings(self, suppress: bool) -> None:
        self.patterns.set_suppress_warnings(suppress)

    # -- traversal ----------------------------------------------------------

    def _walk(self, value: Any, ctx: SanitizationContext) -> Any:
        if ctx.depth > self.settings.max_depth:
            return MAX_DEPTH_MARKER
        try:
            kind = classify(value)
            if kind in (ValueKind.NONE, ValueKind.PRIMITIVE, ValueKind.OPAQUE):
                return value
            if kind is ValueKind.STRING:
                return self._sanitize_string(value)
            if kind is ValueKind.OBJECT:
                return self._sanitize_string(str(value))
            if kind in _TRACKED_KINDS:
                if id(value) in ctx.visited:
                    return CIRCULAR_MARKER
                ctx = ctx.entering(value)
            return self._handlers[kind](value, ctx)
        except Exception as exc:
            handle_error(exc, f"sanitizing {type(value).__name__}")
            return SANITIZE_ERROR_MARKER

    def _sanitize_string(self, value: str) -> str:
        text = truncate(value, self.settings.max_string_length)
        return apply_patterns(text, self.patterns.get_all(), self.settings.regex_timeout_ms)

    def _sanitize_property(self, key: Any, value: Any, ctx: SanitizationContext) -> Any:
        if isinstance(key, str) and key in UNSAFE_KEYS:
            return UNSAFE_KEY_MARKER
        if self.keys.is_sensitive(key):
            return self.masker.mask(value, key)
        return self._walk(value, ctx.child())

    def _sanitize_error(self, value: BaseException, ctx: SanitizationContext) -> dict[str, Any]:
        child = ctx.child()
        result: dict[str, Any] = {
            "name": type(value).__name__,
            "message": self._walk(str(value), child),
        }
        if value.__traceback__ is not None:
            stack = "".join(traceback.format_exception(type(value), value, value.__traceback__))
            result["stack"] = self._walk(stack, child)
        return result

    def _sanitize_date(
        self,
        value: datetime.date | datetime.time,
        ctx: SanitizationContext,
    ) -> Any:
        return self._walk(value.isoformat(), ctx.child())

    def _sanitize_map(self, value: Any, ctx: SanitizationContext) -> dict[Any, Any]:
        child = ctx.child()
        pairs = value.items() if isinstance(value, Mapping) else value
        result: dict[Any, Any] = {}
        for key, item in pairs:
            if isinstance(key, str) and self.keys.is_sensitive(key):
                # Mask the key too so it cannot be matched back to its value.
                result[self.masker.mask(key, key)] = self.masker.mask(item, key)
            else:
                result[_hashable(self._walk(key, child))] = self._walk(item, child)
        return result

    def _sanitize_set(self, value: set[Any] | frozenset[Any], ctx: SanitizationContext) -> Any:
        child = ctx.child()
        members = (_hashable(self._walk(item, child)) for item in value)
        if isinstance(value, frozenset):
            return frozenset(members)
        return set(members)

    def _sanitize_record(self, value: Any, ctx: SanitizationContext) -> dict[Any, Any]:
        cached = self._identity_cache.get(value)
        if cached is not MISSING:
            return cached
        result = {
            key: self._sanitize_property(key, item, ctx) for key, item in _record_items(value)
        }
        self._identity_cache.set(value, result)
        return result

    def _sanitize_sequence(self, value: Any, ctx: SanitizationContext) -> Any:
        child = ctx.child()
        items = [self._walk(item, child) for item in value]
        if isinstance(value, collections.deque):
            return collections.deque(items, maxlen=value.maxlen)
        if isinstance(value, tuple):
            return tuple(items)
        return items
