"""Loguru-like wrapper for structlog with sanitized output.

Provides a :class:`Logger` dataclass that mirrors Loguru's ergonomic API
(``bind``, ``contextualize``, ``opt``, level methods) while delegating all
actual log processing to :mod:`structlog`.  Calls below the process-wide
level (see :mod:`maskguru.levels`) return before any formatting or
sanitizing happens; everything else is masked by the
:class:`~maskguru.redaction.SanitizingProcessor` installed by
:func:`~maskguru.config.configure_structlog`.

A global ``logger`` instance is exported for convenience::

    from maskguru import logger

    logger.info("Signed in {user}", user="alice", password="hunter2")
"""

from __future__ import annotations

import itertools
import logging
import sys
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, TypeAlias

import structlog
from structlog.contextvars import bound_contextvars

from maskguru.levels import _to_logging_level, get_log_level, set_log_level, should_log

HandlerId: TypeAlias = int
Sink: TypeAlias = "str | Path | logging.Handler | Callable[[str], None]"


def _caller_module_name() -> str:
    """Walk the call stack to find the first frame outside this module."""
    frame = sys._getframe(0)
    while frame is not None:
        name: str = frame.f_globals.get("__name__", "")
        if name != __name__:
            return name
        frame = frame.f_back  # type: ignore[assignment]
    return "unknown"


class _CallableHandler(logging.Handler):
    """A :class:`logging.Handler` that delegates to a plain callable."""

    def __init__(self, fn: Callable[[str], None]) -> None:
        super().__init__()
        self._fn = fn

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            self._fn(msg)
        except Exception:
            self.handleError(record)


def _make_handler(sink: Sink) -> logging.Handler:
    """Create a :class:`logging.Handler` from various *sink* types."""
    if isinstance(sink, logging.Handler):
        return sink
    if isinstance(sink, (str, Path)):
        return logging.FileHandler(str(sink), encoding="utf-8")
    if hasattr(sink, "write"):
        return logging.StreamHandler(sink)
    if callable(sink):
        return _CallableHandler(sink)
    msg = f"Unsupported sink type: {type(sink)!r}"
    raise TypeError(msg)


def _safe_format(
    message: Any,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> tuple[Any, bool]:
    """Safely format *message* with ``str.format``, imitating Loguru style.

    Returns a tuple of (formatted_message, consumed).  Non-string messages
    (dicts, exceptions, ...) are returned unchanged so the sanitizer can
    still see their structure.
    """
    if not isinstance(message, str):
        return message, False
    if not (args or kwargs) or "{" not in message:
        return message, False

    try:
        return message.format(*args, **kwargs), True
    except Exception:
        return message, False


_id_counter = itertools.count(1)


@dataclass
class Logger:
    """A Loguru-like facade for :mod:`structlog`.

    *   ``trace``, ``debug``, ``info``, ``success``, ``warning``, ``error``,
        ``critical``, ``exception`` methods.
    *   ``bind()`` — create child loggers with persistent context.
    *   ``contextualize()`` — add request-scoped context via *contextvars*.
    *   ``add()`` / ``remove()`` — manage logging handlers (sinks).
    *   ``opt()`` — include exception info or stack traces for one call.
    *   ``time()`` / ``time_end()`` — log the elapsed time of a labelled span.
    """

    name: str | None = None
    _bound: dict[str, Any] = field(default_factory=dict)
    _opt_exc_info: Any = None
    _opt_stack_info: bool = False

    _handlers: dict[HandlerId, logging.Handler] = field(default_factory=dict)
    _timers: dict[str, float] = field(default_factory=dict, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    _resolved_name: str | None = field(default=None, repr=False)

    # -- structlog bridge ---------------------------------------------------

    def _get_structlog_logger(self) -> Any:
        """Return a structlog logger, applying any bound context."""
        if self.name is not None:
            name = self.name
        else:
            if self._resolved_name is None:
                object.__setattr__(self, "_resolved_name", _caller_module_name())
            name = self._resolved_name  # type: ignore[assignment]
        log = structlog.get_logger(name)
        if self._bound:
            log = log.bind(**self._bound)
        return log

    # -- context helpers ----------------------------------------------------

    def bind(self, **kwargs: Any) -> Logger:
        """Return a *new* logger with permanently bound context."""
        merged = {**self._bound, **kwargs}
        return replace(self, _bound=merged)

    @contextmanager
    def contextualize(self, **kwargs: Any) -> Iterator[Logger]:
        """Apply context for the duration of a ``with`` block."""
        with bound_contextvars(**kwargs):
            yield self

    def opt(
        self,
        *,
        exception: Any = None,
        stack_info: bool = False,
    ) -> Logger:
        """Configure one-time options for the next log call."""
        exc_info = exception if exception is not None else self._opt_exc_info
        return replace(self, _opt_exc_info=exc_info, _opt_stack_info=stack_info)

    # -- level --------------------------------------------------------------

    @property
    def level(self) -> str:
        """The process-wide level shared by every logger."""
        return get_log_level()

    def set_level(self, level: str) -> None:
        set_log_level(level)

    @property
    def is_enabled(self) -> bool:
        return get_log_level() != "none"

    # -- logging methods ----------------------------------------------------

    def trace(self, message: Any, *args: Any, **kwargs: Any) -> None:
        self._log("debug", message, args, kwargs)

    def debug(self, message: Any, *args: Any, **kwargs: Any) -> None:
        self._log("debug", message, args, kwargs)

    def info(self, message: Any, *args: Any, **kwargs: Any) -> None:
        self._log("info", message, args, kwargs)

    def success(self, message: Any, *args: Any, **kwargs: Any) -> None:
        self._log("info", message, args, kwargs)

    def warning(self, message: Any, *args: Any, **kwargs: Any) -> None:
        self._log("warning", message, args, kwargs)

    def warn(self, message: Any, *args: Any, **kwargs: Any) -> None:
        self.warning(message, *args, **kwargs)

    def error(self, message: Any, *args: Any, **kwargs: Any) -> None:
        self._log("error", message, args, kwargs)

    def critical(self, message: Any, *args: Any, **kwargs: Any) -> None:
        self._log("critical", message, args, kwargs)

    def fatal(self, message: Any, *args: Any, **kwargs: Any) -> None:
        self.critical(message, *args, **kwargs)

    def exception(self, message: Any, *args: Any, **kwargs: Any) -> None:
        """Log at ``ERROR`` level with exception information."""
        kwargs.setdefault("exc_info", True)
        self._log("error", message, args, kwargs)

    def _log(
        self,
        method: str,
        message: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> None:
        """Internal dispatch."""
        if not should_log(method):
            return
        structlog_logger = self._get_structlog_logger()
        formatted_msg, _consumed = _safe_format(message, args, kwargs)

        if self._opt_exc_info is not None:
            kwargs.setdefault("exc_info", self._opt_exc_info)
        if self._opt_stack_info:
            kwargs.setdefault("stack_info", True)

        getattr(structlog_logger, method)(formatted_msg, **kwargs)

    # -- timers -------------------------------------------------------------

    def time(self, label: str) -> None:
        """Start a timer named *label*."""
        if not self.is_enabled:
            return
        with self._lock:
            self._timers[label] = time.perf_counter()

    def time_end(self, label: str) -> float | None:
        """Stop timer *label*, log ``"<label>: <ms>ms"`` at INFO and return the milliseconds.

        Returns ``None`` if the timer was never started.
        """
        with self._lock:
            started = self._timers.pop(label, None)
        if started is None or not self.is_enabled:
            return None
        elapsed_ms = round((time.perf_counter() - started) * 1000, 3)
        self.info(f"{label}: {elapsed_ms}ms", elapsed_ms=elapsed_ms)
        return elapsed_ms

    # -- sink (handler) management ------------------------------------------

    def add(self, sink: Sink, *, level: str | None = None) -> HandlerId:
        """Add a new logging handler (*sink*).

        Parameters
        ----------
        sink:
            A file path, a :class:`logging.Handler`, or a callable accepting
            a single string.
        level:
            Minimum level for this handler.  Inherits from the root logger
            when *None*.

        Returns
        -------
        HandlerId
            An identifier that can be passed to :meth:`remove`.
        """
        handler = _make_handler(sink)
        log_level = _to_logging_level(level) if level else logging.getLogger().level
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter("%(message)s"))

        root = logging.getLogger()
        root.addHandler(handler)

        with self._lock:
            handler_id = next(_id_counter)
            self._handlers[handler_id] = handler
        return handler_id

    def remove(self, handler_id: HandlerId | None = None) -> None:
        """Remove a handler by its *handler_id*.

        If *handler_id* is ``None``, all handlers added via this logger
        instance are removed.
        """
        root = logging.getLogger()
        with self._lock:
            if handler_id is None:
                for h in self._handlers.values():
                    root.removeHandler(h)
                    h.close()
                self._handlers.clear()
                return

            handler_to_remove = self._handlers.pop(handler_id, None)

        if handler_to_remove:
            root.removeHandler(handler_to_remove)
            handler_to_remove.close()


logger = Logger()
