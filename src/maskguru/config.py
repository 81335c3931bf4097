"""Structlog configuration for sanitized structured logging.

Configures structlog to produce JSON logs with standardized fields:
- ``timestamp``: ISO 8601 / RFC 3339 in UTC (``Z`` suffix).
- ``service``: application name.
- ``level``: one of ``CRITICAL``, ``ERROR``, ``WARN``, ``INFO``, ``DEBUG``.
- ``severity``: RFC 5424 syslog severity code (``2``–``7``).
- ``message``: the log message as a string.

Every structlog event first passes the process-wide level gate and is only
then sanitized; records from plain :mod:`logging` loggers are sanitized in
the formatter's pre-chain.
"""

from __future__ import annotations

import collections
import logging
import os
import sys
from collections.abc import Sequence
from logging.handlers import RotatingFileHandler
from typing import Any

import orjson
import structlog
from structlog.contextvars import merge_contextvars

from maskguru.levels import _to_logging_level, get_log_level, set_log_level
from maskguru.processors import (
    add_service,
    add_syslog_severity,
    ensure_event_is_str,
    filter_by_log_level,
    normalize_level,
)
from maskguru.redaction import SanitizingProcessor
from maskguru.sanitizer import Sanitizer


def _json_default(obj: Any) -> Any:
    """Render values orjson does not know (sets from sanitized data, etc.)."""
    if isinstance(obj, (set, frozenset, collections.deque)):
        return list(obj)
    return str(obj)


def _orjson_serializer(obj: object, **_kw: object) -> str:
    """Serialize *obj* to a JSON string using orjson."""
    return orjson.dumps(obj, default=_json_default, option=orjson.OPT_NON_STR_KEYS).decode()


class _StructlogMsgFixer(logging.Handler):
    """Normalize ``record.msg`` from a structlog event dict to a plain string.

    ``wrap_for_formatter`` stores the whole event dict as ``record.msg`` and
    ``ProcessorFormatter`` renders on a shallow copy, so handlers that run
    after it (sinks added with :meth:`maskguru.core.Logger.add`) would see
    the raw dict.  Added right after the stream handler, this rewrites
    ``record.msg`` to the already-sanitized message.
    """

    def emit(self, record: logging.LogRecord) -> None:
        if isinstance(record.msg, dict):
            record.msg = record.msg.get("message") or record.msg.get("event") or str(record.msg)


def _stream_isatty(stream: Any) -> bool:
    """Check if *stream* is connected to a terminal."""
    try:
        result: bool = stream.isatty()
        return result
    except (AttributeError, ValueError):
        return False


def _build_shared_processors(
    service: str,
    sanitizing: SanitizingProcessor | None = None,
) -> list[structlog.types.Processor]:
    """Build the processor chain shared by structlog and stdlib records."""
    # The stack is rendered first so the sanitizer sees it.
    processors: list[structlog.types.Processor] = [
        merge_contextvars,
        structlog.processors.StackInfoRenderer(),
    ]
    if sanitizing is not None:
        processors.append(sanitizing)
    processors += [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        normalize_level,  # type: ignore[list-item]
        add_syslog_severity,  # type: ignore[list-item]
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        add_service(service),  # type: ignore[list-item]
        structlog.processors.UnicodeDecoder(),
        ensure_event_is_str,  # type: ignore[list-item]
        structlog.processors.EventRenamer("message"),
    ]
    return processors


def _build_formatter_processors(
    renderer: structlog.types.Processor,
    *,
    json_mode: bool = True,
) -> list[structlog.types.Processor]:
    """Build the ``ProcessorFormatter`` processor chain (final rendering stage)."""
    processors: list[structlog.types.Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
    ]
    if json_mode:
        processors.append(structlog.processors.format_exc_info)
    processors.append(renderer)
    return processors


def configure_structlog(
    *,
    service: str = "app",
    level: str | None = None,
    json_logs: bool = True,
    stream: Any = None,
    clear_handlers: bool = True,
    sanitizer: Sanitizer | None = None,
    enable_masking: bool | None = None,
) -> None:
    """Configure structlog with a level gate and a sanitizing processor.

    Parameters
    ----------
    service:
        Application/service name added to every log record.
    level:
        Minimum log level (``"debug"``, ``"info"``, ``"warn"``, ``"error"``
        or ``"none"``; stdlib names are accepted).  When *None* the current
        process-wide level is kept.
    json_logs:
        ``True`` for JSON output, ``False`` for colored console output.
    stream:
        Output stream.  Defaults to ``sys.stdout``.
    clear_handlers:
        If ``True`` (default), remove all existing root logger handlers before
        adding the structlog handler.
    sanitizer:
        Sanitizer used for every record.  Defaults to the process-wide one.
    enable_masking:
        Force masking on or off.  Defaults to on outside development mode.
    """
    if stream is None:
        stream = sys.stdout

    if level is not None:
        set_log_level(level)

    sanitizing = SanitizingProcessor(sanitizer, enabled=enable_masking)
    shared_processors = _build_shared_processors(service, sanitizing)

    structlog.configure(
        processors=[
            filter_by_log_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer(serializer=_orjson_serializer)
        if json_logs
        else structlog.dev.ConsoleRenderer(
            colors=_stream_isatty(stream),
            event_key="message",
        )
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=_build_formatter_processors(renderer, json_mode=json_logs),
        foreign_pre_chain=shared_processors,
    )

    root = logging.getLogger()
    if clear_handlers:
        root.handlers.clear()
    root.setLevel(_to_logging_level(get_log_level()))

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    root.addHandler(_StructlogMsgFixer())


def setup_structlog(
    *,
    service: str = "app",
    suppress_loggers: Sequence[str] = (),
    sanitizer: Sanitizer | None = None,
) -> None:
    """Application-level logging setup.

    Reads environment variables:

    - ``LOG_LEVEL`` (default: the ``MASKGURU_LOG_LEVEL`` / development-mode
      resolution of :func:`maskguru.levels.get_log_level`)
    - ``JSON_LOGS`` (``"0"`` = console, default: ``"1"`` = JSON)
    - ``LOG_PATH`` (optional file sink with 50 MB rotation)

    Parameters
    ----------
    service:
        Application/service name added to every log record.
    suppress_loggers:
        Logger names to suppress to WARNING level.
    sanitizer:
        Sanitizer used for every record.  Defaults to the process-wide one.
    """
    level = os.environ.get("LOG_LEVEL") or get_log_level()
    json_logs = os.environ.get("JSON_LOGS", "1") != "0"

    configure_structlog(service=service, level=level, json_logs=json_logs, sanitizer=sanitizer)

    for name in suppress_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    log_path = os.environ.get("LOG_PATH")
    if log_path:
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=50 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        json_renderer = structlog.processors.JSONRenderer(serializer=_orjson_serializer)
        file_formatter = structlog.stdlib.ProcessorFormatter(
            processors=_build_formatter_processors(json_renderer),
            foreign_pre_chain=_build_shared_processors(
                service, SanitizingProcessor(sanitizer)
            ),
        )
        file_handler.setFormatter(file_formatter)
        logging.getLogger().addHandler(file_handler)

    def _log_exception(
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_traceback: Any,
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        structlog.get_logger("maskguru.excepthook").error(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback),
        )

    sys.excepthook = _log_exception
