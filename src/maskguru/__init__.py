"""maskguru — PII-safe sanitizing layer for structlog with a loguru-style API."""

from maskguru.api import (
    add_sensitive_key,
    add_sensitive_patterns,
    clear_caches,
    configure_sanitizer,
    default_sanitizer,
    get_sensitive_keys,
    get_sensitive_patterns,
    remove_sensitive_key,
    reset_sensitive_keys,
    reset_sensitive_patterns,
    sanitize,
    set_sensitive_keys,
    set_sensitive_pattern_warnings,
    set_sensitive_patterns,
)
from maskguru.config import configure_structlog, setup_structlog
from maskguru.constants import DEFAULT_SENSITIVE_KEYS, DEFAULT_SENSITIVE_PATTERNS
from maskguru.core import Logger, logger
from maskguru.errors import ErrorKind, MaskguruError
from maskguru.levels import get_log_level, set_log_level, should_log
from maskguru.processors import add_syslog_severity, filter_by_log_level, normalize_level
from maskguru.redaction import SanitizingProcessor
from maskguru.sanitizer import SanitizationContext, Sanitizer, ValueKind, classify
from maskguru.settings import SanitizerSettings

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_SENSITIVE_KEYS",
    "DEFAULT_SENSITIVE_PATTERNS",
    "ErrorKind",
    "Logger",
    "MaskguruError",
    "SanitizationContext",
    "Sanitizer",
    "SanitizerSettings",
    "SanitizingProcessor",
    "ValueKind",
    "add_sensitive_key",
    "add_sensitive_patterns",
    "add_syslog_severity",
    "classify",
    "clear_caches",
    "configure_sanitizer",
    "configure_structlog",
    "default_sanitizer",
    "filter_by_log_level",
    "get_log_level",
    "get_sensitive_keys",
    "get_sensitive_patterns",
    "logger",
    "normalize_level",
    "remove_sensitive_key",
    "reset_sensitive_keys",
    "reset_sensitive_patterns",
    "sanitize",
    "set_log_level",
    "set_sensitive_keys",
    "set_sensitive_pattern_warnings",
    "set_sensitive_patterns",
    "setup_structlog",
    "should_log",
]
