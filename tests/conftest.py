"""Shared fixtures for maskguru tests."""

from __future__ import annotations

import logging
import sys

import pytest
import structlog

from maskguru.api import default_sanitizer
from maskguru.levels import reset_log_level
from maskguru.sanitizer import Sanitizer

_ENV_VARS = (
    "MASKGURU_ENV",
    "PYTHON_ENV",
    "MASKGURU_LOG_LEVEL",
    "LOG_LEVEL",
    "JSON_LOGS",
    "LOG_PATH",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test as production with no level overrides."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging() -> None:  # type: ignore[misc]
    """Reset root logger handlers, level and excepthook after each test."""
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    original_excepthook = sys.excepthook

    yield  # type: ignore[misc]

    root.handlers[:] = original_handlers
    root.setLevel(original_level)
    sys.excepthook = original_excepthook


@pytest.fixture(autouse=True)
def _reset_structlog() -> None:  # type: ignore[misc]
    """Reset structlog configuration after each test."""
    yield  # type: ignore[misc]
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def _reset_maskguru_state() -> None:  # type: ignore[misc]
    """Restore the process-wide level and default sanitizer after each test."""
    yield  # type: ignore[misc]
    reset_log_level()
    default_sanitizer.reset_sensitive_keys()
    default_sanitizer.reset_sensitive_patterns()
    default_sanitizer.set_sensitive_pattern_warnings(False)


@pytest.fixture
def sanitizer() -> Sanitizer:
    """A sanitizer with its own registries and caches."""
    return Sanitizer()
