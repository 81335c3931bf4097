"""Tests for maskguru.api (module-level entry points)."""

from __future__ import annotations

import logging
import re

import pytest

import maskguru
from maskguru.api import default_sanitizer
from maskguru.constants import DEFAULT_SENSITIVE_PATTERNS
from maskguru.sanitizer import Sanitizer


class TestSanitize:
    def test_concrete_scenario(self) -> None:
        result = maskguru.sanitize(
            {
                "password": "mypassword123",
                "email": "user@example.com",
                "note": "call 010-1234-5678",
            }
        )
        assert result == {
            "password": "my***",
            "email": "use***@example.com",
            "note": "call [PHONE]",
        }

    def test_never_raises(self) -> None:
        class Broken(Exception):
            def __str__(self) -> str:
                raise RuntimeError("no str")

        assert maskguru.sanitize(Broken()) == "[SANITIZE_ERROR]"


class TestKeyFunctions:
    def test_add_and_remove(self) -> None:
        maskguru.add_sensitive_key("tenant")
        assert "tenant" in maskguru.get_sensitive_keys()
        assert maskguru.sanitize({"tenant": "acme"}) == {"tenant": "ac***"}
        maskguru.remove_sensitive_key("tenant")
        assert maskguru.sanitize({"tenant": "acme"}) == {"tenant": "acme"}

    def test_set_and_reset(self) -> None:
        maskguru.set_sensitive_keys(["foo"])
        assert maskguru.get_sensitive_keys() == ["foo"]
        assert maskguru.sanitize({"password": "hunter2"}) == {"password": "hunter2"}
        maskguru.reset_sensitive_keys()
        assert maskguru.sanitize({"password": "hunter2"}) == {"password": "hu***"}

    def test_get_returns_copy(self) -> None:
        keys = maskguru.get_sensitive_keys()
        keys.clear()
        assert maskguru.get_sensitive_keys()


class TestPatternFunctions:
    def test_add(self) -> None:
        maskguru.add_sensitive_patterns({"codename": re.compile("falcon")})
        assert maskguru.sanitize("project falcon") == "project [CODENAME]"
        assert maskguru.sanitize("user@example.com") == "[EMAIL]"

    def test_set_replaces(self) -> None:
        maskguru.set_sensitive_pattern_warnings(True)
        maskguru.set_sensitive_patterns({"codename": re.compile("falcon")})
        assert list(maskguru.get_sensitive_patterns()) == ["codename"]
        assert maskguru.sanitize("user@example.com falcon") == "user@example.com [CODENAME]"

    def test_reset(self) -> None:
        maskguru.set_sensitive_pattern_warnings(True)
        maskguru.set_sensitive_patterns({})
        maskguru.reset_sensitive_patterns()
        assert list(maskguru.get_sensitive_patterns()) == list(DEFAULT_SENSITIVE_PATTERNS)


class TestClearCaches:
    def test_clears_identity_and_mask_caches(self) -> None:
        data = {"password": "hunter2"}
        first = maskguru.sanitize(data)
        assert maskguru.sanitize(data) is first
        maskguru.clear_caches()
        assert len(default_sanitizer.masker.cache) == 0
        assert maskguru.sanitize(data) is not first


class TestConfigureSanitizer:
    def test_defaults_to_process_wide_sanitizer(self) -> None:
        assert maskguru.configure_sanitizer() is default_sanitizer

    def test_applies_keys(self) -> None:
        target = maskguru.configure_sanitizer(Sanitizer(), sensitive_keys=["foo"])
        assert target.get_sensitive_keys() == ["foo"]

    def test_empty_patterns_are_ignored(self) -> None:
        target = maskguru.configure_sanitizer(Sanitizer(), sensitive_patterns={})
        assert len(target.get_sensitive_patterns()) == len(DEFAULT_SENSITIVE_PATTERNS)

    def test_suppression_applies_to_same_call(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="maskguru"):
            target = maskguru.configure_sanitizer(
                Sanitizer(),
                sensitive_patterns={"custom": re.compile("x")},
                suppress_pattern_warnings=True,
            )
        assert list(target.get_sensitive_patterns()) == ["custom"]
        assert caplog.text == ""

    def test_warns_without_suppression(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="maskguru"):
            maskguru.configure_sanitizer(
                Sanitizer(), sensitive_patterns={"custom": re.compile("x")}
            )
        assert "Default sensitive patterns removed" in caplog.text
