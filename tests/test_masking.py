"""Tests for maskguru.masking."""

from __future__ import annotations

import pytest

from maskguru.cache import LRUCache
from maskguru.masking import ValueMasker


class TestValueMasker:
    @pytest.mark.parametrize(
        ("value", "key", "expected"),
        [
            ("user@example.com", "email", "use***@example.com"),
            ("admin@test.co.kr", "userEmail", "adm***@test.co.kr"),
            ("abc@example.com", "email", "***@example.com"),
            ("a@b.io", "EMAIL", "***@b.io"),
            ("user@", "email", "***"),
            ("not-an-email", "email", "no***"),
            ("mypassword123", "password", "my***"),
            ("pw", "password", "***"),
            ("hunter2", "pwd", "hu***"),
            ("abcdef", "apiKey", "ab***"),
            ("ab", "token", "***"),
            ("", "token", "***"),
            (12345, "pin", "12***"),
            (None, "token", "***"),
        ],
    )
    def test_strategies(self, value: object, key: str, expected: str) -> None:
        assert ValueMasker().mask(value, key) == expected

    def test_without_key(self) -> None:
        assert ValueMasker().mask("secret") == "se***"

    def test_unprintable_value(self) -> None:
        class Unprintable:
            def __str__(self) -> str:
                raise RuntimeError("nope")

        assert ValueMasker().mask(Unprintable(), "token") == "***"

    def test_caches_by_value_and_key(self) -> None:
        masker = ValueMasker(LRUCache(10))
        masker.mask("user@example.com", "email")
        masker.mask("user@example.com", "token")
        assert "user@example.com|email" in masker.cache
        assert "user@example.com|token" in masker.cache
        assert masker.mask("user@example.com", "token") == "us***"

    def test_cache_is_bounded(self) -> None:
        masker = ValueMasker(LRUCache(2))
        for value in ("aaa", "bbb", "ccc"):
            masker.mask(value, "token")
        assert len(masker.cache) == 2
