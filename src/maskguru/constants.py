"""Built-in sensitive keys, sensitive patterns, markers and policy defaults.

Key names are matched as lower-cased *substrings* of property names, so
``"myApiKey"`` is caught by ``"apikey"``.  Patterns are tried in insertion
order and each match is replaced with ``[NAME]`` (``apiKey`` -> ``[APIKEY]``).
"""

from __future__ import annotations

import re
from types import MappingProxyType

DEFAULT_SENSITIVE_KEYS: tuple[str, ...] = (
    # auth
    "password",
    "pwd",
    "passwd",
    "token",
    "apiKey",
    "api_key",
    "accessToken",
    "refreshToken",
    "authToken",
    "authorization",
    # personal data
    "email",
    "phone",
    "phoneNumber",
    "mobile",
    "ssn",
    "socialSecurityNumber",
    "residentNumber",
    "resident_number",
    # payment
    "creditCard",
    "cardNumber",
    "card_number",
    # secrets
    "secret",
    "secretKey",
    "privateKey",
    "private_key",
    "sessionId",
    "session_id",
    "cookie",
    "cookies",
)

DEFAULT_SENSITIVE_PATTERNS: MappingProxyType[str, re.Pattern[str]] = MappingProxyType(
    {
        "email": re.compile(
            r"\b[A-Za-z0-9._%+-]{1,64}@[A-Za-z0-9.-]{1,255}\.[A-Z|a-z]{2,}\b",
            re.IGNORECASE | re.ASCII,
        ),
        "card": re.compile(
            r"\b\d{4}[\s\-./]?\d{4}[\s\-./]?\d{4}[\s\-./]?\d{3,4}\b",
            re.ASCII,
        ),
        "phone": re.compile(
            r"(\+82|0)[\s\-.]?\d{1,2}[\s\-.]?\d{3,4}[\s\-.]?\d{4}",
            re.ASCII,
        ),
        "ssn": re.compile(r"\b\d{6}[\s\-]?\d{7}\b", re.ASCII),
        "jwt": re.compile(
            r"Bearer\s+[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+",
            re.ASCII,
        ),
        "apiKey": re.compile(r"[a-zA-Z0-9]{32,}", re.ASCII),
        "password": re.compile(
            r"""password['":\s]*['"][^'"]*['"]""",
            re.IGNORECASE | re.ASCII,
        ),
    }
)

# Property names that are never recursed into (prototype pollution and
# attribute injection payloads).
UNSAFE_KEYS: frozenset[str] = frozenset(
    {
        "__proto__",
        "constructor",
        "prototype",
        "__class__",
        "__dict__",
        "__init__",
        "__globals__",
    }
)

MASK = "***"
MAX_DEPTH_MARKER = "[MAX_DEPTH]"
CIRCULAR_MARKER = "[CIRCULAR]"
TRUNCATED_MARKER = "... [TRUNCATED]"
UNSAFE_KEY_MARKER = "[UNSAFE_KEY]"
BUFFER_MARKER = "[BUFFER]"
BINARY_DATA_MARKER = "[BINARY_DATA]"
SANITIZE_ERROR_MARKER = "[SANITIZE_ERROR]"

MAX_DEPTH = 10
MAX_STRING_LENGTH = 5000
REGEX_TIMEOUT_MS = 100
MASK_CACHE_SIZE = 1000
IDENTITY_CACHE_SIZE = 1000
