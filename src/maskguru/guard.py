"""Time-boxed pattern substitution.

Patterns run one after another; the elapsed time is checked before each
pattern and the remaining patterns are skipped once the budget is spent.
A pattern that raises is skipped on its own.  Any other failure returns
the input untouched.  Callers truncate long strings with :func:`truncate`
first, which bounds the work a single pattern can do.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable, Mapping

from maskguru.constants import MAX_STRING_LENGTH, REGEX_TIMEOUT_MS, TRUNCATED_MARKER
from maskguru.errors import ErrorKind, MaskguruError, handle_error


def pattern_tag(name: str) -> str:
    """Return the replacement tag for pattern *name* (``apiKey`` -> ``[APIKEY]``)."""
    return f"[{name.upper()}]"


def truncate(text: str, max_length: int = MAX_STRING_LENGTH) -> str:
    """Cut *text* to *max_length* characters and append the truncation marker."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + TRUNCATED_MARKER


def apply_patterns(
    text: str,
    patterns: Mapping[str, re.Pattern[str]],
    timeout_ms: float = REGEX_TIMEOUT_MS,
    *,
    clock: Callable[[], float] = time.perf_counter,
) -> str:
    """Replace every match of every pattern in *text* with its tag.

    Parameters
    ----------
    text:
        The (already truncated) input.
    patterns:
        Name -> compiled pattern, applied in insertion order.
    timeout_ms:
        Wall-clock budget for the whole pipeline.
    clock:
        Monotonic clock returning seconds.
    """
    started = clock()
    result = text
    try:
        for name, pattern in patterns.items():
            if (clock() - started) * 1000 > timeout_ms:
                handle_error(
                    MaskguruError(
                        ErrorKind.REGEX_TIMEOUT,
                        f"pattern budget of {timeout_ms}ms exceeded, skipping remaining patterns",
                    ),
                    "regex timeout",
                )
                break
            tag = pattern_tag(name)
            try:
                result = pattern.sub(lambda _m, tag=tag: tag, result)
            except Exception as exc:
                handle_error(
                    MaskguruError(ErrorKind.REGEX_ERROR, f"pattern {name!r} failed", exc),
                    f"regex pattern {name}",
                )
                continue
    except Exception as exc:
        handle_error(
            MaskguruError(ErrorKind.REGEX_ERROR, "pattern pipeline failed", exc),
            "regex pipeline",
        )
        return text
    return result
