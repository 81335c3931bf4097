"""Development-mode detection."""

from __future__ import annotations

import os

_ENV_VARS = ("MASKGURU_ENV", "PYTHON_ENV")


def is_development() -> bool:
    """Return ``True`` when ``MASKGURU_ENV`` (or ``PYTHON_ENV``) is ``development``.

    Anything else, including an unset environment, counts as production.
    """
    for name in _ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value.strip().lower() == "development"
    return False
