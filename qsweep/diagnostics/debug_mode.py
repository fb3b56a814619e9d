"""Debug mode switch for qsweep.

When enabled, every gate application checks how far the state norm has
drifted from 1 and logs a warning past the drift tolerance.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator

_DEBUG_ENV_VAR = "QSWEEP_DEBUG"
_TRUTHY = ("1", "true", "yes", "on")


def env_flag(name: str, default: str = "0") -> bool:
    """Interpret an environment variable as a boolean switch."""
    return os.getenv(name, default).strip().lower() in _TRUTHY


_debug_enabled: bool = env_flag(_DEBUG_ENV_VAR)


def is_debug_enabled() -> bool:
    """
    Return whether debug mode is currently enabled.

    Debug mode can be toggled via set_debug_enabled(...) or the
    QSWEEP_DEBUG environment variable.
    """
    return _debug_enabled


def set_debug_enabled(enabled: bool) -> None:
    """Globally enable or disable debug mode."""
    global _debug_enabled
    _debug_enabled = bool(enabled)


@contextmanager
def debug_context(enabled: bool = True) -> Iterator[None]:
    """
    Context manager to temporarily enable or disable debug mode.

    Example
    -------
    >>> with debug_context(True):
    ...     state = circuit.run()
    """
    global _debug_enabled
    prev = _debug_enabled
    _debug_enabled = bool(enabled)
    try:
        yield
    finally:
        _debug_enabled = prev
