"""Diagnostics and debugging utilities."""

from .core import check_norm_drift, fidelity, max_abs_deviation, state_norm
from .debug_mode import debug_context, env_flag, is_debug_enabled, set_debug_enabled

__all__ = [
    "state_norm",
    "check_norm_drift",
    "fidelity",
    "max_abs_deviation",
    "env_flag",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
]
