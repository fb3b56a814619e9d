"""Exception types raised by qsweep.

Each error also derives from the builtin exception a caller would
naturally catch, so ``except ValueError`` keeps working for invalid qubit
counts and indices.
"""

from __future__ import annotations


class QSweepError(Exception):
    """Base class for all qsweep errors."""


class InvalidDimension(QSweepError, ValueError):
    """Qubit count is zero, negative, or too large to address 2**n amplitudes."""


class OutOfRangeTarget(QSweepError, ValueError):
    """A target or control qubit index lies outside [0, n_qubits)."""


class InvalidInstruction(QSweepError, ValueError):
    """An instruction line names an unknown gate or carries unusable targets."""


class DegenerateState(QSweepError, ArithmeticError):
    """The state norm is too small to renormalize into probabilities."""

    def __init__(self, norm_squared: float, threshold: float) -> None:
        super().__init__(
            f"State is degenerate: squared norm {norm_squared:.3e} is below "
            f"threshold {threshold:.3e}."
        )
        self.norm_squared = norm_squared
        self.threshold = threshold


class AcceleratorUnavailable(QSweepError, RuntimeError):
    """The accelerator device or its kernel could not be acquired or launched."""


class StrategyMismatch(QSweepError, RuntimeError):
    """Host and accelerator strategies disagreed beyond the configured tolerance."""

    def __init__(self, max_deviation: float, atol: float) -> None:
        super().__init__(
            f"Host and accelerator results differ by {max_deviation:.3e} "
            f"(tolerance {atol:.3e})."
        )
        self.max_deviation = max_deviation
        self.atol = atol


__all__ = [
    "QSweepError",
    "InvalidDimension",
    "OutOfRangeTarget",
    "InvalidInstruction",
    "DegenerateState",
    "AcceleratorUnavailable",
    "StrategyMismatch",
]
