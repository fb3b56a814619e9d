"""Gate library."""

from .standard import (
    CNOT,
    SWAP,
    T_PHASE_APPROX,
    Gate,
    H,
    I,
    T,
    X,
    Y,
    Z,
    gate_matrix,
    is_unitary,
)

__all__ = [
    "Gate",
    "I",
    "X",
    "Y",
    "Z",
    "H",
    "T",
    "CNOT",
    "SWAP",
    "T_PHASE_APPROX",
    "gate_matrix",
    "is_unitary",
]
