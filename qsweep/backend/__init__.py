"""State-vector backend: initialization and gate application."""

from .accelerator import (
    AcceleratorSession,
    accelerator_session,
    apply_gate_accelerated,
    single_qubit_kernel,
)
from .statevector import (
    apply_gate,
    apply_two_qubit_gate,
    basis_state,
    norm_squared_sum,
    zero_state,
)
from .strategies import (
    AcceleratorStrategy,
    CompareStrategy,
    HostStrategy,
    SingleQubitStrategy,
    make_strategy,
)

__all__ = [
    "zero_state",
    "basis_state",
    "norm_squared_sum",
    "apply_gate",
    "apply_two_qubit_gate",
    "AcceleratorSession",
    "accelerator_session",
    "apply_gate_accelerated",
    "single_qubit_kernel",
    "SingleQubitStrategy",
    "HostStrategy",
    "AcceleratorStrategy",
    "CompareStrategy",
    "make_strategy",
]
