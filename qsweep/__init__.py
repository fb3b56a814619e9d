"""qsweep - a PyTorch state-vector simulator with host and accelerator gate paths."""

__version__ = "0.1.0"

# Backend operations
from .backend import (
    AcceleratorStrategy,
    CompareStrategy,
    HostStrategy,
    SingleQubitStrategy,
    accelerator_session,
    apply_gate,
    apply_gate_accelerated,
    apply_two_qubit_gate,
    basis_state,
    make_strategy,
    norm_squared_sum,
    zero_state,
)

# Circuit model
from .circuit import Instruction, QuantumCircuit, SimulationResult
from .config import SimulatorConfig
from .core import Device, default_device, device

# Diagnostics
from .diagnostics import (
    debug_context,
    fidelity,
    is_debug_enabled,
    max_abs_deviation,
    set_debug_enabled,
    state_norm,
)
from .errors import (
    AcceleratorUnavailable,
    DegenerateState,
    InvalidDimension,
    InvalidInstruction,
    OutOfRangeTarget,
    QSweepError,
    StrategyMismatch,
)

# Gates
from .gates import CNOT, SWAP, Gate, H, I, T, X, Y, Z, gate_matrix, is_unitary
from .io import parse_instruction, read_instructions

# Measurement
from .measurement import ProbabilityTable, compute_probabilities

__all__ = [
    "__version__",
    # Core
    "Device",
    "device",
    "default_device",
    "SimulatorConfig",
    # Gates
    "Gate",
    "I",
    "X",
    "Y",
    "Z",
    "H",
    "T",
    "CNOT",
    "SWAP",
    "gate_matrix",
    "is_unitary",
    # Backend
    "zero_state",
    "basis_state",
    "norm_squared_sum",
    "apply_gate",
    "apply_gate_accelerated",
    "apply_two_qubit_gate",
    "accelerator_session",
    "SingleQubitStrategy",
    "HostStrategy",
    "AcceleratorStrategy",
    "CompareStrategy",
    "make_strategy",
    # Circuit
    "Instruction",
    "QuantumCircuit",
    "SimulationResult",
    "parse_instruction",
    "read_instructions",
    # Measurement
    "ProbabilityTable",
    "compute_probabilities",
    # Diagnostics
    "state_norm",
    "fidelity",
    "max_abs_deviation",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
    # Errors
    "QSweepError",
    "InvalidDimension",
    "OutOfRangeTarget",
    "InvalidInstruction",
    "DegenerateState",
    "AcceleratorUnavailable",
    "StrategyMismatch",
]
