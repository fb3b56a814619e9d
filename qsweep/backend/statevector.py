"""Host state-vector backend.

A state vector for n qubits is a 1-D complex tensor of length 2**n. Index
bit k (little-endian) is qubit k, so in a 2-qubit state |q1 q0> qubit 0 is
the rightmost bit.

Every gate application returns a new tensor; the input is never written,
because each output amplitude reads two (or four) input amplitudes.
"""

from __future__ import annotations

import math
import operator
import sys

import torch

from ..core.device import Device, resolve_device
from ..diagnostics import check_norm_drift, is_debug_enabled
from ..errors import InvalidDimension, OutOfRangeTarget

# Largest n for which 1 << n is still a machine-sized integer.
_MAX_INDEX_BITS = sys.maxsize.bit_length()


def check_dimension(n_qubits: int, dtype: torch.dtype = torch.complex64) -> int:
    """
    Validate a qubit count and return it as an int.

    Raises:
        InvalidDimension: If n_qubits < 1 or 2**n_qubits amplitudes of
            ``dtype`` would not fit in addressable memory.
    """
    try:
        n_qubits = operator.index(n_qubits)
    except TypeError:
        raise InvalidDimension(
            f"n_qubits must be an integer, got {type(n_qubits).__name__}"
        ) from None

    if n_qubits < 1:
        raise InvalidDimension(f"n_qubits must be >= 1, got {n_qubits}")

    itemsize = torch.empty((), dtype=dtype).element_size()
    if n_qubits >= _MAX_INDEX_BITS or (1 << n_qubits) * itemsize > sys.maxsize:
        raise InvalidDimension(
            f"n_qubits={n_qubits} needs 2**{n_qubits} amplitudes of {itemsize} "
            "bytes, which exceeds addressable memory"
        )
    return n_qubits


def infer_n_qubits(state: torch.Tensor, n_qubits: int | None = None) -> int:
    """
    Return the qubit count of a state vector, checking it against its length.

    Raises:
        ValueError: If the state is not 1-D complex or its length is not
            2**n_qubits.
    """
    if not torch.is_complex(state):
        raise ValueError(f"state must be complex dtype, got {state.dtype}")
    if state.dim() != 1:
        raise ValueError(f"state must be 1-D, got shape {tuple(state.shape)}")

    dim = state.shape[0]
    if n_qubits is None:
        n_qubits = int(math.log2(dim)) if dim > 0 else 0
        if 2**n_qubits != dim:
            raise ValueError(
                f"state dimension {dim} is not a power of 2. "
                "Please specify n_qubits explicitly."
            )
    elif 2**n_qubits != dim:
        raise ValueError(
            f"state dimension {dim} does not match 2**n_qubits = {2**n_qubits}"
        )
    return n_qubits


def check_qubit(qubit: int, n_qubits: int, label: str = "qubit") -> None:
    """Raise OutOfRangeTarget unless 0 <= qubit < n_qubits."""
    if qubit < 0 or qubit >= n_qubits:
        raise OutOfRangeTarget(
            f"{label} index {qubit} out of range [0, {n_qubits})"
        )


def zero_state(
    n_qubits: int,
    device: Device | torch.device | str | None = None,
    dtype: torch.dtype | None = None,
) -> torch.Tensor:
    """
    Create the all-zero state |0...0> for n_qubits.

    Args:
        n_qubits: Number of qubits. Must be >= 1.
        device: Device specification. Can be Device, str, torch.device, or None.
        dtype: Complex dtype. Defaults to torch.complex64.

    Returns:
        A complex tensor of shape (2**n_qubits,) with 1+0j at index 0.

    Raises:
        InvalidDimension: If n_qubits is < 1 or too large to allocate.
    """
    return basis_state(n_qubits, 0, device=device, dtype=dtype)


def basis_state(
    n_qubits: int,
    index: int,
    device: Device | torch.device | str | None = None,
    dtype: torch.dtype | None = None,
) -> torch.Tensor:
    """
    Create the computational basis state |index> for n_qubits.

    Raises:
        InvalidDimension: If n_qubits is < 1 or too large to allocate.
        ValueError: If index is outside [0, 2**n_qubits).
    """
    if dtype is None:
        dtype = torch.complex64
    n_qubits = check_dimension(n_qubits, dtype)
    qdevice = resolve_device(device)

    dim = 1 << n_qubits
    if index < 0 or index >= dim:
        raise ValueError(f"basis index {index} out of range [0, {dim})")

    state = torch.zeros(dim, dtype=dtype, device=qdevice.as_torch_device())
    state[index] = 1.0 + 0.0j
    return state


def norm_squared_sum(state: torch.Tensor) -> float:
    """
    Return sum |amp|^2 over all amplitudes.

    Accumulates in double precision so that small norms are not lost to
    float32 rounding before the degeneracy check.
    """
    magnitudes = state.abs().to(torch.float64)
    return float((magnitudes * magnitudes).sum())


def _check_gate(gate: torch.Tensor, size: int) -> None:
    if gate.shape != (size, size):
        raise ValueError(f"gate must have shape ({size}, {size}), got {tuple(gate.shape)}")


def apply_gate(
    state: torch.Tensor,
    gate: torch.Tensor,
    qubit: int,
    n_qubits: int | None = None,
) -> torch.Tensor:
    """
    Apply a single-qubit gate to one qubit of the state vector (host path).

    Equivalent to sweeping every output index i with b = bit ``qubit`` of i::

        new[i] = gate[b][0] * state[i & ~m] + gate[b][1] * state[i | m]

    where m = 1 << qubit. The sweep is evaluated pairwise: the state is
    viewed as (left, 2, right) with the middle axis being the target bit,
    and the gate is contracted against that axis.

    Args:
        state: Complex state vector of shape (2**n_qubits,).
        gate: Single-qubit gate matrix of shape (2, 2).
        qubit: Target qubit (0 = least significant bit).
        n_qubits: Number of qubits. If None, inferred from the state length.

    Returns:
        A new state vector with the gate applied.

    Raises:
        ValueError: If the gate shape or state dimension is invalid.
        OutOfRangeTarget: If the qubit index is not in [0, n_qubits).
    """
    _check_gate(gate, 2)
    n_qubits = infer_n_qubits(state, n_qubits)
    check_qubit(qubit, n_qubits)

    new_state = _apply_gate_pairs(state, gate, qubit, n_qubits)

    if is_debug_enabled():
        check_norm_drift(new_state, f"single-qubit gate on qubit {qubit}")

    return new_state


def _apply_gate_pairs(
    state: torch.Tensor,
    gate: torch.Tensor,
    qubit: int,
    n_qubits: int,
) -> torch.Tensor:
    dim = state.shape[0]
    left_size = 2 ** (n_qubits - 1 - qubit)
    right_size = 2**qubit

    gate = gate.to(device=state.device, dtype=state.dtype)
    state_view = state.contiguous().reshape(left_size, 2, right_size)
    transformed = torch.einsum("lqr,oq->lor", state_view, gate)
    return transformed.reshape(dim)


def _swap_gate_qubit_order(gate: torch.Tensor) -> torch.Tensor:
    """Swap qubit order in a two-qubit gate matrix."""
    gate_view = gate.reshape(2, 2, 2, 2)
    return gate_view.permute(1, 0, 3, 2).reshape(4, 4).contiguous()


def apply_two_qubit_gate(
    state: torch.Tensor,
    gate: torch.Tensor,
    qubit1: int,
    qubit2: int,
    n_qubits: int | None = None,
) -> torch.Tensor:
    """
    Apply a two-qubit gate to (qubit1, qubit2) of the state vector.

    The gate's row/column index is ``(bit_qubit1 << 1) | bit_qubit2``: the
    high bit of the 2-bit pattern belongs to qubit1. For CNOT, qubit1 is the
    control and qubit2 the target. For every output index i::

        new[i] = sum_c gate[r][c] * state[i with (qubit1, qubit2) set to c]

    with r the 2-bit pattern read from i.

    Args:
        state: Complex state vector of shape (2**n_qubits,).
        gate: Gate matrix of shape (4, 4).
        qubit1: First qubit (high bit of the gate index).
        qubit2: Second qubit (low bit of the gate index).
        n_qubits: Number of qubits. If None, inferred from the state length.

    Returns:
        A new state vector with the gate applied.

    Raises:
        ValueError: If the gate shape is wrong or the qubits coincide.
        OutOfRangeTarget: If either index is not in [0, n_qubits).
    """
    _check_gate(gate, 4)
    n_qubits = infer_n_qubits(state, n_qubits)

    if qubit1 == qubit2:
        raise ValueError(
            f"qubit1 and qubit2 must be distinct, got {qubit1} and {qubit2}"
        )
    check_qubit(qubit1, n_qubits, "qubit1")
    check_qubit(qubit2, n_qubits, "qubit2")

    new_state = _apply_two_qubit_gate_einsum(state, gate, qubit1, qubit2, n_qubits)

    if is_debug_enabled():
        check_norm_drift(new_state, f"two-qubit gate on qubits ({qubit1}, {qubit2})")

    return new_state


def _apply_two_qubit_gate_einsum(
    state: torch.Tensor,
    gate: torch.Tensor,
    qubit1: int,
    qubit2: int,
    n_qubits: int,
) -> torch.Tensor:
    dim = state.shape[0]
    gate = gate.to(device=state.device, dtype=state.dtype)
    state_flat = state.contiguous()

    q_hi, q_lo = (qubit1, qubit2) if qubit1 > qubit2 else (qubit2, qubit1)
    gate_matrix = gate if qubit1 > qubit2 else _swap_gate_qubit_order(gate)

    left_size = 2 ** (n_qubits - q_hi - 1)
    mid_size = 2 ** (q_hi - q_lo - 1)
    right_size = 2**q_lo

    if mid_size == 1:
        # Adjacent qubits: the two bits form one axis of size 4.
        state_view = state_flat.reshape(left_size, 4, right_size)
        transformed = torch.einsum("lqr,oq->lor", state_view, gate_matrix)
    else:
        state_view = state_flat.reshape(left_size, 2, mid_size, 2, right_size)
        gate_view = gate_matrix.reshape(2, 2, 2, 2)
        transformed = torch.einsum("limjr,opij->lompr", state_view, gate_view)

    return transformed.reshape(dim)


__all__ = [
    "check_dimension",
    "infer_n_qubits",
    "check_qubit",
    "zero_state",
    "basis_state",
    "norm_squared_sum",
    "apply_gate",
    "apply_two_qubit_gate",
]
