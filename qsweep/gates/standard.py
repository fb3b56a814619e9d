"""Standard gate library: the fixed 2x2 and 4x4 unitaries qsweep can apply."""

from __future__ import annotations

import cmath
import math
from enum import Enum
from typing import Callable, Dict

import torch

# Fixed approximation of exp(i*pi/4) used by the T gate unless exact_phase
# is requested.
T_PHASE_APPROX = complex(0.7071, 0.7071)


class Gate(Enum):
    """Closed set of gates understood by the simulator."""

    I = "I"
    X = "X"
    Y = "Y"
    Z = "Z"
    H = "H"
    T = "T"
    CNOT = "CNOT"
    SWAP = "SWAP"

    @property
    def arity(self) -> int:
        """Number of qubit indices an instruction with this gate carries."""
        return 2 if self in (Gate.CNOT, Gate.SWAP) else 1

    @classmethod
    def from_name(cls, name: str | "Gate") -> "Gate":
        """
        Look up a gate by name, case-insensitively.

        Accepts the aliases used by the interactive tool ("id" for I).

        Raises:
            ValueError: If the name is not a known gate.
        """
        if isinstance(name, Gate):
            return name
        key = name.strip().upper()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            known = ", ".join(g.value for g in cls)
            raise ValueError(
                f"Unknown gate name {name!r}. Supported gates: {known}."
            ) from None


_ALIASES = {"ID": "I", "CX": "CNOT"}


def _defaults(
    dtype: torch.dtype | None, device: torch.device | None
) -> tuple[torch.dtype, torch.device]:
    return (
        torch.complex64 if dtype is None else dtype,
        torch.device("cpu") if device is None else device,
    )


def I(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """
    Identity gate (single-qubit).

    Args:
        dtype: Complex dtype for the gate matrix. Defaults to torch.complex64.
        device: PyTorch device. Defaults to torch.device("cpu").

    Returns:
        A (2, 2) complex tensor.
    """
    dtype, device = _defaults(dtype, device)
    return torch.eye(2, dtype=dtype, device=device)


def X(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-X gate (bit flip)."""
    dtype, device = _defaults(dtype, device)
    return torch.tensor([[0.0, 1.0], [1.0, 0.0]], dtype=dtype, device=device)


def Y(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-Y gate."""
    dtype, device = _defaults(dtype, device)
    return torch.tensor([[0.0, -1.0j], [1.0j, 0.0]], dtype=dtype, device=device)


def Z(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-Z gate (phase flip)."""
    dtype, device = _defaults(dtype, device)
    return torch.tensor([[1.0, 0.0], [0.0, -1.0]], dtype=dtype, device=device)


def H(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Hadamard gate, entries +-1/sqrt(2)."""
    dtype, device = _defaults(dtype, device)
    sqrt2_inv = 1.0 / math.sqrt(2.0)
    return torch.tensor(
        [[sqrt2_inv, sqrt2_inv], [sqrt2_inv, -sqrt2_inv]], dtype=dtype, device=device
    )


def T(
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
    exact_phase: bool = False,
) -> torch.Tensor:
    """
    T gate (pi/8 gate).

    By default the lower-right entry is the fixed approximation
    0.7071 + 0.7071j, which is unitary only to about 1e-4. Pass
    ``exact_phase=True`` for exp(i*pi/4) to full precision.

    Args:
        dtype: Complex dtype for the gate matrix. Defaults to torch.complex64.
        device: PyTorch device. Defaults to torch.device("cpu").
        exact_phase: Use the exact transcendental phase.

    Returns:
        A (2, 2) complex tensor.
    """
    dtype, device = _defaults(dtype, device)
    phase = cmath.exp(1.0j * math.pi / 4.0) if exact_phase else T_PHASE_APPROX
    return torch.tensor([[1.0, 0.0], [0.0, phase]], dtype=dtype, device=device)


def CNOT(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """
    Controlled-NOT gate.

    Rows and columns are indexed by ``(control_bit << 1) | target_bit``, so
    the matrix swaps |10> and |11> and leaves |00>, |01> alone.

    Returns:
        A (4, 4) complex permutation matrix.
    """
    dtype, device = _defaults(dtype, device)
    return torch.tensor(
        [
            [1.0, 0.0, 0.0, 0.0],
            [0.0, 1.0, 0.0, 0.0],
            [0.0, 0.0, 0.0, 1.0],
            [0.0, 0.0, 1.0, 0.0],
        ],
        dtype=dtype,
        device=device,
    )


def SWAP(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """
    SWAP gate.

    Rows and columns are indexed by ``(first_bit << 1) | second_bit``; the
    matrix exchanges |01> and |10>.

    Returns:
        A (4, 4) complex permutation matrix.
    """
    dtype, device = _defaults(dtype, device)
    return torch.tensor(
        [
            [1.0, 0.0, 0.0, 0.0],
            [0.0, 0.0, 1.0, 0.0],
            [0.0, 1.0, 0.0, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ],
        dtype=dtype,
        device=device,
    )


_FACTORIES: Dict[Gate, Callable[..., torch.Tensor]] = {
    Gate.I: I,
    Gate.X: X,
    Gate.Y: Y,
    Gate.Z: Z,
    Gate.H: H,
    Gate.CNOT: CNOT,
    Gate.SWAP: SWAP,
}


def gate_matrix(
    gate: Gate | str,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
    exact_phase: bool = False,
) -> torch.Tensor:
    """
    Return the fixed matrix for a gate.

    Args:
        gate: A Gate member or its name.
        dtype: Complex dtype for the matrix. Defaults to torch.complex64.
        device: PyTorch device. Defaults to torch.device("cpu").
        exact_phase: Only affects T, see :func:`T`.

    Returns:
        A (2, 2) tensor for single-qubit gates, (4, 4) for CNOT and SWAP.
    """
    gate = Gate.from_name(gate)
    if gate is Gate.T:
        return T(dtype=dtype, device=device, exact_phase=exact_phase)
    return _FACTORIES[gate](dtype=dtype, device=device)


def is_unitary(matrix: torch.Tensor, atol: float = 1e-6) -> bool:
    """
    Check if a matrix is unitary within a given tolerance.

    A matrix U is unitary if U^dagger U = I.

    Args:
        matrix: Tensor of shape (..., n, n).
        atol: Absolute tolerance for the check.

    Returns:
        True if the matrix is unitary within tolerance.
    """
    if matrix.shape[-1] != matrix.shape[-2]:
        return False

    adjoint = matrix.conj().transpose(-1, -2)
    product = torch.matmul(adjoint, matrix)

    n = matrix.shape[-1]
    identity = torch.eye(n, dtype=matrix.dtype, device=matrix.device)
    if product.ndim > 2:
        identity = identity.expand(product.shape)

    diff = torch.abs(product - identity)
    return bool(torch.all(diff < atol).item())
