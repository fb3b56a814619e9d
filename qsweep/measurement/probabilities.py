"""Probability extraction from a final state vector."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List

import torch

from ..backend.statevector import infer_n_qubits, norm_squared_sum
from ..errors import DegenerateState
from ..logging import get_logger

logger = get_logger(__name__)

DEFAULT_DEGENERATE_THRESHOLD = 1e-12


@dataclass(frozen=True, eq=False)
class ProbabilityTable:
    """
    Normalized probabilities over the computational basis.

    Attributes
    ----------
    probabilities:
        Real tensor of length 2**n_qubits, index-aligned with the state.
    n_qubits:
        Number of qubits of the measured state.
    norm_squared:
        Squared norm of the state before renormalization.
    degenerate:
        True when the norm was below the threshold; ``probabilities`` is
        then all zeros.
    """

    probabilities: torch.Tensor
    n_qubits: int
    norm_squared: float
    degenerate: bool = False

    def __len__(self) -> int:
        return self.probabilities.shape[0]

    def __getitem__(self, index: int) -> float:
        return float(self.probabilities[index])

    def __iter__(self) -> Iterator[float]:
        return iter(self.tolist())

    def tolist(self) -> List[float]:
        return self.probabilities.detach().cpu().tolist()

    def bitstring(self, index: int) -> str:
        """Basis label of ``index``, most significant qubit first."""
        return format(index, f"0{self.n_qubits}b")

    def as_dict(self) -> Dict[str, float]:
        """Map each basis label (e.g. "01") to its probability."""
        return {self.bitstring(i): p for i, p in enumerate(self.tolist())}

    def format_lines(self, precision: int = 5) -> List[str]:
        """Render one ``State |b>: p`` line per basis state."""
        return [
            f"State |{self.bitstring(i)}>: {p:.{precision}f}"
            for i, p in enumerate(self.tolist())
        ]


def compute_probabilities(
    state: torch.Tensor,
    threshold: float = DEFAULT_DEGENERATE_THRESHOLD,
    strict: bool = False,
) -> ProbabilityTable:
    """
    Convert a state vector into a normalized probability table.

    Computes S = sum |amp|^2 and returns |amp_i|^2 / S for every index. The
    state may have drifted from unit norm; this is where it is corrected.

    Parameters
    ----------
    state:
        Complex state vector of shape (2**n_qubits,).
    threshold:
        If S is below this value the state is degenerate: a warning is
        logged and an all-zero table flagged ``degenerate=True`` is returned
        instead of dividing by a near-zero norm.
    strict:
        Raise DegenerateState instead of returning the all-zero table.

    Returns
    -------
    ProbabilityTable
        Entries are >= 0 and sum to 1 within floating-point tolerance,
        unless degenerate.

    Raises
    ------
    DegenerateState
        If strict is True and the norm is below threshold.
    ValueError
        If the state is not a 1-D complex vector of power-of-two length.
    """
    n_qubits = infer_n_qubits(state)
    norm_sq = norm_squared_sum(state)
    real_dtype = state.real.dtype

    if norm_sq < threshold:
        if strict:
            raise DegenerateState(norm_sq, threshold)
        logger.warning(
            "Degenerate state: squared norm %.3e below %.1e; returning all-zero probabilities",
            norm_sq,
            threshold,
        )
        probs = torch.zeros(state.shape[0], dtype=real_dtype, device=state.device)
        return ProbabilityTable(probs, n_qubits, norm_sq, degenerate=True)

    magnitudes = state.abs().to(torch.float64)
    probs = (magnitudes * magnitudes / norm_sq).to(real_dtype).contiguous()
    return ProbabilityTable(probs, n_qubits, norm_sq)


__all__ = ["ProbabilityTable", "compute_probabilities", "DEFAULT_DEGENERATE_THRESHOLD"]
