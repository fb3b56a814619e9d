"""Numerical diagnostics for state vectors."""

from __future__ import annotations

import torch

from ..logging import get_logger

logger = get_logger(__name__)

NORM_DRIFT_TOLERANCE = 1e-4


def state_norm(state: torch.Tensor) -> torch.Tensor:
    """
    Compute the L2 norm of a state vector.

    Parameters
    ----------
    state:
        Complex tensor with shape (..., dim).

    Returns
    -------
    torch.Tensor
        Real tensor with shape (...) giving the norm for each batch element.

    Raises
    ------
    ValueError
        If state has fewer than 1 dimension.
    """
    if state.dim() < 1:
        raise ValueError("state_norm expects a tensor with at least 1 dimension.")

    norm_sq = (state.conj() * state).sum(dim=-1).real
    return torch.sqrt(norm_sq)


def check_norm_drift(
    state: torch.Tensor,
    context: str,
    atol: float = NORM_DRIFT_TOLERANCE,
) -> float:
    """
    Log a warning when the state norm has drifted from 1 by more than atol.

    Drift is expected (approximate T phase, float32 rounding) and is only
    corrected at measurement time, so this never raises.

    Returns
    -------
    float
        The absolute drift |norm - 1|.
    """
    drift = abs(float(state_norm(state).max()) - 1.0)
    if drift > atol:
        logger.warning("Norm drift %.3e after %s exceeds %.1e", drift, context, atol)
    return drift


def fidelity(state_a: torch.Tensor, state_b: torch.Tensor) -> torch.Tensor:
    """
    Fidelity |<a|b>|^2 between two pure state vectors.

    Raises
    ------
    ValueError
        If the shapes differ.
    """
    if state_a.shape != state_b.shape:
        raise ValueError("fidelity expects tensors with the same shape.")
    inner = (state_a.conj() * state_b).sum(dim=-1)
    return inner.abs() ** 2


def max_abs_deviation(state_a: torch.Tensor, state_b: torch.Tensor) -> float:
    """Largest amplitude-wise |a_i - b_i|, comparing on the device of state_a."""
    if state_a.shape != state_b.shape:
        raise ValueError(
            f"Cannot compare states of shape {tuple(state_a.shape)} "
            f"and {tuple(state_b.shape)}."
        )
    if state_a.numel() == 0:
        return 0.0
    diff = state_a - state_b.to(device=state_a.device, dtype=state_a.dtype)
    return float(diff.abs().max())
