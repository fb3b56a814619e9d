"""Pytest configuration and shared fixtures for qsweep tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Random normalized state vectors for equivalence checks
- A captured stream for qsweep log output
"""

import logging
import os
from io import StringIO
from typing import Callable, Iterator

import numpy as np
import pytest
import torch

from qsweep.diagnostics import set_debug_enabled, is_debug_enabled
from qsweep.logging import configure_logging


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(_seed())


@pytest.fixture(autouse=True)
def restore_debug_mode() -> Iterator[None]:
    """Tests that toggle debug mode never leak it into other tests."""
    original = is_debug_enabled()
    yield
    set_debug_enabled(original)


@pytest.fixture
def random_state(rng: np.random.Generator) -> Callable[..., torch.Tensor]:
    """Factory for random unit-norm state vectors.

    Example:
        state = random_state(4)  # complex64 tensor of length 16
    """

    def make(n_qubits: int, dtype: torch.dtype = torch.complex64) -> torch.Tensor:
        dim = 2**n_qubits
        amps = rng.normal(size=dim) + 1j * rng.normal(size=dim)
        amps /= np.linalg.norm(amps)
        return torch.from_numpy(amps).to(dtype)

    return make


@pytest.fixture
def log_stream() -> Iterator[StringIO]:
    """Route every qsweep logger to an in-memory stream at DEBUG level."""
    stream = StringIO()
    configure_logging(level=logging.DEBUG, stream=stream)
    try:
        yield stream
    finally:
        configure_logging(level=logging.WARNING)
