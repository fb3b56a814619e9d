"""Simulator configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Literal

import torch

from .diagnostics.debug_mode import env_flag

StrategyName = Literal["host", "accelerator", "compare"]
FallbackPolicy = Literal["error", "host"]

_STRATEGIES = ("host", "accelerator", "compare")
_FALLBACK_POLICIES = ("error", "host")
_COMPLEX_DTYPES = (torch.complex64, torch.complex128)


@dataclass(frozen=True)
class SimulatorConfig:
    """
    Configuration for running a circuit.

    Args:
        strategy: Single-qubit execution strategy. "host" contracts on the
            device holding the state, "accelerator" offloads to
            ``accelerator_device``, "compare" runs both and checks that they
            agree within ``compare_atol``. Two-qubit gates always run on the
            host path.
        accelerator_device: Device name used for offloading ("sv_cuda",
            "sv_mps", or "sv_cpu" to exercise the kernel without a GPU).
        accelerator_fallback: What to do when the accelerator cannot be
            used. "error" raises AcceleratorUnavailable; "host" logs a
            warning, counts the fallback and computes the gate on the host.
        persistent_session: Acquire the accelerator once per run instead of
            once per gate.
        compile_kernel: Compile the accelerator kernel with torch.compile.
        block_size: Maximum number of output lanes per kernel launch.
        compare_atol: Tolerance used by the "compare" strategy.
        degenerate_threshold: Squared norm below which measurement reports a
            degenerate state.
        exact_phase: Use exp(i*pi/4) for the T gate instead of 0.7071+0.7071j.
        dtype: Complex dtype of the state vector.
    """

    strategy: StrategyName = "host"
    accelerator_device: str = "sv_cuda"
    accelerator_fallback: FallbackPolicy = "error"
    persistent_session: bool = False
    compile_kernel: bool = False
    block_size: int = 1 << 20
    compare_atol: float = 1e-6
    degenerate_threshold: float = 1e-12
    exact_phase: bool = False
    dtype: torch.dtype = torch.complex64

    def __post_init__(self) -> None:
        if self.strategy not in _STRATEGIES:
            raise ValueError(
                f"Unknown strategy {self.strategy!r}. Supported: {list(_STRATEGIES)}"
            )
        if self.accelerator_fallback not in _FALLBACK_POLICIES:
            raise ValueError(
                f"Unknown accelerator_fallback {self.accelerator_fallback!r}. "
                f"Supported: {list(_FALLBACK_POLICIES)}"
            )
        if self.block_size < 1:
            raise ValueError("block_size must be >= 1.")
        if self.compare_atol < 0.0:
            raise ValueError("compare_atol must be non-negative.")
        if self.degenerate_threshold < 0.0:
            raise ValueError("degenerate_threshold must be non-negative.")
        if self.dtype not in _COMPLEX_DTYPES:
            raise ValueError(
                f"dtype must be torch.complex64 or torch.complex128, got {self.dtype}"
            )

    @classmethod
    def from_env(cls, **overrides: object) -> "SimulatorConfig":
        """
        Build a config from ``QSWEEP_*`` environment variables.

        Recognized variables: QSWEEP_STRATEGY, QSWEEP_ACCELERATOR_DEVICE,
        QSWEEP_ACCELERATOR_FALLBACK, QSWEEP_PERSISTENT_SESSION,
        QSWEEP_COMPILE_KERNEL, QSWEEP_EXACT_PHASE. Keyword overrides win over
        the environment.
        """
        values: dict[str, object] = {}
        strategy = os.getenv("QSWEEP_STRATEGY")
        if strategy:
            values["strategy"] = strategy.strip().lower()
        accelerator = os.getenv("QSWEEP_ACCELERATOR_DEVICE")
        if accelerator:
            values["accelerator_device"] = accelerator.strip()
        fallback = os.getenv("QSWEEP_ACCELERATOR_FALLBACK")
        if fallback:
            values["accelerator_fallback"] = fallback.strip().lower()
        values["persistent_session"] = env_flag("QSWEEP_PERSISTENT_SESSION")
        values["compile_kernel"] = env_flag("QSWEEP_COMPILE_KERNEL")
        values["exact_phase"] = env_flag("QSWEEP_EXACT_PHASE")

        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown SimulatorConfig fields: {sorted(unknown)}")
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]

    def with_options(self, **changes: object) -> "SimulatorConfig":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)  # type: ignore[arg-type]
