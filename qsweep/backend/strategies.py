"""Interchangeable execution strategies for single-qubit gates.

All strategies share one contract: given a state vector, a 2x2 gate and a
target qubit, return a new state vector with the same index mapping. The
choice between them comes from :class:`qsweep.config.SimulatorConfig`,
never from the gate being applied.
"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager, nullcontext
from typing import ContextManager, Iterator, Optional, Protocol

import torch

from ..config import SimulatorConfig
from ..diagnostics import max_abs_deviation
from ..errors import AcceleratorUnavailable, StrategyMismatch
from ..logging import get_logger
from .accelerator import DEFAULT_BLOCK_SIZE, AcceleratorSession, accelerator_session, apply_gate_accelerated
from .statevector import apply_gate

logger = get_logger(__name__)


class SingleQubitStrategy(Protocol):
    """Protocol for single-qubit gate execution strategies."""

    name: str

    def apply(
        self, state: torch.Tensor, gate: torch.Tensor, qubit: int, n_qubits: int
    ) -> torch.Tensor:
        """Return a new state with ``gate`` applied to ``qubit``."""
        ...

    def session(self) -> ContextManager[None]:
        """Resources held for the duration of one circuit run."""
        ...


class HostStrategy:
    """Sequential contraction on the device that holds the state."""

    name = "host"

    def apply(
        self, state: torch.Tensor, gate: torch.Tensor, qubit: int, n_qubits: int
    ) -> torch.Tensor:
        return apply_gate(state, gate, qubit=qubit, n_qubits=n_qubits)

    def session(self) -> ContextManager[None]:
        return nullcontext()

    def __repr__(self) -> str:
        return "HostStrategy()"


class AcceleratorStrategy:
    """
    Offload every single-qubit gate to an accelerator device.

    With ``fallback="host"`` an unavailable accelerator is not fatal: the
    failure is logged at WARNING, ``fallback_count`` is incremented and the
    host strategy computes the gate. With ``persistent=True`` the device is
    acquired once in :meth:`session` and reused for every gate of a run.
    """

    name = "accelerator"

    def __init__(
        self,
        device: str = "sv_cuda",
        fallback: str = "error",
        persistent: bool = False,
        compile_kernel: bool = False,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ) -> None:
        if fallback not in ("error", "host"):
            raise ValueError(f"fallback must be 'error' or 'host', got {fallback!r}")
        self.device = device
        self.fallback = fallback
        self.persistent = persistent
        self.compile_kernel = compile_kernel
        self.block_size = block_size
        self.fallback_count = 0
        self._active: Optional[AcceleratorSession] = None
        self._host_only = False
        self._host = HostStrategy()

    def __repr__(self) -> str:
        return (
            f"AcceleratorStrategy(device={self.device!r}, fallback={self.fallback!r}, "
            f"persistent={self.persistent})"
        )

    def _record_fallback(self, exc: AcceleratorUnavailable) -> None:
        self.fallback_count += 1
        logger.warning(
            "Accelerator %s unavailable (%s); computing on host instead", self.device, exc
        )

    @contextmanager
    def session(self) -> Iterator[None]:
        if not self.persistent:
            yield
            return

        with ExitStack() as stack:
            try:
                self._active = stack.enter_context(
                    accelerator_session(self.device, compile_kernel=self.compile_kernel)
                )
            except AcceleratorUnavailable as exc:
                if self.fallback != "host":
                    raise
                self._record_fallback(exc)
                self._host_only = True
            try:
                yield
            finally:
                self._active = None
                self._host_only = False

    def apply(
        self, state: torch.Tensor, gate: torch.Tensor, qubit: int, n_qubits: int
    ) -> torch.Tensor:
        if self._host_only:
            return self._host.apply(state, gate, qubit, n_qubits)
        try:
            return apply_gate_accelerated(
                state,
                gate,
                qubit,
                n_qubits=n_qubits,
                device=self.device,
                session=self._active,
                compile_kernel=self.compile_kernel,
                block_size=self.block_size,
            )
        except AcceleratorUnavailable as exc:
            if self.fallback != "host":
                raise
            self._record_fallback(exc)
            return self._host.apply(state, gate, qubit, n_qubits)


class CompareStrategy:
    """
    Run host and accelerator side by side and insist they agree.

    Returns the host result. Raises StrategyMismatch if any amplitude
    differs by more than ``atol``; ``max_deviation`` records the largest
    difference seen so far.
    """

    name = "compare"

    def __init__(
        self,
        accelerator: AcceleratorStrategy,
        host: Optional[HostStrategy] = None,
        atol: float = 1e-6,
    ) -> None:
        self.host = host if host is not None else HostStrategy()
        self.accelerator = accelerator
        self.atol = atol
        self.max_deviation = 0.0

    def __repr__(self) -> str:
        return f"CompareStrategy(accelerator={self.accelerator!r}, atol={self.atol})"

    def session(self) -> ContextManager[None]:
        return self.accelerator.session()

    def apply(
        self, state: torch.Tensor, gate: torch.Tensor, qubit: int, n_qubits: int
    ) -> torch.Tensor:
        host_state = self.host.apply(state, gate, qubit, n_qubits)
        accel_state = self.accelerator.apply(state, gate, qubit, n_qubits)

        deviation = max_abs_deviation(host_state, accel_state)
        self.max_deviation = max(self.max_deviation, deviation)
        logger.debug("Strategy deviation on qubit %d: %.3e", qubit, deviation)
        if deviation > self.atol:
            raise StrategyMismatch(deviation, self.atol)
        return host_state


def make_strategy(config: SimulatorConfig | None = None) -> SingleQubitStrategy:
    """Build the single-qubit strategy selected by a config."""
    if config is None:
        config = SimulatorConfig()

    if config.strategy == "host":
        return HostStrategy()

    accelerator = AcceleratorStrategy(
        device=config.accelerator_device,
        fallback=config.accelerator_fallback,
        persistent=config.persistent_session,
        compile_kernel=config.compile_kernel,
        block_size=config.block_size,
    )
    if config.strategy == "accelerator":
        return accelerator
    return CompareStrategy(accelerator, atol=config.compare_atol)


__all__ = [
    "SingleQubitStrategy",
    "HostStrategy",
    "AcceleratorStrategy",
    "CompareStrategy",
    "make_strategy",
]
