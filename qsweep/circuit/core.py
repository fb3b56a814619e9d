"""Instruction list and execution engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import torch

from ..backend.statevector import apply_two_qubit_gate, check_dimension, zero_state
from ..backend.strategies import SingleQubitStrategy, make_strategy
from ..config import SimulatorConfig
from ..core.device import Device
from ..errors import OutOfRangeTarget
from ..gates.standard import Gate, gate_matrix
from ..logging import get_logger
from ..measurement import ProbabilityTable, compute_probabilities

logger = get_logger(__name__)


@dataclass(frozen=True)
class Instruction:
    """
    One gate application: which gate, on which qubits.

    Attributes
    ----------
    gate:
        The gate to apply.
    qubits:
        Target qubit indices (0-based). One index for single-qubit gates;
        (control, target) for CNOT; the two exchanged qubits for SWAP.
    """

    gate: Gate
    qubits: Tuple[int, ...]

    def __str__(self) -> str:
        targets = ",".join(f"q[{q}]" for q in self.qubits)
        return f"{self.gate.value.lower()} {targets}"


@dataclass(frozen=True, eq=False)
class SimulationResult:
    """Final state vector of a run together with its probability table."""

    state: torch.Tensor
    probabilities: ProbabilityTable


class QuantumCircuit:
    """
    Ordered list of instructions on n_qubits, and the engine that runs it.

    Instructions are validated when added and applied strictly in order:
    none is skipped, reordered or merged.
    """

    def __init__(self, n_qubits: int) -> None:
        """
        Initialize an empty circuit.

        Raises
        ------
        InvalidDimension
            If n_qubits < 1 or too large to simulate.
        """
        self._n_qubits = check_dimension(n_qubits)
        self._ops: List[Instruction] = []

    @property
    def n_qubits(self) -> int:
        """Return the number of qubits in this circuit."""
        return self._n_qubits

    @property
    def ops(self) -> Tuple[Instruction, ...]:
        """Return a read-only tuple of all instructions."""
        return tuple(self._ops)

    def add_gate(self, gate: Gate | str, qubits: Sequence[int]) -> Instruction:
        """
        Append an instruction to the circuit.

        Parameters
        ----------
        gate:
            A Gate member or a gate name such as "H", "x", "cnot".
        qubits:
            Target indices. Length must equal the gate's arity and two-qubit
            gates need two distinct indices.

        Returns
        -------
        Instruction
            The appended instruction.

        Raises
        ------
        ValueError
            If the gate is unknown, the arity does not match, or the two
            indices of a two-qubit gate coincide.
        OutOfRangeTarget
            If an index is outside [0, n_qubits).
        """
        gate = Gate.from_name(gate)
        q_tuple = tuple(int(q) for q in qubits)

        if len(q_tuple) != gate.arity:
            raise ValueError(
                f"Gate {gate.value} acts on {gate.arity} qubit(s), "
                f"got {len(q_tuple)}: {q_tuple}"
            )
        for q in q_tuple:
            if q < 0 or q >= self._n_qubits:
                raise OutOfRangeTarget(
                    f"Qubit index {q} is out of range for this circuit "
                    f"(n_qubits={self._n_qubits})."
                )
        if gate.arity == 2 and q_tuple[0] == q_tuple[1]:
            raise ValueError(
                f"Gate {gate.value} needs two distinct qubits, got {q_tuple}"
            )

        instruction = Instruction(gate=gate, qubits=q_tuple)
        self._ops.append(instruction)
        logger.debug("Adding gate %s on qubits %s", gate.value, q_tuple)
        return instruction

    def extend(self, instructions: Sequence[Instruction]) -> None:
        """Append already-built instructions, validating each one."""
        for instruction in instructions:
            self.add_gate(instruction.gate, instruction.qubits)

    def copy(self) -> "QuantumCircuit":
        """Return a copy of this circuit."""
        new = QuantumCircuit(self._n_qubits)
        new._ops.extend(self._ops)
        return new

    def __len__(self) -> int:
        return len(self._ops)

    def gate_counts(self) -> Dict[str, int]:
        """Return a dictionary mapping gate names to their counts."""
        counts: Dict[str, int] = {}
        for op in self._ops:
            counts[op.gate.value] = counts.get(op.gate.value, 0) + 1
        return counts

    def run(
        self,
        strategy: Optional[SingleQubitStrategy] = None,
        config: Optional[SimulatorConfig] = None,
        device: Device | torch.device | str | None = None,
    ) -> torch.Tensor:
        """
        Simulate the circuit from |0...0> and return the final state vector.

        The instruction sequence is captured when the call starts, so gates
        added afterwards never affect the returned state.

        Parameters
        ----------
        strategy:
            Single-qubit strategy. If None, built from ``config``.
        config:
            Simulator configuration. Defaults to ``SimulatorConfig()``.
        device:
            Where the state vector lives (defaults to the host CPU).

        Returns
        -------
        torch.Tensor
            Complex tensor of shape (2**n_qubits,).
        """
        if config is None:
            config = SimulatorConfig()
        if strategy is None:
            strategy = make_strategy(config)

        ops = tuple(self._ops)
        state = zero_state(self._n_qubits, device=device, dtype=config.dtype)
        matrices: Dict[Gate, torch.Tensor] = {}

        logger.info(
            "Running %d instruction(s) on %d qubit(s) with %s strategy",
            len(ops),
            self._n_qubits,
            strategy.name,
        )
        with strategy.session():
            for op in ops:
                matrix = matrices.get(op.gate)
                if matrix is None:
                    matrix = gate_matrix(
                        op.gate,
                        dtype=config.dtype,
                        device=state.device,
                        exact_phase=config.exact_phase,
                    )
                    matrices[op.gate] = matrix

                logger.debug("Applying %s on %s", op.gate.value, op.qubits)
                if op.gate.arity == 1:
                    state = strategy.apply(state, matrix, op.qubits[0], self._n_qubits)
                else:
                    q0, q1 = op.qubits
                    state = apply_two_qubit_gate(
                        state, matrix, qubit1=q0, qubit2=q1, n_qubits=self._n_qubits
                    )

        logger.info("Run finished after %d instruction(s)", len(ops))
        return state

    def simulate(
        self,
        config: Optional[SimulatorConfig] = None,
        strategy: Optional[SingleQubitStrategy] = None,
        device: Device | torch.device | str | None = None,
        strict: bool = False,
    ) -> SimulationResult:
        """
        Run the circuit and measure the final state.

        ``strict`` is passed to :func:`qsweep.measurement.compute_probabilities`.
        """
        if config is None:
            config = SimulatorConfig()
        state = self.run(strategy=strategy, config=config, device=device)
        probabilities = compute_probabilities(
            state, threshold=config.degenerate_threshold, strict=strict
        )
        return SimulationResult(state=state, probabilities=probabilities)

    def to_text_diagram(self) -> str:
        """
        Return a simple ASCII diagram of the circuit.

        Each qubit is a horizontal line and each instruction occupies one
        column. Single-qubit gates show their name, CNOT draws '●' on the
        control and '⊕' on the target, SWAP draws '×' on both qubits.
        """
        wire_segments: List[List[str]] = [[] for _ in range(self._n_qubits)]

        for op in self._ops:
            for q in range(self._n_qubits):
                wire_segments[q].append("───")

            if op.gate is Gate.CNOT:
                control, target = op.qubits
                wire_segments[control][-1] = "─●─"
                wire_segments[target][-1] = "─⊕─"
            elif op.gate is Gate.SWAP:
                for q in op.qubits:
                    wire_segments[q][-1] = "─×─"
            else:
                wire_segments[op.qubits[0]][-1] = f"─{op.gate.value}─"

        return "\n".join(
            f"q{q}: " + "".join(wire_segments[q]) for q in range(self._n_qubits)
        )
