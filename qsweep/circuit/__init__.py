"""Circuit model and execution engine."""

from .core import Instruction, QuantumCircuit, SimulationResult

__all__ = ["Instruction", "QuantumCircuit", "SimulationResult"]
