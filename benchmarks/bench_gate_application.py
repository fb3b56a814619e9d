"""Benchmark host and accelerator single-qubit gate application."""

import time
from typing import Dict

import torch

import qsweep as qs
from qsweep.backend.strategies import AcceleratorStrategy, HostStrategy, SingleQubitStrategy
from qsweep.gates import standard as stdgates


def benchmark_strategy(
    strategy: SingleQubitStrategy,
    n_qubits: int,
    n_gates: int = 1000,
    dtype: torch.dtype = torch.complex64,
) -> Dict[str, float]:
    """Benchmark one strategy on a host-resident state vector.

    Args:
        strategy: Strategy to time.
        n_qubits: Number of qubits.
        n_gates: Number of gates to apply.
        dtype: Complex dtype of the state.

    Returns:
        Dictionary with timing results.
    """
    state = qs.zero_state(n_qubits=n_qubits, dtype=dtype)
    gates = [
        stdgates.H(dtype=dtype),
        stdgates.X(dtype=dtype),
        stdgates.Y(dtype=dtype),
        stdgates.T(dtype=dtype),
    ]

    with strategy.session():
        # Warmup
        for _ in range(10):
            strategy.apply(state, gates[0], 0, n_qubits)

        start = time.perf_counter()
        for i in range(n_gates):
            gate = gates[i % len(gates)]
            state = strategy.apply(state, gate, i % n_qubits, n_qubits)
        end = time.perf_counter()

    total_time = end - start
    return {
        "n_qubits": n_qubits,
        "n_gates": n_gates,
        "total_time_sec": total_time,
        "time_per_gate_sec": total_time / n_gates,
        "gates_per_sec": n_gates / total_time,
    }


def compare_strategies(
    n_qubits: int,
    n_gates: int = 200,
    accelerator_device: str = "sv_cuda",
) -> Dict[str, Dict[str, float]]:
    """Time the host strategy against a persistent accelerator session."""
    results = {"host": benchmark_strategy(HostStrategy(), n_qubits, n_gates)}
    accelerator = AcceleratorStrategy(device=accelerator_device, persistent=True)
    try:
        results["accelerator"] = benchmark_strategy(accelerator, n_qubits, n_gates)
    except qs.AcceleratorUnavailable as exc:
        print(f"  accelerator skipped: {exc}")
    return results


if __name__ == "__main__":
    print("Benchmarking single-qubit gate application...")

    device = "sv_cuda" if torch.cuda.is_available() else "sv_cpu"
    for n_qubits in (10, 16, 20):
        results = compare_strategies(n_qubits, accelerator_device=device)
        print(f"\n{n_qubits} qubits ({device}):")
        for name, r in results.items():
            print(f"  {name:12s} {r['time_per_gate_sec']*1e3:.3f} ms/gate "
                  f"({r['gates_per_sec']:.0f} gates/s)")
