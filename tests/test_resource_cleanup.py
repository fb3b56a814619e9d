"""Tests for resource cleanup and memory management."""

import gc
import weakref

import pytest
import torch

import qsweep as qs
from qsweep.backend.accelerator import accelerator_session, apply_gate_accelerated


def test_statevector_memory_cleanup():
    """States are ordinary tensors and are freed once unreferenced."""
    state = qs.zero_state(n_qubits=5)
    ref = weakref.ref(state)
    del state
    gc.collect()
    assert ref() is None


def test_staged_buffers_freed_after_gate():
    """A scoped offload leaves nothing behind in its session."""
    seen = []
    original = qs.backend.accelerator.AcceleratorSession.release

    def tracking_release(self):
        seen.append(list(self.buffers))
        original(self)

    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(qs.backend.accelerator.AcceleratorSession, "release", tracking_release)
        apply_gate_accelerated(qs.zero_state(4), qs.H(), 2, device="sv_cpu")

    assert seen == [[]]


def test_session_released_when_kernel_fails():
    """Buffers are dropped when a launch raises mid-session."""
    def broken_kernel(*args):
        raise RuntimeError("lost")

    with pytest.raises(qs.AcceleratorUnavailable):
        with accelerator_session("sv_cpu") as session:
            session.kernel = broken_kernel
            apply_gate_accelerated(qs.zero_state(2), qs.X(), 0, session=session)
    assert session.closed
    assert session.buffers == []


def test_circuit_simulation_cleanup():
    """Repeated runs with a persistent accelerator session release every session."""
    circuit = qs.QuantumCircuit(n_qubits=3)
    circuit.add_gate("H", [0])
    circuit.add_gate("CNOT", [0, 1])
    circuit.add_gate("CNOT", [1, 2])
    strategy = qs.AcceleratorStrategy(device="sv_cpu", persistent=True)

    for _ in range(10):
        state = circuit.run(strategy=strategy)
        assert strategy._active is None
        del state
        gc.collect()


@pytest.mark.skipif(not torch.cuda.is_available(), reason="CUDA not available")
def test_cuda_memory_cleanup():
    """Test CUDA memory cleanup after accelerated gates."""
    before = torch.cuda.memory_allocated()
    state = qs.zero_state(n_qubits=16)
    for qubit in range(16):
        state = apply_gate_accelerated(state, qs.H(), qubit, device="sv_cuda")
    del state
    gc.collect()

    assert torch.cuda.memory_allocated() <= before
