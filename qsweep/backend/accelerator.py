"""Accelerator-offloaded single-qubit gate application.

The state and gate are split into flat real/imaginary buffers, staged on
the accelerator device, and transformed by a kernel that evaluates every
output index independently::

    b         = (i >> target) & 1
    new[i]    = gate[b][0] * state[i & ~m] + gate[b][1] * state[i | m]

with m = 1 << target. Lanes are vectorized with ``torch.arange`` and
launched in blocks of at most ``block_size`` indices. The host waits for
the device to finish before the output buffers are copied back.

Device, kernel handle and transfer buffers live in an
:class:`AcceleratorSession`. :func:`accelerator_session` releases them on
every exit path, including failure to acquire the device.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

import torch

from ..core.device import Device, resolve_device
from ..diagnostics import check_norm_drift, is_debug_enabled
from ..errors import AcceleratorUnavailable
from ..logging import get_logger
from .statevector import check_qubit, infer_n_qubits

logger = get_logger(__name__)

DEFAULT_BLOCK_SIZE = 1 << 20

KernelFn = Callable[..., None]


def single_qubit_kernel(
    in_re: torch.Tensor,
    in_im: torch.Tensor,
    out_re: torch.Tensor,
    out_im: torch.Tensor,
    gate_re: torch.Tensor,
    gate_im: torch.Tensor,
    target: int,
    n_qubits: int,
    start: int = 0,
    stop: Optional[int] = None,
) -> None:
    """
    Compute output lanes ``start..stop`` of a single-qubit gate application.

    All six buffers are flat real tensors on the same device. ``gate_re`` and
    ``gate_im`` hold the 2x2 gate in row-major order (length 4). Output
    buffers are written in place; input buffers are only read.

    Args:
        in_re, in_im: Input amplitudes, length 2**n_qubits.
        out_re, out_im: Output amplitudes, length 2**n_qubits.
        gate_re, gate_im: Gate coefficients, length 4.
        target: Target qubit index.
        n_qubits: Number of qubits.
        start: First output index handled by this launch.
        stop: One past the last output index (defaults to 2**n_qubits).
    """
    if stop is None:
        stop = 1 << n_qubits

    idx = torch.arange(start, stop, device=in_re.device)
    mask = 1 << target
    row = ((idx >> target) & 1) * 2
    src0 = idx & ~mask
    src1 = idx | mask

    g0_re, g0_im = gate_re[row], gate_im[row]
    g1_re, g1_im = gate_re[row + 1], gate_im[row + 1]
    a0_re, a0_im = in_re[src0], in_im[src0]
    a1_re, a1_im = in_re[src1], in_im[src1]

    out_re[start:stop] = g0_re * a0_re - g0_im * a0_im + g1_re * a1_re - g1_im * a1_im
    out_im[start:stop] = g0_re * a0_im + g0_im * a0_re + g1_re * a1_im + g1_im * a1_re


@functools.lru_cache(maxsize=None)
def _compiled_kernel() -> KernelFn:
    return torch.compile(single_qubit_kernel, dynamic=True)


def get_kernel(compile_kernel: bool = False) -> KernelFn:
    """
    Return the kernel handle, compiled with ``torch.compile`` if requested.

    The compiled handle is built once per process.

    Raises:
        AcceleratorUnavailable: If torch.compile is missing or fails.
    """
    if not compile_kernel:
        return single_qubit_kernel
    if not hasattr(torch, "compile"):
        raise AcceleratorUnavailable("torch.compile is not available in this PyTorch build")
    try:
        return _compiled_kernel()
    except RuntimeError as exc:
        raise AcceleratorUnavailable(f"Kernel compilation failed: {exc}") from exc


class AcceleratorSession:
    """
    Device, kernel handle and staged buffers for one or more offloads.

    Use through :func:`accelerator_session`; buffers staged with
    :meth:`stage` or :meth:`empty` are dropped by :meth:`release`.
    """

    def __init__(self, qdevice: Device, kernel: KernelFn) -> None:
        self.device = qdevice
        self.kernel = kernel
        self.buffers: List[torch.Tensor] = []
        self.launches = 0
        self.closed = False

    @property
    def torch_device(self) -> torch.device:
        return self.device.as_torch_device()

    def _check_open(self) -> None:
        if self.closed:
            raise AcceleratorUnavailable(f"Session on {self.device.name} is already released")

    def stage(self, tensor: torch.Tensor, dtype: torch.dtype) -> torch.Tensor:
        """Copy a host tensor into a flat contiguous device buffer."""
        self._check_open()
        buffer = tensor.reshape(-1).to(device=self.torch_device, dtype=dtype).contiguous()
        self.buffers.append(buffer)
        return buffer

    def empty(self, size: int, dtype: torch.dtype) -> torch.Tensor:
        """Allocate an uninitialized device buffer."""
        self._check_open()
        buffer = torch.empty(size, dtype=dtype, device=self.torch_device)
        self.buffers.append(buffer)
        return buffer

    def launch(self, *buffers: torch.Tensor, target: int, n_qubits: int, block_size: int) -> None:
        """Run the kernel over all 2**n_qubits lanes, block by block."""
        self._check_open()
        dim = 1 << n_qubits
        for start in range(0, dim, block_size):
            stop = min(start + block_size, dim)
            self.kernel(*buffers, target, n_qubits, start, stop)
        self.launches += 1

    def synchronize(self) -> None:
        """Block the host until all queued device work has finished."""
        if self.torch_device.type == "cuda":
            torch.cuda.synchronize(self.torch_device)
        elif self.torch_device.type == "mps":
            torch.mps.synchronize()

    def release(self) -> None:
        """Drop staged buffers and return cached device memory."""
        if self.closed:
            return
        self.buffers.clear()
        if self.torch_device.type == "cuda":
            torch.cuda.empty_cache()
        elif self.torch_device.type == "mps":
            torch.mps.empty_cache()
        self.closed = True
        logger.debug("Released accelerator session on %s", self.device.name)


def _acquire_device(device_spec: Device | str | torch.device | None) -> Device:
    try:
        qdevice = resolve_device(device_spec)
    except (ValueError, TypeError) as exc:
        raise AcceleratorUnavailable(str(exc)) from exc

    # Touch the device once so context creation errors surface here.
    try:
        torch.zeros(1, device=qdevice.as_torch_device())
    except RuntimeError as exc:
        raise AcceleratorUnavailable(
            f"Could not acquire device {qdevice.name}: {exc}"
        ) from exc
    return qdevice


@contextmanager
def accelerator_session(
    device: Device | str | torch.device | None = "sv_cuda",
    compile_kernel: bool = False,
) -> Iterator[AcceleratorSession]:
    """
    Acquire an accelerator device and kernel handle for the duration of a block.

    Example
    -------
    >>> with accelerator_session("sv_cuda") as session:
    ...     state = apply_gate_accelerated(state, H(), 0, session=session)

    Raises:
        AcceleratorUnavailable: If the device or kernel cannot be acquired.
    """
    qdevice = _acquire_device(device)
    kernel = get_kernel(compile_kernel)
    session = AcceleratorSession(qdevice, kernel)
    logger.debug("Acquired accelerator session on %s", qdevice.name)
    try:
        yield session
    finally:
        session.release()


def _real_dtype(complex_dtype: torch.dtype) -> torch.dtype:
    return torch.float64 if complex_dtype == torch.complex128 else torch.float32


def _offload(
    session: AcceleratorSession,
    state: torch.Tensor,
    gate: torch.Tensor,
    qubit: int,
    n_qubits: int,
    block_size: int,
) -> torch.Tensor:
    real_dtype = _real_dtype(state.dtype)
    gate = gate.to(dtype=state.dtype)
    dim = state.shape[0]
    n_staged = len(session.buffers)

    try:
        in_re = session.stage(state.real, real_dtype)
        in_im = session.stage(state.imag, real_dtype)
        gate_re = session.stage(gate.real, real_dtype)
        gate_im = session.stage(gate.imag, real_dtype)
        out_re = session.empty(dim, real_dtype)
        out_im = session.empty(dim, real_dtype)

        session.launch(
            in_re, in_im, out_re, out_im, gate_re, gate_im,
            target=qubit, n_qubits=n_qubits, block_size=block_size,
        )
        session.synchronize()
        return torch.complex(out_re, out_im).to(device=state.device, dtype=state.dtype)
    except AcceleratorUnavailable:
        raise
    except RuntimeError as exc:
        raise AcceleratorUnavailable(
            f"Offload to {session.device.name} failed: {exc}"
        ) from exc
    finally:
        # Persistent sessions outlive this call; only keep buffers for one gate.
        del session.buffers[n_staged:]


def apply_gate_accelerated(
    state: torch.Tensor,
    gate: torch.Tensor,
    qubit: int,
    n_qubits: int | None = None,
    device: Device | str | torch.device | None = "sv_cuda",
    session: AcceleratorSession | None = None,
    compile_kernel: bool = False,
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> torch.Tensor:
    """
    Apply a single-qubit gate by offloading it to an accelerator device.

    Produces the same amplitudes as :func:`qsweep.backend.apply_gate`
    within floating-point tolerance. The result is returned on the device
    and dtype of the input state.

    Args:
        state: Complex state vector of shape (2**n_qubits,).
        gate: Single-qubit gate matrix of shape (2, 2).
        qubit: Target qubit (0 = least significant bit).
        n_qubits: Number of qubits. If None, inferred from the state length.
        device: Accelerator to use when no session is given. "sv_cpu" runs
            the same kernel on the host, which is useful for testing.
        session: An open session to reuse. If None, a session is acquired
            and released around this call.
        compile_kernel: Use a torch.compile'd kernel for a new session.
        block_size: Maximum number of output lanes per kernel launch.

    Returns:
        A new state vector with the gate applied.

    Raises:
        ValueError: If the gate shape or state dimension is invalid.
        OutOfRangeTarget: If the qubit index is not in [0, n_qubits).
        AcceleratorUnavailable: If the device, kernel, or launch fails.
    """
    if gate.shape != (2, 2):
        raise ValueError(f"gate must have shape (2, 2), got {tuple(gate.shape)}")
    n_qubits = infer_n_qubits(state, n_qubits)
    check_qubit(qubit, n_qubits)
    if block_size < 1:
        raise ValueError(f"block_size must be >= 1, got {block_size}")

    if session is not None:
        new_state = _offload(session, state, gate, qubit, n_qubits, block_size)
    else:
        with accelerator_session(device, compile_kernel=compile_kernel) as scoped:
            new_state = _offload(scoped, state, gate, qubit, n_qubits, block_size)

    if is_debug_enabled():
        check_norm_drift(new_state, f"accelerated gate on qubit {qubit}")

    return new_state


__all__ = [
    "DEFAULT_BLOCK_SIZE",
    "AcceleratorSession",
    "accelerator_session",
    "apply_gate_accelerated",
    "get_kernel",
    "single_qubit_kernel",
]
