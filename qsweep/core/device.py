"""Device abstraction for state-vector storage and gate execution."""

from __future__ import annotations

import torch

from ..errors import AcceleratorUnavailable


class Device:
    """
    Represents a logical simulation device backed by a PyTorch device.

    The host strategy always computes on the device holding the state; the
    accelerator strategy offloads single-qubit gates to a second Device.
    Attributes should not be modified after construction.
    """

    def __init__(self, name: str, torch_device: torch.device) -> None:
        """
        Initialize a Device.

        Precision follows the state vector, not the device.

        Args:
            name: Logical device name (e.g., "sv_cpu", "sv_cuda").
            torch_device: Underlying PyTorch device.
        """
        self.name = name
        self.torch_device = torch_device

    def __repr__(self) -> str:
        return f"Device(name={self.name!r}, torch_device={self.torch_device})"

    @property
    def is_accelerator(self) -> bool:
        """True when the device is not the host CPU."""
        return self.torch_device.type != "cpu"

    def as_torch_device(self) -> torch.device:
        """Return the underlying PyTorch device."""
        return self.torch_device


_SUPPORTED_DEVICES = ("sv_cpu", "sv_cuda", "sv_mps")


def _mps_available() -> bool:
    backend = getattr(torch.backends, "mps", None)
    return backend is not None and backend.is_available()


def device(name: str) -> Device:
    """
    Create a Device instance from a device name.

    Supported device names:
        - "sv_cpu": host CPU
        - "sv_cuda": CUDA GPU (only if CUDA is available)
        - "sv_mps": Apple Metal GPU (only if MPS is available)

    Args:
        name: Device name string.

    Returns:
        A Device instance.

    Raises:
        AcceleratorUnavailable: If an accelerator is requested but not present.
        ValueError: If the device name is not supported.
    """
    if name == "sv_cpu":
        return Device(name="sv_cpu", torch_device=torch.device("cpu"))
    elif name == "sv_cuda":
        if not torch.cuda.is_available():
            raise AcceleratorUnavailable(
                "CUDA device requested but torch.cuda.is_available() is False"
            )
        return Device(name="sv_cuda", torch_device=torch.device("cuda"))
    elif name == "sv_mps":
        if not _mps_available():
            raise AcceleratorUnavailable(
                "MPS device requested but torch.backends.mps.is_available() is False"
            )
        return Device(name="sv_mps", torch_device=torch.device("mps"))
    else:
        raise ValueError(
            f"Unsupported device name: {name!r}. "
            f"Supported devices: {list(_SUPPORTED_DEVICES)}"
        )


def default_device() -> Device:
    """Return the default (host CPU) device."""
    return device("sv_cpu")


def resolve_device(spec: Device | str | torch.device | None) -> Device:
    """
    Normalize any accepted device specification to a Device.

    Args:
        spec: Device instance, device name string, torch.device, or None
            (the default device).

    Returns:
        The resolved Device.

    Raises:
        TypeError: If spec has an unsupported type.
        ValueError: If a torch.device of an unsupported type is given.
    """
    if spec is None:
        return default_device()
    if isinstance(spec, Device):
        return spec
    if isinstance(spec, str):
        return device(spec)
    if isinstance(spec, torch.device):
        name = f"sv_{spec.type}"
        if name not in _SUPPORTED_DEVICES:
            raise ValueError(
                f"Unsupported torch.device type: {spec.type}. "
                "Only 'cpu', 'cuda' and 'mps' are supported."
            )
        resolved = device(name)
        if spec.index is not None:
            resolved.torch_device = spec
        return resolved
    raise TypeError(
        f"device must be Device, str, torch.device, or None, got {type(spec)}"
    )
