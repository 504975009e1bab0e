"""Precision policy for the torch backend.

- CUDA tensors: FP32 (complex64) for all operations
- CPU tensors: FP64 (complex128), matching the numpy reference bit for bit
  up to summation order
"""

from __future__ import annotations

import torch

from ..core.errors import BackendError


def resolve_device(device: str | torch.device) -> torch.device:
    """Turn a device name into a ``torch.device``, checking CUDA availability.

    Raises:
        BackendError: If CUDA is requested but not available
    """
    dev = torch.device(device)
    if dev.type == "cuda" and not torch.cuda.is_available():
        raise BackendError("CUDA requested but not available")
    if dev.type not in ("cpu", "cuda"):
        raise BackendError(f"Unsupported device: {dev}")
    return dev


def get_precision_dtype(device: torch.device, is_complex: bool = True) -> torch.dtype:
    """Get the dtype the policy assigns to ``device``.

    Args:
        device: Computation device
        is_complex: If True, return complex dtype

    Returns:
        complex64/float32 on CUDA, complex128/float64 on CPU
    """
    if device.type == "cuda":
        return torch.complex64 if is_complex else torch.float32
    return torch.complex128 if is_complex else torch.float64


def enforce_fp32_cuda(tensor: torch.Tensor) -> torch.Tensor:
    """Cast CUDA tensors to FP32; leave CPU tensors unchanged."""
    if tensor.is_cuda:
        target = torch.complex64 if tensor.is_complex() else torch.float32
        if tensor.dtype != target:
            return tensor.to(target)
    return tensor


def assert_fp32_cuda(tensor: torch.Tensor, name: str = "tensor") -> None:
    """Assert that CUDA tensors are FP32.

    Raises:
        AssertionError: If a CUDA tensor is not FP32
    """
    if tensor.is_cuda:
        expected = torch.complex64 if tensor.is_complex() else torch.float32
        assert tensor.dtype == expected, f"{name} on CUDA must be {expected}, got {tensor.dtype}"


__all__ = [
    "resolve_device",
    "get_precision_dtype",
    "enforce_fp32_cuda",
    "assert_fp32_cuda",
]
