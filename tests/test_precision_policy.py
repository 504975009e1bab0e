"""Tests for the torch backend and its precision policy.

- CPU sweeps run in FP64 and match the numpy reference
- CUDA sweeps run in FP32 and stay within a loose parity gate
"""

import numpy as np
import pytest
import torch

from finite_screen.core.errors import BackendError
from finite_screen.physics.precision import (
    assert_fp32_cuda,
    enforce_fp32_cuda,
    get_precision_dtype,
    resolve_device,
)
from finite_screen.physics.simulator import raw_field, simulate

CPU_PARITY_TOL = 1e-9
CUDA_PARITY_TOL = 1.0


def _intensities(points):
    return np.array([p.intensity for p in points])


def test_get_precision_dtype():
    cpu = torch.device("cpu")
    assert get_precision_dtype(cpu, is_complex=True) == torch.complex128
    assert get_precision_dtype(cpu, is_complex=False) == torch.float64

    if torch.cuda.is_available():
        cuda = torch.device("cuda")
        assert get_precision_dtype(cuda, is_complex=True) == torch.complex64
        assert get_precision_dtype(cuda, is_complex=False) == torch.float32


def test_cpu_tensor_unchanged():
    tensor = torch.randn(8, dtype=torch.complex128)
    assert enforce_fp32_cuda(tensor).dtype == torch.complex128
    assert_fp32_cuda(tensor, "cpu tensor")


def test_unavailable_cuda_rejected():
    if torch.cuda.is_available():
        pytest.skip("CUDA available")
    with pytest.raises(BackendError, match="CUDA requested"):
        resolve_device("cuda")


def test_torch_cpu_matches_numpy(bench, bench_angles):
    ref = _intensities(simulate(bench, bench_angles))
    out = _intensities(simulate(bench, bench_angles, backend="torch", device="cpu"))
    np.testing.assert_allclose(out, ref, rtol=0, atol=CPU_PARITY_TOL)


def test_torch_cpu_fields_match_numpy(bench, bench_angles):
    slit_np, edge_np = raw_field(bench, bench_angles)
    slit_t, edge_t = raw_field(bench, bench_angles, backend="torch")
    np.testing.assert_allclose(slit_t, slit_np, rtol=1e-10, atol=1e-14)
    np.testing.assert_allclose(edge_t, edge_np, rtol=1e-10, atol=1e-14)


def test_torch_edges_disabled_is_zero(bench, bench_angles):
    _, edge = raw_field(bench.replace(edge_diffraction_enabled=False), bench_angles, backend="torch")
    assert np.all(edge == 0)


@pytest.mark.gpu
def test_cuda_parity(bench, bench_angles):
    if not torch.cuda.is_available():
        pytest.skip("CUDA not available")
    ref = _intensities(simulate(bench, bench_angles))
    out = _intensities(simulate(bench, bench_angles, backend="torch", device="cuda"))
    np.testing.assert_allclose(out, ref, rtol=0, atol=CUDA_PARITY_TOL)


def test_torch_fields_pass_through_precision_policy(monkeypatch, bench):
    import finite_screen.physics.precision as precision

    seen = []

    def spy(tensor):
        seen.append(tensor.dtype)
        return enforce_fp32_cuda(tensor)

    monkeypatch.setattr(precision, "enforce_fp32_cuda", spy)
    slit, edge = raw_field(bench, [-10.0, 0.0, 10.0], backend="torch", device="cpu")

    assert seen == [torch.complex128, torch.complex128]
    assert slit.dtype == np.complex128 and edge.dtype == np.complex128
