"""Deterministic sample geometry for the field sums.

Slit samples, edge positions, the observation sweep and the wavenumber are all
derived from the parameter snapshot and never change during a sweep.
"""

from __future__ import annotations

import math

import numpy as np

from .errors import SamplingError

# Shared by the live simulator and the exported standalone script
SLIT_SAMPLES = 100


def wavenumber(wavelength_mm: float) -> float:
    """Return k = 2*pi / wavelength in rad/mm."""
    return 2.0 * math.pi / wavelength_mm


def slit_sample_positions(slit_width_mm: float, n: int = SLIT_SAMPLES) -> np.ndarray:
    """Evenly spaced sample positions across the open slit.

    The first and last samples sit exactly on the slit edges. A zero-width
    slit collapses every sample onto the axis.

    Args:
        slit_width_mm: Full slit width in millimeters
        n: Number of samples (at least 2)

    Returns:
        Array of ``n`` transverse positions in millimeters

    Raises:
        SamplingError: If fewer than two samples are requested
    """
    if n < 2:
        raise SamplingError(f"Slit sampling needs at least 2 points, got {n}")
    half = slit_width_mm / 2.0
    i = np.arange(n, dtype=np.float64)
    return -half + i * slit_width_mm / (n - 1)


def edge_positions(screen_width_mm: float) -> np.ndarray:
    """Transverse positions of the two screen edges."""
    half = screen_width_mm / 2.0
    return np.array([-half, half], dtype=np.float64)


def angle_sweep(start_deg: float, stop_deg: float, step_deg: float) -> np.ndarray:
    """Inclusive, evenly spaced observation angles.

    Angles are built as ``start + i * step`` so integer sweeps land exactly on
    whole degrees.

    Raises:
        SamplingError: If the step is not positive or the range is reversed
    """
    if not step_deg > 0:
        raise SamplingError(f"Sweep step must be positive, got {step_deg}")
    if stop_deg < start_deg:
        raise SamplingError(f"Sweep stop ({stop_deg}) must be >= start ({start_deg})")

    # Tolerate float round-off so -60..60 step 1 gives 121 angles
    count = int(math.floor((stop_deg - start_deg) / step_deg + 1e-9)) + 1
    return start_deg + np.arange(count, dtype=np.float64) * step_deg


__all__ = [
    "SLIT_SAMPLES",
    "wavenumber",
    "slit_sample_positions",
    "edge_positions",
    "angle_sweep",
]
