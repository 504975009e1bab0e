"""Self-checks of the field model against its known behaviour.

Each case runs a small sweep and compares it with a property the model must
have: normalization, mirror symmetry, the edge-induced on-axis change at a
40 mm slit, determinism, order preservation and convergence towards the
single-slit pattern for wider slits.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from ..core.config import SimulationParameters
from ..core.sampling import angle_sweep
from .diagnostics import edge_contrast, on_axis_deficit, pattern_metrics
from .simulator import PEAK_INTENSITY, simulate

# Tolerance gates
NORMALIZATION_TOL = 1e-9
SYMMETRY_TOL = 1e-6
EDGE_CONTRAST_MIN = 0.05


@dataclass(frozen=True)
class ValidationCase:
    name: str
    passed: bool
    detail: str


def _bench_angles() -> np.ndarray:
    return angle_sweep(-60.0, 60.0, 1.0)


def check_normalization(params: SimulationParameters) -> ValidationCase:
    values = np.array([p.intensity for p in simulate(params, _bench_angles())])
    peak, low = float(values.max()), float(values.min())
    ok = abs(peak - PEAK_INTENSITY) <= NORMALIZATION_TOL and low >= 0.0
    return ValidationCase("Normalization", ok, f"max={peak:.6f} min={low:.6f}")


def check_symmetry(params: SimulationParameters) -> ValidationCase:
    metrics = pattern_metrics(simulate(params, _bench_angles()))
    ok = metrics.symmetry_error <= SYMMETRY_TOL
    return ValidationCase("Mirror symmetry", ok, f"max |I(t)-I(-t)|={metrics.symmetry_error:.2e}")


def check_edge_contrast(params: SimulationParameters) -> ValidationCase:
    bench = params.replace(slit_width_mm=40.0)
    contrast = edge_contrast(bench)
    ok = contrast > EDGE_CONTRAST_MIN
    return ValidationCase("Edge toggle on axis", ok, f"relative change={contrast:.2%}")


def check_determinism(params: SimulationParameters) -> ValidationCase:
    first = np.array([p.intensity for p in simulate(params, _bench_angles())])
    second = np.array([p.intensity for p in simulate(params, _bench_angles())])
    ok = bool(np.allclose(first, second, rtol=0.0, atol=1e-12))
    return ValidationCase("Determinism", ok, "identical" if ok else "outputs differ")


def check_order(params: SimulationParameters) -> ValidationCase:
    angles = [10.0, -30.0, 0.0, 10.0, 45.0, -30.0]
    points = simulate(params, angles)
    same_order = [p.angle_deg for p in points] == angles
    duplicates_equal = bool(
        np.isclose(points[0].intensity, points[3].intensity, rtol=1e-12)
        and np.isclose(points[1].intensity, points[5].intensity, rtol=1e-12)
    )
    ok = same_order and duplicates_equal
    return ValidationCase("Order preservation", ok, f"{len(points)} points, duplicates kept")


def check_wide_slit_convergence(params: SimulationParameters) -> ValidationCase:
    narrow = params.replace(slit_width_mm=40.0, edge_diffraction_enabled=True)
    wide = params.replace(slit_width_mm=80.0, edge_diffraction_enabled=True)

    dip_narrow = on_axis_deficit(narrow)
    dip_wide = on_axis_deficit(wide)

    fwhm_narrow = pattern_metrics(
        simulate(narrow.replace(edge_diffraction_enabled=False), _bench_angles())
    ).central_lobe_fwhm_deg
    fwhm_wide = pattern_metrics(
        simulate(wide.replace(edge_diffraction_enabled=False), _bench_angles())
    ).central_lobe_fwhm_deg

    ok = (
        dip_wide < dip_narrow
        and fwhm_narrow is not None
        and fwhm_wide is not None
        and fwhm_wide < fwhm_narrow
    )
    return ValidationCase(
        "Wide slit convergence",
        ok,
        f"on-axis deficit {dip_narrow:.2f} -> {dip_wide:.2f}, "
        f"FWHM {fwhm_narrow} -> {fwhm_wide} deg",
    )


CASES: list[Callable[[SimulationParameters], ValidationCase]] = [
    check_normalization,
    check_symmetry,
    check_edge_contrast,
    check_determinism,
    check_order,
    check_wide_slit_convergence,
]


def run_validation(params: SimulationParameters | None = None) -> list[ValidationCase]:
    """Run every case against ``params`` (the reference bench by default)."""
    params = params or SimulationParameters()
    return [case(params) for case in CASES]


__all__ = [
    "ValidationCase",
    "CASES",
    "run_validation",
    "check_normalization",
    "check_symmetry",
    "check_edge_contrast",
    "check_determinism",
    "check_order",
    "check_wide_slit_convergence",
]
