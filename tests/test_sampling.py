"""Tests for slit/edge sample geometry and the angle sweep."""

import math

import numpy as np
import pytest

from finite_screen.core.errors import SamplingError
from finite_screen.core.sampling import (
    SLIT_SAMPLES,
    angle_sweep,
    edge_positions,
    slit_sample_positions,
    wavenumber,
)


def test_slit_samples_span_edges_exactly():
    x = slit_sample_positions(40.0)
    assert len(x) == SLIT_SAMPLES == 100
    assert x[0] == -20.0
    assert x[-1] == 20.0
    assert np.all(np.diff(x) > 0)
    np.testing.assert_allclose(np.diff(x), 40.0 / 99, rtol=1e-12)


def test_zero_width_slit_collapses_to_axis():
    x = slit_sample_positions(0.0)
    assert len(x) == SLIT_SAMPLES
    assert np.all(x == 0.0)


def test_slit_samples_symmetric():
    x = slit_sample_positions(73.0)
    np.testing.assert_allclose(x, -x[::-1], atol=1e-12)


def test_slit_sampling_needs_two_points():
    with pytest.raises(SamplingError):
        slit_sample_positions(40.0, n=1)


def test_edge_positions():
    assert list(edge_positions(300.0)) == [-150.0, 150.0]
    assert list(edge_positions(0.0)) == [0.0, 0.0]


def test_wavenumber():
    assert wavenumber(32.0) == pytest.approx(2 * math.pi / 32.0)


def test_default_sweep_has_121_whole_degrees():
    angles = angle_sweep(-60.0, 60.0, 1.0)
    assert len(angles) == 121
    assert angles[0] == -60.0
    assert angles[60] == 0.0
    assert angles[-1] == 60.0


def test_fractional_step_sweep_is_inclusive():
    angles = angle_sweep(-1.0, 1.0, 0.1)
    assert len(angles) == 21
    assert angles[-1] == pytest.approx(1.0)


@pytest.mark.parametrize("start,stop,step", [(0.0, 10.0, 0.0), (0.0, 10.0, -1.0), (5.0, -5.0, 1.0)])
def test_invalid_sweeps(start, stop, step):
    with pytest.raises(SamplingError):
        angle_sweep(start, stop, step)
