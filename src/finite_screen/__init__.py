"""Finite-screen diffraction simulator.

Compute the far-field intensity pattern of a horn source illuminating a slit
in a finite-width opaque screen, including the wavelets launched by the
screen's two edges. Deterministic, single-axis, scalar model.
"""

__version__ = "0.1.0"

__all__ = [
    "cli",
    "core",
    "physics",
    "io",
]
