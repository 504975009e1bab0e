"""Unit conversion utilities for finite-screen simulation.

All internal lengths are millimeters. Config files may give lengths in
centimeters or meters; these helpers convert them on load.
"""


def cm_to_mm(value: float | int) -> float:
    """Convert centimeters to millimeters."""
    return float(value) * 10.0


def m_to_mm(value: float | int) -> float:
    """Convert meters to millimeters."""
    return float(value) * 1000.0


__all__ = [
    "cm_to_mm",
    "m_to_mm",
]
