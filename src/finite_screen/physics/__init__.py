"""Physics module: field simulator, diagnostics, and self-checks."""

from .simulator import normalize_intensity, raw_field, raw_intensity, simulate, simulate_sweep

__all__ = [
    "simulate",
    "simulate_sweep",
    "raw_field",
    "raw_intensity",
    "normalize_intensity",
]
