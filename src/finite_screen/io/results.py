"""Result file I/O for simulated patterns.

CSV carries the bare ``angle_deg,intensity`` table; JSON carries the same
points plus the parameter snapshot and model constants needed to reproduce
the sweep.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

import numpy as np

from .. import __version__
from ..core.errors import ExportError
from ..core.sampling import SLIT_SAMPLES
from ..core.types import ResultPoint, SweepResult
from ..physics.simulator import EDGE_AMPLITUDE, EDGE_PHASE_OFFSET

CSV_HEADER = "angle_deg,intensity"


def write_results_csv(path: str | Path, points: Sequence[ResultPoint]) -> Path:
    """Write points as a two-column CSV table."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    table = np.array([[p.angle_deg, p.intensity] for p in points], dtype=np.float64)
    np.savetxt(
        path,
        table.reshape(-1, 2),
        delimiter=",",
        header=CSV_HEADER,
        comments="",
        fmt="%.10g",
    )
    return path


def read_results_csv(path: str | Path) -> list[ResultPoint]:
    """Read a table written by :func:`write_results_csv`.

    Raises:
        ExportError: If the file does not have the expected header
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        header = f.readline().strip()
    if header != CSV_HEADER:
        raise ExportError(f"Unexpected CSV header in {path}: {header!r}")

    table = np.loadtxt(path, delimiter=",", skiprows=1, ndmin=2)
    return [ResultPoint(angle_deg=float(a), intensity=float(i)) for a, i in table]


def _metadata(result: SweepResult) -> dict:
    return {
        "version": __version__,
        "created": datetime.now().isoformat(),
        "config_hash": result.config_hash,
        "backend": result.backend,
        "elapsed_s": result.elapsed_s,
        "parameters": result.parameters.to_dict(),
        "model": {
            "slit_samples": SLIT_SAMPLES,
            "edge_amplitude": EDGE_AMPLITUDE,
            "edge_phase_offset_rad": EDGE_PHASE_OFFSET,
        },
        **result.metadata,
    }


def write_results_json(path: str | Path, result: SweepResult) -> Path:
    """Write points and run metadata as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        "metadata": _metadata(result),
        "points": [p.as_dict() for p in result.points],
    }
    path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    return path


__all__ = [
    "CSV_HEADER",
    "write_results_csv",
    "read_results_csv",
    "write_results_json",
]
