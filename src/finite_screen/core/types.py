"""Result records for finite-screen simulation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from .config import SimulationParameters


@dataclass(frozen=True, slots=True)
class ResultPoint:
    """One sample of the normalized pattern."""

    angle_deg: float
    intensity: float

    def as_dict(self) -> dict[str, float]:
        return {"angle": self.angle_deg, "intensity": self.intensity}


@dataclass
class SweepResult:
    """A completed sweep together with the snapshot it was computed from.

    Attributes:
        parameters: Parameter snapshot used for every angle
        points: Normalized result points in input order
        backend: Backend name that produced the field sums
        elapsed_s: Wall time of the sweep
        config_hash: Short hash identifying parameters and angles
        metadata: Free-form extra information (device, dtype, ...)
    """

    parameters: SimulationParameters
    points: list[ResultPoint]
    backend: str = "numpy"
    elapsed_s: float = 0.0
    config_hash: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def angles(self) -> np.ndarray:
        return np.array([p.angle_deg for p in self.points], dtype=np.float64)

    def intensities(self) -> np.ndarray:
        return np.array([p.intensity for p in self.points], dtype=np.float64)

    def __len__(self) -> int:
        return len(self.points)


__all__ = [
    "ResultPoint",
    "SweepResult",
]
