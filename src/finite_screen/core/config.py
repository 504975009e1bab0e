"""Configuration models and I/O for finite-screen simulation.

``SimulationParameters`` is the immutable snapshot the simulator reads.
Pydantic models describe a whole experiment (parameters, sweep, backend,
outputs) with YAML/JSON I/O. Lengths are normalized to millimeters; ``_cm``
and ``_m`` keys are accepted at input.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .errors import ConfigError
from .sampling import angle_sweep
from .units import cm_to_mm, m_to_mm


@dataclass(frozen=True, slots=True)
class SimulationParameters:
    """Geometry and wavelength of one sweep. All lengths in millimeters.

    Defaults reproduce the reference bench: a 32 mm microwave horn, 600 mm
    legs, a 40 mm slit in a 300 mm screen with bare edges.
    """

    wavelength_mm: float = 32.0
    horn_aperture_mm: float = 140.0
    distance_source_to_screen_mm: float = 600.0
    distance_screen_to_detector_mm: float = 600.0
    slit_width_mm: float = 40.0
    screen_width_mm: float = 300.0
    edge_diffraction_enabled: bool = True

    def replace(self, **changes: Any) -> SimulationParameters:
        """Return a new snapshot with ``changes`` applied."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class Backend(str, Enum):
    """Array backend used for the field sums."""

    NUMPY = "numpy"
    TORCH = "torch"


class Device(str, Enum):
    """Compute device for the torch backend."""

    CPU = "cpu"
    CUDA = "cuda"


class ParametersModel(BaseModel):
    """Validated parameter block of an experiment file."""

    wavelength_mm: float = Field(default=32.0, description="Wavelength in millimeters")
    horn_aperture_mm: float = Field(default=140.0, description="Horn aperture Dx in millimeters")
    distance_source_to_screen_mm: float = Field(
        default=600.0, description="Horn to screen distance L1 in millimeters"
    )
    distance_screen_to_detector_mm: float = Field(
        default=600.0, description="Screen to detector distance L2 in millimeters"
    )
    slit_width_mm: float = Field(default=40.0, description="Slit width a in millimeters")
    screen_width_mm: float = Field(default=300.0, description="Screen width W in millimeters")
    edge_diffraction_enabled: bool = Field(
        default=True, description="Include wavelets from the two screen edges"
    )

    @field_validator("wavelength_mm")
    @classmethod
    def validate_wavelength(cls, v: float) -> float:
        if not np.isfinite(v) or v <= 0:
            raise ValueError(f"Wavelength must be positive and finite, got {v}")
        return v

    @field_validator("distance_source_to_screen_mm", "distance_screen_to_detector_mm")
    @classmethod
    def validate_distance(cls, v: float) -> float:
        if not np.isfinite(v) or v <= 0:
            raise ValueError(f"Propagation distance must be positive and finite, got {v}")
        return v

    @field_validator("horn_aperture_mm", "slit_width_mm", "screen_width_mm")
    @classmethod
    def validate_width(cls, v: float) -> float:
        if not np.isfinite(v) or v < 0:
            raise ValueError(f"Width must be non-negative and finite, got {v}")
        return v

    @model_validator(mode="before")
    @classmethod
    def normalize_units(cls, data: Any) -> Any:
        """Accept ``*_cm`` and ``*_m`` keys and convert them to millimeters.

        A length given under more than one unit is rejected.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in list(data):
            for suffix, convert in (("_cm", cm_to_mm), ("_m", m_to_mm)):
                if key.endswith(suffix):
                    mm_key = key[: -len(suffix)] + "_mm"
                    if mm_key in data:
                        raise ValueError(f"Conflicting keys for {mm_key}: {key} given as well")
                    data[mm_key] = convert(data.pop(key))
                    break
        return data

    def to_parameters(self) -> SimulationParameters:
        return SimulationParameters(**self.model_dump())


class SweepModel(BaseModel):
    """Observation sweep in degrees, inclusive of both ends."""

    start_deg: float = Field(default=-60.0, description="First observation angle")
    stop_deg: float = Field(default=60.0, description="Last observation angle")
    step_deg: float = Field(default=1.0, description="Angular step")

    @model_validator(mode="after")
    def validate_range(self) -> SweepModel:
        if self.step_deg <= 0:
            raise ValueError(f"Sweep step must be positive, got {self.step_deg}")
        if self.stop_deg < self.start_deg:
            raise ValueError(
                f"Sweep stop ({self.stop_deg}) must be >= start ({self.start_deg})"
            )
        if max(abs(self.start_deg), abs(self.stop_deg)) > 90:
            raise ValueError("Sweep angles must lie within [-90, 90] degrees")
        return self

    def angles(self) -> np.ndarray:
        return angle_sweep(self.start_deg, self.stop_deg, self.step_deg)


class OutputModel(BaseModel):
    """Which result files a run writes."""

    directory: str = Field(default="output", description="Output directory")
    write_csv: bool = Field(default=True, description="Write pattern.csv")
    write_json: bool = Field(default=True, description="Write pattern.json with metadata")
    write_plot: bool = Field(default=False, description="Write pattern.png")


class ExperimentConfig(BaseModel):
    """Complete experiment configuration."""

    parameters: ParametersModel = Field(default_factory=ParametersModel)
    sweep: SweepModel = Field(default_factory=SweepModel)
    backend: Backend = Field(default=Backend.NUMPY, description="Field-sum backend")
    device: Device = Field(default=Device.CPU, description="Device for the torch backend")
    output: OutputModel = Field(default_factory=OutputModel)

    @model_validator(mode="after")
    def validate_device(self) -> ExperimentConfig:
        if self.device == Device.CUDA and self.backend != Backend.TORCH:
            raise ValueError("device 'cuda' requires backend 'torch'")
        return self

    def to_parameters(self) -> SimulationParameters:
        return self.parameters.to_parameters()

    def angles(self) -> np.ndarray:
        return self.sweep.angles()


def config_hash(params: SimulationParameters, angles: Any) -> str:
    """Short stable hash of a parameter snapshot and its angle sequence."""
    payload = json.dumps(
        {"parameters": params.to_dict(), "angles": [float(a) for a in angles]},
        sort_keys=True,
    )
    return hashlib.sha256(payload.encode()).hexdigest()[:8]


def load_config(path: str | Path) -> ExperimentConfig:
    """Load an experiment from a YAML or JSON file.

    Args:
        path: Path to configuration file

    Returns:
        Validated ExperimentConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigError: If the file cannot be parsed
        pydantic.ValidationError: If values are invalid
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to parse config {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping, got {type(data).__name__}")

    return ExperimentConfig(**data)


def save_config(config: ExperimentConfig, path: str | Path) -> None:
    """Save an experiment to YAML (``.yaml``/``.yml``) or JSON (anything else)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json")

    with open(path, "w", encoding="utf-8") as f:
        if path.suffix.lower() in [".yaml", ".yml"]:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        else:
            json.dump(data, f, indent=2)


def round_trip_config(config: ExperimentConfig) -> ExperimentConfig:
    """Serialize through YAML text and load back."""
    data = config.model_dump(mode="json")
    yaml_str = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    return ExperimentConfig(**yaml.safe_load(yaml_str))


__all__ = [
    "SimulationParameters",
    "Backend",
    "Device",
    "ParametersModel",
    "SweepModel",
    "OutputModel",
    "ExperimentConfig",
    "config_hash",
    "load_config",
    "save_config",
    "round_trip_config",
]
