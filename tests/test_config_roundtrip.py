"""Test configuration models and round-trip serialization."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from finite_screen.core.config import (
    Backend,
    Device,
    ExperimentConfig,
    ParametersModel,
    SimulationParameters,
    SweepModel,
    load_config,
    round_trip_config,
    save_config,
)
from finite_screen.core.errors import ConfigError


def test_default_experiment_is_reference_bench():
    config = ExperimentConfig()
    assert config.to_parameters() == SimulationParameters()
    assert config.backend == Backend.NUMPY
    assert config.device == Device.CPU
    assert len(config.angles()) == 121


def test_yaml_round_trip():
    config = ExperimentConfig(
        parameters=ParametersModel(
            wavelength_mm=28.5,
            slit_width_mm=80.0,
            screen_width_mm=450.0,
            edge_diffraction_enabled=False,
        ),
        sweep=SweepModel(start_deg=-30.0, stop_deg=30.0, step_deg=0.5),
        backend="torch",
    )

    reloaded = round_trip_config(config)

    assert reloaded.parameters.wavelength_mm == 28.5
    assert reloaded.parameters.slit_width_mm == 80.0
    assert reloaded.parameters.edge_diffraction_enabled is False
    assert reloaded.sweep.step_deg == 0.5
    assert reloaded.backend == Backend.TORCH
    assert len(reloaded.angles()) == 121


def test_yaml_file_io():
    config = ExperimentConfig(parameters={"slit_width_mm": 55.0})

    with tempfile.TemporaryDirectory() as tmpdir:
        yaml_path = Path(tmpdir) / "bench.yaml"
        save_config(config, yaml_path)
        assert yaml_path.exists()

        loaded = load_config(yaml_path)
        assert loaded.parameters.slit_width_mm == 55.0
        assert loaded == config


def test_json_file_io(tmp_path: Path):
    config = ExperimentConfig(
        parameters={"distance_screen_to_detector_mm": 900.0},
        output={"directory": "runs/far", "write_plot": True},
    )
    json_path = tmp_path / "bench.json"
    save_config(config, json_path)

    raw = json.loads(json_path.read_text())
    assert raw["parameters"]["distance_screen_to_detector_mm"] == 900.0
    assert raw["backend"] == "numpy"

    loaded = load_config(json_path)
    assert loaded.output.directory == "runs/far"
    assert loaded.output.write_plot is True


def test_example_configs_load(examples_dir: Path):
    bench = load_config(examples_dir / "bench.yaml")
    assert bench.to_parameters() == SimulationParameters()

    wide = load_config(examples_dir / "wide_slit_cm.yaml")
    params = wide.to_parameters()
    assert params.wavelength_mm == pytest.approx(32.0)
    assert params.slit_width_mm == pytest.approx(80.0)
    assert params.distance_source_to_screen_mm == pytest.approx(600.0)
    assert params.horn_aperture_mm == 140.0
    assert not params.edge_diffraction_enabled
    assert len(wide.angles()) == 181


def test_meter_keys_converted():
    model = ParametersModel(distance_screen_to_detector_m=1.2)
    assert model.distance_screen_to_detector_mm == pytest.approx(1200.0)


def test_conflicting_length_keys_rejected():
    with pytest.raises(ValidationError, match="Conflicting keys for slit_width_mm"):
        ParametersModel(slit_width_mm=40.0, slit_width_cm=8.0)

    with pytest.raises(ValidationError, match="Conflicting keys for screen_width_mm"):
        ParametersModel(screen_width_cm=30.0, screen_width_m=0.3)


def test_conflicting_keys_in_config_file(tmp_path: Path):
    path = tmp_path / "conflict.yaml"
    path.write_text("parameters:\n  slit_width_mm: 40\n  slit_width_cm: 8\n")
    with pytest.raises(ValidationError, match="Conflicting keys"):
        load_config(path)


def test_validation_errors():
    with pytest.raises(ValidationError, match="Wavelength must be positive"):
        ParametersModel(wavelength_mm=0.0)

    with pytest.raises(ValidationError, match="Propagation distance must be positive"):
        ParametersModel(distance_source_to_screen_mm=-5.0)

    with pytest.raises(ValidationError, match="Width must be non-negative"):
        ParametersModel(slit_width_mm=-1.0)

    with pytest.raises(ValidationError, match="Sweep step must be positive"):
        SweepModel(step_deg=0.0)

    with pytest.raises(ValidationError, match="must be >= start"):
        SweepModel(start_deg=10.0, stop_deg=-10.0)

    with pytest.raises(ValidationError, match="within"):
        SweepModel(start_deg=-120.0)

    with pytest.raises(ValidationError, match="requires backend 'torch'"):
        ExperimentConfig(device="cuda")


def test_zero_widths_allowed():
    params = ParametersModel(slit_width_mm=0.0, screen_width_mm=0.0).to_parameters()
    assert params.slit_width_mm == 0.0
    assert params.screen_width_mm == 0.0


def test_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_unparseable_yaml(tmp_path: Path):
    path = tmp_path / "broken.yaml"
    path.write_text("parameters: [unclosed\n")
    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(path)


def test_non_mapping_root(tmp_path: Path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(path)


def test_empty_file_gives_defaults(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == ExperimentConfig()
