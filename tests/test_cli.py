from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from finite_screen.cli.main import build_parser, main

SRC_DIR = Path(__file__).resolve().parent.parent / "src"


def _run_module(*args: str) -> subprocess.CompletedProcess:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    return subprocess.run(
        [sys.executable, "-m", "finite_screen.cli", *args],
        capture_output=True,
        text=True,
        check=False,
        env=env,
    )


def test_cli_help() -> None:
    result = _run_module("--help")
    assert result.returncode == 0
    out = result.stdout
    assert "run" in out and "validate" in out and "inspect" in out and "export-script" in out


def test_cli_missing_command() -> None:
    result = _run_module()
    assert result.returncode != 0


def test_cli_run_help() -> None:
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args(["run", "--help"])
    assert exc.value.code == 0


def test_cli_run_writes_results(tmp_path: Path, examples_dir: Path, capsys) -> None:
    outdir = tmp_path / "out"
    code = main(["run", "-c", str(examples_dir / "bench.yaml"), "-o", str(outdir)])
    assert code == 0

    lines = (outdir / "pattern.csv").read_text().strip().splitlines()
    assert lines[0] == "angle_deg,intensity"
    assert len(lines) == 122

    payload = json.loads((outdir / "pattern.json").read_text())
    assert payload["metadata"]["parameters"]["slit_width_mm"] == 40.0
    assert len(payload["points"]) == 121

    out = capsys.readouterr().out
    assert "Edge anomaly:  yes" in out
    assert "On-axis dip:   yes" in out


def test_cli_run_no_edges_with_plot(tmp_path: Path, capsys) -> None:
    outdir = tmp_path / "plain"
    code = main(["run", "-o", str(outdir), "--no-edges", "--plot"])
    assert code == 0
    assert (outdir / "pattern.png").exists()

    payload = json.loads((outdir / "pattern.json").read_text())
    assert payload["metadata"]["parameters"]["edge_diffraction_enabled"] is False
    out = capsys.readouterr().out
    assert "Edge anomaly:  no" in out
    assert "Peak angle:    0 deg" in out


def test_cli_run_torch_backend(tmp_path: Path) -> None:
    outdir = tmp_path / "torch"
    assert main(["run", "-o", str(outdir), "--backend", "torch", "--device", "cpu"]) == 0
    payload = json.loads((outdir / "pattern.json").read_text())
    assert payload["metadata"]["backend"] == "torch"


def test_cli_validate(capsys) -> None:
    assert main(["validate"]) == 0
    out = capsys.readouterr().out
    assert "All validation cases passed" in out
    assert "FAIL" not in out


def test_cli_validate_with_config(examples_dir: Path, capsys) -> None:
    assert main(["validate", "-c", str(examples_dir / "bench.yaml")]) == 0
    assert "Loaded config" in capsys.readouterr().out


def test_cli_inspect(examples_dir: Path, capsys) -> None:
    assert main(["inspect", "-c", str(examples_dir / "wide_slit_cm.yaml")]) == 0
    out = capsys.readouterr().out
    assert "Slit samples:   100 in [-40, 40] mm" in out
    assert "Edges absorbed" in out
    assert "181 from -45 to 45 deg" in out


def test_cli_export_script(tmp_path: Path, examples_dir: Path) -> None:
    target = tmp_path / "bench_script.py"
    assert main(["export-script", "-c", str(examples_dir / "bench.yaml"), "-o", str(target)]) == 0
    text = target.read_text()
    assert "N_SLIT = 100" in text
    compile(text, str(target), "exec")


def test_cli_bad_config_exit_code(tmp_path: Path, capsys) -> None:
    bad = tmp_path / "bad.yaml"
    bad.write_text("parameters:\n  wavelength_mm: -1\n")
    assert main(["inspect", "-c", str(bad)]) == 2
    assert "Wavelength must be positive" in capsys.readouterr().err


def test_cli_missing_config_exit_code(tmp_path: Path) -> None:
    assert main(["run", "-c", str(tmp_path / "missing.yaml"), "-o", str(tmp_path)]) == 2
