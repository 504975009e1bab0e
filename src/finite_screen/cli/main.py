"""CLI main module with subcommands for run, validate, inspect, and export-script.

Usage:
    python -m finite_screen.cli run --config bench.yaml --out out_dir
    python -m finite_screen.cli validate
    python -m finite_screen.cli inspect --config bench.yaml
    python -m finite_screen.cli export-script --config bench.yaml -o script.py
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from ..core.config import Backend, Device, ExperimentConfig, load_config
from ..core.errors import ConfigError, FiniteScreenError
from ..core.logging import get_logger, level_from_verbosity, setup_logging
from ..core.sampling import SLIT_SAMPLES, edge_positions, slit_sample_positions, wavenumber

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def _load(args: argparse.Namespace) -> ExperimentConfig:
    """Load the config named by ``--config`` (defaults when absent) and apply CLI overrides."""
    config_path = getattr(args, "config", None)
    config = load_config(config_path) if config_path else ExperimentConfig()

    overrides = {}
    if getattr(args, "backend", None):
        overrides["backend"] = Backend(args.backend)
    if getattr(args, "device", None):
        overrides["device"] = Device(args.device)
    if overrides:
        config = ExperimentConfig(**{**config.model_dump(), **overrides})

    if getattr(args, "no_edges", False):
        config = config.model_copy(
            update={
                "parameters": config.parameters.model_copy(
                    update={"edge_diffraction_enabled": False}
                )
            }
        )
    return config


def cmd_run(args: argparse.Namespace) -> int:
    """Run a sweep and write the configured result files."""
    from ..io.results import write_results_csv, write_results_json
    from ..physics.diagnostics import is_edge_anomaly, pattern_metrics
    from ..physics.simulator import simulate_sweep

    config = _load(args)
    out_path = Path(args.out) if args.out else Path(config.output.directory)
    out_path.mkdir(parents=True, exist_ok=True)

    result = simulate_sweep(config)
    metrics = pattern_metrics(result.points)

    if config.output.write_csv:
        print("Wrote", write_results_csv(out_path / "pattern.csv", result.points))
    if config.output.write_json:
        print("Wrote", write_results_json(out_path / "pattern.json", result))
    if config.output.write_plot or args.plot:
        from ..io.plot import plot_pattern

        plot_pattern(result.points, result.parameters, save_path=out_path / "pattern.png")
        print("Wrote", out_path / "pattern.png")

    print("\nSweep Summary:")
    print("-" * 40)
    print(f"  Angles:        {len(result)}")
    print(f"  Backend:       {result.backend}")
    print(f"  Peak angle:    {metrics.peak_angle_deg:g} deg")
    if metrics.on_axis_intensity is not None:
        print(f"  On-axis:       {metrics.on_axis_intensity:.2f}")
    if metrics.central_lobe_fwhm_deg is not None:
        print(f"  Central FWHM:  {metrics.central_lobe_fwhm_deg:.2f} deg")
    print(f"  On-axis dip:   {'yes' if metrics.on_axis_dip else 'no'}")
    print(f"  Edge anomaly:  {'yes' if is_edge_anomaly(result.parameters) else 'no'}")
    print(f"  Config hash:   {result.config_hash}")
    return EXIT_OK


def cmd_validate(args: argparse.Namespace) -> int:
    """Run the model self-checks and report pass/fail."""
    from ..physics.validation import run_validation

    print("Running validation suite...")
    params = _load(args).to_parameters() if getattr(args, "config", None) else None
    if params is not None:
        print("Loaded config:", args.config)

    cases = run_validation(params)

    print("\nValidation Results:")
    print("-" * 60)
    for case in cases:
        status = "PASS" if case.passed else "FAIL"
        print(f"  {case.name:24} {status}  {case.detail}")
    print("-" * 60)

    if all(case.passed for case in cases):
        print("\nAll validation cases passed")
        return EXIT_OK
    print("\nSome validation cases failed")
    return EXIT_FAILURE


def cmd_inspect(args: argparse.Namespace) -> int:
    """Print the parameter snapshot and derived sampling without simulating."""
    from ..physics.diagnostics import is_edge_anomaly

    config = _load(args)
    params = config.to_parameters()
    angles = config.angles()
    slit = slit_sample_positions(params.slit_width_mm)
    edges = edge_positions(params.screen_width_mm)

    print("Parameters:")
    print("-" * 40)
    for name, value in params.to_dict().items():
        print(f"  {name:32} {value}")
    print()

    print("Sampling:")
    print("-" * 40)
    print(f"  Wavenumber k:   {wavenumber(params.wavelength_mm):.6f} rad/mm")
    print(f"  Slit samples:   {SLIT_SAMPLES} in [{slit[0]:g}, {slit[-1]:g}] mm")
    print(f"  Edge positions: {edges[0]:g}, {edges[1]:g} mm")
    print(f"  Angles:         {len(angles)} from {angles[0]:g} to {angles[-1]:g} deg")
    print(f"  Backend:        {config.backend.value} ({config.device.value})")
    print()

    print("Diagnosis:")
    print("-" * 40)
    if is_edge_anomaly(params):
        print("  Edge anomaly: slit and edge waves comparable, on-axis dip expected")
    elif not params.edge_diffraction_enabled:
        print("  Edges absorbed: ideal single-slit pattern")
    else:
        print("  Edges bare: edge waves present")
    return EXIT_OK


def cmd_export_script(args: argparse.Namespace) -> int:
    """Write the standalone script for the configured parameters."""
    from ..io.export import write_script

    config = _load(args)
    path = write_script(args.out, config.to_parameters(), config.sweep)
    print("Wrote", path)
    return EXIT_OK


def _add_config_arg(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        required=required,
        help="Path to YAML/JSON experiment config" + ("" if required else " (default: bench)"),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="finite-screen",
        description="Finite-screen slit diffraction simulator",
    )
    parser.add_argument(
        "--verbose", "-v", action="count", default=0, help="Increase log verbosity (-v, -vv)"
    )
    parser.add_argument("--log-file", type=Path, default=None, help="JSON lines log file")

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    parser_run = subparsers.add_parser("run", help="Simulate a sweep and write results")
    _add_config_arg(parser_run, required=False)
    parser_run.add_argument(
        "--out", "-o", type=Path, default=None, help="Output directory (default: from config)"
    )
    parser_run.add_argument("--backend", choices=[b.value for b in Backend], default=None)
    parser_run.add_argument("--device", choices=[d.value for d in Device], default=None)
    parser_run.add_argument(
        "--no-edges", action="store_true", help="Absorb the screen edges (disable edge waves)"
    )
    parser_run.add_argument("--plot", action="store_true", help="Also write pattern.png")
    parser_run.set_defaults(func=cmd_run)

    parser_validate = subparsers.add_parser(
        "validate", help="Run model self-checks and report pass/fail"
    )
    _add_config_arg(parser_validate, required=False)
    parser_validate.set_defaults(func=cmd_validate)

    parser_inspect = subparsers.add_parser(
        "inspect", help="Print parameters and derived sampling without simulating"
    )
    _add_config_arg(parser_inspect, required=True)
    parser_inspect.set_defaults(func=cmd_inspect)

    parser_export = subparsers.add_parser(
        "export-script", help="Write a standalone numpy script of the same model"
    )
    _add_config_arg(parser_export, required=False)
    parser_export.add_argument(
        "--out", "-o", type=Path, required=True, help="Output .py file or directory"
    )
    parser_export.set_defaults(func=cmd_export_script)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_file, level_from_verbosity(args.verbose))

    try:
        return int(args.func(args) or 0)
    except (FileNotFoundError, ConfigError, ValidationError) as e:
        logger.error("Configuration error", {"error": str(e)})
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG
    except FiniteScreenError as e:
        logger.error("Simulation error", {"error": str(e), "type": type(e).__name__})
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
