"""Plot normalized diffraction patterns with matplotlib."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from ..core.config import SimulationParameters  # noqa: E402
from ..core.types import ResultPoint  # noqa: E402
from ..physics.diagnostics import is_edge_anomaly  # noqa: E402


def _xy(points: Sequence[ResultPoint]) -> tuple[list[float], list[float]]:
    ordered = sorted(points, key=lambda p: p.angle_deg)
    return [p.angle_deg for p in ordered], [p.intensity for p in ordered]


def plot_pattern(
    points: Sequence[ResultPoint],
    params: SimulationParameters,
    save_path: str | Path | None = None,
    compare: Sequence[ResultPoint] | None = None,
    compare_label: str = "edges absorbed",
):
    """Plot intensity against angle, optionally with a comparison curve.

    Args:
        points: Normalized pattern to plot
        params: Parameter snapshot, used for the title and anomaly note
        save_path: If given, the figure is written there and closed
        compare: Optional second pattern drawn dashed
        compare_label: Legend label of the comparison curve

    Returns:
        The matplotlib Figure
    """
    fig, ax = plt.subplots(figsize=(10, 5))

    x, y = _xy(points)
    label = "edges bare" if params.edge_diffraction_enabled else "edges absorbed"
    ax.fill_between(x, y, color="#6366f1", alpha=0.15)
    ax.plot(x, y, color="#6366f1", lw=2, label=label)

    if compare is not None:
        cx, cy = _xy(compare)
        ax.plot(cx, cy, color="#10b981", lw=1.5, ls="--", label=compare_label)

    ax.axvline(0.0, color="#94a3b8", lw=1, ls=":")
    ax.set_xlabel("Angle (deg)")
    ax.set_ylabel("Normalized intensity")
    ax.set_ylim(0, 105)
    ax.set_title(
        f"Finite screen interference (a={params.slit_width_mm:g} mm, "
        f"W={params.screen_width_mm:g} mm, L2={params.distance_screen_to_detector_mm:g} mm)"
    )
    if is_edge_anomaly(params):
        ax.text(
            0.02,
            0.95,
            "Edge waves near anti-phase on axis",
            transform=ax.transAxes,
            color="#b45309",
            va="top",
        )
    ax.grid(True, alpha=0.3)
    ax.legend(loc="upper right")

    if save_path:
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(save_path, dpi=150, bbox_inches="tight")
        plt.close(fig)

    return fig


__all__ = ["plot_pattern"]
