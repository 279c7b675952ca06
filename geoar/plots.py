"""Plotting for replay outputs."""

from __future__ import annotations

from pathlib import Path

import matplotlib
import numpy as np

matplotlib.use("Agg", force=True)
import matplotlib.pyplot as plt  # noqa: E402


def plot_track(positions: np.ndarray, path: str | Path, *, title: str = "Camera track") -> Path:
    """Save a top-down east/north plot of camera positions.

    ``positions`` is an (N, 3) array of scene coordinates; north is -z.
    """

    target = Path(path)
    fig, ax = plt.subplots(figsize=(6, 6))
    if len(positions):
        east = positions[:, 0]
        north = -positions[:, 2]
        ax.plot(east, north, marker=".", linewidth=1.0)
        ax.scatter([east[0]], [north[0]], color="tab:green", label="start", zorder=3)
        ax.scatter([east[-1]], [north[-1]], color="tab:red", label="end", zorder=3)
        ax.legend(loc="best")
    ax.set_xlabel("East (m)")
    ax.set_ylabel("North (m)")
    ax.set_aspect("equal", adjustable="datalim")
    ax.grid(True, linestyle="--", alpha=0.5)
    ax.set_title(title)
    fig.tight_layout()
    fig.savefig(target, dpi=120)
    plt.close(fig)
    return target
