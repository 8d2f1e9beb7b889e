from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np

from child_weight.model import SimulationResult


# Beyond this many individuals the legend is dropped.
MAX_LEGEND_ENTRIES = 12


def plot_trajectories(result: SimulationResult, out_path: Path, *, labels: list[str] | None = None) -> None:
    """Body weight, fat-free mass and fat mass vs age, one line per individual."""
    n_ind = result.body_weight.shape[0]
    if labels is None:
        labels = [f"#{j}" for j in range(n_ind)]

    fig, (ax1, ax2, ax3) = plt.subplots(
        3, 1, figsize=(10, 10), sharex=True, gridspec_kw={"height_ratios": [2, 1, 1]}
    )

    for j in range(n_ind):
        age = result.age[j]
        ax1.plot(age, result.body_weight[j], label=labels[j], linewidth=1.2)
        ax2.plot(age, result.fat_free_mass[j], linewidth=1.0)
        ax3.plot(age, result.fat_mass[j], linewidth=1.0)

        invalid = ~result.valid[j]
        if np.any(invalid):
            ax1.scatter(age[invalid], result.body_weight[j][invalid], color="tab:red", s=6, zorder=3)

    ax1.set_ylabel("Body weight (kg)")
    ax1.set_title(f"Body Composition Trajectories ({result.model_type})")
    ax1.grid(True, alpha=0.3)
    if n_ind <= MAX_LEGEND_ENTRIES:
        ax1.legend(ncol=2, fontsize=8)

    ax2.set_ylabel("FFM (kg)")
    ax2.grid(True, alpha=0.3)

    ax3.axhline(y=0, color="gray", linewidth=0.8, linestyle="--")
    ax3.set_xlabel("Age (years)")
    ax3.set_ylabel("FM (kg)")
    ax3.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(out_path, dpi=160)
    plt.close(fig)
