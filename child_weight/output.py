"""Output utilities for simulation results."""

from __future__ import annotations

import csv
import json
from pathlib import Path

from child_weight.model import SimulationResult


def write_trajectory_csv(path: Path, result: SimulationResult) -> None:
    """Write trajectories in long format: one row per (individual, step)."""
    headers = ['individual', 'time_days', 'age_years', 'ffm_kg', 'fm_kg', 'bw_kg', 'valid']

    with path.open('w', newline='', encoding='utf-8') as f:
        w = csv.writer(f)
        w.writerow(headers)
        n_ind, n_cols = result.body_weight.shape
        for j in range(n_ind):
            for i in range(n_cols):
                w.writerow(
                    [
                        j,
                        f'{result.time[i]:.6f}',
                        f'{result.age[j, i]:.6f}',
                        f'{result.fat_free_mass[j, i]:.6f}',
                        f'{result.fat_mass[j, i]:.6f}',
                        f'{result.body_weight[j, i]:.6f}',
                        int(result.valid[j, i]),
                    ]
                )


def build_summary(result: SimulationResult, meta: dict | None = None) -> dict:
    first_invalid = result.first_invalid_step()
    individuals = []
    for j in range(result.body_weight.shape[0]):
        individuals.append(
            {
                'individual': j,
                'age_start_years': float(result.age[j, 0]),
                'age_end_years': float(result.age[j, -1]),
                'bw_start_kg': float(result.body_weight[j, 0]),
                'bw_end_kg': float(result.body_weight[j, -1]),
                'ffm_end_kg': float(result.fat_free_mass[j, -1]),
                'fm_end_kg': float(result.fat_mass[j, -1]),
                'first_invalid_step': int(first_invalid[j]),
            }
        )
    return {
        'model_type': result.model_type,
        'correct_values': result.correct_values,
        'n_steps': result.n_steps,
        'run': {**result.meta, **(meta or {})},
        'individuals': individuals,
    }


def write_summary_json(path: Path, result: SimulationResult, meta: dict | None = None) -> None:
    path.write_text(json.dumps(build_summary(result, meta), indent=2) + '\n', encoding='utf-8')
