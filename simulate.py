#!/usr/bin/env -S uv run

from __future__ import annotations

import argparse
from pathlib import Path

from child_weight.commands import options_from_config, run_simulate
from child_weight.errors import ChildWeightError
from child_weight.settings import DEFAULT_CONFIG_PATH, read_config


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate body composition change in children (Hall et al. 2013).")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to config.json.")
    parser.add_argument("--cohort", type=Path, default=None, help="Cohort CSV (age, sex, bmi_cat, ffm, fm). Overrides cohort.csv.")
    parser.add_argument("--intake-table", type=Path, default=None, help="Intake CSV (individuals x steps, kcal/day). Switches to table mode.")
    parser.add_argument("--days", type=float, default=None, help="Days to simulate. Overrides simulation.days.")
    parser.add_argument("--dt", type=float, default=None, help="Time step in days. Overrides simulation.dt_days.")
    parser.add_argument("--reference", choices=["mean", "median"], default=None, help="Reference value set. Overrides simulation.reference_values.")
    parser.add_argument("--out", type=Path, default=None, help="Output directory. Overrides output_dir.")
    parser.add_argument("--no-plot", action="store_true", help="Skip the trajectory plot.")
    parser.add_argument("--check", action=argparse.BooleanOptionalAction, default=None, help="Run cohort plausibility checks before simulating.")
    args = parser.parse_args()

    config = read_config(args.config)
    opts = options_from_config(
        config,
        cohort_csv=args.cohort,
        intake_table_csv=args.intake_table,
        days=args.days,
        dt_days=args.dt,
        reference_values=args.reference,
        output_dir=args.out,
        plot=False if args.no_plot else None,
        check=args.check,
    )

    try:
        run_simulate(opts)
    except (ChildWeightError, ValueError) as e:
        raise SystemExit(f"Error: {e}") from e

    print(f"\nResults written to {opts.output_dir}/")


if __name__ == "__main__":
    main()
