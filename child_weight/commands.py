"""Cohort simulation command: config -> cohort + intake -> trajectories on disk."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np

from child_weight.input_processing import load_cohort, load_intake_table
from child_weight.model import ChildModel, SimulationResult
from child_weight.output import write_summary_json, write_trajectory_csv
from child_weight.plotting import plot_trajectories
from child_weight.reference import ReferenceValueSet
from child_weight.settings import logistic_params, req_bool, req_float, req_str, resolve_path


@dataclass
class RunOptions:
    cohort_csv: Path
    intake_mode: str  # "logistic" or "table"
    intake_table_csv: Path | None
    logistic: dict | None
    days: float
    dt_days: float
    reference_values: ReferenceValueSet
    check: bool
    output_dir: Path
    plot: bool


def options_from_config(config: dict, **overrides) -> RunOptions:
    """Resolve run options from a validated config; non-None keyword overrides win."""
    intake_table = overrides.get('intake_table_csv')
    mode = 'table' if intake_table is not None else req_str(config, ['intake', 'mode']).strip().lower()

    if mode == 'table' and intake_table is None:
        intake_table = req_str(config, ['intake', 'table_csv'])

    def pick(name: str, default):
        v = overrides.get(name)
        return default if v is None else v

    return RunOptions(
        cohort_csv=resolve_path(str(pick('cohort_csv', req_str(config, ['cohort', 'csv'])))),
        intake_mode=mode,
        intake_table_csv=resolve_path(str(intake_table)) if mode == 'table' else None,
        logistic=logistic_params(config) if mode == 'logistic' else None,
        days=float(pick('days', req_float(config, ['simulation', 'days']))),
        dt_days=float(pick('dt_days', req_float(config, ['simulation', 'dt_days']))),
        reference_values=ReferenceValueSet.parse(
            pick('reference_values', req_str(config, ['simulation', 'reference_values']))
        ),
        check=bool(pick('check', req_bool(config, ['simulation', 'check']))),
        output_dir=resolve_path(str(pick('output_dir', req_str(config, ['output_dir'])))),
        plot=bool(pick('plot', req_bool(config, ['plotting', 'enabled']))),
    )


def _print_summary(result: SimulationResult, echo=print) -> None:
    first_invalid = result.first_invalid_step()
    echo('  ind   age0    age1   bw0_kg   bw1_kg   ffm1_kg   fm1_kg')
    for j in range(result.body_weight.shape[0]):
        line = (
            f'  {j:3d}  {result.age[j, 0]:5.2f}  {result.age[j, -1]:5.2f}'
            f'  {result.body_weight[j, 0]:7.2f}  {result.body_weight[j, -1]:7.2f}'
            f'  {result.fat_free_mass[j, -1]:8.2f}  {result.fat_mass[j, -1]:7.2f}'
        )
        if first_invalid[j] >= 0:
            line += f'  INVALID from step {int(first_invalid[j])}'
        echo(line)


def run_simulate(opts: RunOptions, echo=print) -> SimulationResult:
    cohort = load_cohort(opts.cohort_csv, check=opts.check, echo=echo)
    echo(f'Cohort: {cohort.size} individual(s) from {opts.cohort_csv}')

    intake_table = None
    if opts.intake_mode == 'table':
        intake_table = load_intake_table(opts.intake_table_csv, cohort)
        echo(f'Intake: table {opts.intake_table_csv.name} ({intake_table.shape[1]} columns)')
    else:
        echo(f'Intake: logistic {opts.logistic}')

    model = ChildModel(
        cohort,
        opts.dt_days,
        intake_table=intake_table,
        logistic=opts.logistic,
        reference_values=opts.reference_values,
    )
    echo(
        f'Simulating {opts.days:g} days at dt={opts.dt_days:g} d '
        f'(reference values: {opts.reference_values.name.lower()})'
    )
    result = model.run(opts.days)

    opts.output_dir.mkdir(parents=True, exist_ok=True)
    write_trajectory_csv(opts.output_dir / 'trajectories.csv', result)
    write_summary_json(
        opts.output_dir / 'summary.json',
        result,
        meta={'cohort_csv': str(opts.cohort_csv), 'check': opts.check},
    )
    if opts.plot:
        plot_trajectories(result, opts.output_dir / 'trajectories.png')

    _print_summary(result, echo=echo)
    if not result.correct_values:
        n_bad = int(np.sum(~result.valid.all(axis=1)))
        echo(f'WARNING: {n_bad} individual(s) reached non-positive or non-finite mass; see summary.json.')
    return result
