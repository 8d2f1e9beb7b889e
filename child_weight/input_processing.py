"""Cohort construction from loaded tables, with optional plausibility checks."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from child_weight.io import parse_cohort_csv, parse_intake_csv
from child_weight.model import Cohort
from child_weight.reference import MAX_AGE, MIN_AGE


def validate_cohort(cohort: Cohort, echo=print) -> None:
    """
    Checks behind the `check` flag.

    Raises ValueError for non-finite values or non-positive masses; ages outside the
    tabulated reference range only produce a warning (reference values are clamped there).
    """
    for name in ('age', 'fat_free_mass', 'fat_mass'):
        arr = getattr(cohort, name)
        bad = np.flatnonzero(~np.isfinite(arr))
        if bad.size:
            raise ValueError(f'{name} has non-finite values for individuals {bad.tolist()}.')

    for name in ('fat_free_mass', 'fat_mass'):
        arr = getattr(cohort, name)
        bad = np.flatnonzero(arr <= 0.0)
        if bad.size:
            raise ValueError(f'{name} must be > 0 kg (individuals {bad.tolist()}).')

    outside = np.flatnonzero((cohort.age < MIN_AGE) | (cohort.age > MAX_AGE))
    if outside.size:
        echo(
            f'WARNING: {outside.size} individual(s) outside the reference age range '
            f'[{MIN_AGE}, {MAX_AGE}] years: {outside.tolist()}'
        )


def load_cohort(path: Path, *, check: bool = False, echo=print) -> Cohort:
    table = parse_cohort_csv(path)
    cohort = Cohort.from_arrays(
        age=table.age,
        sex=table.sex,
        bmi_category=table.bmi_category,
        fat_free_mass=table.fat_free_mass,
        fat_mass=table.fat_mass,
    )
    if check:
        validate_cohort(cohort, echo=echo)
    return cohort


def load_intake_table(path: Path, cohort: Cohort) -> np.ndarray:
    table = parse_intake_csv(path)
    if table.shape[0] != cohort.size:
        raise ValueError(
            f'{path.name} has {table.shape[0]} intake rows but the cohort has {cohort.size} individuals.'
        )
    return table
