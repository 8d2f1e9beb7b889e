"""Energy intake strategies (kcal/day): a tabulated schedule or a generalized logistic curve in age."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from child_weight.constants import DAYS_PER_YEAR
from child_weight.errors import ConfigurationConflict, IntakeIndexError


LOGISTIC_KEYS = ("K", "Q", "A", "B", "nu", "C")

# Absorbs round-off in the elapsed-days / dt ratio before flooring to a column index.
_COLUMN_EPS = 1e-9


@dataclass(frozen=True)
class LogisticIntake:
    """
    Richards curve in age t (years):

      I(t) = A + (K - A) / (C + Q*exp(-B*t))^(1/nu)
    """

    K: float
    Q: float
    A: float
    B: float
    nu: float
    C: float

    def __post_init__(self) -> None:
        if self.nu == 0.0:
            raise ValueError("Logistic intake parameter nu must be non-zero.")

    @classmethod
    def from_mapping(cls, params: dict) -> LogisticIntake:
        missing = [k for k in LOGISTIC_KEYS if k not in params]
        if missing:
            raise KeyError(f"Missing logistic intake parameters: {', '.join(missing)}")
        return cls(**{k: float(params[k]) for k in LOGISTIC_KEYS})

    def __call__(self, t: np.ndarray) -> np.ndarray:
        t = np.asarray(t, dtype=float)
        return self.A + (self.K - self.A) / (self.C + self.Q * np.exp(-self.B * t)) ** (1.0 / self.nu)


class TabulatedIntake:
    """
    Fixed daily intake per individual, one column per time step (shape (N, T)).

    All individuals share one time grid: the column is derived from the elapsed time of the
    first individual, floor(365 * (t[0] - age0[0]) / dt).
    """

    def __init__(self, table: np.ndarray, age0: np.ndarray, dt: float) -> None:
        table = np.asarray(table, dtype=float)
        age0 = np.asarray(age0, dtype=float)
        if table.ndim == 1:
            table = table[None, :]
        if table.ndim != 2:
            raise ValueError(f"Intake table must be 2-D (individuals x steps), got shape {table.shape}.")
        if table.shape[0] != age0.size:
            raise ValueError(
                f"Intake table has {table.shape[0]} rows but the cohort has {age0.size} individuals."
            )
        if dt <= 0.0:
            raise ValueError("dt must be > 0.")
        self.table = table
        self.age0 = age0
        self.dt = float(dt)

    @property
    def n_columns(self) -> int:
        return int(self.table.shape[1])

    @staticmethod
    def required_columns(days: float, dt: float) -> int:
        # The last RK4 stage of the last step reads one column past the last stored step.
        return int(math.floor(days / dt)) + 1

    def column(self, t: np.ndarray) -> int:
        t = np.asarray(t, dtype=float)
        elapsed_steps = DAYS_PER_YEAR * (float(t[0]) - float(self.age0[0])) / self.dt
        return int(math.floor(elapsed_steps + _COLUMN_EPS))

    def __call__(self, t: np.ndarray) -> np.ndarray:
        col = self.column(t)
        if col < 0 or col >= self.n_columns:
            raise IntakeIndexError(
                f"Intake table column {col} is out of range (table has {self.n_columns} columns)."
            )
        return self.table[:, col]


def make_intake(
    age0: np.ndarray,
    dt: float,
    *,
    table: np.ndarray | None = None,
    logistic: LogisticIntake | dict | None = None,
) -> LogisticIntake | TabulatedIntake:
    """Select the intake strategy; exactly one of table / logistic must be given."""
    if (table is None) == (logistic is None):
        raise ConfigurationConflict(
            "Supply exactly one energy intake source: an intake table or logistic curve parameters."
        )
    if table is not None:
        return TabulatedIntake(table, age0, dt)
    if isinstance(logistic, dict):
        return LogisticIntake.from_mapping(logistic)
    return logistic  # type: ignore[return-value]


def build_intake_table(
    n_individuals: int,
    days: float,
    dt: float,
    times_days: np.ndarray,
    energy: np.ndarray,
    *,
    method: str = "linear",
) -> np.ndarray:
    """
    Expand intake change points into a (N, steps + 1) table on the simulation grid.

    times_days: (M,) increasing days at which intake is specified.
    energy: (M,) shared by the cohort, or (N, M) per individual.
    method: "linear" interpolates between change points, "stepwise" holds each value
    until the next change point. Values are held constant outside the given range.
    """
    method = method.strip().lower()
    if method not in ("linear", "stepwise"):
        raise ValueError(f"Unknown interpolation method {method!r}. Use 'linear' or 'stepwise'.")

    times = np.asarray(times_days, dtype=float)
    energy = np.asarray(energy, dtype=float)
    if times.ndim != 1 or times.size == 0:
        raise ValueError("times_days must be a non-empty 1-D array.")
    if np.any(np.diff(times) <= 0.0):
        raise ValueError("times_days must be strictly increasing.")
    if energy.ndim == 1:
        energy = np.broadcast_to(energy, (n_individuals, energy.size))
    if energy.shape != (n_individuals, times.size):
        raise ValueError(
            f"energy must have shape ({times.size},) or ({n_individuals}, {times.size}), got {energy.shape}."
        )

    n_cols = TabulatedIntake.required_columns(days, dt)
    grid = np.arange(n_cols) * dt

    if method == "linear":
        return np.vstack([np.interp(grid, times, row) for row in energy])

    idx = np.searchsorted(times, grid, side="right") - 1
    idx = np.clip(idx, 0, times.size - 1)
    return np.array(energy[:, idx], dtype=float)
