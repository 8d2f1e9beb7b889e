from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field

import numpy as np

from child_weight.constants import (
    DAYS_PER_YEAR,
    DELTA_MAX,
    FFM_COST,
    FFM_SYNTHESIS_COST,
    FM_COST,
    FM_SYNTHESIS_COST,
    K_INTERCEPT,
    MODEL_TYPE,
    RHO_FM,
    THERMIC_FRACTION,
)
from child_weight.curves import ENERGY_BALANCE_IMPACT, GROWTH_DYNAMIC, GROWTH_IMPACT
from child_weight.errors import DomainViolation
from child_weight.intake import LogisticIntake, TabulatedIntake, make_intake
from child_weight.physiology import delta_adjustment, ffm_energy_density, partition_coefficient
from child_weight.reference import BmiCategory, ReferenceTable, ReferenceValueSet


Derivative = Callable[[np.ndarray, np.ndarray, np.ndarray], np.ndarray]


@dataclass
class Cohort:
    age: np.ndarray  # shape (N,) years
    sex: np.ndarray  # shape (N,) 0 = male, 1 = female (fractional values blend)
    bmi_category: np.ndarray  # shape (N,) BmiCategory values
    fat_free_mass: np.ndarray  # shape (N,) kg
    fat_mass: np.ndarray  # shape (N,) kg

    @classmethod
    def from_arrays(cls, age, sex, bmi_category, fat_free_mass, fat_mass) -> Cohort:
        arrays = {
            'age': np.atleast_1d(np.asarray(age, dtype=float)),
            'sex': np.atleast_1d(np.asarray(sex, dtype=float)),
            'fat_free_mass': np.atleast_1d(np.asarray(fat_free_mass, dtype=float)),
            'fat_mass': np.atleast_1d(np.asarray(fat_mass, dtype=float)),
        }
        cats = np.atleast_1d(np.asarray([BmiCategory.parse(c) for c in np.ravel(bmi_category)], dtype=int))

        for name, arr in arrays.items():
            if arr.ndim != 1:
                raise ValueError(f'{name} must be 1-D, got shape {arr.shape}.')
        n = arrays['age'].size
        if n == 0:
            raise ValueError('Cohort must contain at least one individual.')
        for name, arr in [*arrays.items(), ('bmi_category', cats)]:
            if arr.size != n:
                raise ValueError(f'{name} has {arr.size} values, expected {n} (one per individual).')

        sex_arr = arrays['sex']
        if np.any(~np.isfinite(sex_arr)) or np.any((sex_arr < 0.0) | (sex_arr > 1.0)):
            raise DomainViolation('sex must lie in [0, 1] (0 = male, 1 = female).')

        return cls(
            age=arrays['age'],
            sex=sex_arr,
            bmi_category=cats,
            fat_free_mass=arrays['fat_free_mass'],
            fat_mass=arrays['fat_mass'],
        )

    @property
    def size(self) -> int:
        return int(self.age.size)

    @property
    def body_weight(self) -> np.ndarray:
        return self.fat_free_mass + self.fat_mass


@dataclass
class SimulationResult:
    time: np.ndarray  # shape (S+1,) days since start
    age: np.ndarray  # shape (N, S+1) years
    fat_free_mass: np.ndarray  # shape (N, S+1) kg
    fat_mass: np.ndarray  # shape (N, S+1) kg
    body_weight: np.ndarray  # shape (N, S+1) kg
    valid: np.ndarray  # shape (N, S+1) both masses finite and > 0
    model_type: str = MODEL_TYPE
    meta: dict = field(default_factory=dict)

    @property
    def correct_values(self) -> bool:
        return bool(np.all(self.valid))

    @property
    def n_steps(self) -> int:
        return int(self.time.size - 1)

    def first_invalid_step(self) -> np.ndarray:
        """Per individual: first step whose state is flagged invalid, or -1."""
        bad = ~self.valid
        first = np.argmax(bad, axis=1)
        return np.where(bad.any(axis=1), first, -1)

    def as_dict(self) -> dict:
        return {
            'Time': self.time,
            'Age': self.age,
            'Fat_Free_Mass': self.fat_free_mass,
            'Fat_Mass': self.fat_mass,
            'Body_Weight': self.body_weight,
            'Correct_Values': self.correct_values,
            'Model_Type': self.model_type,
        }


class ChildModel:
    """
    Hall et al. (2013) childhood body composition model for a cohort.

    Sex-specific constants, curves and reference rows are resolved once at construction;
    every method below is vectorized over the cohort.
    """

    def __init__(
        self,
        cohort: Cohort,
        dt: float,
        *,
        intake_table: np.ndarray | None = None,
        logistic: LogisticIntake | dict | None = None,
        reference_values: ReferenceValueSet | int | str = ReferenceValueSet.MEAN,
    ) -> None:
        dt = float(dt)
        if not math.isfinite(dt) or dt <= 0.0:
            raise ValueError(f'dt must be a positive number of days (got {dt}).')

        self.cohort = cohort
        self.dt = dt
        self.intake_source = make_intake(cohort.age, dt, table=intake_table, logistic=logistic)
        self.reference = ReferenceTable.for_cohort(reference_values, cohort.sex, cohort.bmi_category)

        sex = cohort.sex
        self.k_intercept = K_INTERCEPT.blend(sex)
        self.delta_max = DELTA_MAX.blend(sex)
        self.growth = GROWTH_DYNAMIC.blend(sex)
        self.growth_impact = GROWTH_IMPACT.blend(sex)
        self.energy_balance_impact = ENERGY_BALANCE_IMPACT.blend(sex)

    @property
    def size(self) -> int:
        return self.cohort.size

    @property
    def reference_values(self) -> ReferenceValueSet:
        return self.reference.value_set

    def intake(self, t: np.ndarray) -> np.ndarray:
        return self.intake_source(t)

    def delta(self, t: np.ndarray) -> np.ndarray:
        return delta_adjustment(t, self.delta_max)

    def ffm_reference(self, t: np.ndarray) -> np.ndarray:
        return self.reference.ffm(t)

    def fm_reference(self, t: np.ndarray) -> np.ndarray:
        return self.reference.fm(t)

    def intake_reference(self, t: np.ndarray) -> np.ndarray:
        """Intake (kcal/day) that keeps an individual on the reference trajectory at age t."""
        eb = self.energy_balance_impact(t)
        ffm_ref = self.ffm_reference(t)
        fm_ref = self.fm_reference(t)
        delta = self.delta(t)
        growth = self.growth(t)
        p = partition_coefficient(ffm_ref, fm_ref)
        rho_ffm = ffm_energy_density(ffm_ref)
        return (
            eb
            + self.k_intercept
            + (FFM_COST + delta) * ffm_ref
            + (FM_COST + delta) * fm_ref
            + FFM_SYNTHESIS_COST / rho_ffm * (p * eb + growth)
            + FM_SYNTHESIS_COST / RHO_FM * ((1.0 - p) * eb - growth)
        )

    def expenditure(self, t: np.ndarray, ffm: np.ndarray, fm: np.ndarray) -> np.ndarray:
        """
        Energy expenditure (kcal/day). Expenditure enters its own tissue-synthesis term through
        the energy imbalance, so the closed form divides by
          1 + 230/rho_FFM * p + 180/rho_FM * (1 - p).
        """
        delta = self.delta(t)
        i_ref = self.intake_reference(t)
        intake = self.intake(t)
        delta_i = intake - i_ref
        p = partition_coefficient(ffm, fm)
        rho_ffm = ffm_energy_density(ffm)
        growth = self.growth(t)
        expend = (
            self.k_intercept
            + (FFM_COST + delta) * ffm
            + (FM_COST + delta) * fm
            + THERMIC_FRACTION * delta_i
            + (FFM_SYNTHESIS_COST / rho_ffm * p + FM_SYNTHESIS_COST / RHO_FM * (1.0 - p)) * intake
            + growth * (FFM_SYNTHESIS_COST / rho_ffm - FM_SYNTHESIS_COST / RHO_FM)
        )
        return expend / (1.0 + FFM_SYNTHESIS_COST / rho_ffm * p + FM_SYNTHESIS_COST / RHO_FM * (1.0 - p))

    def d_mass(self, t: np.ndarray, ffm: np.ndarray, fm: np.ndarray) -> np.ndarray:
        """Rates (kg/day), shape (2, N): row 0 is dFFM/dt, row 1 is dFM/dt."""
        rho_ffm = ffm_energy_density(ffm)
        p = partition_coefficient(ffm, fm)
        growth = self.growth(t)
        imbalance = self.intake(t) - self.expenditure(t, ffm, fm)

        rates = np.empty((2, self.size), dtype=float)
        rates[0] = (p * imbalance + growth) / rho_ffm
        rates[1] = ((1.0 - p) * imbalance - growth) / RHO_FM
        return rates

    def run(self, days: float) -> SimulationResult:
        return simulate(self, days)


def rk4_step(
    derivative: Derivative,
    age: np.ndarray,
    ffm: np.ndarray,
    fm: np.ndarray,
    dt: float,
) -> tuple[np.ndarray, np.ndarray]:
    """
    One RK4 step of size dt (days). Age (years) is the time argument of the derivative.

    Stage states are offset by the raw stage rates (0.5*k1, 0.5*k2, k3); dt is factored out of
    the stages and applied once in the weighted update.
    """
    half_age = age + 0.5 * dt / DAYS_PER_YEAR
    full_age = age + dt / DAYS_PER_YEAR

    k1 = derivative(age, ffm, fm)
    k2 = derivative(half_age, ffm + 0.5 * k1[0], fm + 0.5 * k1[1])
    k3 = derivative(half_age, ffm + 0.5 * k2[0], fm + 0.5 * k2[1])
    k4 = derivative(full_age, ffm + k3[0], fm + k3[1])

    ffm_next = ffm + dt * (k1[0] + 2.0 * k2[0] + 2.0 * k3[0] + k4[0]) / 6.0
    fm_next = fm + dt * (k1[1] + 2.0 * k2[1] + 2.0 * k3[1] + k4[1]) / 6.0
    return ffm_next, fm_next


def _valid_mass(ffm: np.ndarray, fm: np.ndarray) -> np.ndarray:
    return np.isfinite(ffm) & np.isfinite(fm) & (ffm > 0.0) & (fm > 0.0)


def simulate(model: ChildModel, days: float) -> SimulationResult:
    days = float(days)
    if not math.isfinite(days) or days < 0.0:
        raise ValueError(f'days must be a non-negative number (got {days}).')

    dt = model.dt
    n = model.size
    n_steps = int(math.floor(days / dt))

    if isinstance(model.intake_source, TabulatedIntake):
        need = TabulatedIntake.required_columns(days, dt)
        if model.intake_source.n_columns < need:
            raise ValueError(
                f'Intake table has {model.intake_source.n_columns} columns but {days:g} days at '
                f'dt={dt:g} need {need}.'
            )

    cohort = model.cohort
    time = np.arange(n_steps + 1, dtype=float) * dt
    age = cohort.age[:, None] + time[None, :] / DAYS_PER_YEAR
    ffm = np.zeros((n, n_steps + 1), dtype=float)
    fm = np.zeros((n, n_steps + 1), dtype=float)

    ffm[:, 0] = cohort.fat_free_mass
    fm[:, 0] = cohort.fat_mass

    for i in range(1, n_steps + 1):
        ffm[:, i], fm[:, i] = rk4_step(model.d_mass, age[:, i - 1], ffm[:, i - 1], fm[:, i - 1], dt)

    return SimulationResult(
        time=time,
        age=age,
        fat_free_mass=ffm,
        fat_mass=fm,
        body_weight=ffm + fm,
        valid=_valid_mass(ffm, fm),
        meta={
            'dt_days': dt,
            'days': days,
            'reference_values': model.reference_values.name.lower(),
            'intake_mode': 'table' if isinstance(model.intake_source, TabulatedIntake) else 'logistic',
        },
    )
