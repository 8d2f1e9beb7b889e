"""Physiological constants of the childhood energy balance model (Hall et al. 2013)."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


DAYS_PER_YEAR = 365.0

# Energy density of fat mass (kcal/kg)
RHO_FM = 9400.0

# Delta (physical activity) adjustment: delta = DELTA_MIN + (delta_max - DELTA_MIN) / (1 + (t/P)^H)
DELTA_MIN = 10.0
P = 12.0
H = 10.0

# Expenditure coefficients (kcal/kg/day and kcal per kg deposited)
FFM_COST = 22.4
FM_COST = 4.5
THERMIC_FRACTION = 0.24
FFM_SYNTHESIS_COST = 230.0
FM_SYNTHESIS_COST = 180.0

MODEL_TYPE = "Children"


@dataclass(frozen=True)
class SexPair:
    """Constant with a male and a female value; sex=0 is male, sex=1 female."""

    male: float
    female: float

    def blend(self, sex: np.ndarray) -> np.ndarray:
        sex = np.asarray(sex, dtype=float)
        return self.male * (1.0 - sex) + self.female * sex


# Baseline expenditure intercept (kcal/day)
K_INTERCEPT = SexPair(male=800.0, female=700.0)
DELTA_MAX = SexPair(male=19.0, female=17.0)
