from __future__ import annotations

import numpy as np
import pytest

from child_weight.model import ChildModel, Cohort


SCENARIO_LOGISTIC = {'K': 1800.0, 'Q': 1.0, 'A': 500.0, 'B': 0.01, 'nu': 1.0, 'C': 1.0}


def constant_logistic(kcal: float) -> dict:
    # K == A makes the Richards curve flat at A.
    return {'K': kcal, 'Q': 1.0, 'A': kcal, 'B': 0.0, 'nu': 1.0, 'C': 1.0}


@pytest.fixture
def girl_cohort() -> Cohort:
    return Cohort.from_arrays(age=[10.0], sex=[1.0], bmi_category=[2], fat_free_mass=[25.0], fat_mass=[8.0])


@pytest.fixture
def mixed_cohort() -> Cohort:
    return Cohort.from_arrays(
        age=[6.0, 8.5, 12.0, 16.0],
        sex=[0.0, 1.0, 0.0, 1.0],
        bmi_category=[1, 2, 3, 4],
        fat_free_mass=[17.0, 20.0, 37.0, 51.0],
        fat_mass=[3.5, 5.0, 11.0, 30.0],
    )


@pytest.fixture
def scenario_model(girl_cohort) -> ChildModel:
    return ChildModel(girl_cohort, 1.0, logistic=SCENARIO_LOGISTIC)


@pytest.fixture
def ages() -> np.ndarray:
    return np.linspace(2.0, 20.0, 73)
