from __future__ import annotations

import numpy as np

from child_weight.constants import DELTA_MIN, H, P, RHO_FM


def ffm_energy_density(ffm: np.ndarray) -> np.ndarray:
    """Energy density of fat-free mass (kcal/kg); grows with FFM."""
    return 4.3 * np.asarray(ffm, dtype=float) + 837.0


def partition_coefficient(ffm: np.ndarray, fm: np.ndarray) -> np.ndarray:
    """
    Forbes-type partition: fraction of an energy imbalance going to fat-free mass.

      p = C / (C + FM),  C = 10.4 * rho_FFM / rho_FM
    """
    c = 10.4 * ffm_energy_density(ffm) / RHO_FM
    return c / (c + np.asarray(fm, dtype=float))


def delta_adjustment(t: np.ndarray, delta_max: np.ndarray) -> np.ndarray:
    """Physical activity coefficient (kcal/kg/day), decaying from delta_max to DELTA_MIN around age P."""
    t = np.asarray(t, dtype=float)
    return DELTA_MIN + (delta_max - DELTA_MIN) * (1.0 / (1.0 + (t / P) ** H))
