from __future__ import annotations

from dataclasses import dataclass, fields

import numpy as np

from child_weight.constants import SexPair


def general_curve(
    t: np.ndarray,
    A: np.ndarray,
    B: np.ndarray,
    D: np.ndarray,
    tA: np.ndarray,
    tB: np.ndarray,
    tD: np.ndarray,
    tauA: np.ndarray,
    tauB: np.ndarray,
    tauD: np.ndarray,
) -> np.ndarray:
    """
    Exponential decay plus two Gaussian bumps, in age t (years):

      f(t) = A*exp(-(t-tA)/tauA) + B*exp(-0.5*((t-tB)/tauB)^2) + D*exp(-0.5*((t-tD)/tauD)^2)

    Used for the growth rate, growth impact and energy balance impact curves.
    """
    t = np.asarray(t, dtype=float)
    return (
        A * np.exp(-(t - tA) / tauA)
        + B * np.exp(-0.5 * ((t - tB) / tauB) ** 2)
        + D * np.exp(-0.5 * ((t - tD) / tauD) ** 2)
    )


@dataclass(frozen=True)
class BlendedCurve:
    A: np.ndarray
    B: np.ndarray
    D: np.ndarray
    tA: np.ndarray
    tB: np.ndarray
    tD: np.ndarray
    tauA: np.ndarray
    tauB: np.ndarray
    tauD: np.ndarray

    def __call__(self, t: np.ndarray) -> np.ndarray:
        return general_curve(
            t, self.A, self.B, self.D, self.tA, self.tB, self.tD, self.tauA, self.tauB, self.tauD
        )


@dataclass(frozen=True)
class CurveParams:
    A: SexPair
    B: SexPair
    D: SexPair
    tA: SexPair  # years
    tB: SexPair  # years
    tD: SexPair  # years
    tauA: SexPair  # years
    tauB: SexPair  # years
    tauD: SexPair  # years

    def blend(self, sex: np.ndarray) -> BlendedCurve:
        """Resolve every parameter to per-individual values for the cohort's sex vector."""
        return BlendedCurve(**{f.name: getattr(self, f.name).blend(sex) for f in fields(self)})


# Growth rate (kcal/day) driving fat-free mass deposition.
GROWTH_DYNAMIC = CurveParams(
    A=SexPair(3.2, 2.3),
    B=SexPair(9.6, 8.4),
    D=SexPair(10.1, 1.1),
    tA=SexPair(4.7, 4.5),
    tB=SexPair(12.5, 11.7),
    tD=SexPair(15.0, 16.2),
    tauA=SexPair(2.5, 1.0),
    tauB=SexPair(1.0, 0.9),
    tauD=SexPair(1.5, 0.7),
)

GROWTH_IMPACT = CurveParams(
    A=SexPair(3.2, 2.3),
    B=SexPair(9.6, 8.4),
    D=SexPair(10.0, 1.1),
    tA=SexPair(4.7, 4.5),
    tB=SexPair(12.5, 11.7),
    tD=SexPair(15.0, 16.0),
    tauA=SexPair(1.0, 1.0),
    tauB=SexPair(0.94, 0.94),
    tauD=SexPair(0.69, 0.69),
)

# Energy imbalance (kcal/day) of the reference trajectory.
ENERGY_BALANCE_IMPACT = CurveParams(
    A=SexPair(7.2, 16.5),
    B=SexPair(30.0, 47.0),
    D=SexPair(21.0, 41.0),
    tA=SexPair(5.6, 4.8),
    tB=SexPair(9.8, 9.1),
    tD=SexPair(15.0, 13.5),
    tauA=SexPair(15.0, 7.0),
    tauB=SexPair(1.5, 1.0),
    tauD=SexPair(2.0, 1.5),
)
