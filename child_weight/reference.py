"""Reference body composition by age, sex and BMI category (ages 2 to 18).

Sources: Fomon et al. 1982 and Haschke 1989 for ages 2-5 (not stratified by BMI),
Ellis et al. 2000 / NHANES-derived values for ages 6-18.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

import numpy as np

from child_weight.errors import DomainViolation


MIN_AGE = 2
MAX_AGE = 18
N_AGES = MAX_AGE - MIN_AGE + 1


class BmiCategory(IntEnum):
    UNDER = 1
    NORMAL = 2
    OVER = 3
    OBESE = 4

    @classmethod
    def parse(cls, value: object) -> BmiCategory:
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls[key]
            try:
                value = float(key)
            except ValueError:
                raise DomainViolation(f"Unknown BMI category {value!r}. Use 1-4 or under/normal/over/obese.") from None
        try:
            f = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise DomainViolation(f"Unknown BMI category {value!r}.") from None
        if not f.is_integer() or int(f) not in {c.value for c in cls}:
            raise DomainViolation(f"BMI category must be one of 1, 2, 3, 4 (got {value!r}).")
        return cls(int(f))


class ReferenceValueSet(IntEnum):
    MEAN = 0
    MEDIAN = 1

    @classmethod
    def parse(cls, value: object) -> ReferenceValueSet:
        if isinstance(value, ReferenceValueSet):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls[key]
        try:
            return cls(int(value))  # type: ignore[call-overload]
        except (TypeError, ValueError):
            raise ValueError(f"Unknown reference value set {value!r}. Use 'mean' (0) or 'median' (1).") from None


def _shared(male: float, female: float) -> list[list[float]]:
    return [[male, female]] * len(BmiCategory)


def _by_category(
    under: tuple[float, float],
    normal: tuple[float, float],
    over: tuple[float, float],
    obese: tuple[float, float],
) -> list[list[float]]:
    return [list(under), list(normal), list(over), list(obese)]


# Tables are (age, category, sex) with sex index 0 = male, 1 = female.
FFM_MEAN = np.array(
    [
        _shared(10.134, 9.477),  # 2
        _shared(12.099, 11.494),  # 3
        _shared(14.0, 13.2),  # 4
        _shared(15.72, 14.86),  # 5
        _by_category((12.7942, 13.7957), (17.0238, 15.2337), (19.3070, 17.7866), (22.2248, 21.2170)),  # 6
        _by_category((17.8106, 18.4835), (19.0775, 17.5198), (20.3344, 18.9406), (23.1765, 22.2733)),  # 7
        _by_category((20.3597, 18.5363), (20.4774, 19.6317), (22.1128, 21.6080), (25.8151, 25.1641)),  # 8
        _by_category((19.3668, 17.0314), (22.3768, 21.3680), (26.7714, 26.1791), (31.3143, 30.1484)),  # 9
        _by_category((20.3271, 23.7546), (26.2985, 26.4307), (29.6861, 32.5531), (36.6630, 34.1787)),  # 10
        _by_category((25.5568, 21.2704), (27.4862, 28.8484), (32.8810, 34.9192), (39.1109, 39.0934)),  # 11
        _by_category((27.9345, 27.7570), (31.5756, 33.3547), (36.9403, 39.1253), (44.0610, 43.9033)),  # 12
        _by_category((30.1592, 26.9376), (35.7001, 36.2985), (43.5796, 41.3549), (48.3233, 47.0629)),  # 13
        _by_category((21.2736, 29.2222), (40.4352, 37.1184), (47.0679, 44.8448), (56.7861, 47.6488)),  # 14
        _by_category((36.1157, 34.1242), (43.2381, 40.0629), (50.7450, 45.9011), (58.3804, 50.1206)),  # 15
        _by_category((40.5041, 38.1473), (44.8314, 40.0155), (54.5065, 44.8730), (60.6145, 51.3464)),  # 16
        _by_category((40.5722, 36.5821), (48.7226, 41.6682), (57.3895, 48.4993), (60.3961, 53.4969)),  # 17
        _by_category((42.7400, 31.2639), (49.7806, 41.8400), (58.2319, 47.9007), (61.8395, 51.3603)),  # 18
    ],
    dtype=float,
)

FFM_MEDIAN = np.array(
    [
        _shared(10.134, 9.477),  # 2
        _shared(12.099, 11.494),  # 3
        _shared(14.0, 13.2),  # 4
        _shared(15.72, 14.86),  # 5
        _by_category((14.4641, 13.8627), (17.1430, 15.1282), (19.2280, 17.6859), (21.9501, 20.4992)),  # 6
        _by_category((16.3729, 16.6347), (18.2285, 17.2507), (21.7099, 20.0341), (24.9713, 23.4162)),  # 7
        _by_category((18.0019, 17.2583), (19.9148, 19.4286), (24.6404, 22.1758), (27.4774, 26.8346)),  # 8
        _by_category((19.2548, 17.5150), (21.9058, 21.2721), (26.5243, 25.6952), (30.8636, 29.2900)),  # 9
        _by_category((20.3271, 23.7546), (26.2985, 26.4307), (29.6861, 32.5531), (36.6630, 34.1787)),  # 10
        _by_category((25.5568, 21.2704), (27.4862, 28.8484), (32.8810, 34.9192), (39.1109, 39.0934)),  # 11
        _by_category((27.9345, 27.7570), (31.5756, 33.3547), (36.9403, 39.1253), (44.0610, 43.9033)),  # 12
        _by_category((30.1592, 26.9376), (35.7001, 36.2985), (43.5796, 41.3549), (48.3233, 47.0629)),  # 13
        _by_category((21.2736, 29.2222), (40.4352, 37.1184), (47.0679, 44.8448), (56.7861, 47.6488)),  # 14
        _by_category((36.1157, 34.1242), (43.2381, 40.0629), (50.7450, 45.9011), (58.3804, 50.1206)),  # 15
        _by_category((41.8846, 38.1473), (44.8314, 40.0155), (54.5065, 44.8730), (60.6145, 51.3464)),  # 16
        _by_category((40.5722, 36.5821), (48.7226, 41.6682), (57.3895, 48.4993), (60.3961, 53.4969)),  # 17
        _by_category((42.7400, 31.2639), (49.7806, 41.8400), (58.2319, 47.9007), (61.8395, 51.3603)),  # 18
    ],
    dtype=float,
)

FM_MEAN = np.array(
    [
        _shared(2.456, 2.433),  # 2
        _shared(2.576, 2.606),  # 3
        _shared(2.7, 2.8),  # 4
        _shared(3.66, 4.47),  # 5
        _by_category((1.7764, 2.5951), (3.4540, 3.8303), (4.8055, 5.7014), (7.9672, 9.3883)),  # 6
        _by_category((2.3398, 2.8164), (3.5859, 4.2782), (5.4625, 6.5960), (8.4350, 10.4148)),  # 7
        _by_category((3.2767, 3.0828), (4.1138, 5.2226), (5.5455, 7.3667), (9.3266, 12.0550)),  # 8
        _by_category((2.3902, 2.6538), (4.1705, 5.0218), (6.6958, 8.6945), (11.5896, 14.1436)),  # 9
        _by_category((2.4479, 3.2454), (4.9982, 5.4190), (7.9746, 9.1949), (16.3177, 13.9706)),  # 10
        _by_category((3.3203, 2.6392), (5.4113, 6.0374), (8.9515, 10.9333), (16.9403, 18.6393)),  # 11
        _by_category((3.4905, 3.7443), (6.3199, 7.1416), (10.7410, 12.6422), (20.7120, 23.3028)),  # 12
        _by_category((3.7085, 3.2124), (7.0187, 8.4339), (13.6491, 14.2744), (23.7980, 24.5466)),  # 13
        _by_category((1.9970, 3.9076), (8.1211, 8.7344), (15.2322, 16.2757), (30.4881, 28.6411)),  # 14
        _by_category((4.2798, 3.8050), (8.5973, 9.8169), (16.8229, 17.9753), (32.0464, 29.0900)),  # 15
        _by_category((4.6019, 4.5292), (9.1734, 9.8278), (19.3477, 16.1585), (32.1754, 30.8017)),  # 16
        _by_category((4.2804, 4.3746), (10.0719, 9.8915), (20.2305, 18.4581), (30.7093, 35.2589)),  # 17
        _by_category((4.9325, 3.3333), (11.1103, 9.3370), (21.0289, 18.4491), (36.5275, 30.2936)),  # 18
    ],
    dtype=float,
)

FM_MEDIAN = np.array(
    [
        _shared(2.456, 2.433),  # 2
        _shared(2.576, 2.606),  # 3
        _shared(2.7, 2.8),  # 4
        _shared(3.66, 4.47),  # 5
        _by_category((2.0359, 2.5660), (3.4642, 3.7042), (4.6220, 5.6735), (7.1058, 8.7339)),  # 6
        _by_category((2.3771, 2.9560), (3.6030, 4.1865), (5.5651, 6.4374), (8.0501, 9.3100)),  # 7
        _by_category((2.1231, 3.0917), (3.6729, 4.8531), (5.8971, 7.0172), (8.9372, 11.5469)),  # 8
        _by_category((2.4068, 2.9027), (4.0597, 4.8707), (6.5720, 8.7112), (10.8084, 12.7559)),  # 9
        _by_category((2.4479, 3.2454), (4.9982, 5.4190), (7.9746, 9.1949), (16.3177, 13.9706)),  # 10
        _by_category((3.3203, 2.6392), (5.4113, 6.0374), (8.9515, 10.9333), (16.9403, 18.6393)),  # 11
        _by_category((3.4905, 3.7443), (6.3199, 7.1416), (10.7410, 12.6422), (20.7120, 23.3028)),  # 12
        _by_category((3.7085, 3.2124), (7.0187, 8.4339), (13.6491, 14.2744), (23.7980, 24.5466)),  # 13
        _by_category((1.9970, 3.9076), (8.1211, 8.7344), (15.2322, 16.2757), (30.4881, 28.6411)),  # 14
        _by_category((4.2798, 3.8050), (8.5973, 9.8169), (16.8229, 17.9753), (32.0464, 29.0900)),  # 15
        _by_category((4.6585, 4.5292), (9.1734, 9.8278), (19.3477, 16.1585), (32.1754, 30.8017)),  # 16
        _by_category((4.2804, 4.3746), (10.0719, 9.8915), (20.2305, 18.4581), (30.7093, 35.2589)),  # 17
        _by_category((4.9325, 3.3333), (11.1103, 9.3370), (21.0289, 18.4491), (36.5275, 30.2936)),  # 18
    ],
    dtype=float,
)

TABLES: dict[ReferenceValueSet, tuple[np.ndarray, np.ndarray]] = {
    ReferenceValueSet.MEAN: (FFM_MEAN, FM_MEAN),
    ReferenceValueSet.MEDIAN: (FFM_MEDIAN, FM_MEDIAN),
}


def _select_columns(table: np.ndarray, sex: np.ndarray, bmi_category: np.ndarray) -> np.ndarray:
    """(ages, 4, 2) table -> (ages, N): pick each individual's category, blend male/female by sex."""
    cat_idx = np.asarray(bmi_category, dtype=int) - 1
    sex = np.asarray(sex, dtype=float)
    per_ind = table[:, cat_idx, :]  # (ages, N, 2)
    return per_ind[:, :, 0] * (1.0 - sex) + per_ind[:, :, 1] * sex


def interpolate_rows(rows: np.ndarray, t: np.ndarray) -> np.ndarray:
    """
    Piecewise-linear interpolation of per-individual tabulated rows (shape (17, N)) at ages t.

    Ages >= 18 take the age-18 row. Below 18 the lower row is floor(t) clamped to [2, 17]
    and the fraction is always t - floor(t).
    """
    t = np.asarray(t, dtype=float)
    floor_t = np.floor(t)
    lower = np.clip(floor_t, MIN_AGE, MAX_AGE - 1).astype(int) - MIN_AGE
    upper = np.minimum(lower + 1, N_AGES - 1)
    frac = t - floor_t

    cols = np.arange(rows.shape[1])
    lo = rows[lower, cols]
    hi = rows[upper, cols]
    value = lo + frac * (hi - lo)
    return np.where(t >= MAX_AGE, rows[N_AGES - 1, cols], value)


@dataclass(frozen=True)
class ReferenceTable:
    """Reference FFM/FM rows resolved once for a cohort (each of shape (17, N))."""

    value_set: ReferenceValueSet
    ffm_rows: np.ndarray
    fm_rows: np.ndarray

    @classmethod
    def for_cohort(
        cls,
        value_set: ReferenceValueSet | int | str,
        sex: np.ndarray,
        bmi_category: np.ndarray,
    ) -> ReferenceTable:
        value_set = ReferenceValueSet.parse(value_set)
        cats = np.asarray(bmi_category)
        valid = np.isin(cats, [c.value for c in BmiCategory])
        if not np.all(valid):
            bad = sorted({str(c) for c in cats[~valid]})
            raise DomainViolation(f"BMI category must be one of 1, 2, 3, 4 (got {', '.join(bad)}).")
        ffm_table, fm_table = TABLES[value_set]
        return cls(
            value_set=value_set,
            ffm_rows=_select_columns(ffm_table, sex, cats),
            fm_rows=_select_columns(fm_table, sex, cats),
        )

    def ffm(self, t: np.ndarray) -> np.ndarray:
        return interpolate_rows(self.ffm_rows, t)

    def fm(self, t: np.ndarray) -> np.ndarray:
        return interpolate_rows(self.fm_rows, t)


def reference_row(
    value_set: ReferenceValueSet | int | str,
    age_years: int,
    category: BmiCategory | int | str,
    sex: float,
) -> tuple[float, float]:
    """Tabulated (FFM, FM) in kg for one integer age, category and sex blend."""
    if int(age_years) != age_years or not (MIN_AGE <= age_years <= MAX_AGE):
        raise ValueError(f"age_years must be an integer in [{MIN_AGE}, {MAX_AGE}] (got {age_years}).")
    ffm_table, fm_table = TABLES[ReferenceValueSet.parse(value_set)]
    row = int(age_years) - MIN_AGE
    c = BmiCategory.parse(category).value - 1
    s = float(sex)
    ffm = ffm_table[row, c, 0] * (1.0 - s) + ffm_table[row, c, 1] * s
    fm = fm_table[row, c, 0] * (1.0 - s) + fm_table[row, c, 1] * s
    return float(ffm), float(fm)
