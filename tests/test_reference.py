import numpy as np
import pytest

from child_weight.errors import DomainViolation
from child_weight.reference import (
    FFM_MEAN,
    FFM_MEDIAN,
    FM_MEAN,
    FM_MEDIAN,
    BmiCategory,
    ReferenceTable,
    ReferenceValueSet,
    interpolate_rows,
    reference_row,
)


def _table(sex, cats, value_set=ReferenceValueSet.MEAN):
    return ReferenceTable.for_cohort(value_set, np.asarray(sex, dtype=float), np.asarray(cats))


def test_table_shapes():
    for table in (FFM_MEAN, FFM_MEDIAN, FM_MEAN, FM_MEDIAN):
        assert table.shape == (17, 4, 2)
        assert np.all(table > 0.0)


def test_young_ages_not_stratified_by_bmi():
    for table in (FFM_MEAN, FM_MEDIAN):
        for row in range(4):  # ages 2-5
            assert np.all(table[row] == table[row, 0])


def test_exact_at_integer_age():
    ref = _table([1.0], [BmiCategory.NORMAL])
    assert ref.ffm(np.array([10.0]))[0] == ref.ffm_rows[8, 0]
    assert ref.ffm(np.array([10.0]))[0] == pytest.approx(26.4307)
    assert ref.fm(np.array([10.0]))[0] == pytest.approx(5.4190)


def test_midpoint_at_half_year():
    ref = _table([1.0], [BmiCategory.NORMAL])
    assert ref.ffm(np.array([10.5]))[0] == pytest.approx(0.5 * (26.4307 + 28.8484))
    assert ref.fm(np.array([10.5]))[0] == pytest.approx(0.5 * (5.4190 + 6.0374))


def test_clamps_to_age_18():
    ref = _table([0.0, 1.0], [BmiCategory.OBESE, BmiCategory.UNDER])
    at18 = ref.ffm(np.array([18.0, 18.0]))
    for t in (18.0, 19.3, 45.0):
        np.testing.assert_array_equal(ref.ffm(np.array([t, t])), at18)
    np.testing.assert_allclose(at18, [61.8395, 31.2639])
    np.testing.assert_allclose(ref.fm(np.array([30.0, 30.0])), [36.5275, 3.3333])


def test_below_two_uses_first_rows_with_fractional_part():
    ref = _table([0.0], [BmiCategory.NORMAL])
    expected = 10.134 + 0.5 * (12.099 - 10.134)
    assert ref.ffm(np.array([1.5]))[0] == pytest.approx(expected)


def test_sex_blend_is_linear():
    ref = _table([0.0, 0.5, 1.0], [2, 2, 2])
    v = ref.ffm(np.array([14.0, 14.0, 14.0]))
    assert v[0] == pytest.approx(40.4352)
    assert v[2] == pytest.approx(37.1184)
    assert v[1] == pytest.approx(0.5 * (40.4352 + 37.1184))


def test_category_selects_branch():
    ref = _table([0.0] * 4, [1, 2, 3, 4])
    np.testing.assert_allclose(ref.fm(np.full(4, 12.0)), [3.4905, 6.3199, 10.7410, 20.7120])


def test_continuous_across_integer_ages():
    ref = _table([1.0], [3])
    for year in range(3, 18):
        left = ref.ffm(np.array([year - 1e-9]))[0]
        right = ref.ffm(np.array([float(year)]))[0]
        assert left == pytest.approx(right, abs=1e-6)


def test_mean_and_median_differ_only_where_tabulated_differently():
    mean = _table([0.0], [1], ReferenceValueSet.MEAN)
    median = _table([0.0], [1], ReferenceValueSet.MEDIAN)
    assert mean.ffm(np.array([7.0]))[0] != median.ffm(np.array([7.0]))[0]
    assert mean.ffm(np.array([16.0]))[0] == pytest.approx(40.5041)
    assert median.ffm(np.array([16.0]))[0] == pytest.approx(41.8846)
    assert mean.ffm(np.array([12.0]))[0] == median.ffm(np.array([12.0]))[0]


def test_invalid_category_rejected():
    with pytest.raises(DomainViolation):
        _table([0.0], [5])
    with pytest.raises(DomainViolation):
        BmiCategory.parse(0)
    with pytest.raises(DomainViolation):
        BmiCategory.parse('chubby')
    with pytest.raises(DomainViolation):
        BmiCategory.parse(2.5)


def test_category_parsing():
    assert BmiCategory.parse('obese') is BmiCategory.OBESE
    assert BmiCategory.parse(' Normal ') is BmiCategory.NORMAL
    assert BmiCategory.parse('3') is BmiCategory.OVER
    assert BmiCategory.parse(1.0) is BmiCategory.UNDER


def test_value_set_parsing():
    assert ReferenceValueSet.parse('median') is ReferenceValueSet.MEDIAN
    assert ReferenceValueSet.parse(0) is ReferenceValueSet.MEAN
    with pytest.raises(ValueError):
        ReferenceValueSet.parse('mode')
    with pytest.raises(ValueError):
        ReferenceValueSet.parse(2)


def test_reference_row():
    assert reference_row('mean', 6, 'under', 0.0) == pytest.approx((12.7942, 1.7764))
    assert reference_row(ReferenceValueSet.MEDIAN, 6, 1, 1.0) == pytest.approx((13.8627, 2.5660))
    with pytest.raises(ValueError):
        reference_row('mean', 19, 2, 0.0)
    with pytest.raises(ValueError):
        reference_row('mean', 6.5, 2, 0.0)


def test_interpolate_rows_vectorized():
    rows = np.tile(np.arange(17, dtype=float)[:, None], (1, 3))
    t = np.array([2.0, 9.25, 40.0])
    np.testing.assert_allclose(interpolate_rows(rows, t), [0.0, 7.25, 16.0])
