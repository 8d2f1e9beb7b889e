import numpy as np
import pytest

from child_weight.errors import ConfigurationConflict, IntakeIndexError
from child_weight.intake import (
    LogisticIntake,
    TabulatedIntake,
    build_intake_table,
    make_intake,
)

from conftest import SCENARIO_LOGISTIC


def test_logistic_closed_form():
    intake = LogisticIntake.from_mapping(SCENARIO_LOGISTIC)
    assert intake(np.array([0.0]))[0] == pytest.approx(1150.0)
    t = np.array([10.0, 12.0])
    expected = 500.0 + 1300.0 / (1.0 + np.exp(-0.01 * t))
    np.testing.assert_allclose(intake(t), expected)


def test_logistic_upper_asymptote():
    intake = LogisticIntake(K=2500.0, Q=5.0, A=1000.0, B=2.0, nu=0.5, C=1.0)
    assert intake(np.array([100.0]))[0] == pytest.approx(2500.0)


def test_logistic_requires_all_parameters():
    with pytest.raises(KeyError):
        LogisticIntake.from_mapping({'K': 1.0, 'Q': 1.0})
    with pytest.raises(ValueError):
        LogisticIntake(K=1.0, Q=1.0, A=1.0, B=1.0, nu=0.0, C=1.0)


def test_exactly_one_intake_source():
    age0 = np.array([10.0])
    with pytest.raises(ConfigurationConflict):
        make_intake(age0, 1.0)
    with pytest.raises(ConfigurationConflict):
        make_intake(age0, 1.0, table=np.ones((1, 5)), logistic=SCENARIO_LOGISTIC)
    assert isinstance(make_intake(age0, 1.0, logistic=SCENARIO_LOGISTIC), LogisticIntake)
    assert isinstance(make_intake(age0, 1.0, table=np.ones((1, 5))), TabulatedIntake)


def test_configuration_conflict_is_value_error():
    with pytest.raises(ValueError):
        make_intake(np.array([10.0]), 1.0)


def test_tabulated_column_from_elapsed_days():
    table = np.array([[1000.0, 1100.0, 1200.0, 1300.0], [2000.0, 2100.0, 2200.0, 2300.0]])
    intake = TabulatedIntake(table, age0=np.array([10.0, 7.0]), dt=1.0)
    np.testing.assert_array_equal(intake(np.array([10.0, 7.0])), [1000.0, 2000.0])
    # Half-step stages stay in the current column.
    t_half = np.array([10.0, 7.0]) + 0.5 / 365.0
    np.testing.assert_array_equal(intake(t_half), [1000.0, 2000.0])
    t2 = np.array([10.0, 7.0]) + 2.0 / 365.0
    np.testing.assert_array_equal(intake(t2), [1200.0, 2200.0])


def test_tabulated_column_with_fractional_dt():
    intake = TabulatedIntake(np.arange(10, dtype=float)[None, :], age0=np.array([5.0]), dt=0.25)
    t = 5.0 + 3 * 0.25 / 365.0
    assert intake.column(np.array([t])) == 3


def test_tabulated_out_of_range_fails_loudly():
    intake = TabulatedIntake(np.ones((1, 3)), age0=np.array([10.0]), dt=1.0)
    with pytest.raises(IntakeIndexError):
        intake(np.array([10.0 + 3.0 / 365.0]))
    with pytest.raises(IndexError):
        intake(np.array([9.0]))


def test_tabulated_rejects_mismatched_rows():
    with pytest.raises(ValueError):
        TabulatedIntake(np.ones((3, 10)), age0=np.array([10.0, 11.0]), dt=1.0)


def test_required_columns():
    assert TabulatedIntake.required_columns(365, 1.0) == 366
    assert TabulatedIntake.required_columns(10, 3.0) == 4


def test_build_table_linear():
    table = build_intake_table(2, 10, 1.0, [0.0, 10.0], [1000.0, 2000.0])
    assert table.shape == (2, 11)
    assert table[0, 5] == pytest.approx(1500.0)
    np.testing.assert_array_equal(table[0], table[1])


def test_build_table_stepwise_per_individual():
    energy = np.array([[1000.0, 2000.0], [1500.0, 1200.0]])
    table = build_intake_table(2, 8, 1.0, [0.0, 5.0], energy, method='stepwise')
    assert table.shape == (2, 9)
    np.testing.assert_array_equal(table[0, :5], 1000.0)
    np.testing.assert_array_equal(table[0, 5:], 2000.0)
    np.testing.assert_array_equal(table[1, 5:], 1200.0)


def test_build_table_holds_outside_range():
    table = build_intake_table(1, 6, 1.0, [2.0, 4.0], [1000.0, 2000.0])
    assert table[0, 0] == pytest.approx(1000.0)
    assert table[0, 6] == pytest.approx(2000.0)


def test_build_table_rejects_bad_input():
    with pytest.raises(ValueError):
        build_intake_table(1, 5, 1.0, [0.0, 0.0], [1.0, 2.0])
    with pytest.raises(ValueError):
        build_intake_table(1, 5, 1.0, [0.0, 1.0], [1.0, 2.0], method='cubic')
    with pytest.raises(ValueError):
        build_intake_table(2, 5, 1.0, [0.0, 1.0], np.ones((3, 2)))
