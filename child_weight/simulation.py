"""Public entry points for running the childhood body composition model.

This module re-exports from sub-modules.
"""

from __future__ import annotations

# Cohort state, model and integrator
from child_weight.model import (
    ChildModel,
    Cohort,
    SimulationResult,
    rk4_step,
    simulate,
)

# Errors
from child_weight.errors import (
    ChildWeightError,
    ConfigurationConflict,
    DomainViolation,
    IntakeIndexError,
)

# Intake strategies
from child_weight.intake import (
    LogisticIntake,
    TabulatedIntake,
    build_intake_table,
    make_intake,
)

# Reference values
from child_weight.reference import (
    BmiCategory,
    ReferenceTable,
    ReferenceValueSet,
    reference_row,
)


__all__ = [
    # Model
    'ChildModel',
    'Cohort',
    'SimulationResult',
    'rk4_step',
    'simulate',
    # Errors
    'ChildWeightError',
    'ConfigurationConflict',
    'DomainViolation',
    'IntakeIndexError',
    # Intake
    'LogisticIntake',
    'TabulatedIntake',
    'build_intake_table',
    'make_intake',
    # Reference
    'BmiCategory',
    'ReferenceTable',
    'ReferenceValueSet',
    'reference_row',
]
