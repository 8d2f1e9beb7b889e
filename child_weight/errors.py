"""Exceptions raised while building or running a child weight model."""

from __future__ import annotations


class ChildWeightError(Exception):
    pass


class ConfigurationConflict(ChildWeightError, ValueError):
    """Both or neither of the intake modes (table, logistic curve) were given."""


class DomainViolation(ChildWeightError, ValueError):
    """A covariate lies outside the domain the model is defined on."""


class IntakeIndexError(ChildWeightError, IndexError):
    """Tabulated intake was read outside of the table."""
