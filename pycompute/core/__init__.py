"""
Core infrastructure for pycompute.

Shared abstractions used by the domain packages:
    exceptions: Exception hierarchy
    result: Generic Result[P] envelope
    validation: Input validators and flat-matrix shape predicates
    compute: Timing, numeric defaults, linear algebra kernels
"""

from pycompute.core.result import Result
from pycompute.core.exceptions import (
    PyComputeError,
    ValidationError,
    DimensionError,
    DesignError,
    NumericalError,
    NotPositiveDefiniteError,
    ConvergenceError,
)

__all__ = [
    # Result
    "Result",
    # Exceptions
    "PyComputeError",
    "ValidationError",
    "DimensionError",
    "DesignError",
    "NumericalError",
    "NotPositiveDefiniteError",
    "ConvergenceError",
]
