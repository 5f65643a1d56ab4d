"""
Exception hierarchy for pycompute.

All exceptions inherit from PyComputeError so callers can catch any
library-specific failure in one place. Shape and design problems are
validation errors raised at entry, before any computation starts.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages state the actual and the expected values
    - Never catch and re-raise with less information
"""


class PyComputeError(Exception):
    """Base exception for all pycompute errors."""
    pass


class ValidationError(PyComputeError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised for matmul/solve dimension disagreement, non-square matrices,
    and weights or offsets whose length differs from the number of
    observations.
    """
    pass


class DesignError(ValidationError):
    """
    Matrix is not a design matrix.

    A design matrix must carry an intercept: its first column is
    identically 1.

    Attributes:
        column: Index of the offending column (always 0 today)
        n_bad_rows: Number of rows whose first entry is not exactly 1
    """

    def __init__(
        self,
        message: str,
        column: int | None = None,
        n_bad_rows: int | None = None,
    ):
        super().__init__(message)
        self.column = column
        self.n_bad_rows = n_bad_rows


class NumericalError(PyComputeError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class NotPositiveDefiniteError(NumericalError):
    """
    Matrix is not positive definite.

    Raised by the Cholesky decomposition when a pivot is not strictly
    positive, which would otherwise surface as NaN coefficients.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        pivot_index: Row at which the factorization broke down
        pivot_value: Value under the square root at that row
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        pivot_index: int | None = None,
        pivot_value: float | None = None,
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.pivot_index = pivot_index
        self.pivot_value = pivot_value


class ConvergenceError(PyComputeError):
    """
    Iterative algorithm failed to converge.

    Only raised when the caller opts in (``strict=True``); by default
    hitting the iteration cap is a terminal state, not an error.

    Attributes:
        iterations: Number of iterations completed
        final_change: Final relative change of the objective
        reason: Why convergence failed (e.g., 'max_iterations')
        threshold: The convergence threshold that was not met
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold
