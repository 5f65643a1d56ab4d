"""
Input validation utilities for pycompute.

Two groups live here:

    check_*  "fail fast, fail loud" converters and guards used at API
             boundaries. They raise with the parameter name and the
             actual values rather than silently correcting input.
    is_*     shape predicates over flat, row-major matrices. These are
             the validators the linear algebra kernels and the GLM
             engine rely on.

Matrices are flat sequences of length rows * cols stored row-major, so
element (i, j) of an n-column matrix is ``x[i * n + j]``.
"""

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from pycompute.core.exceptions import ValidationError, DimensionError
from pycompute.core.compute.tolerances import SYMMETRY_TOLERANCE


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to numpy array.

    Accepts any array-like and converts to numpy array. Rejects inputs
    that result in object dtype (indicating mixed types or non-numeric data).

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with floating dtype

    Raises:
        ValidationError: If input cannot be converted to numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    if not np.issubdtype(result.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if not np.issubdtype(result.dtype, np.floating):
        result = result.astype(np.float64)

    return result


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Raises:
        ValidationError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array is 1-dimensional.

    Raises:
        DimensionError: If array is not 1D
    """
    if array.ndim != 1:
        raise DimensionError(
            f"{name}: expected 1D array, got {array.ndim}D with shape {array.shape}"
        )


def check_length(array: NDArray[np.floating[Any]], n: int, name: str) -> None:
    """
    Verify a 1D array has exactly ``n`` entries.

    Raises:
        DimensionError: If the length differs
    """
    if len(array) != n:
        raise DimensionError(f"{name}: expected length {n}, got {len(array)}")


def check_consistent_length(
    *arrays: NDArray[np.floating[Any]],
    names: tuple[str, ...]
) -> None:
    """
    Verify all arrays have the same length (first dimension).

    Raises:
        ValueError: If number of names doesn't match number of arrays
        DimensionError: If arrays have inconsistent lengths
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )

    if len(arrays) < 2:
        return

    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(f"{name}={length}" for name, length in zip(names, lengths))
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_non_negative(value: float, name: str) -> None:
    """Verify a scalar hyperparameter is finite and >= 0."""
    if not np.isfinite(value) or value < 0:
        raise ValidationError(f"{name}: must be a finite value >= 0, got {value!r}")


def check_positive(value: float, name: str) -> None:
    """Verify a scalar hyperparameter is finite and > 0."""
    if not np.isfinite(value) or value <= 0:
        raise ValidationError(f"{name}: must be a finite value > 0, got {value!r}")


# ═══════════════════════════════════════════════════════════════════════
# Flat matrix shape predicates
# ═══════════════════════════════════════════════════════════════════════


def is_square(x: ArrayLike) -> int:
    """
    Side length of a flat square matrix.

    Args:
        x: Flat matrix of length n * n

    Returns:
        n

    Raises:
        DimensionError: If the length is not a perfect square
    """
    length = len(x)
    n = math.isqrt(length)
    if n * n != length:
        raise DimensionError(
            f"matrix of length {length} is not square (not a perfect square)"
        )
    return n


def is_symmetric(x: ArrayLike, tol: float = SYMMETRY_TOLERANCE) -> bool:
    """
    Whether a flat square matrix satisfies x[i*n+j] == x[j*n+i].

    Entries are compared within ``tol`` relative to the larger magnitude
    (absolute for entries below 1).

    Raises:
        DimensionError: If x is not square
    """
    n = is_square(x)
    a = np.asarray(x, dtype=np.float64).reshape(n, n)
    scale = np.maximum(1.0, np.maximum(np.abs(a), np.abs(a.T)))
    return bool(np.all(np.abs(a - a.T) <= tol * scale))


def is_matrix(x: ArrayLike, n: int) -> int:
    """
    Column count of a flat matrix with ``n`` rows.

    Args:
        x: Flat row-major matrix
        n: Number of rows

    Returns:
        p, the number of columns

    Raises:
        DimensionError: If n < 1 or the length is not a multiple of n
    """
    length = len(x)
    if n < 1:
        raise DimensionError(f"row count must be >= 1, got {n}")
    if length % n != 0:
        raise DimensionError(
            f"matrix of length {length} cannot have {n} rows"
        )
    return length // n


def is_design(x: ArrayLike, n: int) -> bool:
    """
    Whether a flat n-row matrix has a first column of exact 1s.

    Raises:
        DimensionError: If x cannot be an n-row matrix
    """
    p = is_matrix(x, n)
    if p == 0:
        return False
    first_column = np.asarray(x, dtype=np.float64)[::p]
    return bool(np.all(first_column == 1.0))
