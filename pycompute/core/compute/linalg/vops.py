"""
Elementwise vector operations.

Thin, length-checked wrappers over NumPy arithmetic. Inputs may be any
1D array-like; outputs are new float64 arrays.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pycompute.core.exceptions import DimensionError, ValidationError
from pycompute.core.validation import is_matrix


def _pair(u: ArrayLike, v: ArrayLike, op: str) -> tuple[NDArray, NDArray]:
    u = np.asarray(u, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    if u.shape != v.shape:
        raise DimensionError(
            f"{op}: operands have different lengths ({u.shape} vs {v.shape})"
        )
    return u, v


def vadd(u: ArrayLike, v: ArrayLike) -> NDArray:
    """u + v elementwise."""
    u, v = _pair(u, v, 'vadd')
    return u + v


def vsub(u: ArrayLike, v: ArrayLike) -> NDArray:
    """u - v elementwise."""
    u, v = _pair(u, v, 'vsub')
    return u - v


def vmul(u: ArrayLike, v: ArrayLike) -> NDArray:
    """u * v elementwise."""
    u, v = _pair(u, v, 'vmul')
    return u * v


def vdiv(u: ArrayLike, v: ArrayLike) -> NDArray:
    """u / v elementwise. Division by zero follows IEEE semantics."""
    u, v = _pair(u, v, 'vdiv')
    with np.errstate(divide='ignore', invalid='ignore'):
        return u / v


def vsum(u: ArrayLike) -> float:
    """Sum of the entries."""
    return float(np.sum(np.asarray(u, dtype=np.float64)))


def mean(u: ArrayLike) -> float:
    """
    Arithmetic mean.

    Raises:
        ValidationError: If u is empty
    """
    u = np.asarray(u, dtype=np.float64)
    if u.size == 0:
        raise ValidationError("mean: empty input")
    return float(np.mean(u))


def design(x: ArrayLike, n: int) -> NDArray:
    """
    Prepend an intercept column to a flat n-row matrix.

    Args:
        x: Flat row-major n x k matrix (a plain vector is n x 1)
        n: Number of rows

    Returns:
        Flat row-major n x (k + 1) matrix whose first column is all 1
    """
    x = np.asarray(x, dtype=np.float64).ravel()
    k = is_matrix(x, n)
    return np.column_stack([np.ones(n), x.reshape(n, k)]).ravel()
