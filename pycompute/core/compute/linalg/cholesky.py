"""
Cholesky decomposition and the linear solve built on it.

Matrices are flat row-major arrays. For a symmetric positive definite
n x n matrix A, ``cholesky`` returns the flat lower-triangular L with
L Lᵀ = A, computed row by row (Cholesky-Banachiewicz):

    s       = L[j, :j] · L[i, :j]
    L[i, i] = sqrt(A[i, i] - s)
    L[i, j] = (A[i, j] - s) / L[j, j]        for j < i

A pivot A[i, i] - s that is not strictly positive means A is not
positive definite, as does a NaN or inf entry. Both are raised as
NotPositiveDefiniteError rather than left to propagate as NaN.

``solve`` factors A and then runs a forward substitution L z = b and a
back substitution Lᵀ x = z. The back substitution reads Lᵀ[i, j] as
L[j, i] directly, so the transpose is never formed.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pycompute.core.exceptions import DimensionError, NotPositiveDefiniteError, ValidationError
from pycompute.core.validation import is_square, is_symmetric


def cholesky(a: ArrayLike, name: str = 'A') -> NDArray[np.floating[Any]]:
    """
    Lower-triangular Cholesky factor of a flat SPD matrix.

    Args:
        a: Flat row-major n x n symmetric positive definite matrix
        name: Matrix name used in error messages

    Returns:
        Flat row-major n x n L (upper triangle zero) with L Lᵀ ≈ A

    Raises:
        DimensionError: If a is not square
        ValidationError: If a is not symmetric
        NotPositiveDefiniteError: If a holds NaN or inf, or a pivot is not
            strictly positive
    """
    a = np.asarray(a, dtype=np.float64).ravel()
    n = is_square(a)
    finite = np.isfinite(a)
    if not np.all(finite):
        row = int(np.flatnonzero(~finite)[0]) // n
        raise NotPositiveDefiniteError(
            f"{name}: not positive definite (non-finite entry in row {row})",
            matrix_name=name,
            pivot_index=row,
            pivot_value=float('nan'),
        )
    if not is_symmetric(a):
        raise ValidationError(f"{name}: matrix is not symmetric")

    L = np.zeros(n * n, dtype=np.float64)

    for i in range(n):
        row_i = L[i * n: i * n + i]
        for j in range(i + 1):
            s = float(L[j * n: j * n + j] @ row_i[:j])

            if i == j:
                pivot = a[i * n + i] - s
                if not pivot > 0.0:
                    raise NotPositiveDefiniteError(
                        f"{name}: not positive definite (pivot {pivot:.6g} at row {i})",
                        matrix_name=name,
                        pivot_index=i,
                        pivot_value=float(pivot),
                    )
                L[i * n + i] = np.sqrt(pivot)
            else:
                L[i * n + j] = (a[i * n + j] - s) / L[j * n + j]

    return L


def forward_substitution(L: ArrayLike, b: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Solve L z = b for flat lower-triangular L.

    Raises:
        DimensionError: If shapes disagree
    """
    L = np.asarray(L, dtype=np.float64).ravel()
    b = np.asarray(b, dtype=np.float64).ravel()
    n = is_square(L)
    if len(b) != n:
        raise DimensionError(f"forward substitution: L is {n}x{n} but b has length {len(b)}")

    z = np.zeros(n, dtype=np.float64)
    for i in range(n):
        z[i] = (b[i] - L[i * n: i * n + i] @ z[:i]) / L[i * n + i]
    return z


def back_substitution(L: ArrayLike, z: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Solve Lᵀ x = z for flat lower-triangular L.

    Lᵀ[i, j] is read as L[j, i] (column i of L below the diagonal).

    Raises:
        DimensionError: If shapes disagree
    """
    L = np.asarray(L, dtype=np.float64).ravel()
    z = np.asarray(z, dtype=np.float64).ravel()
    n = is_square(L)
    if len(z) != n:
        raise DimensionError(f"back substitution: L is {n}x{n} but z has length {len(z)}")

    x = np.zeros(n, dtype=np.float64)
    for i in range(n - 1, -1, -1):
        # column i of L, rows i+1..n-1
        below = L[(i + 1) * n + i:: n]
        x[i] = (z[i] - below @ x[i + 1:]) / L[i * n + i]
    return x


def solve(a: ArrayLike, b: ArrayLike, name: str = 'A') -> NDArray[np.floating[Any]]:
    """
    Solve A x = b for symmetric positive definite A.

    Args:
        a: Flat row-major n x n SPD matrix
        b: Right-hand side, length n
        name: Matrix name used in error messages

    Returns:
        x, length n

    Raises:
        DimensionError: If a is not square or b has the wrong length
        ValidationError: If a is not symmetric
        NotPositiveDefiniteError: If a is not positive definite or not finite
    """
    n = is_square(np.asarray(a).ravel())
    b = np.asarray(b, dtype=np.float64).ravel()
    if len(b) != n:
        raise DimensionError(f"solve: {name} is {n}x{n} but b has length {len(b)}")

    L = cholesky(a, name=name)
    z = forward_substitution(L, b)
    return back_substitution(L, z)


def inverse(a: ArrayLike, name: str = 'A') -> NDArray[np.floating[Any]]:
    """
    Inverse of a flat SPD matrix, one Cholesky solve per column.

    Returns:
        Flat row-major n x n inverse
    """
    L = cholesky(a, name=name)
    n = is_square(L)
    inv = np.empty((n, n), dtype=np.float64)
    for k in range(n):
        e_k = np.zeros(n, dtype=np.float64)
        e_k[k] = 1.0
        inv[:, k] = back_substitution(L, forward_substitution(L, e_k))
    return inv.ravel()
