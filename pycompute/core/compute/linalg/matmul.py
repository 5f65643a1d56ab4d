"""
Dense matrix multiplication over flat row-major storage.

``matmul`` takes each operand as a flat array plus its *stored* row
count, and a transpose flag per operand. The effective operands are
strided NumPy views of the stored data, so no transposed copy is ever
materialized; the product itself goes through BLAS via ``@``.

The 2D helpers ``dot``, ``t_dot``, ``dot_t`` and ``t_dot_t`` cover the
four transpose combinations for callers that already hold 2D arrays.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pycompute.core.exceptions import DimensionError
from pycompute.core.validation import is_matrix


@dataclass(frozen=True)
class MatmulResult:
    """
    Product of two flat matrices.

    Attributes:
        data: Flat row-major product of length nrows * ncols
        nrows: Rows of the product
        ncols: Columns of the product
    """
    data: NDArray[np.floating[Any]]
    nrows: int
    ncols: int

    @property
    def shape(self) -> tuple[int, int]:
        return (self.nrows, self.ncols)

    def as_2d(self) -> NDArray[np.floating[Any]]:
        """The product as an (nrows, ncols) view."""
        return self.data.reshape(self.nrows, self.ncols)


def _as_view(x: ArrayLike, rows: int, name: str, transpose: bool) -> NDArray:
    flat = np.asarray(x, dtype=np.float64).ravel()
    try:
        cols = is_matrix(flat, rows)
    except DimensionError as e:
        raise DimensionError(f"{name}: {e}") from e
    view = flat.reshape(rows, cols)
    return view.T if transpose else view


def matmul(
    a: ArrayLike,
    b: ArrayLike,
    a_rows: int,
    b_rows: int,
    transpose_a: bool = False,
    transpose_b: bool = False,
) -> MatmulResult:
    """
    Multiply two flat matrices, optionally transposing either operand.

    Args:
        a: Left operand, flat row-major with ``a_rows`` stored rows
        b: Right operand, flat row-major with ``b_rows`` stored rows
        a_rows: Stored row count of ``a`` (before any transpose)
        b_rows: Stored row count of ``b`` (before any transpose)
        transpose_a: Use aᵀ as the left operand
        transpose_b: Use bᵀ as the right operand

    Returns:
        MatmulResult with the flat product and its shape

    Raises:
        DimensionError: If an operand's length is not a multiple of its
            row count, or the inner dimensions disagree

    Example:
        >>> X = [1., 2., 3., 4., 5., 6.]          # 3 x 2
        >>> matmul(X, X, 3, 3, transpose_a=True).as_2d()   # XᵀX, 2 x 2
        array([[35., 44.],
               [44., 56.]])
    """
    left = _as_view(a, a_rows, 'a', transpose_a)
    right = _as_view(b, b_rows, 'b', transpose_b)

    if left.shape[1] != right.shape[0]:
        raise DimensionError(
            f"matmul: inner dimensions disagree: left is {left.shape[0]}x{left.shape[1]}, "
            f"right is {right.shape[0]}x{right.shape[1]}"
        )

    product = left @ right
    return MatmulResult(
        data=np.ascontiguousarray(product).ravel(),
        nrows=product.shape[0],
        ncols=product.shape[1],
    )


def _check_2d_pair(a: NDArray, b: NDArray, inner_a: int, inner_b: int) -> None:
    if a.ndim != 2 or b.ndim != 2:
        raise DimensionError(f"expected 2D operands, got {a.ndim}D and {b.ndim}D")
    if a.shape[inner_a] != b.shape[inner_b]:
        raise DimensionError(
            f"matrix shapes not compatible: {a.shape} and {b.shape}"
        )


def dot(a: ArrayLike, b: ArrayLike) -> NDArray:
    """a @ b."""
    a, b = np.asarray(a, dtype=np.float64), np.asarray(b, dtype=np.float64)
    _check_2d_pair(a, b, 1, 0)
    return matmul(a, b, a.shape[0], b.shape[0]).as_2d()


def t_dot(a: ArrayLike, b: ArrayLike) -> NDArray:
    """aᵀ @ b."""
    a, b = np.asarray(a, dtype=np.float64), np.asarray(b, dtype=np.float64)
    _check_2d_pair(a, b, 0, 0)
    return matmul(a, b, a.shape[0], b.shape[0], transpose_a=True).as_2d()


def dot_t(a: ArrayLike, b: ArrayLike) -> NDArray:
    """a @ bᵀ."""
    a, b = np.asarray(a, dtype=np.float64), np.asarray(b, dtype=np.float64)
    _check_2d_pair(a, b, 1, 1)
    return matmul(a, b, a.shape[0], b.shape[0], transpose_b=True).as_2d()


def t_dot_t(a: ArrayLike, b: ArrayLike) -> NDArray:
    """aᵀ @ bᵀ."""
    a, b = np.asarray(a, dtype=np.float64), np.asarray(b, dtype=np.float64)
    _check_2d_pair(a, b, 0, 1)
    return matmul(
        a, b, a.shape[0], b.shape[0], transpose_a=True, transpose_b=True
    ).as_2d()
