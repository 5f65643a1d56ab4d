"""
GLM Design.

A Design is the validated, read-only input of one fit: the flat
row-major design matrix X (n x p, first column all 1), the response y,
and the per-observation weights and offsets with their defaults
substituted once (weights 1, offsets 0).

Building a Design is the Initialized state of the IRLS engine: every
shape and design check happens here, before any iteration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pycompute.core.exceptions import DesignError, DimensionError, ValidationError
from pycompute.core.validation import (
    check_1d,
    check_array,
    check_consistent_length,
    check_finite,
    check_length,
    is_design,
    is_matrix,
)


@dataclass(frozen=True)
class Design:
    """
    Validated inputs for a GLM fit.

    Construction:
        Design.from_arrays(X, y)                          # X flat or (n, p)
        Design.from_arrays(X, y, weights=w, offsets=o)

    The arrays are private copies marked read-only; nothing downstream
    can mutate a caller's data.
    """
    _X: NDArray[np.floating[Any]]
    _y: NDArray[np.floating[Any]]
    _weights: NDArray[np.floating[Any]]
    _offsets: NDArray[np.floating[Any]]
    _n: int
    _p: int

    @classmethod
    def from_arrays(
        cls,
        X: ArrayLike,
        y: ArrayLike,
        *,
        weights: ArrayLike | None = None,
        offsets: ArrayLike | None = None,
    ) -> Design:
        """
        Build a Design from array-likes.

        Args:
            X: Design matrix, flat row-major of length n * p or 2D (n, p)
            y: Response vector (n,)
            weights: Prior weights (n,), default all 1
            offsets: Offsets added to the linear predictor (n,), default all 0

        Raises:
            ValidationError: Non-numeric or non-finite input, negative weights
            DimensionError: Inconsistent lengths
            DesignError: First column of X is not all 1
        """
        X_arr = check_array(X, 'X')
        y_arr = check_array(y, 'y')

        if y_arr.ndim == 2 and y_arr.shape[1] == 1:
            y_arr = y_arr.ravel()
        check_1d(y_arr, 'y')
        n = len(y_arr)
        if n == 0:
            raise DimensionError("y: no observations")

        if X_arr.ndim == 2:
            check_consistent_length(X_arr, y_arr, names=('X', 'y'))
        elif X_arr.ndim != 1:
            raise DimensionError(
                f"X: expected flat or 2D array, got {X_arr.ndim}D with shape {X_arr.shape}"
            )
        X_flat = np.array(X_arr, dtype=np.float64).ravel()

        try:
            p = is_matrix(X_flat, n)
        except DimensionError as e:
            raise DimensionError(f"X: {e} (y has {n} observations)") from e
        if p == 0:
            raise DimensionError("X: no columns")

        check_finite(X_flat, 'X')
        check_finite(y_arr, 'y')

        if not is_design(X_flat, n):
            n_bad = int(np.sum(X_flat[::p] != 1.0))
            raise DesignError(
                f"X: not a design matrix, first column must be all 1 "
                f"({n_bad} of {n} rows differ)",
                column=0,
                n_bad_rows=n_bad,
            )

        weights_arr = cls._per_observation(weights, n, 'weights', default=1.0)
        if np.any(weights_arr < 0):
            raise ValidationError("weights: must be non-negative")
        offsets_arr = cls._per_observation(offsets, n, 'offsets', default=0.0)

        y_copy = np.array(y_arr, dtype=np.float64)
        for arr in (X_flat, y_copy, weights_arr, offsets_arr):
            arr.setflags(write=False)

        return cls(
            _X=X_flat, _y=y_copy, _weights=weights_arr, _offsets=offsets_arr,
            _n=n, _p=p,
        )

    @staticmethod
    def _per_observation(
        values: ArrayLike | None, n: int, name: str, default: float
    ) -> NDArray[np.floating[Any]]:
        if values is None:
            return np.full(n, default, dtype=np.float64)
        arr = np.array(check_array(values, name), dtype=np.float64).ravel()
        check_length(arr, n, name)
        check_finite(arr, name)
        return arr

    # === Properties ===

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Design matrix, flat row-major (n * p,)."""
        return self._X

    @property
    def X2d(self) -> NDArray[np.floating[Any]]:
        """Design matrix as an (n, p) view."""
        return self._X.reshape(self._n, self._p)

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Response vector (n,)."""
        return self._y

    @property
    def weights(self) -> NDArray[np.floating[Any]]:
        """Prior weights (n,)."""
        return self._weights

    @property
    def offsets(self) -> NDArray[np.floating[Any]]:
        """Offsets (n,)."""
        return self._offsets

    @property
    def n(self) -> int:
        """Number of observations."""
        return self._n

    @property
    def p(self) -> int:
        """Number of predictors, intercept included."""
        return self._p
