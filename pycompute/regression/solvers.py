"""
Solver dispatch for GLM regression.

This module provides the fit() function (public API) and the stateful
GLM model, both built on the IRLS backend.
"""

from __future__ import annotations

from typing import Any
import warnings

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pycompute.core.exceptions import ConvergenceError, ValidationError
from pycompute.core.validation import check_non_negative, check_positive
from pycompute.core.compute.tolerances import (
    DEFAULT_MAX_ITER,
    DEFAULT_PENALTY,
    DEFAULT_TOLERANCE,
)
from pycompute.regression.design import Design
from pycompute.regression.families import ExponentialFamily, resolve_family
from pycompute.regression.solution import GLMSolution
from pycompute.regression.backends.cpu_glm import CPUIRLSBackend


def fit(
    X: ArrayLike,
    y: ArrayLike,
    *,
    family: str | ExponentialFamily = 'gaussian',
    alpha: float = DEFAULT_PENALTY,
    tol: float = DEFAULT_TOLERANCE,
    max_iter: int = DEFAULT_MAX_ITER,
    weights: ArrayLike | None = None,
    offsets: ArrayLike | None = None,
    strict: bool = False,
) -> GLMSolution:
    """
    Fit a generalized linear model by IRLS.

    Minimizes the (optionally ridge-penalized) deviance

        D(β) + α Σ_{j≥1} β_j²

    where the intercept β₀ is never penalized.

    Args:
        X: Design matrix, flat row-major (n * p,) or 2D (n, p). The first
            column must be all 1 (the intercept).
        y: Response vector (n,)
        family: 'gaussian', 'bernoulli' (alias 'binomial'), 'poisson',
            'quasipoisson', 'gamma', 'exponential', or an ExponentialFamily
        alpha: Ridge penalty, >= 0
        tol: Convergence tolerance on the relative change in penalized deviance
        max_iter: Maximum IRLS iterations
        weights: Prior weights (n,), default all 1
        offsets: Offsets added to the linear predictor (n,), default all 0
        strict: Raise ConvergenceError instead of warning when the
            iteration cap is reached

    Returns:
        GLMSolution with coefficients, deviance, information matrix and
        inference helpers

    Raises:
        ValidationError: If inputs or hyperparameters are invalid
        DimensionError: If lengths are inconsistent
        DesignError: If the first column of X is not all 1
        NotPositiveDefiniteError: If X'WX becomes singular during IRLS
        ConvergenceError: If strict=True and IRLS did not converge

    Example:
        >>> X = np.column_stack([np.ones(20), hours])
        >>> sol = fit(X, passed, family='bernoulli')
        >>> sol.coefficients
        array([-4.0777,  1.5046])
    """
    solution = _fit(
        X, y, family=family, alpha=alpha, tol=tol, max_iter=max_iter,
        weights=weights, offsets=offsets,
    )
    _report_convergence(solution, tol, strict)
    return solution


def _fit(
    X: ArrayLike,
    y: ArrayLike,
    *,
    family: str | ExponentialFamily,
    alpha: float,
    tol: float,
    max_iter: int,
    weights: ArrayLike | None,
    offsets: ArrayLike | None,
) -> GLMSolution:
    # === Input Validation ===
    # This is the boundary - validate here, trust everywhere else
    family_enum = resolve_family(family)
    check_non_negative(alpha, 'alpha')
    check_positive(tol, 'tol')
    _check_max_iter(max_iter)

    # === Construct Design ===
    design = Design.from_arrays(X, y, weights=weights, offsets=offsets)
    family_enum.validate_response(design.y)

    # === Solve ===
    backend = CPUIRLSBackend()
    result = backend.solve(
        design, family_enum, alpha=float(alpha), tol=float(tol), max_iter=int(max_iter),
    )

    # === Wrap and Return ===
    return GLMSolution(_result=result, _design=design)


def _check_max_iter(max_iter: int) -> None:
    if isinstance(max_iter, bool) or not isinstance(max_iter, (int, np.integer)):
        raise ValidationError(f"max_iter: must be an integer, got {type(max_iter).__name__}")
    if max_iter < 1:
        raise ValidationError(f"max_iter: must be >= 1, got {max_iter}")


def _report_convergence(solution: GLMSolution, tol: float, strict: bool) -> None:
    if solution.converged:
        return
    # same quantity the IRLS loop compares against tol
    history = solution.penalized_deviance_history
    final_change = None
    if len(history) >= 2:
        final_change = abs(history[-1] - history[-2])
        if history[-2] != 0.0:
            final_change /= abs(history[-2])
    message = (
        f"IRLS did not converge after {solution.n_iter} iterations "
        f"(family={solution.family_name}, deviance={solution.deviance:.6f})"
    )
    if strict:
        raise ConvergenceError(
            message,
            iterations=solution.n_iter,
            final_change=final_change,
            reason='max_iterations',
            threshold=tol,
        )
    warnings.warn(message, RuntimeWarning, stacklevel=3)


class GLM:
    """
    Stateful GLM model.

    Configure once, then fit. Setters return the model so calls chain:

        >>> model = GLM('poisson').set_penalty(0.5).set_offsets(log_exposure)
        >>> model.fit(X, counts).coef

    Every fit recomputes from scratch and replaces the results of the
    previous fit. Weights and offsets are checked against the data at fit
    time, not when they are set.
    """

    def __init__(
        self,
        family: str | ExponentialFamily,
        alpha: float = DEFAULT_PENALTY,
        tolerance: float = DEFAULT_TOLERANCE,
    ):
        self.family = resolve_family(family)
        check_non_negative(alpha, 'alpha')
        check_positive(tolerance, 'tolerance')
        self.alpha = float(alpha)
        self.tolerance = float(tolerance)
        self.weights: NDArray[np.floating[Any]] | None = None
        self.offsets: NDArray[np.floating[Any]] | None = None

        self.solution: GLMSolution | None = None

    # === Configuration ===

    def set_penalty(self, alpha: float) -> GLM:
        """Set the ridge penalty (intercept excluded)."""
        check_non_negative(alpha, 'alpha')
        self.alpha = float(alpha)
        return self

    def set_tolerance(self, tolerance: float) -> GLM:
        """Set the convergence tolerance."""
        check_positive(tolerance, 'tolerance')
        self.tolerance = float(tolerance)
        return self

    def set_weights(self, weights: ArrayLike | None) -> GLM:
        """Set prior weights; None restores unit weights."""
        self.weights = None if weights is None else np.array(weights, dtype=np.float64)
        return self

    def set_offsets(self, offsets: ArrayLike | None) -> GLM:
        """Set offsets; None restores zero offsets."""
        self.offsets = None if offsets is None else np.array(offsets, dtype=np.float64)
        return self

    # === Fitting ===

    def fit(
        self,
        x: ArrayLike,
        y: ArrayLike,
        max_iter: int = DEFAULT_MAX_ITER,
        *,
        strict: bool = False,
    ) -> GLM:
        """
        Fit the model to (x, y).

        Args:
            x: Design matrix, flat row-major or 2D, first column all 1
            y: Response vector
            max_iter: Maximum IRLS iterations
            strict: Raise ConvergenceError instead of warning on non-convergence

        Returns:
            self, with coef, deviance and information_matrix populated
        """
        solution = _fit(
            x, y, family=self.family, alpha=self.alpha, tol=self.tolerance,
            max_iter=max_iter, weights=self.weights, offsets=self.offsets,
        )
        self.solution = solution
        _report_convergence(solution, self.tolerance, strict)
        return self

    # === Results of the last fit ===

    def _fitted(self) -> GLMSolution:
        if self.solution is None:
            raise RuntimeError("GLM has not been fitted; call fit() first")
        return self.solution

    @property
    def coef(self) -> NDArray[np.floating[Any]]:
        """Coefficients, index 0 is the intercept."""
        return self._fitted().coefficients

    @property
    def deviance(self) -> float:
        """Unpenalized deviance at the fitted coefficients."""
        return self._fitted().deviance

    @property
    def information_matrix(self) -> NDArray[np.floating[Any]]:
        """Unpenalized X'WX at the fitted coefficients, flat (p * p,)."""
        return self._fitted().information_matrix

    @property
    def converged(self) -> bool:
        return self._fitted().converged

    @property
    def n_iter(self) -> int:
        return self._fitted().n_iter

    def __repr__(self) -> str:
        state = 'unfitted' if self.solution is None else f"deviance={self.deviance:.4f}"
        return (
            f"GLM(family={self.family.value!r}, alpha={self.alpha:g}, "
            f"tolerance={self.tolerance:g}, {state})"
        )
