"""
GLM solution types.

Contains the parameter payload produced by the IRLS backend and the
user-facing solution wrapper with inference helpers.
"""

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray
from scipy import stats

from pycompute.core.result import Result
from pycompute.core.exceptions import NumericalError, ValidationError
from pycompute.core.compute.linalg.cholesky import inverse
from pycompute.regression.families import resolve_family

if TYPE_CHECKING:
    from pycompute.regression.design import Design


@dataclass(frozen=True)
class GLMParams:
    """
    Parameter payload for a fitted GLM.

    information_matrix is the unpenalized Xᵀ diag(w) X at the final
    coefficients, flattened row-major (p * p,).
    """
    coefficients: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    linear_predictor: NDArray[np.floating[Any]]
    information_matrix: NDArray[np.floating[Any]]
    deviance: float
    penalized_deviance: float
    null_deviance: float
    deviance_history: tuple[float, ...]
    penalized_deviance_history: tuple[float, ...]
    aic: float
    dispersion: float
    alpha: float
    df_residual: int
    df_null: int
    n_iter: int
    converged: bool
    family_name: str
    link_name: str


@dataclass
class GLMSolution:
    """
    User-facing GLM results.

    Wraps the backend Result; standard errors are derived lazily from
    the information matrix.
    """
    _result: Result[GLMParams]
    _design: 'Design'

    _standard_errors: NDArray[np.floating[Any]] | None = None

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def linear_predictor(self) -> NDArray[np.floating[Any]]:
        return self._result.params.linear_predictor

    @property
    def information_matrix(self) -> NDArray[np.floating[Any]]:
        """Flat (p * p,) observed information at the fitted coefficients."""
        return self._result.params.information_matrix

    @property
    def deviance(self) -> float:
        return self._result.params.deviance

    @property
    def null_deviance(self) -> float:
        return self._result.params.null_deviance

    @property
    def deviance_history(self) -> tuple[float, ...]:
        """Unpenalized deviance after each IRLS iteration."""
        return self._result.params.deviance_history

    @property
    def penalized_deviance_history(self) -> tuple[float, ...]:
        """Penalized deviance after each IRLS iteration, the quantity tested for convergence."""
        return self._result.params.penalized_deviance_history

    @property
    def aic(self) -> float:
        return self._result.params.aic

    @property
    def dispersion(self) -> float:
        return self._result.params.dispersion

    @property
    def converged(self) -> bool:
        return self._result.params.converged

    @property
    def n_iter(self) -> int:
        return self._result.params.n_iter

    @property
    def df_residual(self) -> int:
        return self._result.params.df_residual

    @property
    def family_name(self) -> str:
        return self._result.params.family_name

    @property
    def residuals_response(self) -> NDArray[np.floating[Any]]:
        """y - μ."""
        return self._design.y - self.fitted_values

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        """
        SE(β) = sqrt(φ · diag(I⁻¹)).

        I is the unpenalized information matrix, so for a ridge fit these
        are the unpenalized Wald standard errors at the shrunken estimate.
        NaN when the information matrix cannot be inverted.
        """
        if self._standard_errors is not None:
            return self._standard_errors

        p = len(self.coefficients)
        try:
            cov = inverse(self.information_matrix, name='information matrix')
            se = np.sqrt(self.dispersion * np.diag(cov.reshape(p, p)))
        except (NumericalError, ValidationError):
            se = np.full(p, np.nan, dtype=np.float64)
        self._standard_errors = se
        return self._standard_errors

    @property
    def test_statistics(self) -> NDArray[np.floating[Any]]:
        """Wald statistics β / SE(β) (z for fixed dispersion, t otherwise)."""
        with np.errstate(divide='ignore', invalid='ignore'):
            stat = self.coefficients / self.standard_errors
        return np.where(np.isfinite(stat), stat, np.nan)

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """Two-sided p-values for the Wald statistics."""
        stat = np.abs(self.test_statistics)
        if self._fixed_dispersion:
            return 2.0 * stats.norm.sf(stat)
        return 2.0 * stats.t.sf(stat, self.df_residual)

    @property
    def _fixed_dispersion(self) -> bool:
        return resolve_family(self.family_name).dispersion_is_fixed

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def summary(self) -> str:
        """R-style summary of the fit."""
        params = self._result.params
        stat_label = 'z value' if self._fixed_dispersion else 't value'
        lines = [
            "Generalized Linear Model Results",
            "=" * 64,
            f"Family: {params.family_name} (link: {params.link_name})",
            f"Observations: {self._design.n}",
            f"Predictors: {self._design.p}",
            f"Ridge penalty: {params.alpha:g}",
            "",
            "Coefficients:",
            "-" * 64,
            f"{'':<8} {'Estimate':>14} {'Std.Error':>12} {stat_label:>10} {'Pr(>|.|)':>12}",
            "-" * 64,
        ]

        for i, (coef, se, z, pv) in enumerate(zip(
            self.coefficients, self.standard_errors, self.test_statistics, self.p_values
        )):
            se_str = f"{se:12.6f}" if not np.isnan(se) else "          NA"
            z_str = f"{z:10.3f}" if not np.isnan(z) else "        NA"
            p_str = f"{pv:12.4g}" if not np.isnan(pv) else "          NA"
            lines.append(f"  β[{i}]: {coef:14.6f} {se_str} {z_str} {p_str}")

        lines.extend([
            "-" * 64,
            f"Dispersion: {params.dispersion:.6g}",
            f"Null deviance:     {params.null_deviance:.4f} on {params.df_null} DF",
            f"Residual deviance: {params.deviance:.4f} on {params.df_residual} DF",
            f"AIC: {params.aic:.4f}",
            f"IRLS iterations: {params.n_iter} "
            f"({'converged' if params.converged else 'iteration cap reached'})",
            f"Backend: {self.backend_name}",
        ])
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"GLMSolution(family={self.family_name!r}, n={self._design.n}, "
            f"p={self._design.p}, deviance={self.deviance:.4f}, "
            f"converged={self.converged})"
        )
