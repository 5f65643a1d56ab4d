"""
Exponential family specifications for GLM fitting.

The family set is closed, so it is a single Enum whose members dispatch
over their own link, variance and deviance formulas. Each member fixes:

- a link g(μ) = η and its inverse g⁻¹(η) = μ
- the derivative dμ/dη, used for IRLS weights
- a variance function V(μ)
- a deviance, twice the log-likelihood deficit to the saturated model

| Member        | Link     | V(μ)     | Dispersion |
|---------------|----------|----------|------------|
| GAUSSIAN      | identity | 1        | estimated  |
| BERNOULLI     | logit    | μ(1-μ)   | 1          |
| POISSON       | log      | μ        | 1          |
| QUASI_POISSON | log      | μ        | estimated  |
| GAMMA         | log      | μ²       | estimated  |
| EXPONENTIAL   | log      | μ²       | 1          |

Overflow at the edge of a family's domain (μ → 0 or 1 for BERNOULLI,
large η for log links) is ordinary float behaviour and is not trapped.

References:
    McCullagh, P., & Nelder, J. A. (1989). Generalized Linear Models (2nd ed.)
"""

from __future__ import annotations

from enum import Enum

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.special import expit, gammaln, logit, xlogy

from pycompute.core.exceptions import ValidationError
from pycompute.core.compute.tolerances import SEED_CLIP


def _unit_weights(y: NDArray, weights: ArrayLike | None) -> NDArray:
    if weights is None:
        return np.ones_like(y)
    return np.asarray(weights, dtype=np.float64)


class ExponentialFamily(Enum):
    """Closed set of GLM families; see the module table."""

    GAUSSIAN = 'gaussian'
    BERNOULLI = 'bernoulli'
    POISSON = 'poisson'
    QUASI_POISSON = 'quasipoisson'
    GAMMA = 'gamma'
    EXPONENTIAL = 'exponential'

    @property
    def link_name(self) -> str:
        if self is ExponentialFamily.GAUSSIAN:
            return 'identity'
        if self is ExponentialFamily.BERNOULLI:
            return 'logit'
        return 'log'

    @property
    def dispersion_is_fixed(self) -> bool:
        """Whether the dispersion φ is known to be 1 a priori."""
        return self in (
            ExponentialFamily.BERNOULLI,
            ExponentialFamily.POISSON,
            ExponentialFamily.EXPONENTIAL,
        )

    # -----------------------------------------------------------------
    # Link
    # -----------------------------------------------------------------

    def link(self, mu: ArrayLike) -> NDArray:
        """g(μ) → η."""
        mu = np.asarray(mu, dtype=np.float64)
        if self is ExponentialFamily.GAUSSIAN:
            return mu.copy()
        if self is ExponentialFamily.BERNOULLI:
            return logit(mu)
        with np.errstate(divide='ignore'):
            return np.log(mu)

    def inv_link(self, nu: ArrayLike) -> NDArray:
        """g⁻¹(η) → μ."""
        nu = np.asarray(nu, dtype=np.float64)
        if self is ExponentialFamily.GAUSSIAN:
            return nu.copy()
        if self is ExponentialFamily.BERNOULLI:
            return expit(nu)
        return np.exp(nu)

    def d_inv_link(self, nu: ArrayLike, mu: ArrayLike) -> NDArray:
        """dμ/dη at η, given μ = g⁻¹(η)."""
        nu = np.asarray(nu, dtype=np.float64)
        mu = np.asarray(mu, dtype=np.float64)
        if self is ExponentialFamily.GAUSSIAN:
            return np.ones_like(nu)
        if self is ExponentialFamily.BERNOULLI:
            return mu * (1.0 - mu)
        # exp'(η) = exp(η) = μ
        return mu.copy()

    # -----------------------------------------------------------------
    # Variance and deviance
    # -----------------------------------------------------------------

    def variance(self, mu: ArrayLike) -> NDArray:
        """Variance function V(μ)."""
        mu = np.asarray(mu, dtype=np.float64)
        if self is ExponentialFamily.GAUSSIAN:
            return np.ones_like(mu)
        if self is ExponentialFamily.BERNOULLI:
            return mu * (1.0 - mu)
        if self in (ExponentialFamily.POISSON, ExponentialFamily.QUASI_POISSON):
            return mu.copy()
        return mu ** 2

    def unit_deviance(self, y: ArrayLike, mu: ArrayLike) -> NDArray:
        """Per-observation deviance contributions d(y_i, μ_i), 0·log 0 = 0."""
        y = np.asarray(y, dtype=np.float64)
        mu = np.asarray(mu, dtype=np.float64)
        if self is ExponentialFamily.GAUSSIAN:
            return (y - mu) ** 2
        with np.errstate(divide='ignore', invalid='ignore'):
            if self is ExponentialFamily.BERNOULLI:
                return 2.0 * (
                    xlogy(y, y) - xlogy(y, mu)
                    + xlogy(1.0 - y, 1.0 - y) - xlogy(1.0 - y, 1.0 - mu)
                )
            if self in (ExponentialFamily.POISSON, ExponentialFamily.QUASI_POISSON):
                return 2.0 * (xlogy(y, y) - xlogy(y, mu) - (y - mu))
            return 2.0 * (-np.log(y / mu) + (y - mu) / mu)

    def deviance(self, y: ArrayLike, mu: ArrayLike, weights: ArrayLike | None = None) -> float:
        """Total deviance Σ wᵢ d(yᵢ, μᵢ)."""
        y = np.asarray(y, dtype=np.float64)
        wt = _unit_weights(y, weights)
        return float(np.sum(wt * self.unit_deviance(y, mu)))

    def penalized_deviance(
        self,
        y: ArrayLike,
        mu: ArrayLike,
        alpha: float,
        coef: ArrayLike,
        weights: ArrayLike | None = None,
    ) -> float:
        """Deviance plus the ridge term α Σ β_j² over j ≥ 1 (intercept excluded)."""
        coef = np.asarray(coef, dtype=np.float64)
        penalty = float(np.sum(coef[1:] ** 2))
        return self.deviance(y, mu, weights) + alpha * penalty

    # -----------------------------------------------------------------
    # Fitting support
    # -----------------------------------------------------------------

    def validate_response(self, y: NDArray) -> None:
        """
        Check y lies in the family's support.

        Raises:
            ValidationError: If any response is outside the support
        """
        if self is ExponentialFamily.BERNOULLI:
            bad = (y < 0) | (y > 1)
            support = 'in [0, 1]'
        elif self in (ExponentialFamily.POISSON, ExponentialFamily.QUASI_POISSON):
            bad = y < 0
            support = '>= 0'
        elif self in (ExponentialFamily.GAMMA, ExponentialFamily.EXPONENTIAL):
            bad = y <= 0
            support = '> 0'
        else:
            return
        if np.any(bad):
            raise ValidationError(
                f"y: {int(np.sum(bad))} values outside the {self.value} support "
                f"(must be {support})"
            )

    def seed_intercept(self, y_mean: float) -> float:
        """The response mean mapped to the predictor scale."""
        if self is ExponentialFamily.GAUSSIAN:
            return float(y_mean)
        if self is ExponentialFamily.BERNOULLI:
            y_mean = min(max(y_mean, SEED_CLIP), 1.0 - SEED_CLIP)
        else:
            y_mean = max(y_mean, SEED_CLIP)
        return float(self.link(np.array([y_mean]))[0])

    # -----------------------------------------------------------------
    # Likelihood
    # -----------------------------------------------------------------

    def log_likelihood(
        self, y: ArrayLike, mu: ArrayLike, weights: ArrayLike | None, dispersion: float
    ) -> float:
        """
        Log-likelihood at μ for the given dispersion.

        QUASI_POISSON has no likelihood and returns NaN.
        """
        y = np.asarray(y, dtype=np.float64)
        mu = np.asarray(mu, dtype=np.float64)
        wt = _unit_weights(y, weights)

        if self is ExponentialFamily.GAUSSIAN:
            rss = float(np.sum(wt * (y - mu) ** 2))
            n = float(np.sum(wt > 0))
            return -0.5 * (rss / dispersion + n * np.log(2 * np.pi * dispersion))
        if self is ExponentialFamily.BERNOULLI:
            return float(np.sum(wt * (xlogy(y, mu) + xlogy(1.0 - y, 1.0 - mu))))
        if self is ExponentialFamily.POISSON:
            return float(np.sum(wt * (xlogy(y, mu) - mu - gammaln(y + 1.0))))
        if self is ExponentialFamily.QUASI_POISSON:
            return float('nan')
        # Gamma with shape k = 1/φ; EXPONENTIAL is k = 1
        k = 1.0 if self is ExponentialFamily.EXPONENTIAL else 1.0 / dispersion
        return float(np.sum(wt * (
            k * np.log(k * y / mu) - k * y / mu - np.log(y) - gammaln(k)
        )))

    def aic(
        self, y: ArrayLike, mu: ArrayLike, weights: ArrayLike | None, rank: int
    ) -> float:
        """
        AIC = -2 loglik + 2 rank.

        Families with an estimated dispersion evaluate the likelihood at
        the maximum-likelihood dispersion (deviance / n) and count the
        dispersion as one extra parameter.
        """
        if self is ExponentialFamily.QUASI_POISSON:
            return float('nan')
        y = np.asarray(y, dtype=np.float64)
        wt = _unit_weights(y, weights)
        if self.dispersion_is_fixed:
            return -2.0 * self.log_likelihood(y, mu, wt, 1.0) + 2.0 * rank
        n = float(np.sum(wt > 0))
        dispersion_mle = self.deviance(y, mu, wt) / n
        ll = self.log_likelihood(y, mu, wt, dispersion_mle)
        return -2.0 * ll + 2.0 + 2.0 * rank

    def __repr__(self) -> str:
        return f"ExponentialFamily.{self.name}(link={self.link_name!r})"


_FAMILY_ALIASES: dict[str, ExponentialFamily] = {
    'gaussian': ExponentialFamily.GAUSSIAN,
    'normal': ExponentialFamily.GAUSSIAN,
    'bernoulli': ExponentialFamily.BERNOULLI,
    'binomial': ExponentialFamily.BERNOULLI,
    'logistic': ExponentialFamily.BERNOULLI,
    'poisson': ExponentialFamily.POISSON,
    'quasipoisson': ExponentialFamily.QUASI_POISSON,
    'quasi_poisson': ExponentialFamily.QUASI_POISSON,
    'gamma': ExponentialFamily.GAMMA,
    'exponential': ExponentialFamily.EXPONENTIAL,
}


def resolve_family(family: str | ExponentialFamily) -> ExponentialFamily:
    """Resolve a family argument to an ExponentialFamily member.

    Args:
        family: A member, or a name such as 'gaussian', 'bernoulli',
                'binomial', 'poisson' (case-insensitive).

    Raises:
        ValueError: If the name is not recognized.
        TypeError: If the argument is neither a string nor a member.
    """
    if isinstance(family, ExponentialFamily):
        return family
    if isinstance(family, str):
        member = _FAMILY_ALIASES.get(family.lower())
        if member is None:
            valid = ', '.join(m.value for m in ExponentialFamily)
            raise ValueError(f"Unknown family: {family!r}. Valid families: {valid}")
        return member
    raise TypeError(
        f"family must be str or ExponentialFamily, got {type(family).__name__}"
    )
