"""
Generalized linear models.

Public API:
    fit(X, y, *, family=..., alpha=..., ...) -> GLMSolution
    GLM(family, alpha, tolerance)            stateful model with chaining setters

Both entry points handle:
    - Input validation
    - Design construction
    - IRLS fitting
    - Result wrapping

Example:
    >>> from pycompute.regression import fit
    >>> result = fit(X, y, family='bernoulli')
    >>> print(result.coefficients)
    >>> print(result.summary())
"""

from pycompute.regression.design import Design
from pycompute.regression.families import ExponentialFamily, resolve_family
from pycompute.regression.solution import GLMSolution, GLMParams
from pycompute.regression.solvers import fit, GLM

__all__ = [
    "fit",
    "GLM",
    "Design",
    "ExponentialFamily",
    "resolve_family",
    "GLMSolution",
    "GLMParams",
]
