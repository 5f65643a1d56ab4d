"""
Numeric defaults and tolerance tiers.

This is the one place the library's numeric knobs live: GLM fitting
defaults, the symmetry check used before a Cholesky factorization, and
the comparison tiers the test suite uses.
"""

from dataclasses import dataclass


# GLM fitting defaults
DEFAULT_PENALTY = 0.0
DEFAULT_TOLERANCE = 1e-5
DEFAULT_MAX_ITER = 25

# Relative tolerance for A[i, j] == A[j, i]. X'WX built by matmul is
# symmetric only up to summation order.
SYMMETRY_TOLERANCE = 1e-10

# Clip applied to the response mean before mapping it to the predictor
# scale for the intercept seed (keeps logit/log finite).
SEED_CLIP = 1e-6


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# Direct kernels: matmul and triangular solves on well-conditioned input
EXACT = ToleranceTier(
    rtol=1e-10,
    atol=1e-12,
    name='exact',
    description='direct kernels on well-conditioned input',
)

# L @ L.T against the factored matrix
RECONSTRUCTION = ToleranceTier(
    rtol=1e-8,
    atol=1e-6,
    name='reconstruction',
    description='Cholesky reconstruction',
)

# Iterative fits compared against published estimates (4 decimals)
ITERATIVE = ToleranceTier(
    rtol=1e-4,
    atol=1e-3,
    name='iterative',
    description='IRLS estimates against reference values',
)
