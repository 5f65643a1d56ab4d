"""
pycompute: dense linear algebra and GLM fitting for Python.

A small numerical core: flat row-major matrix kernels (multiply,
Cholesky factor and solve) and an IRLS engine for generalized linear
models with an optional ridge penalty.

Submodules:
    core: Exceptions, validation, Result envelope, linear algebra kernels
    regression: Exponential families and GLM fitting
"""

__version__ = "0.1.0"

from pycompute import regression

__all__ = [
    "__version__",
    "regression",
]
