"""
Dense linear algebra kernels for pycompute.

All kernels work on flat, row-major float64 arrays and raise
immediately with clear messages on shape problems.

Submodules:
    vops: Elementwise vector arithmetic, mean, sum, design matrices
    matmul: Matrix product with optional transposition of either operand
    cholesky: Cholesky factorization, triangular solves, SPD solve
"""

from pycompute.core.compute.linalg.vops import (
    vadd,
    vsub,
    vmul,
    vdiv,
    vsum,
    mean,
    design,
)
from pycompute.core.compute.linalg.matmul import (
    MatmulResult,
    matmul,
    dot,
    t_dot,
    dot_t,
    t_dot_t,
)
from pycompute.core.compute.linalg.cholesky import (
    cholesky,
    forward_substitution,
    back_substitution,
    solve,
    inverse,
)

__all__ = [
    # Vector ops
    "vadd",
    "vsub",
    "vmul",
    "vdiv",
    "vsum",
    "mean",
    "design",
    # Matrix multiply
    "MatmulResult",
    "matmul",
    "dot",
    "t_dot",
    "dot_t",
    "t_dot_t",
    # Cholesky
    "cholesky",
    "forward_substitution",
    "back_substitution",
    "solve",
    "inverse",
]
