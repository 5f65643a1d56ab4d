"""
Shared compute infrastructure for pycompute.

Numeric defaults, timing, and the dense linear algebra kernels every
domain package builds on.

Submodules:
    timing: Execution timing utilities
    tolerances: Numeric defaults and comparison tiers
    linalg: Vector ops, matrix multiply, Cholesky factor and solve

linalg is not imported here: it depends on core.validation, which in
turn reads its defaults from this package.
"""

from pycompute.core.compute.timing import Timer, timed

__all__ = [
    "Timer",
    "timed",
]
