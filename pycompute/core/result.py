"""
Generic result container for pycompute computations.

Every backend returns its payload wrapped in a Result so timing,
warnings and reproducibility metadata travel with the numbers.

Design decisions:
    - Generic over parameter payload P
    - info dict for method-specific metadata (iterations, convergence)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) so a fitted result cannot drift
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


def _default_provenance() -> dict[str, str]:
    """Library versions that produced a result."""
    import numpy
    import scipy
    from pycompute import __version__

    return {
        'pycompute_version': __version__,
        'numpy_version': numpy.__version__,
        'scipy_version': scipy.__version__,
    }


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope.

    Attributes:
        params: Domain-specific parameters (coefficients, deviance, ...)
        info: Structured metadata (method, convergence, diagnostics)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation
        provenance: Library versions, filled in automatically

    Example:
        >>> Result(
        ...     params=GLMParams(...),
        ...     info={'method': 'irls_cholesky', 'converged': True},
        ...     timing={'total_seconds': 0.002, 'irls': 0.0018},
        ...     backend_name='cpu_irls'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    provenance: dict[str, str] = field(default_factory=_default_provenance)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
