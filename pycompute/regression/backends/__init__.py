"""
Regression backends.

Available backends:
    CPUIRLSBackend: IRLS with a Cholesky inner solve
"""

from pycompute.regression.backends.cpu_glm import CPUIRLSBackend

__all__ = [
    "CPUIRLSBackend",
]
