"""
Tests for the dense linear algebra kernels.

Validates:
    - Vector ops: elementwise arithmetic, length checks, mean/sum, design
    - matmul: all four transpose combinations against a triple loop
    - cholesky: known factors, reconstruction, non-PD detection
    - solve / inverse against numpy.linalg
"""

import numpy as np
import pytest

from pycompute.core.exceptions import (
    DimensionError,
    NotPositiveDefiniteError,
    ValidationError,
)
from pycompute.core.compute.tolerances import EXACT, RECONSTRUCTION
from pycompute.core.compute.linalg import (
    back_substitution,
    cholesky,
    design,
    dot,
    dot_t,
    forward_substitution,
    inverse,
    matmul,
    mean,
    solve,
    t_dot,
    t_dot_t,
    vadd,
    vdiv,
    vmul,
    vsub,
    vsum,
)


# Factorizations with known lower-triangular factors
A2 = [4.0, 12.0, -16.0, 12.0, 37.0, -43.0, -16.0, -43.0, 98.0]
L2 = [2.0, 0.0, 0.0, 6.0, 1.0, 0.0, -8.0, 5.0, 3.0]

A3 = [25.0, 15.0, -5.0, 15.0, 18.0, 0.0, -5.0, 0.0, 11.0]
L3 = [5.0, 0.0, 0.0, 3.0, 3.0, 0.0, -1.0, 1.0, 3.0]

A4 = [
    6.0, 3.0, 4.0, 8.0,
    3.0, 6.0, 5.0, 1.0,
    4.0, 5.0, 10.0, 7.0,
    8.0, 1.0, 7.0, 25.0,
]
L4 = [
    2.449489742783178, 0.0, 0.0, 0.0,
    1.2247448713915892, 2.1213203435596424, 0.0, 0.0,
    1.6329931618554523, 1.414213562373095, 2.309401076758503, 0.0,
    3.2659863237109046, -1.4142135623730956, 1.5877132402714704, 3.1324910215354165,
]


def _random_spd(rng, n):
    M = rng.standard_normal((n, n))
    return (M @ M.T + n * np.eye(n)).ravel()


def _triple_loop(a, b):
    n, k = a.shape
    m = b.shape[1]
    out = np.zeros((n, m))
    for i in range(n):
        for j in range(m):
            for t in range(k):
                out[i, j] += a[i, t] * b[t, j]
    return out


# ═══════════════════════════════════════════════════════════════════════
# Vector ops
# ═══════════════════════════════════════════════════════════════════════


class TestVectorOps:

    def test_elementwise(self):
        u = [1.0, 2.0, 3.0]
        v = [4.0, 5.0, 6.0]
        np.testing.assert_array_equal(vadd(u, v), [5.0, 7.0, 9.0])
        np.testing.assert_array_equal(vsub(u, v), [-3.0, -3.0, -3.0])
        np.testing.assert_array_equal(vmul(u, v), [4.0, 10.0, 18.0])
        np.testing.assert_allclose(vdiv(u, v), [0.25, 0.4, 0.5])

    def test_length_mismatch(self):
        with pytest.raises(DimensionError, match="vadd"):
            vadd([1.0, 2.0], [1.0])

    def test_divide_by_zero_is_ieee(self):
        out = vdiv([1.0, 0.0], [0.0, 0.0])
        assert np.isinf(out[0])
        assert np.isnan(out[1])

    def test_sum_and_mean(self):
        assert vsum([1.0, 2.0, 3.0]) == 6.0
        assert mean([1.0, 2.0, 3.0]) == 2.0

    def test_mean_empty(self):
        with pytest.raises(ValidationError, match="empty"):
            mean([])

    def test_design_prepends_ones(self):
        X = design([0.5, 0.75, 1.0], 3)
        np.testing.assert_array_equal(X, [1.0, 0.5, 1.0, 0.75, 1.0, 1.0])

    def test_design_multi_column(self):
        X = design([1.0, 2.0, 3.0, 4.0], 2)
        np.testing.assert_array_equal(X, [1.0, 1.0, 2.0, 1.0, 3.0, 4.0])


# ═══════════════════════════════════════════════════════════════════════
# Matrix multiply
# ═══════════════════════════════════════════════════════════════════════


class TestMatmul:

    @pytest.mark.parametrize("transpose_a", [False, True])
    @pytest.mark.parametrize("transpose_b", [False, True])
    def test_against_triple_loop(self, rng, transpose_a, transpose_b):
        # effective shapes: (4 x 3) @ (3 x 5)
        a = rng.standard_normal((3, 4)) if transpose_a else rng.standard_normal((4, 3))
        b = rng.standard_normal((5, 3)) if transpose_b else rng.standard_normal((3, 5))

        result = matmul(
            a.ravel(), b.ravel(), a.shape[0], b.shape[0],
            transpose_a=transpose_a, transpose_b=transpose_b,
        )

        expected = _triple_loop(
            a.T if transpose_a else a,
            b.T if transpose_b else b,
        )
        assert result.shape == (4, 5)
        np.testing.assert_allclose(result.as_2d(), expected, rtol=EXACT.rtol, atol=EXACT.atol)

    def test_flat_output_row_major(self):
        X = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
        result = matmul(X, X, 3, 3, transpose_a=True)
        np.testing.assert_array_equal(result.data, [35.0, 44.0, 44.0, 56.0])

    def test_matrix_vector(self):
        X = [1.0, 2.0, 1.0, 3.0]
        result = matmul(X, [0.5, 2.0], 2, 2)
        np.testing.assert_array_equal(result.data, [4.5, 6.5])
        assert result.shape == (2, 1)

    def test_inner_dimension_mismatch(self):
        with pytest.raises(DimensionError, match="inner dimensions disagree"):
            matmul(np.zeros(6), np.zeros(6), 2, 2)

    def test_length_not_multiple_of_rows(self):
        with pytest.raises(DimensionError, match="a:"):
            matmul(np.zeros(7), np.zeros(6), 2, 3)

    def test_inputs_not_mutated(self, rng):
        a = rng.standard_normal(6)
        a_copy = a.copy()
        matmul(a, a, 3, 3, transpose_a=True)
        np.testing.assert_array_equal(a, a_copy)


class TestMatmul2D:

    def test_four_helpers(self, rng):
        a = rng.standard_normal((3, 4))
        b = rng.standard_normal((4, 2))
        c = rng.standard_normal((3, 2))
        d = rng.standard_normal((5, 4))
        np.testing.assert_allclose(dot(a, b), a @ b)
        np.testing.assert_allclose(t_dot(a, c), a.T @ c)
        np.testing.assert_allclose(dot_t(a, d), a @ d.T)
        e = rng.standard_normal((2, 3))
        np.testing.assert_allclose(t_dot_t(a, e), a.T @ e.T)

    def test_incompatible(self):
        with pytest.raises(DimensionError, match="not compatible"):
            dot(np.zeros((2, 3)), np.zeros((2, 3)))


# ═══════════════════════════════════════════════════════════════════════
# Cholesky
# ═══════════════════════════════════════════════════════════════════════


class TestCholesky:

    @pytest.mark.parametrize("a, expected", [(A2, L2), (A3, L3), (A4, L4)])
    def test_known_factors(self, a, expected):
        np.testing.assert_allclose(cholesky(a), expected, rtol=1e-12, atol=1e-12)

    def test_upper_triangle_zero(self):
        L = np.asarray(cholesky(A4)).reshape(4, 4)
        assert np.all(np.triu(L, k=1) == 0.0)

    @pytest.mark.parametrize("n", [1, 2, 5, 12])
    def test_reconstruction(self, rng, n):
        a = _random_spd(rng, n)
        L = cholesky(a).reshape(n, n)
        np.testing.assert_allclose(
            (L @ L.T).ravel(), a, rtol=RECONSTRUCTION.rtol, atol=RECONSTRUCTION.atol,
        )

    def test_matches_numpy(self, rng):
        a = _random_spd(rng, 6)
        np.testing.assert_allclose(
            cholesky(a).reshape(6, 6), np.linalg.cholesky(a.reshape(6, 6)), rtol=1e-10,
        )

    def test_not_positive_definite(self):
        with pytest.raises(NotPositiveDefiniteError) as exc_info:
            cholesky([1.0, 2.0, 2.0, 1.0], name="M")
        assert exc_info.value.matrix_name == "M"
        assert exc_info.value.pivot_index == 1
        assert exc_info.value.pivot_value == pytest.approx(-3.0)

    def test_zero_pivot(self):
        with pytest.raises(NotPositiveDefiniteError):
            cholesky([0.0, 0.0, 0.0, 1.0])

    def test_nan_entry_is_not_positive_definite(self):
        with pytest.raises(NotPositiveDefiniteError) as exc_info:
            cholesky([np.nan, 0.0, 0.0, 1.0], name="X'WX")
        assert exc_info.value.matrix_name == "X'WX"
        assert exc_info.value.pivot_index == 0
        assert np.isnan(exc_info.value.pivot_value)

    def test_inf_off_diagonal(self):
        with pytest.raises(NotPositiveDefiniteError) as exc_info:
            cholesky([1.0, 0.0, 0.0, 0.0, 1.0, np.inf, 0.0, np.inf, 1.0])
        assert exc_info.value.pivot_index == 1

    def test_not_symmetric(self):
        with pytest.raises(ValidationError, match="not symmetric"):
            cholesky([4.0, 1.0, 2.0, 3.0])

    def test_not_square(self):
        with pytest.raises(DimensionError):
            cholesky([1.0, 2.0, 3.0])


class TestSolve:

    def test_known_system(self):
        x = solve(A2, [1.0, 2.0, 3.0])
        np.testing.assert_allclose(
            x, np.linalg.solve(np.reshape(A2, (3, 3)), [1.0, 2.0, 3.0]), rtol=1e-10,
        )

    @pytest.mark.parametrize("n", [1, 3, 8])
    def test_against_numpy(self, rng, n):
        a = _random_spd(rng, n)
        b = rng.standard_normal(n)
        np.testing.assert_allclose(
            solve(a, b), np.linalg.solve(a.reshape(n, n), b), rtol=1e-9, atol=1e-12,
        )

    def test_triangular_pieces(self):
        z = forward_substitution(L3, [5.0, 6.0, 1.0])
        np.testing.assert_allclose(np.reshape(L3, (3, 3)) @ z, [5.0, 6.0, 1.0])
        x = back_substitution(L3, z)
        np.testing.assert_allclose(np.reshape(L3, (3, 3)).T @ x, z)

    def test_rhs_length_mismatch(self):
        with pytest.raises(DimensionError, match="b has length 2"):
            solve(A2, [1.0, 2.0])

    def test_not_positive_definite(self):
        with pytest.raises(NotPositiveDefiniteError):
            solve([1.0, 2.0, 2.0, 1.0], [1.0, 1.0])

    def test_nan_matrix(self):
        with pytest.raises(NotPositiveDefiniteError):
            solve([np.nan, 0.0, 0.0, 1.0], [1.0, 1.0])

    def test_inverse(self, rng):
        a = _random_spd(rng, 4)
        np.testing.assert_allclose(
            inverse(a).reshape(4, 4) @ a.reshape(4, 4), np.eye(4), atol=1e-10,
        )
