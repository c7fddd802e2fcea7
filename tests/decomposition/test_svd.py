import logging

import numpy as np
import pytest

from densela.decomposition import SingularValueDecomposition, SVDSolver
from densela.exceptions import TooLargeCutoffError
from densela.linalg import Array2DRowRealMatrix, DiagonalMatrix, Kind

# Q * diag(16, 8, 4, 2) * Q^T with Q the normalized 4x4 Hadamard matrix
A = [
    [7.5, 2.5, 4.5, 1.5],
    [2.5, 7.5, 1.5, 4.5],
    [4.5, 1.5, 7.5, 2.5],
    [1.5, 4.5, 2.5, 7.5],
]


def check_factors(data, svd):
    a = np.array(data)
    p = min(a.shape)
    u = svd.get_u().get_data()
    v = svd.get_v().get_data()
    s = svd.get_s().get_data()
    assert u.shape == (a.shape[0], p)
    assert v.shape == (a.shape[1], p)
    np.testing.assert_allclose(u.T @ u, np.identity(p), atol=1e-13)
    np.testing.assert_allclose(v.T @ v, np.identity(p), atol=1e-13)
    np.testing.assert_allclose(u @ s @ v.T, a, atol=1e-12)
    np.testing.assert_allclose(svd.get_ut().get_data(), u.T)
    np.testing.assert_allclose(svd.get_vt().get_data(), v.T)


def test_reconstruction():
    svd = SingularValueDecomposition(A)
    np.testing.assert_allclose(
        svd.get_singular_values(), [16.0, 8.0, 4.0, 2.0], rtol=1e-13
    )
    assert isinstance(svd.get_s(), DiagonalMatrix)
    check_factors(A, svd)
    assert svd.get_norm() == pytest.approx(16.0)
    assert svd.get_condition_number() == pytest.approx(8.0)
    assert svd.get_inverse_condition_number() == pytest.approx(0.125)
    assert svd.get_rank() == 4


@pytest.mark.parametrize(
    "data",
    [
        [[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]],
        [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]],
        [[0.0, 0.0], [0.0, 0.0]],
        [[1.0]],
    ],
)
def test_shapes(data):
    svd = SingularValueDecomposition(data)
    assert svd.shape == np.array(data).shape
    check_factors(data, svd)
    assert np.all(np.diff(svd.get_singular_values()) <= 0.0)


def test_rank():
    svd = SingularValueDecomposition([[1.0, 2.0], [2.0, 4.0], [3.0, 6.0]])
    assert svd.get_rank() == 1
    assert SingularValueDecomposition([[0.0, 0.0], [0.0, 0.0]]).get_rank() == 0


def test_covariance():
    svd = SingularValueDecomposition(A)
    covariance = svd.get_covariance(0.0)
    assert covariance.kind is Kind.SYMMETRIC_POSITIVE
    a = np.array(A)
    expected = np.linalg.inv(a.T @ a)
    np.testing.assert_allclose(covariance.get_data(), expected, atol=1e-14)

    # only the singular values 16 and 8 are kept
    truncated = svd.get_covariance(5.0).get_data()
    np.testing.assert_allclose(
        np.linalg.eigvalsh(truncated), [0.0, 0.0, 1.0 / 256.0, 1.0 / 64.0], atol=1e-15
    )

    with pytest.raises(TooLargeCutoffError) as excinfo:
        svd.get_covariance(17.0)

    assert excinfo.value.maximum == pytest.approx(16.0)


def test_solve():
    solver = SingularValueDecomposition(A).get_solver()
    assert isinstance(solver, SVDSolver)
    assert solver.is_non_singular()

    b = np.array([1.0, -1.0, 2.0, 0.5])
    x = solver.solve(b)
    np.testing.assert_allclose(np.array(A) @ x, b, atol=1e-13)

    inverse = solver.get_inverse().get_data()
    np.testing.assert_allclose(np.array(A) @ inverse, np.identity(4), atol=1e-13)


def test_least_squares(caplog):
    data = [[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]]
    solver = SingularValueDecomposition(data).get_solver()
    assert not solver.is_non_singular()
    assert solver.dimension == 3

    with caplog.at_level(logging.WARNING, logger="densela.decomposition.svd"):
        x = solver.solve([1.0, 2.0, 3.0])

    assert "least squares" in caplog.text
    expected, *_ = np.linalg.lstsq(np.array(data), [1.0, 2.0, 3.0], rcond=None)
    np.testing.assert_allclose(x, expected, atol=1e-14)


def test_singular_pseudo_inverse():
    data = [[1.0, 2.0], [2.0, 4.0]]
    solver = SingularValueDecomposition(data).get_solver()
    assert not solver.is_non_singular()
    np.testing.assert_allclose(
        solver.get_inverse().get_data(), np.linalg.pinv(data), atol=1e-14
    )


def test_matrix_inverse_with_builder():
    a = Array2DRowRealMatrix(A)
    inverse = a.get_inverse(SingularValueDecomposition.builder())
    np.testing.assert_allclose((a @ inverse).get_data(), np.identity(4), atol=1e-13)
