import numpy as np
import pytest

from densela.decomposition import CholeskyDecomposition, CholeskySolver
from densela.exceptions import (
    NonPositiveDefiniteError,
    NonSquareMatrixError,
    NonSymmetricMatrixError,
)
from densela.linalg import Array2DRowRealMatrix, SymmetricMatrix

SPD = [
    [1.0, 2.0, 4.0, 7.0, 11.0],
    [2.0, 13.0, 23.0, 38.0, 58.0],
    [4.0, 23.0, 77.0, 122.0, 182.0],
    [7.0, 38.0, 122.0, 294.0, 430.0],
    [11.0, 58.0, 182.0, 430.0, 855.0],
]


def test_factors():
    cholesky = CholeskyDecomposition(SPD)
    lower = cholesky.get_l().get_data()
    assert np.allclose(np.triu(lower, 1), 0.0)
    np.testing.assert_allclose(lower @ lower.T, SPD, atol=1e-12)
    np.testing.assert_allclose(cholesky.get_lt().get_data(), lower.T)
    assert np.diag(lower) == pytest.approx([1.0, 3.0, 6.0, 10.0, 15.0])
    assert cholesky.get_determinant() == pytest.approx(2700.0**2)


def test_solve():
    solver = CholeskyDecomposition(SymmetricMatrix(SPD)).get_solver()
    assert isinstance(solver, CholeskySolver)
    assert solver.is_non_singular()

    b = np.array([[1.0], [0.0], [2.0], [0.0], [3.0]])
    x = solver.solve(Array2DRowRealMatrix(b))
    np.testing.assert_allclose(np.array(SPD) @ x.get_data(), b, atol=1e-10)

    inverse = solver.get_inverse().get_data()
    np.testing.assert_allclose(np.array(SPD) @ inverse, np.identity(5), atol=1e-10)


def test_matrix_inverse_with_builder():
    a = SymmetricMatrix([[4.0, 2.0], [2.0, 3.0]])
    inverse = a.get_inverse(CholeskyDecomposition.builder())
    assert isinstance(inverse, SymmetricMatrix)
    np.testing.assert_allclose((a @ inverse).get_data(), np.identity(2), atol=1e-14)


def test_non_symmetric():
    with pytest.raises(NonSymmetricMatrixError):
        CholeskyDecomposition([[1.0, 2.0], [2.1, 5.0]])


def test_non_positive():
    with pytest.raises(NonPositiveDefiniteError) as excinfo:
        CholeskyDecomposition([[1.0, 2.0], [2.0, 1.0]])

    assert excinfo.value.index == 1
    assert excinfo.value.value == pytest.approx(-3.0)

    with pytest.raises(NonPositiveDefiniteError):
        CholeskyDecomposition([[-1.0]])


def test_non_square():
    with pytest.raises(NonSquareMatrixError):
        CholeskyDecomposition([[1.0, 2.0]])
