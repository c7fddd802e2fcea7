import numpy as np
import pytest

from densela.decomposition import QRDecomposition
from densela.exceptions import (
    DimensionMismatchError,
    NonSquareMatrixError,
    NotPositiveError,
    SingularMatrixError,
)
from densela.linalg import (
    Array2DRowRealMatrix,
    ArrayRealVector,
    DiagonalMatrix,
    Kind,
    concatenate_diagonally,
    concatenate_horizontally,
    concatenate_vertically,
    create_column_matrix,
    create_diagonal,
    create_identity,
    create_row_matrix,
    create_vector,
    inverse,
    is_singular,
    norm,
    solve,
)


def test_factories():
    identity = create_identity(2)
    assert identity.kind is Kind.GENERAL
    assert identity.get_data().tolist() == [[1.0, 0.0], [0.0, 1.0]]

    with pytest.raises(NotPositiveError):
        create_identity(0)

    assert isinstance(create_diagonal([1.0, 2.0]), DiagonalMatrix)
    assert create_row_matrix([1.0, 2.0]).shape == (1, 2)
    assert create_column_matrix(ArrayRealVector([1.0, 2.0])).shape == (2, 1)

    data = [1.0, 2.0]
    v = create_vector(data)
    data[0] = 3.0
    assert v.to_array().tolist() == [1.0, 2.0]


def test_concatenation():
    a = [[1.0, 2.0]]
    b = Array2DRowRealMatrix([[3.0, 4.0]])
    assert concatenate_vertically(a, b, a).shape == (3, 2)
    assert concatenate_horizontally(a, b).get_data().tolist() == [[1.0, 2.0, 3.0, 4.0]]

    c = concatenate_diagonally(DiagonalMatrix([1.0]), DiagonalMatrix([2.0]), [[3.0]])
    assert c.kind is Kind.GENERAL
    assert np.diag(c.get_data()).tolist() == [1.0, 2.0, 3.0]

    with pytest.raises(DimensionMismatchError):
        concatenate_horizontally(a, [[1.0], [2.0]])


def test_inverse_and_solve():
    a = [[4.0, 1.0], [2.0, 3.0]]
    x = solve(a, [1.0, 2.0])
    np.testing.assert_allclose(np.array(a) @ x, [1.0, 2.0], atol=1e-14)

    y = solve(a, ArrayRealVector([1.0, 2.0]), QRDecomposition.builder())
    assert isinstance(y, ArrayRealVector)
    np.testing.assert_allclose(y.to_array(), x, atol=1e-14)

    product = inverse(a).multiply(a)
    np.testing.assert_allclose(product.get_data(), np.identity(2), atol=1e-14)

    with pytest.raises(SingularMatrixError):
        inverse([[1.0, 2.0], [2.0, 4.0]])

    with pytest.raises(NonSquareMatrixError):
        inverse([[1.0, 2.0]])


def test_is_singular():
    assert is_singular([[1.0, 2.0], [2.0, 4.0]])
    assert not is_singular([[1.0, 2.0], [3.0, 4.0]])

    with pytest.raises(NonSquareMatrixError):
        is_singular([[1.0, 2.0]])


def test_norm():
    a = [[1.0, -2.0], [3.0, 4.0]]
    assert norm(a) == 6.0
    assert norm(a, "fro") == pytest.approx(30.0**0.5)
    assert norm(a, "max") == 4.0

    with pytest.raises(ValueError):
        norm(a, "2")
