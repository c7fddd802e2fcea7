import pickle

import numpy as np
import pytest

from densela.exceptions import (
    NotPositiveError,
    OutOfRangeError,
    SingularMatrixError,
    UnsupportedOperationError,
)
from densela.linalg import (
    Array2DRowRealMatrix,
    DefaultMatrixChangingVisitor,
    DiagonalMatrix,
    Kind,
    SymmetricMatrix,
)


class Filler(DefaultMatrixChangingVisitor):
    def visit(self, row, column, value):
        return 1.0


def test_construction():
    a = DiagonalMatrix([1.0, 2.0, 3.0])
    assert a.shape == (3, 3)
    assert a.kind is Kind.DIAGONAL
    assert a.get_data().tolist() == [[1.0, 0.0, 0.0], [0.0, 2.0, 0.0], [0.0, 0.0, 3.0]]
    assert DiagonalMatrix.identity(2).get_data().tolist() == [[1.0, 0.0], [0.0, 1.0]]
    assert DiagonalMatrix.zeros(2).get_trace() == 0.0

    with pytest.raises(NotPositiveError):
        DiagonalMatrix([])

    with pytest.raises(NotPositiveError):
        DiagonalMatrix.zeros(0)

    data = np.array([1.0, 2.0])
    shared = DiagonalMatrix(data, copy=False)
    data[0] = 5.0
    assert shared.get_entry(0, 0) == 5.0
    assert shared.get_data_ref() is data


def test_entries():
    a = DiagonalMatrix([1.0, 2.0])
    assert a.get_entry(0, 1) == 0.0
    a.set_entry(1, 1, 4.0)
    a.set_entry(0, 1, 0.0)
    a.add_to_entry(0, 0, 1.0)
    a.multiply_entry(1, 0, 3.0)
    assert a.get_data().tolist() == [[2.0, 0.0], [0.0, 4.0]]

    with pytest.raises(UnsupportedOperationError):
        a.set_entry(0, 1, 1.0)

    with pytest.raises(UnsupportedOperationError):
        a.add_to_entry(1, 0, 1.0)

    with pytest.raises(OutOfRangeError):
        a.get_entry(2, 0)

    assert a.get_row(1).tolist() == [0.0, 4.0]
    assert a.get_column(0).tolist() == [2.0, 0.0]


def test_failed_change_leaves_matrix_untouched():
    a = DiagonalMatrix([1.0, 2.0])

    with pytest.raises(UnsupportedOperationError):
        a.walk(Filler())

    with pytest.raises(UnsupportedOperationError):
        a.set_row(0, [5.0, 6.0])

    assert a.get_data().tolist() == [[1.0, 0.0], [0.0, 2.0]]

    a.set_row(0, [5.0, 0.0])
    assert a.get_entry(0, 0) == 5.0


def test_arithmetic_kinds():
    a = DiagonalMatrix([1.0, 2.0])
    b = DiagonalMatrix([3.0, 4.0])
    assert isinstance(a + b, DiagonalMatrix)
    assert isinstance(a - b, DiagonalMatrix)
    assert isinstance(a @ b, DiagonalMatrix)
    assert (a @ b).get_data().tolist() == [[3.0, 0.0], [0.0, 8.0]]
    assert isinstance(2.0 * a, DiagonalMatrix)
    assert isinstance(a.scalar_add(0.0), DiagonalMatrix)
    assert isinstance(a.scalar_add(1.0), SymmetricMatrix)
    assert a.power(3).get_data().tolist() == [[1.0, 0.0], [0.0, 8.0]]
    assert isinstance(a.transpose(), DiagonalMatrix)

    t = a.T
    t.set_entry(0, 0, 7.0)
    assert a.get_entry(0, 0) == 1.0
    assert a.transpose(force_copy=False) is a

    g = Array2DRowRealMatrix([[1.0, 1.0], [1.0, 1.0]])
    assert (a + g).kind is Kind.GENERAL
    assert (a @ g).get_data().tolist() == [[1.0, 1.0], [2.0, 2.0]]
    assert (a @ np.array([1.0, 1.0])).tolist() == [1.0, 2.0]

    with pytest.raises(NotPositiveError):
        a.power(-1)


def test_norms():
    a = DiagonalMatrix([1.0, -3.0])
    assert a.get_trace() == -2.0
    assert a.get_norm() == 3.0
    assert a.get_frobenius_norm() == pytest.approx(10.0**0.5)
    assert a.is_diagonal()
    assert a.is_symmetric()


def test_inverse():
    a = DiagonalMatrix([2.0, 4.0])
    inverse = a.get_inverse()
    assert isinstance(inverse, DiagonalMatrix)
    assert inverse.get_data().tolist() == [[0.5, 0.0], [0.0, 0.25]]
    assert a.is_invertible()

    b = DiagonalMatrix([2.0, 0.0])
    assert b.is_singular()
    assert not b.is_invertible()

    with pytest.raises(SingularMatrixError) as excinfo:
        b.get_inverse()

    assert excinfo.value.value == 0.0


def test_quadratic_multiplication():
    a = DiagonalMatrix([1.0, 2.0])
    m = [[1.0, 2.0], [3.0, 4.0]]
    result = a.quadratic_multiplication(m)
    assert isinstance(result, SymmetricMatrix)
    assert result.get_data().tolist() == [[9.0, 19.0], [19.0, 41.0]]

    result = a.quadratic_multiplication(m, True)
    assert result.get_data().tolist() == [[19.0, 26.0], [26.0, 36.0]]


def test_sub_matrix():
    a = DiagonalMatrix([1.0, 2.0, 3.0])
    assert isinstance(a.get_sub_matrix(1, 2), DiagonalMatrix)
    assert isinstance(a.get_sub_matrix([0, 0]), SymmetricMatrix)
    assert a.get_sub_matrix([0, 2], [1, 2]).kind is Kind.GENERAL


def test_create_matrix():
    a = DiagonalMatrix([1.0])
    assert isinstance(a.create_matrix(2, 2), DiagonalMatrix)
    assert a.create_matrix(2, 3).kind is Kind.GENERAL


def test_pickle():
    a = DiagonalMatrix([1.0, 2.0])
    b = pickle.loads(pickle.dumps(a))
    assert type(b) is DiagonalMatrix
    assert b == a
    assert hash(b) == hash(a)
    assert a == Array2DRowRealMatrix([[1.0, 0.0], [0.0, 2.0]])
