import logging
import pickle

import numpy as np
import pytest

from densela import config
from densela.exceptions import (
    DimensionMismatchError,
    NonPositiveDefiniteError,
    NonSquareMatrixError,
    NonSymmetricMatrixError,
    NotPositiveError,
    UnsupportedOperationError,
)
from densela.linalg import (
    Array2DRowRealMatrix,
    DecomposedSymmetricPositiveMatrix,
    DiagonalMatrix,
    Kind,
    SymmetricMatrix,
    SymmetricPositiveMatrix,
    SymmetryType,
)
from densela.linalg.symmetric import (
    FactorCache,
    check_positive_semi_definite,
    check_symmetry,
)

SPD = [[4.0, 2.0, 0.6], [2.0, 2.0, 0.5], [0.6, 0.5, 3.0]]


def test_symmetric_construction():
    a = SymmetricMatrix([[1.0, 2.0], [2.0, 3.0]])
    assert a.kind is Kind.SYMMETRIC
    assert a.get_data_ref().tolist() == [1.0, 2.0, 3.0]
    assert a.get_data().tolist() == [[1.0, 2.0], [2.0, 3.0]]

    with pytest.raises(NonSquareMatrixError):
        SymmetricMatrix([[1.0, 2.0]])

    with pytest.raises(NonSymmetricMatrixError) as excinfo:
        SymmetricMatrix([[1.0, 2.0], [2.1, 1.0]])

    assert (excinfo.value.row, excinfo.value.column) == (1, 0)


def test_symmetry_types():
    data = [[1.0, 2.0], [4.0, 1.0]]
    lower = SymmetricMatrix(data, SymmetryType.LOWER, config.NO_CHECK)
    upper = SymmetricMatrix(data, SymmetryType.UPPER, config.NO_CHECK)
    mean = SymmetricMatrix(data, SymmetryType.MEAN, config.NO_CHECK)
    assert lower.get_entry(0, 1) == 4.0
    assert upper.get_entry(1, 0) == 2.0
    assert mean.get_entry(0, 1) == 3.0

    relaxed = SymmetricMatrix(data, thresholds=config.Thresholds(absolute=2.0))
    assert relaxed.get_entry(1, 0) == 3.0

    with pytest.raises(TypeError, match="expected a SymmetryType, got str"):
        SymmetricMatrix([[1.0, 2.0], [2.0, 1.0]], "lower")


def test_enforcing_symmetry_is_reported(caplog):
    with caplog.at_level(logging.WARNING, logger="densela.linalg.symmetric"):
        SymmetricMatrix([[1.0, 2.0], [4.0, 1.0]], thresholds=config.NO_CHECK)

    assert "enforcing the symmetry" in caplog.text


def test_symmetric_entries():
    a = SymmetricMatrix.zeros(3)
    a.set_entry(2, 0, 1.0)
    a.add_to_entry(0, 2, 1.0)
    a.multiply_entry(1, 1, 5.0)
    assert a.get_entry(0, 2) == 2.0
    assert a.get_entry(2, 0) == 2.0
    assert SymmetricMatrix.identity(2).get_data().tolist() == [[1.0, 0.0], [0.0, 1.0]]


def test_symmetric_changes_are_checked_first():
    a = SymmetricMatrix([[1.0, 2.0], [2.0, 3.0]])

    with pytest.raises(UnsupportedOperationError):
        a.set_sub_matrix([[5.0, 6.0], [7.0, 8.0]], 0, 0)

    assert a.get_data().tolist() == [[1.0, 2.0], [2.0, 3.0]]

    a.set_sub_matrix([[5.0, 6.0], [6.0, 8.0]], 0, 0)
    assert a.get_data().tolist() == [[5.0, 6.0], [6.0, 8.0]]

    a.set_row(0, [1.0, 0.0])
    assert a.get_column(0).tolist() == [1.0, 0.0]


def test_from_packed():
    a = SymmetricMatrix.from_packed([1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    assert a.get_data().tolist() == [[1.0, 2.0, 4.0], [2.0, 3.0, 5.0], [4.0, 5.0, 6.0]]

    with pytest.raises(DimensionMismatchError):
        SymmetricMatrix.from_packed([1.0, 2.0])


def test_symmetric_arithmetic_kinds():
    s = SymmetricMatrix([[1.0, 2.0], [2.0, 3.0]])
    d = DiagonalMatrix([1.0, 1.0])
    g = Array2DRowRealMatrix([[1.0, 0.0], [0.0, 1.0]])
    assert isinstance(s + d, SymmetricMatrix)
    assert isinstance(d - s, SymmetricMatrix)
    assert (s + g).kind is Kind.GENERAL
    assert (s @ s).kind is Kind.GENERAL
    assert isinstance(-s, SymmetricMatrix)
    assert s.transpose(force_copy=False) is s
    assert s.transpose() == s
    s.transpose().set_entry(0, 1, 9.0)
    assert s.get_entry(0, 1) == 2.0
    assert isinstance(s.get_sub_matrix([1, 0]), SymmetricMatrix)

    result = s.quadratic_multiplication([[1.0, 1.0]])
    assert isinstance(result, SymmetricMatrix)
    assert result.get_data().tolist() == [[8.0]]


def test_symmetric_inverse():
    s = SymmetricMatrix([[2.0, 1.0], [1.0, 2.0]])
    inverse = s.get_inverse()
    assert isinstance(inverse, SymmetricMatrix)
    expected = np.array([[2.0, -1.0], [-1.0, 2.0]]) / 3.0
    np.testing.assert_allclose(inverse.get_data(), expected, atol=1e-14)


def test_positive_construction():
    a = SymmetricPositiveMatrix(SPD)
    assert a.kind is Kind.SYMMETRIC_POSITIVE
    assert a.is_positive_semi_definite()

    with pytest.raises(NonPositiveDefiniteError):
        SymmetricPositiveMatrix([[1.0, 2.0], [2.0, 1.0]])

    # semi-definite matrices are accepted
    SymmetricPositiveMatrix([[1.0, 1.0], [1.0, 1.0]])

    unchecked = SymmetricPositiveMatrix(
        [[1.0, 2.0], [2.0, 1.0]], positivity_thresholds=config.NO_CHECK
    )
    assert not unchecked.is_positive_semi_definite()


def test_positive_is_read_only():
    a = SymmetricPositiveMatrix(SPD)

    with pytest.raises(UnsupportedOperationError):
        a.set_entry(0, 0, 1.0)

    with pytest.raises(UnsupportedOperationError):
        a.add_to_entry(0, 0, 1.0)

    with pytest.raises(UnsupportedOperationError):
        a.multiply_entry(0, 0, 1.0)

    with pytest.raises(UnsupportedOperationError):
        a.set_row(0, [1.0, 2.0, 3.0])

    assert a.get_data().tolist() == SPD


def test_positive_scalar_operations():
    a = SymmetricPositiveMatrix([[2.0, 1.0], [1.0, 2.0]])
    b = a.positive_scalar_add(1.0)
    assert b.get_data().tolist() == [[3.0, 2.0], [2.0, 3.0]]
    assert a.get_entry(0, 0) == 2.0

    a.positive_scalar_multiply_to_self(2.0)
    assert a.get_data().tolist() == [[4.0, 2.0], [2.0, 4.0]]

    with pytest.raises(NotPositiveError):
        a.positive_scalar_add(-1.0)

    with pytest.raises(NotPositiveError):
        a.positive_scalar_multiply_to_self(-1.0)

    assert isinstance(a.scalar_multiply(2.0), SymmetricPositiveMatrix)
    assert isinstance(a.scalar_multiply(-2.0), SymmetricMatrix)
    assert not isinstance(a.scalar_multiply(-2.0), SymmetricPositiveMatrix)
    assert isinstance(a + a, SymmetricPositiveMatrix)
    assert (a - a).kind is Kind.SYMMETRIC
    assert a.get_abs().kind is Kind.SYMMETRIC


def test_positive_factor():
    a = SymmetricPositiveMatrix(SPD)
    lower = a.get_factor().get_data()
    assert np.allclose(np.triu(lower, 1), 0.0)
    np.testing.assert_allclose(lower @ lower.T, SPD, atol=1e-14)

    # the factor is recomputed after a change
    a.positive_scalar_multiply_to_self(4.0)
    np.testing.assert_allclose(a.get_factor().get_data(), 2.0 * lower, atol=1e-14)

    decomposed = a.to_decomposed_matrix()
    assert isinstance(decomposed, DecomposedSymmetricPositiveMatrix)
    np.testing.assert_allclose(decomposed.get_data(), a.get_data(), atol=1e-13)


def test_positive_factor_of_semi_definite_matrix():
    a = SymmetricPositiveMatrix([[1.0, 1.0], [1.0, 1.0]])
    lower = a.get_factor().get_data()
    np.testing.assert_allclose(lower @ lower.T, a.get_data(), atol=1e-14)


def test_decomposed_construction():
    a = DecomposedSymmetricPositiveMatrix([[1.0, 2.0], [0.0, 1.0], [1.0, 0.0]])
    assert a.shape == (2, 2)
    assert a.transparent_dimension == 3
    assert a.kind is Kind.DECOMPOSED
    assert a.get_data().tolist() == [[2.0, 2.0], [2.0, 5.0]]
    assert a.get_b().shape == (2, 3)
    assert a.get_bt().shape == (3, 2)
    assert DecomposedSymmetricPositiveMatrix.identity(2).get_trace() == 2.0

    b = DecomposedSymmetricPositiveMatrix.from_matrix(SPD)
    np.testing.assert_allclose(b.get_data(), SPD, atol=1e-13)

    with pytest.raises(NonSquareMatrixError):
        DecomposedSymmetricPositiveMatrix.from_matrix([[1.0, 2.0]])


def test_decomposed_is_read_only():
    a = DecomposedSymmetricPositiveMatrix([[1.0, 2.0]])

    with pytest.raises(UnsupportedOperationError):
        a.set_entry(0, 0, 1.0)

    with pytest.raises(UnsupportedOperationError):
        a.set_column(0, [1.0, 2.0])


def test_decomposed_operations():
    a = DecomposedSymmetricPositiveMatrix([[1.0, 2.0]])
    b = DecomposedSymmetricPositiveMatrix([[1.0, 0.0], [0.0, 1.0]])

    total = a + b
    assert isinstance(total, DecomposedSymmetricPositiveMatrix)
    assert total.transparent_dimension == 3
    assert total.get_data().tolist() == [[2.0, 2.0], [2.0, 5.0]]

    shifted = a.scalar_add(4.0)
    assert isinstance(shifted, DecomposedSymmetricPositiveMatrix)
    assert shifted.get_data().tolist() == [[5.0, 6.0], [6.0, 8.0]]
    assert a.scalar_add(-1.0).kind is Kind.SYMMETRIC

    scaled = a.scalar_multiply(4.0)
    assert scaled.get_data().tolist() == [[4.0, 8.0], [8.0, 16.0]]
    assert a.get_data().tolist() == [[1.0, 2.0], [2.0, 4.0]]
    assert a.scalar_multiply(-1.0).kind is Kind.SYMMETRIC

    result = a.quadratic_multiplication([[1.0, 1.0]])
    assert isinstance(result, DecomposedSymmetricPositiveMatrix)
    assert result.get_data().tolist() == [[9.0]]

    assert (a - b).kind is Kind.SYMMETRIC
    assert (a + DiagonalMatrix([1.0, 1.0])).kind is Kind.SYMMETRIC


def test_decomposed_power():
    a = DecomposedSymmetricPositiveMatrix([[1.0, 1.0], [0.0, 1.0]])
    data = a.get_data()

    for p in range(4):
        result = a.power(p)
        assert isinstance(result, DecomposedSymmetricPositiveMatrix)
        expected = np.linalg.matrix_power(data, p)
        np.testing.assert_allclose(result.get_data(), expected, atol=1e-13)

    with pytest.raises(NotPositiveError):
        a.power(-1)


def test_decomposed_concatenation_and_sub_matrix():
    a = DecomposedSymmetricPositiveMatrix([[1.0, 2.0]])
    b = DecomposedSymmetricPositiveMatrix([[3.0]])
    c = a.concatenate_diagonally(b)
    assert isinstance(c, DecomposedSymmetricPositiveMatrix)
    assert c.get_data().tolist() == [
        [1.0, 2.0, 0.0],
        [2.0, 4.0, 0.0],
        [0.0, 0.0, 9.0],
    ]
    assert a.concatenate_diagonally(b, True, False).kind is Kind.GENERAL

    sub = c.get_sub_matrix([2, 0])
    assert isinstance(sub, DecomposedSymmetricPositiveMatrix)
    assert sub.get_data().tolist() == [[9.0, 0.0], [0.0, 1.0]]
    assert c.get_sub_matrix([0], [1]).get_data().tolist() == [[2.0]]


def test_decomposed_resize():
    narrow = DecomposedSymmetricPositiveMatrix([[1.0, 2.0, 3.0]])
    assert narrow.get_resized_bt().shape == (3, 3)
    assert narrow.get_resized_b().shape == (3, 3)

    wide = DecomposedSymmetricPositiveMatrix(
        [[1.0, 2.0], [0.0, 1.0], [1.0, 1.0], [2.0, 0.0]]
    )
    data = wide.get_data()
    assert wide.resize_b() is wide
    assert wide.transparent_dimension == 2
    np.testing.assert_allclose(wide.get_data(), data, atol=1e-13)


def test_decomposed_conversions():
    a = DecomposedSymmetricPositiveMatrix([[1.0, 2.0]])
    s = a.to_symmetric_matrix()
    p = a.to_symmetric_positive_matrix()
    assert type(s) is SymmetricMatrix
    assert type(p) is SymmetricPositiveMatrix
    assert s == p == a


def test_entries_cache_is_invalidated():
    a = DecomposedSymmetricPositiveMatrix([[1.0, 1.0]])
    assert a.get_entry(0, 1) == 1.0
    a.positive_scalar_add_to_self(1.0)
    assert a.get_entry(0, 1) == 2.0


def test_entries_follow_shared_b_transpose():
    a = DecomposedSymmetricPositiveMatrix([[1.0, 2.0]])
    assert a.get_data().tolist() == [[1.0, 2.0], [2.0, 4.0]]
    a.get_bt(copy=False).set_entry(0, 0, 3.0)
    assert a.get_data().tolist() == [[9.0, 6.0], [6.0, 4.0]]

    data = np.array([[1.0, 2.0]])
    b = DecomposedSymmetricPositiveMatrix(data, copy=False)
    assert b.get_entry(0, 0) == 1.0
    data[0, 0] = 3.0
    assert b.get_entry(0, 0) == 9.0

    c = DecomposedSymmetricPositiveMatrix([[1.0, 2.0]])
    c.get_bt().set_entry(0, 0, 3.0)
    assert c.get_entry(0, 0) == 1.0


def test_factor_cache():
    calls = []
    cache = FactorCache()
    assert not cache.fresh
    assert cache.get(lambda: calls.append(1) or 42) == 42
    assert cache.get(lambda: calls.append(1) or 0) == 42
    assert cache.fresh
    cache.invalidate()
    assert cache.get(lambda: calls.append(1) or 7) == 7
    assert len(calls) == 2


def test_check_symmetry():
    data = np.array([[1.0, 1.0 + 1e-10], [1.0, 1.0]])
    check_symmetry(data, config.Thresholds(relative=1e-9))
    check_symmetry(data, config.NO_CHECK)

    with pytest.raises(NonSymmetricMatrixError):
        check_symmetry(data, config.Thresholds(relative=1e-12))

    with pytest.raises(NonSymmetricMatrixError):
        check_symmetry(np.array([[1.0, np.nan], [0.0, 1.0]]), config.DEFAULT_SYMMETRY)


def test_check_positive_semi_definite():
    check_positive_semi_definite(np.array([[0.0, 0.0], [0.0, 1.0]]), 0.0)
    check_positive_semi_definite(np.array([[-1e-12, 0.0], [0.0, 1.0]]), 1e-10)

    with pytest.raises(NonPositiveDefiniteError) as excinfo:
        check_positive_semi_definite(np.array([[1.0, 0.0], [0.0, -1.0]]), 0.0)

    assert excinfo.value.index == 1

    with pytest.raises(NonPositiveDefiniteError):
        check_positive_semi_definite(np.array([[0.0, 1.0], [1.0, 1.0]]), 0.0)


@pytest.mark.parametrize(
    "matrix",
    [
        SymmetricMatrix([[1.0, 2.0], [2.0, 3.0]]),
        SymmetricPositiveMatrix(SPD),
        DecomposedSymmetricPositiveMatrix([[1.0, 2.0], [3.0, 4.0]]),
    ],
)
def test_pickle(matrix):
    result = pickle.loads(pickle.dumps(matrix))
    assert type(result) is type(matrix)
    assert result == matrix
    assert hash(result) == hash(matrix)
