import itertools

import numpy as np
import pytest

from densela.linalg import (
    Array2DRowRealMatrix,
    BlockRealMatrix,
    DecomposedSymmetricPositiveMatrix,
    DiagonalMatrix,
    Kind,
    SymmetricMatrix,
    SymmetricPositiveMatrix,
)
from densela.linalg.matrix import (
    ADDITION,
    MULTIPLICATION,
    SUBTRACTION,
    scalar_add_kind,
    scalar_multiply_kind,
)

SAMPLES = {
    Kind.GENERAL: lambda: Array2DRowRealMatrix([[1.0, 2.0], [3.0, 4.0]]),
    Kind.DIAGONAL: lambda: DiagonalMatrix([2.0, 3.0]),
    Kind.SYMMETRIC: lambda: SymmetricMatrix([[1.0, -2.0], [-2.0, 1.0]]),
    Kind.SYMMETRIC_POSITIVE: lambda: SymmetricPositiveMatrix([[2.0, 1.0], [1.0, 2.0]]),
    Kind.DECOMPOSED: lambda: DecomposedSymmetricPositiveMatrix([[1.0, 2.0]]),
}

PAIRS = list(itertools.product(Kind, repeat=2))


def test_tables_are_complete():
    for table in (ADDITION, SUBTRACTION, MULTIPLICATION):
        assert set(table) == set(PAIRS)


def test_addition_is_commutative():
    for lhs, rhs in PAIRS:
        assert ADDITION[lhs, rhs] is ADDITION[rhs, lhs]


@pytest.mark.parametrize(("lhs", "rhs"), PAIRS)
def test_addition(lhs, rhs):
    a, b = SAMPLES[lhs](), SAMPLES[rhs]()
    result = a + b
    assert result.kind is ADDITION[lhs, rhs]
    np.testing.assert_allclose(result.get_data(), a.get_data() + b.get_data())


@pytest.mark.parametrize(("lhs", "rhs"), PAIRS)
def test_subtraction(lhs, rhs):
    a, b = SAMPLES[lhs](), SAMPLES[rhs]()
    result = a - b
    assert result.kind is SUBTRACTION[lhs, rhs]
    np.testing.assert_allclose(result.get_data(), a.get_data() - b.get_data())


@pytest.mark.parametrize(("lhs", "rhs"), PAIRS)
def test_multiplication(lhs, rhs):
    a, b = SAMPLES[lhs](), SAMPLES[rhs]()
    result = a @ b
    assert result.kind is MULTIPLICATION[lhs, rhs]
    np.testing.assert_allclose(result.get_data(), a.get_data() @ b.get_data())


@pytest.mark.parametrize("kind", list(Kind))
@pytest.mark.parametrize("d", [-1.5, 0.0, 2.0])
def test_scalar_operations(kind, d):
    a = SAMPLES[kind]()
    added = a.scalar_add(d)
    multiplied = a.scalar_multiply(d)
    assert added.kind is scalar_add_kind(kind, d)
    assert multiplied.kind is scalar_multiply_kind(kind, d)
    np.testing.assert_allclose(added.get_data(), a.get_data() + d, atol=1e-14)
    np.testing.assert_allclose(multiplied.get_data(), a.get_data() * d, atol=1e-14)


def test_scalar_kinds():
    assert scalar_add_kind(Kind.DIAGONAL, 0.0) is Kind.DIAGONAL
    assert scalar_add_kind(Kind.DIAGONAL, 1.0) is Kind.SYMMETRIC
    assert scalar_add_kind(Kind.SYMMETRIC_POSITIVE, -1.0) is Kind.SYMMETRIC
    assert scalar_add_kind(Kind.DECOMPOSED, 1.0) is Kind.DECOMPOSED
    assert scalar_multiply_kind(Kind.DIAGONAL, -1.0) is Kind.DIAGONAL
    assert scalar_multiply_kind(Kind.DECOMPOSED, -1.0) is Kind.SYMMETRIC


@pytest.mark.parametrize("kind", list(Kind))
def test_structured_results_keep_their_invariant(kind):
    a = SAMPLES[kind]()

    for lhs in Kind:
        result = SAMPLES[lhs]() + a

        if result.kind is not Kind.GENERAL:
            assert result.is_symmetric()

        if result.kind is Kind.DIAGONAL:
            assert result.is_diagonal()


def test_block_storage_is_kept():
    a = BlockRealMatrix([[1.0, 2.0], [3.0, 4.0]])
    assert isinstance(a + DiagonalMatrix([1.0, 1.0]), BlockRealMatrix)
    assert isinstance(a.scalar_multiply(2.0), BlockRealMatrix)
    assert isinstance(a.transpose(), BlockRealMatrix)
