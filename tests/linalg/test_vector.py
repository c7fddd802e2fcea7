import math
import pickle

import numpy as np
import pytest

from densela.exceptions import (
    DimensionMismatchError,
    NotPositiveError,
    NullArgumentError,
    OutOfRangeError,
    ZeroNormError,
)
from densela.linalg import (
    ArrayRealVector,
    DefaultVectorChangingVisitor,
    DefaultVectorPreservingVisitor,
)


def test_ebe_multiply():
    x = ArrayRealVector([3.0, 14.0])
    expected = ArrayRealVector([9.0, 28.0])
    assert x.ebe_multiply(ArrayRealVector([3.0, 2.0])) == expected
    assert x.ebe_multiply([3.0, 2.0]).to_array().tolist() == [9.0, 28.0]
    assert x.ebe_multiply(np.array([3.0, 2.0])).to_array().tolist() == [9.0, 28.0]

    with pytest.raises(DimensionMismatchError) as excinfo:
        x.ebe_multiply([1.0, 2.0, 3.0])

    assert excinfo.value.actual == 3
    assert excinfo.value.expected == 2
    assert x.to_array().tolist() == [3.0, 14.0]


def test_arithmetic():
    x = ArrayRealVector([1.0, 2.0, 3.0])
    y = ArrayRealVector([4.0, 5.0, 6.0])
    assert (x + y).to_array().tolist() == [5.0, 7.0, 9.0]
    assert (y - x).to_array().tolist() == [3.0, 3.0, 3.0]
    assert (2 * x).to_array().tolist() == [2.0, 4.0, 6.0]
    assert (x / 2).to_array().tolist() == [0.5, 1.0, 1.5]
    assert (-x).to_array().tolist() == [-1.0, -2.0, -3.0]
    assert x @ y == 32.0
    assert x.combine(2.0, -1.0, y).to_array().tolist() == [-2.0, -1.0, 0.0]
    assert x.ebe_divide(y).get_entry(1) == pytest.approx(0.4)

    z = x.copy()
    assert z.combine_to_self(1.0, 1.0, y) is z
    assert z.to_array().tolist() == [5.0, 7.0, 9.0]
    assert x.to_array().tolist() == [1.0, 2.0, 3.0]


def test_map():
    x = ArrayRealVector([1.0, 4.0, 9.0])
    assert x.map(math.sqrt).to_array().tolist() == [1.0, 2.0, 3.0]
    assert x.map_add(1.0).to_array().tolist() == [2.0, 5.0, 10.0]
    assert x.map_subtract(1.0).to_array().tolist() == [0.0, 3.0, 8.0]
    assert x.map_multiply(2.0).to_array().tolist() == [2.0, 8.0, 18.0]
    assert x.map_divide(2.0).to_array().tolist() == [0.5, 2.0, 4.5]
    assert x.to_array().tolist() == [1.0, 4.0, 9.0]

    assert x.map_to_self(math.sqrt) is x
    assert x.to_array().tolist() == [1.0, 2.0, 3.0]


def test_norms():
    x = ArrayRealVector([3.0, -4.0])
    assert x.get_norm() == 5.0
    assert x.get_l1_norm() == 7.0
    assert x.get_linf_norm() == 4.0
    assert x.get_distance([0.0, 0.0]) == 5.0
    assert x.get_l1_distance([1.0, 1.0]) == 7.0
    assert x.get_linf_distance([1.0, 1.0]) == 5.0
    assert x.unit_vector().to_array() == pytest.approx([0.6, -0.8])

    y = x.copy()
    y.unitize()
    assert y.get_norm() == pytest.approx(1.0)


def test_cosine_projection():
    x = ArrayRealVector([1.0, 0.0])
    y = ArrayRealVector([1.0, 1.0])
    assert x.cosine(y) == pytest.approx(math.sqrt(0.5))
    assert y.projection(x).to_array().tolist() == [1.0, 0.0]

    null = ArrayRealVector.zeros(2)

    with pytest.raises(ZeroNormError):
        x.cosine(null)

    with pytest.raises(ZeroNormError):
        x.projection(null)

    with pytest.raises(ZeroNormError):
        null.unit_vector()


def test_outer_product():
    m = ArrayRealVector([1.0, 2.0]).outer_product([3.0, 4.0, 5.0])
    assert m.shape == (2, 3)
    assert m.get_data().tolist() == [[3.0, 4.0, 5.0], [6.0, 8.0, 10.0]]


def test_extrema():
    x = ArrayRealVector([2.0, math.nan, -1.0, 5.0])
    assert x.get_max_index() == 3
    assert x.get_max_value() == 5.0
    assert x.get_min_index() == 2
    assert x.get_min_value() == -1.0
    assert x.is_nan()
    assert not x.is_infinite()

    y = ArrayRealVector([math.nan, math.nan])
    assert y.get_max_index() == -1
    assert math.isnan(y.get_max_value())

    assert ArrayRealVector([1.0, math.inf]).is_infinite()


def test_entries():
    x = ArrayRealVector([1.0, 2.0, 3.0])
    x.set_entry(0, 5.0)
    x.add_to_entry(1, 1.0)
    x[2] = 7.0
    assert list(x) == [5.0, 3.0, 7.0]
    assert x[-1] == 7.0
    assert len(x) == 3

    for index in (-1, 3):
        with pytest.raises(OutOfRangeError) as excinfo:
            x.get_entry(index)

        assert excinfo.value.index == index
        assert excinfo.value.upper == 2

        with pytest.raises(OutOfRangeError):
            x.set_entry(index, 0.0)


def test_sub_vector():
    x = ArrayRealVector([1.0, 2.0, 3.0, 4.0])
    assert x.get_sub_vector(1, 2).to_array().tolist() == [2.0, 3.0]
    assert x.append([5.0]).dimension == 5
    assert x.append(5.0).get_entry(4) == 5.0

    with pytest.raises(OutOfRangeError):
        x.get_sub_vector(3, 2)

    with pytest.raises(NotPositiveError):
        x.get_sub_vector(0, -1)

    x.set_sub_vector(2, [7.0, 8.0])
    assert x.to_array().tolist() == [1.0, 2.0, 7.0, 8.0]

    with pytest.raises(OutOfRangeError):
        x.set_sub_vector(3, [0.0, 0.0])

    assert x.to_array().tolist() == [1.0, 2.0, 7.0, 8.0]


def test_construction():
    data = np.array([1.0, 2.0])
    shared = ArrayRealVector(data, copy=False)
    copied = ArrayRealVector(data)
    data[0] = 10.0
    assert shared.get_entry(0) == 10.0
    assert copied.get_entry(0) == 1.0
    assert ArrayRealVector.full(3, 2.0).to_array().tolist() == [2.0, 2.0, 2.0]

    with pytest.raises(NullArgumentError):
        ArrayRealVector(None)


def test_equality_and_hash():
    x = ArrayRealVector([0.0, 1.0])
    y = ArrayRealVector([-0.0, 1.0])
    assert x == y
    assert hash(x) == hash(y)
    assert x != ArrayRealVector([0.0, 1.0, 2.0])
    assert ArrayRealVector([math.nan, 1.0]) == ArrayRealVector([2.0, math.nan])
    assert hash(ArrayRealVector([math.nan])) == hash(ArrayRealVector([1.0, math.nan]))


def test_pickle():
    x = ArrayRealVector([1.0, -2.5, 3.25])
    y = pickle.loads(pickle.dumps(x))
    assert y == x
    assert hash(y) == hash(x)
    assert y is not x


def test_walk():
    class Doubler(DefaultVectorChangingVisitor):
        def visit(self, index, value):
            return 2.0 * value

    x = ArrayRealVector([1.0, 2.0, 3.0, 4.0])
    x.walk_in_default_order(Doubler(), 1, 2)
    assert x.to_array().tolist() == [1.0, 4.0, 6.0, 4.0]

    with pytest.raises(OutOfRangeError):
        x.walk_in_optimized_order(Doubler(), 2, 1)


def test_walk_empty():
    class Recorder(DefaultVectorPreservingVisitor):
        __slots__ = ("bounds",)

        def start(self, dimension, start, end):
            self.bounds = (dimension, start, end)

        def end(self):
            return 1.0

    x = ArrayRealVector([])
    visitor = Recorder()
    assert x.walk_in_default_order(visitor) == 1.0
    assert visitor.bounds == (0, 0, -1)
    assert x.walk_in_optimized_order(DefaultVectorChangingVisitor()) == 0.0

    with pytest.raises(OutOfRangeError):
        x.walk_in_default_order(visitor, 0, 0)


def test_str():
    assert str(ArrayRealVector([1.0, 2.5])) == "{1; 2.5}"
