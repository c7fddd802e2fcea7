import math
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any, Self

import numpy as np
import numpy.typing as npt

from densela.exceptions import (
    DimensionMismatchError,
    NotPositiveError,
    NullArgumentError,
    ZeroNormError,
)
from densela.linalg import checks
from densela.linalg.visitors import is_changing, walk_vector
from densela.typing import VectorChangingVisitor, VectorPreservingVisitor, VectorLike

if TYPE_CHECKING:
    from densela.linalg.matrix import RealMatrix

# Hash shared by every vector holding a NaN coordinate.
_NAN_HASH = 9


class RealVector(ABC):
    """Abstract base class for real vectors of fixed dimension.

    Every operation is written in terms of :attr:`dimension`, :meth:`get_entry`,
    :meth:`set_entry` and :meth:`to_array`, so vectors of different storages combine
    with each other. Binary operations accept any :class:`RealVector`, a
    one-dimensional ndarray or a sequence of numbers, and return a new
    :class:`ArrayRealVector`; methods whose name ends with ``_to_self`` modify the
    vector in place and return it.
    """

    __slots__ = ()
    __array_ufunc__ = None

    @property
    @abstractmethod
    def dimension(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def get_entry(self, index: int) -> float:
        """Return the entry at `index`.

        Raises
        ------
        OutOfRangeError
            If `index` is not in ``[0, dimension)``.
        """
        raise NotImplementedError

    @abstractmethod
    def set_entry(self, index: int, value: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def copy(self) -> Self:
        raise NotImplementedError

    def to_array(self) -> npt.NDArray[np.float64]:
        """Return the coordinates as a new ndarray."""
        return np.array([self.get_entry(i) for i in range(self.dimension)], np.float64)

    def add_to_entry(self, index: int, increment: float) -> None:
        self.set_entry(index, self.get_entry(index) + increment)

    def _operand(self, other: "RealVector | VectorLike") -> npt.NDArray[np.float64]:
        result = checks.as_vector(other, copy=False)

        if len(result) != self.dimension:
            raise DimensionMismatchError(len(result), self.dimension)

        return result

    def _new(self, data: npt.NDArray[np.float64]) -> "ArrayRealVector":
        return ArrayRealVector(data, copy=False)

    def add(self, other: "RealVector | VectorLike") -> "ArrayRealVector":
        """Return ``self + other``.

        Raises
        ------
        DimensionMismatchError
            If the dimensions differ.
        """
        return self._new(self.to_array() + self._operand(other))

    def subtract(self, other: "RealVector | VectorLike") -> "ArrayRealVector":
        return self._new(self.to_array() - self._operand(other))

    def ebe_multiply(self, other: "RealVector | VectorLike") -> "ArrayRealVector":
        """Return the element-by-element product."""
        return self._new(self.to_array() * self._operand(other))

    def ebe_divide(self, other: "RealVector | VectorLike") -> "ArrayRealVector":
        """Return the element-by-element quotient."""
        with np.errstate(divide="ignore", invalid="ignore"):
            return self._new(self.to_array() / self._operand(other))

    def combine(
        self, a: float, b: float, other: "RealVector | VectorLike"
    ) -> "ArrayRealVector":
        """Return the linear combination ``a * self + b * other``."""
        return self._new(a * self.to_array() + b * self._operand(other))

    def combine_to_self(
        self, a: float, b: float, other: "RealVector | VectorLike"
    ) -> Self:
        values = a * self.to_array() + b * self._operand(other)
        self._assign(values)
        return self

    def _assign(self, values: npt.NDArray[np.float64]) -> None:
        for i, value in enumerate(values):
            self.set_entry(i, float(value))

    def map(self, function: Callable[[float], float]) -> "ArrayRealVector":
        """Return a new vector made of ``function(x)`` for each entry ``x``."""
        return self.copy_as_array().map_to_self(function)

    def map_to_self(self, function: Callable[[float], float]) -> Self:
        values = np.array([function(float(x)) for x in self.to_array()], np.float64)
        self._assign(values)
        return self

    def copy_as_array(self) -> "ArrayRealVector":
        return ArrayRealVector(self.to_array(), copy=False)

    def map_add(self, d: float) -> "ArrayRealVector":
        return self.copy_as_array().map_add_to_self(d)

    def map_add_to_self(self, d: float) -> Self:
        self._assign(self.to_array() + d)
        return self

    def map_subtract(self, d: float) -> "ArrayRealVector":
        return self.copy_as_array().map_subtract_to_self(d)

    def map_subtract_to_self(self, d: float) -> Self:
        return self.map_add_to_self(-d)

    def map_multiply(self, d: float) -> "ArrayRealVector":
        return self.copy_as_array().map_multiply_to_self(d)

    def map_multiply_to_self(self, d: float) -> Self:
        self._assign(self.to_array() * d)
        return self

    def map_divide(self, d: float) -> "ArrayRealVector":
        return self.copy_as_array().map_divide_to_self(d)

    def map_divide_to_self(self, d: float) -> Self:
        with np.errstate(divide="ignore", invalid="ignore"):
            self._assign(self.to_array() / d)

        return self

    def dot_product(self, other: "RealVector | VectorLike") -> float:
        return float(np.dot(self.to_array(), self._operand(other)))

    def cosine(self, other: "RealVector | VectorLike") -> float:
        """Return the cosine of the angle between the two vectors.

        Raises
        ------
        ZeroNormError
            If one of the vectors is null.
        """
        rhs = self._operand(other)
        norm = self.get_norm()
        rhs_norm = float(np.linalg.norm(rhs))

        if norm == 0.0 or rhs_norm == 0.0:
            raise ZeroNormError

        return self.dot_product(rhs) / (norm * rhs_norm)

    def projection(self, other: "RealVector | VectorLike") -> "ArrayRealVector":
        """Return the orthogonal projection of the vector onto `other`.

        Raises
        ------
        ZeroNormError
            If `other` is null.
        """
        rhs = self._operand(other)
        norm2 = float(np.dot(rhs, rhs))

        if norm2 == 0.0:
            raise ZeroNormError

        return self._new(rhs * (self.dot_product(rhs) / norm2))

    def outer_product(self, other: "RealVector | VectorLike") -> "RealMatrix":
        """Return the matrix ``self * other^T``; dimensions may differ."""
        from densela.linalg.dense import create_real_matrix

        rhs = checks.as_vector(other, copy=False)
        return create_real_matrix(np.outer(self.to_array(), rhs), copy=False)

    def get_norm(self) -> float:
        """Return the L2 norm."""
        return float(np.linalg.norm(self.to_array()))

    def get_l1_norm(self) -> float:
        return float(np.sum(np.abs(self.to_array())))

    def get_linf_norm(self) -> float:
        if self.dimension == 0:
            return 0.0

        return float(np.max(np.abs(self.to_array())))

    def get_distance(self, other: "RealVector | VectorLike") -> float:
        return float(np.linalg.norm(self.to_array() - self._operand(other)))

    def get_l1_distance(self, other: "RealVector | VectorLike") -> float:
        return float(np.sum(np.abs(self.to_array() - self._operand(other))))

    def get_linf_distance(self, other: "RealVector | VectorLike") -> float:
        diff = np.abs(self.to_array() - self._operand(other))
        return float(np.max(diff)) if len(diff) else 0.0

    def get_max_index(self) -> int:
        """Return the index of the largest entry, NaN being ignored; ``-1`` if every
        entry is NaN."""
        values = self.to_array()

        if len(values) == 0 or np.all(np.isnan(values)):
            return -1

        return int(np.nanargmax(values))

    def get_max_value(self) -> float:
        index = self.get_max_index()
        return math.nan if index < 0 else self.get_entry(index)

    def get_min_index(self) -> int:
        values = self.to_array()

        if len(values) == 0 or np.all(np.isnan(values)):
            return -1

        return int(np.nanargmin(values))

    def get_min_value(self) -> float:
        index = self.get_min_index()
        return math.nan if index < 0 else self.get_entry(index)

    def get_sub_vector(self, index: int, n: int) -> "ArrayRealVector":
        """Return the `n` entries starting at `index`.

        Raises
        ------
        OutOfRangeError
            If `index` or ``index + n - 1`` is out of range.
        NotPositiveError
            If `n` is negative.
        """
        if n < 0:
            raise NotPositiveError(n, "number of elements")

        checks.check_index(index, self.dimension)

        if n > 0:
            checks.check_index(index + n - 1, self.dimension)

        return self._new(self.to_array()[index : index + n].copy())

    def set_sub_vector(self, index: int, other: "RealVector | VectorLike") -> None:
        values = checks.as_vector(other)
        checks.check_index(index, self.dimension)

        if len(values) > 0:
            checks.check_index(index + len(values) - 1, self.dimension)

        for i, value in enumerate(values):
            self.set_entry(index + i, float(value))

    def append(self, other: "RealVector | VectorLike | float") -> "ArrayRealVector":
        """Return a new vector made of the entries of the vector followed by `other`."""
        if isinstance(other, (int, float)):
            tail = np.array([other], np.float64)
        else:
            tail = checks.as_vector(other, copy=False)

        return self._new(np.concatenate((self.to_array(), tail)))

    def unit_vector(self) -> "ArrayRealVector":
        """Return a unit vector pointing in the same direction.

        Raises
        ------
        ZeroNormError
            If the norm is zero.
        """
        norm = self.get_norm()

        if norm == 0.0:
            raise ZeroNormError

        return self._new(self.to_array() / norm)

    def unitize(self) -> None:
        """Normalize the vector in place.

        Raises
        ------
        ZeroNormError
            If the norm is zero.
        """
        norm = self.get_norm()

        if norm == 0.0:
            raise ZeroNormError

        self._assign(self.to_array() / norm)

    def is_nan(self) -> bool:
        """Return ``True`` if any coordinate is NaN."""
        return bool(np.any(np.isnan(self.to_array())))

    def is_infinite(self) -> bool:
        """Return ``True`` if any coordinate is infinite and none is NaN."""
        values = self.to_array()
        return bool(not np.any(np.isnan(values)) and np.any(np.isinf(values)))

    def walk_in_default_order(
        self,
        visitor: VectorPreservingVisitor | VectorChangingVisitor,
        start: int | None = None,
        end: int | None = None,
        *,
        changing: bool | None = None,
    ) -> float:
        """Visit the entries ``[start, end]`` in increasing index order.

        The visitor is treated as a changing visitor when `changing` is ``True``, or
        when `changing` is ``None`` and the visitor is an instance of
        :class:`~densela.linalg.visitors.DefaultVectorChangingVisitor`.
        """
        return walk_vector(self, visitor, is_changing(visitor, changing), start, end)

    def walk_in_optimized_order(
        self,
        visitor: VectorPreservingVisitor | VectorChangingVisitor,
        start: int | None = None,
        end: int | None = None,
        *,
        changing: bool | None = None,
    ) -> float:
        return self.walk_in_default_order(visitor, start, end, changing=changing)

    def __len__(self) -> int:
        return self.dimension

    def __getitem__(self, key: int) -> float:
        if key < 0:
            key += self.dimension

        return self.get_entry(key)

    def __setitem__(self, key: int, value: float) -> None:
        if key < 0:
            key += self.dimension

        self.set_entry(key, value)

    def __iter__(self) -> Iterator[float]:
        return (self.get_entry(i) for i in range(self.dimension))

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, RealVector):
            return NotImplemented

        if other is self:
            return True

        if other.dimension != self.dimension:
            return False

        if other.is_nan():
            return self.is_nan()

        return bool(np.all(self.to_array() == other.to_array()))

    def __hash__(self) -> int:
        if self.is_nan():
            return _NAN_HASH

        # -0.0 and 0.0 compare equal and must hash alike
        return hash(tuple((self.to_array() + 0.0).tolist()))

    def __add__(self, rhs: "RealVector | VectorLike") -> "ArrayRealVector":
        if isinstance(rhs, (int, float)):
            return NotImplemented

        return self.add(rhs)

    def __sub__(self, rhs: "RealVector | VectorLike") -> "ArrayRealVector":
        if isinstance(rhs, (int, float)):
            return NotImplemented

        return self.subtract(rhs)

    def __mul__(self, rhs: float) -> "ArrayRealVector":
        if not isinstance(rhs, (int, float)):
            return NotImplemented

        return self.map_multiply(rhs)

    def __rmul__(self, lhs: float) -> "ArrayRealVector":
        return self.__mul__(lhs)

    def __truediv__(self, rhs: float) -> "ArrayRealVector":
        if not isinstance(rhs, (int, float)):
            return NotImplemented

        return self.map_divide(rhs)

    def __matmul__(self, rhs: "RealVector | VectorLike") -> float:
        from densela.linalg.matrix import RealMatrix

        if isinstance(rhs, RealMatrix):
            return NotImplemented

        return self.dot_product(rhs)

    def __neg__(self) -> "ArrayRealVector":
        return self.map_multiply(-1.0)

    def __pos__(self) -> "ArrayRealVector":
        return self.copy_as_array()

    def __copy__(self) -> Self:
        return self.copy()

    def __str__(self) -> str:
        from densela.linalg.formats import format_vector

        return format_vector(self.to_array())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_array().tolist()!r})"


class ArrayRealVector(RealVector):
    """Vector backed by a one-dimensional float64 ndarray.

    Parameters
    ----------
    data : RealVector | ndarray | Sequence[float]
        Coordinates of the vector.
    copy : bool, default=True
        If ``False`` and `data` is a float64 ndarray, the vector references `data`
        instead of copying it, and changes made to either are visible through the
        other.

    Examples
    --------
    >>> from densela.linalg import ArrayRealVector
    >>> x = ArrayRealVector([3.0, 14.0])
    >>> x.ebe_multiply([3.0, 2.0])
    ArrayRealVector([9.0, 28.0])
    """

    __slots__ = ("_data",)
    _data: npt.NDArray[np.float64]

    def __init__(self, data: RealVector | VectorLike, copy: bool = True):
        if data is None:
            raise NullArgumentError("data")

        if isinstance(data, ArrayRealVector):
            self._data = data._data.copy() if copy else data._data
        else:
            self._data = checks.as_vector(data, "data", copy=copy)

    @classmethod
    def zeros(cls, dimension: int) -> Self:
        """Return a new vector filled with zeros."""
        return cls(np.zeros(dimension, np.float64), copy=False)

    @classmethod
    def full(cls, dimension: int, value: float) -> Self:
        return cls(np.full(dimension, value, np.float64), copy=False)

    @property
    def dimension(self) -> int:
        return len(self._data)

    def get_data_ref(self) -> npt.NDArray[np.float64]:
        """Return the backing array itself (no copy)."""
        return self._data

    def get_entry(self, index: int) -> float:
        checks.check_index(index, len(self._data))
        return float(self._data[index])

    def set_entry(self, index: int, value: float) -> None:
        checks.check_index(index, len(self._data))
        self._data[index] = value

    def add_to_entry(self, index: int, increment: float) -> None:
        checks.check_index(index, len(self._data))
        self._data[index] += increment

    def set(self, value: float) -> None:
        """Set every entry to `value`."""
        self._data[...] = value

    def copy(self) -> Self:
        return type(self)(self._data.copy(), copy=False)

    def to_array(self) -> npt.NDArray[np.float64]:
        return self._data.copy()

    def _assign(self, values: npt.NDArray[np.float64]) -> None:
        self._data[...] = values

    def _operand(self, other: "RealVector | VectorLike") -> npt.NDArray[np.float64]:
        if isinstance(other, ArrayRealVector):
            if len(other._data) != len(self._data):
                raise DimensionMismatchError(len(other._data), len(self._data))

            return other._data

        return super()._operand(other)

    def set_sub_vector(self, index: int, other: "RealVector | VectorLike") -> None:
        values = checks.as_vector(other)
        checks.check_index(index, len(self._data))

        if len(values) > 0:
            checks.check_index(index + len(values) - 1, len(self._data))

        self._data[index : index + len(values)] = values

    def __getstate__(self):
        return self._data

    def __setstate__(self, state):
        self._data = state
