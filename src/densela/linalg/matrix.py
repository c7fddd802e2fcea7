import enum
import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Sequence
from typing import Any, Self, TypeAlias, overload

import numpy as np
import numpy.typing as npt

from densela import config
from densela.exceptions import (
    DimensionMismatchError,
    NotPositiveError,
    NullArgumentError,
    SingularMatrixError,
)
from densela.linalg import checks, formats
from densela.linalg.vector import ArrayRealVector, RealVector
from densela.linalg.visitors import Order, is_changing, walk_matrix
from densela.typing import (
    DecompositionBuilder,
    MatrixChangingVisitor,
    MatrixLike,
    MatrixPreservingVisitor,
    VectorLike,
)

logger = logging.getLogger(__name__)


class Kind(enum.Enum):
    """Representation of a matrix, from the least to the most specific.

    Attributes
    ----------
    GENERAL
    DIAGONAL
    SYMMETRIC
    SYMMETRIC_POSITIVE
    DECOMPOSED
        Symmetric positive semi-definite matrix stored as ``B * B^T``.
    """

    GENERAL = enum.auto()
    DIAGONAL = enum.auto()
    SYMMETRIC = enum.auto()
    SYMMETRIC_POSITIVE = enum.auto()
    DECOMPOSED = enum.auto()

    def __repr__(self):
        return f"<{self.__class__.__name__}.{self.name}>"


_G = Kind.GENERAL
_D = Kind.DIAGONAL
_S = Kind.SYMMETRIC
_P = Kind.SYMMETRIC_POSITIVE
_B = Kind.DECOMPOSED

# Representation of ``lhs + rhs``, also used for diagonal concatenation.
ADDITION: dict[tuple[Kind, Kind], Kind] = {
    (_G, _G): _G, (_G, _D): _G, (_G, _S): _G, (_G, _P): _G, (_G, _B): _G,
    (_D, _G): _G, (_D, _D): _D, (_D, _S): _S, (_D, _P): _S, (_D, _B): _S,
    (_S, _G): _G, (_S, _D): _S, (_S, _S): _S, (_S, _P): _S, (_S, _B): _S,
    (_P, _G): _G, (_P, _D): _S, (_P, _S): _S, (_P, _P): _P, (_P, _B): _P,
    (_B, _G): _G, (_B, _D): _S, (_B, _S): _S, (_B, _P): _P, (_B, _B): _B,
}  # fmt: skip

# Representation of ``lhs - rhs``.
SUBTRACTION: dict[tuple[Kind, Kind], Kind] = {
    (_G, _G): _G, (_G, _D): _G, (_G, _S): _G, (_G, _P): _G, (_G, _B): _G,
    (_D, _G): _G, (_D, _D): _D, (_D, _S): _S, (_D, _P): _S, (_D, _B): _S,
    (_S, _G): _G, (_S, _D): _S, (_S, _S): _S, (_S, _P): _S, (_S, _B): _S,
    (_P, _G): _G, (_P, _D): _S, (_P, _S): _S, (_P, _P): _S, (_P, _B): _S,
    (_B, _G): _G, (_B, _D): _S, (_B, _S): _S, (_B, _P): _S, (_B, _B): _S,
}  # fmt: skip

# Representation of ``lhs * rhs``.
MULTIPLICATION: dict[tuple[Kind, Kind], Kind] = {
    (_G, _G): _G, (_G, _D): _G, (_G, _S): _G, (_G, _P): _G, (_G, _B): _G,
    (_D, _G): _G, (_D, _D): _D, (_D, _S): _G, (_D, _P): _G, (_D, _B): _G,
    (_S, _G): _G, (_S, _D): _G, (_S, _S): _G, (_S, _P): _G, (_S, _B): _G,
    (_P, _G): _G, (_P, _D): _G, (_P, _S): _G, (_P, _P): _G, (_P, _B): _G,
    (_B, _G): _G, (_B, _D): _G, (_B, _S): _G, (_B, _P): _G, (_B, _B): _G,
}  # fmt: skip


def scalar_add_kind(kind: Kind, d: float) -> Kind:
    """Return the representation of ``m + d`` for a matrix `m` of the given kind."""
    match kind:
        case Kind.DIAGONAL:
            return _D if d == 0.0 else _S

        case Kind.SYMMETRIC_POSITIVE | Kind.DECOMPOSED:
            return kind if d >= 0.0 else _S

        case _:
            return kind


def scalar_multiply_kind(kind: Kind, d: float) -> Kind:
    """Return the representation of ``d * m`` for a matrix `m` of the given kind."""
    match kind:
        case Kind.SYMMETRIC_POSITIVE | Kind.DECOMPOSED:
            return kind if d >= 0.0 else _S

        case _:
            return kind


Builder: TypeAlias = Callable[[npt.NDArray[np.float64]], "RealMatrix"]

_BUILDERS: dict[Kind, Builder] = {}


def register_builder(kind: Kind, builder: Builder) -> None:
    """Register the function building a matrix of the given kind from a full array.

    The array passed to `builder` is owned by the new matrix. It is consistent with
    the structure of `kind` up to rounding errors.
    """
    _BUILDERS[kind] = builder


def build(kind: Kind, data: npt.NDArray[np.float64]) -> "RealMatrix":
    return _BUILDERS[kind](data)


def as_real_matrix(m: "RealMatrix | MatrixLike") -> "RealMatrix":
    """Return `m` if it is a :class:`RealMatrix`, or a general matrix holding a copy
    of `m` otherwise."""
    if isinstance(m, RealMatrix):
        return m

    return build(Kind.GENERAL, checks.as_matrix(m, "matrix"))


class RealMatrix(ABC):
    """Abstract base class for real matrices.

    Every operation is written in terms of :attr:`shape`, :meth:`get_entry`,
    :meth:`set_entry` and :meth:`get_data`. Combining operations return a new matrix
    whose representation is picked from the :class:`Kind` of the operands, e.g. the
    sum of two symmetric matrices is symmetric whatever their storage.

    Mutating operations check their arguments first, and hand every new value at once
    to the storage, so that a failing operation leaves the matrix untouched.
    """

    __slots__ = ("_decomposition",)
    __array_ufunc__ = None
    kind: Kind = Kind.GENERAL
    _decomposition: DecompositionBuilder | None

    def __init__(self):
        self._decomposition = None

    @property
    @abstractmethod
    def shape(self) -> tuple[int, int]:
        """Tuple of matrix dimensions."""
        raise NotImplementedError

    @property
    def row_dimension(self) -> int:
        return self.shape[0]

    @property
    def column_dimension(self) -> int:
        return self.shape[1]

    @abstractmethod
    def get_entry(self, row: int, column: int) -> float:
        """Return the entry at (`row`, `column`).

        Raises
        ------
        OutOfRangeError
            If `row` or `column` is out of range; the exception reports the axis.
        """
        raise NotImplementedError

    @abstractmethod
    def set_entry(self, row: int, column: int, value: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_data(self, force_copy: bool = True) -> npt.NDArray[np.float64]:
        """Return the entries as a two-dimensional array.

        Parameters
        ----------
        force_copy : bool, default=True
            If ``False``, the backing array may be returned as is. It must then not
            be modified.
        """
        raise NotImplementedError

    @abstractmethod
    def copy(self) -> Self:
        raise NotImplementedError

    def create_matrix(self, rows: int, columns: int) -> "RealMatrix":
        """Return a new zero matrix of the given shape."""
        if rows <= 0 or columns <= 0:
            raise NotPositiveError(min(rows, columns), "dimension")

        return self._build_general(np.zeros((rows, columns)))

    def _build_general(self, data: npt.NDArray[np.float64]) -> "RealMatrix":
        return build(Kind.GENERAL, data)

    def _build(self, kind: Kind, data: npt.NDArray[np.float64]) -> "RealMatrix":
        if kind is Kind.GENERAL:
            return self._build_general(data)

        return build(kind, data)

    def _apply_changes(self, changes: list[tuple[int, int, float]]) -> None:
        """Write every ``(row, column, value)`` of `changes`.

        Implementations that may reject a value check all of them first.
        """
        for i, j, value in changes:
            self.set_entry(i, j, value)

    def add_to_entry(self, row: int, column: int, increment: float) -> None:
        self.set_entry(row, column, self.get_entry(row, column) + increment)

    def multiply_entry(self, row: int, column: int, factor: float) -> None:
        self.set_entry(row, column, self.get_entry(row, column) * factor)

    def add(self, m: "RealMatrix | MatrixLike") -> "RealMatrix":
        """Return ``self + m``.

        Raises
        ------
        DimensionMismatchError
            If the shapes differ.
        """
        m = as_real_matrix(m)
        checks.check_addition_compatible(self, m)
        data = self.get_data(False) + m.get_data(False)
        return self._build(ADDITION[self.kind, m.kind], data)

    def subtract(self, m: "RealMatrix | MatrixLike") -> "RealMatrix":
        """Return ``self - m``.

        Raises
        ------
        DimensionMismatchError
            If the shapes differ.
        """
        m = as_real_matrix(m)
        checks.check_addition_compatible(self, m)
        data = self.get_data(False) - m.get_data(False)
        return self._build(SUBTRACTION[self.kind, m.kind], data)

    def scalar_add(self, d: float) -> "RealMatrix":
        """Return the matrix obtained by adding `d` to every entry."""
        return self._build(scalar_add_kind(self.kind, d), self.get_data(False) + d)

    def scalar_multiply(self, d: float) -> "RealMatrix":
        return self._build(scalar_multiply_kind(self.kind, d), self.get_data(False) * d)

    def _multiply_data(self, rhs: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        return self.get_data(False) @ rhs

    def multiply(
        self, m: "RealMatrix | MatrixLike", to_transpose: bool = False, d: float = 1.0
    ) -> "RealMatrix":
        """Return ``d * self * m``, or ``d * self * m^T`` if `to_transpose` is set.

        Raises
        ------
        DimensionMismatchError
            If the column dimension of the matrix differs from the row dimension of
            `m` (its column dimension if `to_transpose` is set).
        """
        m = as_real_matrix(m)

        if to_transpose:
            if m.column_dimension != self.column_dimension:
                raise DimensionMismatchError(m.column_dimension, self.column_dimension)

            rhs = m.get_data(False).T
        else:
            checks.check_multiplication_compatible(self, m)
            rhs = m.get_data(False)

        data = self._multiply_data(rhs)

        if d != 1.0:
            data *= d

        return self._build(MULTIPLICATION[self.kind, m.kind], data)

    @overload
    def pre_multiply(self, m: "RealMatrix") -> "RealMatrix": ...

    @overload
    def pre_multiply(self, m: RealVector) -> ArrayRealVector: ...

    @overload
    def pre_multiply(self, m: VectorLike) -> npt.NDArray[np.float64]: ...

    def pre_multiply(self, m):
        """Return ``m * self``.

        `m` is either a matrix, or a vector ``v`` in which case the result is the
        vector ``v^T * self``, returned with the type of `v`.
        """
        if m is None:
            raise NullArgumentError("m")

        if isinstance(m, RealMatrix):
            return m.multiply(self)

        if isinstance(m, np.ndarray) and m.ndim == 2:
            return as_real_matrix(m).multiply(self)

        v = checks.as_vector(m, copy=False)

        if len(v) != self.row_dimension:
            raise DimensionMismatchError(len(v), self.row_dimension)

        result = v @ self.get_data(False)
        if isinstance(m, RealVector):
            return ArrayRealVector(result, copy=False)

        return result

    @overload
    def operate(self, v: RealVector) -> ArrayRealVector: ...

    @overload
    def operate(self, v: VectorLike) -> npt.NDArray[np.float64]: ...

    def operate(self, v):
        """Return the product ``self * v``, with the type of `v`.

        Raises
        ------
        DimensionMismatchError
            If the dimension of `v` differs from the column dimension.
        """
        x = checks.as_vector(v, copy=False)

        if len(x) != self.column_dimension:
            raise DimensionMismatchError(len(x), self.column_dimension)

        result = self._multiply_data(x)
        if isinstance(v, RealVector):
            return ArrayRealVector(result, copy=False)

        return result

    def power(self, p: int) -> "RealMatrix":
        """Return the matrix raised to the non-negative integer power `p`.

        Raises
        ------
        NonSquareMatrixError
            If the matrix is not square.
        NotPositiveError
            If `p` is negative.
        """
        checks.check_square(self)

        if p < 0:
            raise NotPositiveError(p, "exponent")

        data = np.linalg.matrix_power(self.get_data(False), p)
        return self._build(self.kind, data)

    def transpose(self, force_copy: bool = True) -> "RealMatrix":
        """Return the transpose of the matrix.

        A matrix that is its own transpose by construction (any kind but
        :attr:`Kind.GENERAL`) is returned as is when `force_copy` is ``False``, and
        copied otherwise.
        """
        if self.kind is not Kind.GENERAL:
            return self.copy() if force_copy else self

        return self._build_general(self.get_data(False).T.copy())

    @property
    def T(self) -> "RealMatrix":
        """Shorthand for :meth:`transpose`."""
        return self.transpose()

    def concatenate_horizontally(
        self, m: "RealMatrix | MatrixLike", right_concatenation: bool = True
    ) -> "RealMatrix":
        """Return ``[self, m]``, or ``[m, self]`` if `right_concatenation` is
        ``False``.

        Raises
        ------
        DimensionMismatchError
            If the row dimensions differ.
        """
        m = as_real_matrix(m)

        if m.row_dimension != self.row_dimension:
            raise DimensionMismatchError(m.row_dimension, self.row_dimension)

        blocks = (self.get_data(False), m.get_data(False))

        if not right_concatenation:
            blocks = blocks[::-1]

        return self._build_general(np.hstack(blocks))

    def concatenate_vertically(
        self, m: "RealMatrix | MatrixLike", lower_concatenation: bool = True
    ) -> "RealMatrix":
        """Return ``[self; m]``, or ``[m; self]`` if `lower_concatenation` is
        ``False``.

        Raises
        ------
        DimensionMismatchError
            If the column dimensions differ.
        """
        m = as_real_matrix(m)

        if m.column_dimension != self.column_dimension:
            raise DimensionMismatchError(m.column_dimension, self.column_dimension)

        blocks = (self.get_data(False), m.get_data(False))

        if not lower_concatenation:
            blocks = blocks[::-1]

        return self._build_general(np.vstack(blocks))

    def concatenate_diagonally(
        self,
        m: "RealMatrix | MatrixLike",
        right_concatenation: bool = True,
        lower_concatenation: bool | None = None,
    ) -> "RealMatrix":
        """Concatenate `m` diagonally or anti-diagonally, the rest being zero.

        `m` is placed on the right if `right_concatenation` is set and on the left
        otherwise; in the lower part if `lower_concatenation` is set and in the upper
        part otherwise. `lower_concatenation` defaults to `right_concatenation`, so
        that a single flag selects the lower right or the upper left corner.

        Examples
        --------
        >>> from densela.linalg import Array2DRowRealMatrix
        >>> a = Array2DRowRealMatrix([[1.0]])
        >>> a.concatenate_diagonally([[2.0]], True, False).get_data().tolist()
        [[0.0, 2.0], [1.0, 0.0]]
        """
        m = as_real_matrix(m)

        if lower_concatenation is None:
            lower_concatenation = right_concatenation

        data = block_diagonal(
            self.get_data(False),
            m.get_data(False),
            right_concatenation,
            lower_concatenation,
        )

        if right_concatenation != lower_concatenation:
            return self._build_general(data)

        return self._build(ADDITION[self.kind, m.kind], data)

    def set_default_decomposition(self, builder: DecompositionBuilder | None) -> None:
        """Set the decomposition builder used by :meth:`get_inverse` for this matrix;
        ``None`` restores the process-wide default."""
        if builder is not None and not callable(builder):
            raise TypeError(f"expected a callable, got {type(builder).__name__}")

        self._decomposition = builder

    def get_default_decomposition(self) -> DecompositionBuilder:
        if self._decomposition is not None:
            return self._decomposition

        return config.get_default_decomposition()

    def get_inverse(self, builder: DecompositionBuilder | None = None) -> "RealMatrix":
        """Return the inverse of the matrix.

        Parameters
        ----------
        builder : Callable[[RealMatrix], Decomposition] | None, default=None
            Decomposition used to compute the inverse. Defaults to
            :meth:`get_default_decomposition`.

        Raises
        ------
        NonSquareMatrixError
            If the matrix is not square.
        SingularMatrixError
            If the decomposition finds the matrix singular.
        """
        checks.check_square(self)

        if builder is None:
            builder = self.get_default_decomposition()

        solver = builder(self).get_solver()
        logger.debug("inverting %dx%d matrix with %r", *self.shape, solver)

        if not solver.is_non_singular():
            raise SingularMatrixError

        inverse = solver.get_inverse()
        return self._build(self.kind, inverse.get_data())

    def get_trace(self) -> float:
        """Return the sum of the diagonal entries.

        Raises
        ------
        NonSquareMatrixError
            If the matrix is not square.
        """
        checks.check_square(self)
        return float(np.trace(self.get_data(False)))

    def get_norm(self) -> float:
        """Return the maximum absolute column sum."""
        return float(np.max(np.sum(np.abs(self.get_data(False)), axis=0)))

    def get_frobenius_norm(self) -> float:
        return float(np.linalg.norm(self.get_data(False)))

    def get_min(self) -> float:
        return float(np.min(self.get_data(False)))

    def get_max(self) -> float:
        return float(np.max(self.get_data(False)))

    def get_abs(self) -> "RealMatrix":
        """Return the matrix of the absolute values of the entries."""
        match self.kind:
            case Kind.SYMMETRIC_POSITIVE | Kind.DECOMPOSED:
                kind = Kind.SYMMETRIC

            case _:
                kind = self.kind

        return self._build(kind, np.abs(self.get_data(False)))

    def is_square(self) -> bool:
        return self.row_dimension == self.column_dimension

    def is_symmetric(
        self,
        relative: float = config.DOUBLE_COMPARISON_EPSILON,
        absolute: float = 0.0,
    ) -> bool:
        """Return ``True`` if the matrix equals its transpose within tolerance.

        Always ``False`` for a non-square matrix.
        """
        if not self.is_square():
            return False

        data = self.get_data(False)
        return checks.allclose(data, data.T, relative, absolute)

    def is_antisymmetric(
        self,
        relative: float = config.DOUBLE_COMPARISON_EPSILON,
        absolute: float = config.DOUBLE_COMPARISON_EPSILON,
    ) -> bool:
        """Return ``True`` if the matrix equals the opposite of its transpose within
        tolerance, the diagonal being compared to zero with `absolute` only."""
        if not self.is_square():
            return False

        data = self.get_data(False)

        if np.any(np.abs(np.diag(data)) > absolute):
            return False

        return checks.allclose(data, -data.T, relative, absolute)

    def is_diagonal(self, absolute: float = 0.0) -> bool:
        if not self.is_square():
            return False

        data = self.get_data(False)
        off_diagonal = data - np.diag(np.diag(data))
        return bool(np.all(np.abs(off_diagonal) <= absolute))

    def is_orthogonal(
        self,
        normality: float = config.DOUBLE_COMPARISON_EPSILON,
        orthogonality: float = config.DOUBLE_COMPARISON_EPSILON,
    ) -> bool:
        """Return ``True`` if the columns form an orthonormal set.

        Parameters
        ----------
        normality : float
            Relative tolerance on the norm of each column.
        orthogonality : float
            Absolute tolerance on the dot product of two distinct columns.
        """
        if not self.is_square():
            return False

        data = self.get_data(False)
        gram = data.T @ data
        norms = np.sqrt(np.diag(gram))

        if np.any(np.abs(norms - 1.0) > normality):
            return False

        off_diagonal = gram - np.diag(np.diag(gram))
        return bool(np.all(np.abs(off_diagonal) <= orthogonality))

    def is_invertible(self, relative: float = config.DOUBLE_COMPARISON_EPSILON) -> bool:
        """Return ``True`` if the ratio of the smallest to the largest singular value
        exceeds `relative`."""
        if not self.is_square():
            return False

        s = np.linalg.svd(self.get_data(False), compute_uv=False)
        return bool(s[0] > 0.0 and s[-1] > relative * s[0])

    def equals(
        self,
        other: "RealMatrix | MatrixLike",
        relative: float = 0.0,
        absolute: float = 0.0,
    ) -> bool:
        """Return ``True`` if `other` has the same shape and every entry is equal
        within an absolute *or* relative tolerance."""
        other = as_real_matrix(other)

        if other.shape != self.shape:
            return False

        return checks.allclose(
            self.get_data(False), other.get_data(False), relative, absolute
        )

    def get_row(self, row: int) -> npt.NDArray[np.float64]:
        checks.check_row_index(self, row)
        return self.get_data(False)[row].copy()

    def get_column(self, column: int) -> npt.NDArray[np.float64]:
        checks.check_column_index(self, column)
        return self.get_data(False)[:, column].copy()

    def get_row_vector(self, row: int) -> ArrayRealVector:
        return ArrayRealVector(self.get_row(row), copy=False)

    def get_column_vector(self, column: int) -> ArrayRealVector:
        return ArrayRealVector(self.get_column(column), copy=False)

    def get_row_matrix(self, row: int) -> "RealMatrix":
        """Return the row `row` as a ``1 x n`` general matrix."""
        return self._build_general(self.get_row(row)[np.newaxis, :])

    def get_column_matrix(self, column: int) -> "RealMatrix":
        """Return the column `column` as a ``n x 1`` general matrix."""
        return self._build_general(self.get_column(column)[:, np.newaxis])

    def set_row(self, row: int, array: "RealVector | VectorLike") -> None:
        """Replace the row `row`.

        Raises
        ------
        OutOfRangeError
            If `row` is out of range.
        DimensionMismatchError
            If the length of `array` differs from the column dimension.
        """
        checks.check_row_index(self, row)
        values = checks.as_vector(array, "array", copy=False)

        if len(values) != self.column_dimension:
            raise DimensionMismatchError((1, len(values)), (1, self.column_dimension))

        self._apply_changes([(row, j, float(x)) for j, x in enumerate(values)])

    def set_column(self, column: int, array: "RealVector | VectorLike") -> None:
        checks.check_column_index(self, column)
        values = checks.as_vector(array, "array", copy=False)

        if len(values) != self.row_dimension:
            raise DimensionMismatchError((len(values), 1), (self.row_dimension, 1))

        self._apply_changes([(i, column, float(x)) for i, x in enumerate(values)])

    def set_row_vector(self, row: int, vector: RealVector) -> None:
        self.set_row(row, vector)

    def set_column_vector(self, column: int, vector: RealVector) -> None:
        self.set_column(column, vector)

    def set_row_matrix(self, row: int, matrix: "RealMatrix | MatrixLike") -> None:
        """Replace the row `row` by a ``1 x n`` matrix."""
        matrix = as_real_matrix(matrix)

        if matrix.shape != (1, self.column_dimension):
            raise DimensionMismatchError(matrix.shape, (1, self.column_dimension))

        self.set_row(row, matrix.get_data(False)[0])

    def set_column_matrix(self, column: int, matrix: "RealMatrix | MatrixLike") -> None:
        """Replace the column `column` by a ``n x 1`` matrix."""
        matrix = as_real_matrix(matrix)

        if matrix.shape != (self.row_dimension, 1):
            raise DimensionMismatchError(matrix.shape, (self.row_dimension, 1))

        self.set_column(column, matrix.get_data(False)[:, 0])

    def _select(self, args: tuple) -> tuple[list[int], list[int]]:
        match args:
            case (start_row, end_row, start_column, end_column):
                checks.check_sub_matrix_range(
                    self, start_row, end_row, start_column, end_column
                )
                rows = list(range(start_row, end_row + 1))
                columns = list(range(start_column, end_column + 1))

            case (int() | np.integer() as start, int() | np.integer() as end):
                checks.check_sub_matrix_range(self, start, end, start, end)
                rows = columns = list(range(start, end + 1))

            case (selected,):
                checks.check_index_array(self, selected, "row")
                checks.check_index_array(self, selected, "column")
                rows = columns = [int(i) for i in selected]

            case (selected_rows, selected_columns):
                checks.check_index_array(self, selected_rows, "row")
                checks.check_index_array(self, selected_columns, "column")
                rows = [int(i) for i in selected_rows]
                columns = [int(j) for j in selected_columns]

            case _:
                raise TypeError("expected a range or two index arrays")

        return rows, columns

    def _sub_matrix_kind(self, rows: list[int], columns: list[int]) -> Kind:
        if self.kind is Kind.GENERAL or rows != columns:
            return Kind.GENERAL

        if self.kind is Kind.DIAGONAL and len(set(rows)) != len(rows):
            return Kind.SYMMETRIC

        return self.kind

    def _sub_matrix(self, rows: list[int], columns: list[int]) -> "RealMatrix":
        data = self.get_data(False)[np.ix_(rows, columns)]
        return self._build(self._sub_matrix_kind(rows, columns), data)

    @overload
    def get_sub_matrix(
        self, start_row: int, end_row: int, start_column: int, end_column: int, /
    ) -> "RealMatrix": ...

    @overload
    def get_sub_matrix(
        self, selected_rows: Sequence[int], selected_columns: Sequence[int], /
    ) -> "RealMatrix": ...

    @overload
    def get_sub_matrix(self, start: int, end: int, /) -> "RealMatrix": ...

    @overload
    def get_sub_matrix(self, indices: Sequence[int], /) -> "RealMatrix": ...

    def get_sub_matrix(self, *args):
        """Return a sub-matrix.

        The sub-matrix is given either by the inclusive range ``start_row, end_row,
        start_column, end_column``, or by two arrays of selected rows and columns that
        may contain duplicates. The principal sub-matrices ``start, end`` (the same
        range of rows and columns) and ``indices`` (the same rows and columns) are
        shorthands. Selecting the same rows and columns from a structured matrix
        yields a matrix of the same kind.

        Raises
        ------
        OutOfRangeError
            If an index is out of range, or a range is empty.
        NullArgumentError
            If an index array is ``None``.
        NoDataError
            If an index array is empty.
        """
        return self._sub_matrix(*self._select(args))

    def copy_sub_matrix(
        self,
        *args,
        destination: npt.NDArray[np.float64] | list[list[float]],
        start_row: int = 0,
        start_column: int = 0,
    ) -> None:
        """Copy a sub-matrix, given as in :meth:`get_sub_matrix`, into `destination`
        at (`start_row`, `start_column`).

        Raises
        ------
        DimensionMismatchError
            If `destination` is too small.
        """
        rows, columns = self._select(args)

        if destination is None:
            raise NullArgumentError("destination")

        needed = (start_row + len(rows), start_column + len(columns))
        available = (len(destination), len(destination[0]) if len(destination) else 0)

        if (
            min(start_row, start_column) < 0
            or needed[0] > available[0]
            or needed[1] > available[1]
        ):
            raise DimensionMismatchError(available, needed)

        data = self.get_data(False)

        for k, i in enumerate(rows):
            for m, j in enumerate(columns):
                destination[start_row + k][start_column + m] = float(data[i, j])

    def set_sub_matrix(self, sub_matrix: MatrixLike, row: int, column: int) -> None:
        """Replace the entries starting at (`row`, `column`) by `sub_matrix`.

        Raises
        ------
        NullArgumentError
            If `sub_matrix` or one of its rows is ``None``.
        NoDataError
            If `sub_matrix` has no row or no column.
        DimensionMismatchError
            If `sub_matrix` is ragged.
        OutOfRangeError
            If `sub_matrix` does not fit in the matrix.
        """
        data = checks.as_matrix(sub_matrix, "sub_matrix")
        rows, columns = data.shape
        checks.check_sub_matrix_range(
            self, row, row + rows - 1, column, column + columns - 1
        )
        self._apply_changes(
            [
                (row + i, column + j, float(data[i, j]))
                for i in range(rows)
                for j in range(columns)
            ]
        )

    def walk(
        self,
        visitor: MatrixPreservingVisitor | MatrixChangingVisitor,
        order: Order = Order.ROW,
        start_row: int | None = None,
        end_row: int | None = None,
        start_column: int | None = None,
        end_column: int | None = None,
        *,
        changing: bool | None = None,
    ) -> float:
        """Visit the entries of the matrix, or of the rectangle
        ``[start_row, end_row] x [start_column, end_column]``, in the given order.

        Every entry of the rectangle is visited exactly once. With a changing
        visitor, the values returned by ``visitor.visit`` replace the visited
        entries once the traversal is over.

        Parameters
        ----------
        visitor : MatrixPreservingVisitor | MatrixChangingVisitor
        order : Order, default=Order.ROW
        changing : bool | None, default=None
            Whether `visitor` is a changing visitor. ``None`` selects changing only
            for subclasses of
            :class:`~densela.linalg.visitors.DefaultMatrixChangingVisitor`.

        Returns
        -------
        float
            The value returned by ``visitor.end()``.
        """
        return walk_matrix(
            self,
            visitor,
            order,
            is_changing(visitor, changing),
            start_row,
            end_row,
            start_column,
            end_column,
        )

    def walk_in_row_order(
        self,
        visitor: MatrixPreservingVisitor | MatrixChangingVisitor,
        start_row: int | None = None,
        end_row: int | None = None,
        start_column: int | None = None,
        end_column: int | None = None,
        *,
        changing: bool | None = None,
    ) -> float:
        return self.walk(
            visitor,
            Order.ROW,
            start_row,
            end_row,
            start_column,
            end_column,
            changing=changing,
        )

    def walk_in_column_order(
        self,
        visitor: MatrixPreservingVisitor | MatrixChangingVisitor,
        start_row: int | None = None,
        end_row: int | None = None,
        start_column: int | None = None,
        end_column: int | None = None,
        *,
        changing: bool | None = None,
    ) -> float:
        return self.walk(
            visitor,
            Order.COLUMN,
            start_row,
            end_row,
            start_column,
            end_column,
            changing=changing,
        )

    def walk_in_optimized_order(
        self,
        visitor: MatrixPreservingVisitor | MatrixChangingVisitor,
        start_row: int | None = None,
        end_row: int | None = None,
        start_column: int | None = None,
        end_column: int | None = None,
        *,
        changing: bool | None = None,
    ) -> float:
        return self.walk(
            visitor,
            Order.OPTIMIZED,
            start_row,
            end_row,
            start_column,
            end_column,
            changing=changing,
        )

    def to_string(
        self, matrix_format: formats.MatrixFormat = formats.VISUAL_FORMAT
    ) -> str:
        """Return the class name followed by the entries laid out by `matrix_format`.

        Examples
        --------
        >>> from densela.linalg import Array2DRowRealMatrix, formats
        >>> a = Array2DRowRealMatrix([[1.0, 2.0], [3.0, 4.0]])
        >>> a.to_string(formats.OCTAVE_FORMAT)
        'Array2DRowRealMatrix[1, 2; 3, 4]'
        """
        name = type(self).__name__
        return formats.to_string(name, self.get_data(False), matrix_format)

    def _key(self, key: tuple[int, int]) -> tuple[int, int]:
        row, column = key

        if row < 0:
            row += self.row_dimension

        if column < 0:
            column += self.column_dimension

        return row, column

    def __getitem__(self, key: int | tuple[int, int]) -> Any:
        if isinstance(key, tuple):
            return self.get_entry(*self._key(key))

        if key < 0:
            key += self.row_dimension

        return self.get_row(key)

    def __setitem__(self, key: tuple[int, int], value: float) -> None:
        self.set_entry(*self._key(key), value)

    def __len__(self) -> int:
        return self.row_dimension

    def __iter__(self) -> Iterator[npt.NDArray[np.float64]]:
        return (self.get_row(i) for i in range(self.row_dimension))

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, RealMatrix):
            return NotImplemented

        if other is self:
            return True

        if other.shape != self.shape:
            return False

        return bool(np.array_equal(self.get_data(False), other.get_data(False)))

    def __hash__(self) -> int:
        # -0.0 == 0.0 and every NaN is written the same way
        data = self.get_data() + 0.0
        data[np.isnan(data)] = math.nan
        return hash((*self.shape, data.tobytes()))

    def __add__(self, rhs: "RealMatrix | MatrixLike | float") -> "RealMatrix":
        if isinstance(rhs, (int, float)):
            return self.scalar_add(rhs)

        return self.add(rhs)

    def __radd__(self, lhs: "MatrixLike | float") -> "RealMatrix":
        if isinstance(lhs, (int, float)):
            return self.scalar_add(lhs)

        return as_real_matrix(lhs).add(self)

    def __sub__(self, rhs: "RealMatrix | MatrixLike | float") -> "RealMatrix":
        if isinstance(rhs, (int, float)):
            return self.scalar_add(-rhs)

        return self.subtract(rhs)

    def __rsub__(self, lhs: "MatrixLike | float") -> "RealMatrix":
        if isinstance(lhs, (int, float)):
            return self.scalar_multiply(-1.0).scalar_add(lhs)

        return as_real_matrix(lhs).subtract(self)

    def __mul__(self, rhs: float) -> "RealMatrix":
        if not isinstance(rhs, (int, float)):
            return NotImplemented

        return self.scalar_multiply(rhs)

    def __rmul__(self, lhs: float) -> "RealMatrix":
        return self.__mul__(lhs)

    def __matmul__(self, rhs: Any) -> Any:
        if isinstance(rhs, RealVector):
            return self.operate(rhs)

        if isinstance(rhs, np.ndarray) and rhs.ndim == 1:
            return self.operate(rhs)

        if isinstance(rhs, (RealMatrix, np.ndarray, list, tuple)):
            return self.multiply(rhs)

        return NotImplemented

    def __rmatmul__(self, lhs: Any) -> Any:
        if isinstance(lhs, (RealVector, np.ndarray, list, tuple)):
            return self.pre_multiply(lhs)

        return NotImplemented

    def __pow__(self, p: int) -> "RealMatrix":
        return self.power(p)

    def __neg__(self) -> "RealMatrix":
        return self.scalar_multiply(-1.0)

    def __pos__(self) -> Self:
        return self.copy()

    def __copy__(self) -> Self:
        return self.copy()

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.get_data(False).tolist()!r})"


def block_diagonal(
    a: npt.NDArray[np.float64],
    b: npt.NDArray[np.float64],
    right: bool,
    lower: bool,
) -> npt.NDArray[np.float64]:
    """Return the array holding `a` and `b` on its diagonal (or anti-diagonal), `b`
    being on the right if `right` is set and on the bottom if `lower` is set."""
    (r1, c1), (r2, c2) = a.shape, b.shape
    result = np.zeros((r1 + r2, c1 + c2))
    a_rows = slice(0, r1) if lower else slice(r2, r1 + r2)
    a_columns = slice(0, c1) if right else slice(c2, c1 + c2)
    b_rows = slice(r1, r1 + r2) if lower else slice(0, r2)
    b_columns = slice(c1, c1 + c2) if right else slice(0, c2)
    result[a_rows, a_columns] = a
    result[b_rows, b_columns] = b
    return result
