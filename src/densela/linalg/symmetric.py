"""Symmetric matrices and their positive semi-definite variants.

Symmetric matrices store the lower triangle row by row, so that the entry at
``(i, j)`` with ``i >= j`` lives at index ``i * (i + 1) // 2 + j`` of a flat array.
Writing ``(i, j)`` writes ``(j, i)`` as well.

Positive semi-definite matrices cannot be written entry by entry; they only change
through the ``positive_scalar_*_to_self`` operations, which keep them positive.
"""

import enum
import logging
import math
from collections.abc import Callable
from typing import Generic, Self, TypeVar

import numpy as np
import numpy.typing as npt

from densela import config
from densela.exceptions import (
    DimensionMismatchError,
    NonPositiveDefiniteError,
    NonSquareMatrixError,
    NonSymmetricMatrixError,
    NotPositiveError,
    UnsupportedOperationError,
)
from densela.linalg import checks
from densela.linalg.matrix import (
    Kind,
    RealMatrix,
    as_real_matrix,
    block_diagonal,
    build,
    register_builder,
)
from densela.typing import MatrixLike

logger = logging.getLogger(__name__)

# Relative asymmetry above which building an unchecked symmetric matrix is reported.
_ASYMMETRY_WARNING = 1e-8


class SymmetryType(enum.Enum):
    """Triangle kept when a symmetric matrix is built from a full array.

    Attributes
    ----------
    LOWER
        Keep the lower triangle.
    UPPER
        Keep the upper triangle.
    MEAN
        Keep the mean of the matrix and its transpose.
    """

    LOWER = enum.auto()
    UPPER = enum.auto()
    MEAN = enum.auto()

    def __repr__(self):
        return f"<{self.__class__.__name__}.{self.name}>"


T = TypeVar("T")


class FactorCache(Generic[T]):
    """Cached value that is either fresh or stale.

    The value is recomputed by the first :meth:`get` following an
    :meth:`invalidate`.
    """

    __slots__ = ("_value", "_fresh")
    _value: T | None
    _fresh: bool

    def __init__(self):
        self._value = None
        self._fresh = False

    @property
    def fresh(self) -> bool:
        return self._fresh

    def get(self, compute: Callable[[], T]) -> T:
        if not self._fresh:
            self._value = compute()
            self._fresh = True

        return self._value  # type: ignore

    def invalidate(self) -> None:
        self._value = None
        self._fresh = False


def _packed_index(row: int, column: int) -> int:
    if row < column:
        row, column = column, row

    return row * (row + 1) // 2 + column


def _packed_dimension(size: int) -> int:
    n = (math.isqrt(8 * size + 1) - 1) // 2

    if n * (n + 1) // 2 != size or n == 0:
        raise DimensionMismatchError(size, n * (n + 1) // 2)

    return n


def _unpack(packed: npt.NDArray[np.float64], n: int) -> npt.NDArray[np.float64]:
    result = np.empty((n, n))
    rows, columns = np.tril_indices(n)
    result[rows, columns] = packed
    result[columns, rows] = packed
    return result


def check_symmetry(
    data: npt.NDArray[np.float64], thresholds: config.Thresholds
) -> None:
    """Check that `data` equals its transpose within `thresholds`.

    Two entries are equal if their difference is at most ``thresholds.absolute``, or
    at most ``thresholds.relative`` times the largest of their magnitudes.

    Raises
    ------
    NonSymmetricMatrixError
        If an entry differs from its symmetric counterpart.
    """
    if not thresholds.enabled:
        return

    diff = np.abs(data - data.T)
    scale = np.maximum(np.abs(data), np.abs(data.T))
    absolute = thresholds.absolute or 0.0
    tolerance = np.maximum(absolute, (thresholds.relative or 0.0) * scale)
    offending = np.argwhere(np.tril(diff > tolerance) | np.isnan(np.tril(diff)))

    if len(offending):
        i, j = (int(k) for k in offending[0])
        raise NonSymmetricMatrixError(i, j, float(tolerance[i, j]))


def check_positive_semi_definite(
    data: npt.NDArray[np.float64], tolerance: float
) -> None:
    """Check that the symmetric matrix `data` is positive semi-definite.

    Gaussian elimination is run after adding `tolerance` to the diagonal: every pivot
    must be non-negative, and a zero pivot requires the rest of its row to be zero
    within `tolerance`.

    Raises
    ------
    NonPositiveDefiniteError
        On the first negative pivot, or non-zero entry beside a zero pivot.
    """
    a = np.array(data, np.float64)
    n = len(a)

    if tolerance > 0.0:
        a[np.diag_indices(n)] += tolerance

    for k in range(n):
        pivot = a[k, k]

        if pivot < 0.0:
            raise NonPositiveDefiniteError(float(pivot), k, 0.0)

        if k == n - 1:
            break

        if abs(pivot) <= config.SAFE_MIN:
            row = np.abs(a[k, k:])

            if np.any(row > tolerance):
                j = k + int(np.argmax(row > tolerance))
                raise NonPositiveDefiniteError(float(a[k, j]), k, 0.0)
        else:
            factors = a[k + 1 :, k] / pivot
            a[k + 1 :, k + 1 :] -= np.outer(factors, a[k, k + 1 :])


class SymmetricMatrix(RealMatrix):
    """Symmetric matrix stored as its lower triangle.

    Parameters
    ----------
    data : RealMatrix | ndarray | Sequence[Sequence[float]]
        Full square array.
    symmetry_type : SymmetryType, default=SymmetryType.MEAN
        Triangle of `data` that is kept.
    thresholds : Thresholds | None, default=None
        Tolerances of the symmetry check made before storing `data`. Defaults to
        :func:`~densela.config.get_default_symmetry_thresholds`; use
        :data:`~densela.config.NO_CHECK` to skip the check.

    Raises
    ------
    NonSquareMatrixError
        If `data` is not square.
    NonSymmetricMatrixError
        If `data` is not symmetric within `thresholds`.

    Examples
    --------
    >>> from densela.linalg import SymmetricMatrix
    >>> a = SymmetricMatrix([[1.0, 2.0], [2.0, 3.0]])
    >>> a.set_entry(0, 1, 5.0)
    >>> a.get_entry(1, 0)
    5.0
    """

    __slots__ = ("_packed", "_n")
    kind = Kind.SYMMETRIC
    _packed: npt.NDArray[np.float64]
    _n: int

    def __init__(
        self,
        data: RealMatrix | MatrixLike,
        symmetry_type: SymmetryType = SymmetryType.MEAN,
        thresholds: config.Thresholds | None = None,
    ):
        super().__init__()
        array = checks.as_matrix(data, copy=False)
        rows, columns = array.shape

        if rows != columns:
            raise NonSquareMatrixError(rows, columns)

        if thresholds is None:
            thresholds = config.get_default_symmetry_thresholds()

        if thresholds.enabled:
            check_symmetry(array, thresholds)
        else:
            _report_asymmetry(array)

        match symmetry_type:
            case SymmetryType.LOWER:
                full = array

            case SymmetryType.UPPER:
                full = array.T

            case SymmetryType.MEAN:
                full = 0.5 * (array + array.T)

            case _:
                raise TypeError(
                    f"expected a SymmetryType, got {type(symmetry_type).__name__}"
                )

        self._n = rows
        self._packed = np.array(full[np.tril_indices(rows)], np.float64)

    @classmethod
    def from_packed(cls, lower: npt.ArrayLike, copy: bool = True) -> Self:
        """Build a matrix from its lower triangle stored row by row.

        No check is made; this is the way to build a matrix that is symmetric (and
        positive for the subclasses) by construction.

        Raises
        ------
        DimensionMismatchError
            If the length of `lower` is not a triangular number.
        """
        packed = checks.as_vector(lower, "lower", copy=copy)
        result = cls.__new__(cls)
        RealMatrix.__init__(result)
        result._n = _packed_dimension(len(packed))
        result._packed = packed
        result._init_cache()
        return result

    @classmethod
    def zeros(cls, dimension: int) -> Self:
        if dimension <= 0:
            raise NotPositiveError(dimension, "dimension")

        return cls.from_packed(np.zeros(dimension * (dimension + 1) // 2), copy=False)

    @classmethod
    def identity(cls, dimension: int) -> Self:
        result = cls.zeros(dimension)
        result._packed[[_packed_index(i, i) for i in range(dimension)]] = 1.0
        return result

    def _init_cache(self) -> None:
        pass

    @property
    def shape(self) -> tuple[int, int]:
        return (self._n, self._n)

    def get_data_ref(self) -> npt.NDArray[np.float64]:
        """Return the packed lower triangle itself (no copy)."""
        return self._packed

    def get_data(self, force_copy: bool = True) -> npt.NDArray[np.float64]:
        return _unpack(self._packed, self._n)

    def get_entry(self, row: int, column: int) -> float:
        checks.check_matrix_index(self, row, column)
        return float(self._packed[_packed_index(row, column)])

    def set_entry(self, row: int, column: int, value: float) -> None:
        """Set the entries at (`row`, `column`) and (`column`, `row`)."""
        checks.check_matrix_index(self, row, column)
        self._packed[_packed_index(row, column)] = value

    def add_to_entry(self, row: int, column: int, increment: float) -> None:
        checks.check_matrix_index(self, row, column)
        self._packed[_packed_index(row, column)] += increment

    def multiply_entry(self, row: int, column: int, factor: float) -> None:
        checks.check_matrix_index(self, row, column)
        self._packed[_packed_index(row, column)] *= factor

    def _apply_changes(self, changes: list[tuple[int, int, float]]) -> None:
        updates: dict[int, float] = {}

        for i, j, value in changes:
            index = _packed_index(i, j)

            if index in updates and updates[index] != value:
                raise UnsupportedOperationError(
                    "changing entries",
                    f"({i},{j}) and ({j},{i}) would differ",
                )

            updates[index] = value

        if updates:
            self._packed[list(updates)] = list(updates.values())

    def quadratic_multiplication(
        self, m: RealMatrix | MatrixLike, is_transpose: bool = False
    ) -> RealMatrix:
        """Return ``M * self * M^T``, or ``M^T * self * M`` if `is_transpose` is set.

        The result has the kind of the matrix.

        Raises
        ------
        DimensionMismatchError
            If `m` cannot be multiplied with the matrix.
        """
        m = as_real_matrix(m)
        data = m.get_data(False)

        if is_transpose:
            checks.check_multiplication_compatible(self, m)
            data = data.T
        else:
            checks.check_multiplication_compatible(m, self)

        return build(self.kind, data @ self.get_data(False) @ data.T)

    def is_symmetric(self, relative: float = 0.0, absolute: float = 0.0) -> bool:
        return True

    def create_matrix(self, rows: int, columns: int) -> RealMatrix:
        if rows == columns:
            return type(self).zeros(rows)

        return super().create_matrix(rows, columns)

    def copy(self) -> Self:
        return type(self).from_packed(self._packed.copy(), copy=False)


class SymmetricPositiveMatrix(SymmetricMatrix):
    """Symmetric positive semi-definite matrix stored as its lower triangle.

    Parameters
    ----------
    data : RealMatrix | ndarray | Sequence[Sequence[float]]
        Full square array.
    symmetry_type : SymmetryType, default=SymmetryType.MEAN
    symmetry_thresholds : Thresholds | None, default=None
        See :class:`SymmetricMatrix`.
    positivity_thresholds : Thresholds | None, default=None
        Tolerances of the positivity check. The effective tolerance is
        ``max(absolute, relative * norm)`` where ``norm`` is the maximum absolute
        column sum. Defaults to
        :func:`~densela.config.get_default_positivity_thresholds`.

    Raises
    ------
    NonPositiveDefiniteError
        If `data` is not positive semi-definite within the tolerance.
    """

    __slots__ = ("_factor",)
    kind = Kind.SYMMETRIC_POSITIVE
    _factor: FactorCache[npt.NDArray[np.float64]]

    def __init__(
        self,
        data: RealMatrix | MatrixLike,
        symmetry_type: SymmetryType = SymmetryType.MEAN,
        symmetry_thresholds: config.Thresholds | None = None,
        positivity_thresholds: config.Thresholds | None = None,
    ):
        super().__init__(data, symmetry_type, symmetry_thresholds)
        self._init_cache()

        if positivity_thresholds is None:
            positivity_thresholds = config.get_default_positivity_thresholds()

        if positivity_thresholds.enabled:
            tolerance = positivity_thresholds.effective(self.get_norm())
            check_positive_semi_definite(self.get_data(False), tolerance)

    def _init_cache(self) -> None:
        self._factor = FactorCache()

    def _read_only(self, operation: str):
        return UnsupportedOperationError(operation, "would break the positivity")

    def set_entry(self, row: int, column: int, value: float) -> None:
        """Always raise :class:`~densela.exceptions.UnsupportedOperationError`."""
        raise self._read_only("set_entry")

    def add_to_entry(self, row: int, column: int, increment: float) -> None:
        raise self._read_only("add_to_entry")

    def multiply_entry(self, row: int, column: int, factor: float) -> None:
        raise self._read_only("multiply_entry")

    def _apply_changes(self, changes: list[tuple[int, int, float]]) -> None:
        raise self._read_only("changing entries")

    def positive_scalar_add(self, d: float) -> "SymmetricPositiveMatrix":
        """Return the matrix obtained by adding the non-negative `d` to every entry.

        Raises
        ------
        NotPositiveError
            If `d` is negative.
        """
        return self.copy().positive_scalar_add_to_self(d)

    def positive_scalar_add_to_self(self, d: float) -> Self:
        checks.check_non_negative(d, "scalar")
        self._packed += d
        self._factor.invalidate()
        return self

    def positive_scalar_multiply(self, d: float) -> "SymmetricPositiveMatrix":
        """Return the matrix multiplied by the non-negative `d`.

        Raises
        ------
        NotPositiveError
            If `d` is negative.
        """
        return self.copy().positive_scalar_multiply_to_self(d)

    def positive_scalar_multiply_to_self(self, d: float) -> Self:
        checks.check_non_negative(d, "scalar")
        self._packed *= d
        self._factor.invalidate()
        return self

    def is_positive_semi_definite(self, absolute: float = 0.0) -> bool:
        try:
            check_positive_semi_definite(self.get_data(False), absolute)
        except NonPositiveDefiniteError:
            return False

        return True

    def _compute_factor(self) -> npt.NDArray[np.float64]:
        a = self.get_data(False)
        n = self._n
        lower = np.zeros((n, n))
        tolerance = config.DOUBLE_COMPARISON_EPSILON * max(self.get_norm(), 1.0)

        for j in range(n):
            pivot = a[j, j] - np.dot(lower[j, :j], lower[j, :j])

            if pivot <= tolerance:
                continue

            lower[j, j] = math.sqrt(pivot)
            column = a[j + 1 :, j] - lower[j + 1 :, :j] @ lower[j, :j]
            lower[j + 1 :, j] = column / lower[j, j]

        logger.debug("computed %dx%d positive factor", n, n)
        return lower

    def get_factor(self) -> RealMatrix:
        """Return a lower triangular matrix ``L`` such that ``self = L * L^T``.

        ``L`` is computed by a Cholesky factorization skipping the zero pivots, and
        kept until the matrix is modified.
        """
        return build(Kind.GENERAL, self._factor.get(self._compute_factor).copy())

    def to_decomposed_matrix(self) -> "DecomposedSymmetricPositiveMatrix":
        """Return the same matrix stored as ``L * L^T``."""
        return DecomposedSymmetricPositiveMatrix(
            self._factor.get(self._compute_factor).T.copy(), copy=False
        )


class DecomposedSymmetricPositiveMatrix(RealMatrix):
    """Symmetric positive semi-definite matrix stored as ``B * B^T``.

    The matrix ``B`` is ``n x k``, where ``k`` (the transparent dimension) may differ
    from ``n``. The entries of the matrix are computed when first needed and kept
    until ``B`` changes.

    Parameters
    ----------
    b_transpose : RealMatrix | ndarray | Sequence[Sequence[float]]
        The ``k x n`` matrix ``B^T``.
    copy : bool, default=True
        If ``False`` and `b_transpose` is a float64 ndarray, the matrix references it
        instead of copying it.

    Examples
    --------
    >>> from densela.linalg import DecomposedSymmetricPositiveMatrix
    >>> a = DecomposedSymmetricPositiveMatrix([[1.0, 2.0]])
    >>> a.get_data().tolist()
    [[1.0, 2.0], [2.0, 4.0]]
    """

    __slots__ = ("_bt", "_entries", "_entries_bt")
    kind = Kind.DECOMPOSED
    _bt: npt.NDArray[np.float64]
    _entries_bt: npt.NDArray[np.float64] | None
    _entries: FactorCache[npt.NDArray[np.float64]]

    def __init__(self, b_transpose: RealMatrix | MatrixLike, copy: bool = True):
        super().__init__()
        self._bt = checks.as_matrix(b_transpose, "b_transpose", copy=copy)
        self._entries = FactorCache()
        self._entries_bt = None

    @classmethod
    def zeros(cls, dimension: int) -> Self:
        if dimension <= 0:
            raise NotPositiveError(dimension, "dimension")

        return cls(np.zeros((dimension, dimension)), copy=False)

    @classmethod
    def identity(cls, dimension: int) -> Self:
        if dimension <= 0:
            raise NotPositiveError(dimension, "dimension")

        return cls(np.identity(dimension), copy=False)

    @classmethod
    def from_matrix(cls, data: RealMatrix | MatrixLike) -> Self:
        """Build the matrix from the full array of a positive semi-definite matrix,
        using ``B = V * sqrt(D)`` where ``V * D * V^T`` is its eigen decomposition.

        Negative eigenvalues due to rounding errors are replaced by zero.
        """
        array = checks.as_matrix(data, copy=False)
        rows, columns = array.shape

        if rows != columns:
            raise NonSquareMatrixError(rows, columns)

        eigenvalues, eigenvectors = np.linalg.eigh(0.5 * (array + array.T))
        b = eigenvectors * np.sqrt(np.maximum(eigenvalues, 0.0))
        return cls(b.T.copy(), copy=False)

    @property
    def shape(self) -> tuple[int, int]:
        n = self._bt.shape[1]
        return (n, n)

    @property
    def transparent_dimension(self) -> int:
        """Column dimension ``k`` of ``B``."""
        return self._bt.shape[0]

    def get_b(self) -> RealMatrix:
        return build(Kind.GENERAL, self._bt.T.copy())

    def get_bt(self, copy: bool = True) -> RealMatrix:
        """Return ``B^T``; with `copy` unset, the returned matrix shares its
        storage."""
        return build(Kind.GENERAL, self._bt.copy() if copy else self._bt)

    def _compute_entries(self) -> npt.NDArray[np.float64]:
        self._entries_bt = self._bt.copy()
        return self._bt.T @ self._bt

    def get_data(self, force_copy: bool = True) -> npt.NDArray[np.float64]:
        # B^T may be shared with a caller array or a matrix from get_bt(copy=False)
        if self._entries.fresh and not np.array_equal(self._entries_bt, self._bt):
            self._entries.invalidate()

        data = self._entries.get(self._compute_entries)
        return data.copy() if force_copy else data

    def get_entry(self, row: int, column: int) -> float:
        checks.check_matrix_index(self, row, column)
        return float(self.get_data(False)[row, column])

    def _read_only(self, operation: str):
        return UnsupportedOperationError(operation, "would break the positivity")

    def set_entry(self, row: int, column: int, value: float) -> None:
        """Always raise :class:`~densela.exceptions.UnsupportedOperationError`."""
        raise self._read_only("set_entry")

    def add_to_entry(self, row: int, column: int, increment: float) -> None:
        raise self._read_only("add_to_entry")

    def multiply_entry(self, row: int, column: int, factor: float) -> None:
        raise self._read_only("multiply_entry")

    def _apply_changes(self, changes: list[tuple[int, int, float]]) -> None:
        raise self._read_only("changing entries")

    def _set_bt(self, bt: npt.NDArray[np.float64]) -> None:
        self._bt = bt
        self._entries.invalidate()

    def add(self, m: RealMatrix | MatrixLike) -> RealMatrix:
        """Return ``self + m``; the sum of two decomposed matrices stacks their
        ``B^T``."""
        if isinstance(m, DecomposedSymmetricPositiveMatrix):
            checks.check_addition_compatible(self, m)
            bt = np.vstack((self._bt, m._bt))
            return DecomposedSymmetricPositiveMatrix(bt, copy=False)

        return super().add(m)

    def scalar_add(self, d: float) -> RealMatrix:
        if d >= 0.0:
            return self.positive_scalar_add(d)

        return super().scalar_add(d)

    def scalar_multiply(self, d: float) -> RealMatrix:
        if d >= 0.0:
            return self.positive_scalar_multiply(d)

        return super().scalar_multiply(d)

    def positive_scalar_add(self, d: float) -> "DecomposedSymmetricPositiveMatrix":
        """Return the matrix obtained by adding the non-negative `d` to every entry.

        ``B^T`` is extended with a row filled with ``sqrt(d)``.

        Raises
        ------
        NotPositiveError
            If `d` is negative.
        """
        return self.copy().positive_scalar_add_to_self(d)

    def positive_scalar_add_to_self(self, d: float) -> Self:
        checks.check_non_negative(d, "scalar")
        row = np.full((1, self.column_dimension), math.sqrt(d))
        self._set_bt(np.vstack((self._bt, row)))
        return self

    def positive_scalar_multiply(self, d: float) -> "DecomposedSymmetricPositiveMatrix":
        """Return the matrix multiplied by the non-negative `d`.

        Raises
        ------
        NotPositiveError
            If `d` is negative.
        """
        return self.copy().positive_scalar_multiply_to_self(d)

    def positive_scalar_multiply_to_self(self, d: float) -> Self:
        checks.check_non_negative(d, "scalar")
        self._set_bt(self._bt * math.sqrt(d))
        return self

    def quadratic_multiplication(
        self, m: RealMatrix | MatrixLike, is_transpose: bool = False
    ) -> "DecomposedSymmetricPositiveMatrix":
        """Return ``M * self * M^T``, or ``M^T * self * M`` if `is_transpose` is set,
        stored as ``(M * B) * (M * B)^T``."""
        m = as_real_matrix(m)
        data = m.get_data(False)

        if is_transpose:
            checks.check_multiplication_compatible(self, m)
            data = data.T
        else:
            checks.check_multiplication_compatible(m, self)

        return DecomposedSymmetricPositiveMatrix(self._bt @ data.T, copy=False)

    def power(self, p: int) -> "DecomposedSymmetricPositiveMatrix":
        if p < 0:
            raise NotPositiveError(p, "exponent")

        match p:
            case 0:
                return DecomposedSymmetricPositiveMatrix.identity(self.row_dimension)

            case 1:
                return self.copy()

        half = np.linalg.matrix_power(self.get_data(False), p // 2)

        if p % 2 == 0:
            return DecomposedSymmetricPositiveMatrix(half, copy=False)

        return DecomposedSymmetricPositiveMatrix(self._bt @ half, copy=False)

    def concatenate_diagonally(
        self,
        m: RealMatrix | MatrixLike,
        right_concatenation: bool = True,
        lower_concatenation: bool | None = None,
    ) -> RealMatrix:
        if lower_concatenation is None:
            lower_concatenation = right_concatenation

        if (
            isinstance(m, DecomposedSymmetricPositiveMatrix)
            and right_concatenation == lower_concatenation
        ):
            bt = block_diagonal(
                self._bt, m._bt, right_concatenation, right_concatenation
            )
            return DecomposedSymmetricPositiveMatrix(bt, copy=False)

        return super().concatenate_diagonally(
            m, right_concatenation, lower_concatenation
        )

    def _sub_matrix(self, rows: list[int], columns: list[int]) -> RealMatrix:
        if rows == columns:
            return DecomposedSymmetricPositiveMatrix(self._bt[:, rows], copy=False)

        return super()._sub_matrix(rows, columns)

    def get_resized_bt(self) -> RealMatrix:
        """Return a ``n x n`` matrix ``C^T`` such that ``self = C * C^T``.

        ``B^T`` is padded with zero rows when ``k < n``, and replaced by the ``R``
        factor of its QR decomposition when ``k > n``.
        """
        return build(Kind.GENERAL, self._resized_bt())

    def get_resized_b(self) -> RealMatrix:
        return build(Kind.GENERAL, self._resized_bt().T.copy())

    def _resized_bt(self) -> npt.NDArray[np.float64]:
        k, n = self._bt.shape

        if k < n:
            return np.vstack((self._bt, np.zeros((n - k, n))))

        if k > n:
            return np.linalg.qr(self._bt, mode="r")[:n]

        return self._bt.copy()

    def resize_b(self) -> Self:
        """Replace ``B`` in place by :meth:`get_resized_b`."""
        self._set_bt(self._resized_bt())
        return self

    def to_symmetric_matrix(self) -> SymmetricMatrix:
        return SymmetricMatrix(self.get_data(), SymmetryType.LOWER, config.NO_CHECK)

    def to_symmetric_positive_matrix(self) -> SymmetricPositiveMatrix:
        return SymmetricPositiveMatrix(
            self.get_data(), SymmetryType.LOWER, config.NO_CHECK, config.NO_CHECK
        )

    def is_symmetric(self, relative: float = 0.0, absolute: float = 0.0) -> bool:
        return True

    def create_matrix(self, rows: int, columns: int) -> RealMatrix:
        if rows == columns:
            return DecomposedSymmetricPositiveMatrix.zeros(rows)

        return super().create_matrix(rows, columns)

    def copy(self) -> Self:
        return type(self)(self._bt.copy(), copy=False)


def _report_asymmetry(array: npt.NDArray[np.float64]) -> None:
    scale = float(np.max(np.abs(array)))
    asymmetry = float(np.max(np.abs(array - array.T)))

    if asymmetry > _ASYMMETRY_WARNING * scale:
        logger.warning(
            "enforcing the symmetry of a matrix with asymmetry %g (largest entry %g)",
            asymmetry,
            scale,
        )


register_builder(
    Kind.SYMMETRIC,
    lambda data: SymmetricMatrix(data, SymmetryType.MEAN, config.NO_CHECK),
)
register_builder(
    Kind.SYMMETRIC_POSITIVE,
    lambda data: SymmetricPositiveMatrix(
        data, SymmetryType.MEAN, config.NO_CHECK, config.NO_CHECK
    ),
)
register_builder(Kind.DECOMPOSED, DecomposedSymmetricPositiveMatrix.from_matrix)
