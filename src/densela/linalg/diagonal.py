from typing import Self

import numpy as np
import numpy.typing as npt

from densela import config
from densela.exceptions import (
    NotPositiveError,
    SingularMatrixError,
    UnsupportedOperationError,
)
from densela.linalg import checks
from densela.linalg.matrix import (
    Kind,
    RealMatrix,
    as_real_matrix,
    build,
    register_builder,
)
from densela.linalg.vector import RealVector
from densela.typing import DecompositionBuilder, MatrixLike, VectorLike


class DiagonalMatrix(RealMatrix):
    """Square matrix whose off-diagonal entries are zero.

    Only the diagonal is stored. Off-diagonal entries read as zero and may only be
    overwritten with zero.

    Parameters
    ----------
    diagonal : RealVector | ndarray | Sequence[float]
        Diagonal entries.
    copy : bool, default=True
        If ``False`` and `diagonal` is a float64 ndarray, the matrix references it
        instead of copying it.

    Examples
    --------
    >>> from densela.linalg import DiagonalMatrix
    >>> a = DiagonalMatrix([1.0, 2.0])
    >>> (a + a).kind
    <Kind.DIAGONAL>
    >>> a.scalar_add(1.0).kind
    <Kind.SYMMETRIC>
    """

    __slots__ = ("_data",)
    kind = Kind.DIAGONAL
    _data: npt.NDArray[np.float64]

    def __init__(self, diagonal: RealVector | VectorLike, copy: bool = True):
        super().__init__()
        self._data = checks.as_vector(diagonal, "diagonal", copy=copy)

        if len(self._data) == 0:
            raise NotPositiveError(0, "dimension")

    @classmethod
    def zeros(cls, dimension: int) -> Self:
        if dimension <= 0:
            raise NotPositiveError(dimension, "dimension")

        return cls(np.zeros(dimension), copy=False)

    @classmethod
    def identity(cls, dimension: int) -> Self:
        if dimension <= 0:
            raise NotPositiveError(dimension, "dimension")

        return cls(np.ones(dimension), copy=False)

    @property
    def shape(self) -> tuple[int, int]:
        return (len(self._data), len(self._data))

    def get_data_ref(self) -> npt.NDArray[np.float64]:
        """Return the backing array of diagonal entries itself (no copy)."""
        return self._data

    def get_data(self, force_copy: bool = True) -> npt.NDArray[np.float64]:
        return np.diag(self._data)

    def get_entry(self, row: int, column: int) -> float:
        checks.check_matrix_index(self, row, column)
        return float(self._data[row]) if row == column else 0.0

    def set_entry(self, row: int, column: int, value: float) -> None:
        """Set the entry at (`row`, `column`).

        Raises
        ------
        OutOfRangeError
            If `row` or `column` is out of range.
        UnsupportedOperationError
            If a non-zero value is written off the diagonal.
        """
        checks.check_matrix_index(self, row, column)

        if row == column:
            self._data[row] = value
        elif value != 0.0:
            raise UnsupportedOperationError("set_entry", "non-zero off-diagonal entry")

    def add_to_entry(self, row: int, column: int, increment: float) -> None:
        checks.check_matrix_index(self, row, column)

        if row == column:
            self._data[row] += increment
        elif increment != 0.0:
            raise UnsupportedOperationError(
                "add_to_entry", "non-zero off-diagonal entry"
            )

    def multiply_entry(self, row: int, column: int, factor: float) -> None:
        checks.check_matrix_index(self, row, column)

        if row == column:
            self._data[row] *= factor

    def _apply_changes(self, changes: list[tuple[int, int, float]]) -> None:
        for i, j, value in changes:
            if i != j and value != 0.0:
                raise UnsupportedOperationError(
                    "changing entries", "non-zero off-diagonal entry"
                )

        for i, j, value in changes:
            if i == j:
                self._data[i] = value

    def get_row(self, row: int) -> npt.NDArray[np.float64]:
        checks.check_row_index(self, row)
        result = np.zeros(len(self._data))
        result[row] = self._data[row]
        return result

    def get_column(self, column: int) -> npt.NDArray[np.float64]:
        checks.check_column_index(self, column)
        result = np.zeros(len(self._data))
        result[column] = self._data[column]
        return result

    def _multiply_data(self, rhs: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        if rhs.ndim == 1:
            return self._data * rhs

        return self._data[:, np.newaxis] * rhs

    def scalar_multiply(self, d: float) -> "DiagonalMatrix":
        return DiagonalMatrix(self._data * d, copy=False)

    def power(self, p: int) -> "DiagonalMatrix":
        if p < 0:
            raise NotPositiveError(p, "exponent")

        return DiagonalMatrix(self._data**p, copy=False)

    def quadratic_multiplication(
        self, m: RealMatrix | MatrixLike, is_transpose: bool = False
    ) -> RealMatrix:
        """Return the symmetric matrix ``M * self * M^T``, or ``M^T * self * M`` if
        `is_transpose` is set."""
        m = as_real_matrix(m)
        data = m.get_data(False)

        if is_transpose:
            checks.check_multiplication_compatible(self, m)
            data = data.T
        else:
            checks.check_multiplication_compatible(m, self)

        return build(Kind.SYMMETRIC, (data * self._data) @ data.T)

    def is_singular(self, absolute: float = config.SAFE_MIN) -> bool:
        """Return ``True`` if a diagonal entry is zero within `absolute`."""
        return bool(np.any(np.abs(self._data) <= absolute))

    def is_invertible(self, relative: float = config.SAFE_MIN) -> bool:
        """Return ``True`` unless a diagonal entry is zero within `relative`, which is
        used as an absolute tolerance."""
        return not self.is_singular(relative)

    def get_inverse(
        self, builder: DecompositionBuilder | None = None
    ) -> "DiagonalMatrix":
        """Return the inverse of the matrix; `builder` is not used.

        Raises
        ------
        SingularMatrixError
            If a diagonal entry is zero.
        """
        if self.is_singular():
            index = int(np.argmin(np.abs(self._data)))
            raise SingularMatrixError(float(self._data[index]), config.SAFE_MIN)

        return DiagonalMatrix(1.0 / self._data, copy=False)

    def get_trace(self) -> float:
        return float(np.sum(self._data))

    def get_norm(self) -> float:
        return float(np.max(np.abs(self._data)))

    def get_frobenius_norm(self) -> float:
        return float(np.linalg.norm(self._data))

    def is_diagonal(self, absolute: float = 0.0) -> bool:
        return True

    def is_symmetric(self, relative: float = 0.0, absolute: float = 0.0) -> bool:
        return True

    def create_matrix(self, rows: int, columns: int) -> RealMatrix:
        if rows == columns:
            return DiagonalMatrix.zeros(rows)

        return super().create_matrix(rows, columns)

    def copy(self) -> Self:
        return type(self)(self._data.copy(), copy=False)


register_builder(
    Kind.DIAGONAL, lambda data: DiagonalMatrix(np.diagonal(data).copy(), copy=False)
)
