"""Argument checks shared by the vector and matrix implementations.

All helpers raise before anything is modified, so that a failing operation leaves
its operands untouched.
"""

from collections.abc import Sequence
from typing import Any

import numpy as np
import numpy.typing as npt

from densela.exceptions import (
    DimensionMismatchError,
    NoDataError,
    NonSquareMatrixError,
    NotPositiveError,
    NullArgumentError,
    OutOfRangeError,
)


def equals(x: float, y: float, relative: float, absolute: float) -> bool:
    """Return ``True`` if `x` and `y` are equal within an absolute *or* a relative
    tolerance."""
    if x == y:
        return True

    diff = abs(x - y)
    return diff <= absolute or diff <= relative * max(abs(x), abs(y))


def allclose(
    a: npt.NDArray[np.float64],
    b: npt.NDArray[np.float64],
    relative: float,
    absolute: float,
) -> bool:
    """Array version of :func:`equals`; NaN entries are never equal."""
    with np.errstate(invalid="ignore"):
        diff = np.abs(a - b)
        scale = np.maximum(np.abs(a), np.abs(b))
        ok = (a == b) | (diff <= absolute) | (diff <= relative * scale)

    return bool(np.all(ok))


def check_index(index: int, dimension: int, axis: str = "index") -> None:
    if not 0 <= index < dimension:
        raise OutOfRangeError(index, 0, dimension - 1, axis)  # type: ignore


def check_row_index(matrix: Any, row: int) -> None:
    check_index(row, matrix.row_dimension, "row")


def check_column_index(matrix: Any, column: int) -> None:
    check_index(column, matrix.column_dimension, "column")


def check_matrix_index(matrix: Any, row: int, column: int) -> None:
    check_row_index(matrix, row)
    check_column_index(matrix, column)


def check_sub_matrix_range(
    matrix: Any, start_row: int, end_row: int, start_column: int, end_column: int
) -> None:
    """Check that ``[start_row, end_row] x [start_column, end_column]`` is a
    non-empty rectangle inside `matrix`."""
    check_row_index(matrix, start_row)
    check_row_index(matrix, end_row)

    if end_row < start_row:
        raise OutOfRangeError(end_row, start_row, matrix.row_dimension - 1, "row")

    check_column_index(matrix, start_column)
    check_column_index(matrix, end_column)

    if end_column < start_column:
        raise OutOfRangeError(
            end_column, start_column, matrix.column_dimension - 1, "column"
        )


def check_index_array(matrix: Any, indices: Sequence[int] | None, axis: str) -> None:
    if indices is None:
        raise NullArgumentError(f"selected {axis}s")

    if len(indices) == 0:
        raise NoDataError(f"selected {axis}s")

    dimension = matrix.row_dimension if axis == "row" else matrix.column_dimension

    for index in indices:
        check_index(int(index), dimension, axis)


def check_addition_compatible(lhs: Any, rhs: Any) -> None:
    if lhs.shape != rhs.shape:
        raise DimensionMismatchError(rhs.shape, lhs.shape)


def check_multiplication_compatible(lhs: Any, rhs: Any) -> None:
    if lhs.column_dimension != rhs.row_dimension:
        raise DimensionMismatchError(rhs.row_dimension, lhs.column_dimension)


def check_square(matrix: Any) -> None:
    rows, columns = matrix.shape

    if rows != columns:
        raise NonSquareMatrixError(rows, columns)


def check_non_negative(value: float, name: str = "value") -> None:
    if value < 0:
        raise NotPositiveError(value, name)


def as_vector(
    data: Any, name: str = "vector", copy: bool = True
) -> npt.NDArray[np.float64]:
    """Convert `data` to a one-dimensional float array.

    `data` may be a :class:`~densela.linalg.vector.RealVector`, an ndarray or a
    sequence of numbers. The array is only shared with the caller when `copy` is
    ``False`` and `data` already is a float64 ndarray.
    """
    if data is None:
        raise NullArgumentError(name)

    if hasattr(data, "to_array"):
        return data.to_array()

    result = np.array(data, dtype=np.float64, copy=copy or None)

    if result.ndim != 1:
        raise DimensionMismatchError(result.ndim, 1, f"{name} must be one-dimensional")

    return result


def as_matrix(
    data: Any, name: str = "data", copy: bool = True
) -> npt.NDArray[np.float64]:
    """Convert `data` to a non-empty, non-ragged two-dimensional float array.

    The array is only shared with the caller when `copy` is ``False`` and `data`
    already is a float64 ndarray.
    """
    if data is None:
        raise NullArgumentError(name)

    if hasattr(data, "get_data"):
        return data.get_data()

    if not isinstance(data, np.ndarray):
        if len(data) == 0:
            raise NoDataError(name)

        for i, row in enumerate(data):
            if row is None:
                raise NullArgumentError(f"{name}[{i}]")

            if len(row) != len(data[0]):
                raise DimensionMismatchError(len(row), len(data[0]))

    result = np.array(data, dtype=np.float64, copy=copy or None)

    if result.ndim != 2:
        raise DimensionMismatchError(result.ndim, 2, f"{name} must be two-dimensional")

    if result.shape[0] == 0:
        raise NoDataError(f"{name} rows")

    if result.shape[1] == 0:
        raise NoDataError(f"{name} columns")

    return result
