"""
######################################
Exceptions (:mod:`densela.exceptions`)
######################################

.. currentmodule:: densela.exceptions

Every error raised by :mod:`densela` derives from :class:`LinAlgError`, itself a
:class:`ValueError`. Exceptions carry their diagnostic values as attributes, and
their messages report the actual value together with the expected one.

.. autosummary::
    :toctree: generated/

    LinAlgError
    OutOfRangeError
    DimensionMismatchError
    NonSquareMatrixError
    SingularMatrixError
    NonSymmetricMatrixError
    NonPositiveDefiniteError
    NotPositiveError
    NullArgumentError
    NoDataError
    ZeroNormError
    TooLargeCutoffError
    UnsupportedOperationError
    ConvergenceError

"""

from typing import Any, Literal, TypeAlias

Shape: TypeAlias = int | tuple[int, int]


def _shape_str(shape: Shape) -> str:
    if isinstance(shape, tuple):
        return f"{shape[0]}x{shape[1]}"

    return str(shape)


def _rebuild(cls: type, args: tuple, state: dict[str, Any]) -> "LinAlgError":
    result = cls.__new__(cls, *args)
    result.args = args
    result.__dict__.update(state)
    return result


class LinAlgError(ValueError):
    """Error raised by :mod:`densela` functions."""

    def __reduce__(self):
        return (_rebuild, (type(self), self.args, self.__dict__))


class OutOfRangeError(LinAlgError, IndexError):
    """Index outside of ``[lower, upper]``.

    Attributes
    ----------
    axis : Literal["row", "column", "index"]
        Axis the index refers to.
    index : int
        Offending index.
    lower : int
    upper : int
    """

    def __init__(
        self,
        index: int,
        lower: int,
        upper: int,
        axis: Literal["row", "column", "index"] = "index",
    ):
        super().__init__(f"{axis} index {index} out of range [{lower}, {upper}]")
        self.axis = axis
        self.index = index
        self.lower = lower
        self.upper = upper


class DimensionMismatchError(LinAlgError):
    """Shapes of the operands are incompatible.

    Attributes
    ----------
    actual : int | tuple[int, int]
        Offending dimension or shape.
    expected : int | tuple[int, int]
        Dimension or shape required by the operation.
    """

    def __init__(self, actual: Shape, expected: Shape, message: str | None = None):
        if message is None:
            message = f"got {_shape_str(actual)} but expected {_shape_str(expected)}"

        super().__init__(message)
        self.actual = actual
        self.expected = expected


class NonSquareMatrixError(DimensionMismatchError):
    """Operation requires a square matrix.

    Attributes
    ----------
    rows : int
    columns : int
    """

    def __init__(self, rows: int, columns: int):
        super().__init__(
            (rows, columns),
            (rows, rows),
            f"non square ({rows}x{columns}) matrix",
        )
        self.rows = rows
        self.columns = columns


class SingularMatrixError(LinAlgError):
    """Matrix is numerically singular.

    Attributes
    ----------
    value : float | None
        Offending pivot or singular value, if known.
    threshold : float | None
        Threshold below which the matrix is declared singular.
    """

    def __init__(self, value: float | None = None, threshold: float | None = None):
        message = "matrix is singular"

        if value is not None:
            message += f" (pivot {value!r} below threshold {threshold!r})"

        super().__init__(message)
        self.value = value
        self.threshold = threshold


class NonSymmetricMatrixError(LinAlgError):
    """Matrix is not symmetric.

    Attributes
    ----------
    row : int
    column : int
        Position of the first entry differing from its symmetric counterpart.
    threshold : float
        Tolerance used by the check.
    """

    def __init__(self, row: int, column: int, threshold: float):
        super().__init__(
            f"non symmetric matrix: the difference between entries at ({row},{column})"
            f" and ({column},{row}) is larger than {threshold!r}"
        )
        self.row = row
        self.column = column
        self.threshold = threshold


class NonPositiveDefiniteError(LinAlgError):
    """Matrix is not positive (semi-)definite.

    Attributes
    ----------
    value : float
        Offending pivot.
    index : int
        Position of the pivot on the diagonal.
    threshold : float
    """

    def __init__(self, value: float, index: int, threshold: float):
        super().__init__(
            f"not positive definite matrix: value {value!r} at index {index}"
            f" (threshold {threshold!r})"
        )
        self.value = value
        self.index = index
        self.threshold = threshold


class NotPositiveError(LinAlgError):
    """Scalar or exponent is strictly negative.

    Attributes
    ----------
    value : float
    """

    def __init__(self, value: float, name: str = "value"):
        super().__init__(f"{name} {value!r} is negative")
        self.value = value
        self.name = name


class NullArgumentError(LinAlgError, TypeError):
    """Argument is ``None``.

    Attributes
    ----------
    name : str
    """

    def __init__(self, name: str = "argument"):
        super().__init__(f"{name} must not be None")
        self.name = name


class NoDataError(LinAlgError):
    """Array or index list has no element.

    Attributes
    ----------
    name : str
    """

    def __init__(self, name: str = "data"):
        super().__init__(f"{name} must contain at least one element")
        self.name = name


class ZeroNormError(LinAlgError, ArithmeticError):
    """Operation is undefined for a vector of zero norm."""

    def __init__(self, message: str = "zero norm"):
        super().__init__(message)


class TooLargeCutoffError(LinAlgError):
    """Cut-off singular value is larger than the largest singular value.

    Attributes
    ----------
    value : float
        Requested cut-off.
    maximum : float
        Largest singular value.
    """

    def __init__(self, value: float, maximum: float):
        super().__init__(
            f"cutoff singular value {value!r} is larger than the largest singular"
            f" value {maximum!r}"
        )
        self.value = value
        self.maximum = maximum


class UnsupportedOperationError(LinAlgError, NotImplementedError):
    """Operation would break the structure of the matrix.

    Attributes
    ----------
    operation : str
    """

    def __init__(self, operation: str, reason: str = "not supported"):
        super().__init__(f"{operation}: {reason}")
        self.operation = operation


class ConvergenceError(LinAlgError, ArithmeticError):
    """Iterative algorithm did not converge.

    Attributes
    ----------
    max_iterations : int
    """

    def __init__(self, max_iterations: int):
        super().__init__(f"convergence failed after {max_iterations} iterations")
        self.max_iterations = max_iterations
