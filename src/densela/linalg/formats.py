import math
from collections.abc import Sequence
from typing import Self, TypedDict, Unpack

import numpy as np
import numpy.typing as npt

# Largest number of fraction digits written by the plain decimal layouts.
MAX_FRACTION_DIGITS = 10

# Number layout of the visual formats: 5 significant digits, 11 characters, room
# for the sign.
NUMBER_FORMAT = " #11.5g"

_ELLIPSIS = "..."


class _MatrixFormatDict(TypedDict, total=False):
    prefix: str
    suffix: str
    row_prefix: str
    row_suffix: str
    row_separator: str
    column_separator: str
    number_format: str | None
    min_fraction_digits: int
    summary_index: int | None


def format_number(
    value: float, number_format: str | None = None, min_fraction_digits: int = 0
) -> str:
    """Format a single entry.

    Without `number_format`, `value` is written in positional notation with at most
    ``MAX_FRACTION_DIGITS`` fraction digits, trailing zeros being removed down to
    `min_fraction_digits`.

    Examples
    --------
    >>> format_number(0.979)
    '0.979'
    >>> format_number(2.0)
    '2'
    >>> format_number(2.0, min_fraction_digits=1)
    '2.0'
    """
    if number_format is not None:
        return format(value, number_format)

    if math.isnan(value):
        return "NaN"

    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    result = f"{value:.{MAX_FRACTION_DIGITS}f}"
    integral, fraction = result.split(".")
    fraction = fraction.rstrip("0")

    if len(fraction) < min_fraction_digits:
        fraction += "0" * (min_fraction_digits - len(fraction))

    if integral == "-0" and not fraction.strip("0"):
        integral = "0"

    return f"{integral}.{fraction}" if fraction else integral


class MatrixFormat:
    r"""Layout used to convert a matrix to a string.

    Parameters
    ----------
    prefix : str, default="{"
    suffix : str, default="}"
    row_prefix : str, default="{"
    row_suffix : str, default="}"
    row_separator : str, default=","
    column_separator : str, default=","
    number_format : str | None, default=None
        Format specification of the entries. ``None`` selects the plain decimal
        layout of :func:`format_number`.
    min_fraction_digits : int, default=0
        Only used by the plain decimal layout.
    summary_index : int | None, default=None
        If set, only the `summary_index` first and last rows and columns are written
        and a footer with the dimensions of the matrix is added.

    Examples
    --------
    >>> OCTAVE_FORMAT.format([[1.0, 2.0], [3.0, 4.0]])
    '[1, 2; 3, 4]'
    """

    __slots__ = (
        "prefix",
        "suffix",
        "row_prefix",
        "row_suffix",
        "row_separator",
        "column_separator",
        "number_format",
        "min_fraction_digits",
        "summary_index",
    )

    prefix: str
    suffix: str
    row_prefix: str
    row_suffix: str
    row_separator: str
    column_separator: str
    number_format: str | None
    min_fraction_digits: int
    summary_index: int | None

    def __init__(self, **kwargs: Unpack[_MatrixFormatDict]):
        self.prefix = "{"
        self.suffix = "}"
        self.row_prefix = "{"
        self.row_suffix = "}"
        self.row_separator = ","
        self.column_separator = ","
        self.number_format = None
        self.min_fraction_digits = 0
        self.summary_index = None

        for key, value in kwargs.items():
            setattr(self, key, value)

        if self.summary_index is not None and self.summary_index < 1:
            raise ValueError("summary index must be positive")

    def copy(self) -> Self:
        result = self.__class__()

        for key in self.__slots__:
            setattr(result, key, getattr(self, key))

        return result

    def replace(self, **changes: Unpack[_MatrixFormatDict]) -> Self:
        """Create a new :class:`MatrixFormat`, replacing fields with values from
        `changes`."""
        result = self.copy()

        for key, value in changes.items():
            setattr(result, key, value)

        return result

    def format_entry(self, value: float) -> str:
        return format_number(value, self.number_format, self.min_fraction_digits)

    def format(self, data: npt.NDArray[np.float64] | Sequence[Sequence[float]]) -> str:
        """Return the string representation of a two-dimensional array."""
        data = np.asarray(data, np.float64)
        rows, columns = data.shape
        row_keys = self._summary_keys(rows)
        column_keys = self._summary_keys(columns)
        lines = []

        for i in row_keys:
            if i is None:
                cells = [_ELLIPSIS.rjust(self._width()) for _ in column_keys]
            else:
                cells = [
                    _ELLIPSIS.rjust(self._width())
                    if j is None
                    else self.format_entry(float(data[i, j]))
                    for j in column_keys
                ]

            lines.append(
                self.row_prefix + self.column_separator.join(cells) + self.row_suffix
            )

        result = self.prefix + self.row_separator.join(lines) + self.suffix

        if self.summary_index is not None:
            result += f"\nRows number : {rows}\t Columns number : {columns}"

        return result

    def _summary_keys(self, n: int) -> list[int | None]:
        k = self.summary_index

        if k is None or n <= 2 * k:
            return list(range(n))

        return [*range(k), None, *range(n - k, n)]

    def _width(self) -> int:
        return len(self.format_entry(0.0)) if self.number_format is not None else 0

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={getattr(self, key)!r}" for key in self.__slots__)
        return f"{type(self).__name__}({fields})"

    def __eq__(self, other: Self) -> bool:
        if type(other) is not type(self):
            return NotImplemented

        return all(getattr(other, key) == getattr(self, key) for key in self.__slots__)

    def __copy__(self) -> Self:
        return self.copy()

    def __replace__(self, **changes: Unpack[_MatrixFormatDict]) -> Self:
        return self.replace(**changes)


DEFAULT_FORMAT = MatrixFormat()
JAVA_FORMAT = MatrixFormat(row_separator=", ", column_separator=", ")
OCTAVE_FORMAT = MatrixFormat(
    prefix="[",
    suffix="]",
    row_prefix="",
    row_suffix="",
    row_separator="; ",
    column_separator=", ",
)
SCILAB_FORMAT = OCTAVE_FORMAT.replace(prefix=" [", min_fraction_digits=1)
VISUAL_FORMAT = MatrixFormat(
    prefix="[",
    suffix="]",
    row_prefix="[ ",
    row_suffix="]",
    row_separator="\n ",
    column_separator=", ",
    number_format=NUMBER_FORMAT,
)
SUMMARY_FORMAT = VISUAL_FORMAT.replace(row_prefix="[", summary_index=3)


def to_string(
    name: str,
    data: npt.NDArray[np.float64],
    matrix_format: MatrixFormat = VISUAL_FORMAT,
) -> str:
    """Return `name` followed by the formatted `data`, continuation lines being
    indented under the first one."""
    body = matrix_format.format(data)
    return name + body.replace("\n", "\n" + " " * len(name))


def format_vector(data: npt.NDArray[np.float64]) -> str:
    """Return the string representation of a vector, e.g. ``{1; 2; 3}``."""
    return "{" + "; ".join(format_number(float(x)) for x in data) + "}"
