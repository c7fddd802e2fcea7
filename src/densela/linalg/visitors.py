"""Traversal of matrix and vector entries.

A walk is described by an :class:`Order` strategy. Row and column orders are the
same for every storage; the optimized order is chosen by each storage so that entries
are visited in the order they are laid out in memory.
"""

import enum
import itertools
from collections.abc import Iterator
from typing import Any

from densela.exceptions import OutOfRangeError
from densela.linalg import checks
from densela.typing import (
    MatrixChangingVisitor,
    MatrixPreservingVisitor,
    VectorChangingVisitor,
    VectorPreservingVisitor,
)


class Order(enum.Enum):
    """Traversal order specifier.

    Attributes
    ----------
    ROW
    COLUMN
    OPTIMIZED
    """

    ROW = enum.auto()
    COLUMN = enum.auto()
    OPTIMIZED = enum.auto()

    def __repr__(self):
        return f"<{self.__class__.__name__}.{self.name}>"


class DefaultMatrixPreservingVisitor:
    """Preserving visitor doing nothing, to be subclassed."""

    __slots__ = ()

    def start(self, rows, columns, start_row, end_row, start_column, end_column):
        pass

    def visit(self, row: int, column: int, value: float) -> None:
        pass

    def end(self) -> float:
        return 0.0


class DefaultMatrixChangingVisitor:
    """Changing visitor leaving every entry unchanged, to be subclassed."""

    __slots__ = ()

    def start(self, rows, columns, start_row, end_row, start_column, end_column):
        pass

    def visit(self, row: int, column: int, value: float) -> float:
        return value

    def end(self) -> float:
        return 0.0


class DefaultVectorPreservingVisitor:
    __slots__ = ()

    def start(self, dimension: int, start: int, end: int) -> None:
        pass

    def visit(self, index: int, value: float) -> None:
        pass

    def end(self) -> float:
        return 0.0


class DefaultVectorChangingVisitor:
    __slots__ = ()

    def start(self, dimension: int, start: int, end: int) -> None:
        pass

    def visit(self, index: int, value: float) -> float:
        return value

    def end(self) -> float:
        return 0.0


def tiles(start: int, end: int, size: int) -> Iterator[range]:
    """Split ``[start, end]`` along the boundaries of tiles of side `size`."""
    lo = start

    while lo <= end:
        hi = min(end, (lo // size + 1) * size - 1)
        yield range(lo, hi + 1)
        lo = hi + 1


def cells(
    order: Order,
    start_row: int,
    end_row: int,
    start_column: int,
    end_column: int,
    block_size: int | None = None,
) -> Iterator[tuple[int, int]]:
    """Yield every ``(row, column)`` of a rectangle exactly once in `order`.

    For :attr:`Order.OPTIMIZED`, `block_size` selects a tiled layout visited tile by
    tile, row-major inside each tile; without it the optimized order is the row
    order.
    """
    rows = range(start_row, end_row + 1)
    columns = range(start_column, end_column + 1)

    match order:
        case Order.ROW:
            yield from itertools.product(rows, columns)

        case Order.COLUMN:
            for j, i in itertools.product(columns, rows):
                yield (i, j)

        case Order.OPTIMIZED if block_size is None:
            yield from itertools.product(rows, columns)

        case Order.OPTIMIZED:
            size: int = block_size  # type: ignore

            for row_tile in tiles(start_row, end_row, size):
                for column_tile in tiles(start_column, end_column, size):
                    yield from itertools.product(row_tile, column_tile)

        case _:
            raise ValueError


def walk_matrix(
    matrix: Any,
    visitor: MatrixPreservingVisitor | MatrixChangingVisitor,
    order: Order,
    changing: bool,
    start_row: int | None = None,
    end_row: int | None = None,
    start_column: int | None = None,
    end_column: int | None = None,
) -> float:
    """Traverse `matrix`, or one of its sub-rectangles, and return ``visitor.end()``.

    With `changing` set, the new values are gathered during the traversal and handed
    to ``matrix._apply_changes`` once the visitor is done, so that a visitor raising
    midway leaves the matrix untouched.
    """
    rows, columns = matrix.shape
    start_row = 0 if start_row is None else start_row
    end_row = rows - 1 if end_row is None else end_row
    start_column = 0 if start_column is None else start_column
    end_column = columns - 1 if end_column is None else end_column
    checks.check_sub_matrix_range(matrix, start_row, end_row, start_column, end_column)

    visitor.start(rows, columns, start_row, end_row, start_column, end_column)
    block_size = getattr(matrix, "_block_size", None)
    changes = []

    for i, j in cells(order, start_row, end_row, start_column, end_column, block_size):
        value = visitor.visit(i, j, matrix.get_entry(i, j))

        if changing:
            changes.append((i, j, float(value)))  # type: ignore

    if changing:
        matrix._apply_changes(changes)

    return visitor.end()


def walk_vector(
    vector: Any,
    visitor: VectorPreservingVisitor | VectorChangingVisitor,
    changing: bool,
    start: int | None = None,
    end: int | None = None,
) -> float:
    dimension = vector.dimension

    if start is None and end is None:
        start, end = 0, dimension - 1
    else:
        start = 0 if start is None else start
        end = dimension - 1 if end is None else end
        checks.check_index(start, dimension)
        checks.check_index(end, dimension)

        if end < start:
            raise OutOfRangeError(end, start, dimension - 1)

    visitor.start(dimension, start, end)
    changes = []

    for i in range(start, end + 1):
        value = visitor.visit(i, vector.get_entry(i))

        if changing:
            changes.append((i, float(value)))  # type: ignore

    for i, value in changes:
        vector.set_entry(i, value)

    return visitor.end()


def is_changing(visitor: Any, changing: bool | None = None) -> bool:
    """Return ``True`` if `visitor` is to be treated as a changing visitor.

    An explicit `changing` flag wins; otherwise only subclasses of the default
    changing visitors are recognized as such.
    """
    if changing is not None:
        return changing

    return isinstance(
        visitor, (DefaultMatrixChangingVisitor, DefaultVectorChangingVisitor)
    )
