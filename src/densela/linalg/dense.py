import itertools
from typing import Self, overload

import numpy as np
import numpy.typing as npt

from densela import config
from densela.exceptions import NotPositiveError
from densela.linalg import checks
from densela.linalg.matrix import Kind, RealMatrix, register_builder
from densela.typing import MatrixLike


class Array2DRowRealMatrix(RealMatrix):
    """General matrix backed by a two-dimensional row-major float64 ndarray.

    Parameters
    ----------
    data : RealMatrix | ndarray | Sequence[Sequence[float]]
        Entries of the matrix, with at least one row and one column.
    copy : bool, default=True
        If ``False`` and `data` is a float64 ndarray, the matrix references `data`
        instead of copying it.

    Raises
    ------
    NullArgumentError
        If `data` or one of its rows is ``None``.
    NoDataError
        If `data` has no row or no column.
    DimensionMismatchError
        If `data` is ragged.

    Examples
    --------
    >>> from densela.linalg import Array2DRowRealMatrix
    >>> a = Array2DRowRealMatrix([[1.0, 2.0], [3.0, 4.0]])
    >>> a.shape
    (2, 2)
    >>> (a @ a).get_data().tolist()
    [[7.0, 10.0], [15.0, 22.0]]
    """

    __slots__ = ("_data",)
    _data: npt.NDArray[np.float64]

    def __init__(self, data: RealMatrix | MatrixLike, copy: bool = True):
        super().__init__()
        self._data = checks.as_matrix(data, copy=copy)

    @classmethod
    def zeros(cls, rows: int, columns: int) -> Self:
        """Return a new matrix of the given shape, filled with zeros."""
        if rows <= 0 or columns <= 0:
            raise NotPositiveError(min(rows, columns), "dimension")

        return cls(np.zeros((rows, columns)), copy=False)

    @property
    def shape(self) -> tuple[int, int]:
        return self._data.shape  # type: ignore

    def get_data_ref(self) -> npt.NDArray[np.float64]:
        """Return the backing array itself (no copy)."""
        return self._data

    def get_data(self, force_copy: bool = True) -> npt.NDArray[np.float64]:
        return self._data.copy() if force_copy else self._data

    def get_entry(self, row: int, column: int) -> float:
        checks.check_matrix_index(self, row, column)
        return float(self._data[row, column])

    def set_entry(self, row: int, column: int, value: float) -> None:
        checks.check_matrix_index(self, row, column)
        self._data[row, column] = value

    def add_to_entry(self, row: int, column: int, increment: float) -> None:
        checks.check_matrix_index(self, row, column)
        self._data[row, column] += increment

    def multiply_entry(self, row: int, column: int, factor: float) -> None:
        checks.check_matrix_index(self, row, column)
        self._data[row, column] *= factor

    def _apply_changes(self, changes: list[tuple[int, int, float]]) -> None:
        if changes:
            rows, columns, values = zip(*changes)
            self._data[list(rows), list(columns)] = values

    def create_matrix(self, rows: int, columns: int) -> "Array2DRowRealMatrix":
        return Array2DRowRealMatrix.zeros(rows, columns)

    def copy(self) -> Self:
        return type(self)(self._data.copy(), copy=False)


class BlockRealMatrix(RealMatrix):
    """General matrix stored in square tiles of side ``BLOCK_SIZE``.

    Tiles are stored in row-major order, and so are the entries of each tile. Tiles
    on the last block row and column may be smaller. Products are computed tile by
    tile, and the optimized traversal order visits the matrix tile by tile.

    Parameters
    ----------
    data : RealMatrix | ndarray | Sequence[Sequence[float]]
        Entries of the matrix, always copied.
    """

    __slots__ = ("_blocks", "_rows", "_columns", "_block_rows", "_block_columns")
    _block_size = config.BLOCK_SIZE
    _blocks: list[npt.NDArray[np.float64]]
    _rows: int
    _columns: int
    _block_rows: int
    _block_columns: int

    def __init__(self, data: RealMatrix | MatrixLike):
        super().__init__()
        array = checks.as_matrix(data, copy=False)
        self._init_blocks(*array.shape)
        size = self._block_size

        blocks = itertools.product(range(self._block_rows), range(self._block_columns))

        for i, j in blocks:
            tile = array[i * size : (i + 1) * size, j * size : (j + 1) * size]
            self._blocks.append(np.array(tile, np.float64))

    def _init_blocks(self, rows: int, columns: int) -> None:
        size = self._block_size
        self._rows = rows
        self._columns = columns
        self._block_rows = (rows + size - 1) // size
        self._block_columns = (columns + size - 1) // size
        self._blocks = []

    @classmethod
    def zeros(cls, rows: int, columns: int) -> Self:
        if rows <= 0 or columns <= 0:
            raise NotPositiveError(min(rows, columns), "dimension")

        result = cls.__new__(cls)
        RealMatrix.__init__(result)
        result._init_blocks(rows, columns)
        size = cls._block_size

        for i, j in itertools.product(
            range(result._block_rows), range(result._block_columns)
        ):
            height = min(size, rows - i * size)
            width = min(size, columns - j * size)
            result._blocks.append(np.zeros((height, width)))

        return result

    @property
    def shape(self) -> tuple[int, int]:
        return (self._rows, self._columns)

    def _locate(
        self, row: int, column: int
    ) -> tuple[npt.NDArray[np.float64], int, int]:
        size = self._block_size
        block = self._blocks[(row // size) * self._block_columns + column // size]
        return block, row % size, column % size

    def get_data(self, force_copy: bool = True) -> npt.NDArray[np.float64]:
        width = self._block_columns
        rows = [
            np.hstack(self._blocks[i * width : (i + 1) * width])
            for i in range(self._block_rows)
        ]
        return np.vstack(rows)

    def get_entry(self, row: int, column: int) -> float:
        checks.check_matrix_index(self, row, column)
        block, i, j = self._locate(row, column)
        return float(block[i, j])

    def set_entry(self, row: int, column: int, value: float) -> None:
        checks.check_matrix_index(self, row, column)
        block, i, j = self._locate(row, column)
        block[i, j] = value

    def add_to_entry(self, row: int, column: int, increment: float) -> None:
        checks.check_matrix_index(self, row, column)
        block, i, j = self._locate(row, column)
        block[i, j] += increment

    def multiply_entry(self, row: int, column: int, factor: float) -> None:
        checks.check_matrix_index(self, row, column)
        block, i, j = self._locate(row, column)
        block[i, j] *= factor

    def _multiply_data(self, rhs: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        size = self._block_size
        result = np.zeros((self._rows, *rhs.shape[1:]))

        for i in range(self._block_rows):
            rows = slice(i * size, min((i + 1) * size, self._rows))

            for k in range(self._block_columns):
                block = self._blocks[i * self._block_columns + k]
                result[rows] += block @ rhs[k * size : k * size + block.shape[1]]

        return result

    def _build_general(self, data: npt.NDArray[np.float64]) -> RealMatrix:
        return BlockRealMatrix(data)

    def create_matrix(self, rows: int, columns: int) -> "BlockRealMatrix":
        return BlockRealMatrix.zeros(rows, columns)

    def copy(self) -> Self:
        result = type(self).__new__(type(self))
        RealMatrix.__init__(result)
        result._init_blocks(self._rows, self._columns)
        result._blocks = [block.copy() for block in self._blocks]
        return result


@overload
def create_real_matrix(rows: int, columns: int, /) -> RealMatrix: ...


@overload
def create_real_matrix(
    data: RealMatrix | MatrixLike, /, *, copy: bool = True
) -> RealMatrix: ...


def create_real_matrix(*args, copy=True):
    """Return a general matrix, stored in blocks when it has more than
    ``MAX_DENSE_SIZE`` entries.

    Called with two integers, return a zero matrix of that shape. Otherwise, return a
    matrix holding the entries of the given data.
    """
    match args:
        case (int() as rows, int() as columns):
            if rows * columns > config.MAX_DENSE_SIZE:
                return BlockRealMatrix.zeros(rows, columns)

            return Array2DRowRealMatrix.zeros(rows, columns)

        case (data,):
            array = checks.as_matrix(data, copy=copy)

            if array.size > config.MAX_DENSE_SIZE:
                return BlockRealMatrix(array)

            return Array2DRowRealMatrix(array, copy=False)

        case _:
            raise TypeError("expected a shape or an array")


register_builder(Kind.GENERAL, lambda data: create_real_matrix(data, copy=False))
