import numpy as np

from densela.exceptions import NotPositiveError
from densela.linalg import checks
from densela.linalg.dense import create_real_matrix
from densela.linalg.diagonal import DiagonalMatrix
from densela.linalg.matrix import RealMatrix, as_real_matrix
from densela.linalg.vector import ArrayRealVector, RealVector
from densela.typing import DecompositionBuilder, MatrixLike, VectorLike


def create_identity(dimension: int) -> RealMatrix:
    """Return the general identity matrix of the given dimension.

    See Also
    --------
    DiagonalMatrix.identity
    """
    if dimension <= 0:
        raise NotPositiveError(dimension, "dimension")

    return create_real_matrix(np.identity(dimension), copy=False)


def create_diagonal(diagonal: RealVector | VectorLike) -> DiagonalMatrix:
    return DiagonalMatrix(diagonal)


def create_row_matrix(row: RealVector | VectorLike) -> RealMatrix:
    """Return the ``1 x n`` matrix whose only row is `row`."""
    return create_real_matrix(checks.as_vector(row, "row")[np.newaxis, :], copy=False)


def create_column_matrix(column: RealVector | VectorLike) -> RealMatrix:
    """Return the ``n x 1`` matrix whose only column is `column`."""
    return create_real_matrix(
        checks.as_vector(column, "column")[:, np.newaxis], copy=False
    )


def create_vector(data: RealVector | VectorLike) -> ArrayRealVector:
    return ArrayRealVector(data)


def concatenate_horizontally(*matrices: RealMatrix | MatrixLike) -> RealMatrix:
    """Return the matrices placed side by side, left to right.

    The result is a general matrix, stored in blocks if the first matrix is.

    Raises
    ------
    DimensionMismatchError
        If the row dimensions differ.
    """
    first, *rest = matrices
    result = as_real_matrix(first)

    for m in rest:
        result = result.concatenate_horizontally(m)

    return result


def concatenate_vertically(*matrices: RealMatrix | MatrixLike) -> RealMatrix:
    """Return the matrices stacked top to bottom.

    Raises
    ------
    DimensionMismatchError
        If the column dimensions differ.
    """
    first, *rest = matrices
    result = as_real_matrix(first)

    for m in rest:
        result = result.concatenate_vertically(m)

    return result


def concatenate_diagonally(*matrices: RealMatrix | MatrixLike) -> RealMatrix:
    """Return the block diagonal matrix whose blocks are `matrices`, from the upper
    left to the lower right corner.

    Examples
    --------
    >>> from densela.linalg import DiagonalMatrix, concatenate_diagonally
    >>> a = concatenate_diagonally(DiagonalMatrix([1.0]), DiagonalMatrix([2.0]))
    >>> a.kind
    <Kind.DIAGONAL>
    """
    first, *rest = matrices
    result = as_real_matrix(first)

    for m in rest:
        result = result.concatenate_diagonally(m)

    return result


def inverse(
    matrix: RealMatrix | MatrixLike, builder: DecompositionBuilder | None = None
) -> RealMatrix:
    """Return the inverse of `matrix`.

    Parameters
    ----------
    matrix : RealMatrix | ndarray | Sequence[Sequence[float]]
    builder : Callable[[RealMatrix], Decomposition] | None, default=None
        Decomposition used to compute the inverse. Defaults to the decomposition
        attached to `matrix`, or to :func:`~densela.config.get_default_decomposition`.

    Raises
    ------
    NonSquareMatrixError
        If `matrix` is not square.
    SingularMatrixError
        If `matrix` is singular.
    """
    return as_real_matrix(matrix).get_inverse(builder)


def solve(
    matrix: RealMatrix | MatrixLike,
    b: RealVector | VectorLike,
    builder: DecompositionBuilder | None = None,
):
    """Solve the linear equation ``matrix * x = b``.

    `b` may be a vector or a matrix whose columns are right-hand sides; the solution
    has the type of `b`.

    Raises
    ------
    NonSquareMatrixError
        If `matrix` is not square and the decomposition cannot handle it.
    SingularMatrixError
        If `matrix` is singular.
    """
    matrix = as_real_matrix(matrix)

    if builder is None:
        builder = matrix.get_default_decomposition()

    return builder(matrix).get_solver().solve(b)


def norm(matrix: RealMatrix | MatrixLike, order: str = "1") -> float:
    """Return a norm of `matrix`.

    Parameters
    ----------
    order : {"1", "fro", "max"}, default="1"
        Maximum absolute column sum, Frobenius norm, or largest absolute entry.
    """
    matrix = as_real_matrix(matrix)

    match order:
        case "1":
            return matrix.get_norm()

        case "fro":
            return matrix.get_frobenius_norm()

        case "max":
            return float(np.max(np.abs(matrix.get_data(False))))

        case _:
            raise ValueError(f"unknown norm {order!r}")


def is_singular(matrix: RealMatrix | MatrixLike) -> bool:
    """Return ``True`` if the default decomposition finds `matrix` singular."""
    matrix = as_real_matrix(matrix)
    checks.check_square(matrix)
    solver = matrix.get_default_decomposition()(matrix).get_solver()
    return not solver.is_non_singular()
