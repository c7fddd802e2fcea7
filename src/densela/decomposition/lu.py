import functools
import logging
from collections.abc import Callable

import numpy as np
import numpy.typing as npt

from densela import config
from densela.decomposition.base import (
    Decomposition,
    DecompositionSolver,
    as_snapshot,
    solve_lower,
    solve_upper,
)
from densela.exceptions import NonSquareMatrixError, SingularMatrixError
from densela.linalg.matrix import Kind, RealMatrix, build
from densela.typing import MatrixLike

logger = logging.getLogger(__name__)


class LUDecomposition(Decomposition):
    """LU decomposition with partial pivoting, ``P * A = L * U``.

    The decomposition is computed by Crout's algorithm. ``L`` is unit lower
    triangular, ``U`` is upper triangular and ``P`` is a permutation matrix.

    Parameters
    ----------
    matrix : RealMatrix | ndarray | Sequence[Sequence[float]]
        Square matrix to decompose.
    threshold : float, default=DEFAULT_LU_THRESHOLD
        The matrix is considered singular when the absolute value of a pivot is
        below `threshold`.

    Raises
    ------
    NonSquareMatrixError
        If `matrix` is not square.

    Examples
    --------
    >>> from densela.decomposition import LUDecomposition
    >>> lu = LUDecomposition([[2.0, 5.0, 3.0], [0.0, 5.0, 7.0], [6.0, 9.0, 8.0]])
    >>> lu.get_pivot()
    [2, 1, 0]
    >>> round(lu.get_determinant(), 10)
    74.0
    """

    __slots__ = ("_lu", "_pivot", "_even", "_singular", "_threshold", "_failed")
    _lu: npt.NDArray[np.float64]
    _pivot: list[int]
    _even: bool
    _singular: bool
    _threshold: float
    _failed: tuple[float, int] | None

    def __init__(
        self,
        matrix: RealMatrix | MatrixLike,
        threshold: float = config.DEFAULT_LU_THRESHOLD,
    ):
        lu = as_snapshot(matrix)
        n, columns = lu.shape

        if n != columns:
            raise NonSquareMatrixError(n, columns)

        self._lu = lu
        self._pivot = list(range(n))
        self._even = True
        self._singular = False
        self._threshold = threshold
        self._failed = None

        for col in range(n):
            # upper part, row by row so that each row uses the rows above it
            for row in range(col):
                lu[row, col] -= lu[row, :row] @ lu[:row, col]

            lu[col:, col] -= lu[col:, :col] @ lu[:col, col]
            best = col + int(np.argmax(np.abs(lu[col:, col])))

            if abs(lu[best, col]) < threshold:
                self._singular = True
                self._failed = (float(lu[best, col]), col)
                logger.debug("LU decomposition: singular pivot at column %d", col)
                return

            if best != col:
                lu[[best, col]] = lu[[col, best]]
                pivot = self._pivot
                pivot[best], pivot[col] = pivot[col], pivot[best]
                self._even = not self._even

            lu[col + 1 :, col] /= lu[col, col]

        logger.debug("LU decomposition of a %dx%d matrix", n, n)

    @classmethod
    def builder(
        cls, threshold: float = config.DEFAULT_LU_THRESHOLD
    ) -> Callable[[RealMatrix], "LUDecomposition"]:
        """Return a decomposition builder creating LU decompositions with the given
        singularity threshold."""
        return functools.partial(cls, threshold=threshold)

    @property
    def shape(self) -> tuple[int, int]:
        return self._lu.shape  # type: ignore

    def _check_non_singular(self) -> None:
        if self._singular:
            value = None if self._failed is None else self._failed[0]
            raise SingularMatrixError(value, self._threshold)

    def get_l(self) -> RealMatrix:
        """Return the unit lower triangular factor ``L``.

        Raises
        ------
        SingularMatrixError
            If the matrix is singular.
        """
        self._check_non_singular()
        lower = np.tril(self._lu, -1)
        np.fill_diagonal(lower, 1.0)
        return build(Kind.GENERAL, lower)

    def get_u(self) -> RealMatrix:
        """Return the upper triangular factor ``U``.

        Raises
        ------
        SingularMatrixError
            If the matrix is singular.
        """
        self._check_non_singular()
        return build(Kind.GENERAL, np.triu(self._lu))

    def get_p(self) -> RealMatrix:
        """Return the permutation matrix ``P``.

        Raises
        ------
        SingularMatrixError
            If the matrix is singular.
        """
        self._check_non_singular()
        n = len(self._pivot)
        p = np.zeros((n, n))
        p[np.arange(n), self._pivot] = 1.0
        return build(Kind.GENERAL, p)

    def get_pivot(self) -> list[int]:
        """Return the row permutation: row ``i`` of ``P * A`` is row ``pivot[i]`` of
        ``A``."""
        return self._pivot.copy()

    def get_determinant(self) -> float:
        """Return the determinant of the matrix, zero if it is singular."""
        if self._singular:
            return 0.0

        determinant = float(np.prod(np.diagonal(self._lu)))
        return determinant if self._even else -determinant

    def get_solver(self) -> "LUSolver":
        return LUSolver(self._lu, self._pivot, self._singular, self._failed)


class LUSolver(DecompositionSolver):
    """Solver built on an LU decomposition; it only solves square non-singular
    systems."""

    __slots__ = ("_lu", "_pivot", "_singular", "_failed")
    _lu: npt.NDArray[np.float64]
    _pivot: list[int]
    _singular: bool
    _failed: tuple[float, int] | None

    def __init__(
        self,
        lu: npt.NDArray[np.float64],
        pivot: list[int],
        singular: bool,
        failed: tuple[float, int] | None = None,
    ):
        self._lu = lu
        self._pivot = pivot
        self._singular = singular
        self._failed = failed

    @property
    def dimension(self) -> int:
        return len(self._pivot)

    def is_non_singular(self) -> bool:
        return not self._singular

    def _solve(self, b: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        if self._singular:
            value = None if self._failed is None else self._failed[0]
            raise SingularMatrixError(value)

        y = solve_lower(self._lu, b[self._pivot], unit=True)
        return solve_upper(self._lu, y)
