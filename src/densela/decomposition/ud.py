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
    check_relative_symmetry,
    solve_lower,
    solve_upper,
)
from densela.exceptions import NonPositiveDefiniteError, NonSquareMatrixError
from densela.linalg.matrix import Kind, RealMatrix, build
from densela.typing import MatrixLike

logger = logging.getLogger(__name__)

_SYMMETRY = config.DEFAULT_UD_RELATIVE_SYMMETRY_THRESHOLD
_POSITIVITY = config.DEFAULT_UD_ABSOLUTE_POSITIVITY_THRESHOLD


class UDDecomposition(Decomposition):
    """UD decomposition ``A = U * D * U^T`` of a symmetric positive definite matrix.

    ``U`` is unit upper triangular and ``D`` is diagonal. The factors are computed
    from the last column to the first, as in Bierman's square-root free filters.

    Parameters
    ----------
    matrix : RealMatrix | ndarray | Sequence[Sequence[float]]
        Symmetric positive definite matrix.
    relative_symmetry_threshold : float, default=1e-15
        Largest relative difference allowed between symmetric entries.
    absolute_positivity_threshold : float, default=1e-10
        A diagonal entry of ``D`` at most equal to this threshold makes the matrix
        non positive definite.

    Raises
    ------
    NonSquareMatrixError
        If `matrix` is not square.
    NonSymmetricMatrixError
        If `matrix` is not symmetric.
    NonPositiveDefiniteError
        If `matrix` is not positive definite.

    Examples
    --------
    >>> from densela.decomposition import UDDecomposition
    >>> ud = UDDecomposition([[2.0, 1.0], [1.0, 1.0]])
    >>> ud.get_d().get_data().tolist()
    [[1.0, 0.0], [0.0, 1.0]]
    >>> ud.get_u().get_data().tolist()
    [[1.0, 1.0], [0.0, 1.0]]
    """

    __slots__ = ("_u", "_d")
    _u: npt.NDArray[np.float64]
    _d: npt.NDArray[np.float64]

    def __init__(
        self,
        matrix: RealMatrix | MatrixLike,
        relative_symmetry_threshold: float = _SYMMETRY,
        absolute_positivity_threshold: float = _POSITIVITY,
    ):
        a = as_snapshot(matrix)
        n, columns = a.shape

        if n != columns:
            raise NonSquareMatrixError(n, columns)

        check_relative_symmetry(a, relative_symmetry_threshold)
        u = np.identity(n)
        d = np.zeros(n)

        for j in range(n - 1, -1, -1):
            weighted = d[j + 1 :] * u[j, j + 1 :]
            d[j] = a[j, j] - weighted @ u[j, j + 1 :]

            if d[j] <= absolute_positivity_threshold:
                raise NonPositiveDefiniteError(
                    float(d[j]), j, absolute_positivity_threshold
                )

            u[:j, j] = (a[:j, j] - u[:j, j + 1 :] @ weighted) / d[j]

        self._u = u
        self._d = d
        logger.debug("UD decomposition of a %dx%d matrix", n, n)

    @classmethod
    def builder(
        cls,
        relative_symmetry_threshold: float = _SYMMETRY,
        absolute_positivity_threshold: float = _POSITIVITY,
    ) -> Callable[[RealMatrix], "UDDecomposition"]:
        return functools.partial(
            cls,
            relative_symmetry_threshold=relative_symmetry_threshold,
            absolute_positivity_threshold=absolute_positivity_threshold,
        )

    @property
    def shape(self) -> tuple[int, int]:
        return self._u.shape  # type: ignore

    def get_u(self) -> RealMatrix:
        """Return the unit upper triangular factor ``U``."""
        return build(Kind.GENERAL, self._u.copy())

    def get_ut(self) -> RealMatrix:
        return build(Kind.GENERAL, self._u.T.copy())

    def get_d(self) -> RealMatrix:
        """Return the diagonal factor ``D``."""
        return build(Kind.DIAGONAL, np.diag(self._d))

    def get_determinant(self) -> float:
        return float(np.prod(self._d))

    def get_solver(self) -> "UDSolver":
        return UDSolver(self._u, self._d)


class UDSolver(DecompositionSolver):
    __slots__ = ("_u", "_d")
    _u: npt.NDArray[np.float64]
    _d: npt.NDArray[np.float64]

    def __init__(self, u: npt.NDArray[np.float64], d: npt.NDArray[np.float64]):
        self._u = u
        self._d = d

    @property
    def dimension(self) -> int:
        return len(self._d)

    def is_non_singular(self) -> bool:
        # the factorization only succeeds on positive definite matrices
        return True

    def _solve(self, b: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        z = solve_upper(self._u, b, unit=True)
        return solve_lower(self._u.T, z / self._d[:, np.newaxis], unit=True)
