import functools
import logging
import math
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

_SYMMETRY = config.DEFAULT_CHOLESKY_RELATIVE_SYMMETRY_THRESHOLD
_POSITIVITY = config.DEFAULT_CHOLESKY_ABSOLUTE_POSITIVITY_THRESHOLD


class CholeskyDecomposition(Decomposition):
    """Cholesky decomposition ``A = L * L^T`` of a symmetric positive definite
    matrix, ``L`` being lower triangular.

    Parameters
    ----------
    matrix : RealMatrix | ndarray | Sequence[Sequence[float]]
        Symmetric positive definite matrix.
    relative_symmetry_threshold : float, default=1e-15
        Largest relative difference allowed between symmetric entries.
    absolute_positivity_threshold : float, default=1e-10
        A pivot at most equal to this threshold makes the matrix non positive
        definite.

    Raises
    ------
    NonSquareMatrixError
        If `matrix` is not square.
    NonSymmetricMatrixError
        If `matrix` is not symmetric.
    NonPositiveDefiniteError
        If `matrix` is not positive definite.
    """

    __slots__ = ("_lt",)
    _lt: npt.NDArray[np.float64]

    def __init__(
        self,
        matrix: RealMatrix | MatrixLike,
        relative_symmetry_threshold: float = _SYMMETRY,
        absolute_positivity_threshold: float = _POSITIVITY,
    ):
        lt = as_snapshot(matrix)
        n, columns = lt.shape

        if n != columns:
            raise NonSquareMatrixError(n, columns)

        check_relative_symmetry(lt, relative_symmetry_threshold)

        for i in range(n):
            if lt[i, i] <= absolute_positivity_threshold:
                raise NonPositiveDefiniteError(
                    float(lt[i, i]), i, absolute_positivity_threshold
                )

            lt[i, i] = math.sqrt(lt[i, i])
            lt[i, i + 1 :] /= lt[i, i]
            lt[i + 1 :, i + 1 :] -= np.outer(lt[i, i + 1 :], lt[i, i + 1 :])

        self._lt = np.triu(lt)
        logger.debug("Cholesky decomposition of a %dx%d matrix", n, n)

    @classmethod
    def builder(
        cls,
        relative_symmetry_threshold: float = _SYMMETRY,
        absolute_positivity_threshold: float = _POSITIVITY,
    ) -> Callable[[RealMatrix], "CholeskyDecomposition"]:
        return functools.partial(
            cls,
            relative_symmetry_threshold=relative_symmetry_threshold,
            absolute_positivity_threshold=absolute_positivity_threshold,
        )

    @property
    def shape(self) -> tuple[int, int]:
        return self._lt.shape  # type: ignore

    def get_l(self) -> RealMatrix:
        return build(Kind.GENERAL, self._lt.T.copy())

    def get_lt(self) -> RealMatrix:
        return build(Kind.GENERAL, self._lt.copy())

    def get_determinant(self) -> float:
        return float(np.prod(np.diagonal(self._lt))) ** 2

    def get_solver(self) -> "CholeskySolver":
        return CholeskySolver(self._lt)


class CholeskySolver(DecompositionSolver):
    __slots__ = ("_lt",)
    _lt: npt.NDArray[np.float64]

    def __init__(self, lt: npt.NDArray[np.float64]):
        self._lt = lt

    @property
    def dimension(self) -> int:
        return len(self._lt)

    def is_non_singular(self) -> bool:
        return True

    def _solve(self, b: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        y = solve_lower(self._lt.T, b)
        return solve_upper(self._lt, y)
