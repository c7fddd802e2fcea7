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
    solve_upper,
)
from densela.exceptions import NonSquareMatrixError, SingularMatrixError
from densela.linalg.matrix import Kind, RealMatrix, build
from densela.typing import MatrixLike

logger = logging.getLogger(__name__)


class QRDecomposition(Decomposition):
    """QR decomposition ``A = Q * R`` computed by Householder reflections.

    For a ``m x n`` matrix, ``Q`` is the ``m x m`` orthogonal matrix and ``R`` the
    ``m x n`` upper triangular one. The reflections are stored in the transposed
    matrix, one per row, in the layout of LINPACK.

    Parameters
    ----------
    matrix : RealMatrix | ndarray | Sequence[Sequence[float]]
        Matrix to decompose, of any shape.
    threshold : float, default=DEFAULT_QR_THRESHOLD
        The matrix is considered singular when the absolute value of a diagonal
        entry of ``R`` is at most `threshold`.
    """

    __slots__ = ("_qrt", "_r_diag", "_threshold")
    _qrt: npt.NDArray[np.float64]
    _r_diag: npt.NDArray[np.float64]
    _threshold: float

    def __init__(
        self,
        matrix: RealMatrix | MatrixLike,
        threshold: float = config.DEFAULT_QR_THRESHOLD,
    ):
        qrt = as_snapshot(matrix).T.copy()
        n, m = qrt.shape
        self._r_diag = np.zeros(min(m, n))
        self._threshold = threshold

        for minor in range(min(m, n)):
            a = float(np.linalg.norm(qrt[minor, minor:]))

            if qrt[minor, minor] > 0.0:
                a = -a

            self._r_diag[minor] = a

            if a != 0.0:
                qrt[minor, minor] -= a
                v = qrt[minor, minor:]
                alpha = (qrt[minor + 1 :, minor:] @ v) / (a * v[0])
                qrt[minor + 1 :, minor:] += np.outer(alpha, v)

        self._qrt = qrt
        logger.debug("QR decomposition of a %dx%d matrix", m, n)

    @classmethod
    def builder(
        cls, threshold: float = config.DEFAULT_QR_THRESHOLD
    ) -> Callable[[RealMatrix], "QRDecomposition"]:
        return functools.partial(cls, threshold=threshold)

    @property
    def shape(self) -> tuple[int, int]:
        n, m = self._qrt.shape
        return (m, n)

    def _r(self) -> npt.NDArray[np.float64]:
        r = np.triu(self._qrt.T, 1)
        k = len(self._r_diag)
        r[np.arange(k), np.arange(k)] = self._r_diag
        return r

    def get_r(self) -> RealMatrix:
        """Return the upper triangular factor ``R``."""
        return build(Kind.GENERAL, self._r())

    def _qt(self) -> npt.NDArray[np.float64]:
        m, n = self.shape
        qt = np.identity(m)

        for minor in range(min(m, n) - 1, -1, -1):
            v = self._qrt[minor, minor:]

            if v[0] != 0.0:
                alpha = (qt[minor:, minor:] @ v) / (self._r_diag[minor] * v[0])
                qt[minor:, minor:] += np.outer(alpha, v)

        return qt

    def get_q(self) -> RealMatrix:
        """Return the orthogonal factor ``Q``."""
        return build(Kind.GENERAL, self._qt().T.copy())

    def get_qt(self) -> RealMatrix:
        return build(Kind.GENERAL, self._qt())

    def get_h(self) -> RealMatrix:
        """Return the Householder vectors, stored in the lower trapezoid."""
        return build(Kind.GENERAL, np.tril(self._qrt.T))

    def get_determinant(self) -> float:
        """Return the determinant of the matrix.

        Raises
        ------
        NonSquareMatrixError
            If the matrix is not square.
        """
        m, n = self.shape

        if m != n:
            raise NonSquareMatrixError(m, n)

        # each reflection has determinant -1
        determinant = float(np.prod(self._r_diag))
        reflections = int(np.count_nonzero(np.diagonal(self._qrt)))
        return -determinant if reflections % 2 else determinant

    def get_solver(self) -> "QRSolver":
        return QRSolver(self._qrt, self._r_diag, self._threshold)


class QRSolver(DecompositionSolver):
    """Solver built on a QR decomposition; it only solves square non-singular
    systems."""

    __slots__ = ("_qrt", "_r_diag", "_threshold")
    _qrt: npt.NDArray[np.float64]
    _r_diag: npt.NDArray[np.float64]
    _threshold: float

    def __init__(
        self,
        qrt: npt.NDArray[np.float64],
        r_diag: npt.NDArray[np.float64],
        threshold: float,
    ):
        self._qrt = qrt
        self._r_diag = r_diag
        self._threshold = threshold

    @property
    def dimension(self) -> int:
        return self._qrt.shape[1]

    def is_non_singular(self) -> bool:
        n, m = self._qrt.shape

        if m != n:
            return False

        return bool(np.all(np.abs(self._r_diag) > self._threshold))

    def _solve(self, b: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        n, m = self._qrt.shape

        if m != n:
            raise NonSquareMatrixError(m, n)

        if not self.is_non_singular():
            index = int(np.argmin(np.abs(self._r_diag)))
            raise SingularMatrixError(float(self._r_diag[index]), self._threshold)

        y = np.array(b, np.float64)

        # y = Q^T * b
        for minor in range(min(m, n)):
            v = self._qrt[minor, minor:]
            alpha = (v @ y[minor:]) / (self._r_diag[minor] * v[0])
            y[minor:] += np.outer(v, alpha)

        r = np.triu(self._qrt.T, 1)
        np.fill_diagonal(r, self._r_diag)
        return solve_upper(r, y)
