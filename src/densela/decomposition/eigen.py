import functools
import logging
import math
from collections.abc import Callable
from typing import Self

import numpy as np
import numpy.typing as npt

from densela import config
from densela.decomposition.base import (
    Decomposition,
    DecompositionSolver,
    as_snapshot,
    check_relative_symmetry,
)
from densela.exceptions import (
    ConvergenceError,
    DimensionMismatchError,
    NoDataError,
    NonSquareMatrixError,
    SingularMatrixError,
    UnsupportedOperationError,
)
from densela.linalg import checks
from densela.linalg.matrix import Kind, RealMatrix, build
from densela.linalg.vector import ArrayRealVector
from densela.typing import MatrixLike, VectorLike

logger = logging.getLogger(__name__)

# Relative magnitude below which an eigenvalue makes the solver singular.
EPSILON = 1e-12

# Maximum number of implicit QL sweeps per eigenvalue.
MAX_ITER = 30


def default_symmetry_threshold(rows: int, columns: int) -> float:
    return 10 * rows * columns * config.EPSILON


def _tridiagonalize(
    a: npt.NDArray[np.float64],
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Reduce the symmetric matrix `a` to ``Q * T * Q^T`` by Householder
    reflections, in place.

    Returns the main and secondary diagonals of ``T`` and the orthogonal ``Q``.
    """
    n = len(a)
    q = np.identity(n)

    for k in range(n - 2):
        x = a[k + 1 :, k]
        alpha = -math.copysign(float(np.linalg.norm(x)), x[0])

        if alpha == 0.0:
            continue

        v = x.copy()
        v[0] -= alpha
        v /= np.linalg.norm(v)
        a[k + 1 :, :] -= 2.0 * np.outer(v, v @ a[k + 1 :, :])
        a[:, k + 1 :] -= 2.0 * np.outer(a[:, k + 1 :] @ v, v)
        q[:, k + 1 :] -= 2.0 * np.outer(q[:, k + 1 :] @ v, v)

    return np.diagonal(a).copy(), np.diagonal(a, 1).copy(), q


def _diagonalize(
    d: npt.NDArray[np.float64], e: npt.NDArray[np.float64], z: npt.NDArray[np.float64]
) -> None:
    """Diagonalize the symmetric tridiagonal matrix of main diagonal `d` and
    secondary diagonal ``e[:-1]`` by implicit QL sweeps, in place.

    The rotations are accumulated in the columns of `z`.

    Raises
    ------
    ConvergenceError
        If an eigenvalue needs more than ``MAX_ITER`` sweeps.
    """
    n = len(d)
    largest = max(float(np.max(np.abs(d))), float(np.max(np.abs(e))))

    if largest != 0.0:
        d[np.abs(d) <= config.EPSILON * largest] = 0.0
        e[np.abs(e) <= config.EPSILON * largest] = 0.0

    for j in range(n):
        iterations = 0

        while True:
            m = j

            # look for a negligible secondary entry to split the matrix
            while m < n - 1:
                delta = abs(d[m]) + abs(d[m + 1])

                if abs(e[m]) + delta == delta:
                    break

                m += 1

            if m == j:
                break

            if iterations == MAX_ITER:
                raise ConvergenceError(MAX_ITER)

            iterations += 1
            q = (d[j + 1] - d[j]) / (2.0 * e[j])
            t = math.sqrt(1.0 + q * q)
            q = d[m] - d[j] + e[j] / (q - t if q < 0.0 else q + t)
            u = 0.0
            s = 1.0
            c = 1.0
            deflated = False

            for i in range(m - 1, j - 1, -1):
                p = s * e[i]
                h = c * e[i]

                if abs(p) >= abs(q):
                    c = q / p
                    t = math.sqrt(c * c + 1.0)
                    e[i + 1] = p * t
                    s = 1.0 / t
                    c *= s
                else:
                    s = p / q
                    t = math.sqrt(s * s + 1.0)
                    e[i + 1] = q * t
                    c = 1.0 / t
                    s *= c

                if e[i + 1] == 0.0:
                    d[i + 1] -= u
                    e[m] = 0.0
                    deflated = True
                    break

                q = d[i + 1] - u
                t = (d[i] - q) * s + 2.0 * c * h
                u = s * t
                d[i + 1] = q + u
                q = c * t - h
                previous = z[:, i + 1].copy()
                z[:, i + 1] = s * z[:, i] + c * previous
                z[:, i] = c * z[:, i] - s * previous

            if deflated:
                continue

            d[j] -= u
            e[j] = q
            e[m] = 0.0


class EigenDecomposition(Decomposition):
    """Eigen decomposition ``A = V * D * V^T`` of a real symmetric matrix.

    The matrix is reduced to tridiagonal form by Householder reflections, then
    diagonalized by implicit QL sweeps (Dubrulle, Martin and Wilkinson, 1971). The
    eigenvalues are sorted in decreasing order; the columns of ``V`` are the
    matching orthonormal eigenvectors. No assumption is made about the orientation
    of ``V``.

    Parameters
    ----------
    matrix : RealMatrix | ndarray | Sequence[Sequence[float]]
        Symmetric matrix to decompose.
    relative_symmetry_threshold : float, optional
        Largest relative difference allowed between symmetric entries. Defaults to
        ``10 * n * n * EPSILON`` for a ``n x n`` matrix.

    Raises
    ------
    NonSquareMatrixError
        If `matrix` is not square.
    NonSymmetricMatrixError
        If `matrix` is not symmetric.
    ConvergenceError
        If the QL sweeps do not converge.

    Examples
    --------
    >>> from densela.decomposition import EigenDecomposition
    >>> eigen = EigenDecomposition([[2.0, 1.0], [1.0, 2.0]])
    >>> [round(x, 12) for x in eigen.get_real_eigenvalues()]
    [3.0, 1.0]
    >>> round(eigen.get_determinant(), 12)
    3.0
    """

    __slots__ = ("_eigenvalues", "_eigenvectors")
    _eigenvalues: npt.NDArray[np.float64]
    _eigenvectors: npt.NDArray[np.float64]

    def __init__(
        self,
        matrix: RealMatrix | MatrixLike,
        relative_symmetry_threshold: float | None = None,
    ):
        diagonal = isinstance(matrix, RealMatrix) and matrix.kind is Kind.DIAGONAL
        a = as_snapshot(matrix)
        n, columns = a.shape

        if n != columns:
            raise NonSquareMatrixError(n, columns)

        if diagonal:
            d = np.diagonal(a).copy()
            z = np.identity(n)
        else:
            if relative_symmetry_threshold is None:
                relative_symmetry_threshold = default_symmetry_threshold(n, n)

            check_relative_symmetry(a, relative_symmetry_threshold)
            d, secondary, z = _tridiagonalize(a)
            e = np.append(secondary, 0.0)
            _diagonalize(d, e, z)

        self._set(d, z)
        logger.debug("eigen decomposition of a %dx%d matrix", n, n)

    @classmethod
    def from_tridiagonal(cls, main: VectorLike, secondary: VectorLike) -> Self:
        """Decompose the symmetric tridiagonal matrix with the given diagonals.

        Parameters
        ----------
        main : ndarray | Sequence[float]
            Main diagonal, of length ``n``.
        secondary : ndarray | Sequence[float]
            Secondary diagonal, of length ``n - 1``.
        """
        d = checks.as_vector(main, "main", copy=True)
        secondary = checks.as_vector(secondary, "secondary", copy=True)

        if len(d) == 0:
            raise NoDataError("main")

        if len(secondary) != len(d) - 1:
            raise DimensionMismatchError(len(secondary), len(d) - 1)

        z = np.identity(len(d))
        _diagonalize(d, np.append(secondary, 0.0), z)
        result = cls.__new__(cls)
        result._set(d, z)
        return result

    def _set(self, d: npt.NDArray[np.float64], z: npt.NDArray[np.float64]) -> None:
        order = np.argsort(-d, kind="stable")
        d = d[order]
        largest = float(np.max(np.abs(d)))

        if largest != 0.0:
            d[np.abs(d) < config.EPSILON * largest] = 0.0

        self._eigenvalues = d
        self._eigenvectors = z[:, order]

    @classmethod
    def builder(
        cls, relative_symmetry_threshold: float | None = None
    ) -> Callable[[RealMatrix], "EigenDecomposition"]:
        return functools.partial(
            cls, relative_symmetry_threshold=relative_symmetry_threshold
        )

    @property
    def shape(self) -> tuple[int, int]:
        return self._eigenvectors.shape  # type: ignore

    def get_v(self) -> RealMatrix:
        """Return the matrix whose columns are the eigenvectors."""
        return build(Kind.GENERAL, self._eigenvectors.copy())

    def get_vt(self) -> RealMatrix:
        return build(Kind.GENERAL, self._eigenvectors.T.copy())

    def get_d(self) -> RealMatrix:
        """Return the diagonal matrix of the eigenvalues."""
        return build(Kind.DIAGONAL, np.diag(self._eigenvalues))

    def get_real_eigenvalues(self) -> npt.NDArray[np.float64]:
        return self._eigenvalues.copy()

    def get_real_eigenvalue(self, i: int) -> float:
        checks.check_index(i, len(self._eigenvalues))
        return float(self._eigenvalues[i])

    def get_eigenvector(self, i: int) -> ArrayRealVector:
        """Return the eigenvector of the `i`-th eigenvalue.

        Raises
        ------
        OutOfRangeError
            If `i` is not a valid eigenvalue index.
        """
        checks.check_index(i, len(self._eigenvalues))
        return ArrayRealVector(self._eigenvectors[:, i].copy(), copy=False)

    def get_determinant(self) -> float:
        return float(np.prod(self._eigenvalues))

    def get_square_root(self) -> RealMatrix:
        """Return the square root ``V * sqrt(D) * V^T`` of the matrix.

        Raises
        ------
        UnsupportedOperationError
            If an eigenvalue is negative.
        """
        if np.any(self._eigenvalues < 0.0):
            raise UnsupportedOperationError("square root", "negative eigenvalue")

        v = self._eigenvectors
        return build(Kind.GENERAL, (v * np.sqrt(self._eigenvalues)) @ v.T)

    def get_solver(self) -> "EigenSolver":
        return EigenSolver(self._eigenvalues, self._eigenvectors)


class EigenSolver(DecompositionSolver):
    __slots__ = ("_eigenvalues", "_eigenvectors")
    _eigenvalues: npt.NDArray[np.float64]
    _eigenvectors: npt.NDArray[np.float64]

    def __init__(
        self,
        eigenvalues: npt.NDArray[np.float64],
        eigenvectors: npt.NDArray[np.float64],
    ):
        self._eigenvalues = eigenvalues
        self._eigenvectors = eigenvectors

    @property
    def dimension(self) -> int:
        return len(self._eigenvalues)

    def is_non_singular(self) -> bool:
        magnitudes = np.abs(self._eigenvalues)
        largest = float(np.max(magnitudes))

        if largest == 0.0:
            return False

        return bool(np.all(magnitudes / largest > EPSILON))

    def _solve(self, b: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        if not self.is_non_singular():
            index = int(np.argmin(np.abs(self._eigenvalues)))
            raise SingularMatrixError(float(self._eigenvalues[index]), EPSILON)

        v = self._eigenvectors
        return v @ ((v.T @ b) / self._eigenvalues[:, np.newaxis])
