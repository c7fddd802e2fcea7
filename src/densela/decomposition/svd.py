import logging
import math
from collections.abc import Callable

import numpy as np
import numpy.typing as npt

from densela import config
from densela.decomposition.base import Decomposition, DecompositionSolver, as_snapshot
from densela.exceptions import TooLargeCutoffError
from densela.linalg.matrix import Kind, RealMatrix, build
from densela.typing import MatrixLike

logger = logging.getLogger(__name__)

# Relative threshold for small singular values.
EPS = 2.0**-52

# Absolute threshold for small singular values.
TINY = 2.0**-966


def _rotate(
    x: npt.NDArray[np.float64], j: int, k: int, cs: float, sn: float
) -> None:
    """Apply a plane rotation to the columns `j` and `k` of `x`, in place."""
    t = cs * x[:, j] + sn * x[:, k]
    x[:, k] = -sn * x[:, j] + cs * x[:, k]
    x[:, j] = t


class SingularValueDecomposition(Decomposition):
    """Compact singular value decomposition ``A = U * S * V^T``.

    For a ``m x n`` matrix and ``p = min(m, n)``, ``U`` is ``m x p``, ``S`` is the
    ``p x p`` diagonal matrix of the singular values in decreasing order and ``V``
    is ``n x p``.

    The matrix is reduced to bidiagonal form by Householder reflections, then the
    bidiagonal matrix is diagonalized by implicit-shift QR sweeps.

    Parameters
    ----------
    matrix : RealMatrix | ndarray | Sequence[Sequence[float]]
        Matrix to decompose, of any shape.

    Examples
    --------
    >>> from densela.decomposition import SingularValueDecomposition
    >>> svd = SingularValueDecomposition([[3.0, 0.0], [0.0, -4.0]])
    >>> svd.get_singular_values().tolist()
    [4.0, 3.0]
    >>> svd.get_rank()
    2
    """

    __slots__ = ("_singular_values", "_u", "_v", "_m", "_n", "_shape", "_tol")
    _singular_values: npt.NDArray[np.float64]
    _u: npt.NDArray[np.float64]
    _v: npt.NDArray[np.float64]
    _m: int
    _n: int
    _shape: tuple[int, int]
    _tol: float

    def __init__(self, matrix: RealMatrix | MatrixLike):
        a = as_snapshot(matrix)
        self._shape = a.shape  # type: ignore
        transposed = a.shape[0] < a.shape[1]

        # m is always the largest dimension
        if transposed:
            a = a.T.copy()

        m, n = a.shape
        self._m = m
        self._n = n
        s = np.zeros(n)
        u = np.zeros((m, n))
        v = np.zeros((n, n))
        e = np.zeros(n)
        work = np.zeros(m)

        # reduce A to bidiagonal form, storing the diagonal in s and the
        # super-diagonal in e
        nct = min(m - 1, n)
        nrt = max(0, n - 2)

        for k in range(max(nct, nrt)):
            if k < nct:
                s[k] = np.linalg.norm(a[k:, k])

                if s[k] != 0.0:
                    if a[k, k] < 0.0:
                        s[k] = -s[k]

                    a[k:, k] /= s[k]
                    a[k, k] += 1.0

                s[k] = -s[k]

            if k < nct and s[k] != 0.0:
                t = -(a[k:, k] @ a[k:, k + 1 :]) / a[k, k]
                a[k:, k + 1 :] += np.outer(a[k:, k], t)

            e[k + 1 :] = a[k, k + 1 :]

            if k < nct:
                u[k:, k] = a[k:, k]

            if k < nrt:
                e[k] = np.linalg.norm(e[k + 1 :])

                if e[k] != 0.0:
                    if e[k + 1] < 0.0:
                        e[k] = -e[k]

                    e[k + 1 :] /= e[k]
                    e[k + 1] += 1.0

                e[k] = -e[k]

                if k + 1 < m and e[k] != 0.0:
                    work[k + 1 :] = a[k + 1 :, k + 1 :] @ e[k + 1 :]
                    ratio = -e[k + 1 :] / e[k + 1]
                    a[k + 1 :, k + 1 :] += np.outer(work[k + 1 :], ratio)

                v[k + 1 :, k] = e[k + 1 :]

        # set up the final bidiagonal matrix of order p
        p = n

        if nct < n:
            s[nct] = a[nct, nct]

        if m < p:
            s[p - 1] = 0.0

        if nrt + 1 < p:
            e[nrt] = a[nrt, p - 1]

        e[p - 1] = 0.0

        # generate U
        for j in range(nct, n):
            u[:, j] = 0.0
            u[j, j] = 1.0

        for k in range(nct - 1, -1, -1):
            if s[k] != 0.0:
                t = -(u[k:, k] @ u[k:, k + 1 :]) / u[k, k]
                u[k:, k + 1 :] += np.outer(u[k:, k], t)
                u[k:, k] = -u[k:, k]
                u[k, k] += 1.0
                u[:k, k] = 0.0
            else:
                u[:, k] = 0.0
                u[k, k] = 1.0

        # generate V
        for k in range(n - 1, -1, -1):
            if k < nrt and e[k] != 0.0:
                t = -(v[k + 1 :, k] @ v[k + 1 :, k + 1 :]) / v[k + 1, k]
                v[k + 1 :, k + 1 :] += np.outer(v[k + 1 :, k], t)

            v[:, k] = 0.0
            v[k, k] = 1.0

        iterations = self._diagonalize(s, e, u, v, p)
        logger.debug(
            "SVD of a %dx%d matrix: %d iterations", *self._shape, iterations
        )

        self._tol = max(m * s[0] * EPS, math.sqrt(config.SAFE_MIN))
        self._singular_values = s

        if transposed:
            self._u, self._v = v, u
        else:
            self._u, self._v = u, v

    def _diagonalize(
        self,
        s: npt.NDArray[np.float64],
        e: npt.NDArray[np.float64],
        u: npt.NDArray[np.float64],
        v: npt.NDArray[np.float64],
        p: int,
    ) -> int:
        pp = p - 1
        iterations = 0

        while p > 0:
            iterations += 1

            # kase 1: s[p - 1] and e[k - 1] are negligible and k < p
            # kase 2: s[k] is negligible and k < p
            # kase 3: e[k - 1] is negligible, k < p, and s[k], ..., s[p - 1] are not
            # kase 4: e[p - 2] is negligible (convergence)
            k = p - 2

            while k >= 0:
                threshold = TINY + EPS * (abs(s[k]) + abs(s[k + 1]))

                # written this way to stop on NaN
                if not abs(e[k]) > threshold:
                    e[k] = 0.0
                    break

                k -= 1

            if k == p - 2:
                kase = 4
            else:
                ks = p - 1

                while ks > k:
                    t = abs(e[ks]) if ks != p else 0.0
                    t += abs(e[ks - 1]) if ks != k + 1 else 0.0

                    if abs(s[ks]) <= TINY + EPS * t:
                        s[ks] = 0.0
                        break

                    ks -= 1

                if ks == k:
                    kase = 3
                elif ks == p - 1:
                    kase = 1
                else:
                    kase = 2
                    k = ks

            k += 1

            match kase:
                case 1:
                    # deflate negligible s[p - 1]
                    f = e[p - 2]
                    e[p - 2] = 0.0

                    for j in range(p - 2, k - 1, -1):
                        t = math.hypot(s[j], f)
                        cs = s[j] / t
                        sn = f / t
                        s[j] = t

                        if j != k:
                            f = -sn * e[j - 1]
                            e[j - 1] = cs * e[j - 1]

                        _rotate(v, j, p - 1, cs, sn)

                case 2:
                    # split at negligible s[k]
                    f = e[k - 1]
                    e[k - 1] = 0.0

                    for j in range(k, p):
                        t = math.hypot(s[j], f)
                        cs = s[j] / t
                        sn = f / t
                        s[j] = t
                        f = -sn * e[j]
                        e[j] = cs * e[j]
                        _rotate(u, j, k - 1, cs, sn)

                case 3:
                    # one QR step, starting with the shift
                    scale = max(
                        abs(s[p - 1]),
                        abs(s[p - 2]),
                        abs(e[p - 2]),
                        abs(s[k]),
                        abs(e[k]),
                    )
                    sp = s[p - 1] / scale
                    spm1 = s[p - 2] / scale
                    epm1 = e[p - 2] / scale
                    sk = s[k] / scale
                    ek = e[k] / scale
                    b = ((spm1 + sp) * (spm1 - sp) + epm1 * epm1) / 2.0
                    c = (sp * epm1) * (sp * epm1)
                    shift = 0.0

                    if b != 0.0 or c != 0.0:
                        shift = math.sqrt(b * b + c)

                        if b < 0.0:
                            shift = -shift

                        shift = c / (b + shift)

                    f = (sk + sp) * (sk - sp) + shift
                    g = sk * ek

                    # chase zeros
                    for j in range(k, p - 1):
                        t = math.hypot(f, g)
                        cs = f / t
                        sn = g / t

                        if j != k:
                            e[j - 1] = t

                        f = cs * s[j] + sn * e[j]
                        e[j] = cs * e[j] - sn * s[j]
                        g = sn * s[j + 1]
                        s[j + 1] = cs * s[j + 1]
                        _rotate(v, j, j + 1, cs, sn)
                        t = math.hypot(f, g)
                        cs = f / t
                        sn = g / t
                        s[j] = t
                        f = cs * e[j] + sn * s[j + 1]
                        s[j + 1] = -sn * e[j] + cs * s[j + 1]
                        g = sn * e[j + 1]
                        e[j + 1] = cs * e[j + 1]

                        if j < self._m - 1:
                            _rotate(u, j, j + 1, cs, sn)

                    e[p - 2] = f

                case _:
                    # make the singular value positive
                    if s[k] <= 0.0:
                        s[k] = -s[k] if s[k] < 0.0 else 0.0
                        v[: pp + 1, k] = -v[: pp + 1, k]

                    # order the singular values
                    while k < pp and s[k] < s[k + 1]:
                        s[k], s[k + 1] = s[k + 1], s[k]

                        if k < self._n - 1:
                            v[:, [k, k + 1]] = v[:, [k + 1, k]]

                        if k < self._m - 1:
                            u[:, [k, k + 1]] = u[:, [k + 1, k]]

                        k += 1

                    p -= 1

        return iterations

    @classmethod
    def builder(cls) -> Callable[[RealMatrix], "SingularValueDecomposition"]:
        return cls

    @property
    def shape(self) -> tuple[int, int]:
        return self._shape

    def get_u(self) -> RealMatrix:
        return build(Kind.GENERAL, self._u.copy())

    def get_ut(self) -> RealMatrix:
        return build(Kind.GENERAL, self._u.T.copy())

    def get_s(self) -> RealMatrix:
        """Return the diagonal matrix of the singular values."""
        return build(Kind.DIAGONAL, np.diag(self._singular_values))

    def get_singular_values(self) -> npt.NDArray[np.float64]:
        """Return the singular values in decreasing order."""
        return self._singular_values.copy()

    def get_v(self) -> RealMatrix:
        return build(Kind.GENERAL, self._v.copy())

    def get_vt(self) -> RealMatrix:
        return build(Kind.GENERAL, self._v.T.copy())

    def get_covariance(self, min_singular_value: float) -> RealMatrix:
        """Return the ``n x n`` covariance matrix ``V * S^-2 * V^T``.

        Only the singular values greater than or equal to `min_singular_value` are
        taken into account.

        Raises
        ------
        TooLargeCutoffError
            If `min_singular_value` is larger than the largest singular value.
        """
        s = self._singular_values
        dimension = 0

        while dimension < len(s) and s[dimension] >= min_singular_value:
            dimension += 1

        if dimension == 0:
            raise TooLargeCutoffError(min_singular_value, float(s[0]))

        jv = self._v[:, :dimension].T / s[:dimension, np.newaxis]
        return build(Kind.SYMMETRIC_POSITIVE, jv.T @ jv)

    def get_norm(self) -> float:
        """Return the L2 norm of the matrix, its largest singular value."""
        return float(self._singular_values[0])

    def get_condition_number(self) -> float:
        s = self._singular_values
        return float(s[0] / s[-1])

    def get_inverse_condition_number(self) -> float:
        s = self._singular_values
        return float(s[-1] / s[0])

    def get_rank(self) -> int:
        """Return the number of singular values above the tolerance
        ``max(m * s[0] * EPS, sqrt(SAFE_MIN))``, ``m`` being the largest
        dimension."""
        return int(np.count_nonzero(self._singular_values > self._tol))

    def get_solver(self) -> "SVDSolver":
        return SVDSolver(
            self._singular_values,
            self._u,
            self._v,
            self.get_rank() == self._m,
            self._tol,
        )


class SVDSolver(DecompositionSolver):
    """Solver built on a singular value decomposition.

    The solver applies the pseudo-inverse of the matrix, so that it returns the
    least-squares solution of systems that are rectangular or singular.
    """

    __slots__ = ("_pseudo_inverse", "_non_singular")
    _pseudo_inverse: npt.NDArray[np.float64]
    _non_singular: bool

    def __init__(
        self,
        singular_values: npt.NDArray[np.float64],
        u: npt.NDArray[np.float64],
        v: npt.NDArray[np.float64],
        non_singular: bool,
        tol: float,
    ):
        inverse = np.zeros_like(singular_values)
        kept = singular_values > tol
        inverse[kept] = 1.0 / singular_values[kept]
        self._pseudo_inverse = v @ (inverse[:, np.newaxis] * u.T)
        self._non_singular = non_singular

    @property
    def dimension(self) -> int:
        return self._pseudo_inverse.shape[1]

    def is_non_singular(self) -> bool:
        return self._non_singular

    def _solve(self, b: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        if not self._non_singular:
            logger.warning("solving a singular or rectangular system in least squares")

        return self._pseudo_inverse @ b

    def get_inverse(self) -> RealMatrix:
        """Return the pseudo-inverse of the matrix."""
        return build(Kind.GENERAL, self._pseudo_inverse.copy())
