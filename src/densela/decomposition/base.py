from abc import ABC, abstractmethod
from typing import Any, overload

import numpy as np
import numpy.typing as npt

from densela.exceptions import (
    DimensionMismatchError,
    NonSymmetricMatrixError,
    NullArgumentError,
)
from densela.linalg import checks
from densela.linalg.matrix import Kind, RealMatrix, build
from densela.linalg.vector import ArrayRealVector, RealVector
from densela.typing import MatrixLike, VectorLike


class Decomposition(ABC):
    """Abstract base class for matrix decompositions.

    A decomposition copies its source matrix when it is created and computes its
    factors at once; later changes to the source matrix are not seen.
    """

    __slots__ = ()

    @abstractmethod
    def get_solver(self) -> "DecompositionSolver":
        """Return a solver of the linear equation ``A * x = b`` built on the
        factors."""
        raise NotImplementedError

    def __repr__(self) -> str:
        rows, columns = self.shape
        return f"<{type(self).__name__} of a {rows}x{columns} matrix>"

    @property
    @abstractmethod
    def shape(self) -> tuple[int, int]:
        """Shape of the decomposed matrix."""
        raise NotImplementedError


class DecompositionSolver(ABC):
    """Abstract base class for solvers of the linear equation ``A * x = b``.

    Subclasses implement :meth:`_solve` on two-dimensional arrays whose columns are
    right-hand sides; :meth:`solve` converts from and to the type of the argument.
    """

    __slots__ = ()

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Number of rows expected of a right-hand side."""
        raise NotImplementedError

    @abstractmethod
    def is_non_singular(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def _solve(self, b: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        raise NotImplementedError

    @overload
    def solve(self, b: RealVector) -> ArrayRealVector: ...

    @overload
    def solve(self, b: RealMatrix) -> RealMatrix: ...

    @overload
    def solve(
        self, b: npt.NDArray[np.float64] | VectorLike | MatrixLike
    ) -> npt.NDArray[np.float64]: ...

    def solve(self, b):
        """Solve ``A * x = b``.

        Parameters
        ----------
        b : RealVector | RealMatrix | ndarray | Sequence
            Right-hand side. The columns of a matrix are solved for independently.

        Returns
        -------
        ArrayRealVector | RealMatrix | ndarray
            Solution, with the type of `b`.

        Raises
        ------
        DimensionMismatchError
            If the length (or row dimension) of `b` differs from :attr:`dimension`.
        SingularMatrixError
            If the matrix is singular and the solver cannot handle it.
        """
        data, wrap = _unwrap(b)

        if len(data) != self.dimension:
            raise DimensionMismatchError(len(data), self.dimension)

        return wrap(self._solve(data))

    def get_inverse(self) -> RealMatrix:
        """Return the inverse of the matrix, computed by solving against the
        identity.

        Raises
        ------
        SingularMatrixError
            If the matrix is singular.
        """
        return build(Kind.GENERAL, self._solve(np.identity(self.dimension)))


def _unwrap(b: Any):
    if b is None:
        raise NullArgumentError("b")

    if isinstance(b, RealMatrix):
        return b.get_data(False), lambda x: build(Kind.GENERAL, x)

    if isinstance(b, RealVector):
        data = b.to_array()[:, np.newaxis]
        return data, lambda x: ArrayRealVector(x[:, 0], copy=False)

    data = np.asarray(b, np.float64)

    match data.ndim:
        case 1:
            return data[:, np.newaxis], lambda x: x[:, 0]

        case 2:
            return data, lambda x: x

        case _:
            message = "b must be one or two-dimensional"
            raise DimensionMismatchError(data.ndim, 2, message)


def solve_upper(
    u: npt.NDArray[np.float64], b: npt.NDArray[np.float64], unit: bool = False
) -> npt.NDArray[np.float64]:
    """Solve ``u * x = b`` by back substitution, `u` being upper triangular.

    Only the upper triangle of `u` is read; with `unit` set its diagonal is taken to
    be one.
    """
    n = u.shape[1]
    x = np.zeros((n, b.shape[1]))

    for i in range(n - 1, -1, -1):
        x[i] = b[i] - u[i, i + 1 : n] @ x[i + 1 :]

        if not unit:
            x[i] /= u[i, i]

    return x


def solve_lower(
    lower: npt.NDArray[np.float64], b: npt.NDArray[np.float64], unit: bool = False
) -> npt.NDArray[np.float64]:
    """Solve ``lower * x = b`` by forward substitution, `lower` being lower
    triangular."""
    n = lower.shape[1]
    x = np.zeros((n, b.shape[1]))

    for i in range(n):
        x[i] = b[i] - lower[i, :i] @ x[:i]

        if not unit:
            x[i] /= lower[i, i]

    return x


def as_snapshot(matrix: RealMatrix | MatrixLike) -> npt.NDArray[np.float64]:
    """Return a private copy of the entries of `matrix`."""
    return checks.as_matrix(matrix, "matrix", copy=True)


def check_relative_symmetry(data: npt.NDArray[np.float64], relative: float) -> None:
    """Check that every entry of `data` equals its symmetric counterpart up to
    `relative` times the largest of their magnitudes.

    Raises
    ------
    NonSymmetricMatrixError
        At the first entry, in row order, that differs from its counterpart.
    """
    for i in range(len(data)):
        row = data[i, i + 1 :]
        column = data[i + 1 :, i]
        tolerance = relative * np.maximum(np.abs(row), np.abs(column))
        offending = np.flatnonzero(np.abs(row - column) > tolerance)

        if len(offending):
            raise NonSymmetricMatrixError(i, i + 1 + int(offending[0]), relative)
