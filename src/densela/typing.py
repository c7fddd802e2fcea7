"""
##############################
Typing (:mod:`densela.typing`)
##############################

This module provides type definitions commonly used between modules.

.. autoclass:: MatrixPreservingVisitor
    :show-inheritance:
    :no-members:

.. autoclass:: MatrixChangingVisitor
    :show-inheritance:
    :no-members:

.. autoclass:: VectorPreservingVisitor
    :show-inheritance:
    :no-members:

.. autoclass:: VectorChangingVisitor
    :show-inheritance:
    :no-members:

"""

from abc import abstractmethod
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Protocol, TypeAlias

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from densela.decomposition.base import Decomposition
    from densela.linalg.matrix import RealMatrix

VectorLike: TypeAlias = npt.NDArray[np.float64] | Sequence[float]
MatrixLike: TypeAlias = npt.NDArray[np.float64] | Sequence[Sequence[float]]
DecompositionBuilder: TypeAlias = Callable[["RealMatrix"], "Decomposition"]


class MatrixPreservingVisitor(Protocol):
    """Protocol of visitors reading the entries of a matrix.

    :meth:`start` is called once before the traversal, :meth:`visit` once per entry,
    and the value returned by :meth:`end` is the result of the walk.
    """

    __slots__ = ()

    @abstractmethod
    def start(
        self,
        rows: int,
        columns: int,
        start_row: int,
        end_row: int,
        start_column: int,
        end_column: int,
    ) -> None: ...

    @abstractmethod
    def visit(self, row: int, column: int, value: float) -> None: ...

    @abstractmethod
    def end(self) -> float: ...


class MatrixChangingVisitor(Protocol):
    """Protocol of visitors replacing the entries of a matrix.

    The value returned by :meth:`visit` becomes the new value of the entry.
    """

    __slots__ = ()

    @abstractmethod
    def start(
        self,
        rows: int,
        columns: int,
        start_row: int,
        end_row: int,
        start_column: int,
        end_column: int,
    ) -> None: ...

    @abstractmethod
    def visit(self, row: int, column: int, value: float) -> float: ...

    @abstractmethod
    def end(self) -> float: ...


class VectorPreservingVisitor(Protocol):
    """Protocol of visitors reading the entries of a vector."""

    __slots__ = ()

    @abstractmethod
    def start(self, dimension: int, start: int, end: int) -> None: ...

    @abstractmethod
    def visit(self, index: int, value: float) -> None: ...

    @abstractmethod
    def end(self) -> float: ...


class VectorChangingVisitor(Protocol):
    """Protocol of visitors replacing the entries of a vector."""

    __slots__ = ()

    @abstractmethod
    def start(self, dimension: int, start: int, end: int) -> None: ...

    @abstractmethod
    def visit(self, index: int, value: float) -> float: ...

    @abstractmethod
    def end(self) -> float: ...
