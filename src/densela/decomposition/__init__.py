"""
####################################################
Matrix decompositions (:mod:`densela.decomposition`)
####################################################

.. currentmodule:: densela.decomposition

This module provides the decompositions of dense real matrices and the solvers of
linear equations built on them.

A decomposition copies its matrix when it is created. The ``builder`` class method of
each decomposition returns a callable that can be given to
:meth:`~densela.linalg.RealMatrix.get_inverse` or
:func:`~densela.config.set_default_decomposition`.

Decompositions
==============

.. autosummary::
    :toctree: generated/

    Decomposition
    LUDecomposition
    QRDecomposition
    SingularValueDecomposition
    UDDecomposition
    CholeskyDecomposition
    EigenDecomposition

Solvers
=======

.. autosummary::
    :toctree: generated/

    DecompositionSolver
    LUSolver
    QRSolver
    SVDSolver
    UDSolver
    CholeskySolver
    EigenSolver

"""

from .base import Decomposition, DecompositionSolver
from .cholesky import CholeskyDecomposition, CholeskySolver
from .eigen import EigenDecomposition, EigenSolver
from .lu import LUDecomposition, LUSolver
from .qr import QRDecomposition, QRSolver
from .svd import SingularValueDecomposition, SVDSolver
from .ud import UDDecomposition, UDSolver

__all__ = [
    "Decomposition",
    "DecompositionSolver",
    "LUDecomposition",
    "LUSolver",
    "QRDecomposition",
    "QRSolver",
    "SingularValueDecomposition",
    "SVDSolver",
    "UDDecomposition",
    "UDSolver",
    "CholeskyDecomposition",
    "CholeskySolver",
    "EigenDecomposition",
    "EigenSolver",
]
