"""
############################################
Dense linear algebra (:mod:`densela.linalg`)
############################################

.. currentmodule:: densela.linalg

This module provides dense real vectors and matrices.

Every matrix carries a :class:`Kind`. Operations combining matrices pick the
representation of their result from the kinds of the operands, so that for instance
the sum of two symmetric positive semi-definite matrices is again stored as one.

Vectors
=======

.. autosummary::
    :toctree: generated/

    RealVector
    ArrayRealVector

Matrices
========

.. autosummary::
    :toctree: generated/

    Kind
    RealMatrix
    Array2DRowRealMatrix
    BlockRealMatrix
    DiagonalMatrix
    SymmetricMatrix
    SymmetricPositiveMatrix
    DecomposedSymmetricPositiveMatrix
    SymmetryType

Construction
============

.. autosummary::
    :toctree: generated/

    create_real_matrix
    create_identity
    create_diagonal
    create_row_matrix
    create_column_matrix
    create_vector
    concatenate_horizontally
    concatenate_vertically
    concatenate_diagonally

Operations
==========

.. autosummary::
    :toctree: generated/

    inverse
    is_singular
    norm
    solve

Visitors
========

.. autosummary::
    :toctree: generated/

    Order
    DefaultMatrixPreservingVisitor
    DefaultMatrixChangingVisitor
    DefaultVectorPreservingVisitor
    DefaultVectorChangingVisitor

Formats
=======

.. autosummary::
    :toctree: generated/

    MatrixFormat
    DEFAULT_FORMAT
    JAVA_FORMAT
    OCTAVE_FORMAT
    SCILAB_FORMAT
    VISUAL_FORMAT
    SUMMARY_FORMAT

"""

from . import formats
from .dense import Array2DRowRealMatrix, BlockRealMatrix, create_real_matrix
from .diagonal import DiagonalMatrix
from .formats import (
    DEFAULT_FORMAT,
    JAVA_FORMAT,
    OCTAVE_FORMAT,
    SCILAB_FORMAT,
    SUMMARY_FORMAT,
    VISUAL_FORMAT,
    MatrixFormat,
)
from .matrix import Kind, RealMatrix
from .symmetric import (
    DecomposedSymmetricPositiveMatrix,
    SymmetricMatrix,
    SymmetricPositiveMatrix,
    SymmetryType,
)
from .utils import (
    concatenate_diagonally,
    concatenate_horizontally,
    concatenate_vertically,
    create_column_matrix,
    create_diagonal,
    create_identity,
    create_row_matrix,
    create_vector,
    inverse,
    is_singular,
    norm,
    solve,
)
from .vector import ArrayRealVector, RealVector
from .visitors import (
    DefaultMatrixChangingVisitor,
    DefaultMatrixPreservingVisitor,
    DefaultVectorChangingVisitor,
    DefaultVectorPreservingVisitor,
    Order,
)

__all__ = [
    "formats",
    "RealVector",
    "ArrayRealVector",
    "Kind",
    "RealMatrix",
    "Array2DRowRealMatrix",
    "BlockRealMatrix",
    "DiagonalMatrix",
    "SymmetricMatrix",
    "SymmetricPositiveMatrix",
    "DecomposedSymmetricPositiveMatrix",
    "SymmetryType",
    "create_real_matrix",
    "create_identity",
    "create_diagonal",
    "create_row_matrix",
    "create_column_matrix",
    "create_vector",
    "concatenate_horizontally",
    "concatenate_vertically",
    "concatenate_diagonally",
    "inverse",
    "is_singular",
    "norm",
    "solve",
    "Order",
    "DefaultMatrixPreservingVisitor",
    "DefaultMatrixChangingVisitor",
    "DefaultVectorPreservingVisitor",
    "DefaultVectorChangingVisitor",
    "MatrixFormat",
    "DEFAULT_FORMAT",
    "JAVA_FORMAT",
    "OCTAVE_FORMAT",
    "SCILAB_FORMAT",
    "VISUAL_FORMAT",
    "SUMMARY_FORMAT",
]
