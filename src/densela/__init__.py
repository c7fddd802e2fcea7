import logging

from . import config, decomposition, exceptions, linalg
from .decomposition import (
    CholeskyDecomposition,
    EigenDecomposition,
    LUDecomposition,
    QRDecomposition,
    SingularValueDecomposition,
    UDDecomposition,
)
from .exceptions import LinAlgError
from .linalg import (
    ArrayRealVector,
    RealMatrix,
    RealVector,
    create_identity,
    create_real_matrix,
    create_vector,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "config",
    "decomposition",
    "exceptions",
    "linalg",
    "LinAlgError",
    "RealVector",
    "ArrayRealVector",
    "RealMatrix",
    "create_real_matrix",
    "create_identity",
    "create_vector",
    "LUDecomposition",
    "QRDecomposition",
    "SingularValueDecomposition",
    "UDDecomposition",
    "CholeskyDecomposition",
    "EigenDecomposition",
]
