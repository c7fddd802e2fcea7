"""
#####################################
Configuration (:mod:`densela.config`)
#####################################

.. currentmodule:: densela.config

Process-wide defaults shared by the matrix variants and the decompositions.

Thresholds
==========

Structured matrices built from full arrays check their invariant against a pair of
absolute/relative thresholds. A threshold set to ``None`` is not taken into account;
when both are ``None`` no check is made and the invariant is simply enforced.

.. autosummary::
    :toctree: generated/

    Thresholds
    get_default_symmetry_thresholds
    set_default_symmetry_thresholds
    reset_default_symmetry_thresholds
    get_default_positivity_thresholds
    set_default_positivity_thresholds
    reset_default_positivity_thresholds

Decomposition builder
=====================

.. autosummary::
    :toctree: generated/

    get_default_decomposition
    set_default_decomposition
    reset_default_decomposition

"""

import dataclasses
import math
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from densela.decomposition.base import Decomposition
    from densela.linalg.matrix import RealMatrix

# Relative comparison tolerance used by the ``is_*`` predicates.
DOUBLE_COMPARISON_EPSILON = 1e-14

# Smallest positive normal double.
SAFE_MIN = 2.0**-1022

# Unit roundoff.
EPSILON = 2.0**-53

DEFAULT_LU_THRESHOLD = 1e-11
DEFAULT_QR_THRESHOLD = 0.0
DEFAULT_CHOLESKY_RELATIVE_SYMMETRY_THRESHOLD = 1e-15
DEFAULT_CHOLESKY_ABSOLUTE_POSITIVITY_THRESHOLD = 1e-10
DEFAULT_UD_RELATIVE_SYMMETRY_THRESHOLD = 1e-15
DEFAULT_UD_ABSOLUTE_POSITIVITY_THRESHOLD = 1e-10

# Side of the square tiles of block matrices.
BLOCK_SIZE = 52

# Number of entries above which a general matrix is stored in blocks.
MAX_DENSE_SIZE = 4096


@dataclasses.dataclass(frozen=True, slots=True)
class Thresholds:
    """Absolute/relative threshold pair.

    Attributes
    ----------
    absolute : float | None
    relative : float | None
    """

    absolute: float | None = None
    relative: float | None = None

    def __post_init__(self):
        for name in ("absolute", "relative"):
            value = getattr(self, name)

            if value is not None and (math.isnan(value) or value < 0.0):
                raise ValueError(f"{name} threshold must be a non-negative number")

    @property
    def enabled(self) -> bool:
        """``True`` if at least one of the thresholds is set."""
        return self.absolute is not None or self.relative is not None

    def effective(self, scale: float) -> float:
        """Return ``max(absolute, relative * scale)``, ignoring unset thresholds."""
        return max(self.absolute or 0.0, (self.relative or 0.0) * scale)


DEFAULT_SYMMETRY = Thresholds(
    absolute=DOUBLE_COMPARISON_EPSILON, relative=DOUBLE_COMPARISON_EPSILON
)
DEFAULT_POSITIVITY = Thresholds(absolute=0.0, relative=DOUBLE_COMPARISON_EPSILON)
NO_CHECK = Thresholds()

_symmetry = DEFAULT_SYMMETRY
_positivity = DEFAULT_POSITIVITY
_decomposition: "Callable[[RealMatrix], Decomposition] | None" = None


def get_default_symmetry_thresholds() -> Thresholds:
    return _symmetry


def set_default_symmetry_thresholds(thresholds: Thresholds) -> None:
    """Set the thresholds used when a symmetric matrix is built from a full array."""
    global _symmetry

    if not isinstance(thresholds, Thresholds):
        raise TypeError(f"expected Thresholds, got {type(thresholds).__name__}")

    _symmetry = thresholds


def reset_default_symmetry_thresholds() -> None:
    global _symmetry
    _symmetry = DEFAULT_SYMMETRY


def get_default_positivity_thresholds() -> Thresholds:
    return _positivity


def set_default_positivity_thresholds(thresholds: Thresholds) -> None:
    """Set the thresholds used when a positive semi-definite matrix is built from a
    full array."""
    global _positivity

    if not isinstance(thresholds, Thresholds):
        raise TypeError(f"expected Thresholds, got {type(thresholds).__name__}")

    _positivity = thresholds


def reset_default_positivity_thresholds() -> None:
    global _positivity
    _positivity = DEFAULT_POSITIVITY


def get_default_decomposition() -> "Callable[[RealMatrix], Decomposition]":
    """Return the decomposition builder used by ``get_inverse``.

    Unless overridden by :func:`set_default_decomposition`, this is an LU
    decomposition with a singularity threshold of ``DEFAULT_LU_THRESHOLD``.
    """
    if _decomposition is not None:
        return _decomposition

    from densela.decomposition.lu import LUDecomposition

    return LUDecomposition.builder(DEFAULT_LU_THRESHOLD)


def set_default_decomposition(
    builder: "Callable[[RealMatrix], Decomposition] | None",
) -> None:
    """Set the process-wide decomposition builder; ``None`` restores the default."""
    global _decomposition

    if builder is not None and not callable(builder):
        raise TypeError(f"expected a callable, got {type(builder).__name__}")

    _decomposition = builder


def reset_default_decomposition() -> None:
    set_default_decomposition(None)
