"""
Exception hierarchy for PyPolyfit.

Every error a fit can raise derives from PolyfitError and carries the
ErrorKind it belongs to, plus the integer status code that fit_into()
returns for it.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages state actual vs expected values
    - Nothing is recovered internally; errors reach the caller of fit()
"""

from enum import Enum
from typing import Optional, Tuple


class ErrorKind(Enum):
    """Failure kinds with their integer status codes."""
    NULL_INPUT = -1        # a required input or output buffer was absent
    UNDERDETERMINED = -2   # fewer observations than coefficients
    ALLOCATION = -3        # transient matrix allocation failed
    SINGULAR = -4          # zero pivot encountered during elimination
    SHAPE = -5             # kernel operands with incompatible shapes
    INVALID_INPUT = -6     # malformed input (lengths, non-finite, K < 1)

    @property
    def code(self) -> int:
        return self.value


class PolyfitError(Exception):
    """Base exception for all PyPolyfit errors."""

    kind: ErrorKind

    @property
    def code(self) -> int:
        return self.kind.code


class NullInputError(PolyfitError, ValueError):
    """A required input or output was None."""

    kind = ErrorKind.NULL_INPUT

    def __init__(self, message: str, name: Optional[str] = None):
        super().__init__(message)
        self.name = name


class UnderdeterminedError(PolyfitError, ValueError):
    """
    Fewer observations than coefficients.

    Attributes:
        n_obs: Number of (x, y) pairs supplied
        n_coef: Number of coefficients requested
    """

    kind = ErrorKind.UNDERDETERMINED

    def __init__(self, message: str, n_obs: int, n_coef: int):
        super().__init__(message)
        self.n_obs = n_obs
        self.n_coef = n_coef


class AllocationError(PolyfitError, MemoryError):
    """
    A transient matrix could not be allocated.

    Attributes:
        shape: (rows, cols) of the matrix that failed
    """

    kind = ErrorKind.ALLOCATION

    def __init__(self, message: str, shape: Optional[Tuple[int, int]] = None):
        super().__init__(message)
        self.shape = shape


class SingularMatrixError(PolyfitError, ArithmeticError):
    """
    Zero pivot encountered during Gauss-Jordan elimination.

    Attributes:
        column: Column whose pivot was exactly zero
        matrix_name: Name of the matrix being eliminated
    """

    kind = ErrorKind.SINGULAR

    def __init__(
        self,
        message: str,
        column: Optional[int] = None,
        matrix_name: Optional[str] = None
    ):
        super().__init__(message)
        self.column = column
        self.matrix_name = matrix_name


class ShapeError(PolyfitError, ValueError):
    """
    Matrix dimensions are incompatible with the requested operation.

    Attributes:
        left_shape: Shape of the left (or only) operand
        right_shape: Shape of the right operand, if any
    """

    kind = ErrorKind.SHAPE

    def __init__(
        self,
        message: str,
        left_shape: Optional[Tuple[int, int]] = None,
        right_shape: Optional[Tuple[int, int]] = None
    ):
        super().__init__(message)
        self.left_shape = left_shape
        self.right_shape = right_shape


class InvalidInputError(PolyfitError, ValueError):
    """Input present but malformed (unequal lengths, NaN/Inf, K < 1)."""

    kind = ErrorKind.INVALID_INPUT


class IllConditionedWarning(UserWarning):
    """The normal-equation matrix is ill-conditioned; results may be inaccurate."""


__all__ = [
    'ErrorKind',
    'PolyfitError',
    'NullInputError',
    'UnderdeterminedError',
    'AllocationError',
    'SingularMatrixError',
    'ShapeError',
    'InvalidInputError',
    'IllConditionedWarning',
]
