"""
Utility functions.
"""

import numpy as np

from .exceptions import NullInputError, InvalidInputError


def check_vector(y, name='y', dtype=np.float64):
    """Validate vector input."""
    if y is None:
        raise NullInputError(f"{name} is None", name=name)
    try:
        y = np.asarray(y, dtype=dtype)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name}: cannot convert to {np.dtype(dtype).name} array: {e}") from e
    if y.ndim != 1:
        raise InvalidInputError(f"{name} must be 1-dimensional, got {y.ndim} dimensions")
    if not np.all(np.isfinite(y)):
        raise InvalidInputError(f"{name} contains NaN or Inf")
    return y


def check_coefficient_count(n_coef, name='n_coef'):
    """Validate the number of polynomial coefficients."""
    if n_coef is None:
        raise NullInputError(f"{name} is None", name=name)
    if isinstance(n_coef, bool) or not isinstance(n_coef, (int, np.integer)):
        raise InvalidInputError(f"{name} must be an integer, got {type(n_coef).__name__}")
    if n_coef < 1:
        raise InvalidInputError(f"{name} must be >= 1, got {n_coef}")
    return int(n_coef)
