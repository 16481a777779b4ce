"""
PyPolyfit: least-squares polynomial fitting with parallel matrix kernels.

Copyright (C) 2024 SGCX
Licensed under GPL-3.0
"""

__version__ = "1.0.0"

# Import main user-facing API
from .polyfit import fit, fit_into, polyfit, PolynomialModel
from .formatting import poly_to_string, parse_polynomial
from .config import FitConfig
from .io import read_points
from .exceptions import (
    ErrorKind,
    PolyfitError,
    NullInputError,
    UnderdeterminedError,
    AllocationError,
    SingularMatrixError,
    ShapeError,
    InvalidInputError,
    IllConditionedWarning,
)

# Import backend utilities (for advanced users)
from ._backends import get_backend, list_available_backends

__all__ = [
    'fit',
    'fit_into',
    'polyfit',
    'PolynomialModel',
    'poly_to_string',
    'parse_polynomial',
    'FitConfig',
    'read_points',
    'ErrorKind',
    'PolyfitError',
    'NullInputError',
    'UnderdeterminedError',
    'AllocationError',
    'SingularMatrixError',
    'ShapeError',
    'InvalidInputError',
    'IllConditionedWarning',
    'get_backend',
    'list_available_backends',
]
