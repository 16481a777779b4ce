"""
Polynomial least-squares fitting.

This is the user-facing API: fit() for plain coefficient arrays,
fit_into() for status-code style callers, and PolynomialModel for a
fitted-model object with a printable summary.
"""

import numpy as np
import pandas as pd
from typing import Optional, Union

from ._backends import get_backend, KernelBackend
from ._core.solver import NormalEquationSolver
from ._timing import Timer
from ._utils import check_vector, check_coefficient_count
from .config import FitConfig
from .exceptions import (
    ErrorKind,
    InvalidInputError,
    NullInputError,
    PolyfitError,
    UnderdeterminedError,
)
from .formatting import poly_to_string


def _validate(x, y, n_coef):
    """Validate a fit request; returns float64 copies-or-views of x and y."""
    if x is None:
        raise NullInputError("x is None", name='x')
    if y is None:
        raise NullInputError("y is None", name='y')
    n_coef = check_coefficient_count(n_coef)
    x = check_vector(x, name='x')
    y = check_vector(y, name='y')

    if len(x) != len(y):
        raise InvalidInputError(
            f"x and y must have the same length, got {len(x)} and {len(y)}"
        )
    if len(x) < n_coef:
        raise UnderdeterminedError(
            f"Need at least {n_coef} observations for {n_coef} coefficients "
            f"(degree {n_coef - 1}), got {len(x)}",
            n_obs=len(x),
            n_coef=n_coef
        )
    return x, y, n_coef


def _resolve_backend(backend, config: FitConfig) -> KernelBackend:
    if backend is None:
        return get_backend('auto', workers=config.workers)
    if isinstance(backend, str):
        return get_backend(backend, workers=config.workers)
    return backend


def fit(
    x,
    y,
    n_coef: int,
    config: Optional[FitConfig] = None,
    backend: Union[str, KernelBackend, None] = None,
    timer: Optional[Timer] = None
) -> np.ndarray:
    """
    Least-squares polynomial fit via the normal equations.

    Parameters
    ----------
    x, y : sequence of float
        Observations, equal length N (not modified)
    n_coef : int
        Number of coefficients K; the polynomial has degree K - 1
    config : FitConfig, optional
        Worker count, transpose tile size, pow strategy, pivoting and
        the conditioning warning threshold
    backend : str or KernelBackend, optional
        Kernel backend or its name ('auto', 'threads', 'serial', 'torch');
        names are sized with config.workers
    timer : Timer, optional
        Receives per-stage timings

    Returns
    -------
    ndarray, shape (n_coef,)
        Coefficients, highest degree first: entry i multiplies x^(K-1-i)

    Raises
    ------
    NullInputError
        x or y is None
    UnderdeterminedError
        N < K
    AllocationError
        A transient matrix could not be allocated
    SingularMatrixError
        A zero pivot was met during elimination
    InvalidInputError
        Unequal lengths, non-finite values, or K < 1

    Examples
    --------
    >>> fit([0, 1, 2], [6, 0, 0], 2)
    array([-3.,  5.])
    """
    x, y, n_coef = _validate(x, y, n_coef)
    config = config if config is not None else FitConfig()
    solver = NormalEquationSolver(_resolve_backend(backend, config), config)
    return solver.solve(x, y, n_coef, timer=timer)


def fit_into(x, y, out, config: Optional[FitConfig] = None, backend=None) -> int:
    """
    Fit len(out) coefficients and write them into out.

    Status-code form of fit(): returns 0 on success or the negative code
    of the ErrorKind that stopped the fit (-1 null input, -2
    underdetermined, -3 allocation, -4 singular, -6 invalid input).
    ``out`` is only written on success; a non 1-D ``out`` gives -6.

    Examples
    --------
    >>> out = np.zeros(2)
    >>> fit_into([1, 2, 3, 4, 5], [2, 4, 6, 8, 10], out)
    0
    """
    if out is None:
        return ErrorKind.NULL_INPUT.code
    if np.ndim(out) != 1:
        return ErrorKind.INVALID_INPUT.code
    try:
        coefficients = fit(x, y, len(out), config=config, backend=backend)
    except PolyfitError as e:
        return e.code
    out[:] = coefficients
    return 0


class PolynomialModel:
    """
    Fit a polynomial by least squares (normal equations).

    Examples
    --------
    >>> model = PolynomialModel([-2, -1, 0, 1, 2], [0, 0, 1, 0, 0], 3)
    >>> str(model)
    '(-0.142857 * x^2) + 0.485714'
    >>> model.coef
    x^2   -0.142857
    x      0.000000
    1      0.485714
    dtype: float64
    >>> model.summary()
    """

    def __init__(
        self,
        x,
        y,
        n_coef: int,
        backend: Union[str, KernelBackend] = 'auto',
        config: Optional[FitConfig] = None,
        **options
    ):
        """
        Fit the model.

        Parameters
        ----------
        x, y : sequence of float
            Observations
        n_coef : int
            Number of coefficients (degree + 1)
        backend : str or KernelBackend
            Kernel backend: 'auto', 'threads', 'serial', 'torch'
        config : FitConfig, optional
            Full configuration; mutually exclusive with **options
        **options
            FitConfig fields (workers, transpose_block, pow_strategy,
            pivoting, condition_threshold)
        """
        if config is not None and options:
            raise ValueError("Pass either config or FitConfig options, not both")
        self.config = config if config is not None else FitConfig(**options)

        self.x_values, self.y_values, self.n_coef = _validate(x, y, n_coef)
        self.n_obs = len(self.x_values)
        self.degree = self.n_coef - 1
        self.term_names = [_term_name(self.degree - i) for i in range(self.n_coef)]

        self.backend = _resolve_backend(backend, self.config)
        self._solver = NormalEquationSolver(self.backend, self.config)

        timer = Timer()
        timer.start()
        self.coefficients = self._solver.solve(
            self.x_values, self.y_values, self.n_coef, timer=timer
        )
        timer.stop()
        self.timing = timer.result()
        self.condition_number = self._solver.condition_number

    @property
    def coef(self) -> pd.Series:
        """Coefficients indexed by term (pandas Series, highest degree first)."""
        return pd.Series(self.coefficients, index=self.term_names)

    def summary(self):
        """Print the fitted polynomial, coefficients and stage timings."""
        print()
        print("=" * 60)
        print("POLYNOMIAL LEAST-SQUARES FIT")
        print("=" * 60)
        print()
        print(f"Number of observations: {self.n_obs}")
        print(f"Degree:                 {self.degree}")
        if self.condition_number is not None:
            print(f"cond(A'A):              {self.condition_number:.3e}")
        print()

        print("Coefficients:")
        print("-" * 60)
        print(f"{'Term':<10} {'Estimate':>20}")
        print("-" * 60)
        for name, value in zip(self.term_names, self.coefficients):
            print(f"{name:<10} {value:>20.10g}")
        print("-" * 60)
        print()

        print(f"y = {str(self) or '0'}")
        print()

        print("Timing (seconds):")
        for stage, seconds in self.timing.items():
            print(f"  {stage:<16} {seconds:>12.6f}")
        print()
        print(f"Backend: {self.backend.name} ({self.backend.workers} workers)")
        print("=" * 60)
        print()

    def __str__(self):
        return poly_to_string(self.coefficients)

    def __repr__(self):
        return f"PolynomialModel(n={self.n_obs}, degree={self.degree})"


def _term_name(exponent: int) -> str:
    if exponent == 0:
        return '1'
    if exponent == 1:
        return 'x'
    return f'x^{exponent}'


def polyfit(x, y, n_coef, **kwargs):
    """
    Fit a polynomial (convenience function).

    Parameters
    ----------
    x, y : sequence of float
        Observations
    n_coef : int
        Number of coefficients (degree + 1)
    **kwargs
        Additional arguments passed to PolynomialModel

    Returns
    -------
    PolynomialModel
        Fitted model object

    Examples
    --------
    >>> model = polyfit([0, 1, 2], [6, 0, 0], 2)
    >>> print(model)
    (-3.000000 * x) + 5.000000
    """
    return PolynomialModel(x, y, n_coef, **kwargs)
