"""
Normal-equation least-squares solver.

Builds the Vandermonde design matrix, forms A'A and A'b with the backend
kernels, then solves (A'A) c = A'b by in-place Gauss-Jordan elimination.
"""

from contextlib import ExitStack
from enum import Enum
from typing import Optional

import numpy as np

from .matrix import Matrix
from .conditioning import check_conditioning
from .._timing import Timer, null_section
from ..config import FitConfig
from ..exceptions import (
    AllocationError,
    ErrorKind,
    PolyfitError,
    SingularMatrixError,
)


class SolverState(Enum):
    """Lifecycle of a NormalEquationSolver."""
    READY = "ready"
    BUILDING_A = "building_a"
    BUILDING_ATA = "building_ata"
    ELIMINATING = "eliminating"
    NORMALIZING = "normalizing"
    DONE = "done"
    FAILED = "failed"


# Linear order of the non-terminal states; FAILED is reachable from any of them.
_NEXT_STATE = {
    SolverState.READY: SolverState.BUILDING_A,
    SolverState.BUILDING_A: SolverState.BUILDING_ATA,
    SolverState.BUILDING_ATA: SolverState.ELIMINATING,
    SolverState.ELIMINATING: SolverState.NORMALIZING,
    SolverState.NORMALIZING: SolverState.DONE,
}


def gauss_jordan(ata: np.ndarray, atb: np.ndarray, pivoting: str = 'diagonal') -> None:
    """
    Eliminate every off-diagonal entry of ata in place.

    Row operations are mirrored on atb. For column c the pivot row is c
    itself; with pivoting='partial' the row with the largest |ata[r, c]|
    (r >= c) is first swapped into place. A pivot of exactly 0.0 stops
    the sweep.

    Parameters
    ----------
    ata : ndarray, shape (k, k)
        Normal-equation matrix, overwritten
    atb : ndarray, shape (k,)
        Right-hand side, overwritten
    pivoting : str
        'diagonal' or 'partial'

    Raises
    ------
    SingularMatrixError
        If a pivot is exactly zero
    """
    k = ata.shape[0]
    for c in range(k):
        if pivoting == 'partial':
            p = c + int(np.argmax(np.abs(ata[c:, c])))
            if p != c:
                ata[[c, p]] = ata[[p, c]]
                atb[[c, p]] = atb[[p, c]]

        pivot = ata[c, c]
        if pivot == 0.0:
            raise SingularMatrixError(
                f"Unable to solve normal equations: zero pivot in column {c} of {k}",
                column=c,
                matrix_name="A'A"
            )

        for r in range(k):
            if r == c:
                continue
            target = ata[r, c]
            # (pivot row * target) / pivot, i.e. f * pivot row with f = target / pivot;
            # multiplying first keeps exactly representable cancellations exact
            ata[r] -= ata[c] * target / pivot
            atb[r] -= atb[c] * target / pivot


def normalize_diagonal(ata: np.ndarray, atb: np.ndarray) -> None:
    """Divide each row's right-hand side (and its diagonal) by the pivot."""
    for c in range(ata.shape[0]):
        pivot = ata[c, c]
        ata[c, c] /= pivot
        atb[c] /= pivot


class NormalEquationSolver:
    """
    One-shot normal-equation solve.

    States run READY -> BUILDING_A -> BUILDING_ATA -> ELIMINATING ->
    NORMALIZING -> DONE; any error moves the solver to FAILED and records
    the ErrorKind in ``failure``. Every transient matrix is released on
    every exit path.

    Examples
    --------
    >>> from pypolyfit._backends import get_backend
    >>> solver = NormalEquationSolver(get_backend('serial'))
    >>> solver.solve(np.array([0., 1., 2.]), np.array([6., 0., 0.]), 2)
    array([-3.,  5.])
    >>> solver.state
    <SolverState.DONE: 'done'>
    """

    def __init__(self, backend, config: Optional[FitConfig] = None):
        self.backend = backend
        self.config = config if config is not None else FitConfig(workers=backend.workers)
        self.state = SolverState.READY
        self.failure: Optional[ErrorKind] = None
        self.condition_number: Optional[float] = None

    def _advance(self, expected: SolverState) -> None:
        nxt = _NEXT_STATE.get(self.state)
        assert nxt is expected, f"illegal transition {self.state} -> {expected}"
        self.state = nxt

    def _fail(self, kind: Optional[ErrorKind]) -> None:
        self.state = SolverState.FAILED
        self.failure = kind

    def solve(
        self,
        x: np.ndarray,
        y: np.ndarray,
        n_coef: int,
        timer: Optional[Timer] = None
    ) -> np.ndarray:
        """
        Solve for the least-squares polynomial coefficients.

        Inputs are assumed validated (equal lengths, finite, n >= n_coef).

        Parameters
        ----------
        x, y : ndarray, shape (n,)
            Observations (not modified)
        n_coef : int
            Number of coefficients K
        timer : Timer, optional
            Receives one section per stage

        Returns
        -------
        ndarray, shape (n_coef,)
            Coefficients, highest degree first
        """
        if self.state is not SolverState.READY:
            raise RuntimeError(
                f"NormalEquationSolver is single use (state: {self.state.value})"
            )

        section = timer.section if timer is not None else null_section
        config = self.config
        backend = self.backend

        try:
            with ExitStack() as owned:
                self._advance(SolverState.BUILDING_A)
                with section('build_a'):
                    a = owned.enter_context(
                        backend.vandermonde(x, n_coef, config.pow_strategy)
                    )
                    b = owned.enter_context(Matrix.from_array(y))

                self._advance(SolverState.BUILDING_ATA)
                with section('transpose'):
                    at = owned.enter_context(backend.transpose(a, config.transpose_block))
                with section('multiply_ata'):
                    ata = owned.enter_context(backend.multiply(at, a))
                with section('multiply_atb'):
                    atb = owned.enter_context(backend.multiply(at, b))
                # Only the K x K and K x 1 systems are needed from here on
                at.release()
                a.release()
                b.release()

                self.condition_number = check_conditioning(
                    ata.data, config.condition_threshold
                )

                rhs = atb.data[:, 0]
                self._advance(SolverState.ELIMINATING)
                with section('eliminate'):
                    gauss_jordan(ata.data, rhs, config.pivoting)

                self._advance(SolverState.NORMALIZING)
                with section('normalize'):
                    normalize_diagonal(ata.data, rhs)

                coefficients = rhs.copy()

        except PolyfitError as e:
            self._fail(e.kind)
            raise
        except MemoryError as e:
            self._fail(ErrorKind.ALLOCATION)
            raise AllocationError(f"Allocation failed while solving: {e}") from e
        except Exception:
            self._fail(None)
            raise

        self._advance(SolverState.DONE)
        return coefficients
