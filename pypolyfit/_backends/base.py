"""
Abstract base classes for kernel backends.

A backend is a scheduling policy for the three data-parallel steps of a
fit: filling the Vandermonde matrix, the blocked transpose and the
row-partitioned multiply.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Tuple

import numpy as np

from .._core.matrix import Matrix
from ..config import DEFAULT_TRANSPOSE_BLOCK, POW_STRATEGIES
from ..exceptions import ShapeError


def partition(n_items: int, n_workers: int) -> List[Tuple[int, int]]:
    """
    Split range(n_items) into contiguous [start, stop) slices, one per worker.

    Every worker gets n_items // n_workers items and the first
    n_items % n_workers workers get one more, so loads differ by at most
    one item. Workers that would receive nothing are left out.

    >>> partition(10, 4)
    [(0, 3), (3, 6), (6, 8), (8, 10)]
    """
    if n_workers < 1:
        raise ValueError(f"n_workers must be >= 1, got {n_workers}")
    per_worker, remainder = divmod(n_items, n_workers)
    ranges = []
    start = 0
    for i in range(n_workers):
        stop = start + per_worker + (1 if i < remainder else 0)
        if stop > start:
            ranges.append((start, stop))
        start = stop
    return ranges


class KernelBackend(ABC):
    """Abstract base class for all kernel backends."""

    name: str
    workers: int

    @abstractmethod
    def vandermonde(
        self,
        x: np.ndarray,
        n_coef: int,
        pow_strategy: str = 'library-pow'
    ) -> Matrix:
        """
        Build the N x K design matrix with A[r, c] = x[r] ** (K - 1 - c).

        Parameters
        ----------
        x : ndarray, shape (n,)
            Observation abscissae (read only)
        n_coef : int
            Number of coefficients K
        pow_strategy : str
            'library-pow' or 'iterative'

        Returns
        -------
        Matrix
            Freshly allocated design matrix
        """
        pass

    @abstractmethod
    def transpose(self, m: Matrix, block: int = DEFAULT_TRANSPOSE_BLOCK) -> Matrix:
        """Fresh transpose of m, computed tile by tile."""
        pass

    @abstractmethod
    def multiply(self, left: Matrix, right: Matrix) -> Matrix:
        """Fresh product left @ right. Raises ShapeError on mismatch."""
        pass

    @abstractmethod
    def get_device_info(self) -> dict:
        """Get backend information."""
        pass

    def __repr__(self):
        return f"{type(self).__name__}(workers={self.workers})"


class CPUBackend(KernelBackend):
    """
    NumPy kernels parameterized by how work ranges are executed.

    Subclasses only decide how the list of (start, stop) ranges is run:
    every range is processed by exactly one worker, and _run_ranges must
    not return before all of them have finished.
    """

    @abstractmethod
    def _run_ranges(
        self,
        task: Callable[[int, int], None],
        ranges: List[Tuple[int, int]]
    ) -> None:
        pass

    def _fill(
        self,
        out: Matrix,
        task: Callable[[int, int], None],
        ranges: List[Tuple[int, int]]
    ) -> Matrix:
        """Run task over ranges to fill out; out is released if any worker fails."""
        try:
            self._run_ranges(task, ranges)
        except Exception:
            out.release()
            raise
        return out

    def vandermonde(
        self,
        x: np.ndarray,
        n_coef: int,
        pow_strategy: str = 'library-pow'
    ) -> Matrix:
        if pow_strategy not in POW_STRATEGIES:
            raise ValueError(f"Unknown pow_strategy: '{pow_strategy}'")

        a = Matrix.create(len(x), n_coef)
        data = a.data
        degree = n_coef - 1
        exponents = np.arange(degree, -1, -1, dtype=np.float64)

        def fill_rows(start: int, stop: int) -> None:
            xs = x[start:stop]
            rows = data[start:stop]
            if pow_strategy == 'iterative':
                rows[:, degree] = 1.0
                for c in range(degree - 1, -1, -1):
                    np.multiply(rows[:, c + 1], xs, out=rows[:, c])
            else:
                np.power(xs[:, np.newaxis], exponents, out=rows)

        return self._fill(a, fill_rows, partition(len(x), self.workers))

    def transpose(self, m: Matrix, block: int = DEFAULT_TRANSPOSE_BLOCK) -> Matrix:
        if block < 1:
            raise ValueError(f"block must be >= 1, got {block}")

        src = m.data
        out = Matrix.create(m.cols, m.rows)
        dst = out.data
        n_rows, n_cols = m.shape
        tiles_down = -(-n_rows // block)

        def transpose_strip(start: int, stop: int) -> None:
            # Whole tile rows [start, stop), copied one tile column at a time
            r0 = start * block
            r1 = min(stop * block, n_rows)
            for c0 in range(0, n_cols, block):
                c1 = min(c0 + block, n_cols)
                dst[c0:c1, r0:r1] = src[r0:r1, c0:c1].T

        return self._fill(out, transpose_strip, partition(tiles_down, self.workers))

    def multiply(self, left: Matrix, right: Matrix) -> Matrix:
        if left.cols != right.rows:
            raise ShapeError(
                f"Cannot multiply {left.rows} x {left.cols} by "
                f"{right.rows} x {right.cols}: inner dimensions differ",
                left_shape=left.shape,
                right_shape=right.shape
            )

        lhs = left.data
        rhs = right.data
        out = Matrix.create(left.rows, right.cols)
        dst = out.data

        def multiply_rows(start: int, stop: int) -> None:
            # i -> k -> j: each output row is a sweep over rows of rhs
            np.matmul(lhs[start:stop], rhs, out=dst[start:stop])

        return self._fill(out, multiply_rows, partition(left.rows, self.workers))
