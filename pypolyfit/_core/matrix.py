"""
Dense matrix primitive.

Row-major float64 buffer with fixed row and column counts.
"""

import numpy as np
from typing import Tuple

from ..exceptions import AllocationError, ShapeError


class Matrix:
    """
    Rectangular matrix of doubles stored row-major.

    Element (r, c) lives at offset r * cols + c of a contiguous buffer.
    rows and cols never change after creation, and no two Matrix
    objects share a buffer. Index checks are asserts only: callers are
    expected to stay inside the declared dimensions.

    Matrices are context managers; leaving the ``with`` block releases
    the buffer.

    Examples
    --------
    >>> with Matrix.create(2, 3) as m:
    ...     m[1, 2] = 4.0
    ...     m.shape
    (2, 3)
    """

    __slots__ = ('_rows', '_cols', '_data')

    def __init__(self, rows: int, cols: int, data: np.ndarray):
        # Use Matrix.create / Matrix.from_array; data is taken over as-is.
        self._rows = rows
        self._cols = cols
        self._data = data

    @classmethod
    def create(cls, rows: int, cols: int) -> 'Matrix':
        """
        Allocate a zero-initialized rows x cols matrix.

        Raises
        ------
        ShapeError
            If either dimension is < 1
        AllocationError
            If the buffer cannot be allocated
        """
        rows = int(rows)
        cols = int(cols)
        if rows < 1 or cols < 1:
            raise ShapeError(
                f"Matrix dimensions must be >= 1, got {rows} x {cols}",
                left_shape=(rows, cols)
            )
        try:
            data = np.zeros((rows, cols), dtype=np.float64, order='C')
        except MemoryError as e:
            raise AllocationError(
                f"Unable to allocate {rows} x {cols} matrix "
                f"({rows * cols * 8 / 1e6:.1f} MB)",
                shape=(rows, cols)
            ) from e
        return cls(rows, cols, data)

    @classmethod
    def from_array(cls, values) -> 'Matrix':
        """Copy a 2-D array (or a 1-D array as a column) into a new matrix."""
        values = np.asarray(values, dtype=np.float64)
        if values.ndim == 1:
            values = values[:, np.newaxis]
        if values.ndim != 2:
            raise ShapeError(f"Expected 2-D values, got {values.ndim} dimensions")
        m = cls.create(*values.shape)
        m._data[...] = values
        return m

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def shape(self) -> Tuple[int, int]:
        return (self._rows, self._cols)

    @property
    def data(self) -> np.ndarray:
        """The underlying (rows, cols) C-contiguous buffer."""
        if self._data is None:
            raise RuntimeError("Matrix has been released")
        return self._data

    @property
    def released(self) -> bool:
        return self._data is None

    def __getitem__(self, index: Tuple[int, int]) -> float:
        r, c = index
        assert 0 <= r < self._rows and 0 <= c < self._cols, \
            f"index ({r}, {c}) outside {self._rows} x {self._cols}"
        return float(self.data[r, c])

    def __setitem__(self, index: Tuple[int, int], value: float) -> None:
        r, c = index
        assert 0 <= r < self._rows and 0 <= c < self._cols, \
            f"index ({r}, {c}) outside {self._rows} x {self._cols}"
        self.data[r, c] = value

    def to_numpy(self) -> np.ndarray:
        """Copy of the contents as a new ndarray."""
        return self.data.copy()

    def release(self) -> None:
        """Drop the buffer. Safe to call more than once."""
        self._data = None

    def __enter__(self) -> 'Matrix':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self):
        state = ', released' if self._data is None else ''
        return f"Matrix({self._rows} x {self._cols}{state})"
