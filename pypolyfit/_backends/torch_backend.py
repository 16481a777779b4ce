"""
CPU backend using PyTorch's intra-op thread pool.

Tensors share memory with the NumPy buffers of the matrices, so results
are written straight into freshly allocated Matrix objects.
"""

from typing import Optional

import numpy as np

from .base import KernelBackend, partition
from .._core.matrix import Matrix
from ..config import DEFAULT_TRANSPOSE_BLOCK, POW_STRATEGIES, hardware_concurrency
from ..exceptions import ShapeError


class TorchBackend(KernelBackend):
    """
    PyTorch CPU backend with FP64 precision.

    Parallelism comes from torch's own worker pool, sized with
    torch.set_num_threads(). That setting is process wide, so the most
    recently constructed TorchBackend decides it.
    """

    def __init__(self, workers: Optional[int] = None):
        """Initialize PyTorch CPU backend."""
        self.name = "torch"

        try:
            import torch
            self.torch = torch
        except ImportError:
            raise ImportError(
                "PyTorch required for torch backend. "
                "Install: pip install torch"
            )

        self.workers = workers if workers is not None else hardware_concurrency()
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")

        if torch.get_num_threads() != self.workers:
            torch.set_num_threads(self.workers)

    def _view(self, m: Matrix):
        return self.torch.from_numpy(m.data)

    def vandermonde(
        self,
        x: np.ndarray,
        n_coef: int,
        pow_strategy: str = 'library-pow'
    ) -> Matrix:
        if pow_strategy not in POW_STRATEGIES:
            raise ValueError(f"Unknown pow_strategy: '{pow_strategy}'")
        torch = self.torch

        a = Matrix.create(len(x), n_coef)
        out = self._view(a)
        xs = torch.from_numpy(np.ascontiguousarray(x, dtype=np.float64))
        degree = n_coef - 1

        if pow_strategy == 'iterative':
            out[:, degree] = 1.0
            for c in range(degree - 1, -1, -1):
                torch.mul(out[:, c + 1], xs, out=out[:, c])
        else:
            exponents = torch.arange(degree, -1, -1, dtype=torch.float64)
            out.copy_(torch.pow(xs.unsqueeze(1), exponents))
        return a

    def transpose(self, m: Matrix, block: int = DEFAULT_TRANSPOSE_BLOCK) -> Matrix:
        if block < 1:
            raise ValueError(f"block must be >= 1, got {block}")

        out = Matrix.create(m.cols, m.rows)
        src = self._view(m)
        dst = self._view(out)
        # torch parallelizes each strided copy; row strips bound the working set
        for r0 in range(0, m.rows, block):
            r1 = min(r0 + block, m.rows)
            dst[:, r0:r1].copy_(src[r0:r1, :].t())
        return out

    def multiply(self, left: Matrix, right: Matrix) -> Matrix:
        if left.cols != right.rows:
            raise ShapeError(
                f"Cannot multiply {left.rows} x {left.cols} by "
                f"{right.rows} x {right.cols}: inner dimensions differ",
                left_shape=left.shape,
                right_shape=right.shape
            )
        torch = self.torch

        out = Matrix.create(left.rows, right.cols)
        lhs = self._view(left)
        rhs = self._view(right)
        dst = self._view(out)
        for start, stop in partition(left.rows, self.workers):
            torch.matmul(lhs[start:stop], rhs, out=dst[start:stop])
        return out

    def get_device_info(self) -> dict:
        """Get backend information."""
        return {
            'backend': 'cpu',
            'scheduling': 'torch-intra-op',
            'workers': self.workers,
            'library': f'PyTorch {self.torch.__version__}',
        }
