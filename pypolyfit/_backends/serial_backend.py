"""
Single-worker CPU backend.

Reference implementation: the same kernels as the threaded backend, run
range after range on the calling thread.
"""

from typing import Callable, List, Tuple

import numpy as np

from .base import CPUBackend


class SerialBackend(CPUBackend):
    """Runs every kernel on the calling thread."""

    def __init__(self):
        self.name = "serial"
        self.workers = 1

    def _run_ranges(
        self,
        task: Callable[[int, int], None],
        ranges: List[Tuple[int, int]]
    ) -> None:
        for start, stop in ranges:
            task(start, stop)

    def get_device_info(self) -> dict:
        """Get backend information."""
        return {
            'backend': 'cpu',
            'scheduling': 'serial',
            'workers': 1,
            'library': f'NumPy {np.__version__}',
        }
