"""
CPU backend using a pool of OS worker threads.

NumPy releases the GIL inside power, matmul and large slice copies, so the
worker threads run those parts concurrently.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Tuple

import numpy as np

from .base import CPUBackend
from ..config import hardware_concurrency


class ThreadedBackend(CPUBackend):
    """
    Thread-pool backend.

    Each kernel call spawns a pool sized to the number of non-empty
    work ranges, submits one range per worker and joins them all before
    returning. Nothing runs between calls.
    """

    def __init__(self, workers: Optional[int] = None):
        self.name = "threads"
        self.workers = workers if workers is not None else hardware_concurrency()
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")

    def _run_ranges(
        self,
        task: Callable[[int, int], None],
        ranges: List[Tuple[int, int]]
    ) -> None:
        if len(ranges) <= 1:
            for start, stop in ranges:
                task(start, stop)
            return

        with ThreadPoolExecutor(
            max_workers=len(ranges),
            thread_name_prefix="pypolyfit-worker"
        ) as pool:
            futures = [pool.submit(task, start, stop) for start, stop in ranges]
            # result() re-raises the first worker failure in the caller
            for future in futures:
                future.result()

    def get_device_info(self) -> dict:
        """Get backend information."""
        return {
            'backend': 'cpu',
            'scheduling': 'threads',
            'workers': self.workers,
            'library': f'NumPy {np.__version__}',
        }
