"""
Per-stage timing for the fit pipeline.
"""

import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional


class Timer:
    """
    Accumulating timer with named sections.

    Usage:
        timer = Timer()
        timer.start()

        with timer.section('transpose'):
            at = backend.transpose(a)

        timer.stop()
        timer.result()
        # {'total_seconds': 0.004, 'transpose': 0.001}
    """

    def __init__(self):
        self._sections: Dict[str, float] = {}
        self._start_time: Optional[float] = None
        self._total: Optional[float] = None

    def start(self) -> None:
        """Start the overall timer."""
        self._start_time = time.perf_counter()

    def stop(self) -> None:
        """Stop the overall timer."""
        if self._start_time is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = time.perf_counter() - self._start_time

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Time a named section; repeated sections accumulate."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            self._sections[name] = self._sections.get(name, 0.0) + elapsed

    def result(self) -> Dict[str, float]:
        """
        Timing results: 'total_seconds' plus one entry per section.

        Raises RuntimeError if called before stop().
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")

        result = {'total_seconds': self._total}
        result.update(self._sections)
        return result


@contextmanager
def null_section(name: str) -> Iterator[None]:
    """Stand-in for Timer.section when no timer is attached."""
    yield
