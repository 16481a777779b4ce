"""
Per-fit configuration options.
"""

import numbers
import os
from dataclasses import dataclass, field
from typing import Optional


POW_STRATEGIES = ('library-pow', 'iterative')
PIVOTING_MODES = ('diagonal', 'partial')

DEFAULT_TRANSPOSE_BLOCK = 32
DEFAULT_CONDITION_THRESHOLD = 1e12


def hardware_concurrency() -> int:
    """Number of CPUs this process may run on."""
    if hasattr(os, 'sched_getaffinity'):
        return max(1, len(os.sched_getaffinity(0)))
    return os.cpu_count() or 1


@dataclass(frozen=True)
class FitConfig:
    """
    Options for a single polynomial fit.

    Attributes
    ----------
    workers : int
        Parallel worker count for the matrix kernels
        (default: hardware concurrency)
    transpose_block : int
        Tile side for the blocked transpose (default 32, so a source and
        a destination tile of doubles both fit in L1)
    pow_strategy : str
        How the Vandermonde matrix is filled:
        - 'library-pow': numpy.power on each column
        - 'iterative': repeated multiplication from the constant column
    pivoting : str
        - 'diagonal': pivot row is always the diagonal row
        - 'partial': swap in the row with the largest magnitude first
    condition_threshold : float or None
        Emit IllConditionedWarning when cond(A'A) exceeds this value.
        None disables the check.
    """
    workers: int = field(default_factory=hardware_concurrency)
    transpose_block: int = DEFAULT_TRANSPOSE_BLOCK
    pow_strategy: str = 'library-pow'
    pivoting: str = 'diagonal'
    condition_threshold: Optional[float] = DEFAULT_CONDITION_THRESHOLD

    def __post_init__(self):
        # numpy integers are accepted and stored as int
        for name in ('workers', 'transpose_block'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
            object.__setattr__(self, name, int(value))
        if self.pow_strategy not in POW_STRATEGIES:
            raise ValueError(
                f"Unknown pow_strategy: '{self.pow_strategy}'\n"
                f"Valid options: {', '.join(repr(s) for s in POW_STRATEGIES)}"
            )
        if self.pivoting not in PIVOTING_MODES:
            raise ValueError(
                f"Unknown pivoting: '{self.pivoting}'\n"
                f"Valid options: {', '.join(repr(s) for s in PIVOTING_MODES)}"
            )
        if self.condition_threshold is not None and not self.condition_threshold > 0:
            raise ValueError(
                f"condition_threshold must be positive or None, got {self.condition_threshold!r}"
            )
