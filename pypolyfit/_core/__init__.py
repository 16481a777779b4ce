"""
Core algorithms (backend-agnostic).
"""

from .matrix import Matrix
from .solver import NormalEquationSolver, SolverState, gauss_jordan, normalize_diagonal
from .conditioning import condition_number, check_conditioning

__all__ = [
    "Matrix",
    "NormalEquationSolver",
    "SolverState",
    "gauss_jordan",
    "normalize_diagonal",
    "condition_number",
    "check_conditioning",
]
