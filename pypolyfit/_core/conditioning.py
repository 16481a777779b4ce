"""
Conditioning check for the normal-equation matrix.

Vandermonde systems get ill-conditioned quickly as the degree grows and
the diagonal-pivot elimination has no safeguard against it, so large
condition numbers are reported as warnings. The fit result is unchanged.
"""

import warnings
from typing import Optional

import numpy as np

from ..exceptions import IllConditionedWarning


def condition_number(ata: np.ndarray) -> float:
    """
    2-norm condition number of a symmetric positive semidefinite matrix.

    Returns inf when the matrix has a non-finite entry or a non-positive
    eigenvalue.
    """
    if not np.all(np.isfinite(ata)):
        return np.inf
    try:
        eigvals = np.linalg.eigvalsh(ata)
    except np.linalg.LinAlgError:
        return np.inf

    if eigvals[0] <= 0:
        return np.inf
    return float(eigvals[-1] / eigvals[0])


def check_conditioning(ata: np.ndarray, threshold: Optional[float]) -> Optional[float]:
    """
    Estimate cond(A'A) and warn if it exceeds threshold.

    Non-finite entries (powers of x that overflowed) are always reported,
    even when the condition estimate is disabled.

    Parameters
    ----------
    ata : ndarray, shape (k, k)
        Normal-equation matrix (not modified)
    threshold : float or None
        Warning threshold; None skips the estimate

    Returns
    -------
    float or None
        The estimate, or None when skipped
    """
    if not np.all(np.isfinite(ata)):
        warnings.warn(
            "Normal-equation matrix has non-finite entries: powers of x overflowed.\n"
            "Coefficients will be NaN or Inf; rescale x or lower the degree.",
            IllConditionedWarning,
            stacklevel=3
        )
        return np.inf if threshold is not None else None

    if threshold is None:
        return None

    cond = condition_number(ata)
    if cond > threshold:
        warnings.warn(
            f"Normal-equation matrix is ill-conditioned (κ = {cond:.2e} > {threshold:.0e}).\n"
            f"Coefficients may be inaccurate; consider a lower degree, "
            f"centering/scaling x, or pivoting='partial'.",
            IllConditionedWarning,
            stacklevel=3
        )
    return cond
