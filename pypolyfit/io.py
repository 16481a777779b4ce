"""
Reading observation pairs from CSV files.
"""

import warnings
from typing import Tuple, Union
from pathlib import Path

import numpy as np
import pandas as pd
from pandas.errors import EmptyDataError


def read_points(
    path: Union[str, Path],
    x_col: Union[int, str] = 0,
    y_col: Union[int, str] = 1,
    header: bool = False
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Read (x, y) observation pairs from a CSV file.

    The default layout is the headerless ``x,y`` per line format. Lines
    that do not give two numbers (a value missing or not numeric, more
    fields than the first line, or a file with a single column) are
    dropped with a warning. An empty file gives two empty arrays.

    Parameters
    ----------
    path : str or Path
        CSV file
    x_col, y_col : int or str
        Column positions, or column names when header=True
    header : bool
        Whether the first line holds column names

    Returns
    -------
    (x, y) : tuple of ndarray
        Float64 arrays of equal length

    Examples
    --------
    >>> x, y = read_points('points.csv')
    >>> coefficients = fit(x, y, 3)
    """
    too_wide = []
    try:
        data = pd.read_csv(
            path,
            header=0 if header else None,
            skipinitialspace=True,
            engine='python',
            # Returning None drops the line
            on_bad_lines=too_wide.append,
        )
    except EmptyDataError:
        return np.empty(0, dtype=np.float64), np.empty(0, dtype=np.float64)

    if header:
        raw = data[[x_col, y_col]]
    else:
        # Headerless columns are labelled 0..n-1; absent ones read as NaN
        raw = data.reindex(columns=[x_col, y_col])

    values = raw.apply(pd.to_numeric, errors='coerce').to_numpy(dtype=np.float64)
    good = np.isfinite(values).all(axis=1)

    n_lines = len(values) + len(too_wide)
    n_bad = int((~good).sum()) + len(too_wide)
    if n_bad:
        warnings.warn(
            f"Skipped {n_bad} of {n_lines} lines in {path} "
            f"without two numeric values",
            UserWarning
        )

    values = values[good]
    return values[:, 0].copy(), values[:, 1].copy()
