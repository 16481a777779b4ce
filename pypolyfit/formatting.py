"""
Text representation of polynomials.

Coefficients are always given highest degree first.
"""

import re

import numpy as np


_TERM = re.compile(
    r"""^(?:
        \((?P<coef1>[-+]?\d+\.\d+)\ \*\ x(?:\^(?P<exp>\d+))?\)   # (c * x) or (c * x^n)
      | (?P<const>[-+]?\d+\.\d+)                                 # c
    )$""",
    re.VERBOSE
)


def poly_to_string(coefficients) -> str:
    """
    Render a polynomial as text.

    Terms whose coefficient is exactly 0.0 are left out. The constant
    term is written as ``%f``, the linear term as ``(%f * x)`` and higher
    terms as ``(%f * x^%d)``; terms are joined with `` + ``. All-zero
    coefficients give the empty string.

    Parameters
    ----------
    coefficients : sequence of float
        Coefficients, highest degree first

    Returns
    -------
    str

    Examples
    --------
    >>> poly_to_string([-0.142857142857, 0.0, 0.485714285714])
    '(-0.142857 * x^2) + 0.485714'
    >>> poly_to_string([2.0, 0.0])
    '(2.000000 * x)'
    """
    if coefficients is None:
        raise ValueError("coefficients is None")
    coefficients = np.asarray(coefficients, dtype=np.float64)
    if coefficients.ndim != 1 or len(coefficients) == 0:
        raise ValueError(
            f"coefficients must be a non-empty 1-D sequence, got shape {coefficients.shape}"
        )

    n_coef = len(coefficients)
    terms = []
    for i, coef in enumerate(coefficients):
        if coef == 0.0:
            continue
        exponent = n_coef - 1 - i
        if exponent == 0:
            terms.append("%f" % coef)
        elif exponent == 1:
            terms.append("(%f * x)" % coef)
        else:
            terms.append("(%f * x^%d)" % (coef, exponent))
    return " + ".join(terms)


def parse_polynomial(text: str, n_coef=None) -> np.ndarray:
    """
    Parse a string produced by poly_to_string back into coefficients.

    Terms that are absent parse as 0.0. Precision is that of ``%f``.

    Parameters
    ----------
    text : str
        Polynomial text
    n_coef : int, optional
        Length of the result; defaults to one more than the highest
        exponent present

    Returns
    -------
    ndarray
        Coefficients, highest degree first

    Examples
    --------
    >>> parse_polynomial('(-3.000000 * x) + 5.000000')
    array([-3.,  5.])
    """
    terms = {}
    if text:
        for part in text.split(" + "):
            match = _TERM.match(part)
            if match is None:
                raise ValueError(f"Cannot parse polynomial term: '{part}'")
            if match.group('const') is not None:
                exponent, value = 0, match.group('const')
            else:
                exponent = int(match.group('exp')) if match.group('exp') else 1
                value = match.group('coef1')
            if exponent in terms:
                raise ValueError(f"Duplicate term for x^{exponent} in '{text}'")
            terms[exponent] = float(value)

    degree = max(terms) if terms else 0
    if n_coef is None:
        n_coef = degree + 1
    elif n_coef < degree + 1:
        raise ValueError(f"n_coef={n_coef} too small for a degree-{degree} polynomial")

    coefficients = np.zeros(n_coef, dtype=np.float64)
    for exponent, value in terms.items():
        coefficients[n_coef - 1 - exponent] = value
    return coefficients
