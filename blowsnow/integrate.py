"""
Romberg integration.

Extended trapezoidal rule with step doubling, extrapolated to zero step
size by Neville's polynomial interpolation (Press et al., Numerical
Recipes, section 4.3). Used to integrate the sublimation profile through
the suspension layer.
"""

import math

import numpy as np

from .exceptions import IntegrationError

MAX_ITER = 100  # Maximum number of trapezoid refinements
ORDER = 5  # Number of points used in the extrapolation
TOLERANCE = 1.0e-6  # Fractional accuracy
ABS_TOLERANCE = 1.0e-14  # Absolute accuracy, for integrals that vanish


def trapezoid_refine(func, a, b, n, previous=0.0, args=()):
    """
    n-th stage of the extended trapezoidal rule.

    Stage 1 is the plain two-point rule. Each later stage adds 2**(n-2)
    interior points and combines them with ``previous``, the value
    returned by stage n-1, halving the step size.

    Parameters
    ----------
    func : callable
        Integrand, called as ``func(x, *args)``
    a, b : float
        Integration limits
    n : int
        Refinement stage (>= 1)
    previous : float
        Estimate from stage n-1 (ignored for n == 1)
    args : tuple
        Extra arguments passed to ``func``

    Returns
    -------
    float
        Trapezoidal estimate of the integral at this stage
    """
    if n == 1:
        return 0.5 * (b - a) * (func(a, *args) + func(b, *args))

    n_new = 2 ** (n - 2)
    delta = (b - a) / n_new
    x = a + delta * (np.arange(n_new) + 0.5)
    total = sum(func(float(xi), *args) for xi in x)

    return 0.5 * (previous + (b - a) * total / n_new)


def neville(xa, ya, x=0.0):
    """
    Polynomial interpolation through (xa, ya), evaluated at x.

    Returns
    -------
    y : float
        Interpolated value
    dy : float
        Last correction added to y, used as an error estimate
    """
    xa = np.asarray(xa, dtype=float)
    c = np.array(ya, dtype=float)
    d = c.copy()
    n = len(xa)

    ns = int(np.argmin(np.abs(x - xa)))
    y = c[ns]
    ns -= 1
    dy = 0.0

    for m in range(1, n):
        for i in range(n - m):
            ho = xa[i] - x
            hp = xa[i + m] - x
            den = ho - hp
            if den == 0.0:
                raise ValueError("Neville interpolation needs distinct abscissas")
            den = (c[i + 1] - d[i]) / den
            d[i] = hp * den
            c[i] = ho * den

        # Take the straightest path through the tableau
        if 2 * (ns + 1) < n - m:
            dy = c[ns + 1]
        else:
            dy = d[ns]
            ns -= 1
        y += dy

    return float(y), float(dy)


def romberg(func, a, b, args=(), tol=TOLERANCE, max_iter=MAX_ITER, order=ORDER,
            abs_tol=ABS_TOLERANCE):
    """
    Integrate func from a to b by Romberg's method.

    Parameters
    ----------
    func : callable
        Integrand, called as ``func(x, *args)``
    a, b : float
        Integration limits, must differ
    args : tuple
        Extra arguments passed to ``func``
    tol : float
        Stop when |error| <= tol * |value|
    max_iter : int
        Maximum number of trapezoid refinements
    order : int
        Number of successive estimates fitted for the extrapolation
    abs_tol : float
        Also stop when |error| <= abs_tol, so that integrals close to
        zero converge

    Returns
    -------
    value : float
        Integral estimate
    error : float
        Error estimate of the extrapolation

    Raises
    ------
    ValueError
        If a == b
    IntegrationError
        If the estimate has not converged after max_iter refinements, or
        an estimate is not finite
    """
    if a == b:
        raise ValueError("Cannot integrate over a zero-width interval")

    steps = [1.0]
    estimates = []
    value = error = s = 0.0

    for j in range(1, max_iter + 1):
        s = trapezoid_refine(func, a, b, j, s, args)
        if not math.isfinite(s):
            raise IntegrationError(a, b, s, error, j, reason="Non-finite estimate")
        estimates.append(s)

        if j >= order:
            value, error = neville(steps[-order:], estimates[-order:], 0.0)
            if not (math.isfinite(value) and math.isfinite(error)):
                raise IntegrationError(a, b, value, error, j,
                                       reason="Non-finite estimate")
            if abs(error) <= tol * abs(value) or abs(error) <= abs_tol:
                return value, error

        # Error of the trapezoid rule goes as h², so the abscissa shrinks by 4
        steps.append(0.25 * steps[-1])

    raise IntegrationError(a, b, value, error, max_iter)
