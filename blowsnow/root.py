"""
Safeguarded Newton-Raphson root finding.

Newton steps are taken while they stay inside the current bracket and
shrink the bracket at least as fast as bisection; otherwise the solver
bisects (Press et al., Numerical Recipes, rtsafe).
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .exceptions import RootNotBracketedError

logger = logging.getLogger(__name__)

MAX_ITER = 100


@dataclass
class RootResult:
    """Outcome of a root search."""
    value: float
    converged: bool = True
    iterations: int = 0
    reason: str = ''


def newton_safe(func, x1, x2, tol, args=(), max_iter=MAX_ITER,
                fallback: Optional[float] = None) -> RootResult:
    """
    Find a root of func bracketed by [x1, x2].

    Parameters
    ----------
    func : callable
        ``func(x, *args)`` returning ``(f, df)``, the function value and
        its derivative
    x1, x2 : float
        Bracketing endpoints
    tol : float
        Stop when the last step is smaller than tol
    args : tuple
        Extra arguments passed to ``func``
    max_iter : int
        Maximum number of iterations
    fallback : float, optional
        Value returned if the iteration limit is reached. The last iterate
        is returned when not given.

    Returns
    -------
    RootResult
        ``converged`` is False when the iteration limit was reached

    Raises
    ------
    RootNotBracketedError
        If f(x1) and f(x2) have the same sign and neither is zero
    """
    fl, _ = func(x1, *args)
    fh, _ = func(x2, *args)

    if (fl > 0.0 and fh > 0.0) or (fl < 0.0 and fh < 0.0):
        raise RootNotBracketedError(x1, x2, fl, fh)

    if fl == 0.0:
        return RootResult(x1)
    if fh == 0.0:
        return RootResult(x2)

    # Orient the search so that f(xl) < 0
    if fl < 0.0:
        xl, xh = x1, x2
    else:
        xl, xh = x2, x1

    rts = 0.5 * (x1 + x2)
    dxold = abs(x2 - x1)
    dx = dxold
    f, df = func(rts, *args)

    for j in range(1, max_iter + 1):
        out_of_range = ((rts - xh) * df - f) * ((rts - xl) * df - f) > 0.0
        too_slow = abs(2.0 * f) > abs(dxold * df)
        finite = math.isfinite(f) and math.isfinite(df)

        if not finite or out_of_range or too_slow:
            dxold = dx
            dx = 0.5 * (xh - xl)
            rts = xl + dx
            if xl == rts:
                return RootResult(rts, iterations=j)
        else:
            dxold = dx
            dx = f / df
            temp = rts
            rts -= dx
            if temp == rts:
                return RootResult(rts, iterations=j)

        if abs(dx) < tol:
            return RootResult(rts, iterations=j)

        f, df = func(rts, *args)
        if f < 0.0:
            xl = rts
        else:
            xh = rts

    value = rts if fallback is None else fallback
    logger.warning(
        "Maximum number of iterations (%d) exceeded in root search on [%g, %g], "
        "using %g", max_iter, x1, x2, value
    )
    return RootResult(value, converged=False, iterations=max_iter,
                      reason='maximum iterations exceeded')
