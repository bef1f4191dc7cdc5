"""
Errors raised by the blowing snow routines.

Zero-flux physical states (no snow, saturated air, wind below threshold)
are ordinary results and never raise.
"""


class BlowingSnowError(Exception):
    """Base class for blowing snow errors."""


class RootNotBracketedError(BlowingSnowError, ValueError):
    """The root finder was given endpoints that do not bracket a sign change."""

    def __init__(self, x1, x2, f1, f2):
        self.x1 = x1
        self.x2 = x2
        self.f1 = f1
        self.f2 = f2
        super().__init__(
            f"Root must be bracketed: f({x1:g}) = {f1:g}, f({x2:g}) = {f2:g}"
        )


class IntegrationError(BlowingSnowError, RuntimeError):
    """Romberg integration did not converge or gave a non-finite estimate."""

    def __init__(self, a, b, estimate, error, n_iter, reason="Too many steps"):
        self.a = a
        self.b = b
        self.estimate = estimate
        self.error = error
        self.n_iter = n_iter
        self.reason = reason
        super().__init__(
            f"{reason} integrating from {a:g} to {b:g}: "
            f"last estimate {estimate:g} +/- {abs(error):g} after {n_iter} refinements"
        )


class WindDistributionError(BlowingSnowError, ValueError):
    """A wind probability interval straddles the mean wind speed."""
