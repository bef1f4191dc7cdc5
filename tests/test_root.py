"""Tests for the safeguarded Newton solver and the shear stress equation."""

import math

import numpy as np
import pytest

from blowsnow.constants import GRAVITY, OWEN_COEFF, VON_KARMAN
from blowsnow.exceptions import RootNotBracketedError
from blowsnow.root import newton_safe
from blowsnow.turbulent import calc_shear_stress, shear_equation


def square_minus_two(x):
    return x * x - 2.0, 2.0 * x


def test_newton_safe_converges() -> None:
    """Root of x² - 2 on [0, 2]."""
    result = newton_safe(square_minus_two, 0.0, 2.0, 1e-12)

    assert result.converged
    assert math.isclose(result.value, math.sqrt(2.0), rel_tol=1e-10)
    f, _ = square_minus_two(result.value)
    assert abs(f) < 1e-10


def test_newton_safe_reversed_bracket() -> None:
    """Bracket orientation does not matter."""
    result = newton_safe(square_minus_two, 2.0, 0.0, 1e-12)
    assert math.isclose(result.value, math.sqrt(2.0), rel_tol=1e-10)


def test_newton_safe_endpoint_root() -> None:
    """A root exactly on an endpoint is returned directly."""
    result = newton_safe(lambda x: (x - 1.0, 1.0), 1.0, 3.0, 1e-8)
    assert result.value == 1.0
    assert result.converged


def test_newton_safe_not_bracketed() -> None:
    """Same-sign endpoints raise instead of returning a value."""
    with pytest.raises(RootNotBracketedError) as info:
        newton_safe(square_minus_two, 2.0, 3.0, 1e-8)

    assert info.value.x1 == 2.0
    assert info.value.x2 == 3.0
    assert info.value.f1 > 0 and info.value.f2 > 0
    assert isinstance(info.value, ValueError)


def test_newton_safe_fallback(caplog) -> None:
    """Running out of iterations returns the fallback, flagged."""
    result = newton_safe(square_minus_two, 0.0, 2.0, 1e-15, max_iter=1,
                         fallback=0.025)

    assert not result.converged
    assert result.value == 0.025
    assert result.iterations == 1
    assert result.reason
    assert "Maximum number of iterations" in caplog.text


def test_shear_equation_derivative() -> None:
    """Analytic derivative matches a central difference."""
    u, h = 0.4, 1e-6
    f_plus, _ = shear_equation(u + h, 9.5, 10.0)
    f_minus, _ = shear_equation(u - h, 9.5, 10.0)
    _, df = shear_equation(u, 9.5, 10.0)

    assert math.isclose(df, (f_plus - f_minus) / (2 * h), rel_tol=1e-5)


def test_shear_equation_overflow() -> None:
    """Tiny shear velocities give an infinite residual, not an error."""
    f, _ = shear_equation(1e-7, 9.5, 10.0)
    assert f == np.inf


def test_calc_shear_stress() -> None:
    """Solved shear velocity satisfies the saltation log profile."""
    u10, z0 = 9.55, 0.0005
    u_star, zo_salt, root = calc_shear_stress(u10, z0)

    assert root.converged
    assert 0.3 < u_star < 0.6
    assert math.isclose(zo_salt, OWEN_COEFF * u_star ** 2 / (2 * GRAVITY))

    # Both sides of exp(k U / u*) = 2 g Z / (0.12 u*²)
    lhs = math.exp(VON_KARMAN * u10 / u_star)
    rhs = 2 * GRAVITY * 10.0 / (OWEN_COEFF * u_star ** 2)
    assert math.isclose(lhs, rhs, rel_tol=1e-4)


def test_calc_shear_stress_roughness_floor() -> None:
    """Saltation roughness below the surface roughness falls back to the log law."""
    u10, z0 = 5.0, 0.05
    u_star, zo_salt, _ = calc_shear_stress(u10, z0)

    assert zo_salt == z0
    assert math.isclose(u_star, VON_KARMAN * u10 / math.log(10.0 / z0))


@pytest.mark.parametrize("u10", [0.4, 2.0, 10.0, 25.0])
def test_calc_shear_stress_positive(u10) -> None:
    """Shear velocity is positive over the clamped wind range."""
    u_star, zo_salt, _ = calc_shear_stress(u10, 0.0005)
    assert u_star > 0
    assert zo_salt >= 0.0005
