"""Tests for occurrence probability and threshold shear velocity."""

import math

import numpy as np
import pytest

from blowsnow.constants import U_THRESH, VON_KARMAN
from blowsnow.threshold import calc_occurrence_probability, calc_threshold_shear


def test_probability_dry_cutoff() -> None:
    """No blowing snow at or below 3 m/s on dry snow."""
    for u10 in (0.0, 1.0, 3.0):
        assert calc_occurrence_probability(-10.0, 48.0, 0.0, u10) == 0.0
    assert calc_occurrence_probability(-10.0, 48.0, 0.0, 3.5) > 0.0


def test_probability_wet_cutoff() -> None:
    """Wet snow needs more than 7 m/s."""
    assert calc_occurrence_probability(-1.0, 48.0, 0.002, 6.0) == 0.0
    assert calc_occurrence_probability(-1.0, 48.0, 0.002, 7.0) == 0.0
    # Wet mean of 21 m/s gives one half there
    assert math.isclose(calc_occurrence_probability(-1.0, 48.0, 0.002, 21.0), 0.5)


def test_probability_monotonic() -> None:
    """Probability never decreases with wind speed."""
    winds = np.linspace(3.01, 25.0, 200)
    probs = [calc_occurrence_probability(-10.0, 48.0, 0.0, u) for u in winds]

    assert np.all(np.diff(probs) >= 0.0)
    assert all(0.0 <= p <= 1.0 for p in probs)


def test_probability_older_snow() -> None:
    """Older snow is harder to erode."""
    fresh = calc_occurrence_probability(-10.0, 2.0, 0.0, 10.0)
    old = calc_occurrence_probability(-10.0, 200.0, 0.0, 10.0)
    assert old < fresh


def test_probability_zero_age() -> None:
    """Snow with no age is fully erodible above the cutoff."""
    assert calc_occurrence_probability(-10.0, 0.0, 0.0, 5.0) == 1.0
    assert calc_occurrence_probability(-10.0, 0.0, 0.0, 2.0) == 0.0


def test_probability_constant() -> None:
    """Constant method always returns one."""
    assert calc_occurrence_probability(-10.0, 48.0, 0.0, 0.5, method='constant') == 1.0
    with pytest.raises(ValueError):
        calc_occurrence_probability(-10.0, 48.0, 0.0, 5.0, method='bogus')


@pytest.mark.parametrize("t_air,liquid_water,u10,u_star", [
    (-10.0, 0.0, 9.5, 0.4),
    (-1.0, 0.01, 3.0, 0.05),
    (-30.0, 0.0, 25.0, 1.2),
])
def test_threshold_constant(t_air, liquid_water, u10, u_star) -> None:
    """Constant threshold ignores every input."""
    ut = calc_threshold_shear(t_air, liquid_water, u10, 0.0005, 0.5, u_star,
                              method='constant')
    assert ut == U_THRESH == 0.25


def test_threshold_variable_dry() -> None:
    """Dry threshold from the Li and Pomeroy threshold wind."""
    t_air, z0 = -10.0, 0.0005
    ut10 = 9.43 + 0.18 * t_air + 0.0033 * t_air ** 2
    expected = VON_KARMAN * ut10 / math.log(10.0 / z0)

    ut = calc_threshold_shear(t_air, 0.0, 9.5, z0, 0.2, 0.5)
    assert math.isclose(ut, expected)


def test_threshold_variable_wet() -> None:
    """Wet threshold wind is 9.9 m/s."""
    z0 = 0.0005
    ut = calc_threshold_shear(-1.0, 0.01, 12.0, z0, 0.2, 0.5)
    assert math.isclose(ut, VON_KARMAN * 9.9 / math.log(10.0 / z0))


def test_threshold_lowered_when_transport_observed() -> None:
    """Below-threshold shear with likely transport lowers the threshold."""
    z0 = 0.0005
    ut = calc_threshold_shear(-10.0, 0.0, 6.0, z0, 0.05, 0.1)
    assert math.isclose(ut, VON_KARMAN * 5.5 / math.log(10.0 / z0))

    # Unlikely transport keeps the nominal threshold
    ut_nominal = calc_threshold_shear(-10.0, 0.0, 6.0, z0, 0.0, 0.1)
    assert ut_nominal > ut


def test_threshold_unknown_method() -> None:
    with pytest.raises(ValueError):
        calc_threshold_shear(-10.0, 0.0, 9.5, 0.0005, 0.2, 0.4, method='bogus')
