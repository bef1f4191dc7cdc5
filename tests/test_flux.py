"""Tests for the single-wind sublimation flux."""

import math

import pytest

from blowsnow import flux
from blowsnow.exceptions import IntegrationError
from blowsnow.flux import (calc_interval_flux, calc_saltation_transport,
                           calc_sublimation_flux, fetch_factor, saltation_height,
                           suspension_top)
from blowsnow.turbulent import calc_sublimation_denominator, sat_vapor_pressure

ES = sat_vapor_pressure(-10.0)
F = calc_sublimation_denominator(-10.0, 2.838e6, ES)

STATE = dict(e_air=260.0, es=ES, z_rh=2.0, air_density=1.3, ut_star=0.32,
             u_star=0.42, fetch=300.0, u10=9.55, F=F)

SURFACE = dict(t_air=-10.0, age=48.0, liquid_water=0.0, z0=0.0005, es=ES,
               z_rh=2.0, air_density=1.3, fetch=300.0, F=F)


def test_fetch_factor() -> None:
    """Saltation develops over the fetch."""
    assert 0.0 < fetch_factor(100.0) < fetch_factor(300.0) < fetch_factor(3000.0) < 1.0
    assert fetch_factor(1e6) == pytest.approx(1.0, abs=1e-3)


def test_saltation_transport() -> None:
    """No transport at threshold; fetch reduces transport."""
    assert calc_saltation_transport(0.3, 0.3, 1.3, 300.0) == 0.0

    q_fetch = calc_saltation_transport(0.42, 0.32, 1.3, 300.0)
    q_open = calc_saltation_transport(0.42, 0.32, 1.3, 300.0, fetch_correction=False)
    assert 0.0 < q_fetch < q_open
    assert math.isclose(q_fetch, q_open * fetch_factor(300.0))


def test_layer_heights() -> None:
    """Suspension layer sits above the saltation layer."""
    h_salt = saltation_height(0.42)
    assert math.isclose(h_salt, 1.6 * 0.42 ** 2 / (2 * 9.80616))
    assert suspension_top(h_salt, 0.42, 9.55) > h_salt


def test_full_flux_negative() -> None:
    """Undersaturated air gives a sublimation loss."""
    value = calc_sublimation_flux(**STATE)
    assert -1e-3 < value < 0.0


def test_full_flux_scales_with_fetch() -> None:
    """Both layers scale with the saltation transport."""
    with_fetch = calc_sublimation_flux(**STATE)
    without = calc_sublimation_flux(**STATE, fetch_correction=False)
    assert math.isclose(with_fetch, without * fetch_factor(300.0), rel_tol=1e-5)


def test_simple_flux() -> None:
    """SBSM power law in wind speed."""
    value = calc_sublimation_flux(**STATE, method='simple')
    expected = 0.25 * (260.0 / ES - 1.0) * 9.55 ** 5 / F
    assert math.isclose(value, expected)
    assert value < 0.0


def test_unknown_flux_method() -> None:
    with pytest.raises(ValueError):
        calc_sublimation_flux(**STATE, method='bogus')


def test_integration_retry(monkeypatch, caplog) -> None:
    """A failed suspension integral is retried once at the relaxed tolerance."""
    tolerances = []

    def fake_romberg(func, a, b, args=(), tol=1e-6):
        tolerances.append(tol)
        if len(tolerances) == 1:
            raise IntegrationError(a, b, -1e-6, 1e-7, 100)
        return -1e-6, 0.0

    monkeypatch.setattr(flux, 'romberg', fake_romberg)

    value = calc_sublimation_flux(**STATE, tol=1e-6, relaxed_tol=1e-4)

    assert tolerances == [1e-6, 1e-4]
    assert value < -1e-6
    assert "retrying" in caplog.text


def test_integration_failure_propagates(monkeypatch) -> None:
    """Without a relaxed tolerance the failure reaches the caller."""
    def failing_romberg(func, a, b, args=(), tol=1e-6):
        raise IntegrationError(a, b, 0.0, 1.0, 100)

    monkeypatch.setattr(flux, 'romberg', failing_romberg)

    with pytest.raises(IntegrationError):
        calc_sublimation_flux(**STATE, relaxed_tol=None)


def test_interval_flux_saturated() -> None:
    """No vapour deficit means no sublimation, whatever the wind."""
    for u10 in (5.0, 15.0, 25.0):
        result = calc_interval_flux(u10, u10, e_air=ES + 10.0, **SURFACE)
        assert result.flux == 0.0


def test_interval_flux_below_threshold() -> None:
    """Light wind does not move snow."""
    result = calc_interval_flux(2.0, 2.0, e_air=260.0, **SURFACE)

    assert result.flux == 0.0
    assert result.prob == 0.0
    assert result.u_star <= result.ut_star


def test_interval_flux_transport() -> None:
    """Strong wind over dry snow in dry air sublimates."""
    result = calc_interval_flux(9.55, 9.55, e_air=260.0, **SURFACE)

    assert result.u_star > result.ut_star
    assert result.shear_converged
    assert result.zo_salt >= 0.0005
    assert 0.0 < result.prob < 1.0
    assert result.flux < 0.0


def test_interval_flux_vegetation_wind() -> None:
    """Sheltered wind sets the probability, open wind the shear."""
    open_wind = calc_interval_flux(9.55, 9.55, e_air=260.0, **SURFACE)
    sheltered = calc_interval_flux(9.55, 2.0, e_air=260.0, **SURFACE)

    assert sheltered.prob == 0.0
    assert sheltered.u_star == open_wind.u_star
    assert sheltered.flux < 0.0


def test_non_finite_integral_not_retried(monkeypatch) -> None:
    """A non-finite suspension integral fails without a relaxed retry."""
    tolerances = []

    def nan_romberg(func, a, b, args=(), tol=1e-6):
        tolerances.append(tol)
        raise IntegrationError(a, b, math.nan, 0.0, 1, reason="Non-finite estimate")

    monkeypatch.setattr(flux, 'romberg', nan_romberg)

    with pytest.raises(IntegrationError):
        calc_sublimation_flux(**STATE, tol=1e-6, relaxed_tol=1e-4)
    assert tolerances == [1e-6]


@pytest.mark.parametrize("u10", [0.4, 0.5])
@pytest.mark.parametrize("fetch_correction", [True, False])
def test_interval_flux_calm_constant_probability(u10, fetch_correction) -> None:
    """A lowered threshold at or below zero does not start transport."""
    result = calc_interval_flux(u10, u10, e_air=260.0,
                                probability_method='constant',
                                fetch_correction=fetch_correction, **SURFACE)

    assert result.prob == 1.0
    assert result.ut_star <= 0.0
    assert result.u_star > 0.0
    assert result.flux == 0.0
