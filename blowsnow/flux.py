"""
Sublimation flux from blowing snow at a single wind speed.

Available methods:
- 'full': Saltation layer plus integrated suspension layer
  (Liston and Sturm 1998, Essery et al. 1999)
- 'simple': Single-layer power law in wind speed (SBSM, Essery et al. 1999)
"""

import logging
from dataclasses import dataclass

import numpy as np

from .constants import (C_SALT, GRAVITY, SETTLING, VON_KARMAN,
                        PARTICLE_RATIO, SALT_HEIGHT_COEFF)
from .exceptions import IntegrationError
from .integrate import romberg, TOLERANCE
from .profile import sublimation_with_height
from .threshold import calc_occurrence_probability, calc_threshold_shear
from .turbulent import calc_shear_stress

logger = logging.getLogger(__name__)

RELAXED_TOLERANCE = 1.0e-4
SBSM_SCALE = 0.25  # SBSM scaling parameter b


@dataclass
class IntervalFlux:
    """Flux and shear state for one representative wind speed."""
    u10: float                    # Wind speed at 10 m [m/s]
    u_veg: float                  # Wind speed reduced for vegetation [m/s]
    prob: float = 0.0             # Occurrence probability [0-1]
    u_star: float = 0.0           # Shear velocity [m/s]
    ut_star: float = 0.0          # Threshold shear velocity [m/s]
    zo_salt: float = 0.0          # Saltation roughness length [m]
    flux: float = 0.0             # Sublimation flux [kg/(m²·s)]
    shear_converged: bool = True  # False if the shear solver fell back


def fetch_factor(fetch):
    """
    Fraction of fully developed saltation reached over a fetch [m].
    """
    return 1.0 + (500.0 / (3.0 * fetch)) * (np.exp(-3.0 * fetch / 500.0) - 1.0)


def calc_saltation_transport(u_star, ut_star, air_density, fetch,
                             fetch_correction=True):
    """
    Saltation mass transport rate [kg/(m·s)].

    Liston and Sturm (1998), eq. 6, optionally reduced for limited fetch.
    """
    q_salt = ((C_SALT * air_density / GRAVITY) * (ut_star / u_star)
              * (u_star ** 2 - ut_star ** 2))
    if fetch_correction:
        q_salt *= fetch_factor(fetch)
    return q_salt


def saltation_height(u_star):
    """Height of the saltation layer [m]."""
    return SALT_HEIGHT_COEFF * u_star ** 2 / (2.0 * GRAVITY)


def suspension_top(h_salt, u_star, u10):
    """
    Height at which the suspended mass concentration falls to zero [m].
    """
    ratio = 0.5 * u_star ** 2 / (u10 * SETTLING)
    return h_salt * (ratio / (ratio + 1.0)) ** (VON_KARMAN * u_star / -SETTLING)


def calc_sublimation_flux(e_air, es, z_rh, air_density, ut_star, u_star, fetch,
                          u10, F, method='full', fetch_correction=True,
                          tol=TOLERANCE, relaxed_tol=RELAXED_TOLERANCE):
    """
    Sublimation flux of blowing snow [kg/(m²·s)].

    Negative values are a mass loss from the snowpack.

    Parameters
    ----------
    e_air, es : float
        Actual and saturation vapor pressure [Pa]
    z_rh : float
        Humidity reference height [m]
    air_density : float
        Air density [kg/m³]
    ut_star, u_star : float
        Threshold and actual shear velocity [m/s]
    fetch : float
        Fetch distance [m]
    u10 : float
        Wind speed at 10 m [m/s]
    F : float
        Sublimation denominator [m·s/kg]
    method : str
        'full' or 'simple'
    fetch_correction : bool
        Reduce saltation transport for limited fetch
    tol : float
        Fractional accuracy of the suspension integral
    relaxed_tol : float or None
        Accuracy used for a single retry if the integral does not
        converge; None disables the retry
    """
    if method == 'full':
        return _full_flux(e_air, es, z_rh, air_density, ut_star, u_star, fetch,
                          u10, F, fetch_correction, tol, relaxed_tol)
    elif method == 'simple':
        return _simple_flux(e_air, es, z_rh, u10, F)
    else:
        raise ValueError(f"Unknown flux method: {method}")


def _simple_flux(e_air, es, z_rh, u10, F):
    """SBSM power law, undersaturation taken at 2 m."""
    undersat = (e_air / es - 1.0) * (1.0 - 0.027 * np.log(z_rh / 2.0))
    return SBSM_SCALE * undersat * u10 ** 5 / F


def _full_flux(e_air, es, z_rh, air_density, ut_star, u_star, fetch, u10, F,
               fetch_correction, tol, relaxed_tol):
    """
    Saltation layer (uniform concentration) plus suspension layer.
    """
    q_salt = calc_saltation_transport(u_star, ut_star, air_density, fetch,
                                      fetch_correction)
    h_salt = saltation_height(u_star)

    # Horizontal particle velocity after Pomeroy and Gray (1990)
    particle_v = PARTICLE_RATIO * ut_star
    phi_salt = q_salt / (h_salt * particle_v)

    psi_salt = sublimation_with_height(h_salt / 2.0, es, e_air, u10, F, h_salt,
                                       phi_salt, u_star, z_rh, rate_only=True)
    flux = phi_salt * psi_salt * h_salt

    z_top = suspension_top(h_salt, u_star, u10)
    if z_top <= h_salt:
        return flux

    args = (es, e_air, u10, F, h_salt, phi_salt, u_star, z_rh)
    try:
        suspension, _ = romberg(sublimation_with_height, h_salt, z_top,
                                args=args, tol=tol)
    except IntegrationError as err:
        if (relaxed_tol is None or relaxed_tol <= tol
                or not np.isfinite(err.estimate)):
            raise
        logger.warning("%s; retrying with tolerance %g", err, relaxed_tol)
        suspension, _ = romberg(sublimation_with_height, h_salt, z_top,
                                args=args, tol=relaxed_tol)

    return flux + suspension


def calc_interval_flux(u10, u_veg, t_air, age, liquid_water, z0, e_air, es,
                       z_rh, air_density, fetch, F,
                       probability_method='statistical',
                       threshold_method='variable', flux_method='full',
                       fetch_correction=True, tol=TOLERANCE,
                       relaxed_tol=RELAXED_TOLERANCE):
    """
    Occurrence probability and sublimation flux for one wind speed.

    The occurrence probability uses the wind speed reduced for
    vegetation; shear velocity and threshold use the open 10 m wind.

    Parameters
    ----------
    u10 : float
        Representative 10 m wind speed [m/s]
    u_veg : float
        Wind speed reduced for vegetation [m/s]
    t_air : float
        Air temperature [°C]
    age : float
        Snow age [hours]
    liquid_water : float
        Surface liquid water [m]
    z0 : float
        Snow surface roughness length [m]
    e_air, es : float
        Actual and saturation vapor pressure [Pa]
    z_rh : float
        Humidity reference height [m]
    air_density : float
        Air density [kg/m³]
    fetch : float
        Fetch distance [m]
    F : float
        Sublimation denominator [m·s/kg]

    Returns
    -------
    IntervalFlux
        ``flux`` is not yet weighted by the occurrence probability
    """
    result = IntervalFlux(u10=u10, u_veg=u_veg)

    result.prob = calc_occurrence_probability(t_air, age, liquid_water, u_veg,
                                              method=probability_method)

    # Iterate to find the actual shear stress during saltation
    u_star, zo_salt, root = calc_shear_stress(u10, z0)
    result.u_star = u_star
    result.zo_salt = zo_salt
    result.shear_converged = root.converged

    result.ut_star = calc_threshold_shear(t_air, liquid_water, u10, z0,
                                          result.prob, u_star,
                                          method=threshold_method)

    # A lowered threshold at or below zero (U10 <= 0.5 m/s) moves no snow
    if 0.0 < result.ut_star < u_star and e_air < es:
        result.flux = calc_sublimation_flux(
            e_air, es, z_rh, air_density, result.ut_star, u_star, fetch, u10, F,
            method=flux_method, fetch_correction=fetch_correction,
            tol=tol, relaxed_tol=relaxed_tol
        )

    logger.debug("U10=%.3f Uveg=%.3f prob=%.4f u*=%.4f ut*=%.4f flux=%.3e",
                 u10, u_veg, result.prob, u_star, result.ut_star, result.flux)

    return result
