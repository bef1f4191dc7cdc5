"""
Surface-layer quantities for blowing snow.

Includes:
- Saturation vapor pressure (Magnus form, optional ice correction)
- Log-law wind adjustment to 10 m
- Particle sublimation denominator (Essery et al. 1999)
- Implicit shear stress during saltation (Owen 1964 roughness)
"""

import numpy as np

from .constants import (TFRZ, TK_AIR, R_AIR, MW_WATER, R_GAS, DIFFUSIVITY_0,
                        VON_KARMAN, GRAVITY, OWEN_COEFF, LF_FUSION,
                        LV_VAPORIZATION, LV_SLOPE, Z_REF)
from .root import newton_safe

SHEAR_LOWER = 1.0e-7  # Lower bracket for the shear velocity [m/s]
SHEAR_MARGIN = 5.0  # Added to the log-law estimate for the upper bracket [m/s]
SHEAR_TOL = 1.0e-6
SHEAR_FALLBACK = 0.025  # Shear velocity used if the solver does not converge [m/s]


def sat_vapor_pressure(t_air, method='water'):
    """
    Saturation vapor pressure [Pa].

    Parameters
    ----------
    t_air : float
        Air temperature [°C]
    method : str
        'water': Magnus formula over water at all temperatures
        'ice': Below 0°C apply the polynomial correction for ice

    Returns
    -------
    es : float
        Saturation vapor pressure [Pa]
    """
    es = 610.78 * np.exp(17.269 * t_air / (237.3 + t_air))

    if method == 'water':
        return es
    elif method == 'ice':
        if t_air < 0:
            es *= 1.0 + 0.00972 * t_air + 0.000042 * t_air ** 2
        return es
    else:
        raise ValueError(f"Unknown vapor pressure method: {method}")


def wind_at_10m(wind, z0, z_wind=2.0):
    """
    Scale wind measured z_wind above the snow to 10 m with the log law.

    Parameters
    ----------
    wind : float
        Wind speed [m/s]
    z0 : float
        Snow roughness length [m]
    z_wind : float
        Measurement height above the snow surface [m]
    """
    return wind * np.log(Z_REF / z0) / np.log((z_wind + z0) / z0)


def latent_heat_sublimation(t_snow):
    """
    Latent heat of sublimation [J/kg] at snow temperature t_snow [°C].
    """
    lv = LV_VAPORIZATION - LV_SLOPE * t_snow
    return lv + LF_FUSION


def calc_sublimation_denominator(t_air, ls, es):
    """
    Denominator F of the particle mass-loss equation.

    Essery et al. (1999), eq. 6, combining heat conduction and vapour
    diffusion resistances.

    Parameters
    ----------
    t_air : float
        Air temperature [°C]
    ls : float
        Latent heat of sublimation [J/kg]
    es : float
        Saturation vapor pressure [Pa]

    Returns
    -------
    F : float
        [m·s/kg]
    """
    t_k = t_air + TFRZ

    # Saturation density of water vapour, Liston and Sturm (1998) A-8
    rho_sat = 0.622 * es / (R_AIR * t_k)

    # Diffusivity, Liston and Sturm (1998) A-7
    diffusivity = DIFFUSIVITY_0 * (t_k / 273.0) ** 1.75

    F = (ls / (TK_AIR * t_k)) * (ls * MW_WATER / (R_GAS * t_k) - 1.0)
    F += 1.0 / (diffusivity * rho_sat)

    return F


def shear_equation(u_star, u_ref, z_ref):
    """
    Residual of the saltation log-wind profile and its derivative.

    With the saltation roughness z0 = 0.12 u*² / (2g) the log law gives
    exp(k U / u*) = 2 g Z / (0.12 u*²).

    Returns
    -------
    f : float
        Residual
    df : float
        d f / d u*
    """
    with np.errstate(over='ignore'):
        e = np.exp(VON_KARMAN * u_ref / u_star)
    c = 2.0 * GRAVITY * z_ref / OWEN_COEFF

    f = e - c / u_star ** 2
    df = -e * VON_KARMAN * u_ref / u_star ** 2 + 2.0 * c / u_star ** 3

    return float(f), float(df)


def calc_shear_stress(u10, z0):
    """
    Shear velocity and saltation roughness for a 10 m wind speed.

    Parameters
    ----------
    u10 : float
        Wind speed at 10 m [m/s]
    z0 : float
        Snow surface roughness length [m]

    Returns
    -------
    u_star : float
        Shear velocity [m/s]
    zo_salt : float
        Roughness length during saltation [m]
    root : RootResult
        Solver outcome
    """
    u_log = VON_KARMAN * u10 / np.log(Z_REF / z0)

    root = newton_safe(shear_equation, SHEAR_LOWER, u_log + SHEAR_MARGIN,
                       SHEAR_TOL, args=(u10, Z_REF), fallback=SHEAR_FALLBACK)
    u_star = root.value
    zo_salt = OWEN_COEFF * u_star ** 2 / (2.0 * GRAVITY)

    # Saltation cannot make the surface smoother
    if zo_salt < z0:
        zo_salt = z0
        u_star = u_log

    return u_star, zo_salt, root
