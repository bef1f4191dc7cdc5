"""
Sublimation rate of blowing snow particles with height.

The loss-rate coefficient psi(z) follows the particle energy balance of
Liston and Sturm (1998) with the Essery et al. (1999) denominator; the
suspended mass concentration phi(z) follows Kind (1992).
Radiation absorbed by the particles is neglected.
"""

import numpy as np

from .constants import RHO_ICE, KIN_VISCOSITY, SETTLING, VON_KARMAN


def particle_radius(z):
    """
    Mean particle radius and mass at height z.

    Radii are gamma distributed with a height-dependent mean radius
    and shape parameter.

    Parameters
    ----------
    z : float
        Height above the snow surface [m]

    Returns
    -------
    r_mean : float
        Radius of the particle of mean mass [m]
    mass : float
        Mean particle mass [kg]
    """
    r_z = 4.6e-5 * z ** -0.258
    alpha = 4.08 + 12.6 * z
    mass = ((4.0 / 3.0) * np.pi * RHO_ICE * r_z ** 3
            * (1.0 + 3.0 / alpha + 2.0 / alpha ** 2))
    r_mean = (3.0 * mass / (4.0 * np.pi * RHO_ICE)) ** (1.0 / 3.0)
    return r_mean, mass


def ventilation_velocity(r_mean, wind):
    """
    Ventilation velocity of a suspended particle [m/s].

    Terminal fall velocity after Pomeroy and Male (1986), turbulent
    fluctuation velocity after Pomeroy (1988), combined as in Lee (1975).
    """
    terminal_v = 1.1e7 * r_mean ** 1.8
    fluctuation_v = 0.005 * wind ** 1.36
    return terminal_v + 3.0 * fluctuation_v * np.cos(np.pi / 4.0)


def undersaturation(z, e_air, es, z_rh):
    """
    Humidity deficit at height z, adjusted from the reference height z_rh.

    Negative when the air is undersaturated.
    """
    return (e_air / es - 1.0) * (1.0 - 0.027 * np.log(z / z_rh))


def sublimation_loss_rate(z, es, e_air, wind, F, z_rh):
    """
    Sublimation loss-rate coefficient psi(z) [1/s].

    Parameters
    ----------
    z : float
        Height above the snow surface [m]
    es : float
        Saturation vapor pressure [Pa]
    e_air : float
        Vapor pressure of the air [Pa]
    wind : float
        Wind speed at 10 m [m/s]
    F : float
        Sublimation denominator [m·s/kg]
    z_rh : float
        Reference height of the humidity measurement [m]
    """
    r_mean, mass = particle_radius(z)

    vent = ventilation_velocity(r_mean, wind)
    reynolds = 2.0 * r_mean * vent / KIN_VISCOSITY
    nusselt = 1.79 + 0.606 * reynolds ** 0.5

    sigma = undersaturation(z, e_air, es, z_rh)
    dm_dt = 2.0 * np.pi * r_mean * sigma * nusselt / F

    return dm_dt / mass


def suspended_concentration(z, phi_r, h_salt, u_star, wind):
    """
    Mass concentration of suspended snow at height z [kg/m³].

    Parameters
    ----------
    z : float
        Height above the snow surface [m]
    phi_r : float
        Mass concentration of the saltation layer [kg/m³]
    h_salt : float
        Height of the saltation layer [m]
    u_star : float
        Shear velocity [m/s]
    wind : float
        Wind speed at 10 m [m/s]
    """
    ratio = 0.5 * u_star ** 2 / (wind * SETTLING)
    decay = (z / h_salt) ** (-SETTLING / (VON_KARMAN * u_star))
    return phi_r * ((ratio + 1.0) * decay - ratio)


def sublimation_with_height(z, es, e_air, wind, F, h_salt, phi_r, u_star, z_rh,
                            rate_only=False):
    """
    Sublimation at height z above the snow surface.

    Parameters
    ----------
    z : float
        Height [m]
    es, e_air : float
        Saturation and actual vapor pressure [Pa]
    wind : float
        Wind speed at 10 m [m/s]
    F : float
        Sublimation denominator [m·s/kg]
    h_salt : float
        Saltation layer height [m]
    phi_r : float
        Saltation layer mass concentration [kg/m³]
    u_star : float
        Shear velocity [m/s]
    z_rh : float
        Humidity reference height [m]
    rate_only : bool
        Return the loss-rate coefficient psi [1/s] instead of the
        sublimation rate psi * phi [kg/(m³·s)]
    """
    psi = sublimation_loss_rate(z, es, e_air, wind, F, z_rh)
    if rate_only:
        return psi
    return psi * suspended_concentration(z, phi_r, h_salt, u_star, wind)
