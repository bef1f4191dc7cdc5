"""
BlowSnow: Sublimation from blowing snow for snowpack energy balance models.

Estimates the sublimation flux of wind-transported snow from the saltation
and suspension layers (Liston and Sturm 1998, Essery et al. 1999), averaged
over a Laplace distribution of sub-grid wind speed and weighted by the
probability of blowing snow occurrence (Li and Pomeroy 1997).

Usage
-----
>>> from blowsnow import BlowingSnowConfig, BlowingSnowForcing, calc_blowing_snow
>>>
>>> config = BlowingSnowConfig(
...     flux_method='full',             # 'full', 'simple'
...     threshold_method='variable',    # 'variable', 'constant'
...     probability_method='statistical'  # 'statistical', 'constant'
... )
>>> forcing = BlowingSnowForcing(t_air=-10.0, wind=8.0, e_air=260.0,
...                              snow_depth=0.3, last_snow=48)
>>> flux = calc_blowing_snow(forcing, config)  # kg/(m²·s), negative = loss

Available Methods
-----------------
Sublimation Flux:
    - 'full': Saltation layer plus Romberg-integrated suspension layer
    - 'simple': SBSM power law in 10 m wind speed

Occurrence Probability:
    - 'statistical': Li and Pomeroy (1997), dry and wet snow
    - 'constant': Blowing snow always occurs

Threshold Shear Velocity:
    - 'variable': Li and Pomeroy (1997) threshold wind speed
    - 'constant': 0.25 m/s

Saturation Vapor Pressure:
    - 'water': Magnus formula over water
    - 'ice': With sub-freezing correction
"""

from .model import (BlowingSnowModel, BlowingSnowConfig, BlowingSnowForcing,
                    BlowingSnowResult, calc_blowing_snow, calc_blowing_snow_detailed)
from .exceptions import (BlowingSnowError, RootNotBracketedError, IntegrationError,
                         WindDistributionError)
from .constants import FLUX_FLOOR

__version__ = '0.1.0'
__all__ = ['BlowingSnowModel', 'BlowingSnowConfig', 'BlowingSnowForcing',
           'BlowingSnowResult', 'calc_blowing_snow', 'calc_blowing_snow_detailed',
           'BlowingSnowError', 'RootNotBracketedError', 'IntegrationError',
           'WindDistributionError', 'FLUX_FLOOR']
