"""
Blowing snow sublimation driver.

Integrates the sublimation flux over the sub-grid distribution of 10 m
wind speed (a Laplace distribution around the grid-cell wind), weighting
each representative wind by its probability of blowing snow occurrence.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from .constants import (N_WIND_INTERVALS, WIND_MIN, WIND_MAX, SIGMA_W_LIMIT,
                        SIGMA_W_FALLBACK, BARE_SOIL_FETCH, BARE_SOIL_SIGMA_SLOPE,
                        FLUX_FLOOR, SNOW_SURFACE)
from .exceptions import WindDistributionError
from .flux import IntervalFlux, calc_interval_flux
from .turbulent import (sat_vapor_pressure, wind_at_10m, latent_heat_sublimation,
                        calc_sublimation_denominator)

logger = logging.getLogger(__name__)

# Time-varying inputs accepted by BlowingSnowModel.run
MET_VARIABLES = ('t_air', 'wind', 'e_air', 'snow_depth', 'air_density',
                 'pressure', 'last_snow', 'liquid_water', 't_snow')
REQUIRED_VARIABLES = ('t_air', 'wind', 'e_air', 'snow_depth')


@dataclass
class BlowingSnowConfig:
    """Configuration for blowing snow parameterizations."""

    # Sublimation flux: 'full' (saltation + suspension) or 'simple' (SBSM)
    flux_method: str = 'full'

    # Occurrence probability: 'statistical' or 'constant'
    probability_method: str = 'statistical'

    # Threshold shear velocity: 'variable' or 'constant'
    threshold_method: str = 'variable'

    # Sub-grid wind distribution
    spatial_wind: bool = True
    n_wind_intervals: int = N_WIND_INTERVALS
    strict_wind_intervals: bool = False  # Raise on intervals straddling the mean

    # Saltation fetch dependence
    fetch_correction: bool = True

    # Saturation vapor pressure: 'water' or 'ice'
    svp_method: str = 'water'

    # Suspension layer integration
    integration_tol: float = 1.0e-6
    relaxed_integration_tol: Optional[float] = 1.0e-4


@dataclass
class BlowingSnowForcing:
    """Inputs for one call, as passed by the snowpack energy balance."""
    t_air: float                     # Air temperature [°C]
    wind: float                      # Wind speed 2 m above the snow [m/s]
    e_air: float                     # Actual vapor pressure [Pa]
    snow_depth: float                # Snow depth [m]
    dt: float = 1.0                  # Time step [hours]
    last_snow: float = 1.0           # Time steps since last snowfall
    liquid_water: float = 0.0        # Surface liquid water [m]
    ls: Optional[float] = None       # Latent heat of sublimation [J/kg]
    air_density: float = 1.3         # [kg/m³]
    pressure: float = 101325.0       # [Pa]
    z0: Union[float, Sequence[float]] = 0.0005  # Roughness length(s) [m]
    z_rh: float = 2.0                # Humidity reference height [m]
    lag_one: float = 0.8             # Lag-one autocorrelation of wind
    sigma_slope: float = 0.0003      # Slope variance parameter
    t_snow: float = 0.0              # Snow surface temperature [°C]
    iveg: int = 0                    # Vegetation index
    n_veg: int = 1                   # Number of vegetation types (iveg == n_veg is bare soil)
    fetch: float = 1000.0            # Fetch distance [m]
    displacement: float = 0.0        # Vegetation displacement height [m]
    roughness: float = 0.0           # Vegetation roughness height [m]


@dataclass
class BlowingSnowResult:
    """Flux and diagnostics of one call."""
    flux: float = 0.0                # Floor-clamped flux [kg/(m²·s)]
    total: float = 0.0               # Flux before clamping [kg/(m²·s)]
    wind10: float = 0.0              # 10 m wind speed [m/s]
    sigma_w: float = 0.0             # Standard deviation of wind [m/s]
    sigma_fallback: bool = False     # sigma_w replaced by the fallback value
    straddling: int = 0              # Intervals straddling the mean wind
    intervals: List[IntervalFlux] = field(default_factory=list)

    @property
    def mean_probability(self):
        """Mean occurrence probability over the wind intervals."""
        if not self.intervals:
            return 0.0
        return float(np.mean([i.prob for i in self.intervals]))


def snow_roughness(z0):
    """Snow surface roughness from a scalar or a roughness-length array."""
    z0 = np.asarray(z0, dtype=float)
    if z0.ndim == 0:
        return float(z0)
    if z0.size <= SNOW_SURFACE:
        raise ValueError(
            f"Roughness array needs the snow surface entry at index {SNOW_SURFACE}, "
            f"got {z0.size} values"
        )
    return float(z0[SNOW_SURFACE])


def calc_wind_sigma(wind10, lag_one, sigma_slope):
    """
    Standard deviation of the sub-grid 10 m wind speed.

    Returns
    -------
    sigma_w : float
        [m/s]
    fallback : bool
        True if a runaway value was replaced by SIGMA_W_FALLBACK
    """
    ratio = (2.4 - (0.4 / 0.9) * lag_one) * sigma_slope
    sigma_w = wind10 * ratio

    if abs(sigma_w) > SIGMA_W_LIMIT:
        logger.warning(
            "Wind standard deviation %g out of range (wind10=%g, lag_one=%g, "
            "sigma_slope=%g), using %g",
            sigma_w, wind10, lag_one, sigma_slope, SIGMA_W_FALLBACK
        )
        return SIGMA_W_FALLBACK, True

    return sigma_w, False


def wind_intervals(uo, sigma_w, n=N_WIND_INTERVALS):
    """
    Partition [0, 2 uo] into n intervals of equal Laplace probability.

    The first and last intervals are the tails, truncated at 0 and 2 uo.

    Parameters
    ----------
    uo : float
        Mean wind speed [m/s]
    sigma_w : float
        Scale of the Laplace distribution [m/s]
    n : int
        Number of intervals, even

    Returns
    -------
    bounds : np.ndarray
        Array of shape (n, 2) with lower and upper limits
    """
    if n < 2 or n % 2:
        raise ValueError(f"Number of wind intervals must be even, got {n}")

    area = 1.0 / n
    bounds = np.zeros((n, 2))

    for p in range(n):
        if p == 0:
            lower = 0.0
            upper = uo + sigma_w * np.log(2.0 * (p + 1) * area)
        elif p < n // 2:
            lower = uo + sigma_w * np.log(2.0 * p * area)
            upper = uo + sigma_w * np.log(2.0 * (p + 1) * area)
        elif p < n - 1:
            lower = uo - sigma_w * np.log(2.0 - 2.0 * p * area)
            upper = uo - sigma_w * np.log(2.0 - 2.0 * (p + 1) * area)
        else:
            lower = uo - sigma_w * np.log(2.0 - 2.0 * p * area)
            upper = 2.0 * uo

        upper = max(upper, 0.0)
        lower = min(max(lower, 0.0), upper)
        bounds[p] = lower, upper

    return bounds


def expected_wind(lower, upper, uo, sigma_w, area):
    """
    Expected wind speed within [lower, upper] under the Laplace density.

    Returns None when the interval straddles the mean, where neither
    closed form applies.
    """
    if lower >= uo:
        return -0.5 * ((upper + sigma_w) * np.exp(-(upper - uo) / sigma_w)
                       - (lower + sigma_w) * np.exp(-(lower - uo) / sigma_w)) / area
    elif upper <= uo:
        return 0.5 * ((upper - sigma_w) * np.exp((upper - uo) / sigma_w)
                      - (lower - sigma_w) * np.exp((lower - uo) / sigma_w)) / area
    return None


def vegetation_wind(u10, snow_depth, displacement, roughness):
    """
    Wind speed reduced by vegetation protruding above the snow.

    Drag partition with vegetation height 1.5 d and element density
    (4/3)(z_v / d).
    """
    if displacement <= 0:
        return u10

    hv = 1.5 * displacement
    nd = (4.0 / 3.0) * (roughness / displacement)

    if snow_depth < hv:
        return u10 / np.sqrt(1.0 + 680.0 * nd * (hv - snow_depth))
    return u10


def calc_blowing_snow_detailed(forcing: BlowingSnowForcing,
                               config: Optional[BlowingSnowConfig] = None
                               ) -> BlowingSnowResult:
    """
    Sublimation flux from blowing snow, with diagnostics.

    Parameters
    ----------
    forcing : BlowingSnowForcing
        Meteorological and surface inputs
    config : BlowingSnowConfig, optional
        Parameterization choices. Uses defaults if not provided.

    Returns
    -------
    BlowingSnowResult
        ``flux`` is negative for a mass loss and never below FLUX_FLOOR
    """
    cfg = config if config else BlowingSnowConfig()
    result = BlowingSnowResult()

    if forcing.snow_depth <= 0.0:
        return result

    z0 = snow_roughness(forcing.z0)
    age = forcing.last_snow * forcing.dt

    es = sat_vapor_pressure(forcing.t_air, method=cfg.svp_method)
    ls = forcing.ls if forcing.ls is not None else latent_heat_sublimation(forcing.t_snow)
    F = calc_sublimation_denominator(forcing.t_air, ls, es)

    # Grid cell 10 m wind speed is the median of the distribution
    wind10 = float(wind_at_10m(forcing.wind, z0))

    fetch = forcing.fetch
    sigma_slope = forcing.sigma_slope
    if forcing.iveg == forcing.n_veg:
        fetch = BARE_SOIL_FETCH
        sigma_slope = BARE_SOIL_SIGMA_SLOPE

    sigma_w, sigma_fallback = calc_wind_sigma(wind10, forcing.lag_one, sigma_slope)
    result.wind10 = wind10
    result.sigma_w = sigma_w
    result.sigma_fallback = sigma_fallback

    flux_kwargs = dict(
        t_air=forcing.t_air, age=age, liquid_water=forcing.liquid_water, z0=z0,
        e_air=forcing.e_air, es=es, z_rh=forcing.z_rh,
        air_density=forcing.air_density, fetch=fetch, F=F,
        probability_method=cfg.probability_method,
        threshold_method=cfg.threshold_method,
        flux_method=cfg.flux_method,
        fetch_correction=cfg.fetch_correction,
        tol=cfg.integration_tol,
        relaxed_tol=cfg.relaxed_integration_tol,
    )

    total = 0.0

    if cfg.spatial_wind and sigma_w != 0.0:
        n = cfg.n_wind_intervals
        area = 1.0 / n

        for p, (lower, upper) in enumerate(wind_intervals(wind10, sigma_w, n)):
            u10 = expected_wind(lower, upper, wind10, sigma_w, area)

            if u10 is None:
                result.straddling += 1
                msg = (f"Wind interval {p} [{lower:g}, {upper:g}] straddles the "
                       f"mean wind {wind10:g} (sigma_w={sigma_w:g}, "
                       f"lag_one={forcing.lag_one:g}, sigma_slope={sigma_slope:g})")
                if cfg.strict_wind_intervals:
                    raise WindDistributionError(msg)
                logger.warning("%s, using %g m/s", msg, WIND_MIN)
                u10 = WIND_MIN

            u10 = float(np.clip(u10, WIND_MIN, WIND_MAX))
            u_veg = vegetation_wind(u10, forcing.snow_depth,
                                    forcing.displacement, forcing.roughness)

            interval = calc_interval_flux(u10, u_veg, **flux_kwargs)
            result.intervals.append(interval)
            total += area * interval.flux * interval.prob

    else:
        uo = float(np.clip(wind10, WIND_MIN, WIND_MAX))
        u_veg = vegetation_wind(uo, forcing.snow_depth,
                                forcing.displacement, forcing.roughness)

        interval = calc_interval_flux(uo, u_veg, **flux_kwargs)
        result.intervals.append(interval)
        total = interval.flux * interval.prob

    result.total = float(total)
    result.flux = max(result.total, FLUX_FLOOR)

    return result


def calc_blowing_snow(forcing: BlowingSnowForcing,
                      config: Optional[BlowingSnowConfig] = None) -> float:
    """
    Sublimation flux from blowing snow [kg/(m²·s)], negative for a loss.

    See calc_blowing_snow_detailed for the diagnostics.
    """
    return calc_blowing_snow_detailed(forcing, config).flux


class BlowingSnowModel:
    """
    Blowing snow sublimation with switchable parameterizations.

    Examples
    --------
    >>> config = BlowingSnowConfig(flux_method='full', threshold_method='variable')
    >>> model = BlowingSnowModel(config)
    >>> flux = model.step(BlowingSnowForcing(t_air=-10.0, wind=8.0, e_air=260.0,
    ...                                      snow_depth=0.3))
    """

    def __init__(self, config: Optional[BlowingSnowConfig] = None):
        """
        Initialize the model.

        Parameters
        ----------
        config : BlowingSnowConfig, optional
            Model configuration. Uses defaults if not provided.
        """
        self.config = config if config else BlowingSnowConfig()
        self.result = BlowingSnowResult()

    def reset(self):
        """Forget the diagnostics of the last step."""
        self.result = BlowingSnowResult()

    def step(self, forcing: BlowingSnowForcing) -> float:
        """
        Compute the flux for one time step.

        The full result is kept on ``self.result``.
        """
        self.result = calc_blowing_snow_detailed(forcing, self.config)
        return self.result.flux

    def run(self, forcing_data, site: Optional[Dict[str, Any]] = None,
            dt: float = 1.0, verbose: bool = False) -> Dict[str, np.ndarray]:
        """
        Run the model for a series of time steps.

        Parameters
        ----------
        forcing_data : mapping or pandas.DataFrame
            Equal-length series keyed by names in MET_VARIABLES;
            t_air, wind, e_air and snow_depth are required
        site : dict, optional
            Static BlowingSnowForcing fields (z0, z_rh, lag_one, fetch, ...);
            must not repeat dt or a variable given in forcing_data
        dt : float
            Time step [hours]
        verbose : bool
            Print progress

        Returns
        -------
        dict
            Output arrays with keys: flux, total, wind10, sigma_w, mean_probability
        """
        missing = [k for k in REQUIRED_VARIABLES if k not in forcing_data]
        if missing:
            raise ValueError(f"Missing forcing variables: {', '.join(missing)}")

        series = {k: np.asarray(forcing_data[k], dtype=float)
                  for k in MET_VARIABLES if k in forcing_data}
        site = dict(site) if site else {}
        overlap = sorted(set(site) & (set(series) | {'dt'}))
        if overlap:
            raise ValueError(
                f"Site parameters repeat forcing variables: {', '.join(overlap)}"
            )
        n_steps = len(series['t_air'])

        outputs = {
            'flux': np.zeros(n_steps),
            'total': np.zeros(n_steps),
            'wind10': np.zeros(n_steps),
            'sigma_w': np.zeros(n_steps),
            'mean_probability': np.zeros(n_steps),
        }

        self.reset()

        for i in range(n_steps):
            if verbose and i % 1000 == 0:
                print(f"Step {i}/{n_steps}")

            met = {k: float(v[i]) for k, v in series.items()}
            forcing = BlowingSnowForcing(dt=dt, **site, **met)

            outputs['flux'][i] = self.step(forcing)
            outputs['total'][i] = self.result.total
            outputs['wind10'][i] = self.result.wind10
            outputs['sigma_w'][i] = self.result.sigma_w
            outputs['mean_probability'][i] = self.result.mean_probability

        return outputs
