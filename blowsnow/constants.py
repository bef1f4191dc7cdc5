"""
Physical constants for blowing snow sublimation.
"""

# Temperature
TFRZ = 273.15  # Freezing point [K]

# Densities [kg/m³]
RHO_ICE = 917.0

# Latent heats [J/kg]
LF_FUSION = 333700.0  # Latent heat of fusion
LV_VAPORIZATION = 2501000.0  # Latent heat of vaporization at 0°C
LV_SLOPE = 2361.0  # Decrease of Lv with temperature [J/(kg·K)]

# Air properties
TK_AIR = 0.0245187  # Thermal conductivity [W/(m·K)]
KIN_VISCOSITY = 1.3e-5  # Kinematic viscosity [m²/s]
R_AIR = 287.0  # Gas constant for dry air [J/(kg·K)]

# Water vapour
MW_WATER = 0.018016  # Molecular weight [kg/mol]
R_GAS = 8.3143  # Universal gas constant [J/(mol·K)]
DIFFUSIVITY_0 = 2.06e-5  # Vapour diffusivity at 273 K [m²/s]

# Turbulence
Z_REF = 10.0  # Reference height of the wind profile [m]
VON_KARMAN = 0.4
GRAVITY = 9.80616  # [m/s²]
OWEN_COEFF = 0.12  # Saltation roughness coefficient (Owen 1964)

# Saltation / suspension
C_SALT = 0.68  # Saltation constant [m/s]
U_THRESH = 0.25  # Constant threshold shear velocity [m/s]
SETTLING = 0.3  # Particle settling velocity [m/s]
PARTICLE_RATIO = 2.8  # Horizontal particle velocity / threshold shear velocity
SALT_HEIGHT_COEFF = 1.6
WET_SNOW_WATER = 0.001  # Surface liquid water separating dry/wet snow [m]

# Wind distribution
N_WIND_INTERVALS = 10
WIND_MIN = 0.4  # [m/s]
WIND_MAX = 25.0  # [m/s]
SIGMA_W_LIMIT = 10.0
SIGMA_W_FALLBACK = 0.22
BARE_SOIL_FETCH = 1500.0  # [m]
BARE_SOIL_SIGMA_SLOPE = 0.0002

# Output
FLUX_FLOOR = -5.0e-5  # [kg/(m²·s)]

# Index of the snow surface in the roughness-length array
SNOW_SURFACE = 2
