"""Fixed constants: body IDs, Earth figure, time units, solver limits."""

import math

# Body IDs (NAIF)
SUN_ID = 10
EARTH_ID = 399
MOON_ID = 301

# Time: seconds per unit
SECONDS_PER_HOUR = 3600.0
SECONDS_PER_DAY = 86400.0
HOURS_PER_DAY = 24.0
JD_J2000 = 2451545.0
JD_J2000_MIDNIGHT = 2451544.5  # 2000-01-01 00:00, day 0 for rms-julian

# Angle
ARCMIN_PER_DEGREE = 60.0
DEGREES_PER_HOUR_RA = 15.0

# Earth figure used by the Besselian reduction (IAU 1976)
EARTH_RADIUS_M = 6378140.0
EARTH_RADIUS_KM = EARTH_RADIUS_M / 1000.0
FLATTENING_FACTOR = 0.99664719  # 1 - 1/298.257
INVERSE_FLATTENING_FACTOR = 1.00336409  # geocentric -> geodetic tangent ratio
ECCENTRICITY_SQUARED = 6.694385e-03
AU_KM = 149597870.7

# Sidereal/solar day ratio; converts a TT-UT1 offset in seconds to degrees of hour angle
SIDEREAL_DAY_RATIO = 1.00273781191135448
DELTA_T_TO_DEGREES = SIDEREAL_DAY_RATIO * DEGREES_PER_HOUR_RA / SECONDS_PER_HOUR

# Sun elevation floor: -34' of refraction at the horizon
ELEVATION_LIMIT_DEG = -0.567
ELEVATION_LIMIT = math.sin(math.radians(ELEVATION_LIMIT_DEG))

# Body radii (km)
SUN_RADIUS_KM = 696000.0
MOON_RADIUS_KM = 1737.4

# Solar horizontal parallax at 1 AU (arcsec)
SOLAR_PARALLAX_ARCSEC = 8.793999

# Chauvenet enlargement of the Earth's shadow (1.8% rather than the classic 2%)
CHAUVENET_ENLARGEMENT = 50.9 / 50.0

# Iteration limits and tolerances for the tangency solver
MAX_TIME_ITERATIONS = 20
MAX_LATITUDE_ITERATIONS = 50
TIME_TOLERANCE_HOURS = 1.0e-6
LATITUDE_TOLERANCE_DEG = 1.0e-5
BRACKET_LATITUDE_DEG = 80.0
MAX_LIMIT_SPREAD_DEG = 25.0
ISOCHRONE_TIME_TOLERANCE_HOURS = 0.01
