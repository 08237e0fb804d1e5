"""
The `constants` module defines the mathematical, time and physical constants used by orbitpass.

Distances are in kilometres and times in seconds unless noted otherwise.
"""

from jax.numpy import pi as PI

# Mathematical Constants
"""
Constant to convert degrees to radians. Equal to 2pi/360. Units: *rad/deg*
"""
DEG2RAD = 2.0 * PI / 360.0

"""
Constant to convert radians to degrees. Equal to 360/2pi. Units: *deg/rad*
"""
RAD2DEG = 360.0 / (PI * 2.0)

# Time Constants

"""
Julian Date of the J2000.0 epoch (2000-01-01 12:00:00). Units: *days*
"""
JD_J2000 = 2451545.0

"""
Julian Date of the Unix epoch (1970-01-01 00:00:00 UTC). Units: *days*
"""
JD_UNIX_EPOCH = 2440587.5

SECONDS_PER_DAY = 86400.0
MINUTES_PER_DAY = 1440.0

# Earth Constants
"""
Mean Earth radius of the spherical Earth model. [km]

Used by the spherical coordinate mapping and the geometry-only distance
and visibility calculations.
"""
R_EARTH_MEAN = 6371.0

"""
Earth's semi-major axis as defined by the WGS84 geodetic system. [km]

References:

1. NIMA Technical Report TR8350.2
"""
WGS84_a = 6378.137  # WGS-84 semi-major axis

"""
Earth's ellipsoidal flattening.  WGS84 Value.

References:

1. NIMA Technical Report TR8350.2
"""
WGS84_f = 1.0 / 298.257223563  # WGS-84 flattening

"""
Earth's Gravitational constant [km^3/s^2]

References:

1. NIMA Technical Report TR8350.2
"""
GM_EARTH = 3.986004418e5

"""
Earth axial rotation rate. [rad/s]

References:

1. D. Vallado, *Fundamentals of Astrodynamics and Applications (4th Ed.)*, p. 222, 2010
"""
OMEGA_EARTH = 7.292115146706979e-5  # [rad/s] Taken from Vallado 4th Ed page 222

# Sun Constants
"""
Mean Earth-Sun distance used to place the Sun on the spherical model. [km]
"""
SUN_DISTANCE = 1.496e8
