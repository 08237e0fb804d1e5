"""Coordinate transformations.

This sub-module provides conversions between the position representations
used when predicting passes:

- **Spherical**: simplified spherical-Earth ``lat, lon, radius`` <-> Cartesian,
  used by the geometry-only distance calculations
- **Geodetic**: WGS84 ellipsoid ``lat, lon, alt`` <-> ECEF
- **Topocentric (ENZ)**: East-North-Zenith frame and observer look angles
"""

from .geodetic import (
    ecef_to_geodetic,
    geodetic_to_ecef,
)
from .spherical import (
    cartesian_to_geodetic,
    geodetic_to_cartesian,
    wrap_longitude,
)
from .topocentric import (
    ecf_to_look_angles,
    enz_to_azel,
    look_angles_from_ecef,
    rotation_ecef_to_enz,
)

__all__ = [
    "geodetic_to_cartesian",
    "cartesian_to_geodetic",
    "wrap_longitude",
    "geodetic_to_ecef",
    "ecef_to_geodetic",
    "rotation_ecef_to_enz",
    "enz_to_azel",
    "look_angles_from_ecef",
    "ecf_to_look_angles",
]
