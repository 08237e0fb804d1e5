"""
orbitpass predicts satellite visibility passes from Two-Line Element sets, with SGP4/SDP4 implemented in JAX.
"""

from .constants import (
    DEG2RAD,
    RAD2DEG,
    JD_J2000,
    R_EARTH_MEAN,
    WGS84_a,
    WGS84_f,
    GM_EARTH,
    OMEGA_EARTH,
)

from .config import set_dtype, get_dtype, set_stale_tle_days, get_stale_tle_days

from .exceptions import (
    OrbitPassError,
    MalformedTLEError,
    InvalidInputError,
    PropagationError,
    ScanCancelledError,
)

from ._types import (
    Frame,
    PositionVector,
    GeodeticPosition,
    Observer,
    LookAngles,
)

from .time import greenwich_sidereal_time, datetime_to_jd, jd_to_datetime

from .frames import (
    rotation_eci_to_ecef,
    position_eci_to_ecef,
    position_ecef_to_eci,
    state_eci_to_ecef,
    eci_to_ecf,
)

from .coordinates import (
    geodetic_to_cartesian,
    cartesian_to_geodetic,
    geodetic_to_ecef,
    ecef_to_geodetic,
    ecf_to_look_angles,
)

from .sgp4 import (
    TwoLineElement,
    parse_tle,
    parse_tle_text,
    Propagator,
    propagate,
)

from .passes import (
    Pass,
    PassSearchConfig,
    find_passes,
    iter_passes,
)

__all__ = [
    # Constants
    "DEG2RAD",
    "RAD2DEG",
    "JD_J2000",
    "R_EARTH_MEAN",
    "WGS84_a",
    "WGS84_f",
    "GM_EARTH",
    "OMEGA_EARTH",
    # Config
    "set_dtype",
    "get_dtype",
    "set_stale_tle_days",
    "get_stale_tle_days",
    # Exceptions
    "OrbitPassError",
    "MalformedTLEError",
    "InvalidInputError",
    "PropagationError",
    "ScanCancelledError",
    # Types
    "Frame",
    "PositionVector",
    "GeodeticPosition",
    "Observer",
    "LookAngles",
    # Time
    "greenwich_sidereal_time",
    "datetime_to_jd",
    "jd_to_datetime",
    # Frames
    "rotation_eci_to_ecef",
    "position_eci_to_ecef",
    "position_ecef_to_eci",
    "state_eci_to_ecef",
    "eci_to_ecf",
    # Coordinates
    "geodetic_to_cartesian",
    "cartesian_to_geodetic",
    "geodetic_to_ecef",
    "ecef_to_geodetic",
    "ecf_to_look_angles",
    # SGP4
    "TwoLineElement",
    "parse_tle",
    "parse_tle_text",
    "Propagator",
    "propagate",
    # Passes
    "Pass",
    "PassSearchConfig",
    "find_passes",
    "iter_passes",
]
