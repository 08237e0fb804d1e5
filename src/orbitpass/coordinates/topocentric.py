"""East-North-Zenith (ENZ) topocentric frame and look angles.

The ENZ frame is a right-handed coordinate system attached to an observer:

- **East** (E): tangent to the surface, pointing geographic east
- **North** (N): tangent to the surface, pointing geographic north
- **Zenith** (Z): normal to the WGS84 ellipsoid, pointing outward

Look angles are derived from the ENZ components of the observer-to-target
vector.  Azimuth is measured clockwise from north in ``[0, 360)`` degrees
and elevation from the local horizon, in degrees.  Distances are in
kilometres.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from orbitpass._types import LookAngles, Observer
from orbitpass.config import get_dtype


def rotation_ecef_to_enz(latitude: ArrayLike, longitude: ArrayLike) -> Array:
    """Compute the rotation matrix from ECEF to East-North-Zenith.

    Args:
        latitude: Observer geodetic latitude in *deg*.
        longitude: Observer longitude in *deg*.

    Returns:
        3x3 rotation matrix (ECEF -> ENZ).

    Examples:
        ```python
        from orbitpass.coordinates import rotation_ecef_to_enz
        rot = rotation_ecef_to_enz(60.0, 30.0)
        ```
    """
    dtype = get_dtype()
    lat = jnp.deg2rad(jnp.asarray(latitude, dtype=dtype))
    lon = jnp.deg2rad(jnp.asarray(longitude, dtype=dtype))

    sin_lon = jnp.sin(lon)
    cos_lon = jnp.cos(lon)
    sin_lat = jnp.sin(lat)
    cos_lat = jnp.cos(lat)

    # Rows are E, N, Z basis vectors expressed in ECEF
    return jnp.array([
        [-sin_lon, cos_lon, 0.0],                             # East
        [-sin_lat * cos_lon, -sin_lat * sin_lon, cos_lat],    # North
        [cos_lat * cos_lon, cos_lat * sin_lon, sin_lat],      # Zenith
    ], dtype=dtype)


def enz_to_azel(x_enz: ArrayLike) -> Array:
    """Convert an ENZ vector to azimuth, elevation and range.

    At the zenith singularity the azimuth is undefined and reported as 0.

    Args:
        x_enz: ENZ vector ``[east, north, zenith]`` in *km*.

    Returns:
        ``[azimuth, elevation, range]`` with azimuth in ``[0, 360)`` *deg*,
        elevation in ``[-90, 90]`` *deg* and range in *km*.

    Examples:
        ```python
        from orbitpass.coordinates import enz_to_azel
        enz_to_azel([100.0, 0.0, 0.0])  # [90, 0, 100]
        ```
    """
    x_enz = jnp.asarray(x_enz, dtype=get_dtype())

    e = x_enz[0]
    n = x_enz[1]
    z = x_enz[2]

    rho = jnp.sqrt(e * e + n * n + z * z)

    horiz = jnp.sqrt(e * e + n * n)
    el = jnp.arctan2(z, horiz)

    az_raw = jnp.arctan2(e, n)
    az_wrapped = jnp.where(az_raw >= 0.0, az_raw, az_raw + 2.0 * jnp.pi)
    az = jnp.where(horiz == 0.0, 0.0, az_wrapped)

    return jnp.stack([jnp.rad2deg(az), jnp.rad2deg(el), rho])


def look_angles_from_ecef(
    observer_ecef: ArrayLike,
    rotation: ArrayLike,
    r_ecef: ArrayLike,
) -> LookAngles:
    """Look angles with a precomputed observer position and ENZ rotation.

    This is the traceable core of :func:`ecf_to_look_angles`; pass scans
    call it under ``jax.vmap`` with the observer terms held fixed.

    Args:
        observer_ecef: Observer ECEF position in *km*.
        rotation: ECEF -> ENZ rotation at the observer.
        r_ecef: Target ECEF position in *km*.

    Returns:
        :class:`LookAngles` in degrees and kilometres.
    """
    x_enz = rotation @ (r_ecef - observer_ecef)
    az, el, rho = enz_to_azel(x_enz)
    return LookAngles(azimuth=az, elevation=el, range=rho)


def ecf_to_look_angles(observer: Observer, r_ecef: ArrayLike) -> LookAngles:
    """Look angles from a ground observer to a target given in ECEF.

    Args:
        observer: Observer on the WGS84 ellipsoid.
        r_ecef: Target ECEF position ``[x, y, z]`` in *km*.

    Returns:
        :class:`LookAngles` with azimuth clockwise from north in
        ``[0, 360)`` *deg*, elevation in *deg* and slant range in *km*.

    Examples:
        ```python
        from orbitpass import Observer
        from orbitpass.coordinates import ecf_to_look_angles, geodetic_to_ecef
        obs = Observer(0.0, 0.0)
        overhead = geodetic_to_ecef(0.0, 0.0, 500.0)
        ecf_to_look_angles(obs, overhead).elevation  # 90
        ```
    """
    r_ecef = jnp.asarray(r_ecef, dtype=get_dtype())
    rotation = rotation_ecef_to_enz(observer.latitude, observer.longitude)
    return look_angles_from_ecef(observer.to_ecef(), rotation, r_ecef)
