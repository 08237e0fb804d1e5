"""
Geometry-only distance and visibility between two points.

These functions answer instantaneous "how far away and where in the sky"
questions for a target given directly as latitude/longitude/altitude, for
example a live satellite position from a tracking feed.  They model the
Earth as a sphere of radius :data:`~orbitpass.constants.R_EARTH_MEAN`.

:func:`elevation_angle` is a flat-local-horizon approximation,
``atan2(altitude difference, surface distance)``.  It ignores the Earth's
curvature between the two points and is therefore *not* the topocentric
elevation used by :mod:`orbitpass.passes`; use
:func:`~orbitpass.coordinates.ecf_to_look_angles` when a true look angle is
needed.

Angles are in degrees, distances in kilometres.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from orbitpass._types import GeodeticPosition, Observer
from orbitpass._validation import check_latitude
from orbitpass.config import get_dtype
from orbitpass.constants import R_EARTH_MEAN, SUN_DISTANCE
from orbitpass.coordinates.spherical import geodetic_to_cartesian


def _as_geodetic(point: GeodeticPosition | Observer) -> GeodeticPosition:
    if isinstance(point, Observer):
        return point.as_geodetic()
    return point


def surface_distance(
    lat1: ArrayLike,
    lon1: ArrayLike,
    lat2: ArrayLike,
    lon2: ArrayLike,
) -> Array:
    """Great-circle distance between two surface points (Haversine).

    Args:
        lat1: Latitude of the first point in *deg*.
        lon1: Longitude of the first point in *deg*.
        lat2: Latitude of the second point in *deg*.
        lon2: Longitude of the second point in *deg*.

    Returns:
        Distance along the surface of the sphere in *km*.

    Raises:
        InvalidInputError: If a latitude is outside ``[-90, 90]``.

    Examples:
        ```python
        from orbitpass.visibility import surface_distance
        surface_distance(0.0, 0.0, 0.0, 1.0)  # ~111.19 km
        ```
    """
    check_latitude(lat1, "lat1")
    check_latitude(lat2, "lat2")

    dtype = get_dtype()
    phi1 = jnp.deg2rad(jnp.asarray(lat1, dtype=dtype))
    phi2 = jnp.deg2rad(jnp.asarray(lat2, dtype=dtype))
    dphi = phi2 - phi1
    dlam = jnp.deg2rad(jnp.asarray(lon2, dtype=dtype) - jnp.asarray(lon1, dtype=dtype))

    a = jnp.sin(dphi / 2.0) ** 2 + jnp.cos(phi1) * jnp.cos(phi2) * jnp.sin(dlam / 2.0) ** 2
    a = jnp.clip(a, 0.0, 1.0)
    c = 2.0 * jnp.arctan2(jnp.sqrt(a), jnp.sqrt(1.0 - a))
    return R_EARTH_MEAN * c


def three_d_distance(
    p1: GeodeticPosition | Observer,
    p2: GeodeticPosition | Observer,
) -> Array:
    """Straight-line distance between two points at altitude [km]."""
    a = _as_geodetic(p1).to_cartesian()
    b = _as_geodetic(p2).to_cartesian()
    return jnp.linalg.norm(b - a)


def bearing(
    lat1: ArrayLike,
    lon1: ArrayLike,
    lat2: ArrayLike,
    lon2: ArrayLike,
) -> Array:
    """Initial great-circle bearing from the first point to the second.

    Longitudes only enter through their difference, so adding 360 degrees
    to either leaves the result unchanged.

    Args:
        lat1: Latitude of the start point in *deg*.
        lon1: Longitude of the start point in *deg*.
        lat2: Latitude of the end point in *deg*.
        lon2: Longitude of the end point in *deg*.

    Returns:
        Bearing clockwise from north in *deg*, in ``[0, 360)``.

    Raises:
        InvalidInputError: If a latitude is outside ``[-90, 90]``.

    Examples:
        ```python
        from orbitpass.visibility import bearing
        bearing(0.0, 0.0, 0.0, 10.0)  # 90.0
        ```
    """
    check_latitude(lat1, "lat1")
    check_latitude(lat2, "lat2")

    dtype = get_dtype()
    phi1 = jnp.deg2rad(jnp.asarray(lat1, dtype=dtype))
    phi2 = jnp.deg2rad(jnp.asarray(lat2, dtype=dtype))
    dlam = jnp.deg2rad(jnp.asarray(lon2, dtype=dtype) - jnp.asarray(lon1, dtype=dtype))

    y = jnp.sin(dlam) * jnp.cos(phi2)
    x = jnp.cos(phi1) * jnp.sin(phi2) - jnp.sin(phi1) * jnp.cos(phi2) * jnp.cos(dlam)
    return jnp.mod(jnp.rad2deg(jnp.arctan2(y, x)) + 360.0, 360.0)


def azimuth_angle(
    observer: GeodeticPosition | Observer,
    target: GeodeticPosition | Observer,
) -> Array:
    """Azimuth of *target* seen from *observer*: the initial bearing [deg]."""
    obs = _as_geodetic(observer)
    tgt = _as_geodetic(target)
    return bearing(obs.latitude, obs.longitude, tgt.latitude, tgt.longitude)


def elevation_angle(
    observer: GeodeticPosition | Observer,
    target: GeodeticPosition | Observer,
) -> Array:
    """Approximate elevation of *target* above the observer's horizon.

    Computed as ``atan2(target altitude - observer altitude, surface
    distance)``.  This treats the horizon as a flat plane and overestimates
    the elevation of distant targets.

    Args:
        observer: Observer position.
        target: Target position.

    Returns:
        Elevation in *deg*.  A target directly overhead gives 90.
    """
    obs = _as_geodetic(observer)
    tgt = _as_geodetic(target)
    horizontal = surface_distance(obs.latitude, obs.longitude, tgt.latitude, tgt.longitude)
    vertical = jnp.asarray(tgt.altitude - obs.altitude, dtype=get_dtype())
    return jnp.rad2deg(jnp.arctan2(vertical, horizontal))


def is_visible(
    observer: GeodeticPosition | Observer,
    target: GeodeticPosition | Observer,
    min_elevation: float = 10.0,
) -> bool:
    """``True`` when :func:`elevation_angle` is at least ``min_elevation`` degrees."""
    return bool(elevation_angle(observer, target) >= min_elevation)


def solar_angle(target: GeodeticPosition, sun_latitude: float, sun_longitude: float) -> Array:
    """Angle at the Earth's centre between a target and the Sun.

    The Sun is placed at :data:`~orbitpass.constants.SUN_DISTANCE` above
    the sub-solar point on the spherical model.

    Args:
        target: Target position.
        sun_latitude: Sub-solar latitude in *deg*.
        sun_longitude: Sub-solar longitude in *deg*.

    Returns:
        Angle in *deg*, in ``[0, 180]``.
    """
    a = _as_geodetic(target).to_cartesian()
    b = geodetic_to_cartesian(sun_latitude, sun_longitude, SUN_DISTANCE)
    cos_angle = jnp.dot(a, b) / (jnp.linalg.norm(a) * jnp.linalg.norm(b))
    return jnp.rad2deg(jnp.arccos(jnp.clip(cos_angle, -1.0, 1.0)))


def is_in_sunlight(target: GeodeticPosition, sun_latitude: float, sun_longitude: float) -> bool:
    """``True`` when :func:`solar_angle` is below 90 degrees.

    This is a day-side test on the target's direction only; Earth's shadow
    cone is not modelled.
    """
    return bool(solar_angle(target, sun_latitude, sun_longitude) < 90.0)
