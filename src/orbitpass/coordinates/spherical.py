"""Spherical-Earth latitude/longitude <-> Cartesian mapping.

This is the simplified model used by the geometry-only distance and
visibility calculations (:mod:`orbitpass.visibility`).  It places points
on a sphere and uses a display-oriented axis convention with ``y`` along
the polar axis:

- colatitude :math:`\\phi = 90^\\circ - \\text{lat}`
- :math:`\\theta = \\text{lon} + 180^\\circ`
- :math:`x = -r \\sin\\phi \\cos\\theta`, :math:`y = r \\cos\\phi`,
  :math:`z = r \\sin\\phi \\sin\\theta`

It is *not* the WGS84 ellipsoid and not the ECEF axis convention; use
:mod:`orbitpass.coordinates.geodetic` for observer positions that feed
look-angle computations.  Because both ends of every distance comparison
go through the same mapping, results stay internally consistent at the
tens-of-kilometres level the live-distance use case needs.

Angles are in degrees, distances in kilometres.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from orbitpass._validation import check_latitude, check_positive
from orbitpass.config import get_dtype


def wrap_longitude(longitude: ArrayLike) -> Array:
    """Normalize longitude to the half-open interval ``(-180, 180]`` degrees.

    Args:
        longitude: Longitude in *deg*, any value.

    Returns:
        Equivalent longitude in ``(-180, 180]``.

    Examples:
        ```python
        from orbitpass.coordinates import wrap_longitude
        wrap_longitude(190.0)   # -170.0
        wrap_longitude(-180.0)  # 180.0
        ```
    """
    longitude = jnp.asarray(longitude, dtype=get_dtype())
    return 180.0 - jnp.mod(180.0 - longitude, 360.0)


def geodetic_to_cartesian(
    latitude: ArrayLike,
    longitude: ArrayLike,
    radius: ArrayLike,
) -> Array:
    """Map a latitude/longitude at a given radius to spherical-model Cartesian.

    Args:
        latitude: Latitude in *deg*, within ``[-90, 90]``.
        longitude: Longitude in *deg*.
        radius: Distance from the Earth's centre in *km* (Earth radius plus
            altitude).  Must be positive.

    Returns:
        Cartesian position ``[x, y, z]`` in *km*.

    Raises:
        InvalidInputError: If the latitude is out of range or the radius is
            not positive (checked for concrete inputs only).

    Examples:
        ```python
        from orbitpass.coordinates import geodetic_to_cartesian
        geodetic_to_cartesian(90.0, 0.0, 6371.0)  # [0, 6371, 0]
        ```
    """
    check_latitude(latitude)
    check_positive(radius, "radius")

    latitude = jnp.asarray(latitude, dtype=get_dtype())
    longitude = jnp.asarray(longitude, dtype=get_dtype())
    radius = jnp.asarray(radius, dtype=get_dtype())

    phi = jnp.deg2rad(90.0 - latitude)
    theta = jnp.deg2rad(longitude + 180.0)

    sin_phi = jnp.sin(phi)
    x = -radius * sin_phi * jnp.cos(theta)
    y = radius * jnp.cos(phi)
    z = radius * sin_phi * jnp.sin(theta)

    return jnp.stack([x, y, z], axis=-1)


def cartesian_to_geodetic(vector: ArrayLike) -> Array:
    """Inverse of :func:`geodetic_to_cartesian`.

    At the poles the longitude is undefined and the returned value is
    arbitrary.

    Args:
        vector: Spherical-model Cartesian position ``[x, y, z]`` in *km*
            (last axis of length 3).

    Returns:
        ``[latitude, longitude, radius]`` with angles in *deg* (longitude in
        ``(-180, 180]``) and radius in *km*.
    """
    vector = jnp.asarray(vector, dtype=get_dtype())

    x = vector[..., 0]
    y = vector[..., 1]
    z = vector[..., 2]

    radius = jnp.sqrt(x * x + y * y + z * z)
    cos_phi = jnp.clip(y / radius, -1.0, 1.0)
    latitude = 90.0 - jnp.rad2deg(jnp.arccos(cos_phi))
    longitude = wrap_longitude(jnp.rad2deg(jnp.arctan2(z, -x)) - 180.0)

    return jnp.stack([latitude, longitude, radius], axis=-1)
