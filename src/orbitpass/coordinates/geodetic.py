"""Geodetic (WGS84 ellipsoid) coordinate transformations.

Converts between geodetic ``latitude, longitude, altitude`` and
Earth-Centered Earth-Fixed (ECEF) Cartesian coordinates ``[x, y, z]``.
Observer positions used for look angles and satellite sub-points are
computed with this model.

The forward transformation is closed-form; the inverse uses Bowring's
iterative method implemented with ``jax.lax.while_loop`` so that it can be
traced under ``jax.jit`` and ``jax.vmap``.

Angles are in degrees and distances in kilometres.

References:
    1. NIMA Technical Report TR8350.2, *Department of Defense World Geodetic
       System 1984*.
    2. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, Springer, 2012, Sec. 5.3.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from orbitpass.config import get_dtype
from orbitpass.constants import WGS84_a, WGS84_f

# First eccentricity squared of the WGS84 ellipsoid
ECC2 = WGS84_f * (2.0 - WGS84_f)


def geodetic_to_ecef(
    latitude: ArrayLike,
    longitude: ArrayLike,
    altitude: ArrayLike = 0.0,
) -> Array:
    """Convert a geodetic position to ECEF Cartesian coordinates.

    Uses the WGS84 prime vertical radius of curvature:

    .. math::

        N = \\frac{a}{\\sqrt{1 - e^2 \\sin^2 \\phi}}

    Args:
        latitude: Geodetic latitude in *deg*.
        longitude: Longitude in *deg*.
        altitude: Height above the WGS84 ellipsoid in *km*.

    Returns:
        ECEF position ``[x, y, z]`` in *km*.

    Examples:
        ```python
        from orbitpass.coordinates import geodetic_to_ecef
        geodetic_to_ecef(0.0, 0.0)  # [6378.137, 0, 0]
        ```
    """
    dtype = get_dtype()
    lat = jnp.deg2rad(jnp.asarray(latitude, dtype=dtype))
    lon = jnp.deg2rad(jnp.asarray(longitude, dtype=dtype))
    alt = jnp.asarray(altitude, dtype=dtype)

    sin_lat = jnp.sin(lat)
    cos_lat = jnp.cos(lat)

    N = WGS84_a / jnp.sqrt(1.0 - ECC2 * sin_lat * sin_lat)

    x = (N + alt) * cos_lat * jnp.cos(lon)
    y = (N + alt) * cos_lat * jnp.sin(lon)
    z = ((1.0 - ECC2) * N + alt) * sin_lat

    return jnp.stack([x, y, z], axis=-1)


def ecef_to_geodetic(r_ecef: ArrayLike) -> Array:
    """Convert ECEF Cartesian coordinates to a geodetic position.

    Uses Bowring's iterative method (at most 10 iterations) with a
    convergence threshold scaled to the active dtype's precision.

    Args:
        r_ecef: ECEF position ``[x, y, z]`` in *km*.

    Returns:
        ``[latitude, longitude, altitude]`` with angles in *deg* and
        altitude in *km* above the WGS84 ellipsoid.

    Examples:
        ```python
        from orbitpass.constants import WGS84_a
        from orbitpass.coordinates import ecef_to_geodetic
        ecef_to_geodetic([WGS84_a, 0.0, 0.0])  # [0, 0, 0]
        ```
    """
    dtype = get_dtype()
    r_ecef = jnp.asarray(r_ecef, dtype=dtype)

    x = r_ecef[0]
    y = r_ecef[1]
    z = r_ecef[2]

    eps = 1.0e-3 * WGS84_a * jnp.finfo(dtype).eps
    rho2 = x * x + y * y

    # State: (dz, dz_prev, iteration_count)
    dz0 = ECC2 * z

    def cond(state):
        dz, dz_prev, i = state
        return (jnp.abs(dz - dz_prev) > eps) & (i < 10)

    def body(state):
        dz, _, i = state
        zdz = z + dz
        Nh = jnp.sqrt(rho2 + zdz * zdz)
        sinphi = zdz / Nh
        N = WGS84_a / jnp.sqrt(1.0 - ECC2 * sinphi * sinphi)
        return (N * ECC2 * sinphi, dz, i + 1)

    # dz_prev starts far from dz0 to force the first iteration
    init_state = (dz0, dz0 + 1.0e10, jnp.int32(0))
    dz_final, _, _ = jax.lax.while_loop(cond, body, init_state)

    zdz = z + dz_final
    lon = jnp.arctan2(y, x)
    lat = jnp.arctan2(zdz, jnp.sqrt(rho2))

    sinphi = zdz / jnp.sqrt(rho2 + zdz * zdz)
    N = WGS84_a / jnp.sqrt(1.0 - ECC2 * sinphi * sinphi)
    alt = jnp.sqrt(rho2 + zdz * zdz) - N

    return jnp.stack([jnp.rad2deg(lat), jnp.rad2deg(lon), alt])
