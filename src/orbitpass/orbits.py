"""
Circular-orbit helpers on the spherical Earth model.

Quick estimates for a satellite on a circular orbit at a given altitude
above a sphere of radius :data:`~orbitpass.constants.R_EARTH_MEAN`, using
:data:`~orbitpass.constants.GM_EARTH`.  They are intended for display-level
figures (period, speed, dead-reckoned ground position), not for prediction;
use :mod:`orbitpass.sgp4` for that.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from orbitpass._types import GeodeticPosition
from orbitpass._validation import check_positive
from orbitpass.config import get_dtype
from orbitpass.constants import GM_EARTH, R_EARTH_MEAN
from orbitpass.coordinates.spherical import wrap_longitude


def _semi_major_axis(altitude: ArrayLike) -> Array:
    a = jnp.asarray(R_EARTH_MEAN, dtype=get_dtype()) + jnp.asarray(altitude, dtype=get_dtype())
    check_positive(a, "R_EARTH_MEAN + altitude")
    return a


def circular_orbital_period(altitude: ArrayLike) -> Array:
    """Orbital period of a circular orbit.

    Args:
        altitude: Altitude above the spherical Earth in *km*.

    Returns:
        Period in *s*, ``2 pi sqrt(a^3 / GM)`` with ``a = R + altitude``.

    Raises:
        InvalidInputError: If ``R + altitude`` is not positive.

    Examples:
        ```python
        from orbitpass.orbits import circular_orbital_period
        circular_orbital_period(408.0) / 60.0  # ~92.6 min
        ```
    """
    a = _semi_major_axis(altitude)
    return 2.0 * jnp.pi * jnp.sqrt(a**3 / GM_EARTH)


def circular_orbital_velocity(altitude: ArrayLike) -> Array:
    """Orbital speed ``sqrt(GM / a)`` of a circular orbit [km/s]."""
    a = _semi_major_axis(altitude)
    return jnp.sqrt(GM_EARTH / a)


def angular_velocity(altitude: ArrayLike) -> Array:
    """Mean motion of a circular orbit [rad/s]."""
    return 2.0 * jnp.pi / circular_orbital_period(altitude)


def ground_track_speed(altitude: ArrayLike) -> Array:
    """Speed of the sub-satellite point over the surface [km/h].

    The orbital speed is scaled down to the surface by ``R / (R + altitude)``.
    Earth rotation is ignored.
    """
    a = _semi_major_axis(altitude)
    return circular_orbital_velocity(altitude) * (R_EARTH_MEAN / a) * 3600.0


def position_after_time(position: GeodeticPosition, seconds: float) -> GeodeticPosition:
    """Dead-reckon a position forward along an equatorial circular track.

    Only the longitude advances, by the orbit's angular velocity times
    *seconds*; latitude and altitude are kept.  Good for animating a marker
    between real position updates, nothing more.

    Args:
        position: Current position.
        seconds: Elapsed time in *s* (may be negative).

    Returns:
        The advanced position with longitude wrapped to ``(-180, 180]``.
    """
    delta = jnp.rad2deg(angular_velocity(position.altitude) * seconds)
    longitude = float(wrap_longitude(position.longitude + delta))
    return GeodeticPosition(
        latitude=position.latitude,
        longitude=longitude,
        altitude=position.altitude,
    )
