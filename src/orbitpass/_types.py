"""
Value types shared across orbitpass.

Geodetic records (:class:`GeodeticPosition`, :class:`Observer`) validate
their coordinates on construction and raise
:class:`~orbitpass.exceptions.InvalidInputError` for out-of-range values.
:class:`LookAngles` is a ``NamedTuple`` so it can be returned from
``jax.jit``/``jax.vmap`` functions as a pytree.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from orbitpass._validation import check_finite, check_latitude, check_longitude
from orbitpass.constants import R_EARTH_MEAN
from orbitpass.exceptions import InvalidInputError


class Frame(enum.Enum):
    """Reference frame of a :class:`PositionVector`."""

    ECI = "ECI"
    ECEF = "ECEF"


@dataclass(frozen=True)
class PositionVector:
    """A Cartesian position (and optionally velocity) valid at one instant.

    SGP4 output is expressed in the True Equator Mean Equinox (TEME) frame,
    which is what ``Frame.ECI`` denotes for propagated vectors.

    Attributes:
        position: ``[x, y, z]`` in *km*.
        frame: Frame the components are expressed in.
        epoch: UTC instant the vector is valid for.
        velocity: ``[vx, vy, vz]`` in *km/s*, or ``None``.
    """

    position: Array
    frame: Frame
    epoch: datetime
    velocity: Array | None = None

    @property
    def x(self) -> float:
        return float(self.position[0])

    @property
    def y(self) -> float:
        return float(self.position[1])

    @property
    def z(self) -> float:
        return float(self.position[2])

    @property
    def radius(self) -> float:
        """Distance from the Earth's centre [km]."""
        return float(jnp.linalg.norm(self.position))

    @property
    def speed(self) -> float | None:
        """Velocity magnitude [km/s], if a velocity is attached."""
        if self.velocity is None:
            return None
        return float(jnp.linalg.norm(self.velocity))


@dataclass(frozen=True)
class GeodeticPosition:
    """A point given by latitude, longitude and altitude.

    Attributes:
        latitude: Latitude in *deg*, within ``[-90, 90]``.
        longitude: Longitude in *deg*, within ``[-180, 180]``.
        altitude: Height above the reference surface in *km*.
    """

    latitude: float
    longitude: float
    altitude: float = 0.0

    def __post_init__(self) -> None:
        check_latitude(self.latitude)
        check_longitude(self.longitude)
        check_finite(self.altitude, "altitude")
        if self.altitude <= -R_EARTH_MEAN:
            raise InvalidInputError(f"altitude must be above the Earth's centre, got {self.altitude}")

    def to_cartesian(self, earth_radius: float = R_EARTH_MEAN) -> Array:
        """Spherical-model Cartesian position at ``earth_radius + altitude`` [km]."""
        from orbitpass.coordinates.spherical import geodetic_to_cartesian

        return geodetic_to_cartesian(self.latitude, self.longitude, earth_radius + self.altitude)

    @classmethod
    def from_cartesian(
        cls, vector: ArrayLike, earth_radius: float = R_EARTH_MEAN
    ) -> GeodeticPosition:
        """Inverse of :meth:`to_cartesian`.

        Args:
            vector: Spherical-model Cartesian position in *km*.
            earth_radius: Radius subtracted to obtain the altitude [km].

        Returns:
            The corresponding geodetic position.
        """
        from orbitpass.coordinates.spherical import cartesian_to_geodetic

        lat, lon, radius = (float(v) for v in cartesian_to_geodetic(vector))
        return cls(latitude=lat, longitude=lon, altitude=radius - earth_radius)


@dataclass(frozen=True)
class Observer:
    """A ground observer.

    Attributes:
        latitude: Geodetic latitude in *deg*, within ``[-90, 90]``.
        longitude: Longitude in *deg*, within ``[-180, 180]``.
        height: Height above the WGS84 ellipsoid in *km*.
    """

    latitude: float
    longitude: float
    height: float = 0.0

    def __post_init__(self) -> None:
        check_latitude(self.latitude)
        check_longitude(self.longitude)
        check_finite(self.height, "height")
        if self.height <= -R_EARTH_MEAN:
            raise InvalidInputError(f"height must be above the Earth's centre, got {self.height}")

    def to_ecef(self) -> Array:
        """Observer position in ECEF on the WGS84 ellipsoid [km]."""
        from orbitpass.coordinates.geodetic import geodetic_to_ecef

        return geodetic_to_ecef(self.latitude, self.longitude, self.height)

    def as_geodetic(self) -> GeodeticPosition:
        return GeodeticPosition(self.latitude, self.longitude, self.height)


class LookAngles(NamedTuple):
    """Topocentric direction from an observer to a target.

    Attributes:
        azimuth: Clockwise from north in *deg*, in ``[0, 360)``.
        elevation: Above the local horizon in *deg*, in ``[-90, 90]``.
        range: Slant range in *km*.
    """

    azimuth: Array
    elevation: Array
    range: Array
