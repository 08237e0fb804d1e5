"""High-level SGP4/SDP4 propagator.

Provides :class:`Propagator`, which owns the initialized state for one
element set and answers position queries at UTC instants: ECI (TEME)
state vectors, ECEF positions, the sub-satellite point and look angles
from a ground observer.

SGP4 accuracy degrades with the time elapsed since the element epoch.
Every query further from the epoch than
:func:`~orbitpass.config.get_stale_tle_days` is logged at WARNING level.
"""

from __future__ import annotations

import logging
from datetime import datetime

import jax.numpy as jnp
from jax import Array

from orbitpass._types import Frame, GeodeticPosition, LookAngles, Observer, PositionVector
from orbitpass.config import get_stale_tle_days
from orbitpass.constants import MINUTES_PER_DAY
from orbitpass.coordinates import ecef_to_geodetic, ecf_to_look_angles
from orbitpass.exceptions import PropagationError
from orbitpass.frames import position_eci_to_ecef
from orbitpass.sgp4._constants import EarthGravity, get_gravity_model
from orbitpass.sgp4._propagation import sgp4_propagate_jit
from orbitpass.sgp4._state import SGP4State, sgp4_init
from orbitpass.sgp4._tle import parse_tle
from orbitpass.sgp4._types import TwoLineElement
from orbitpass.time import datetime_to_jd, ensure_utc, gmst_from_jd

logger = logging.getLogger(__name__)


class Propagator:
    """SGP4/SDP4 propagation of one element set.

    The deep-space branch is selected automatically for orbital periods of
    225 minutes or more.

    Examples:
        ```python
        from datetime import datetime, timezone
        from orbitpass import Observer
        from orbitpass.sgp4 import Propagator

        sat = Propagator.from_lines(line1, line2)
        when = datetime(2024, 5, 1, 12, tzinfo=timezone.utc)

        sat.propagate(when)                          # PositionVector (ECI)
        sat.subpoint(when)                           # GeodeticPosition
        sat.look_angles(Observer(51.5, -0.1), when)  # LookAngles
        ```

    Args:
        tle: Parsed element set.
        gravity: Gravity model name or :class:`EarthGravity` instance.
    """

    def __init__(self, tle: TwoLineElement, gravity: str | EarthGravity = "wgs72") -> None:
        self._tle = tle
        self._gravity = get_gravity_model(gravity)
        self._state: SGP4State
        self._deep_space: bool
        self._state, self._deep_space = sgp4_init(tle, self._gravity)
        logger.debug(
            "Initialized satellite %s (%s, epoch %s, %s model)",
            tle.satnum,
            "deep-space" if self._deep_space else "near-Earth",
            tle.epoch.isoformat(),
            self._gravity.name,
        )

    @classmethod
    def from_lines(
        cls,
        line1: str,
        line2: str,
        name: str | None = None,
        gravity: str | EarthGravity = "wgs72",
    ) -> Propagator:
        """Parse a TLE line pair and build a propagator from it.

        Raises:
            MalformedTLEError: If the lines fail validation.
        """
        return cls(parse_tle(line1, line2, name=name), gravity=gravity)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def tle(self) -> TwoLineElement:
        return self._tle

    @property
    def satnum(self) -> str:
        """Catalog number (e.g. ``'25544'``)."""
        return self._tle.satnum

    @property
    def epoch(self) -> datetime:
        """Element set epoch (UTC)."""
        return self._tle.epoch

    @property
    def deep_space(self) -> bool:
        """``True`` when the SDP4 deep-space branch is in use."""
        return self._deep_space

    @property
    def state(self) -> SGP4State:
        """Initialized SGP4 state (for use with the functional API)."""
        return self._state

    @property
    def gravity(self) -> EarthGravity:
        return self._gravity

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    def minutes_since_epoch(self, instant: datetime) -> float:
        """Minutes from the element epoch to *instant* (negative before it)."""
        jd, fraction = datetime_to_jd(instant)
        return ((jd - self._tle.jdsatepoch) + (fraction - self._tle.jdsatepochF)) * MINUTES_PER_DAY

    def check_age(self, tsince: float) -> None:
        """Log a WARNING if *tsince* minutes is beyond the staleness threshold."""
        age_days = abs(tsince) / MINUTES_PER_DAY
        if age_days > get_stale_tle_days():
            logger.warning(
                "Satellite %s: propagating %.1f days from TLE epoch %s; "
                "SGP4 accuracy degrades with element age",
                self._tle.label,
                age_days,
                self._tle.epoch.isoformat(),
            )

    # ------------------------------------------------------------------
    # Propagation
    # ------------------------------------------------------------------

    def propagate_minutes(self, tsince: float) -> tuple[Array, Array]:
        """Propagate to a time offset from the epoch.

        Args:
            tsince: Minutes since the element epoch.

        Returns:
            Tuple ``(r, v)``: TEME position [km] and velocity [km/s].

        Raises:
            PropagationError: If SGP4 reports an error at this time.
        """
        self.check_age(tsince)
        r, v, error = sgp4_propagate_jit(self._state, tsince, self._deep_space)
        code = int(error)
        if code != 0:
            raise PropagationError(code, tsince, satnum=self._tle.satnum)
        return r, v

    def propagate(self, instant: datetime) -> PositionVector:
        """Propagate to a UTC instant.

        Args:
            instant: Target instant (naive values are treated as UTC).

        Returns:
            ECI (TEME) position [km] and velocity [km/s] at *instant*.

        Raises:
            PropagationError: If SGP4 reports an error at this instant.
        """
        instant = ensure_utc(instant)
        r, v = self.propagate_minutes(self.minutes_since_epoch(instant))
        return PositionVector(position=r, frame=Frame.ECI, epoch=instant, velocity=v)

    def position_ecef(self, instant: datetime) -> Array:
        """Earth-fixed position [km] at a UTC instant.

        Raises:
            PropagationError: If SGP4 reports an error at this instant.
        """
        instant = ensure_utc(instant)
        r, _ = self.propagate_minutes(self.minutes_since_epoch(instant))
        jd, fraction = datetime_to_jd(instant)
        return position_eci_to_ecef(r, gmst_from_jd(jd, fraction))

    def subpoint(self, instant: datetime) -> GeodeticPosition:
        """Sub-satellite point and altitude over the WGS84 ellipsoid.

        Args:
            instant: Target instant.

        Returns:
            Geodetic latitude/longitude [deg] and altitude [km].

        Raises:
            PropagationError: If SGP4 reports an error at this instant.
        """
        lat, lon, alt = (float(x) for x in ecef_to_geodetic(self.position_ecef(instant)))
        return GeodeticPosition(latitude=lat, longitude=lon, altitude=alt)

    def look_angles(self, observer: Observer, instant: datetime) -> LookAngles:
        """Azimuth, elevation and range of the satellite from *observer*.

        Raises:
            PropagationError: If SGP4 reports an error at this instant.
        """
        return ecf_to_look_angles(observer, self.position_ecef(instant))

    def __repr__(self) -> str:
        return (
            f"Propagator(satnum={self.satnum!r}, epoch={self.epoch.isoformat()}, "
            f"deep_space={self._deep_space})"
        )


def propagate(tle: TwoLineElement, instant: datetime) -> PositionVector:
    """Propagate an element set to a UTC instant.

    Convenience wrapper around :class:`Propagator` for one-off queries.
    Use a :class:`Propagator` directly when querying the same element set
    repeatedly; initialization is not free.

    Args:
        tle: Parsed element set.
        instant: Target instant.

    Returns:
        ECI (TEME) position [km] and velocity [km/s].

    Raises:
        PropagationError: If SGP4 reports an error at this instant.
    """
    return Propagator(tle).propagate(instant)
