"""
Data types for the SGP4/SDP4 propagator.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from math import degrees, pi

from orbitpass.time import jd_to_datetime


@dataclass(frozen=True)
class TwoLineElement:
    """A parsed Two-Line Element set.

    Numeric fields are stored in the units SGP4 consumes (radians,
    radians per minute), exactly as produced by
    :func:`~orbitpass.sgp4.parse_tle`.  The raw lines are retained so the
    element set can be re-serialised or handed to other tools unchanged.

    Attributes:
        line1: First TLE line, trailing whitespace removed.
        line2: Second TLE line, trailing whitespace removed.
        name: Optional object name (line 0 of a three-line set).
        satnum: Satellite catalog number as a string (e.g. ``'25544'``).
        classification: Classification character (``'U'``, ``'C'``, ``'S'``).
        intldesg: International designator (e.g. ``'98067A'``).
        epochyr: Two-digit epoch year.
        epochdays: Day of year with fractional day.
        ndot: First derivative of mean motion divided by 2 [rad/min^2].
        nddot: Second derivative of mean motion divided by 6 [rad/min^3].
        bstar: B* drag term [1/earth_radii].
        ephtype: Ephemeris type (normally 0).
        elnum: Element set number.
        revnum: Revolution number at epoch.
        inclo: Inclination [rad].
        nodeo: Right ascension of the ascending node [rad].
        ecco: Eccentricity.
        argpo: Argument of perigee [rad].
        mo: Mean anomaly [rad].
        no_kozai: Kozai mean motion [rad/min].
        jdsatepoch: Julian date of the epoch, whole-day part.
        jdsatepochF: Julian date of the epoch, fractional part.
    """

    line1: str
    line2: str
    name: str | None
    satnum: str
    classification: str
    intldesg: str
    epochyr: int
    epochdays: float
    ndot: float
    nddot: float
    bstar: float
    ephtype: int
    elnum: int
    revnum: int
    inclo: float
    nodeo: float
    ecco: float
    argpo: float
    mo: float
    no_kozai: float
    jdsatepoch: float
    jdsatepochF: float

    @property
    def epoch(self) -> datetime:
        """Element set epoch as an aware UTC datetime."""
        return jd_to_datetime(self.jdsatepoch, self.jdsatepochF)

    @property
    def mean_motion(self) -> float:
        """Kozai mean motion [rev/day]."""
        return self.no_kozai * 1440.0 / (2.0 * pi)

    @property
    def period_minutes(self) -> float:
        """Nominal orbital period from the Kozai mean motion [min]."""
        return 2.0 * pi / self.no_kozai

    @property
    def inclination(self) -> float:
        """Inclination [deg]."""
        return degrees(self.inclo)

    @property
    def label(self) -> str:
        """Object name when present, otherwise the catalog number."""
        return self.name or self.satnum
