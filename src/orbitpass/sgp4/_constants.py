"""
Earth gravity models for the SGP4/SDP4 propagator.

TLEs are fitted with WGS72 constants, so that model is the default; using
another model with published element sets degrades accuracy slightly.
"""

from __future__ import annotations

from math import sqrt
from typing import NamedTuple

from orbitpass.exceptions import InvalidInputError


class EarthGravity(NamedTuple):
    """Earth gravity constants used by SGP4.

    Attributes:
        name: Model identifier (``"wgs72"``, ``"wgs72old"``, ``"wgs84"``).
        tumin: Minutes per SGP4 time unit (``1 / xke``).
        mu: Gravitational parameter [km^3/s^2].
        radiusearthkm: Equatorial radius [km].
        xke: ``sqrt(GM)`` in Earth radii^1.5 per minute.
        j2: Second zonal harmonic.
        j3: Third zonal harmonic.
        j4: Fourth zonal harmonic.
        j3oj2: Ratio ``j3 / j2``.
    """

    name: str
    tumin: float
    mu: float
    radiusearthkm: float
    xke: float
    j2: float
    j3: float
    j4: float
    j3oj2: float


def _gravity(name: str, mu: float, radius: float, j2: float, j3: float, j4: float,
             xke: float | None = None) -> EarthGravity:
    if xke is None:
        xke = 60.0 / sqrt(radius**3 / mu)
    return EarthGravity(
        name=name,
        tumin=1.0 / xke,
        mu=mu,
        radiusearthkm=radius,
        xke=xke,
        j2=j2,
        j3=j3,
        j4=j4,
        j3oj2=j3 / j2,
    )


WGS72OLD = _gravity("wgs72old", 398600.79964, 6378.135, 0.001082616, -0.00000253881,
                    -0.00000165597, xke=0.0743669161)
"""Legacy WGS72 constants with the historical rounded ``xke``."""

WGS72 = _gravity("wgs72", 398600.8, 6378.135, 0.001082616, -0.00000253881, -0.00000165597)
"""WGS72 constants, the model TLEs are generated with (default)."""

WGS84 = _gravity("wgs84", 398600.5, 6378.137, 0.00108262998905, -0.00000253215306,
                 -0.00000161098761)
"""WGS84 constants."""

GRAVITY_MODELS = {model.name: model for model in (WGS72OLD, WGS72, WGS84)}


def get_gravity_model(model: str | EarthGravity) -> EarthGravity:
    """Resolve a gravity model given by name or instance.

    Args:
        model: An :class:`EarthGravity` or one of ``"wgs72"``,
            ``"wgs72old"``, ``"wgs84"`` (case-insensitive).

    Returns:
        The matching gravity constants.

    Raises:
        InvalidInputError: If the name is unknown.
    """
    if isinstance(model, EarthGravity):
        return model
    try:
        return GRAVITY_MODELS[model.lower()]
    except (KeyError, AttributeError):
        raise InvalidInputError(
            f"Unknown gravity model {model!r}; expected one of {sorted(GRAVITY_MODELS)}"
        ) from None
