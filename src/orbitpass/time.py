"""UTC instant handling and Greenwich mean sidereal time.

Instants cross the public API as timezone-aware :class:`~datetime.datetime`
objects in UTC.  Internally they are carried as split Julian dates
``(jd, fraction)``: ``jd`` is the Julian date of the preceding midnight
(always ending in ``.5``) and ``fraction`` the elapsed fraction of that day.
Keeping the two parts separate preserves sub-millisecond resolution in
float64, matching how the SGP4 reference implementation stores TLE epochs.

UT1 is approximated by UTC (|UT1 - UTC| < 0.9 s), which is well inside
the accuracy of SGP4 itself.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from .config import get_dtype
from .constants import DEG2RAD, JD_J2000, JD_UNIX_EPOCH, SECONDS_PER_DAY

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# IAU-82 GMST polynomial coefficients [s], Vallado eq. 3-47
_GMST_C0 = 67310.54841
_GMST_C1 = 876600.0 * 3600.0 + 8640184.812866
_GMST_C2 = 0.093104
_GMST_C3 = -6.2e-6


def ensure_utc(instant: datetime) -> datetime:
    """Return *instant* as an aware UTC datetime.

    Naive datetimes are interpreted as UTC; aware datetimes in other zones
    are converted.

    Args:
        instant: Any datetime.

    Returns:
        The same instant with ``tzinfo=timezone.utc``.
    """
    if instant.tzinfo is None or instant.utcoffset() is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def datetime_to_jd(instant: datetime) -> tuple[float, float]:
    """Convert a datetime to a split Julian date.

    Args:
        instant: Instant to convert (naive values are treated as UTC).

    Returns:
        Tuple ``(jd, fraction)`` where ``jd`` is the Julian date at the
        preceding 0h UTC and ``fraction`` is in ``[0, 1)``.

    Examples:
        ```python
        from datetime import datetime, timezone
        from orbitpass.time import datetime_to_jd
        datetime_to_jd(datetime(2000, 1, 1, 12, tzinfo=timezone.utc))
        # (2451544.5, 0.5)
        ```
    """
    delta = ensure_utc(instant) - _UNIX_EPOCH
    seconds = delta.seconds + delta.microseconds * 1e-6
    return JD_UNIX_EPOCH + delta.days, seconds / SECONDS_PER_DAY


def jd_to_datetime(jd: float, fraction: float = 0.0) -> datetime:
    """Convert a (split) Julian date to an aware UTC datetime.

    The result is rounded to the nearest microsecond.

    Args:
        jd: Julian date, or its whole-day part.
        fraction: Optional fractional-day part added to *jd*.

    Returns:
        The corresponding UTC datetime.
    """
    whole_days = jd - JD_UNIX_EPOCH
    days = int(whole_days // 1)
    day_fraction = (whole_days - days) + fraction
    microseconds = round(day_fraction * SECONDS_PER_DAY * 1e6)
    return _UNIX_EPOCH + timedelta(days=days, microseconds=microseconds)


def gmst_from_jd(jd: ArrayLike, fraction: ArrayLike = 0.0) -> Array:
    """Compute Greenwich mean sidereal time from a split Julian date.

    Evaluates the IAU-82 GMST polynomial in Julian centuries of UT1 from
    J2000.0.  JIT- and ``vmap``-compatible.

    The polynomial is always evaluated in float64: its seconds term is of
    order 1e9, where float32 resolves only about a minute of sidereal time.
    Only the result is cast to the configured dtype.

    Args:
        jd: Julian date (UT1 ~ UTC), or its whole-day part.
        fraction: Fractional-day part added to *jd*.  May exceed 1.

    Returns:
        GMST angle in *rad*, in ``[0, 2pi)``.

    References:
        1. D. Vallado, *Fundamentals of Astrodynamics and Applications*,
           4th ed., 2013, Eq. 3-47.
    """
    jd = jnp.asarray(jd, dtype=jnp.float64)
    fraction = jnp.asarray(fraction, dtype=jnp.float64)

    tut1 = ((jd - JD_J2000) + fraction) / 36525.0
    seconds = ((_GMST_C3 * tut1 + _GMST_C2) * tut1 + _GMST_C1) * tut1 + _GMST_C0

    # 240 seconds of sidereal time per degree
    return jnp.mod(seconds * DEG2RAD / 240.0, 2.0 * jnp.pi).astype(get_dtype())


def greenwich_sidereal_time(instant: datetime) -> Array:
    """Greenwich mean sidereal time at a UTC instant.

    Args:
        instant: UTC instant (naive values are treated as UTC).

    Returns:
        GMST in *rad*, in ``[0, 2pi)``.

    Examples:
        ```python
        from datetime import datetime, timezone
        from orbitpass import greenwich_sidereal_time
        theta = greenwich_sidereal_time(datetime(2024, 3, 20, tzinfo=timezone.utc))
        ```
    """
    jd, fraction = datetime_to_jd(instant)
    return gmst_from_jd(jd, fraction)
