"""ECI <-> ECEF frame transformations.

SGP4 produces positions in the True Equator Mean Equinox (TEME) frame,
reported here as ``Frame.ECI``.  The Earth-fixed frame is reached by a
single rotation about the polar axis by the Greenwich mean sidereal time:

.. math::

    r_{ECEF} = R_z(\\theta_{GMST}) \\, r_{ECI}

Polar motion and the equation of the equinoxes are neglected; both are far
below SGP4's own error budget.  Positions are in kilometres and velocities
in kilometres per second.
"""

from __future__ import annotations

from dataclasses import replace

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from orbitpass._types import Frame, PositionVector
from orbitpass.config import get_dtype
from orbitpass.constants import OMEGA_EARTH
from orbitpass.exceptions import InvalidInputError
from orbitpass.time import greenwich_sidereal_time


def rotation_eci_to_ecef(gmst: ArrayLike) -> Array:
    """Rotation matrix from ECI (TEME) to ECEF.

    Args:
        gmst: Greenwich mean sidereal time in *rad*.

    Returns:
        3x3 rotation matrix ``Rz(gmst)``.
    """
    gmst = jnp.asarray(gmst, dtype=get_dtype())
    c = jnp.cos(gmst)
    s = jnp.sin(gmst)
    zero = jnp.zeros_like(gmst)
    one = jnp.ones_like(gmst)

    return jnp.array([[  c,    s, zero],
                      [ -s,    c, zero],
                      [zero, zero,  one]])


def position_eci_to_ecef(r_eci: ArrayLike, gmst: ArrayLike) -> Array:
    """Rotate an ECI position into ECEF.

    Args:
        r_eci: ECI position ``[x, y, z]`` in *km*.
        gmst: Greenwich mean sidereal time in *rad*.

    Returns:
        ECEF position ``[x, y, z]`` in *km*.

    Examples:
        ```python
        import jax.numpy as jnp
        from orbitpass.frames import position_eci_to_ecef
        position_eci_to_ecef(jnp.array([7000.0, 0.0, 0.0]), jnp.pi / 2)
        # [0, -7000, 0]
        ```
    """
    r_eci = jnp.asarray(r_eci, dtype=get_dtype())
    return rotation_eci_to_ecef(gmst) @ r_eci


def position_ecef_to_eci(r_ecef: ArrayLike, gmst: ArrayLike) -> Array:
    """Inverse of :func:`position_eci_to_ecef`."""
    r_ecef = jnp.asarray(r_ecef, dtype=get_dtype())
    return rotation_eci_to_ecef(gmst).T @ r_ecef


def state_eci_to_ecef(r_eci: ArrayLike, v_eci: ArrayLike, gmst: ArrayLike) -> tuple[Array, Array]:
    """Transform a position/velocity pair from ECI to ECEF.

    The velocity picks up the Earth-rotation term
    ``v_ecef = R v_eci - omega x r_ecef``.

    Args:
        r_eci: ECI position in *km*.
        v_eci: ECI velocity in *km/s*.
        gmst: Greenwich mean sidereal time in *rad*.

    Returns:
        Tuple ``(r_ecef, v_ecef)`` in *km* and *km/s*.
    """
    dtype = get_dtype()
    r_eci = jnp.asarray(r_eci, dtype=dtype)
    v_eci = jnp.asarray(v_eci, dtype=dtype)

    R = rotation_eci_to_ecef(gmst)
    omega = jnp.array([0.0, 0.0, OMEGA_EARTH], dtype=dtype)

    r_ecef = R @ r_eci
    v_ecef = R @ v_eci - jnp.cross(omega, r_ecef)
    return r_ecef, v_ecef


def eci_to_ecf(vector: PositionVector) -> PositionVector:
    """Convert an ECI :class:`PositionVector` to ECEF at its own epoch.

    Args:
        vector: Position (and optional velocity) in ``Frame.ECI``.

    Returns:
        The same state expressed in ``Frame.ECEF``.

    Raises:
        InvalidInputError: If *vector* is not in the ECI frame.
    """
    if vector.frame is not Frame.ECI:
        raise InvalidInputError(f"Expected an ECI vector, got frame {vector.frame.value}")

    gmst = greenwich_sidereal_time(vector.epoch)
    if vector.velocity is None:
        return replace(vector, position=position_eci_to_ecef(vector.position, gmst), frame=Frame.ECEF)

    r_ecef, v_ecef = state_eci_to_ecef(vector.position, vector.velocity, gmst)
    return replace(vector, position=r_ecef, velocity=v_ecef, frame=Frame.ECEF)
