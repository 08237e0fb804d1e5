"""
SGP4/SDP4 propagation in JAX.

:func:`sgp4_propagate` is a pure function of an
:class:`~orbitpass.sgp4.SGP4State` and a time offset.  It is compatible
with ``jax.jit`` (mark ``deep_space`` static) and ``jax.vmap`` over time,
and never raises: numerical breakdowns are reported through an integer
error code alongside NaN position and velocity.
"""

from __future__ import annotations

from functools import partial

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from orbitpass.config import get_dtype
from orbitpass.sgp4._deep_space import dpper, dspace
from orbitpass.sgp4._state import SGP4State

# Error codes, in the order the checks are made
ERR_NONE = 0
ERR_ECCENTRICITY = 1
ERR_MEAN_MOTION = 2
ERR_PERTURBED_ECCENTRICITY = 3
ERR_SEMI_LATUS_RECTUM = 4
ERR_DECAYED = 6


def sgp4_propagate(
    state: SGP4State,
    tsince: ArrayLike,
    deep_space: bool = False,
) -> tuple[Array, Array, Array]:
    """Propagate an initialized satellite with SGP4/SDP4.

    The ``deep_space`` flag selects the SDP4 code path at trace time; use
    the value returned by :func:`~orbitpass.sgp4.sgp4_init`.

    Args:
        state: Initialized satellite state.
        tsince: Time since the element epoch [min].  May be negative.
        deep_space: ``True`` to apply the deep-space (SDP4) terms.

    Returns:
        Tuple ``(r, v, error)``: TEME position [km], velocity [km/s] and an
        integer error code.  ``error`` is 0 on success; otherwise ``r`` and
        ``v`` are NaN and the code is one of 1 (mean eccentricity out of
        range), 2 (mean motion not positive), 3 (perturbed eccentricity out
        of range), 4 (semi-latus rectum negative) or 6 (satellite decayed).

    Examples:
        ```python
        from orbitpass.sgp4 import parse_tle, sgp4_init, sgp4_propagate
        state, deep = sgp4_init(parse_tle(line1, line2))
        r, v, err = sgp4_propagate(state, 90.0, deep)
        ```
    """
    twopi = 2.0 * jnp.pi
    x2o3 = 2.0 / 3.0
    s = state
    t = jnp.asarray(tsince, dtype=get_dtype())

    vkmpersec = s.radiusearthkm * s.xke / 60.0

    # --- Secular gravity and atmospheric drag ---
    xmdf = s.mo + s.mdot * t
    argpdf = s.argpo + s.argpdot * t
    nodedf = s.nodeo + s.nodedot * t
    t2 = t * t
    nodem = nodedf + s.nodecf * t2
    tempa = 1.0 - s.cc1 * t
    tempe = s.bstar * s.cc4 * t
    templ = s.t2cof * t2

    # Full drag model; isimp == 1 keeps the simplified terms
    delomg = s.omgcof * t
    delmtemp = 1.0 + s.eta * jnp.cos(xmdf)
    delm = s.xmcof * (delmtemp * delmtemp * delmtemp - s.delmo)
    temp = delomg + delm
    t3 = t2 * t
    t4 = t3 * t
    full = s.isimp < 0.5
    mm = jnp.where(full, xmdf + temp, xmdf)
    argpm = jnp.where(full, argpdf - temp, argpdf)
    tempa = jnp.where(full, tempa - s.d2 * t2 - s.d3 * t3 - s.d4 * t4, tempa)
    tempe = jnp.where(full, tempe + s.bstar * s.cc5 * (jnp.sin(mm) - s.sinmao), tempe)
    templ = jnp.where(full, templ + s.t3cof * t3 + t4 * (s.t4cof + t * s.t5cof), templ)

    nm = s.no_unkozai
    em = s.ecco
    inclm = s.inclo

    if deep_space:
        em, argpm, inclm, mm, nodem, nm = dspace(
            s.deep,
            t=t,
            gsto=s.gsto,
            no_unkozai=s.no_unkozai,
            argpo=s.argpo,
            argpdot=s.argpdot,
            em=em,
            argpm=argpm,
            inclm=inclm,
            mm=mm,
            nodem=nodem,
            nm=nm,
        )

    error = jnp.where(nm <= 0.0, ERR_MEAN_MOTION, ERR_NONE)

    am = (s.xke / nm) ** x2o3 * tempa * tempa
    nm = s.xke / am**1.5
    em = em - tempe

    error = jnp.where(
        (error == ERR_NONE) & ((em >= 1.0) | (em < -0.001)), ERR_ECCENTRICITY, error
    )
    em = jnp.maximum(em, 1.0e-6)

    mm = mm + s.no_unkozai * templ
    xlm = mm + argpm + nodem

    nodem = jnp.fmod(nodem, twopi)
    argpm = jnp.fmod(argpm, twopi)
    xlm = jnp.fmod(xlm, twopi)
    mm = jnp.fmod(xlm - argpm - nodem, twopi)

    # --- Lunar-solar periodics ---
    ep = em
    xincp = inclm
    argpp = argpm
    nodep = nodem
    mp = mm
    sinip = jnp.sin(inclm)
    cosip = jnp.cos(inclm)
    aycof = s.aycof
    xlcof = s.xlcof
    con41 = s.con41
    x1mth2 = s.x1mth2
    x7thm1 = s.x7thm1

    if deep_space:
        ep, xincp, nodep, argpp, mp = dpper(s.deep, t, ep, xincp, nodep, argpp, mp)

        negative = xincp < 0.0
        xincp = jnp.where(negative, -xincp, xincp)
        nodep = jnp.where(negative, nodep + jnp.pi, nodep)
        argpp = jnp.where(negative, argpp - jnp.pi, argpp)

        error = jnp.where(
            (error == ERR_NONE) & ((ep < 0.0) | (ep > 1.0)), ERR_PERTURBED_ECCENTRICITY, error
        )

        # Inclination-dependent coefficients follow the perturbed inclination
        sinip = jnp.sin(xincp)
        cosip = jnp.cos(xincp)
        aycof = -0.5 * s.j3oj2 * sinip
        xlcof = jnp.where(
            jnp.abs(cosip + 1.0) > 1.5e-12,
            -0.25 * s.j3oj2 * sinip * (3.0 + 5.0 * cosip) / (1.0 + cosip),
            -0.25 * s.j3oj2 * sinip * (3.0 + 5.0 * cosip) / 1.5e-12,
        )
        cosisq = cosip * cosip
        con41 = 3.0 * cosisq - 1.0
        x1mth2 = 1.0 - cosisq
        x7thm1 = 7.0 * cosisq - 1.0

    # --- Long period periodics ---
    axnl = ep * jnp.cos(argpp)
    temp = 1.0 / (am * (1.0 - ep * ep))
    aynl = ep * jnp.sin(argpp) + temp * aycof
    xl = mp + argpp + nodep + temp * xlcof * axnl

    # --- Solve Kepler's equation ---
    u = jnp.fmod(xl - nodep, twopi)

    def kepler_step(i, eo1):
        sineo1 = jnp.sin(eo1)
        coseo1 = jnp.cos(eo1)
        tem5 = (u - aynl * coseo1 + axnl * sineo1 - eo1) / (1.0 - coseo1 * axnl - sineo1 * aynl)
        return eo1 + jnp.clip(tem5, -0.95, 0.95)

    eo1 = jax.lax.fori_loop(0, 10, kepler_step, u)
    sineo1 = jnp.sin(eo1)
    coseo1 = jnp.cos(eo1)

    # --- Short period preliminary quantities ---
    ecose = axnl * coseo1 + aynl * sineo1
    esine = axnl * sineo1 - aynl * coseo1
    el2 = axnl * axnl + aynl * aynl
    pl = am * (1.0 - el2)

    error = jnp.where((error == ERR_NONE) & (pl < 0.0), ERR_SEMI_LATUS_RECTUM, error)

    rl = am * (1.0 - ecose)
    rdotl = jnp.sqrt(am) * esine / rl
    rvdotl = jnp.sqrt(pl) / rl
    betal = jnp.sqrt(1.0 - el2)
    temp = esine / (1.0 + betal)
    sinu = am / rl * (sineo1 - aynl - axnl * temp)
    cosu = am / rl * (coseo1 - axnl + aynl * temp)
    su = jnp.arctan2(sinu, cosu)
    sin2u = (cosu + cosu) * sinu
    cos2u = 1.0 - 2.0 * sinu * sinu
    temp = 1.0 / pl
    temp1 = 0.5 * s.j2 * temp
    temp2 = temp1 * temp

    # --- Short period periodics ---
    mrt = rl * (1.0 - 1.5 * temp2 * betal * con41) + 0.5 * temp1 * x1mth2 * cos2u
    su = su - 0.25 * temp2 * x7thm1 * sin2u
    xnode = nodep + 1.5 * temp2 * cosip * sin2u
    xinc = xincp + 1.5 * temp2 * cosip * sinip * cos2u
    mvt = rdotl - nm * temp1 * x1mth2 * sin2u / s.xke
    rvdot = rvdotl + nm * temp1 * (x1mth2 * cos2u + 1.5 * con41) / s.xke

    # --- Orientation vectors ---
    sinsu = jnp.sin(su)
    cossu = jnp.cos(su)
    snod = jnp.sin(xnode)
    cnod = jnp.cos(xnode)
    sini = jnp.sin(xinc)
    cosi = jnp.cos(xinc)
    xmx = -snod * cosi
    xmy = cnod * cosi
    ux = xmx * sinsu + cnod * cossu
    uy = xmy * sinsu + snod * cossu
    uz = sini * sinsu
    vx = xmx * cossu - cnod * sinsu
    vy = xmy * cossu - snod * sinsu
    vz = sini * cossu

    error = jnp.where((error == ERR_NONE) & (mrt < 1.0), ERR_DECAYED, error)

    mr = mrt * s.radiusearthkm
    r = jnp.stack([mr * ux, mr * uy, mr * uz])
    v = jnp.stack([
        (mvt * ux + rvdot * vx) * vkmpersec,
        (mvt * uy + rvdot * vy) * vkmpersec,
        (mvt * uz + rvdot * vz) * vkmpersec,
    ])

    valid = error == ERR_NONE
    r = jnp.where(valid, r, jnp.nan)
    v = jnp.where(valid, v, jnp.nan)

    return r, v, error


sgp4_propagate_jit = jax.jit(sgp4_propagate, static_argnames=("deep_space",))
"""JIT-compiled :func:`sgp4_propagate`."""


@partial(jax.jit, static_argnames=("deep_space",))
def sgp4_propagate_batch(
    state: SGP4State,
    tsince: ArrayLike,
    deep_space: bool = False,
) -> tuple[Array, Array, Array]:
    """Propagate one satellite to many times at once.

    Args:
        state: Initialized satellite state.
        tsince: 1-D array of minutes since epoch, shape ``(N,)``.
        deep_space: ``True`` to apply the deep-space (SDP4) terms.

    Returns:
        Tuple ``(r, v, error)`` with shapes ``(N, 3)``, ``(N, 3)``, ``(N,)``.
    """
    return jax.vmap(lambda t: sgp4_propagate(state, t, deep_space))(tsince)
