"""
SGP4 satellite state and its Python-time initialization.

``sgp4_init`` performs every computation that depends only on the element
set: Kozai to Brouwer mean-motion recovery, the secular drag and gravity
coefficients, and (for periods of 225 minutes or more) the deep-space
lunar-solar and resonance terms.  The result is an :class:`SGP4State`, a
``NamedTuple`` of scalar arrays.  Being a pytree, it can be passed straight
into ``jax.jit``/``jax.vmap`` functions such as
:func:`~orbitpass.sgp4.sgp4_propagate`.
"""

from __future__ import annotations

from math import cos as _py_cos
from math import fabs as _py_fabs
from math import pi as _py_pi
from math import sin as _py_sin
from math import sqrt as _py_sqrt
from typing import NamedTuple

import jax
import jax.numpy as jnp
from jax.typing import ArrayLike

from orbitpass.config import get_dtype
from orbitpass.sgp4._constants import WGS72, EarthGravity
from orbitpass.sgp4._deep_space import DeepSpaceTerms, deep_space_init
from orbitpass.sgp4._types import TwoLineElement

_twopi = 2.0 * _py_pi

# Orbits with a period at or above this use the deep-space branch [min]
DEEP_SPACE_PERIOD = 225.0


class SGP4State(NamedTuple):
    """Initialized SGP4/SDP4 constants for one element set.

    Fields hold gravity-model constants, the mean elements at epoch and the
    derived secular and drag coefficients.  ``isimp`` is 1.0 when the
    simplified drag model is in force (low perigee or deep space).
    """

    radiusearthkm: ArrayLike
    xke: ArrayLike
    j2: ArrayLike
    j3oj2: ArrayLike
    bstar: ArrayLike
    ecco: ArrayLike
    argpo: ArrayLike
    inclo: ArrayLike
    mo: ArrayLike
    nodeo: ArrayLike
    no_unkozai: ArrayLike
    gsto: ArrayLike
    con41: ArrayLike
    cc1: ArrayLike
    cc4: ArrayLike
    cc5: ArrayLike
    d2: ArrayLike
    d3: ArrayLike
    d4: ArrayLike
    delmo: ArrayLike
    eta: ArrayLike
    argpdot: ArrayLike
    omgcof: ArrayLike
    sinmao: ArrayLike
    t2cof: ArrayLike
    t3cof: ArrayLike
    t4cof: ArrayLike
    t5cof: ArrayLike
    x1mth2: ArrayLike
    x7thm1: ArrayLike
    mdot: ArrayLike
    nodedot: ArrayLike
    xlcof: ArrayLike
    xmcof: ArrayLike
    nodecf: ArrayLike
    aycof: ArrayLike
    isimp: ArrayLike
    deep: DeepSpaceTerms


def gstime(jdut1: float) -> float:
    """Greenwich sidereal time [rad] from a UT1 Julian date (Python floats)."""
    tut1 = (jdut1 - 2451545.0) / 36525.0
    temp = (
        -6.2e-6 * tut1 * tut1 * tut1
        + 0.093104 * tut1 * tut1
        + (876600.0 * 3600 + 8640184.812866) * tut1
        + 67310.54841
    )
    return (temp * (_py_pi / 180.0) / 240.0) % _twopi


def sgp4_init(
    tle: TwoLineElement,
    gravity: EarthGravity = WGS72,
) -> tuple[SGP4State, bool]:
    """Initialize the SGP4 state for a parsed element set.

    Runs at Python time (not under JIT).  The improved operation mode of
    the reference implementation is used.

    Args:
        tle: Parsed element set from :func:`~orbitpass.sgp4.parse_tle`.
        gravity: Earth gravity model constants.

    Returns:
        Tuple ``(state, deep_space)``.  ``deep_space`` is ``True`` when the
        orbital period is 225 minutes or more and the SDP4 branch must be
        used; pass it to :func:`~orbitpass.sgp4.sgp4_propagate` as a static
        argument.

    Examples:
        ```python
        from orbitpass.sgp4 import parse_tle, sgp4_init
        tle = parse_tle(line1, line2)
        state, deep_space = sgp4_init(tle)
        ```
    """
    x2o3 = 2.0 / 3.0
    temp4 = 1.5e-12

    re = gravity.radiusearthkm
    xke = gravity.xke
    j2 = gravity.j2
    j3oj2 = gravity.j3oj2
    ecco = tle.ecco
    inclo = tle.inclo
    bstar = tle.bstar

    # Epoch in days since 1950 Jan 0
    epoch = tle.jdsatepoch + tle.jdsatepochF - 2433281.5

    ss = 78.0 / re + 1.0
    qzms2t = ((120.0 - 78.0) / re) ** 4

    # --- Recover the Brouwer mean motion from the Kozai value ---
    eccsq = ecco * ecco
    omeosq = 1.0 - eccsq
    rteosq = _py_sqrt(omeosq)
    cosio = _py_cos(inclo)
    cosio2 = cosio * cosio

    ak = (xke / tle.no_kozai) ** x2o3
    d1 = 0.75 * j2 * (3.0 * cosio2 - 1.0) / (rteosq * omeosq)
    del_ = d1 / (ak * ak)
    adel = ak * (1.0 - del_ * del_ - del_ * (1.0 / 3.0 + 134.0 * del_ * del_ / 81.0))
    del_ = d1 / (adel * adel)
    no_unkozai = tle.no_kozai / (1.0 + del_)

    ao = (xke / no_unkozai) ** x2o3
    sinio = _py_sin(inclo)
    po = ao * omeosq
    con42 = 1.0 - 5.0 * cosio2
    con41 = -con42 - cosio2 - cosio2
    posq = po * po
    rp = ao * (1.0 - ecco)

    gsto = gstime(epoch + 2433281.5)

    # --- Secular drag and gravity coefficients ---
    isimp = rp < 220.0 / re + 1.0

    sfour = ss
    qzms24 = qzms2t
    perige = (rp - 1.0) * re

    # For perigees below 156 km, s and qoms2t are altered
    if perige < 156.0:
        sfour = perige - 78.0
        if perige < 98.0:
            sfour = 20.0
        qzms24 = ((120.0 - sfour) / re) ** 4
        sfour = sfour / re + 1.0

    pinvsq = 1.0 / posq
    tsi = 1.0 / (ao - sfour)
    eta = ao * ecco * tsi
    etasq = eta * eta
    eeta = ecco * eta
    psisq = _py_fabs(1.0 - etasq)
    coef = qzms24 * tsi**4
    coef1 = coef / psisq**3.5
    cc2 = coef1 * no_unkozai * (
        ao * (1.0 + 1.5 * etasq + eeta * (4.0 + etasq))
        + 0.375 * j2 * tsi / psisq * con41 * (8.0 + 3.0 * etasq * (8.0 + etasq))
    )
    cc1 = bstar * cc2
    cc3 = 0.0
    if ecco > 1.0e-4:
        cc3 = -2.0 * coef * tsi * j3oj2 * no_unkozai * sinio / ecco
    x1mth2 = 1.0 - cosio2
    cc4 = 2.0 * no_unkozai * coef1 * ao * omeosq * (
        eta * (2.0 + 0.5 * etasq)
        + ecco * (0.5 + 2.0 * etasq)
        - j2 * tsi / (ao * psisq) * (
            -3.0 * con41 * (1.0 - 2.0 * eeta + etasq * (1.5 - 0.5 * eeta))
            + 0.75 * x1mth2 * (2.0 * etasq - eeta * (1.0 + etasq)) * _py_cos(2.0 * tle.argpo)
        )
    )
    cc5 = 2.0 * coef1 * ao * omeosq * (1.0 + 2.75 * (etasq + eeta) + eeta * etasq)

    cosio4 = cosio2 * cosio2
    temp1 = 1.5 * j2 * pinvsq * no_unkozai
    temp2 = 0.5 * temp1 * j2 * pinvsq
    temp3 = -0.46875 * gravity.j4 * pinvsq * pinvsq * no_unkozai
    mdot = (
        no_unkozai
        + 0.5 * temp1 * rteosq * con41
        + 0.0625 * temp2 * rteosq * (13.0 - 78.0 * cosio2 + 137.0 * cosio4)
    )
    argpdot = (
        -0.5 * temp1 * con42
        + 0.0625 * temp2 * (7.0 - 114.0 * cosio2 + 395.0 * cosio4)
        + temp3 * (3.0 - 36.0 * cosio2 + 49.0 * cosio4)
    )
    xhdot1 = -temp1 * cosio
    nodedot = xhdot1 + (
        0.5 * temp2 * (4.0 - 19.0 * cosio2) + 2.0 * temp3 * (3.0 - 7.0 * cosio2)
    ) * cosio
    xpidot = argpdot + nodedot
    omgcof = bstar * cc3 * _py_cos(tle.argpo)
    xmcof = 0.0
    if ecco > 1.0e-4:
        xmcof = -x2o3 * coef * bstar / eeta
    nodecf = 3.5 * omeosq * xhdot1 * cc1
    t2cof = 1.5 * cc1

    # Guard the division for an inclination of exactly 180 degrees
    if _py_fabs(cosio + 1.0) > 1.5e-12:
        xlcof = -0.25 * j3oj2 * sinio * (3.0 + 5.0 * cosio) / (1.0 + cosio)
    else:
        xlcof = -0.25 * j3oj2 * sinio * (3.0 + 5.0 * cosio) / temp4
    aycof = -0.5 * j3oj2 * sinio
    delmo = (1.0 + eta * _py_cos(tle.mo)) ** 3

    deep_space = _twopi / no_unkozai >= DEEP_SPACE_PERIOD
    if deep_space:
        isimp = True
        deep = deep_space_init(
            epoch=epoch,
            xke=xke,
            ecco=ecco,
            inclo=inclo,
            nodeo=tle.nodeo,
            argpo=tle.argpo,
            mo=tle.mo,
            no_unkozai=no_unkozai,
            gsto=gsto,
            mdot=mdot,
            nodedot=nodedot,
            xpidot=xpidot,
        )
    else:
        deep = DeepSpaceTerms.zeros()

    # Higher-order drag terms for the full (non-simplified) model
    d2 = d3 = d4 = t3cof = t4cof = t5cof = 0.0
    if not isimp:
        cc1sq = cc1 * cc1
        d2 = 4.0 * ao * tsi * cc1sq
        temp = d2 * tsi * cc1 / 3.0
        d3 = (17.0 * ao + sfour) * temp
        d4 = 0.5 * temp * ao * tsi * (221.0 * ao + 31.0 * sfour) * cc1
        t3cof = d2 + 2.0 * cc1sq
        t4cof = 0.25 * (3.0 * d3 + cc1 * (12.0 * d2 + 10.0 * cc1sq))
        t5cof = 0.2 * (
            3.0 * d4 + 12.0 * cc1 * d3 + 6.0 * d2 * d2 + 15.0 * cc1sq * (2.0 * d2 + cc1sq)
        )

    state = SGP4State(
        radiusearthkm=re,
        xke=xke,
        j2=j2,
        j3oj2=j3oj2,
        bstar=bstar,
        ecco=ecco,
        argpo=tle.argpo,
        inclo=inclo,
        mo=tle.mo,
        nodeo=tle.nodeo,
        no_unkozai=no_unkozai,
        gsto=gsto,
        con41=con41,
        cc1=cc1,
        cc4=cc4,
        cc5=cc5,
        d2=d2,
        d3=d3,
        d4=d4,
        delmo=delmo,
        eta=eta,
        argpdot=argpdot,
        omgcof=omgcof,
        sinmao=_py_sin(tle.mo),
        t2cof=t2cof,
        t3cof=t3cof,
        t4cof=t4cof,
        t5cof=t5cof,
        x1mth2=x1mth2,
        x7thm1=7.0 * cosio2 - 1.0,
        mdot=mdot,
        nodedot=nodedot,
        xlcof=xlcof,
        xmcof=xmcof,
        nodecf=nodecf,
        aycof=aycof,
        isimp=float(isimp),
        deep=deep,
    )

    dtype = get_dtype()
    return jax.tree_util.tree_map(lambda x: jnp.asarray(x, dtype=dtype), state), deep_space
