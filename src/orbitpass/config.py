"""Module-wide numerical and accuracy configuration.

Provides ``set_dtype`` and ``get_dtype`` to control the float dtype used
throughout orbitpass.  The default is ``jnp.float64``: SGP4 subtracts
Julian dates of order 2.4e6 and accumulates secular terms over thousands
of minutes, which float32 cannot resolve to kilometre accuracy.  Importing
this module therefore enables JAX's 64-bit mode (``jax_enable_x64``).
``jnp.float32`` is still accepted for high-throughput batch work where
coarse positions are good enough.  Time arguments stay in float64 whatever
the setting: split Julian dates are Python floats and Greenwich sidereal
time is evaluated in float64, so 64-bit mode remains enabled under float32.

Call ``set_dtype`` **before** any JIT compilation.  Under JIT,
``get_dtype()`` runs during tracing and its result is baked into the
compiled program.

The module also holds the TLE staleness threshold used to warn when a
propagation is requested far from the element set's epoch.  Its default
can be overridden with the ``ORBITPASS_STALE_TLE_DAYS`` environment
variable.
"""

from __future__ import annotations

import os

import jax
import jax.numpy as jnp

_VALID_DTYPES = (jnp.float32, jnp.float64)

_STALE_ENV_VAR = "ORBITPASS_STALE_TLE_DAYS"
_DEFAULT_STALE_TLE_DAYS = 14.0

jax.config.update("jax_enable_x64", True)

_dtype = jnp.float64


def set_dtype(dtype) -> None:
    """Set the module-wide float dtype for orbitpass.

    Must be called **before** any ``jax.jit`` compilation.  In eager mode
    the change takes effect immediately.

    If *dtype* is ``jnp.float64``, JAX's 64-bit mode is (re-)enabled via
    ``jax.config.update("jax_enable_x64", True)``.

    Args:
        dtype: ``jnp.float32`` or ``jnp.float64``.

    Raises:
        ValueError: If *dtype* is not a supported float type.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: jnp.float32, jnp.float64"
        )
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the current module-wide float dtype.

    Returns:
        The active float dtype (default ``jnp.float64``).
    """
    return _dtype


def _stale_days_from_env() -> float:
    raw = os.environ.get(_STALE_ENV_VAR)
    if raw is None:
        return _DEFAULT_STALE_TLE_DAYS
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{_STALE_ENV_VAR} must be a number, got {raw!r}") from None
    if value <= 0.0:
        raise ValueError(f"{_STALE_ENV_VAR} must be positive, got {value}")
    return value


_stale_tle_days = _stale_days_from_env()


def set_stale_tle_days(days: float) -> None:
    """Set the TLE age beyond which propagation logs an accuracy warning.

    SGP4 has no hard validity limit, but its error grows with the time
    elapsed since the element set epoch (roughly 1-3 km/day for LEO
    objects).  Propagations further than *days* from the epoch, in either
    direction, are logged at WARNING level.

    Args:
        days: Threshold in days.  Must be positive.

    Raises:
        ValueError: If *days* is not positive.
    """
    global _stale_tle_days
    if days <= 0.0:
        raise ValueError(f"Stale TLE threshold must be positive, got {days}")
    _stale_tle_days = float(days)


def get_stale_tle_days() -> float:
    """Return the TLE staleness threshold in days (default 14)."""
    return _stale_tle_days
