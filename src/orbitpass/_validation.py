"""Input validation helpers shared by the public API.

Checks run only on concrete values.  When a function is traced by
``jax.jit`` or ``jax.vmap`` its arguments are tracers with no values, so
the checks are skipped and validation is left to the eager boundary.
"""

from __future__ import annotations

import math

import jax
import numpy as np

from orbitpass.exceptions import InvalidInputError


def _concrete(value) -> np.ndarray | None:
    try:
        return np.asarray(value, dtype=np.float64)
    except (jax.errors.TracerArrayConversionError, jax.errors.ConcretizationTypeError):
        return None


def check_latitude(latitude, name: str = "latitude") -> None:
    """Raise :class:`InvalidInputError` unless every latitude is in [-90, 90] degrees."""
    values = _concrete(latitude)
    if values is None:
        return
    if not np.all(np.isfinite(values)) or np.any(np.abs(values) > 90.0):
        raise InvalidInputError(f"{name} must be within [-90, 90] degrees, got {latitude}")


def check_longitude(longitude, name: str = "longitude") -> None:
    """Raise :class:`InvalidInputError` unless every longitude is in [-180, 180] degrees."""
    values = _concrete(longitude)
    if values is None:
        return
    if not np.all(np.isfinite(values)) or np.any(np.abs(values) > 180.0):
        raise InvalidInputError(f"{name} must be within [-180, 180] degrees, got {longitude}")


def check_positive(value, name: str) -> None:
    """Raise :class:`InvalidInputError` unless every value is finite and > 0."""
    values = _concrete(value)
    if values is None:
        return
    if not np.all(np.isfinite(values)) or np.any(values <= 0.0):
        raise InvalidInputError(f"{name} must be positive, got {value}")


def check_finite(value: float, name: str) -> None:
    """Raise :class:`InvalidInputError` if a scalar is NaN or infinite."""
    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be finite, got {value}")
