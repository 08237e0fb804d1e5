"""
SGP4/SDP4 orbit propagator implemented in JAX.

Parses Two-Line Element sets and propagates them with the SGP4 analytical
theory, switching to SDP4's deep-space terms for orbital periods of 225
minutes or more.  The functional core (``sgp4_init`` / ``sgp4_propagate``)
supports JIT compilation and ``vmap`` over time; :class:`Propagator` wraps it
for queries at UTC instants.
"""

from orbitpass.sgp4._constants import WGS72, WGS72OLD, WGS84, EarthGravity, get_gravity_model
from orbitpass.sgp4._deep_space import DeepSpaceTerms
from orbitpass.sgp4._propagation import (
    sgp4_propagate,
    sgp4_propagate_batch,
    sgp4_propagate_jit,
)
from orbitpass.sgp4._propagator import Propagator, propagate
from orbitpass.sgp4._state import SGP4State, sgp4_init
from orbitpass.sgp4._tle import compute_checksum, parse_tle, parse_tle_text, validate_tle_line
from orbitpass.sgp4._types import TwoLineElement

__all__ = [
    # Types
    "TwoLineElement",
    "SGP4State",
    "DeepSpaceTerms",
    "EarthGravity",
    # Constants
    "WGS72OLD",
    "WGS72",
    "WGS84",
    "get_gravity_model",
    # TLE parsing
    "parse_tle",
    "parse_tle_text",
    "compute_checksum",
    "validate_tle_line",
    # Functional core
    "sgp4_init",
    "sgp4_propagate",
    "sgp4_propagate_jit",
    "sgp4_propagate_batch",
    # High-level
    "Propagator",
    "propagate",
]
