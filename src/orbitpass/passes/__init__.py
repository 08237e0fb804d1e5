"""
Visibility pass prediction for a ground observer.

:func:`find_passes` steps a propagator over a time window, converts each
sample into topocentric look angles and segments the elevation timeline into
passes (AOS, TCA, LOS) with a threshold-crossing state machine.  The helpers
in this package summarise the resulting pass lists.
"""

from orbitpass.passes._detector import elevation_series, find_passes, iter_passes
from orbitpass.passes._statistics import (
    next_pass,
    pass_duration_minutes,
    time_to_next_pass,
    visibility_percentage,
)
from orbitpass.passes._types import Pass, PassSearchConfig, PassState

__all__ = [
    # Types
    "Pass",
    "PassSearchConfig",
    "PassState",
    # Search
    "find_passes",
    "iter_passes",
    "elevation_series",
    # Statistics
    "pass_duration_minutes",
    "next_pass",
    "time_to_next_pass",
    "visibility_percentage",
]
