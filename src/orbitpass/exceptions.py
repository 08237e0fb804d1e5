"""Exception hierarchy for orbitpass.

Structural problems with the inputs (:class:`MalformedTLEError`,
:class:`InvalidInputError`) subclass :class:`ValueError` and abort the
request.  :class:`PropagationError` marks a numerical breakdown at a single
instant and is recoverable: a pass scan treats it as a gap in the sampled
timeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from orbitpass.passes import Pass


class OrbitPassError(Exception):
    """Base class for all orbitpass errors."""


class MalformedTLEError(OrbitPassError, ValueError):
    """A TLE line pair failed format, checksum or consistency validation."""


class InvalidInputError(OrbitPassError, ValueError):
    """A public operation received an out-of-range argument."""


# SGP4 error codes, as defined by the reference implementation
PROPAGATION_ERROR_MESSAGES: dict[int, str] = {
    1: "mean eccentricity is outside the range 0 <= e < 1",
    2: "mean motion has fallen to zero or below",
    3: "perturbed eccentricity is outside the range 0 <= e <= 1",
    4: "semi-latus rectum is negative",
    6: "orbit has decayed below the Earth's surface",
}


class PropagationError(OrbitPassError, RuntimeError):
    """SGP4/SDP4 produced no usable state at the requested instant.

    Args:
        code: SGP4 error code (see ``PROPAGATION_ERROR_MESSAGES``).
        tsince: Minutes since the TLE epoch of the failed propagation.
        satnum: Catalog number of the satellite, if known.
    """

    def __init__(self, code: int, tsince: float, satnum: str | None = None) -> None:
        self.code = int(code)
        self.tsince = float(tsince)
        self.satnum = satnum
        reason = PROPAGATION_ERROR_MESSAGES.get(self.code, "unknown error")
        prefix = f"Satellite {satnum}: " if satnum else ""
        super().__init__(
            f"{prefix}SGP4 error {self.code} at {self.tsince:.3f} min from epoch: {reason}"
        )


class ScanCancelledError(OrbitPassError):
    """A pass search was stopped by its deadline or cancellation callback.

    Args:
        passes: Passes completed before the scan stopped.  They remain
            valid; nothing after the stop point was examined.
    """

    def __init__(self, passes: list[Pass]) -> None:
        self.passes = list(passes)
        super().__init__(f"Pass search cancelled after {len(self.passes)} completed passes")
