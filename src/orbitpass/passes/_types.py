"""
Data types for pass prediction.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from orbitpass.exceptions import InvalidInputError


class PassState(enum.Enum):
    """Scan state: whether the satellite is currently above the threshold."""

    OUTSIDE_PASS = "outside"
    INSIDE_PASS = "inside"


@dataclass(frozen=True)
class Pass:
    """One visibility pass of a satellite over an observer.

    Times are sample instants of the scan, so they carry the scan's step
    resolution.  ``los`` is the first sample below the elevation threshold;
    every sample in ``[aos, los)`` is at or above it.

    Attributes:
        aos: Acquisition of signal, first sample at or above the threshold.
        tca: Time of closest approach, the sample of maximum elevation
            (earliest one on ties).
        los: Loss of signal, first sample back below the threshold.
        max_elevation: Elevation at ``tca`` [deg].
        aos_azimuth: Azimuth at ``aos`` [deg].
        tca_azimuth: Azimuth at ``tca`` [deg].
        los_azimuth: Azimuth at ``los`` [deg].
        truncated: ``True`` if the pass was cut by the search window, in
            which case ``aos`` and/or ``los`` are window samples rather than
            threshold crossings.
    """

    aos: datetime
    tca: datetime
    los: datetime
    max_elevation: float
    aos_azimuth: float
    tca_azimuth: float
    los_azimuth: float
    truncated: bool = False

    @property
    def duration(self) -> timedelta:
        """Time from AOS to LOS."""
        return self.los - self.aos


@dataclass(frozen=True)
class PassSearchConfig:
    """Parameters of a pass search.

    Attributes:
        min_elevation: Elevation threshold [deg], within ``[-90, 90]``.
        step_seconds: Sampling interval [s].
        window_hours: Length of the search window [h].
        emit_start_truncated: Emit a pass already in progress at the window
            start, flagged ``truncated`` with ``aos`` at the first sample.
        emit_end_truncated: Emit a pass still open at the window end,
            flagged ``truncated`` with ``los`` at the last valid sample.
        batch_size: Number of samples propagated per vectorized call.

    Raises:
        InvalidInputError: If any parameter is out of range.
    """

    min_elevation: float = 10.0
    step_seconds: float = 30.0
    window_hours: float = 24.0
    emit_start_truncated: bool = True
    emit_end_truncated: bool = False
    batch_size: int = 512

    def __post_init__(self) -> None:
        if not math.isfinite(self.min_elevation) or not -90.0 <= self.min_elevation <= 90.0:
            raise InvalidInputError(
                f"min_elevation must be within [-90, 90] degrees, got {self.min_elevation}"
            )
        if not math.isfinite(self.step_seconds) or self.step_seconds <= 0.0:
            raise InvalidInputError(f"step_seconds must be positive, got {self.step_seconds}")
        if not math.isfinite(self.window_hours) or self.window_hours <= 0.0:
            raise InvalidInputError(f"window_hours must be positive, got {self.window_hours}")
        if self.batch_size < 1:
            raise InvalidInputError(f"batch_size must be at least 1, got {self.batch_size}")

    @property
    def sample_count(self) -> int:
        """Number of samples, including both window ends when aligned."""
        return int(math.floor(self.window_hours * 3600.0 / self.step_seconds)) + 1
