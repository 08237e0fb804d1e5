"""
Pass detection by threshold crossing over a sampled elevation timeline.

The satellite is sampled at ``start + k * step`` for ``k = 0 ... N`` where
``N = floor(window / step)``.  Samples are propagated in fixed-size batches
by a JIT-compiled, ``vmap``-ed pipeline (SGP4 -> ECEF rotation -> look
angles); the segmentation into passes is a plain Python state machine over
the resulting elevations:

- ``OUTSIDE_PASS`` -> ``INSIDE_PASS`` on the first sample at or above the
  threshold (AOS).  If no sample below the threshold came before it, the
  pass was already in progress at the window start and is ``truncated``.
- While inside, the maximum elevation and its time (TCA) are replaced only
  by a strictly greater elevation.
- ``INSIDE_PASS`` -> ``OUTSIDE_PASS`` on the first sample below the
  threshold (LOS); the pass is emitted at that point.

Samples for which SGP4 fails are gaps: they leave the state untouched.
A pass still open after the last sample is dropped unless
``PassSearchConfig.emit_end_truncated`` is set.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta
from functools import partial

import jax
import numpy as np
from jax import Array
from jax.typing import ArrayLike

from orbitpass._types import LookAngles, Observer
from orbitpass.constants import SECONDS_PER_DAY
from orbitpass.coordinates import look_angles_from_ecef, rotation_ecef_to_enz
from orbitpass.exceptions import ScanCancelledError
from orbitpass.frames import position_eci_to_ecef
from orbitpass.passes._types import Pass, PassSearchConfig, PassState
from orbitpass.sgp4._propagation import sgp4_propagate
from orbitpass.sgp4._propagator import Propagator
from orbitpass.sgp4._state import SGP4State
from orbitpass.sgp4._types import TwoLineElement
from orbitpass.time import datetime_to_jd, ensure_utc, gmst_from_jd

logger = logging.getLogger(__name__)


@partial(jax.jit, static_argnames=("deep_space",))
def _look_angles_batch(
    state: SGP4State,
    observer_ecef: ArrayLike,
    rotation: ArrayLike,
    tsince: ArrayLike,
    jd: ArrayLike,
    fraction: ArrayLike,
    deep_space: bool = False,
) -> tuple[Array, Array, Array, Array]:
    """Azimuth, elevation, range and SGP4 error code for a batch of samples.

    Args:
        state: Initialized satellite state.
        observer_ecef: Observer ECEF position [km].
        rotation: ECEF -> ENZ rotation at the observer.
        tsince: Minutes since the element epoch, shape ``(N,)``.
        jd: Whole-day Julian date shared by the batch.
        fraction: Day fraction of each sample relative to ``jd``, shape
            ``(N,)``.  Values above 1 are allowed.
        deep_space: ``True`` to apply the deep-space (SDP4) terms.

    Returns:
        Arrays ``(azimuth, elevation, range, error)`` of shape ``(N,)``.
        Failed samples carry NaN angles and a non-zero error.
    """

    def sample(t, frac):
        r_eci, _, error = sgp4_propagate(state, t, deep_space)
        r_ecef = position_eci_to_ecef(r_eci, gmst_from_jd(jd, frac))
        look = look_angles_from_ecef(observer_ecef, rotation, r_ecef)
        return look.azimuth, look.elevation, look.range, error

    return jax.vmap(sample)(tsince, fraction)


def _as_propagator(satellite: Propagator | TwoLineElement) -> Propagator:
    if isinstance(satellite, Propagator):
        return satellite
    return Propagator(satellite)


class _SampleGrid:
    """Evaluates the sample timeline of one scan, one batch at a time."""

    def __init__(
        self,
        propagator: Propagator,
        observer: Observer,
        start: datetime,
        config: PassSearchConfig,
    ) -> None:
        self.propagator = propagator
        self.start = ensure_utc(start)
        self.config = config
        self.count = config.sample_count

        self._observer_ecef = observer.to_ecef()
        self._rotation = rotation_ecef_to_enz(observer.latitude, observer.longitude)
        self._jd, self._fraction = datetime_to_jd(self.start)
        self._tsince0 = propagator.minutes_since_epoch(self.start)

    def time_at(self, k: int) -> datetime:
        return self.start + timedelta(seconds=k * self.config.step_seconds)

    @property
    def end_tsince(self) -> float:
        return self._tsince0 + (self.count - 1) * self.config.step_seconds / 60.0

    def batch(self, first: int) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Evaluate samples ``first ... first + batch_size - 1``.

        The final batch is padded by repeating its last sample so every call
        has the same shape and reuses one compiled kernel.  Callers index
        only the samples below :attr:`count`.
        """
        size = self.config.batch_size
        k = np.minimum(np.arange(first, first + size), self.count - 1).astype(np.float64)
        step = self.config.step_seconds
        tsince = self._tsince0 + k * step / 60.0
        fraction = self._fraction + k * step / SECONDS_PER_DAY
        az, el, rng, error = _look_angles_batch(
            self.propagator.state,
            self._observer_ecef,
            self._rotation,
            tsince,
            self._jd,
            fraction,
            deep_space=self.propagator.deep_space,
        )
        return np.asarray(az), np.asarray(el), np.asarray(rng), np.asarray(error)


def _check_window_age(grid: _SampleGrid) -> None:
    # Warn once per scan, at whichever window edge is further from the epoch
    start_tsince = grid.propagator.minutes_since_epoch(grid.start)
    end_tsince = grid.end_tsince
    grid.propagator.check_age(start_tsince if abs(start_tsince) > abs(end_tsince) else end_tsince)


def _cancel_requested(should_stop: Callable[[], bool] | None, deadline: float | None) -> bool:
    if should_stop is not None and should_stop():
        return True
    return deadline is not None and time.monotonic() >= deadline


def iter_passes(
    satellite: Propagator | TwoLineElement,
    observer: Observer,
    start: datetime,
    config: PassSearchConfig | None = None,
    *,
    should_stop: Callable[[], bool] | None = None,
    deadline: float | None = None,
) -> Iterator[Pass]:
    """Yield the passes of a satellite over an observer as they complete.

    Args:
        satellite: Propagator, or a parsed element set to build one from.
        observer: Ground observer.
        start: Window start (naive values are treated as UTC).
        config: Search parameters.  Defaults to :class:`PassSearchConfig`.
        should_stop: Optional callable polled once per sample; returning
            ``True`` cancels the scan.
        deadline: Optional :func:`time.monotonic` value after which the scan
            is cancelled.

    Yields:
        :class:`Pass` records in order of AOS.

    Raises:
        ScanCancelledError: If ``should_stop`` or ``deadline`` stopped the
            scan.  The exception carries the passes already yielded.
    """
    config = config if config is not None else PassSearchConfig()
    propagator = _as_propagator(satellite)
    grid = _SampleGrid(propagator, observer, start, config)
    _check_window_age(grid)

    threshold = config.min_elevation
    batch_size = config.batch_size
    emitted: list[Pass] = []

    state = PassState.OUTSIDE_PASS
    seen_below = False
    skipped = 0
    last_valid: tuple[datetime, float] | None = None

    aos = tca = None
    aos_az = tca_az = 0.0
    max_el = -math.inf
    truncated_start = False

    az = el = err = None
    for k in range(grid.count):
        if _cancel_requested(should_stop, deadline):
            logger.info(
                "Pass search for satellite %s cancelled at %s after %d of %d samples",
                propagator.tle.label,
                grid.time_at(k).isoformat(),
                k,
                grid.count,
            )
            raise ScanCancelledError(emitted)

        i = k % batch_size
        if i == 0:
            az, el, _, err = grid.batch(k)

        elevation = float(el[i])
        if err[i] != 0 or not math.isfinite(elevation):
            skipped += 1
            continue

        when = grid.time_at(k)
        azimuth = float(az[i])
        last_valid = (when, azimuth)

        if state is PassState.OUTSIDE_PASS:
            if elevation < threshold:
                seen_below = True
                continue
            state = PassState.INSIDE_PASS
            truncated_start = not seen_below
            aos, aos_az = when, azimuth
            tca, tca_az, max_el = when, azimuth, elevation
        elif elevation >= threshold:
            if elevation > max_el:
                tca, tca_az, max_el = when, azimuth, elevation
        else:
            state = PassState.OUTSIDE_PASS
            seen_below = True
            if truncated_start and not config.emit_start_truncated:
                continue
            found = Pass(
                aos=aos,
                tca=tca,
                los=when,
                max_elevation=max_el,
                aos_azimuth=aos_az,
                tca_azimuth=tca_az,
                los_azimuth=azimuth,
                truncated=truncated_start,
            )
            emitted.append(found)
            yield found

    if state is PassState.INSIDE_PASS and config.emit_end_truncated and last_valid is not None:
        los, los_az = last_valid
        found = Pass(
            aos=aos,
            tca=tca,
            los=los,
            max_elevation=max_el,
            aos_azimuth=aos_az,
            tca_azimuth=tca_az,
            los_azimuth=los_az,
            truncated=True,
        )
        emitted.append(found)
        yield found

    if skipped:
        logger.warning(
            "Pass search for satellite %s skipped %d of %d samples where propagation failed",
            propagator.tle.label,
            skipped,
            grid.count,
        )
    logger.info(
        "Pass search for satellite %s: %d passes in %d samples (%s to %s, min elevation %.1f deg)",
        propagator.tle.label,
        len(emitted),
        grid.count,
        grid.start.isoformat(),
        grid.time_at(grid.count - 1).isoformat(),
        threshold,
    )


def find_passes(
    satellite: Propagator | TwoLineElement,
    observer: Observer,
    start: datetime,
    config: PassSearchConfig | None = None,
    *,
    should_stop: Callable[[], bool] | None = None,
    deadline: float | None = None,
) -> list[Pass]:
    """Find every pass of a satellite over an observer within a window.

    See :func:`iter_passes` for the arguments and the cancellation
    behaviour.

    Returns:
        Passes ordered by AOS and pairwise non-overlapping.  A window with
        no threshold crossing gives an empty list.

    Raises:
        ScanCancelledError: If the scan was cancelled.

    Examples:
        ```python
        from datetime import datetime, timezone
        from orbitpass import Observer
        from orbitpass.passes import PassSearchConfig, find_passes
        from orbitpass.sgp4 import Propagator

        sat = Propagator.from_lines(line1, line2)
        passes = find_passes(
            sat,
            Observer(51.48, 0.0),
            datetime(2024, 5, 1, tzinfo=timezone.utc),
            PassSearchConfig(min_elevation=15.0, window_hours=48.0),
        )
        for p in passes:
            print(p.aos, p.max_elevation, p.los)
        ```
    """
    return list(
        iter_passes(
            satellite,
            observer,
            start,
            config,
            should_stop=should_stop,
            deadline=deadline,
        )
    )


def elevation_series(
    satellite: Propagator | TwoLineElement,
    observer: Observer,
    start: datetime,
    config: PassSearchConfig | None = None,
) -> tuple[list[datetime], LookAngles]:
    """Sampled look angles over a search window.

    Uses the same sample grid as :func:`find_passes`, so the result can be
    used to check pass boundaries or to plot an elevation profile.

    Args:
        satellite: Propagator, or a parsed element set to build one from.
        observer: Ground observer.
        start: Window start.
        config: Search parameters (only the step and window are used).

    Returns:
        Tuple ``(times, look)`` where ``look`` is a :class:`LookAngles` of
        NumPy arrays aligned with ``times``.  Samples where propagation
        failed are NaN.
    """
    config = config if config is not None else PassSearchConfig()
    grid = _SampleGrid(_as_propagator(satellite), observer, start, config)
    _check_window_age(grid)

    azimuths, elevations, ranges = [], [], []
    for first in range(0, grid.count, config.batch_size):
        az, el, rng, _ = grid.batch(first)
        n = min(config.batch_size, grid.count - first)
        azimuths.append(az[:n])
        elevations.append(el[:n])
        ranges.append(rng[:n])

    times = [grid.time_at(k) for k in range(grid.count)]
    look = LookAngles(
        azimuth=np.concatenate(azimuths),
        elevation=np.concatenate(elevations),
        range=np.concatenate(ranges),
    )
    return times, look
