"""
Summary statistics over lists of predicted passes.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from orbitpass._validation import check_positive
from orbitpass.passes._types import Pass
from orbitpass.time import ensure_utc


def pass_duration_minutes(p: Pass) -> float:
    """Duration of a pass from AOS to LOS [min]."""
    return p.duration.total_seconds() / 60.0


def next_pass(now: datetime, passes: Sequence[Pass]) -> Pass | None:
    """First pass whose AOS is strictly after *now*.

    Args:
        now: Reference instant (naive values are treated as UTC).
        passes: Passes ordered by AOS, as returned by
            :func:`~orbitpass.passes.find_passes`.

    Returns:
        The upcoming pass, or ``None`` if every pass has already started.
    """
    now = ensure_utc(now)
    for p in passes:
        if p.aos > now:
            return p
    return None


def time_to_next_pass(now: datetime, passes: Sequence[Pass]) -> timedelta | None:
    """Time remaining until the next AOS after *now*, or ``None``."""
    upcoming = next_pass(now, passes)
    if upcoming is None:
        return None
    return upcoming.aos - ensure_utc(now)


def visibility_percentage(passes: Sequence[Pass], period_hours: float = 24.0) -> float:
    """Share of a period spent inside passes, in percent.

    Args:
        passes: Passes to total.
        period_hours: Length of the reference period [h].

    Returns:
        ``100 * total pass time / period``, capped at 100.  An empty list
        gives 0.

    Raises:
        InvalidInputError: If ``period_hours`` is not positive.
    """
    check_positive(period_hours, "period_hours")
    if not passes:
        return 0.0
    total_minutes = sum(pass_duration_minutes(p) for p in passes)
    return min(total_minutes / (period_hours * 60.0) * 100.0, 100.0)
