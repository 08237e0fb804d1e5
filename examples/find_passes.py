# /// script
# requires-python = ">=3.11"
# dependencies = ["typer>=0.9.0", "orbitpass"]
#
# [tool.uv.sources]
# orbitpass = { path = ".." }
# ///
"""Predict visibility passes for every satellite in a TLE file.

Reads a 2-line or 3-line element file (as served by CelesTrak), runs a pass
search for one ground observer over each element set and prints the passes.
Results are held in a short-lived in-memory cache, so repeated observers in
``--repeat`` mode reuse the first search.

Requires orbitpass to be installed (``uv pip install -e .`` from the repo root).

Usage:
    uv run examples/find_passes.py TLE_FILE --lat LAT --lon LON [OPTIONS]

Examples:
    # ISS passes over London for the next 24 hours
    uv run examples/find_passes.py stations.txt --lat 51.48 --lon -0.01

    # Three days, 5 degree mask, including a pass cut by the window end
    uv run examples/find_passes.py stations.txt --lat 51.48 --lon -0.01 \\
        --hours 72 --min-elevation 5 --end-truncated
"""

import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated

import typer

from orbitpass import InvalidInputError, MalformedTLEError, Observer, ScanCancelledError
from orbitpass.cache import TTLCache
from orbitpass.passes import (
    PassSearchConfig,
    find_passes,
    time_to_next_pass,
    visibility_percentage,
)
from orbitpass.sgp4 import Propagator, parse_tle_text
from orbitpass.time import ensure_utc


def _parse_start(value: str | None) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    return ensure_utc(datetime.fromisoformat(value))


def main(
    tle_file: Annotated[Path, typer.Argument(help="File of 2-line or 3-line element sets")],
    lat: Annotated[float, typer.Option(help="Observer latitude in degrees")],
    lon: Annotated[float, typer.Option(help="Observer longitude in degrees")],
    height: Annotated[float, typer.Option(help="Observer height above WGS84 in km")] = 0.0,
    start: Annotated[
        str | None, typer.Option(help="Window start, ISO 8601 (default: now, UTC)")
    ] = None,
    hours: Annotated[float, typer.Option(help="Search window length in hours")] = 24.0,
    step: Annotated[float, typer.Option(help="Sampling step in seconds")] = 30.0,
    min_elevation: Annotated[float, typer.Option(help="Elevation mask in degrees")] = 10.0,
    start_truncated: Annotated[
        bool, typer.Option(help="Report a pass already in progress at the window start")
    ] = True,
    end_truncated: Annotated[
        bool, typer.Option(help="Report a pass still open at the window end")
    ] = False,
    timeout: Annotated[float, typer.Option(help="Per-satellite time limit in seconds")] = 60.0,
    repeat: Annotated[int, typer.Option(help="Run the search this many times")] = 1,
    verbose: Annotated[bool, typer.Option(help="Log at INFO level")] = False,
) -> None:
    """Print the visibility passes of each satellite over one observer."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        observer = Observer(lat, lon, height)
        config = PassSearchConfig(
            min_elevation=min_elevation,
            step_seconds=step,
            window_hours=hours,
            emit_start_truncated=start_truncated,
            emit_end_truncated=end_truncated,
        )
        elements = parse_tle_text(tle_file.read_text())
    except (InvalidInputError, MalformedTLEError) as err:
        print(f"ERROR: {err}")
        sys.exit(1)

    if not elements:
        print(f"ERROR: No element sets found in {tle_file}. Exiting.")
        sys.exit(1)

    window_start = _parse_start(start)
    cache: TTLCache = TTLCache(capacity=len(elements), ttl_seconds=300.0)

    print(f"Observer: {observer.latitude:.4f}, {observer.longitude:.4f}, {observer.height:.3f} km")
    print(f"Window:   {window_start.isoformat()} + {hours:g} h, mask {min_elevation:g} deg")

    for _ in range(repeat):
        for tle in elements:
            sat = Propagator(tle)
            key = (tle.satnum, tle.epoch, observer, window_start, config)
            t0 = time.perf_counter()
            try:
                passes = cache.get_or_load(
                    key,
                    lambda: find_passes(
                        sat,
                        observer,
                        window_start,
                        config,
                        deadline=time.monotonic() + timeout,
                    ),
                )
            except ScanCancelledError as err:
                print(f"\n{tle.label}: timed out, {len(err.passes)} passes found before the stop")
                passes = err.passes

            elapsed = time.perf_counter() - t0
            print(f"\n── {tle.label} ({len(passes)} passes, {elapsed:.2f}s) ──")
            for p in passes:
                flag = " (truncated)" if p.truncated else ""
                print(
                    f"  AOS {p.aos:%Y-%m-%d %H:%M:%S} az {p.aos_azimuth:5.1f}  "
                    f"TCA {p.tca:%H:%M:%S} el {p.max_elevation:4.1f}  "
                    f"LOS {p.los:%H:%M:%S} az {p.los_azimuth:5.1f}{flag}"
                )

            wait = time_to_next_pass(window_start, passes)
            if wait is not None:
                print(f"  Next pass in {wait.total_seconds() / 60.0:.1f} min")
            print(f"  Visible {visibility_percentage(passes, period_hours=hours):.2f}% of the window")


if __name__ == "__main__":
    typer.run(main)
