"""Tests for pass detection over the sampled elevation timeline."""

import logging
import time
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from orbitpass import (
    InvalidInputError,
    Observer,
    Propagator,
    ScanCancelledError,
    parse_tle,
)
from orbitpass.passes import (
    Pass,
    PassSearchConfig,
    PassState,
    elevation_series,
    find_passes,
    iter_passes,
)
from orbitpass.passes import _detector

ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"

START = datetime(2008, 9, 20, 12, 0, 0, tzinfo=timezone.utc)
MID_LATITUDE = Observer(latitude=45.0, longitude=0.0)
EQUATOR = Observer(latitude=0.0, longitude=0.0, height=0.0)
NORTH_POLE = Observer(latitude=89.0, longitude=0.0)

HORIZON = PassSearchConfig(min_elevation=0.0, step_seconds=30.0, window_hours=24.0)

_DETECTOR_LOGGER = "orbitpass.passes._detector"


@pytest.fixture(scope="module")
def iss() -> Propagator:
    return Propagator.from_lines(ISS_LINE1, ISS_LINE2, name="ISS (ZARYA)")


@pytest.fixture(scope="module")
def horizon_passes(iss) -> list[Pass]:
    return find_passes(iss, MID_LATITUDE, START, HORIZON)


def _index(when: datetime, start: datetime, step: float) -> int:
    return int(round((when - start).total_seconds() / step))


class TestPassSearchConfig:
    def test_defaults(self):
        config = PassSearchConfig()
        assert config.min_elevation == 10.0
        assert config.step_seconds == 30.0
        assert config.window_hours == 24.0
        assert config.emit_start_truncated is True
        assert config.emit_end_truncated is False

    def test_sample_count_includes_both_ends(self):
        assert PassSearchConfig(step_seconds=30.0, window_hours=1.0).sample_count == 121
        assert PassSearchConfig(step_seconds=7.0, window_hours=0.01).sample_count == 6

    @pytest.mark.parametrize(
        "kwargs, match",
        [
            ({"min_elevation": 91.0}, "min_elevation"),
            ({"min_elevation": -90.5}, "min_elevation"),
            ({"min_elevation": float("nan")}, "min_elevation"),
            ({"step_seconds": 0.0}, "step_seconds"),
            ({"step_seconds": -30.0}, "step_seconds"),
            ({"window_hours": 0.0}, "window_hours"),
            ({"window_hours": float("inf")}, "window_hours"),
            ({"batch_size": 0}, "batch_size"),
        ],
    )
    def test_rejects_invalid(self, kwargs, match):
        with pytest.raises(InvalidInputError, match=match):
            PassSearchConfig(**kwargs)

    def test_is_frozen(self):
        config = PassSearchConfig()
        with pytest.raises(AttributeError):
            config.min_elevation = 5.0


class TestPassRecord:
    def test_duration(self):
        aos = START
        p = Pass(
            aos=aos,
            tca=aos + timedelta(minutes=3),
            los=aos + timedelta(minutes=7),
            max_elevation=42.0,
            aos_azimuth=300.0,
            tca_azimuth=20.0,
            los_azimuth=110.0,
        )
        assert p.duration == timedelta(minutes=7)
        assert p.truncated is False

    def test_states(self):
        assert PassState.OUTSIDE_PASS is not PassState.INSIDE_PASS


class TestFindPasses:
    def test_finds_passes(self, horizon_passes):
        assert len(horizon_passes) >= 2
        assert all(isinstance(p, Pass) for p in horizon_passes)

    def test_ordering(self, horizon_passes):
        for p in horizon_passes:
            assert p.aos <= p.tca < p.los
            assert p.truncated is False
            assert 0.0 <= p.aos_azimuth < 360.0
            assert 0.0 <= p.tca_azimuth < 360.0
            assert 0.0 <= p.los_azimuth < 360.0
        for earlier, later in zip(horizon_passes, horizon_passes[1:]):
            assert earlier.los <= later.aos

    def test_passes_within_window(self, horizon_passes):
        end = START + timedelta(hours=HORIZON.window_hours)
        for p in horizon_passes:
            assert START < p.aos
            assert p.los <= end

    def test_durations_are_plausible(self, horizon_passes):
        for p in horizon_passes:
            assert timedelta(0) < p.duration <= timedelta(minutes=15)
            assert 0.0 <= p.max_elevation <= 90.0

    def test_boundaries_match_elevation_series(self, iss, horizon_passes):
        times, look = elevation_series(iss, MID_LATITUDE, START, HORIZON)
        el = look.elevation
        step = HORIZON.step_seconds
        threshold = HORIZON.min_elevation

        assert len(times) == HORIZON.sample_count
        assert times[0] == START

        for p in horizon_passes:
            k_aos = _index(p.aos, START, step)
            k_tca = _index(p.tca, START, step)
            k_los = _index(p.los, START, step)
            assert times[k_aos] == p.aos
            assert times[k_los] == p.los

            inside = el[k_aos:k_los]
            assert np.all(inside >= threshold)
            assert el[k_los] < threshold
            assert el[k_aos - 1] < threshold

            # TCA is the first sample of maximum elevation
            assert p.max_elevation == pytest.approx(float(inside.max()), abs=1e-9)
            assert k_tca == k_aos + int(np.argmax(inside))

    def test_equator_ten_degrees(self, iss):
        passes = find_passes(iss, EQUATOR, START)
        assert 1 <= len(passes) <= 10
        for p in passes:
            assert p.max_elevation >= 10.0
            assert timedelta(0) < p.duration <= timedelta(minutes=12)

    def test_no_passes_out_of_reach(self, iss):
        assert find_passes(iss, NORTH_POLE, START, HORIZON) == []

    def test_no_passes_above_unreachable_threshold(self, iss):
        config = PassSearchConfig(min_elevation=90.0, window_hours=6.0)
        assert find_passes(iss, MID_LATITUDE, START, config) == []

    def test_accepts_parsed_tle(self, iss, horizon_passes):
        tle = parse_tle(ISS_LINE1, ISS_LINE2)
        passes = find_passes(tle, MID_LATITUDE, START, HORIZON)
        assert [p.aos for p in passes] == [p.aos for p in horizon_passes]

    def test_naive_start_is_utc(self, iss, horizon_passes):
        passes = find_passes(iss, MID_LATITUDE, START.replace(tzinfo=None), HORIZON)
        assert [p.aos for p in passes] == [p.aos for p in horizon_passes]
        assert passes[0].aos.tzinfo is not None

    def test_batch_size_does_not_change_result(self, iss, horizon_passes):
        config = PassSearchConfig(min_elevation=0.0, window_hours=24.0, batch_size=7)
        passes = find_passes(iss, MID_LATITUDE, START, config)
        assert len(passes) == len(horizon_passes)
        for a, b in zip(passes, horizon_passes):
            assert (a.aos, a.tca, a.los) == (b.aos, b.tca, b.los)
            assert a.max_elevation == pytest.approx(b.max_elevation, abs=1e-9)

    def test_finer_step_refines_same_passes(self, iss, horizon_passes):
        config = PassSearchConfig(min_elevation=0.0, step_seconds=10.0, window_hours=24.0)
        fine = find_passes(iss, MID_LATITUDE, START, config)
        assert len(fine) >= len(horizon_passes)
        for coarse in horizon_passes:
            match = [p for p in fine if abs((p.aos - coarse.aos).total_seconds()) <= 30.0]
            assert len(match) == 1
            # The 10 s grid contains every 30 s sample
            assert match[0].max_elevation >= coarse.max_elevation - 1e-6

    def test_logs_summary(self, iss, caplog):
        config = PassSearchConfig(window_hours=2.0)
        with caplog.at_level(logging.INFO, logger=_DETECTOR_LOGGER):
            find_passes(iss, MID_LATITUDE, START, config)
        assert "Pass search for satellite ISS (ZARYA)" in caplog.text
        assert "241 samples" in caplog.text


class TestTruncation:
    def test_start_inside_pass_is_flagged_by_default(self, iss, horizon_passes):
        p = horizon_passes[0]
        config = PassSearchConfig(min_elevation=0.0, window_hours=0.5)
        passes = find_passes(iss, MID_LATITUDE, p.tca, config)

        assert len(passes) == 1
        cut = passes[0]
        assert cut.truncated is True
        assert cut.aos == p.tca
        assert cut.los == p.los

    def test_later_passes_follow_start_cut_pass(self, iss, horizon_passes):
        p = horizon_passes[0]
        config = PassSearchConfig(min_elevation=0.0, window_hours=3.0)
        passes = find_passes(iss, MID_LATITUDE, p.tca, config)

        assert len(passes) >= 2
        assert passes[0].truncated is True
        for found, expected in zip(passes[1:], horizon_passes[1:]):
            assert found.truncated is False
            assert (found.aos, found.los) == (expected.aos, expected.los)

    def test_start_inside_pass_can_be_dropped(self, iss, horizon_passes):
        p = horizon_passes[0]
        config = PassSearchConfig(min_elevation=0.0, window_hours=0.5, emit_start_truncated=False)
        assert find_passes(iss, MID_LATITUDE, p.tca, config) == []

    def test_end_inside_pass_is_dropped_by_default(self, iss, horizon_passes):
        p = horizon_passes[0]
        start = p.aos - timedelta(minutes=10)
        seconds = (p.tca - start).total_seconds()
        config = PassSearchConfig(min_elevation=0.0, window_hours=(seconds + 1.0) / 3600.0)
        assert find_passes(iss, MID_LATITUDE, start, config) == []

    def test_end_inside_pass_is_flagged(self, iss, horizon_passes):
        p = horizon_passes[0]
        start = p.aos - timedelta(minutes=10)
        seconds = (p.tca - start).total_seconds()
        config = PassSearchConfig(
            min_elevation=0.0, window_hours=(seconds + 1.0) / 3600.0, emit_end_truncated=True
        )
        passes = find_passes(iss, MID_LATITUDE, start, config)

        assert len(passes) == 1
        cut = passes[0]
        assert cut.truncated is True
        assert cut.aos == p.aos
        assert cut.los == p.tca

    def test_window_inside_one_pass(self, iss, horizon_passes):
        p = max(horizon_passes, key=lambda candidate: candidate.duration)
        config = PassSearchConfig(
            min_elevation=0.0,
            step_seconds=HORIZON.step_seconds,
            window_hours=HORIZON.step_seconds / 3600.0,
            emit_end_truncated=True,
        )
        passes = find_passes(iss, MID_LATITUDE, p.aos, config)

        # Both edges cut the same pass, which is reported once
        assert len(passes) == 1
        assert passes[0].truncated is True
        assert passes[0].aos == p.aos

        # By default a pass still open at the window end is dropped
        config = PassSearchConfig(
            min_elevation=0.0,
            step_seconds=HORIZON.step_seconds,
            window_hours=HORIZON.step_seconds / 3600.0,
        )
        assert find_passes(iss, MID_LATITUDE, p.aos, config) == []


class TestIterPasses:
    def test_is_lazy(self, iss, horizon_passes):
        gen = iter_passes(iss, MID_LATITUDE, START, HORIZON)
        first = next(gen)
        gen.close()
        assert first == horizon_passes[0]

    def test_yields_same_as_find(self, iss, horizon_passes):
        assert list(iter_passes(iss, MID_LATITUDE, START, HORIZON)) == horizon_passes


class TestCancellation:
    def test_should_stop_after_first_pass(self, iss, horizon_passes, caplog):
        k_stop = _index(horizon_passes[0].los, START, HORIZON.step_seconds) + 1
        calls = []

        def should_stop():
            calls.append(None)
            return len(calls) > k_stop

        with caplog.at_level(logging.INFO, logger=_DETECTOR_LOGGER):
            with pytest.raises(ScanCancelledError) as exc_info:
                find_passes(iss, MID_LATITUDE, START, HORIZON, should_stop=should_stop)

        assert exc_info.value.passes == horizon_passes[:1]
        assert "cancelled" in caplog.text
        assert f"after {k_stop} of" in caplog.text

    def test_expired_deadline(self, iss):
        with pytest.raises(ScanCancelledError) as exc_info:
            find_passes(iss, MID_LATITUDE, START, HORIZON, deadline=time.monotonic() - 1.0)
        assert exc_info.value.passes == []

    def test_generous_deadline_completes(self, iss):
        config = PassSearchConfig(min_elevation=0.0, window_hours=3.0)
        passes = find_passes(iss, MID_LATITUDE, START, config, deadline=time.monotonic() + 3600.0)
        assert isinstance(passes, list)


def _fail_samples(monkeypatch, indices: set[int]) -> None:
    """Make the sample grid report SGP4 error 6 at the given sample indices."""
    original = _detector._SampleGrid.batch

    def batch(grid, first):
        az, el, rng, err = (np.array(values) for values in original(grid, first))
        for k in indices:
            if first <= k < first + grid.config.batch_size:
                el[k - first] = np.nan
                err[k - first] = 6
        return az, el, rng, err

    monkeypatch.setattr(_detector._SampleGrid, "batch", batch)


class TestPropagationGaps:
    def test_gap_inside_pass_does_not_split_it(self, iss, horizon_passes, monkeypatch, caplog):
        p = max(horizon_passes, key=lambda candidate: candidate.duration)
        k_aos = _index(p.aos, START, HORIZON.step_seconds)
        k_los = _index(p.los, START, HORIZON.step_seconds)
        assert k_los - k_aos >= 4
        _fail_samples(monkeypatch, {k_aos + 1, k_los - 1})

        with caplog.at_level(logging.WARNING, logger=_DETECTOR_LOGGER):
            passes = find_passes(iss, MID_LATITUDE, START, HORIZON)

        assert [(q.aos, q.los) for q in passes] == [(q.aos, q.los) for q in horizon_passes]
        assert all(q.truncated is False for q in passes)
        assert f"skipped 2 of {HORIZON.sample_count} samples" in caplog.text

    def test_gap_at_los_moves_it_to_next_valid_sample(self, iss, horizon_passes, monkeypatch):
        p = horizon_passes[0]
        k_los = _index(p.los, START, HORIZON.step_seconds)
        _fail_samples(monkeypatch, {k_los})

        passes = find_passes(iss, MID_LATITUDE, START, HORIZON)

        assert len(passes) == len(horizon_passes)
        assert passes[0].aos == p.aos
        assert passes[0].los == p.los + timedelta(seconds=HORIZON.step_seconds)

    def test_failed_samples_are_skipped(self, caplog):
        sat = Propagator.from_lines(ISS_LINE1, ISS_LINE2)
        sat._state = sat.state._replace(ecco=np.float64(1.2))
        config = PassSearchConfig(min_elevation=0.0, window_hours=1.0)

        with caplog.at_level(logging.WARNING, logger=_DETECTOR_LOGGER):
            passes = find_passes(sat, MID_LATITUDE, START, config)

        assert passes == []
        assert "skipped 121 of 121 samples" in caplog.text

    def test_elevation_series_marks_gaps_with_nan(self):
        sat = Propagator.from_lines(ISS_LINE1, ISS_LINE2)
        sat._state = sat.state._replace(ecco=np.float64(1.2))
        config = PassSearchConfig(window_hours=0.1)
        _, look = elevation_series(sat, MID_LATITUDE, START, config)
        assert np.all(np.isnan(look.elevation))


class TestElevationSeries:
    def test_shapes(self, iss):
        config = PassSearchConfig(step_seconds=60.0, window_hours=1.0, batch_size=16)
        times, look = elevation_series(iss, MID_LATITUDE, START, config)
        assert len(times) == 61
        assert look.azimuth.shape == (61,)
        assert look.elevation.shape == (61,)
        assert look.range.shape == (61,)
        assert times[-1] == START + timedelta(hours=1)

    def test_matches_propagator_look_angles(self, iss):
        config = PassSearchConfig(step_seconds=600.0, window_hours=2.0)
        times, look = elevation_series(iss, MID_LATITUDE, START, config)
        for i in (0, 5, 12):
            expected = iss.look_angles(MID_LATITUDE, times[i])
            assert look.elevation[i] == pytest.approx(float(expected.elevation), abs=1e-6)
            assert look.range[i] == pytest.approx(float(expected.range), abs=1e-5)
