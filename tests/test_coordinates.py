"""Tests for the orbitpass.coordinates module.

Covers the spherical mapping used by the distance path, WGS84 geodetic
conversions and topocentric look angles, including round trips and JAX
compatibility.
"""

import jax
import jax.numpy as jnp
import pytest

from orbitpass import GeodeticPosition, Observer
from orbitpass.constants import R_EARTH_MEAN, WGS84_a, WGS84_f
from orbitpass.coordinates import (
    cartesian_to_geodetic,
    ecef_to_geodetic,
    ecf_to_look_angles,
    enz_to_azel,
    geodetic_to_cartesian,
    geodetic_to_ecef,
    rotation_ecef_to_enz,
    wrap_longitude,
)
from orbitpass.exceptions import InvalidInputError

_DEG_TOL = 1e-6
_KM_TOL = 1e-6


# ──────────────────────────────────────────────
# Spherical mapping
# ──────────────────────────────────────────────


class TestWrapLongitude:
    @pytest.mark.parametrize(
        "lon, expected",
        [(0.0, 0.0), (190.0, -170.0), (-190.0, 170.0), (180.0, 180.0), (-180.0, 180.0), (540.0, 180.0)],
    )
    def test_values(self, lon, expected):
        assert float(wrap_longitude(lon)) == pytest.approx(expected, abs=1e-12)


class TestGeodeticToCartesian:
    def test_north_pole_on_y_axis(self):
        v = geodetic_to_cartesian(90.0, 0.0, R_EARTH_MEAN)
        assert jnp.allclose(v, jnp.array([0.0, R_EARTH_MEAN, 0.0]), atol=1e-9)

    def test_prime_meridian_equator(self):
        """lat=0, lon=0 -> theta=180 deg -> x = +r."""
        v = geodetic_to_cartesian(0.0, 0.0, R_EARTH_MEAN)
        assert jnp.allclose(v, jnp.array([R_EARTH_MEAN, 0.0, 0.0]), atol=1e-9)

    def test_lon_90_east(self):
        """lon=90 -> theta=270 deg -> z = -r."""
        v = geodetic_to_cartesian(0.0, 90.0, 100.0)
        assert jnp.allclose(v, jnp.array([0.0, 0.0, -100.0]), atol=1e-9)

    def test_norm_is_radius(self):
        v = geodetic_to_cartesian(37.4, -122.1, 6771.0)
        assert float(jnp.linalg.norm(v)) == pytest.approx(6771.0, abs=1e-9)

    @pytest.mark.parametrize("lat", [90.5, -91.0, float("nan")])
    def test_invalid_latitude(self, lat):
        with pytest.raises(InvalidInputError, match="latitude"):
            geodetic_to_cartesian(lat, 0.0, R_EARTH_MEAN)

    @pytest.mark.parametrize("radius", [0.0, -10.0])
    def test_invalid_radius(self, radius):
        with pytest.raises(InvalidInputError, match="radius"):
            geodetic_to_cartesian(0.0, 0.0, radius)

    def test_vectorised(self):
        lats = jnp.array([0.0, 45.0, -60.0])
        lons = jnp.array([10.0, -120.0, 170.0])
        v = geodetic_to_cartesian(lats, lons, R_EARTH_MEAN)
        assert v.shape == (3, 3)


class TestSphericalRoundTrip:
    @pytest.mark.parametrize(
        "lat, lon",
        [
            (0.0, 0.0),
            (51.4769, -0.0005),
            (-33.8688, 151.2093),
            (89.5, 45.0),
            (-89.5, -135.0),
            (12.0, 179.999),
            (-5.0, 180.0),
        ],
    )
    def test_roundtrip(self, lat, lon):
        r = R_EARTH_MEAN + 420.0
        lat2, lon2, r2 = cartesian_to_geodetic(geodetic_to_cartesian(lat, lon, r))
        assert float(lat2) == pytest.approx(lat, abs=_DEG_TOL)
        assert float(wrap_longitude(lon2 - lon)) == pytest.approx(0.0, abs=_DEG_TOL)
        assert float(r2) == pytest.approx(r, abs=_KM_TOL)

    def test_longitude_range(self):
        lats = jnp.zeros(7)
        lons = jnp.array([-179.0, -90.0, 0.0, 45.0, 90.0, 179.0, 180.0])
        out = cartesian_to_geodetic(geodetic_to_cartesian(lats, lons, R_EARTH_MEAN))
        assert bool(jnp.all(out[:, 1] > -180.0))
        assert bool(jnp.all(out[:, 1] <= 180.0))

    def test_geodetic_position_wrappers(self):
        pos = GeodeticPosition(48.8566, 2.3522, 408.0)
        back = GeodeticPosition.from_cartesian(pos.to_cartesian())
        assert back.latitude == pytest.approx(pos.latitude, abs=_DEG_TOL)
        assert back.longitude == pytest.approx(pos.longitude, abs=_DEG_TOL)
        assert back.altitude == pytest.approx(pos.altitude, abs=_KM_TOL)

    def test_jit_compatible(self):
        """Validation is skipped for tracers, so the mapping traces cleanly."""
        f = jax.jit(lambda lat, lon, r: cartesian_to_geodetic(geodetic_to_cartesian(lat, lon, r)))
        out = f(30.0, 60.0, 7000.0)
        assert float(out[0]) == pytest.approx(30.0, abs=_DEG_TOL)
        assert float(out[1]) == pytest.approx(60.0, abs=_DEG_TOL)


# ──────────────────────────────────────────────
# WGS84 geodetic
# ──────────────────────────────────────────────


class TestGeodeticToECEF:
    def test_equator_prime_meridian(self):
        r = geodetic_to_ecef(0.0, 0.0, 0.0)
        assert jnp.allclose(r, jnp.array([WGS84_a, 0.0, 0.0]), atol=_KM_TOL)

    def test_north_pole(self):
        polar_radius = WGS84_a * (1.0 - WGS84_f)
        r = geodetic_to_ecef(90.0, 0.0, 0.0)
        assert jnp.allclose(r, jnp.array([0.0, 0.0, polar_radius]), atol=_KM_TOL)

    def test_altitude_adds_along_normal(self):
        r = geodetic_to_ecef(0.0, 90.0, 1.0)
        assert jnp.allclose(r, jnp.array([0.0, WGS84_a + 1.0, 0.0]), atol=_KM_TOL)


class TestGeodeticRoundTrip:
    @pytest.mark.parametrize(
        "lat, lon, alt",
        [
            (0.0, 0.0, 0.0),
            (45.0, 45.0, 0.5),
            (-33.9, 18.4, 0.0),
            (60.0, -150.0, 420.0),
            (-80.0, 120.0, 35786.0),
            (89.0, 10.0, 2.0),
        ],
    )
    def test_roundtrip(self, lat, lon, alt):
        out = ecef_to_geodetic(geodetic_to_ecef(lat, lon, alt))
        assert float(out[0]) == pytest.approx(lat, abs=_DEG_TOL)
        assert float(out[1]) == pytest.approx(lon, abs=_DEG_TOL)
        assert float(out[2]) == pytest.approx(alt, abs=_KM_TOL)

    def test_vmap(self):
        lats = jnp.array([10.0, 20.0, 30.0])
        lons = jnp.array([-10.0, 0.0, 10.0])
        r = jax.vmap(lambda la, lo: geodetic_to_ecef(la, lo, 1.0))(lats, lons)
        out = jax.vmap(ecef_to_geodetic)(r)
        assert jnp.allclose(out[:, 0], lats, atol=_DEG_TOL)
        assert jnp.allclose(out[:, 1], lons, atol=_DEG_TOL)
        assert jnp.allclose(out[:, 2], 1.0, atol=_KM_TOL)


# ──────────────────────────────────────────────
# Topocentric
# ──────────────────────────────────────────────


class TestRotationECEFToENZ:
    def test_orthonormal(self):
        rot = rotation_ecef_to_enz(37.0, -122.0)
        assert jnp.allclose(rot @ rot.T, jnp.eye(3), atol=1e-12)

    def test_equator_prime_meridian(self):
        rot = rotation_ecef_to_enz(0.0, 0.0)
        expected = jnp.array([[0.0, 1.0, 0.0], [0.0, 0.0, 1.0], [1.0, 0.0, 0.0]])
        assert jnp.allclose(rot, expected, atol=1e-12)


class TestENZToAzEl:
    @pytest.mark.parametrize(
        "enz, az, el",
        [
            ([0.0, 100.0, 0.0], 0.0, 0.0),
            ([100.0, 0.0, 0.0], 90.0, 0.0),
            ([0.0, -100.0, 0.0], 180.0, 0.0),
            ([-100.0, 0.0, 0.0], 270.0, 0.0),
            ([100.0, 100.0, 0.0], 45.0, 0.0),
            ([0.0, 100.0, 100.0], 0.0, 45.0),
        ],
    )
    def test_cardinal_directions(self, enz, az, el):
        out = enz_to_azel(jnp.array(enz))
        assert float(out[0]) == pytest.approx(az, abs=1e-9)
        assert float(out[1]) == pytest.approx(el, abs=1e-9)

    def test_zenith_azimuth_is_zero(self):
        out = enz_to_azel(jnp.array([0.0, 0.0, 500.0]))
        assert float(out[0]) == 0.0
        assert float(out[1]) == pytest.approx(90.0, abs=1e-12)
        assert float(out[2]) == pytest.approx(500.0, abs=1e-12)

    def test_azimuth_range(self):
        out = enz_to_azel(jnp.array([-1.0, 1e-9, 0.0]))
        assert 0.0 <= float(out[0]) < 360.0


class TestLookAngles:
    def test_overhead(self):
        obs = Observer(0.0, 0.0)
        look = ecf_to_look_angles(obs, geodetic_to_ecef(0.0, 0.0, 500.0))
        assert float(look.elevation) == pytest.approx(90.0, abs=1e-9)
        assert float(look.range) == pytest.approx(500.0, abs=1e-6)

    def test_overhead_with_observer_height(self):
        obs = Observer(45.0, 7.0, 1.5)
        look = ecf_to_look_angles(obs, geodetic_to_ecef(45.0, 7.0, 401.5))
        assert float(look.elevation) == pytest.approx(90.0, abs=1e-6)
        assert float(look.range) == pytest.approx(400.0, abs=1e-6)

    def test_due_east_below_horizon_curvature(self):
        """A surface point 10 degrees east is east of and below the horizon."""
        obs = Observer(0.0, 0.0)
        look = ecf_to_look_angles(obs, geodetic_to_ecef(0.0, 10.0, 0.0))
        assert float(look.azimuth) == pytest.approx(90.0, abs=1e-9)
        assert float(look.elevation) == pytest.approx(-5.0, abs=1e-9)

    def test_north(self):
        obs = Observer(10.0, 20.0)
        look = ecf_to_look_angles(obs, geodetic_to_ecef(15.0, 20.0, 800.0))
        az = float(look.azimuth)
        assert min(az, 360.0 - az) < 1e-9
        assert float(look.elevation) > 0.0
